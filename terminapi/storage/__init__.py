"""File-backed persistence for collections, environments, config and history."""

from .store import CollectionStore

__all__ = ["CollectionStore"]
