"""
Termin API - terminal API client.

This package builds HTTP and GraphQL requests from stored templates, resolves
``{{variable}}`` placeholders, applies authentication, executes the request and
keeps collections, environments and history on disk.
"""

from terminapi._version import __version__, __version_info__
from terminapi.config import settings
from terminapi.logger import logger

__all__ = [
    "settings",
    "logger",
    "__version__",
    "__version_info__",
]
