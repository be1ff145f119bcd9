"""Data model and template resolution."""

from .models import (
    AppConfig,
    Auth,
    Collection,
    Environment,
    Folder,
    Header,
    HistoryEntry,
    HttpMethod,
    Param,
    Request,
    RequestBody,
    Response,
)
from .variables import find_placeholders, merge_variables, resolve, resolve_and_parse_json

__all__ = [
    "AppConfig",
    "Auth",
    "Collection",
    "Environment",
    "Folder",
    "Header",
    "HistoryEntry",
    "HttpMethod",
    "Param",
    "Request",
    "RequestBody",
    "Response",
    "find_placeholders",
    "merge_variables",
    "resolve",
    "resolve_and_parse_json",
]
