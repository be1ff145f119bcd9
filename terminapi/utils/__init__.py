"""Utility functions for Termin API."""

from .validators import (
    validate_request_url,
    validate_proxy_url
)

from .helpers import (
    generate_id,
    utc_now,
    next_timestamp,
    get_dir_size,
    format_size,
    format_duration,
    truncate_string,
    extract_error_message
)

__all__ = [
    # Validators
    "validate_request_url",
    "validate_proxy_url",
    # Helpers
    "generate_id",
    "utc_now",
    "next_timestamp",
    "get_dir_size",
    "format_size",
    "format_duration",
    "truncate_string",
    "extract_error_message"
]
