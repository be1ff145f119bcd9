"""General helper utility functions."""

import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional


_ONE_TICK = timedelta(microseconds=1)


def generate_id(prefix: str) -> str:
    """
    Generate a unique identifier such as ``col_3f0c...``.

    Args:
        prefix: Entity prefix (col, req, fld, env, hist)

    Returns:
        Identifier built from the prefix and a random UUID
    """
    return f"{prefix}_{uuid.uuid4().hex}"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def next_timestamp(previous: Optional[datetime] = None) -> datetime:
    """
    Return the current time, forced strictly after ``previous``.

    Clocks with coarse resolution (or a clock that stepped backwards) would
    otherwise produce a stamp equal to or earlier than the last one.

    Args:
        previous: Last stamp written for the same entity

    Returns:
        Aware UTC datetime later than ``previous``
    """
    now = utc_now()
    if previous is None:
        return now
    if previous.tzinfo is None:
        previous = previous.replace(tzinfo=timezone.utc)
    if now <= previous:
        return previous + _ONE_TICK
    return now


def get_dir_size(path: Path) -> int:
    """
    Sum the sizes of all files below a directory.

    Args:
        path: Directory to scan

    Returns:
        Total size in bytes
    """
    total = 0
    for entry in Path(path).rglob('*'):
        if entry.is_file():
            total += entry.stat().st_size
    return total


def format_size(size_bytes: int) -> str:
    """
    Format a byte count to a human-readable string.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.2f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.2f} MB"


def format_duration(milliseconds: float) -> str:
    """
    Format a duration in milliseconds to a human-readable string.

    Args:
        milliseconds: Duration in milliseconds

    Returns:
        Formatted duration string
    """
    seconds = milliseconds / 1000
    if seconds < 1:
        return f"{milliseconds:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"


def truncate_string(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate a string to a maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix


def extract_error_message(exception: BaseException, max_length: int = 200) -> str:
    """
    Extract a clean, single-line error message from an exception.

    Args:
        exception: Exception object
        max_length: Maximum message length

    Returns:
        Clean error message, falling back to the exception class name
    """
    message = ' '.join(str(exception).split())
    if not message:
        message = exception.__class__.__name__
    return truncate_string(message, max_length)
