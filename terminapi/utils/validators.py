"""Validation utility functions."""

from urllib.parse import urlparse

from terminapi.constants import PROXY_SCHEMES
from terminapi.exceptions import ConfigurationError, ValidationError


def validate_request_url(url: str) -> str:
    """
    Check that a resolved request URL can be dispatched.

    Only emptiness is rejected here; malformed URLs are left to the transport
    so that its error message reaches the user.

    Args:
        url: URL after variable resolution

    Returns:
        The URL stripped of surrounding whitespace

    Raises:
        ValidationError: If the URL is empty
    """
    url = (url or "").strip()
    if not url:
        raise ValidationError("Request URL is empty")
    return url


def validate_proxy_url(proxy_url: str) -> str:
    """
    Validate a configured proxy URL.

    Args:
        proxy_url: Proxy URL from the user configuration

    Returns:
        The proxy URL, raises ConfigurationError otherwise
    """
    parsed = urlparse(proxy_url)
    if parsed.scheme not in PROXY_SCHEMES or not parsed.netloc:
        raise ConfigurationError(
            f"Invalid proxy URL: {proxy_url}. "
            f"Supported schemes: {', '.join(PROXY_SCHEMES)}"
        )
    return proxy_url
