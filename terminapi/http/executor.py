"""
Request execution.

RequestExecutor turns a stored request template plus variables into an HTTP
exchange: resolve the URL, collect enabled params and headers, apply auth,
encode the body, send through ``httpx`` and normalize the response. Any HTTP
status is a successful exchange; only transport failures raise.
"""

import time
from typing import Any, Dict, List, Mapping, Optional

import httpx

from terminapi.constants import (
    CONNECTION_TEST_TIMEOUT_MS,
    CONTENT_TYPE_HEADER,
    DEFAULT_TIMEOUT_MS,
    SUPPORTED_HTTP_METHODS,
)
from terminapi.core.models import AppConfig, Request, Response
from terminapi.core.variables import resolve
from terminapi.exceptions import ExecutionError
from terminapi.http.auth import apply_auth
from terminapi.http.body import body_applies, encode_body
from terminapi.http.pending import PendingRequest
from terminapi.logger import get_logger
from terminapi.utils.helpers import extract_error_message
from terminapi.utils.validators import validate_proxy_url, validate_request_url

logger = get_logger(__name__)


class RequestExecutor:
    """Builds requests from stored templates and sends them with httpx."""

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        follow_redirects: bool = True,
        verify_ssl: bool = True,
        proxy_url: Optional[str] = None,
    ):
        """
        Initialize the executor.

        Args:
            timeout_ms: Timeout for the whole exchange, in milliseconds
            follow_redirects: Whether redirects are followed
            verify_ssl: Whether TLS certificates are verified
            proxy_url: Optional proxy for all requests
        """
        self.timeout_ms = timeout_ms
        self.follow_redirects = follow_redirects
        self.verify_ssl = verify_ssl
        self.proxy_url = proxy_url

    @classmethod
    def from_config(cls, config: AppConfig) -> "RequestExecutor":
        """
        Create an executor from the persisted user configuration.

        Raises:
            ConfigurationError: If the configured proxy URL is unusable
        """
        proxy_url = validate_proxy_url(config.proxy_url) if config.proxy_url else None
        return cls(
            timeout_ms=config.default_timeout,
            follow_redirects=config.follow_redirects,
            verify_ssl=config.validate_ssl,
            proxy_url=proxy_url,
        )

    @staticmethod
    def supported_methods() -> List[str]:
        return list(SUPPORTED_HTTP_METHODS)

    def build(self, request: Request, variables: Mapping[str, str]) -> PendingRequest:
        """
        Resolve a request template into a pending request.

        Args:
            request: Stored request
            variables: Merged collection and environment variables

        Returns:
            PendingRequest: Method, URL, headers, params and body bytes

        Raises:
            ValidationError: If the URL is empty after resolution
        """
        method = request.method.value
        url = validate_request_url(resolve(request.url, variables))
        pending = PendingRequest(method=method, url=url)

        for param in request.params:
            if param.enabled and param.key.strip():
                pending.params[param.key] = resolve(param.value, variables)

        for header in request.headers:
            if header.enabled and header.key.strip():
                pending.set_header(header.key, resolve(header.value, variables))
        explicit_content_type = pending.has_header(CONTENT_TYPE_HEADER)

        apply_auth(pending, request.auth, variables)

        if request.body is not None and body_applies(method):
            encoded = encode_body(request.body, variables)
            pending.content = encoded.to_content()
            if encoded.content_type_hint and not explicit_content_type:
                pending.set_header(CONTENT_TYPE_HEADER, encoded.content_type_hint)

        return pending

    def _client(self, timeout_ms: int) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_ms / 1000),
            follow_redirects=self.follow_redirects,
            verify=self.verify_ssl,
            proxy=self.proxy_url,
        )

    async def execute(self, request: Request, variables: Optional[Mapping[str, str]] = None) -> Response:
        """
        Send a request and normalize the result.

        Args:
            request: Stored request
            variables: Merged collection and environment variables

        Returns:
            Response: Normalized response, whatever its status code

        Raises:
            ValidationError: If the request cannot be built (empty URL)
            ExecutionError: If no response was received or the request
                could not be sent
        """
        pending = self.build(request, variables or {})
        logger.info(f"Sending {pending.method} {pending.url}", extra={"request_id": request.id})

        start = time.perf_counter()
        try:
            async with self._client(self.timeout_ms) as client:
                response = await client.request(
                    pending.method,
                    pending.url,
                    params=pending.params or None,
                    headers=pending.headers,
                    content=pending.content,
                )
        except httpx.TransportError as e:
            logger.warning(f"No response for {pending.method} {pending.url}: {e!r}")
            raise ExecutionError(f"No response received: {extract_error_message(e)}") from e
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, TypeError) as e:
            logger.warning(f"Could not send {pending.method} {pending.url}: {e!r}")
            raise ExecutionError(f"Request failed: {extract_error_message(e)}") from e
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        result = self._normalize(response, elapsed_ms)
        logger.info(
            f"{pending.method} {pending.url} -> {result.status} in {elapsed_ms}ms",
            extra={"request_id": request.id, "status": result.status, "size": result.size},
        )
        return result

    @staticmethod
    def _normalize(response: httpx.Response, elapsed_ms: int) -> Response:
        return Response(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=flatten_headers(response.headers),
            data=_decode_body(response),
            time=elapsed_ms,
            size=len(response.content),
        )

    async def test_connection(self, url: str, timeout_ms: int = CONNECTION_TEST_TIMEOUT_MS) -> bool:
        """
        Probe a URL with HEAD.

        Returns:
            bool: True if any response arrived, False otherwise
        """
        try:
            async with self._client(timeout_ms) as client:
                await client.head(url)
            return True
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.debug(f"Connection test failed for {url}: {e!r}")
            return False


def _decode_body(response: httpx.Response) -> Any:
    """Parsed JSON if the body is JSON, otherwise the text."""
    if not response.content:
        return ""
    try:
        return response.json()
    except ValueError:
        return response.text


def flatten_headers(headers: httpx.Headers) -> Dict[str, str]:
    """Collapse repeated headers into comma-separated values."""
    return dict(headers.items())
