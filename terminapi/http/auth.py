"""
Authentication for outgoing requests.

Each auth variant has exactly one handler. Handlers resolve credential
placeholders and write the result into the pending request's headers or
query parameters; missing credentials become empty strings rather than errors.
"""

import base64
from typing import Any, Callable, Dict, Mapping, Optional

from terminapi.core.models import (
    AUTH_VARIANTS,
    ApiKeyAuth,
    BasicAuth,
    BearerAuth,
    JwtAuth,
    OAuth2Auth,
)
from terminapi.core.variables import resolve
from terminapi.http.pending import PendingRequest
from terminapi.logger import get_logger

logger = get_logger(__name__)

AUTHORIZATION_HEADER = "Authorization"

AuthHandler = Callable[[PendingRequest, Any, Mapping[str, str]], None]
_HANDLERS: Dict[type, AuthHandler] = {}


def _handles(variant: type) -> Callable[[AuthHandler], AuthHandler]:
    def register(handler: AuthHandler) -> AuthHandler:
        _HANDLERS[variant] = handler
        return handler
    return register


@_handles(BearerAuth)
def _apply_bearer(pending: PendingRequest, auth: BearerAuth, variables: Mapping[str, str]) -> None:
    token = resolve(auth.bearer.token, variables)
    pending.set_header(AUTHORIZATION_HEADER, f"Bearer {token}")


@_handles(BasicAuth)
def _apply_basic(pending: PendingRequest, auth: BasicAuth, variables: Mapping[str, str]) -> None:
    username = resolve(auth.basic.username, variables)
    password = resolve(auth.basic.password, variables)
    encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    pending.set_header(AUTHORIZATION_HEADER, f"Basic {encoded}")


@_handles(ApiKeyAuth)
def _apply_api_key(pending: PendingRequest, auth: ApiKeyAuth, variables: Mapping[str, str]) -> None:
    key = auth.api_key.key
    value = resolve(auth.api_key.value, variables)
    if auth.api_key.add_to == "query":
        pending.set_param(key, value)
    else:
        pending.set_header(key, value)


@_handles(JwtAuth)
def _apply_jwt(pending: PendingRequest, auth: JwtAuth, variables: Mapping[str, str]) -> None:
    # algorithm is informational; the token is sent as-is
    token = resolve(auth.jwt.token, variables)
    pending.set_header(AUTHORIZATION_HEADER, f"Bearer {token}")


@_handles(OAuth2Auth)
def _apply_oauth2(pending: PendingRequest, auth: OAuth2Auth, variables: Mapping[str, str]) -> None:
    logger.debug(
        "OAuth2 auth configured but token acquisition is not supported; sending without credentials",
        extra={"grant_type": auth.oauth2.grant_type},
    )


_unhandled = [variant.__name__ for variant in AUTH_VARIANTS if variant not in _HANDLERS]
if _unhandled:
    raise RuntimeError(f"Auth variants without a handler: {', '.join(_unhandled)}")


def apply_auth(pending: PendingRequest, auth: Optional[Any], variables: Mapping[str, str]) -> None:
    """
    Apply an auth variant to a pending request in place.

    Args:
        pending: Request being built
        auth: Auth variant, or None for no authentication
        variables: Variables used to resolve credential placeholders
    """
    if auth is None:
        return
    handler = _HANDLERS.get(type(auth))
    if handler is None:
        raise TypeError(f"Unsupported auth variant: {type(auth).__name__}")
    handler(pending, auth, variables)
