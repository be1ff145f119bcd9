"""Tests for applying auth variants to pending requests."""

from __future__ import annotations

import pytest

from terminapi.core.models import (
    ApiKeyAuth,
    ApiKeyCredentials,
    BasicAuth,
    BasicCredentials,
    BearerAuth,
    BearerCredentials,
    JwtAuth,
    JwtCredentials,
    OAuth2Auth,
)
from terminapi.http.auth import apply_auth
from terminapi.http.pending import PendingRequest


@pytest.fixture
def pending() -> PendingRequest:
    return PendingRequest(method="GET", url="http://api.test")


def test_no_auth_is_a_noop(pending: PendingRequest) -> None:
    apply_auth(pending, None, {})
    assert pending.headers == {}
    assert pending.params == {}


def test_bearer_resolves_token(pending: PendingRequest) -> None:
    auth = BearerAuth(bearer=BearerCredentials(token="{{tok}}"))
    apply_auth(pending, auth, {"tok": "abc"})
    assert pending.headers == {"Authorization": "Bearer abc"}


def test_basic_encodes_credentials(pending: PendingRequest) -> None:
    auth = BasicAuth(basic=BasicCredentials(username="admin", password="secret"))
    apply_auth(pending, auth, {})
    assert pending.headers["Authorization"] == "Basic YWRtaW46c2VjcmV0"


def test_basic_with_missing_fields_uses_empty_strings(pending: PendingRequest) -> None:
    apply_auth(pending, BasicAuth(), {})
    assert pending.headers["Authorization"] == "Basic Og=="


def test_api_key_in_query_leaves_headers_untouched(pending: PendingRequest) -> None:
    auth = ApiKeyAuth(api_key=ApiKeyCredentials(key="api_key", value="{{key}}", add_to="query"))
    apply_auth(pending, auth, {"key": "k-123"})
    assert pending.params == {"api_key": "k-123"}
    assert pending.headers == {}


def test_api_key_in_header_leaves_query_untouched(pending: PendingRequest) -> None:
    auth = ApiKeyAuth(api_key=ApiKeyCredentials(key="X-API-Key", value="k-123", add_to="header"))
    apply_auth(pending, auth, {})
    assert pending.headers == {"X-API-Key": "k-123"}
    assert pending.params == {}


def test_jwt_is_sent_as_bearer(pending: PendingRequest) -> None:
    auth = JwtAuth(jwt=JwtCredentials(token="{{jwt}}", algorithm="RS256"))
    apply_auth(pending, auth, {"jwt": "eyJ.x.y"})
    assert pending.headers == {"Authorization": "Bearer eyJ.x.y"}


def test_oauth2_does_not_modify_request(pending: PendingRequest) -> None:
    pending.headers["Accept"] = "application/json"
    apply_auth(pending, OAuth2Auth(), {})
    assert pending.headers == {"Accept": "application/json"}
    assert pending.params == {}


def test_auth_replaces_existing_authorization_header_case_insensitively(pending: PendingRequest) -> None:
    pending.headers["authorization"] = "stale"
    apply_auth(pending, BearerAuth(bearer=BearerCredentials(token="fresh")), {})
    assert pending.headers == {"Authorization": "Bearer fresh"}


def test_unknown_variant_is_rejected(pending: PendingRequest) -> None:
    with pytest.raises(TypeError):
        apply_auth(pending, object(), {})
