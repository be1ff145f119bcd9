"""Tests for document parsing and the collection tree operations."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from terminapi.core.models import (
    ApiKeyAuth,
    AppConfig,
    BearerAuth,
    BearerCredentials,
    Collection,
    Environment,
    Folder,
    FormDataBody,
    HttpMethod,
    JsonBody,
    Request,
    UrlEncodedBody,
)
from terminapi.exceptions import ValidationError


class TestRequestDocuments:
    def test_parses_camel_case_document(self) -> None:
        request = Request.model_validate(
            {
                "id": "req_1",
                "name": "Create",
                "method": "post",
                "url": "{{base}}/items",
                "params": [{"key": "dry", "value": "1", "enabled": False}],
                "headers": [],
                "auth": {"type": "apikey", "apiKey": {"key": "X-Key", "value": "v", "addTo": "query"}},
                "body": {"type": "json", "json": {"a": 1}},
                "createdAt": "2024-01-01T00:00:00.000Z",
                "updatedAt": "2024-01-02T00:00:00.000Z",
            }
        )

        assert request.method is HttpMethod.POST
        assert isinstance(request.auth, ApiKeyAuth)
        assert request.auth.api_key.add_to == "query"
        assert isinstance(request.body, JsonBody)
        assert request.body.value == {"a": 1}
        assert request.params[0].enabled is False

    @pytest.mark.parametrize("value", [None, {"type": "none"}])
    def test_absent_auth_and_body(self, value) -> None:
        request = Request.model_validate({"url": "http://x", "auth": value, "body": value})
        assert request.auth is None
        assert request.body is None

    def test_form_urlencoded_tag_synonym(self) -> None:
        request = Request.model_validate(
            {"body": {"type": "form-urlencoded", "formData": [{"key": "a", "value": "1"}]}}
        )
        assert isinstance(request.body, UrlEncodedBody)
        assert request.body.form_data[0].key == "a"

    def test_form_data_file_rows(self) -> None:
        request = Request.model_validate(
            {"body": {"type": "form-data", "formData": [{"key": "f", "value": "/tmp/x", "type": "file"}]}}
        )
        assert isinstance(request.body, FormDataBody)
        assert request.body.form_data[0].type == "file"

    def test_document_uses_camel_case_keys(self) -> None:
        request = Request(name="R", url="http://x", auth=BearerAuth(bearer=BearerCredentials(token="t")), body=JsonBody(value={"a": 1}))
        document = request.to_document()

        assert {"createdAt", "updatedAt", "method", "params", "headers"} <= set(document)
        assert document["method"] == "GET"
        assert document["auth"] == {"type": "bearer", "bearer": {"token": "t"}}
        assert document["body"] == {"type": "json", "json": {"a": 1}}

    def test_unsupported_method_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            Request.model_validate({"method": "TRACE"})

    def test_updated_at_never_precedes_created_at(self) -> None:
        request = Request(
            created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
            updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        assert request.updated_at == request.created_at

    def test_naive_timestamps_are_treated_as_utc(self) -> None:
        request = Request(created_at=datetime(2024, 1, 1), updated_at=datetime(2024, 1, 1))
        assert request.created_at.tzinfo is not None

    def test_touch_moves_updated_at_forward(self) -> None:
        request = Request()
        before = request.updated_at
        request.touch()
        request_after_first = request.updated_at
        request.touch()
        assert before < request_after_first < request.updated_at


class TestCollectionTree:
    def test_request_index_points_at_owned_requests(self, sample_collection: Collection) -> None:
        index = sample_collection.request_index
        assert index["req_ping"] is sample_collection.requests[0]

    def test_root_requests_are_unreferenced(self, sample_collection: Collection) -> None:
        assert [r.id for r in sample_collection.root_requests()] == ["req_health"]

    def test_upsert_replaces_by_id(self, sample_collection: Collection) -> None:
        replacement = Request(id="req_ping", name="Ping v2", url="http://x")
        sample_collection.upsert_request(replacement)

        assert len(sample_collection.requests) == 2
        assert sample_collection.get_request("req_ping").name == "Ping v2"

    def test_upsert_appends_new_request(self, sample_collection: Collection) -> None:
        sample_collection.upsert_request(Request(id="req_new"))
        assert [r.id for r in sample_collection.requests][-1] == "req_new"

    def test_remove_request_drops_folder_references(self, sample_collection: Collection) -> None:
        assert sample_collection.remove_request("req_ping")
        assert sample_collection.folders[0].requests == []
        assert not sample_collection.remove_request("req_ping")

    def test_remove_folder_keeps_requests(self, sample_collection: Collection) -> None:
        assert sample_collection.remove_folder("fld_main")

        assert sample_collection.folders == []
        assert {r.id for r in sample_collection.requests} == {"req_ping", "req_health"}
        assert {r.id for r in sample_collection.root_requests()} == {"req_ping", "req_health"}

    def test_nested_folders(self, sample_collection: Collection) -> None:
        sample_collection.add_folder(Folder(id="fld_sub", name="Sub", requests=["req_health"]), parent_id="fld_main")

        assert [f.id for f in sample_collection.iter_folders()] == ["fld_main", "fld_sub"]
        assert sample_collection.root_requests() == []
        assert sample_collection.remove_folder("fld_sub")
        assert sample_collection.find_folder("fld_sub") is None

    def test_add_folder_rejects_unknown_requests(self, sample_collection: Collection) -> None:
        with pytest.raises(ValidationError):
            sample_collection.add_folder(Folder(name="Bad", requests=["req_ghost"]))

    def test_add_folder_rejects_unknown_parent(self, sample_collection: Collection) -> None:
        with pytest.raises(ValidationError):
            sample_collection.add_folder(Folder(name="Orphan"), parent_id="fld_ghost")

    def test_assign_to_folder(self, sample_collection: Collection) -> None:
        sample_collection.assign_to_folder("req_health", "fld_main")
        sample_collection.assign_to_folder("req_health", "fld_main")
        assert sample_collection.folders[0].requests == ["req_ping", "req_health"]

        with pytest.raises(ValidationError):
            sample_collection.assign_to_folder("req_ghost", "fld_main")
        with pytest.raises(ValidationError):
            sample_collection.assign_to_folder("req_health", "fld_ghost")

    def test_dangling_references(self) -> None:
        collection = Collection.model_validate(
            {"name": "c", "requests": [], "folders": [{"id": "fld_1", "name": "f", "requests": ["req_gone"]}]}
        )
        assert collection.dangling_references() == [("fld_1", "req_gone")]

    def test_inherited_auth(self, sample_collection: Collection) -> None:
        sample_collection.auth = BearerAuth(bearer=BearerCredentials(token="col"))
        request = sample_collection.get_request("req_ping")

        inherited = sample_collection.with_inherited_auth(request)

        assert isinstance(inherited.auth, BearerAuth)
        assert request.auth is None

        own = Request(auth=BearerAuth(bearer=BearerCredentials(token="mine")))
        assert sample_collection.with_inherited_auth(own) is own

    def test_numeric_variables_are_coerced(self) -> None:
        collection = Collection.model_validate({"name": "c", "variables": {"port": 8080}})
        assert collection.variables == {"port": "8080"}

    def test_boolean_and_structured_variables_are_rendered(self) -> None:
        environment = Environment.model_validate(
            {"name": "e", "variables": {"flag": False, "ids": [1, 2], "base": "http://h"}}
        )
        assert environment.variables == {"flag": "false", "ids": "[1, 2]", "base": "http://h"}


def test_app_config_document_keys() -> None:
    document = AppConfig().to_document()
    assert document == {
        "theme": "dark",
        "defaultTimeout": 30000,
        "followRedirects": True,
        "validateSSL": True,
        "maxHistorySize": 100,
    }
