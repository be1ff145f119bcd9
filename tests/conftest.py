"""Shared fixtures for the Termin API test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from terminapi.core.models import Collection, Environment, Folder, Header, Param, Request
from terminapi.storage.store import CollectionStore


@pytest.fixture
def store(tmp_path: Path) -> CollectionStore:
    """Provide a store rooted in a fresh temporary directory."""
    return CollectionStore(tmp_path / "data")


@pytest.fixture
def ping_request() -> Request:
    """A GET request with one enabled and one disabled param/header."""
    return Request(
        id="req_ping",
        name="Ping",
        method="GET",
        url="{{base}}/ping",
        params=[
            Param(key="q", value="{{term}}"),
            Param(key="page", value="1", enabled=False),
        ],
        headers=[
            Header(key="X-Trace", value="trace-{{term}}"),
            Header(key="X-Skip", value="nope", enabled=False),
        ],
    )


@pytest.fixture
def sample_collection(ping_request: Request) -> Collection:
    """A collection with one foldered request and one root-level request."""
    health = Request(id="req_health", name="Health", url="{{base}}/health")
    return Collection(
        id="col_sample",
        name="Sample API",
        variables={"base": "http://api.test", "term": "cats"},
        requests=[ping_request, health],
        folders=[Folder(id="fld_main", name="Main", requests=["req_ping"])],
    )


@pytest.fixture
def staging_environment() -> Environment:
    return Environment(id="env_staging", name="staging", variables={"base": "http://staging.test"})
