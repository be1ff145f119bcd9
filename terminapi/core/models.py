"""
Data models for requests, collections, environments and history.

Documents are stored with camelCase keys (``createdAt``, ``apiKey``,
``formData``) and read back with either camelCase or snake_case names.
Authentication and request bodies are closed tagged unions keyed on ``type``.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from terminapi.constants import (
    COLLECTION_ID_PREFIX,
    DEFAULT_MAX_HISTORY_SIZE,
    DEFAULT_TIMEOUT_MS,
    ENVIRONMENT_ID_PREFIX,
    FOLDER_ID_PREFIX,
    HISTORY_ID_PREFIX,
    REQUEST_ID_PREFIX,
)
from terminapi.exceptions import ValidationError
from terminapi.utils.helpers import generate_id, next_timestamp, utc_now


class CamelModel(BaseModel):
    """Base model using camelCase aliases on disk."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the JSON-ready dict written to storage."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class HttpMethod(str, Enum):
    """Supported HTTP methods."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _drop_absent_variant(value: Any) -> Any:
    """Map ``{"type": "none"}`` (or a dict without a tag) to ``None``."""
    if isinstance(value, dict) and value.get("type") in (None, "", "none"):
        return None
    return value


def _stringify_variables(value: Any) -> Any:
    """Render scalar variable values (``true``, ``null``, numbers) as text."""
    if not isinstance(value, dict):
        return value
    rendered = {}
    for name, item in value.items():
        if item is None:
            rendered[name] = ""
        elif isinstance(item, bool):
            rendered[name] = "true" if item else "false"
        elif isinstance(item, (dict, list)):
            rendered[name] = json.dumps(item)
        else:
            rendered[name] = str(item)
    return rendered


# ---------------------------------------------------------------------------
# Request parts
# ---------------------------------------------------------------------------

class Param(CamelModel):
    """Query parameter row."""

    key: str = ""
    value: str = ""
    enabled: bool = True
    description: Optional[str] = None


class Header(CamelModel):
    """Header row."""

    key: str = ""
    value: str = ""
    enabled: bool = True


# ---------------------------------------------------------------------------
# Authentication variants
# ---------------------------------------------------------------------------

class BearerCredentials(CamelModel):
    token: str = ""


class BasicCredentials(CamelModel):
    username: str = ""
    password: str = ""


class ApiKeyCredentials(CamelModel):
    key: str = ""
    value: str = ""
    add_to: Literal["header", "query"] = "header"


class OAuth2Credentials(CamelModel):
    grant_type: Literal["client_credentials", "authorization_code", "password"] = "client_credentials"
    client_id: str = ""
    client_secret: str = ""
    access_token_url: str = ""
    scope: Optional[str] = None


class JwtCredentials(CamelModel):
    token: str = ""
    algorithm: str = "HS256"


class BearerAuth(CamelModel):
    type: Literal["bearer"] = "bearer"
    bearer: BearerCredentials = Field(default_factory=BearerCredentials)


class BasicAuth(CamelModel):
    type: Literal["basic"] = "basic"
    basic: BasicCredentials = Field(default_factory=BasicCredentials)


class ApiKeyAuth(CamelModel):
    type: Literal["apikey"] = "apikey"
    api_key: ApiKeyCredentials = Field(default_factory=ApiKeyCredentials)


class OAuth2Auth(CamelModel):
    """OAuth2 settings. Stored only; no token is fetched when sending."""

    type: Literal["oauth2"] = "oauth2"
    oauth2: OAuth2Credentials = Field(default_factory=OAuth2Credentials)


class JwtAuth(CamelModel):
    type: Literal["jwt"] = "jwt"
    jwt: JwtCredentials = Field(default_factory=JwtCredentials)


Auth = Annotated[
    Union[BearerAuth, BasicAuth, ApiKeyAuth, OAuth2Auth, JwtAuth],
    Field(discriminator="type"),
]
AUTH_VARIANTS = (BearerAuth, BasicAuth, ApiKeyAuth, OAuth2Auth, JwtAuth)


# ---------------------------------------------------------------------------
# Body variants
# ---------------------------------------------------------------------------

class FormField(CamelModel):
    """Form row; ``file`` rows carry a path in ``value``."""

    key: str = ""
    value: str = ""
    type: Literal["text", "file"] = "text"


class GraphQLQuery(CamelModel):
    query: str = ""
    variables: Any = None


class JsonBody(CamelModel):
    """JSON body. ``raw`` is the template text used when no value is stored."""

    type: Literal["json"] = "json"
    value: Any = Field(default=None, alias="json")
    raw: Optional[str] = None


class GraphQLBody(CamelModel):
    type: Literal["graphql"] = "graphql"
    graphql: GraphQLQuery = Field(default_factory=GraphQLQuery)


class RawBody(CamelModel):
    type: Literal["raw"] = "raw"
    raw: str = ""


class UrlEncodedBody(CamelModel):
    type: Literal["x-www-form-urlencoded"] = "x-www-form-urlencoded"
    form_data: List[FormField] = Field(default_factory=list)


class FormDataBody(CamelModel):
    type: Literal["form-data"] = "form-data"
    form_data: List[FormField] = Field(default_factory=list)


RequestBody = Annotated[
    Union[JsonBody, GraphQLBody, RawBody, UrlEncodedBody, FormDataBody],
    Field(discriminator="type"),
]
BODY_VARIANTS = (JsonBody, GraphQLBody, RawBody, UrlEncodedBody, FormDataBody)

_BODY_TAG_SYNONYMS = {"form-urlencoded": "x-www-form-urlencoded"}


def _normalize_body(value: Any) -> Any:
    value = _drop_absent_variant(value)
    if isinstance(value, dict) and value.get("type") in _BODY_TAG_SYNONYMS:
        value = {**value, "type": _BODY_TAG_SYNONYMS[value["type"]]}
    return value


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

class Request(CamelModel):
    """A stored request template."""

    id: str = Field(default_factory=lambda: generate_id(REQUEST_ID_PREFIX))
    name: str = "New Request"
    description: Optional[str] = None
    method: HttpMethod = HttpMethod.GET
    url: str = ""
    params: List[Param] = Field(default_factory=list)
    headers: List[Header] = Field(default_factory=list)
    body: Optional[RequestBody] = None
    auth: Optional[Auth] = None
    pre_request_script: Optional[str] = None
    tests: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("method", mode="before")
    @classmethod
    def validate_method(cls, v: Any) -> Any:
        """Convert method to uppercase."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("auth", mode="before")
    @classmethod
    def validate_auth(cls, v: Any) -> Any:
        return _drop_absent_variant(v)

    @field_validator("body", mode="before")
    @classmethod
    def validate_body(cls, v: Any) -> Any:
        return _normalize_body(v)

    @field_validator("created_at", "updated_at")
    @classmethod
    def validate_timezone(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @model_validator(mode="after")
    def check_timestamps(self) -> "Request":
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at
        return self

    def touch(self) -> None:
        """Move ``updated_at`` strictly forward."""
        self.updated_at = next_timestamp(self.updated_at)


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------

class Folder(CamelModel):
    """Folder holding request ids; the requests themselves live in the collection."""

    id: str = Field(default_factory=lambda: generate_id(FOLDER_ID_PREFIX))
    name: str = "New Folder"
    requests: List[str] = Field(default_factory=list)
    folders: List["Folder"] = Field(default_factory=list)

    def iter_tree(self) -> Iterator["Folder"]:
        """Yield this folder and every nested folder, depth-first."""
        yield self
        for child in self.folders:
            yield from child.iter_tree()


Folder.model_rebuild()


class Collection(CamelModel):
    """
    A named group of requests and folders.

    The collection owns its requests. Folders only reference request ids, so a
    request appears once in ``requests`` no matter how many folders list it,
    and a request no folder lists is a root-level request.
    """

    id: str = Field(default_factory=lambda: generate_id(COLLECTION_ID_PREFIX))
    name: str = "New Collection"
    description: Optional[str] = None
    version: Optional[str] = None
    requests: List[Request] = Field(default_factory=list)
    folders: List[Folder] = Field(default_factory=list)
    variables: Dict[str, str] = Field(default_factory=dict)
    auth: Optional[Auth] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("variables", mode="before")
    @classmethod
    def validate_variables(cls, v: Any) -> Any:
        return _stringify_variables(v)

    @field_validator("auth", mode="before")
    @classmethod
    def validate_auth(cls, v: Any) -> Any:
        return _drop_absent_variant(v)

    @field_validator("created_at", "updated_at")
    @classmethod
    def validate_timezone(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @model_validator(mode="after")
    def check_timestamps(self) -> "Collection":
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at
        return self

    def touch(self) -> None:
        """Move ``updated_at`` strictly forward."""
        self.updated_at = next_timestamp(self.updated_at)

    # -- requests ----------------------------------------------------------

    @property
    def request_index(self) -> Dict[str, Request]:
        """Map of request id to the owned request object."""
        return {request.id: request for request in self.requests}

    def get_request(self, request_id: str) -> Optional[Request]:
        for request in self.requests:
            if request.id == request_id:
                return request
        return None

    def upsert_request(self, request: Request) -> Request:
        """
        Replace the request with the same id, or append it.

        The request is touched so its ``updated_at`` moves forward.

        Args:
            request: Request to store in this collection

        Returns:
            Request: The stored request
        """
        request.touch()
        for index, existing in enumerate(self.requests):
            if existing.id == request.id:
                self.requests[index] = request
                return request
        self.requests.append(request)
        return request

    def remove_request(self, request_id: str) -> bool:
        """Remove a request and every folder reference to it."""
        before = len(self.requests)
        self.requests = [r for r in self.requests if r.id != request_id]
        if len(self.requests) == before:
            return False
        for folder in self.iter_folders():
            folder.requests = [ref for ref in folder.requests if ref != request_id]
        return True

    def root_requests(self) -> List[Request]:
        """Requests not referenced by any folder."""
        referenced = {ref for folder in self.iter_folders() for ref in folder.requests}
        return [r for r in self.requests if r.id not in referenced]

    def with_inherited_auth(self, request: Request) -> Request:
        """Return the request, or a copy carrying the collection auth if it has none."""
        if request.auth is None and self.auth is not None:
            return request.model_copy(update={"auth": self.auth})
        return request

    # -- folders -----------------------------------------------------------

    def iter_folders(self) -> Iterator[Folder]:
        for folder in self.folders:
            yield from folder.iter_tree()

    def find_folder(self, folder_id: str) -> Optional[Folder]:
        for folder in self.iter_folders():
            if folder.id == folder_id:
                return folder
        return None

    def add_folder(self, folder: Folder, parent_id: Optional[str] = None) -> Folder:
        """
        Attach a folder at the top level or under ``parent_id``.

        Raises:
            ValidationError: If the folder id is taken, the parent is unknown,
                or the folder references requests this collection does not own
        """
        if self.find_folder(folder.id) is not None:
            raise ValidationError(f"Folder already exists: {folder.id}")

        known = self.request_index
        for nested in folder.iter_tree():
            missing = [ref for ref in nested.requests if ref not in known]
            if missing:
                raise ValidationError(
                    f"Folder {nested.id} references unknown requests: {', '.join(missing)}"
                )

        if parent_id is None:
            self.folders.append(folder)
        else:
            parent = self.find_folder(parent_id)
            if parent is None:
                raise ValidationError(f"Folder not found: {parent_id}")
            parent.folders.append(folder)
        return folder

    def remove_folder(self, folder_id: str) -> bool:
        """
        Remove a folder and its nested folders.

        Requests the folder referenced stay in the collection and become
        root-level requests unless another folder still lists them.
        """
        def _remove(folders: List[Folder]) -> bool:
            for index, folder in enumerate(folders):
                if folder.id == folder_id:
                    del folders[index]
                    return True
                if _remove(folder.folders):
                    return True
            return False

        return _remove(self.folders)

    def assign_to_folder(self, request_id: str, folder_id: str) -> None:
        """Reference an owned request from a folder (at most once per folder)."""
        if request_id not in self.request_index:
            raise ValidationError(f"Request not found in collection {self.id}: {request_id}")
        folder = self.find_folder(folder_id)
        if folder is None:
            raise ValidationError(f"Folder not found: {folder_id}")
        if request_id not in folder.requests:
            folder.requests.append(request_id)

    def dangling_references(self) -> List[Tuple[str, str]]:
        """``(folder_id, request_id)`` pairs pointing at requests that do not exist."""
        known = self.request_index
        return [
            (folder.id, ref)
            for folder in self.iter_folders()
            for ref in folder.requests
            if ref not in known
        ]


# ---------------------------------------------------------------------------
# Environments, responses, history, config
# ---------------------------------------------------------------------------

class Environment(CamelModel):
    """Named set of variables, selectable independently of collections."""

    id: str = Field(default_factory=lambda: generate_id(ENVIRONMENT_ID_PREFIX))
    name: str = "New Environment"
    variables: Dict[str, str] = Field(default_factory=dict)
    is_active: Optional[bool] = None

    @field_validator("variables", mode="before")
    @classmethod
    def validate_variables(cls, v: Any) -> Any:
        return _stringify_variables(v)


class Response(CamelModel):
    """Normalized result of an executed request."""

    status: int
    status_text: str = ""
    headers: Dict[str, str] = Field(default_factory=dict)
    data: Any = None
    time: int = Field(default=0, description="Elapsed time in milliseconds")
    size: int = Field(default=0, description="Response body size in bytes")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


class HistoryEntry(CamelModel):
    """An executed request paired with its response."""

    id: str = Field(default_factory=lambda: generate_id(HISTORY_ID_PREFIX))
    request: Request
    response: Response
    timestamp: datetime = Field(default_factory=utc_now)


class AppConfig(CamelModel):
    """User configuration persisted as ``config.json``."""

    theme: Literal["dark", "light"] = "dark"
    default_timeout: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0, description="Request timeout in milliseconds")
    follow_redirects: bool = True
    validate_ssl: bool = Field(default=True, alias="validateSSL")
    proxy_url: Optional[str] = None
    max_history_size: int = Field(default=DEFAULT_MAX_HISTORY_SIZE, ge=0)
