"""
Request body encoding.

Each body variant has one encoder producing the payload and the content type
to use when the request does not set one itself.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urlencode

from terminapi.constants import BODY_METHODS, FORM_URLENCODED_CONTENT_TYPE, JSON_CONTENT_TYPE
from terminapi.core.models import (
    BODY_VARIANTS,
    FormDataBody,
    GraphQLBody,
    JsonBody,
    RawBody,
    UrlEncodedBody,
)
from terminapi.core.variables import resolve
from terminapi.logger import get_logger

logger = get_logger(__name__)


@dataclass
class EncodedBody:
    """Encoded payload plus the default content type for it."""

    payload: Any
    content_type_hint: Optional[str] = None
    structured: bool = False

    def to_content(self) -> Optional[bytes]:
        """
        Bytes to put on the wire.

        Structured payloads are serialized as JSON; text is UTF-8 encoded.
        """
        if self.payload is None:
            return None
        if self.structured:
            return json.dumps(self.payload, ensure_ascii=False).encode("utf-8")
        if isinstance(self.payload, bytes):
            return self.payload
        return str(self.payload).encode("utf-8")


BodyEncoder = Callable[[Any, Mapping[str, str]], EncodedBody]
_ENCODERS: Dict[type, BodyEncoder] = {}


def _encodes(variant: type) -> Callable[[BodyEncoder], BodyEncoder]:
    def register(encoder: BodyEncoder) -> BodyEncoder:
        _ENCODERS[variant] = encoder
        return encoder
    return register


@_encodes(JsonBody)
def _encode_json(body: JsonBody, variables: Mapping[str, str]) -> EncodedBody:
    if body.value is not None:
        template = json.dumps(body.value, ensure_ascii=False)
    elif body.raw is not None:
        template = body.raw
    else:
        return EncodedBody(None, JSON_CONTENT_TYPE)

    resolved = resolve(template, variables)
    try:
        return EncodedBody(json.loads(resolved), JSON_CONTENT_TYPE, structured=True)
    except ValueError:
        logger.debug("JSON body is not valid JSON after variable resolution; sending text as-is")
        return EncodedBody(resolved, JSON_CONTENT_TYPE)


@_encodes(GraphQLBody)
def _encode_graphql(body: GraphQLBody, variables: Mapping[str, str]) -> EncodedBody:
    payload = {
        "query": resolve(body.graphql.query, variables),
        "variables": body.graphql.variables or {},
    }
    return EncodedBody(payload, JSON_CONTENT_TYPE, structured=True)


@_encodes(RawBody)
def _encode_raw(body: RawBody, variables: Mapping[str, str]) -> EncodedBody:
    return EncodedBody(resolve(body.raw, variables))


@_encodes(UrlEncodedBody)
def _encode_urlencoded(body: UrlEncodedBody, variables: Mapping[str, str]) -> EncodedBody:
    fields = {item.key: resolve(item.value, variables) for item in body.form_data}
    return EncodedBody(urlencode(fields), FORM_URLENCODED_CONTENT_TYPE)


@_encodes(FormDataBody)
def _encode_form_data(body: FormDataBody, variables: Mapping[str, str]) -> EncodedBody:
    # TODO: multipart encoding with file reads for rows of type "file"
    entries = [item.model_dump(mode="json") for item in body.form_data]
    return EncodedBody(entries, structured=True)


_unhandled = [variant.__name__ for variant in BODY_VARIANTS if variant not in _ENCODERS]
if _unhandled:
    raise RuntimeError(f"Body variants without an encoder: {', '.join(_unhandled)}")


def body_applies(method: str) -> bool:
    """Whether a body is sent for this HTTP method."""
    return method.upper() in BODY_METHODS


def encode_body(body: Any, variables: Mapping[str, str]) -> EncodedBody:
    """
    Encode a body variant.

    Args:
        body: Body variant, or None
        variables: Variables used to resolve placeholders

    Returns:
        EncodedBody: Payload and content type hint
    """
    if body is None:
        return EncodedBody(None)
    encoder = _ENCODERS.get(type(body))
    if encoder is None:
        raise TypeError(f"Unsupported body variant: {type(body).__name__}")
    return encoder(body, variables)
