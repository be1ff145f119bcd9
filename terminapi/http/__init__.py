"""Request construction and execution."""

from .auth import apply_auth
from .body import EncodedBody, body_applies, encode_body
from .executor import RequestExecutor
from .pending import PendingRequest

__all__ = [
    "EncodedBody",
    "PendingRequest",
    "RequestExecutor",
    "apply_auth",
    "body_applies",
    "encode_body",
]
