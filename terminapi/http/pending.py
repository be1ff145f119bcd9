"""Outgoing request descriptor shared by the auth, body and executor stages."""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class PendingRequest:
    """A fully resolved request, ready for the transport."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)
    content: Optional[bytes] = None

    def has_header(self, name: str) -> bool:
        lowered = name.lower()
        return any(key.lower() == lowered for key in self.headers)

    def set_header(self, name: str, value: str) -> None:
        """Set a header, replacing any existing spelling of the same name."""
        lowered = name.lower()
        for key in [k for k in self.headers if k.lower() == lowered]:
            del self.headers[key]
        self.headers[name] = value

    def set_param(self, name: str, value: str) -> None:
        self.params[name] = value
