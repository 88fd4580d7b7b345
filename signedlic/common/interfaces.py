"""
Interfaces and protocols for dependency injection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class HttpResponse:
    """What a transport hands back when the server answered at all."""

    status_code: int
    body: bytes


class IDeviceIdentifierProvider(Protocol):
    """Protocol for resolving the local device identifier."""

    def resolve(self) -> bytes | None: ...


class IHttpTransport(Protocol):
    """Protocol for posting JSON to an activation endpoint.

    Raises ``TransportError`` when no response was obtained.
    """

    def post(self, url: str, json_body: dict[str, Any]) -> HttpResponse: ...


class IKeyValueStore(Protocol):
    """Protocol for persisting the signed license bytes."""

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...

    def delete(self, key: str) -> None: ...
