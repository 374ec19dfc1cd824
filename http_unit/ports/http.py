"""HTTP port definitions (DTOs)."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from http_unit.ports.tls import TlsPolicy

__all__ = [
    "ClientFactory",
    "HttpResponseDto",
    "ProtocolVersion",
    "RedirectPolicy",
    "RequestSpec",
    "TransportPort",
]


class ProtocolVersion(str, Enum):
    """HTTP protocol version requested from the transport."""

    HTTP_1_1 = "HTTP/1.1"
    HTTP_2 = "HTTP/2"


class RedirectPolicy(str, Enum):
    """How redirects are followed.

    NORMAL follows redirects except a downgrade from https to http.
    """

    NEVER = "NEVER"
    NORMAL = "NORMAL"
    ALWAYS = "ALWAYS"


@dataclass(slots=True, frozen=True)
class RequestSpec:
    """Canonical request template, built once per unit and reused for every call.

    Decouples the call loop from configuration parsing and from the HTTP
    implementation.

    Attributes:
        method: Upper-cased request verb.
        uri: Absolute request URI including the query string.
        headers: Ordered name/value pairs; names may repeat.
        body: Request payload, None for methods without a body.
        timeout_sec: Whole-request timeout in seconds.
        protocol_version: Requested HTTP protocol version.
        redirect_policy: Redirect handling.
    """

    method: str
    uri: str
    headers: tuple[tuple[str, str], ...] = ()
    body: str | None = None
    timeout_sec: float = 60.0
    protocol_version: ProtocolVersion = ProtocolVersion.HTTP_2
    redirect_policy: RedirectPolicy = RedirectPolicy.NORMAL


@dataclass(slots=True, frozen=True)
class HttpResponseDto:
    """Response of one call as seen by the retry policy.

    Attributes:
        status_code: HTTP status code.
        body: Decoded response body; empty string if the server sent none.
        http_version: Negotiated protocol, e.g. "HTTP/1.1".
    """

    status_code: int
    body: str = ""
    http_version: str = ""


class TransportPort(Protocol):
    """Interface of the per-unit HTTP client.

    Implementations send one request per call, reuse their connections for
    the unit's lifetime and raise TransportError for failures below HTTP.
    """

    async def send(self, spec: RequestSpec, /) -> HttpResponseDto:
        """Send one request.

        Args:
            spec: Request template.

        Returns:
            Final response.
        """
        ...

    async def close(self) -> None:
        """Release connections held by the client."""
        ...


ClientFactory = Callable[[RequestSpec, TlsPolicy], TransportPort]
