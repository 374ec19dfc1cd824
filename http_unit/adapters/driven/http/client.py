"""HTTP transport adapter: one reusable client per unit."""

import asyncio
import logging
import ssl
from types import TracebackType

import httpx

from http_unit.adapters.driven.tls.context import build_ssl_context
from http_unit.core.errors import TransportError
from http_unit.ports.http import (
    HttpResponseDto,
    ProtocolVersion,
    RedirectPolicy,
    RequestSpec,
    TransportPort,
)
from http_unit.ports.tls import TlsPolicy

__all__ = ["TransportClient", "TRANSPORT_ERRORS"]

logger = logging.getLogger(__name__)

# Exceptions reported to the engine as TransportError
TRANSPORT_ERRORS = (
    httpx.RequestError,  # Connect, read, write, protocol, decoding errors
    asyncio.TimeoutError,  # Whole-request timeout
    OSError,  # Socket and TLS handshake errors
)

DEFAULT_MAX_REDIRECTS = 20


class TransportClient(TransportPort):
    """HTTP client bound to the TLS context, timeouts and redirect policy of a unit.

    Features:
    - One httpx.AsyncClient (and connection pool) reused for every call.
    - Redirect handling per RedirectPolicy.
    - Whole-request timeout per RequestSpec.
    - Context manager for proper resource cleanup.
    """

    def __init__(
        self,
        spec: RequestSpec,
        ssl_context: ssl.SSLContext | None = None,
        *,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize transport client.

        Args:
            spec: Request template providing timeout, protocol and redirect policy.
            ssl_context: TLS context for https targets; None uses httpx defaults.
            max_redirects: Maximum redirect hops per call.
            transport: Optional transport override (tests).
        """
        self.redirect_policy = spec.redirect_policy
        self.protocol_version = spec.protocol_version
        self.connect_timeout_sec = spec.timeout_sec
        self.ssl_context = ssl_context
        self.max_redirects = max_redirects
        self._transport = transport
        self.client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        spec: RequestSpec,
        tls_policy: TlsPolicy,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "TransportClient":
        """Build and open the client for a unit.

        The TLS context is only resolved for https targets.

        Args:
            spec: Request template of the unit.
            tls_policy: Trust policy of the unit.
            transport: Optional transport override (tests).

        Returns:
            Open transport client.

        Raises:
            ConfigurationError: If the TLS context cannot be built.
        """
        ssl_context = None
        if httpx.URL(spec.uri).scheme == "https":
            ssl_context = build_ssl_context(tls_policy)
        return cls(spec, ssl_context, transport=transport).open()

    def open(self) -> "TransportClient":
        """Create the underlying client if not open yet.

        Returns:
            Self, for chaining.
        """
        if self.client is None:
            self.client = httpx.AsyncClient(
                http2=self.protocol_version is ProtocolVersion.HTTP_2,
                timeout=httpx.Timeout(self.connect_timeout_sec, connect=self.connect_timeout_sec),
                follow_redirects=False,
                verify=self.ssl_context if self.ssl_context is not None else True,
                trust_env=True,
                transport=self._transport,
            )
            logger.debug(
                f"Transport client created: version={self.protocol_version.value}, "
                f"redirect={self.redirect_policy.value}, "
                f"tls={'custom' if self.ssl_context is not None else 'default'}"
            )
        return self

    async def close(self) -> None:
        """Release the client and its connections; safe to call twice."""
        client, self.client = self.client, None
        if client is not None:
            await client.aclose()

    async def __aenter__(self) -> "TransportClient":
        """Enter async context manager (open client).

        Returns:
            Self for use in async with statement.
        """
        return self.open()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def send(self, spec: RequestSpec) -> HttpResponseDto:
        """Send one request and return its final response.

        Args:
            spec: Request template.

        Returns:
            Final response after redirect handling.

        Raises:
            RuntimeError: If the client is not open.
            TransportError: On network, TLS, timeout or redirect-limit errors.
        """
        if self.client is None:
            raise RuntimeError("Client not open; use 'async with' or open()")

        try:
            response = await asyncio.wait_for(
                self._send_following_redirects(self.client, spec),
                timeout=spec.timeout_sec,
            )
        except TRANSPORT_ERRORS as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

        return HttpResponseDto(
            status_code=response.status_code,
            body=response.text,
            http_version=response.http_version,
        )

    async def _send_following_redirects(
        self, client: httpx.AsyncClient, spec: RequestSpec
    ) -> httpx.Response:
        try:
            request = client.build_request(
                spec.method,
                spec.uri,
                headers=list(spec.headers),
                content=spec.body,
            )
        except ValueError as e:  # Includes UnicodeEncodeError on non-ASCII headers
            raise TransportError(f"Request could not be built: {type(e).__name__}: {e}") from e
        response = await client.send(request, follow_redirects=False)

        hops = 0
        while response.next_request is not None and self._should_follow(response):
            if hops >= self.max_redirects:
                raise TransportError(f"Exceeded {self.max_redirects} redirects for {spec.uri}")
            next_request = response.next_request
            logger.debug(f"Following redirect {response.status_code} to {next_request.url}")
            hops += 1
            response = await client.send(next_request, follow_redirects=False)

        return response

    def _should_follow(self, response: httpx.Response) -> bool:
        if self.redirect_policy is RedirectPolicy.NEVER:
            return False
        if self.redirect_policy is RedirectPolicy.ALWAYS:
            return True
        # NORMAL: no https -> http downgrade
        target = response.next_request
        return not (
            response.request.url.scheme == "https"
            and target is not None
            and target.url.scheme == "http"
        )
