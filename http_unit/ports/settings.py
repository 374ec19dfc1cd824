"""Settings port definition (DTO)."""

from dataclasses import dataclass, field

__all__ = ["SettingsPort"]


@dataclass
class SettingsPort:
    """Resolved runtime settings for one HTTP unit.

    Decouples the core from concrete configuration sources (environment,
    host parameter lists), enabling easy testing. Every field carries its
    explicit default.

    Attributes:
        protocol: Scheme used when no explicit url is given.
        domain: Host used when no explicit url is given.
        port: Port used when no explicit url is given; 0 omits it.
        path: Path used when no explicit url is given.
        url: Full URL override, short-circuits protocol/domain/port/path.
        http_version: "1.1" selects HTTP/1.1, anything else HTTP/2.
        verify_certificate: False trusts every server certificate.
        trust_certificate: Optional PEM bundle (or path) to trust in addition.
        method: Request verb.
        query: Query string appended with "?".
        encode_query: Percent-encode the query string.
        headers: Extra request headers: alternating name and value strings,
            "Name: value" strings or (name, value) pairs.
        body: Payload for verbs other than GET/DELETE.
        number_of_calls: Call budget.
        timeout_sec: Connect and whole-request timeout.
        retry_after_timeout: Retry-delay on HTTP 404.
        sleep_before_retry_sec: Delay before a retry.
        max_retries: Retry-delays per call before a 404 counts as failure.
        follow_redirect: Redirect policy selector (NEVER/ALWAYS/other).
        expected_response_code: Status each settled call is compared against.
        strict_response_code: A mismatch fails the call instead of a warning.
    """

    protocol: str = "http"
    domain: str = "localhost"
    port: int = 8080
    path: str = "/"
    url: str | None = None
    http_version: str = "2"
    verify_certificate: bool = True
    trust_certificate: str | None = None
    method: str = "GET"
    query: str = ""
    encode_query: bool = True
    headers: list[str | tuple[str, str]] = field(default_factory=list)
    body: str = ""
    number_of_calls: int = 1
    timeout_sec: float = 60.0
    retry_after_timeout: bool = True
    sleep_before_retry_sec: float = 3.0
    max_retries: int = 3
    follow_redirect: str | None = "true"
    expected_response_code: int = 200
    strict_response_code: bool = False
