"""Configuration loading from host parameters and environment variables."""

import logging
import os
import re
from collections.abc import Iterable, Mapping
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from http_unit.core.errors import ConfigurationError
from http_unit.ports.settings import SettingsPort

__all__ = ["ENV_PREFIX", "Settings", "load_settings"]

load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = "HTTP_UNIT_"
HEADER_KEY = "header"
_HEADER_ENV = re.compile(rf"^{ENV_PREFIX}HEADER(?:_(\d+))?$")


class Settings(BaseModel):
    """Typed configuration of one HTTP unit.

    Keys use the camelCase names of the host parameter list; string values
    such as "8080" or "false" are coerced. Absent keys take the defaults
    below.

    Attributes:
        protocol: Scheme used when no url is given.
        domain: Host used when no url is given.
        port: Port used when no url is given (0 omits it).
        path: Path used when no url is given.
        url: Full URL override.
        http_version: "1.1" selects HTTP/1.1, anything else HTTP/2.
        verify_certificate: False trusts every server certificate.
        trust_certificate: PEM bundle (or path) trusted in addition.
        method: Request verb.
        query: Query string.
        encode_query: Percent-encode the query string.
        header: Repeatable request headers, "Name: value" lines or
            alternating name and value entries.
        body: Request payload for verbs other than GET/DELETE.
        number_of_calls: Call budget.
        timeout: Connect and whole-request timeout in seconds.
        retry_after_timeout: Retry-delay on HTTP 404.
        sleeptime_before_retry: Seconds to wait before a retry.
        max_retries: Retry-delays per call before a 404 counts as failure.
        follow_redirect: NEVER, ALWAYS, anything else follows normally.
        expected_response_code: Status every settled call is compared against.
        strict_response_code: Fail calls whose status differs from the expected one.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    protocol: str = Field(default="http", description="Protocol (default: http).")
    domain: str = Field(default="localhost", description="Domain (default: localhost).")
    port: int = Field(default=8080, ge=0, description="Port (default: 8080).")
    path: str = Field(default="/", description="Path (default: /).")
    url: str | None = Field(
        default=None,
        description="Full url; if set protocol, domain, port and path are ignored.",
    )
    http_version: str = Field(default="2", alias="httpVersion")
    verify_certificate: bool = Field(default=True, alias="verifyCertificate")
    trust_certificate: str | None = Field(default=None, alias="trustCertificate")
    method: str = Field(default="GET", description="Request method (default: GET).")
    query: str = Field(default="", description="Request query (default: empty).")
    encode_query: bool = Field(default=True, alias="encodeQuery")
    header: list[str] = Field(default_factory=list, description="Repeatable request header.")
    body: str = Field(default="", description="Request body (default: empty).")
    number_of_calls: int = Field(default=1, ge=0, alias="numberOfCalls")
    timeout: float = Field(default=60, gt=0, description="Request timeout in seconds.")
    retry_after_timeout: bool = Field(default=True, alias="retryAfterTimeout")
    sleeptime_before_retry: float = Field(default=3, ge=0, alias="sleeptimeBeforeRetry")
    max_retries: int = Field(default=3, ge=0, alias="maxRetries")
    follow_redirect: str | None = Field(default="true", alias="followRedirect")
    expected_response_code: int = Field(
        default=200, ge=100, le=599, alias="expectedResponseCode"
    )
    strict_response_code: bool = Field(default=False, alias="strictResponseCode")

    @field_validator("http_version", "follow_redirect", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> Any:
        """Accept booleans and numbers for string selectors (e.g. 1.1, true)."""
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("url", "trust_certificate")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        """Validate that the request method is a single token.

        Raises:
            ValueError: If the method is blank or contains whitespace.
        """
        method = v.strip()
        if not method or any(c.isspace() for c in method):
            raise ValueError(f"Invalid request method: {v!r}")
        return method

    @field_validator("header", mode="before")
    @classmethod
    def header_as_list(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "Settings":
        """Validate a mapping of parameter names to values.

        Raises:
            ConfigurationError: If a value is invalid or a key is unknown.
        """
        try:
            return cls.model_validate(dict(values))
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_parameters(cls, parameters: Iterable[tuple[str, Any]]) -> "Settings":
        """Build settings from a host parameter list.

        "header" may repeat and keeps its order; every other key may be
        given at most once.

        Raises:
            ConfigurationError: If a key repeats or a value is invalid.
        """
        values: dict[str, Any] = {}
        for key, value in parameters:
            if key == HEADER_KEY:
                values.setdefault(HEADER_KEY, []).append(value)
            elif key in values:
                raise ConfigurationError(f"Parameter '{key}' may only be given once")
            else:
                values[key] = value
        return cls.from_mapping(values)

    def to_port(self) -> SettingsPort:
        """Return the settings as the DTO the core depends on."""
        return SettingsPort(
            protocol=self.protocol,
            domain=self.domain,
            port=self.port,
            path=self.path,
            url=self.url,
            http_version=self.http_version,
            verify_certificate=self.verify_certificate,
            trust_certificate=self.trust_certificate,
            method=self.method,
            query=self.query,
            encode_query=self.encode_query,
            headers=list(self.header),
            body=self.body,
            number_of_calls=self.number_of_calls,
            timeout_sec=self.timeout,
            retry_after_timeout=self.retry_after_timeout,
            sleep_before_retry_sec=self.sleeptime_before_retry,
            max_retries=self.max_retries,
            follow_redirect=self.follow_redirect,
            expected_response_code=self.expected_response_code,
            strict_response_code=self.strict_response_code,
        )


def _env_name(field_alias: str) -> str:
    """Return HTTP_UNIT_<UPPER_SNAKE> for a camelCase parameter name."""
    return ENV_PREFIX + re.sub(r"(?<!^)(?=[A-Z])", "_", field_alias).upper()


def _env_headers(environ: Mapping[str, str]) -> list[str]:
    """Collect HTTP_UNIT_HEADER, HTTP_UNIT_HEADER_1, ... in numeric order."""
    found: list[tuple[int, str]] = []
    for name, value in environ.items():
        match = _HEADER_ENV.match(name)
        if match:
            found.append((int(match.group(1) or 0), value))
    return [value for _, value in sorted(found)]


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Load and validate settings from environment variables.

    Every parameter is read from HTTP_UNIT_<NAME>, e.g. HTTP_UNIT_URL,
    HTTP_UNIT_NUMBER_OF_CALLS or HTTP_UNIT_VERIFY_CERTIFICATE. Headers are
    read from HTTP_UNIT_HEADER and HTTP_UNIT_HEADER_<n>. Absent variables
    take their defaults.

    Args:
        environ: Variables to read; defaults to os.environ.

    Returns:
        Validated Settings object.

    Raises:
        ConfigurationError: If a value is invalid.
    """
    environ = os.environ if environ is None else environ

    values: dict[str, Any] = {}
    for name, field in Settings.model_fields.items():
        if name == HEADER_KEY:
            continue
        env_var = _env_name(field.alias or name)
        if env_var in environ:
            values[field.alias or name] = environ[env_var]

    headers = _env_headers(environ)
    if headers:
        values[HEADER_KEY] = headers

    settings = Settings.from_mapping(values)

    logger.info(
        f"Unit configured: method={settings.method}, "
        f"target={settings.url or f'{settings.protocol}://{settings.domain}:{settings.port}{settings.path}'}, "
        f"calls={settings.number_of_calls}, "
        f"timeout={settings.timeout}s, "
        f"headers={len(settings.header)}"
    )

    return settings
