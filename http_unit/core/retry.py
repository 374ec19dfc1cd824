"""Outcome classification and retry decision for one call."""

import logging
from dataclasses import dataclass

from http_unit.core.errors import TransportError
from http_unit.ports.http import HttpResponseDto
from http_unit.ports.settings import SettingsPort
from http_unit.ports.state import OutcomeKind

__all__ = ["Classification", "RetryPolicy", "RETRYABLE_STATUS"]

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = 404


@dataclass(slots=True, frozen=True)
class Classification:
    """Decision for one call.

    Attributes:
        kind: SUCCESS pushes the body, RETRY sleeps and repeats the call,
            FAILURE settles the call as failed.
        status_code: Final HTTP status, None for transport errors.
        unexpected_status: The settled status differs from the expected one.
        error: Transport error description, if any.
    """

    kind: OutcomeKind
    status_code: int | None = None
    unexpected_status: bool = False
    error: str | None = None


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Classify responses and transport errors.

    Attributes:
        retry_on_not_found: Treat HTTP 404 as retry-delay.
        sleep_before_retry_sec: Delay the engine waits before a retry.
        max_retries: Retry-delays per call before a 404 counts as failure.
        expected_status: Status settled calls are compared against.
        strict_status: A mismatch with expected_status fails the call.
    """

    retry_on_not_found: bool = True
    sleep_before_retry_sec: float = 3.0
    max_retries: int = 3
    expected_status: int = 200
    strict_status: bool = False

    @classmethod
    def from_settings(cls, settings: SettingsPort) -> "RetryPolicy":
        return cls(
            retry_on_not_found=settings.retry_after_timeout,
            sleep_before_retry_sec=float(settings.sleep_before_retry_sec),
            max_retries=settings.max_retries,
            expected_status=settings.expected_response_code,
            strict_status=settings.strict_response_code,
        )

    def classify(
        self, result: HttpResponseDto | TransportError, pending_retries: int = 0
    ) -> Classification:
        """Classify the result of one call.

        Args:
            result: Response, or the transport error raised instead.
            pending_retries: Retry-delays already spent on this call.

        Returns:
            The classification.
        """
        if isinstance(result, TransportError):
            return Classification(kind=OutcomeKind.FAILURE, error=str(result))

        status = result.status_code
        if (
            status == RETRYABLE_STATUS
            and self.retry_on_not_found
            and pending_retries < self.max_retries
        ):
            return Classification(kind=OutcomeKind.RETRY, status_code=status)

        kind = OutcomeKind.SUCCESS if 200 <= status < 300 else OutcomeKind.FAILURE
        unexpected = status != self.expected_status
        if unexpected:
            logger.warning(f"Unexpected response code {status} (expected {self.expected_status})")
            if self.strict_status:
                kind = OutcomeKind.FAILURE

        return Classification(kind=kind, status_code=status, unexpected_status=unexpected)
