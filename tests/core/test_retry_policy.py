"""Tests for call outcome classification."""

import pytest

from http_unit.core.errors import TransportError
from http_unit.core.retry import RetryPolicy
from http_unit.ports.http import HttpResponseDto
from http_unit.ports.settings import SettingsPort
from http_unit.ports.state import OutcomeKind

__all__ = []


@pytest.mark.parametrize("status", [200, 201, 204, 299])
def test_2xx_is_success(status: int) -> None:
    """Any 2xx status should be classified as success."""
    policy = RetryPolicy(expected_status=status)

    result = policy.classify(HttpResponseDto(status_code=status, body="ok"))

    assert result.kind is OutcomeKind.SUCCESS
    assert result.status_code == status
    assert result.unexpected_status is False


@pytest.mark.parametrize("status", [199, 300, 302, 400, 500, 503])
def test_other_status_is_failure(status: int) -> None:
    """Non-2xx statuses other than a retried 404 should fail the call."""
    result = RetryPolicy().classify(HttpResponseDto(status_code=status))

    assert result.kind is OutcomeKind.FAILURE
    assert result.status_code == status


def test_transport_error_is_failure() -> None:
    """Transport errors should fail the call without a status."""
    result = RetryPolicy().classify(TransportError("ConnectError: refused"))

    assert result.kind is OutcomeKind.FAILURE
    assert result.status_code is None
    assert result.error == "ConnectError: refused"


def test_404_is_retried_when_enabled() -> None:
    """404 should trigger a retry-delay while retries remain."""
    policy = RetryPolicy(retry_on_not_found=True, max_retries=2)

    assert policy.classify(HttpResponseDto(status_code=404), 0).kind is OutcomeKind.RETRY
    assert policy.classify(HttpResponseDto(status_code=404), 1).kind is OutcomeKind.RETRY


def test_404_fails_once_retries_are_used_up() -> None:
    """After max_retries retry-delays a 404 should settle as failure."""
    policy = RetryPolicy(retry_on_not_found=True, max_retries=2)

    result = policy.classify(HttpResponseDto(status_code=404), 2)

    assert result.kind is OutcomeKind.FAILURE
    assert result.unexpected_status is True


def test_404_is_failure_when_retry_disabled() -> None:
    """Without retryAfterTimeout a 404 should fail immediately."""
    policy = RetryPolicy(retry_on_not_found=False)

    assert policy.classify(HttpResponseDto(status_code=404)).kind is OutcomeKind.FAILURE


def test_retry_is_not_compared_with_expected_status() -> None:
    """A retry-delay is not a settled call and is never flagged."""
    result = RetryPolicy(strict_status=True).classify(HttpResponseDto(status_code=404))

    assert result.kind is OutcomeKind.RETRY
    assert result.unexpected_status is False


def test_lenient_mismatch_keeps_success_but_flags_it() -> None:
    """Lenient mode should keep 2xx as success and flag the mismatch."""
    policy = RetryPolicy(expected_status=200, strict_status=False)

    result = policy.classify(HttpResponseDto(status_code=201))

    assert result.kind is OutcomeKind.SUCCESS
    assert result.unexpected_status is True


def test_strict_mismatch_fails_the_call() -> None:
    """Strict mode should turn a mismatching 2xx into a failure."""
    policy = RetryPolicy(expected_status=200, strict_status=True)

    result = policy.classify(HttpResponseDto(status_code=201))

    assert result.kind is OutcomeKind.FAILURE
    assert result.unexpected_status is True


def test_strict_match_is_success() -> None:
    """Strict mode should accept the expected status."""
    policy = RetryPolicy(expected_status=204, strict_status=True)

    assert policy.classify(HttpResponseDto(status_code=204)).kind is OutcomeKind.SUCCESS


def test_policy_from_settings() -> None:
    """Settings should map onto the policy fields."""
    policy = RetryPolicy.from_settings(
        SettingsPort(
            retry_after_timeout=False,
            sleep_before_retry_sec=7,
            max_retries=1,
            expected_response_code=202,
            strict_response_code=True,
        )
    )

    assert policy == RetryPolicy(
        retry_on_not_found=False,
        sleep_before_retry_sec=7.0,
        max_retries=1,
        expected_status=202,
        strict_status=True,
    )
