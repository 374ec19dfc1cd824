"""Configuration check for container orchestration."""

import logging

from http_unit.adapters.driven.config.settings import load_settings
from http_unit.adapters.driven.logging.logging_config import configure_logs
from http_unit.core.errors import ConfigurationError
from http_unit.core.request_spec import build_request_spec

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Validate the unit configuration without issuing any call.

    Validates:
    - HTTP_UNIT_* environment variables parse into settings.
    - The request (URI, headers, method) can be assembled.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        spec = build_request_spec(load_settings().to_port())
    except ConfigurationError as exc:
        logger.error(f"HTTP unit healthcheck FAILED: {exc}")
        return 1

    logger.info(f"HTTP unit healthcheck OK: {spec.method} {spec.uri}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
