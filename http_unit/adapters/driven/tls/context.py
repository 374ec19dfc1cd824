"""TLS context construction for secure targets."""

import logging
import ssl
from pathlib import Path

from http_unit.core.errors import ConfigurationError
from http_unit.ports.tls import TlsPolicy

__all__ = ["build_ssl_context"]

logger = logging.getLogger(__name__)

PEM_MARKER = "-----BEGIN"


def _read_trust_material(trust_material: str) -> str:
    """Return PEM text, reading it from disk when a file path was given."""
    if PEM_MARKER in trust_material:
        return trust_material

    try:
        path = Path(trust_material.strip()).expanduser()
        is_file = path.is_file()
    except (OSError, ValueError, RuntimeError):
        # Too long, NUL bytes or unresolvable "~": not a path, parse as PEM
        is_file = False

    if is_file:
        try:
            return path.read_text()
        except OSError as e:
            raise ConfigurationError(f"Could not read trust certificate file {path}: {e}") from e
    return trust_material


def build_ssl_context(policy: TlsPolicy) -> ssl.SSLContext:
    """Create the client SSL context for a unit.

    - verify without trust material: platform default trust store.
    - verify with trust material: platform defaults plus the given PEM bundle.
    - no verify: trust every certificate (test/self-signed endpoints only).

    Args:
        policy: Trust policy of the unit.

    Returns:
        Configured ssl.SSLContext for use with HTTPX.

    Raises:
        ConfigurationError: If the trust material cannot be parsed or TLS
            is unavailable.
    """
    logger.debug("Initialize SSL context.")
    try:
        ctx = ssl.create_default_context()
    except (ssl.SSLError, OSError) as e:
        raise ConfigurationError(f"Could not initialize ssl context: {e}") from e

    if not policy.verify:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        logger.warning("TLS verification DISABLED, trusting all certificates")
        return ctx

    if policy.trust_material and policy.trust_material.strip():
        logger.debug("Use known trust certificates and added own certificate.")
        pem = _read_trust_material(policy.trust_material)
        try:
            ctx.load_verify_locations(cadata=pem)
        except (ssl.SSLError, ValueError) as e:
            logger.warning(f"Could not initialize trust certificate: {e}")
            raise ConfigurationError(f"Could not initialize trust certificate: {e}") from e
    else:
        logger.debug("Use known trust certificates.")

    return ctx
