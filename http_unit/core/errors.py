"""Error taxonomy of the HTTP unit.

Configuration errors are fatal and surface from ``initialize``; transport
errors are absorbed into the call counters by the engine.
"""

__all__ = [
    "ConfigurationError",
    "EmptyQueueError",
    "HttpUnitError",
    "TransportError",
    "UnitStateError",
    "ValidationError",
]


class HttpUnitError(Exception):
    """Base class for HTTP unit errors."""


class ConfigurationError(HttpUnitError):
    """Raised when the unit cannot be set up (bad URL, trust bundle, TLS provider)."""


class ValidationError(ConfigurationError):
    """Raised when the request cannot be assembled from the settings."""


class TransportError(HttpUnitError):
    """Raised when a call fails below HTTP (connect, handshake, timeout, redirects)."""


class EmptyQueueError(LookupError):
    """Raised when popping from an empty result queue."""


class UnitStateError(RuntimeError):
    """Raised when an operation is not allowed in the unit's current state."""
