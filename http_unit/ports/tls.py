"""TLS trust port definition (DTO)."""

from dataclasses import dataclass

__all__ = ["TlsPolicy"]


@dataclass(slots=True, frozen=True)
class TlsPolicy:
    """Trust policy for secure targets.

    Attributes:
        verify: False accepts any server certificate (test/self-signed only).
        trust_material: Optional PEM bundle, or path to one, trusted in
            addition to the platform defaults.
    """

    verify: bool = True
    trust_material: str | None = None
