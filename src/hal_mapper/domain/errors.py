"""Domain errors raised by the mapping engine."""

from __future__ import annotations


class HALError(Exception):
    """Base class for mapping engine errors."""


class UnknownEntityError(HALError, LookupError):
    """Raised when an id does not resolve to a channel, register, module or device."""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"Unknown {kind}: '{entity_id}'")
        self.kind = kind
        self.entity_id = entity_id


class MappingNotFoundError(UnknownEntityError):
    """Raised when an operation targets a mapping that does not exist."""

    def __init__(self, mapping_id: str) -> None:
        super().__init__("mapping", mapping_id)


class MappingError(HALError):
    """Raised when an operation is not applicable to a mapping."""


class ScalingError(HALError, ValueError):
    """Raised for degenerate or malformed signal scaling."""
