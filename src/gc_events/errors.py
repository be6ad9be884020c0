"""Exception types raised by the classification core."""

from __future__ import annotations


class GCLogError(ValueError):
    """Base class for all gc-events errors."""


class DecoratorError(GCLogError):
    """A decorator-shaped prefix that does not parse."""


class MalformedFieldError(GCLogError):
    """A captured field could not be parsed as its declared kind."""

    def __init__(self, field: str, raw: str | None, reason: str) -> None:
        super().__init__(f"Field '{field}' malformed ({reason}): {raw!r}")
        self.field = field
        self.raw = raw
        self.reason = reason


class RegistryConflictError(GCLogError):
    """Two registry entries cannot be ordered deterministically.

    Raised while the registry is being built; a registry that raised this is
    never usable.
    """
