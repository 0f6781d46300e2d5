"""Core data types for the resource graph and its state engine."""
from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_BASE_MIN = 5


@dataclass(frozen=True)
class ResourceDef:
    """Immutable resource declaration.

    Attributes:
        name: Unique identifier for this resource.
        label: Human-readable name.
        icon: Display glyph.
        components: Names of the resources it is produced from (may be empty).
        base_min: Floor used only when ``components`` is empty.
    """

    name: str
    label: str = ""
    icon: str = ""
    components: tuple[str, ...] = field(default_factory=tuple)
    base_min: float = DEFAULT_BASE_MIN

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("ResourceDef name must be non-empty")
        # Accept lists from config files; store a tuple so the def stays hashable.
        object.__setattr__(self, "components", tuple(self.components))
        if self.base_min <= 0:
            raise ValueError(f"base_min must be > 0, got {self.base_min}")


@dataclass(frozen=True)
class Change:
    """One value transition inside a change-group."""

    name: str
    previous: float
    next: float
    cascading: bool = False


class ConfigurationError(Exception):
    """Raised when resource declarations do not form a valid graph."""


class CycleError(ConfigurationError):
    """Raised when a resource transitively depends on itself."""

    def __init__(self, resource: str) -> None:
        self.resource = resource
        super().__init__(f"Circular dependency detected involving resource: {resource}")


class UnknownResourceError(ConfigurationError, KeyError):
    """Raised when a component names a resource that was never declared."""

    def __init__(self, resource: str) -> None:
        self.resource = resource
        super().__init__(f"Unknown resource referenced in components: {resource}")

    def __str__(self) -> str:
        return str(self.args[0])
