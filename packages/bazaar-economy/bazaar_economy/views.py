"""Read-only views handed to a presentation layer."""
from __future__ import annotations

from dataclasses import dataclass

from bazaar_contract import Contract


@dataclass(frozen=True)
class ResourceView:
    name: str
    label: str
    icon: str
    tier: int
    components: tuple[str, ...]
    value: float
    minimum: float
    history: tuple[float, ...]

    @property
    def can_undo(self) -> bool:
        return len(self.history) > 1


@dataclass(frozen=True)
class TierView:
    tier: int
    label: str
    resources: tuple[ResourceView, ...]


@dataclass(frozen=True)
class Connection:
    """A component feeding a consumer, for drawing the dependency diagram."""

    source: str
    target: str


@dataclass(frozen=True)
class ContractView:
    contract: Contract
    market_value: float
    decaying: bool
    decay_progress: float
