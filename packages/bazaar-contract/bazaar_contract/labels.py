"""LabelPool - hands out contract names without repeats."""
from __future__ import annotations

import random
from collections.abc import Iterable, Sequence

CONTRACT_LABELS: tuple[str, ...] = (
    "Harbor Expansion",
    "Rail Spur",
    "Municipal Tender",
    "Grid Upgrade",
    "Army Surplus",
    "Shipyard Order",
    "Bridge Retrofit",
    "Factory Refit",
    "Export Deal",
    "Hospital Wing",
    "Pipeline Bid",
    "School Supplies",
    "Mining Charter",
    "Trade Fair",
    "Relief Convoy",
    "Colony Supply",
    "Rush Order",
    "Stadium Build",
)


class LabelPool:
    """Fixed label list plus the set currently held by live contracts.

    When every label is held, ``acquire`` falls back to ``"Contract {serial}"``.
    """

    def __init__(self, labels: Sequence[str] = CONTRACT_LABELS) -> None:
        self._labels = tuple(dict.fromkeys(labels))
        self._in_use: set[str] = set()

    @property
    def in_use(self) -> frozenset[str]:
        return frozenset(self._in_use)

    def available(self) -> list[str]:
        return [label for label in self._labels if label not in self._in_use]

    def acquire(self, rng: random.Random, serial: int) -> str:
        free = self.available()
        label = rng.choice(free) if free else f"Contract {serial}"
        self._in_use.add(label)
        return label

    def release(self, label: str) -> None:
        self._in_use.discard(label)

    def claim(self, labels: Iterable[str]) -> None:
        """Mark *labels* as held (used when restoring live contracts)."""
        self._in_use.update(labels)

    def clear(self) -> None:
        self._in_use.clear()
