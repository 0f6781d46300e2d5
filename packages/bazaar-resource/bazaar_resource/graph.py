"""ResourceGraph - static dependency graph with derived tiers."""
from __future__ import annotations

from collections.abc import Iterable

from bazaar_resource.types import (
    ConfigurationError,
    CycleError,
    ResourceDef,
    UnknownResourceError,
)

TIER_LABELS = {
    1: "Basic",
    2: "Intermediate",
    3: "Advanced",
}


class ResourceGraph:
    """Validated, immutable view over a set of resource declarations.

    Tiers are resolved depth-first with memoization; a resource that is met
    again while it is still being resolved is a cycle. The reverse adjacency
    (component -> consumers) is built alongside for floor cascades.
    """

    def __init__(self, definitions: Iterable[ResourceDef]) -> None:
        self._definitions: dict[str, ResourceDef] = {}
        for defn in definitions:
            if defn.name in self._definitions:
                raise ConfigurationError(f"Duplicate resource name: {defn.name}")
            self._definitions[defn.name] = defn

        self._tiers: dict[str, int] = {}
        for name in self._definitions:
            self._resolve(name, set())

        self._dependents: dict[str, tuple[str, ...]] = {}
        consumers: dict[str, list[str]] = {name: [] for name in self._definitions}
        for defn in self._definitions.values():
            for comp in defn.components:
                consumers[comp].append(defn.name)
        for name, names in consumers.items():
            self._dependents[name] = tuple(names)

        self._tier_order = tuple(
            sorted(self._definitions, key=lambda n: self._tiers[n])
        )

    def _resolve(self, name: str, resolving: set[str]) -> int:
        if name in self._tiers:
            return self._tiers[name]
        defn = self._definitions.get(name)
        if defn is None:
            raise UnknownResourceError(name)
        if name in resolving:
            raise CycleError(name)
        if not defn.components:
            self._tiers[name] = 1
            return 1
        resolving.add(name)
        tier = 1 + max(self._resolve(c, resolving) for c in defn.components)
        resolving.discard(name)
        self._tiers[name] = tier
        return tier

    # -- Lookups --

    def get(self, name: str) -> ResourceDef:
        """Look up a declaration. Raises KeyError if not declared."""
        if name not in self._definitions:
            raise KeyError(name)
        return self._definitions[name]

    def has(self, name: str) -> bool:
        return name in self._definitions

    def names(self) -> list[str]:
        """Resource names in declaration order."""
        return list(self._definitions)

    def definitions(self) -> list[ResourceDef]:
        return list(self._definitions.values())

    def tier(self, name: str) -> int:
        if name not in self._tiers:
            raise KeyError(name)
        return self._tiers[name]

    def max_tier(self) -> int:
        return max(self._tiers.values(), default=0)

    def components(self, name: str) -> tuple[str, ...]:
        return self.get(name).components

    def dependents(self, name: str) -> tuple[str, ...]:
        """Resources that consume *name* directly."""
        if name not in self._dependents:
            raise KeyError(name)
        return self._dependents[name]

    def tier_order(self) -> tuple[str, ...]:
        """All names, dependencies before dependents (stable within a tier)."""
        return self._tier_order

    def edges(self) -> list[tuple[str, str]]:
        """(component, consumer) pairs in declaration order."""
        return [
            (comp, defn.name)
            for defn in self._definitions.values()
            for comp in defn.components
        ]

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions


def tier_label(tier: int) -> str:
    """Display label for a tier; tiers past the named ones are numbered."""
    return TIER_LABELS.get(tier, f"Tier {tier}")
