"""ResourceState - live values, floor enforcement, history and undo."""
from __future__ import annotations

import heapq
import logging
import math
from typing import Any, Callable, Union

from bazaar_resource.graph import ResourceGraph
from bazaar_resource.types import Change

logger = logging.getLogger(__name__)

Number = Union[int, float]
ValueOrUpdater = Union[Number, str, Callable[[Number], Any]]


def coerce_number(raw: Any) -> Number | None:
    """Return *raw* as a finite number, or None if it is not one.

    Numeric strings are parsed; integral results come back as ``int``.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            raw = float(text)
        except ValueError:
            return None
    if not isinstance(raw, (int, float)):
        return None
    if not math.isfinite(raw):
        return None
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    return raw


class ResourceState:
    """Owns resource values, per-resource history and the undo log.

    Unless ``ignore_minimum`` is set, every value written through ``set_value``
    stays at or above its floor: ``base_min`` for base resources, otherwise
    the sum of the current values of its components. Raising a value raises
    any dependent floors, and those dependents are lifted in the same
    change-group. ``assign`` is the one write that may leave a value below
    its floor.
    """

    def __init__(self, graph: ResourceGraph, ignore_minimum: bool = False) -> None:
        self._graph = graph
        self._ignore_minimum = ignore_minimum
        self._values: dict[str, Number] = {}
        self._histories: dict[str, list[Number]] = {}
        self._log: list[list[Change]] = []
        self.reset()

    @property
    def graph(self) -> ResourceGraph:
        return self._graph

    # -- Reads --

    @property
    def values(self) -> dict[str, Number]:
        return dict(self._values)

    def value(self, name: str) -> Number:
        return self._values[name]

    def history(self, name: str) -> list[Number]:
        return list(self._histories.get(name, []))

    @property
    def histories(self) -> dict[str, list[Number]]:
        return {name: list(hist) for name, hist in self._histories.items()}

    @property
    def action_log(self) -> list[list[Change]]:
        return [list(group) for group in self._log]

    @property
    def can_undo(self) -> bool:
        return bool(self._log)

    @property
    def ignore_minimum(self) -> bool:
        return self._ignore_minimum

    def compute_min(self, name: str, values: dict[str, Number] | None = None) -> Number:
        """Floor for *name* evaluated against *values* (live values by default)."""
        defn = self._graph.get(name)
        if not defn.components:
            return defn.base_min
        if values is None:
            values = self._values
        return sum(values.get(c, 0) for c in defn.components)

    def minimum(self, name: str) -> Number:
        return self.compute_min(name)

    # -- Mutation --

    def set_value(self, name: str, value: ValueOrUpdater) -> list[Change]:
        """Set *name* to *value*, or to ``value(previous)`` when callable.

        Returns the change-group that was applied; an empty list means the
        input was ignored (unknown resource or not a finite number).
        """
        if not self._graph.has(name):
            logger.debug("ignoring write to unknown resource %r", name)
            return []
        previous = self._values[name]
        proposed = value(previous) if callable(value) else value
        next_value = coerce_number(proposed)
        if next_value is None:
            logger.debug("ignoring non-numeric value %r for %s", proposed, name)
            return []

        if not self._ignore_minimum:
            floor = self.compute_min(name)
            if next_value < floor:
                next_value = floor

        self._values[name] = next_value
        group = [Change(name, previous, next_value)]
        if not self._ignore_minimum and next_value > previous:
            group.extend(self._cascade(name))

        for change in group:
            self._histories.setdefault(change.name, []).append(change.next)
        self._log.append(group)
        return group

    def assign(self, name: str, value: Any) -> list[Change]:
        """Write *value* directly, skipping the floor clamp and the undo log.

        Only *name* itself may end up below its floor: a raise still lifts
        dependents while floors are enforced. Each change gets a history
        sample. Returns the changes, empty when the input was ignored.
        """
        if not self._graph.has(name):
            logger.debug("ignoring assignment to unknown resource %r", name)
            return []
        next_value = coerce_number(value)
        if next_value is None:
            logger.debug("ignoring non-numeric assignment %r for %s", value, name)
            return []
        previous = self._values[name]
        self._values[name] = next_value
        changes = [Change(name, previous, next_value)]
        if not self._ignore_minimum and next_value > previous:
            changes.extend(self._cascade(name))
        for change in changes:
            self._histories.setdefault(change.name, []).append(change.next)
        return changes

    def _cascade(self, origin: str) -> list[Change]:
        # Dependents always sit on a higher tier than their components, so
        # draining in tier order sees every raise to a resource before it is
        # expanded, and each resource is expanded once.
        order = {name: i for i, name in enumerate(self._graph.tier_order())}
        queue = [(self._graph.tier(origin), order[origin], origin)]
        queued = {origin}
        changes: list[Change] = []
        while queue:
            _, _, current = heapq.heappop(queue)
            for dep in self._graph.dependents(current):
                floor = self.compute_min(dep)
                before = self._values[dep]
                if before < floor:
                    self._values[dep] = floor
                    changes.append(Change(dep, before, floor, cascading=True))
                    if dep not in queued:
                        queued.add(dep)
                        heapq.heappush(queue, (self._graph.tier(dep), order[dep], dep))
        return changes

    def undo(self) -> None:
        """Revert the most recent change-group. No-op when the log is empty."""
        if not self._log:
            return
        group = self._log.pop()
        for change in reversed(group):
            self._values[change.name] = change.previous
            hist = self._histories.get(change.name)
            if hist and hist[-1] == change.next:
                hist.pop()

    def set_ignore_minimum(self, flag: bool) -> None:
        was_ignoring = self._ignore_minimum
        self._ignore_minimum = bool(flag)
        if was_ignoring and not self._ignore_minimum:
            raised = self.enforce_minimums()
            logger.info("minimums enforced again, %d resource(s) raised", len(raised))

    def toggle_ignore_minimum(self) -> None:
        self.set_ignore_minimum(not self._ignore_minimum)

    def enforce_minimums(self) -> list[list[Change]]:
        """Lift every value below its floor, one logged group per raise.

        Walks dependencies before dependents so each floor is computed from
        already-corrected inputs.
        """
        groups: list[list[Change]] = []
        if self._ignore_minimum:
            return groups
        for name in self._graph.tier_order():
            floor = self.compute_min(name)
            before = self._values[name]
            if before < floor:
                self._values[name] = floor
                self._histories.setdefault(name, []).append(floor)
                group = [Change(name, before, floor)]
                self._log.append(group)
                groups.append(group)
        return groups

    def initial_values(self) -> dict[str, Number]:
        """Fresh snapshot: every resource at its floor, settled bottom-up."""
        fresh: dict[str, Number] = {}
        for name in self._graph.tier_order():
            fresh[name] = self.compute_min(name, fresh)
        return fresh

    def reset(self) -> None:
        self._values = self.initial_values()
        self._histories = {name: [v] for name, v in self._values.items()}
        self._log = []

    # -- Snapshot / restore --

    def snapshot(self) -> dict[str, Any]:
        return {
            "ignore_minimum": self._ignore_minimum,
            "values": dict(self._values),
            "histories": {name: list(h) for name, h in self._histories.items()},
            "log": [
                [
                    {
                        "name": c.name,
                        "previous": c.previous,
                        "next": c.next,
                        "cascading": c.cascading,
                    }
                    for c in group
                ]
                for group in self._log
            ],
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Load a snapshot, keeping fresh defaults for anything unusable.

        A complete snapshot is loaded as saved, including values a contract
        left below their floor. When any value had to be filled in, floors
        are re-asserted unless minimums are ignored.
        """
        fresh = self.initial_values()
        raw_values = data.get("values")
        raw_histories = data.get("histories")
        if not isinstance(raw_values, dict):
            raw_values = {}
        if not isinstance(raw_histories, dict):
            raw_histories = {}

        values: dict[str, Number] = {}
        histories: dict[str, list[Number]] = {}
        filled = False
        for name in self._graph.names():
            loaded = coerce_number(raw_values.get(name))
            if loaded is None:
                filled = True
                loaded = fresh[name]
            values[name] = loaded
            hist = raw_histories.get(name)
            samples = (
                [coerce_number(v) for v in hist] if isinstance(hist, list) else []
            )
            if not samples or any(s is None for s in samples):
                samples = [values[name]]
            histories[name] = samples

        self._values = values
        self._histories = histories
        self._log = _parse_log(data.get("log"), self._graph)
        self._ignore_minimum = data.get("ignore_minimum") is True
        if filled and not self._ignore_minimum:
            self.enforce_minimums()


def _parse_log(raw: Any, graph: ResourceGraph) -> list[list[Change]]:
    if not isinstance(raw, list):
        return []
    log: list[list[Change]] = []
    for raw_group in raw:
        if not isinstance(raw_group, list):
            continue
        group: list[Change] = []
        for entry in raw_group:
            if not isinstance(entry, dict):
                continue
            name = entry.get("name")
            if not isinstance(name, str) or not graph.has(name):
                continue
            previous = coerce_number(entry.get("previous"))
            next_value = coerce_number(entry.get("next"))
            if previous is None or next_value is None:
                continue
            group.append(
                Change(name, previous, next_value, bool(entry.get("cascading")))
            )
        if group:
            log.append(group)
    return log
