"""Economy - one object wiring the loop, resources, noise and contracts."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Callable

from bazaar import Engine, SnapshotError
from bazaar_contract import Contract, ContractBoard, DecayTracker, make_decay_system
from bazaar_resource import (
    DEFAULT_RESOURCES,
    Change,
    NoiseGenerator,
    ResourceDef,
    ResourceGraph,
    ResourceState,
    coerce_number,
    make_noise_system,
    tier_label,
)

from bazaar_economy.config import EconomyConfig, Settings
from bazaar_economy.views import Connection, ContractView, ResourceView, TierView

if TYPE_CHECKING:
    from bazaar import TickContext
    from bazaar_store import KeyValueStore

logger = logging.getLogger(__name__)

# Store entries, in the order they are loaded.
ENTRIES = ("settings", "resources", "contracts", "decay", "noise", "engine")


class Economy:
    """Resource economy with procurement contracts, driven by elapsed time.

    Every public write leaves the economy consistent: contracts are topped
    up to the configured count (unless paused) and, when a store is given,
    the full state is written back. Call ``advance(ms)`` from the host loop
    to drive noise and contract decay.

    Args:
        resources: Resource definitions forming an acyclic graph.
        config: Startup defaults.
        store: Optional persistence. Stored state is loaded on construction
            and changes made by other writers are applied as they arrive.
    """

    def __init__(
        self,
        resources: Iterable[ResourceDef] = DEFAULT_RESOURCES,
        config: EconomyConfig | None = None,
        store: KeyValueStore | None = None,
    ) -> None:
        self._config = config or EconomyConfig()
        self._graph = ResourceGraph(resources)
        self._settings = Settings.from_config(self._config)
        self._engine = Engine(tps=self._config.tps, seed=self._config.seed)
        self._state = ResourceState(self._graph)
        self._noise = NoiseGenerator(self._state, interval_ms=self._settings.noise_interval_ms)
        self._board = ContractBoard(
            self._state,
            start_target_value=self._config.start_target_value,
            target_count=self._settings.contract_count,
            difficulty=self._config.difficulty,
            reward_min=self._settings.reward_min,
            reward_max=self._settings.reward_max,
            max_resources=self._config.max_resources,
        )
        self._decay = DecayTracker(self._board, self._settings.decay_time_ms)
        self._engine.add_system(make_noise_system(self._noise))
        self._engine.add_system(make_decay_system(self._decay, self._on_decay))

        self._restorers: dict[str, Callable[[dict[str, Any]], None]] = {
            "settings": self._restore_settings,
            "resources": self._state.restore,
            "contracts": self._board.restore,
            "decay": self._decay.restore,
            "noise": self._noise.restore,
            "engine": self._restore_engine,
        }

        self._store = store
        if store is not None:
            for entry in ENTRIES:
                data = store.get(entry)
                if data is not None:
                    self._apply(entry, data)
            for entry in ENTRIES:
                store.subscribe(entry, self._on_external_change)
        self._apply_settings()
        self._maintain()
        self._save()

    # -- Reads --

    @property
    def config(self) -> EconomyConfig:
        return self._config

    @property
    def settings(self) -> Settings:
        return replace(self._settings)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def graph(self) -> ResourceGraph:
        return self._graph

    def values(self) -> dict[str, Any]:
        return self._state.values

    def resource(self, name: str) -> ResourceView:
        defn = self._graph.get(name)
        return ResourceView(
            name=name,
            label=defn.label,
            icon=defn.icon,
            tier=self._graph.tier(name),
            components=defn.components,
            value=self._state.value(name),
            minimum=self._state.minimum(name),
            history=tuple(self._state.history(name)),
        )

    def by_tier(self) -> list[TierView]:
        """Resources grouped by tier, lowest tier first."""
        grouped: dict[int, list[ResourceView]] = {}
        for name in self._graph.tier_order():
            view = self.resource(name)
            grouped.setdefault(view.tier, []).append(view)
        return [
            TierView(tier=tier, label=tier_label(tier), resources=tuple(views))
            for tier, views in sorted(grouped.items())
        ]

    def connections(self) -> list[Connection]:
        return [Connection(source, target) for source, target in self._graph.edges()]

    @property
    def contracts(self) -> list[Contract]:
        """Active contracts, newest first."""
        return self._board.contracts

    def contract_views(self) -> list[ContractView]:
        decaying = self._board.newest
        return [
            ContractView(
                contract=contract,
                market_value=self._board.market_value(contract),
                decaying=decaying is not None and contract.id == decaying.id,
                decay_progress=self._decay.progress(contract.id),
            )
            for contract in self._board.contracts
        ]

    @property
    def decaying_contract(self) -> Contract | None:
        return self._board.newest

    def decay_progress(self, contract_id: int) -> float:
        return self._decay.progress(contract_id)

    def market_value(self, contract_id: int) -> float | None:
        contract = self._board.get(contract_id)
        if contract is None:
            return None
        return self._board.market_value(contract)

    @property
    def current_target_value(self) -> float:
        return self._board.current_target_value

    @property
    def noise_active(self) -> bool:
        return self._noise.active

    @property
    def ignoring_minimum(self) -> bool:
        return self._state.ignore_minimum

    @property
    def can_undo(self) -> bool:
        return self._state.can_undo

    @property
    def contract_difficulty(self) -> float:
        return self._board.difficulty

    @property
    def paused(self) -> bool:
        return self._settings.paused

    # -- Resource writes --

    def set_resource_value(self, name: str, value: Any) -> list[Change]:
        """Set a resource; returns the applied change-group (empty if ignored)."""
        changes = self._state.set_value(name, value)
        self._save()
        return changes

    def undo(self) -> None:
        self._state.undo()
        self._save()

    def toggle_noise(self) -> None:
        self._noise.toggle(self._engine.random, self.paused)
        logger.info("noise %s", "on" if self._noise.active else "off")
        self._save()

    def toggle_ignore_minimum(self) -> None:
        self._state.toggle_ignore_minimum()
        self._save()

    def reset_resources(self) -> None:
        self._state.reset()
        self._save()

    # -- Contract writes --

    def reset_contracts(self) -> None:
        self._decay.clear()
        self._board.reset(self._engine.random, self.paused)
        self._save()

    def reset(self) -> None:
        """Reset resources and contracts together."""
        self._state.reset()
        self._decay.clear()
        self._board.reset(self._engine.random, self.paused)
        logger.info("economy reset")
        self._save()

    def complete_contract(self, contract_id: int) -> Contract | None:
        contract = self._board.complete(contract_id)
        if contract is not None:
            self._maintain()
            self._save()
        return contract

    def decay_contract(self, contract_id: int) -> Contract | None:
        contract = self._board.decay(contract_id)
        if contract is not None:
            self._maintain()
            self._save()
        return contract

    def set_contract_count(self, count: Any) -> None:
        """Keep *count* contracts active; anything but a whole number >= 0 is ignored."""
        number = coerce_number(count)
        if not isinstance(number, int) or number < 0:
            logger.debug("ignoring contract count %r", count)
            return
        self._board.set_target_count(number)
        self._settings.contract_count = number
        self._maintain()
        self._save()

    def set_contract_difficulty(self, difficulty: Any) -> None:
        number = _positive(difficulty, "contract difficulty")
        if number is None:
            return
        self._board.set_difficulty(number)
        self._maintain()
        self._save()

    def set_reward_min(self, value: Any) -> None:
        number = _number(value, "reward min")
        if number is None:
            return
        self._settings.set_reward_min(number)
        self._board.set_reward_range(self._settings.reward_min, self._settings.reward_max)
        self._save()

    def set_reward_max(self, value: Any) -> None:
        number = _number(value, "reward max")
        if number is None:
            return
        self._settings.set_reward_max(number)
        self._board.set_reward_range(self._settings.reward_min, self._settings.reward_max)
        self._save()

    # -- Timing --

    def set_decay_time(self, ms: Any) -> None:
        number = _positive(ms, "decay time")
        if number is None:
            return
        self._decay.set_duration(number)
        self._settings.decay_time_ms = number
        self._save()

    def set_noise_interval(self, ms: Any) -> None:
        number = _positive(ms, "noise interval")
        if number is None:
            return
        self._noise.set_interval(number, self._engine.random, self.paused)
        self._settings.noise_interval_ms = number
        self._save()

    def pause(self) -> None:
        if self._settings.paused:
            return
        self._settings.paused = True
        self._engine.pause()
        logger.info("paused")
        self._save()

    def resume(self) -> None:
        """Unpause, top up contracts and, if noise is on, tick it at once."""
        if not self._settings.paused:
            return
        self._settings.paused = False
        self._engine.resume()
        self._maintain()
        if self._noise.active:
            self._noise.start(self._engine.random)
        logger.info("resumed")
        self._save()

    def toggle_pause(self) -> None:
        if self._settings.paused:
            self.resume()
        else:
            self.pause()

    def advance(self, ms: Any) -> int:
        """Let *ms* of simulated time pass. Returns the number of ticks run."""
        number = coerce_number(ms)
        if number is None or number < 0:
            logger.debug("ignoring advance by %r", ms)
            return 0
        ticks = self._engine.advance(number)
        if ticks:
            self._save()
        return ticks

    # -- Internals --

    def _maintain(self) -> None:
        self._board.maintain(self._engine.random, self.paused)

    def _on_decay(self, ctx: TickContext, contract: Contract) -> None:
        self._board.maintain(ctx.random, self.paused)

    def _apply_settings(self) -> None:
        s = self._settings
        self._board.set_target_count(s.contract_count)
        self._board.set_reward_range(s.reward_min, s.reward_max)
        self._decay.set_duration(s.decay_time_ms)
        self._noise.set_interval(s.noise_interval_ms, self._engine.random, restart=False)
        if s.paused:
            self._engine.pause()
        else:
            self._engine.resume()

    def _restore_settings(self, data: dict[str, Any]) -> None:
        settings = Settings.from_config(self._config)
        settings.update_from(data)
        self._settings = settings

    def _restore_engine(self, data: dict[str, Any]) -> None:
        if not data:
            return
        try:
            self._engine.restore(data)
        except (SnapshotError, KeyError, TypeError, ValueError) as exc:
            logger.warning("ignoring stored engine state: %s", exc)

    def _apply(self, entry: str, data: Any) -> None:
        if not isinstance(data, dict):
            if data is not None:
                logger.warning("ignoring stored %s: expected an object, got %r", entry, data)
            data = {}
        self._restorers[entry](data)

    def _on_external_change(self, entry: str, value: Any) -> None:
        logger.info("%s changed in storage, reloading", entry)
        self._apply(entry, value)
        self._apply_settings()
        self._maintain()
        self._save()

    def snapshot(self) -> dict[str, Any]:
        """Everything the store holds, keyed by entry."""
        return {
            "settings": self._settings.to_dict(),
            "resources": self._state.snapshot(),
            "contracts": self._board.snapshot(),
            "decay": self._decay.snapshot(),
            "noise": self._noise.snapshot(),
            "engine": self._engine.snapshot(),
        }

    def _save(self) -> None:
        if self._store is None:
            return
        for entry, data in self.snapshot().items():
            self._store.set(entry, data)


def _number(value: Any, what: str) -> float | None:
    number = coerce_number(value)
    if number is None:
        logger.debug("ignoring %s %r", what, value)
    return number


def _positive(value: Any, what: str) -> float | None:
    number = coerce_number(value)
    if number is None or number <= 0:
        logger.debug("ignoring %s %r", what, value)
        return None
    return number
