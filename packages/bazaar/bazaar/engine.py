"""Engine - fixed-timestep loop, pause control, and lifecycle hooks."""

import logging
import os
import random
from typing import Any, Callable

from bazaar.clock import Clock
from bazaar.types import SnapshotError, System, TickContext

logger = logging.getLogger(__name__)

_SNAPSHOT_VERSION = 1


class Engine:
    """Runs registered systems once per tick on a shared clock and RNG.

    While paused the clock keeps counting but no system runs, so anything a
    system accumulates between ticks (intervals, decay progress) is frozen
    rather than reset.
    """

    def __init__(self, tps: int = 20, seed: int | None = None) -> None:
        self._clock = Clock(tps)
        self._systems: list[System] = []
        self._start_hooks: list[Callable[[TickContext], None]] = []
        self._stop_hooks: list[Callable[[TickContext], None]] = []
        self._stop_requested: bool = False
        self._paused: bool = False
        self._carry_ms: float = 0.0

        if seed is None:
            seed = int.from_bytes(os.urandom(8), "big")
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def random(self) -> random.Random:
        return self._rng

    @property
    def paused(self) -> bool:
        return self._paused

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def add_system(self, system: System) -> None:
        self._systems.append(system)

    def on_start(self, hook: Callable[[TickContext], None]) -> None:
        self._start_hooks.append(hook)

    def on_stop(self, hook: Callable[[TickContext], None]) -> None:
        self._stop_hooks.append(hook)

    def _request_stop(self) -> None:
        self._stop_requested = True

    def _tick(self) -> None:
        self._clock.advance()
        if self._paused:
            return
        ctx = self._clock.context(self._request_stop, self._rng)
        for system in self._systems:
            system(ctx)
            if self._stop_requested:
                break

    def _fire(self, hooks: list[Callable[[TickContext], None]]) -> None:
        ctx = self._clock.context(self._request_stop, self._rng)
        for hook in hooks:
            hook(ctx)

    def step(self) -> None:
        self._stop_requested = False
        self._tick()

    def run(self, n: int) -> None:
        self._stop_requested = False
        self._fire(self._start_hooks)

        for _ in range(n):
            self._tick()
            if self._stop_requested:
                break

        self._fire(self._stop_hooks)

    def advance(self, ms: float) -> int:
        """Run as many whole ticks as fit into *ms*, carrying the remainder.

        Returns the number of ticks executed.
        """
        if ms < 0:
            raise ValueError(f"ms must be >= 0, got {ms}")
        self._stop_requested = False
        self._carry_ms += ms
        dt = self._clock.dt_ms
        ticks = 0
        while self._carry_ms >= dt:
            self._carry_ms -= dt
            self._tick()
            ticks += 1
            if self._stop_requested:
                self._carry_ms = 0.0
                break
        return ticks

    def snapshot(self) -> dict[str, Any]:
        return {
            "version": _SNAPSHOT_VERSION,
            "tick_number": self._clock.tick_number,
            "tps": self._clock.tps,
            "seed": self._seed,
            "paused": self._paused,
            "rng_state": _serialize_rng_state(self._rng.getstate()),
        }

    def restore(self, data: dict[str, Any]) -> None:
        version = data.get("version")
        if version != _SNAPSHOT_VERSION:
            raise SnapshotError(
                f"Unsupported snapshot version {version!r}, expected {_SNAPSHOT_VERSION}"
            )

        snap_tps = data.get("tps")
        if snap_tps != self._clock.tps:
            raise SnapshotError(
                f"TPS mismatch: snapshot has {snap_tps}, engine has {self._clock.tps}"
            )

        self._clock.reset(data["tick_number"])
        self._seed = data["seed"]
        self._paused = bool(data.get("paused", False))
        self._carry_ms = 0.0
        self._rng.setstate(_deserialize_rng_state(data["rng_state"]))
        logger.debug("engine restored at tick %d", self._clock.tick_number)


def _serialize_rng_state(state: tuple[int, tuple[int, ...], float | None]) -> list[Any]:
    """Convert Random.getstate() tuple to JSON-compatible list.

    The state format (version, internalstate, gauss_next) is the
    CPython Mersenne Twister representation.
    """
    version, internalstate, gauss_next = state
    return [version, list(internalstate), gauss_next]


def _deserialize_rng_state(data: list[Any]) -> tuple[int, tuple[int, ...], float | None]:
    """Convert JSON list back to Random.setstate() tuple."""
    version, internalstate, gauss_next = data
    return (version, tuple(internalstate), gauss_next)
