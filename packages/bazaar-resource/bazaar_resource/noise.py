"""Economic noise - periodic +/-1 nudges biased by distance from the floor."""
from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Any, Callable

from bazaar_resource.state import Number, ResourceState, coerce_number

if TYPE_CHECKING:
    from bazaar import TickContext

logger = logging.getLogger(__name__)

SKIP_CHANCE = 0.4
STEP = 1
ABSOLUTE_FLOOR = 1


class NoiseGenerator:
    """Perturbs every resource once per interval while active.

    Each resource independently skips with 40% probability. Otherwise it
    moves one step: while floors are enforced it is pulled down harder the
    further it sits above its floor; while they are ignored it is pulled
    back toward its computed floor but never below 1. Writes go through
    ``ResourceState.set_value`` and therefore land in the undo log.
    """

    def __init__(
        self,
        state: ResourceState,
        interval_ms: float = 5000,
        active: bool = False,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be > 0, got {interval_ms}")
        self._state = state
        self._interval_ms = interval_ms
        self._active = active
        self._elapsed_ms = 0.0

    @property
    def active(self) -> bool:
        return self._active

    @property
    def interval_ms(self) -> float:
        return self._interval_ms

    @property
    def elapsed_ms(self) -> float:
        return self._elapsed_ms

    def set_active(self, flag: bool, rng: random.Random, paused: bool = False) -> None:
        """Switch noise on or off. Switching on ticks once immediately."""
        was_active = self._active
        self._active = bool(flag)
        if self._active and not was_active and not paused:
            self.start(rng)

    def toggle(self, rng: random.Random, paused: bool = False) -> None:
        self.set_active(not self._active, rng, paused)

    def set_interval(
        self,
        interval_ms: float,
        rng: random.Random,
        paused: bool = False,
        restart: bool = True,
    ) -> None:
        """Change the interval; a running generator restarts on the new one.

        With ``restart=False`` the countdown carries on and nothing ticks.
        """
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be > 0, got {interval_ms}")
        self._interval_ms = interval_ms
        if restart and self._active and not paused:
            self.start(rng)

    def start(self, rng: random.Random) -> None:
        """Tick now and restart the interval countdown."""
        self._elapsed_ms = 0.0
        self.tick(rng)

    def advance(self, dt_ms: float, rng: random.Random) -> None:
        if not self._active:
            return
        self._elapsed_ms += dt_ms
        # Overshoot carries into the next interval.
        while self._elapsed_ms >= self._interval_ms:
            self._elapsed_ms -= self._interval_ms
            self.tick(rng)

    def adjustment(self, name: str, rng: random.Random) -> Number | None:
        """Next value for *name* this tick, or None to leave it alone."""
        if rng.random() < SKIP_CHANCE:
            return None
        value = self._state.value(name)
        floor = self._state.minimum(name)

        if self._state.ignore_minimum:
            distance = abs(value - floor) / floor if floor > 0 else 0.0
            p_toward = 0.5 + 0.4 * distance
            toward = -STEP if value > floor else STEP
            direction = toward if rng.random() < p_toward else -toward
            target = value + direction
            if target < ABSOLUTE_FLOOR:
                target = ABSOLUTE_FLOOR
        else:
            above = max(0.0, (value - floor) / floor) if floor > 0 else 0.0
            p_down = 0.1 + 0.8 * above
            direction = -STEP if rng.random() < p_down else STEP
            target = value + direction
            if target < floor:
                target = floor

        if target == value:
            return None
        return target

    def tick(self, rng: random.Random) -> list[str]:
        """Evaluate every resource once. Returns the names that moved."""
        moved: list[str] = []
        for name in self._state.graph.tier_order():
            target = self.adjustment(name, rng)
            if target is None:
                continue
            if self._state.set_value(name, target):
                moved.append(name)
        logger.debug("noise tick moved %d resource(s)", len(moved))
        return moved

    def snapshot(self) -> dict[str, Any]:
        return {
            "active": self._active,
            "interval_ms": self._interval_ms,
            "elapsed_ms": self._elapsed_ms,
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Load a snapshot without ticking; unusable fields keep current values."""
        self._active = bool(data.get("active", self._active))
        interval = coerce_number(data.get("interval_ms"))
        if interval is not None and interval > 0:
            self._interval_ms = interval
        elapsed = coerce_number(data.get("elapsed_ms"))
        self._elapsed_ms = float(elapsed) if elapsed is not None and elapsed >= 0 else 0.0


def make_noise_system(noise: NoiseGenerator) -> Callable[[TickContext], None]:
    """Return a system that feeds elapsed time into *noise*."""

    def noise_system(ctx: TickContext) -> None:
        noise.advance(ctx.dt_ms, ctx.random)

    return noise_system
