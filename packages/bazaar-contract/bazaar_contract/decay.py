"""Decay countdown for the newest contract."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from bazaar_contract.board import ContractBoard
from bazaar_contract.types import Contract

if TYPE_CHECKING:
    from bazaar import TickContext

_EPSILON = 1e-9


class DecayTracker:
    """Advances decay progress (0..1) of the board's newest contract.

    Progress is kept per contract id and stored as a fraction, so a
    contract that stops being the newest keeps its progress, and a new
    duration applies to the remaining fraction only.
    """

    def __init__(self, board: ContractBoard, duration_ms: float = 10000) -> None:
        if duration_ms <= 0:
            raise ValueError(f"duration_ms must be > 0, got {duration_ms}")
        self._board = board
        self._duration_ms = duration_ms
        self._progress: dict[int, float] = {}

    @property
    def duration_ms(self) -> float:
        return self._duration_ms

    def set_duration(self, duration_ms: float) -> None:
        if duration_ms <= 0:
            raise ValueError(f"duration_ms must be > 0, got {duration_ms}")
        self._duration_ms = duration_ms

    @property
    def target(self) -> Contract | None:
        return self._board.newest

    def progress(self, contract_id: int) -> float:
        return self._progress.get(contract_id, 0.0)

    def remaining_ms(self, contract_id: int) -> float:
        return (1.0 - self.progress(contract_id)) * self._duration_ms

    def _prune(self) -> None:
        live = {c.id for c in self._board.contracts}
        for cid in [cid for cid in self._progress if cid not in live]:
            del self._progress[cid]

    def advance(self, dt_ms: float) -> Contract | None:
        """Move the countdown on; returns the contract if it just decayed."""
        self._prune()
        target = self._board.newest
        if target is None:
            return None
        progress = min(1.0, self.progress(target.id) + dt_ms / self._duration_ms)
        # Tolerate float drift from summing many small steps.
        if progress < 1.0 - _EPSILON:
            self._progress[target.id] = progress
            return None
        self._progress.pop(target.id, None)
        return self._board.decay(target.id)

    def clear(self) -> None:
        self._progress.clear()

    def snapshot(self) -> dict[str, Any]:
        return {
            "duration_ms": self._duration_ms,
            "progress": {str(cid): p for cid, p in self._progress.items()},
        }

    def restore(self, data: dict[str, Any]) -> None:
        self._progress.clear()
        raw = data.get("progress")
        for key, value in (raw.items() if isinstance(raw, dict) else ()):
            try:
                cid = int(key)
                fraction = float(value)
            except (TypeError, ValueError):
                continue
            if 0.0 <= fraction < 1.0:
                self._progress[cid] = fraction
        duration = data.get("duration_ms")
        if isinstance(duration, (int, float)) and not isinstance(duration, bool) and duration > 0:
            self._duration_ms = duration
        self._prune()


def make_decay_system(
    tracker: DecayTracker,
    on_decay: Callable[[TickContext, Contract], None] | None = None,
) -> Callable[[TickContext], None]:
    """Return a system that runs the decay countdown each tick.

    ``on_decay(ctx, contract)`` fires after a contract decays.
    """

    def decay_system(ctx: TickContext) -> None:
        decayed = tracker.advance(ctx.dt_ms)
        if decayed is not None and on_decay is not None:
            on_decay(ctx, decayed)

    return decay_system
