"""Shared type aliases and protocols for the bazaar loop."""

from __future__ import annotations

import random as _random
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True, slots=True)
class TickContext:
    tick_number: int
    dt_ms: float
    elapsed_ms: float
    request_stop: Callable[[], None]
    random: _random.Random


class SnapshotError(Exception):
    """Raised on restore failures (version or tick-rate mismatch)."""


System = Callable[[TickContext], None]
