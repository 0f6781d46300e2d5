"""bazaar - A fixed-timestep loop for driving economy simulations."""

from bazaar.clock import Clock
from bazaar.engine import Engine
from bazaar.types import SnapshotError, System, TickContext

__all__ = [
    "Engine",
    "Clock",
    "TickContext",
    "System",
    "SnapshotError",
]
