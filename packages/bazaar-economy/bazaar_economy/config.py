"""Startup configuration and live settings."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

REWARD_MIN_BOUNDS = (0.1, 5.0)
REWARD_MAX_BOUNDS = (0.1, 6.0)


@dataclass(frozen=True)
class EconomyConfig:
    """Immutable startup defaults for an economy.

    Attributes:
        tps: Engine ticks per second.
        seed: RNG seed (None draws one from the OS).
        start_target_value: Initial contract target value.
        contract_count: Number of contracts to keep active.
        decay_time_ms: How long the newest contract takes to decay.
        noise_interval_ms: Time between noise ticks.
        reward_min: Lower reward multiplier.
        reward_max: Upper reward multiplier.
        difficulty: Contract size multiplier.
        max_resources: Cap on distinct resource types per contract (None for no cap).
        primary_key: Store namespace.
        version: Store format tag.
    """

    tps: int = 20
    seed: int | None = None
    start_target_value: float = 50
    contract_count: int = 3
    decay_time_ms: float = 10000
    noise_interval_ms: float = 5000
    reward_min: float = 1.0
    reward_max: float = 1.4
    difficulty: float = 1.0
    max_resources: int | None = None
    primary_key: str = "bazaar"
    version: str = "1.0.0"


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(high, value))


@dataclass
class Settings:
    """User-adjustable values, persisted between sessions."""

    decay_time_ms: float = 10000
    noise_interval_ms: float = 5000
    contract_count: int = 3
    paused: bool = False
    reward_min: float = 1.0
    reward_max: float = 1.4

    @classmethod
    def from_config(cls, config: EconomyConfig) -> Settings:
        settings = cls(
            decay_time_ms=config.decay_time_ms,
            noise_interval_ms=config.noise_interval_ms,
            contract_count=config.contract_count,
        )
        settings.set_reward_min(config.reward_min)
        settings.set_reward_max(config.reward_max)
        return settings

    def set_reward_min(self, value: float) -> None:
        """Clamp to [0.1, 5]; a min above the max drags the max along."""
        value = _clamp(value, REWARD_MIN_BOUNDS)
        if value > self.reward_max:
            self.reward_max = value
        self.reward_min = value

    def set_reward_max(self, value: float) -> None:
        """Clamp to [0.1, 6]; a max below the min drags the min along."""
        value = _clamp(value, REWARD_MAX_BOUNDS)
        if value < self.reward_min:
            self.reward_min = value
        self.reward_max = value

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def update_from(self, data: Any) -> None:
        """Apply stored values, skipping any that are missing or out of range."""
        if not isinstance(data, dict):
            return
        for name in ("decay_time_ms", "noise_interval_ms"):
            value = data.get(name)
            if _is_number(value) and value > 0:
                setattr(self, name, value)
        count = data.get("contract_count")
        if isinstance(count, int) and not isinstance(count, bool) and count >= 0:
            self.contract_count = count
        paused = data.get("paused")
        if isinstance(paused, bool):
            self.paused = paused
        if _is_number(data.get("reward_max")):
            self.set_reward_max(data["reward_max"])
        if _is_number(data.get("reward_min")):
            self.set_reward_min(data["reward_min"])


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
