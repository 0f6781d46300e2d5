"""Core data types for procurement contracts."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RewardRange:
    """Reward multiplier bounds a contract was generated under."""

    min: float
    max: float


@dataclass(frozen=True)
class Contract:
    """Immutable procurement contract.

    Attributes:
        id: Unique, increasing identifier (later contracts have larger ids).
        label: Display name.
        value: Market value of ``resources`` when the contract was generated.
        reward: Payout for completing the contract.
        resources: Required quantities (resource_name -> units).
        difficulty: Difficulty multiplier in effect at generation.
        reward_range: Multiplier bounds the reward was drawn from.
        max_resources: Cap on distinct resource types (None for no cap).
    """

    id: int
    label: str
    value: float
    reward: int
    resources: dict[str, int] = field(default_factory=dict)
    difficulty: float = 1.0
    reward_range: RewardRange = RewardRange(1.0, 1.4)
    max_resources: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "value": self.value,
            "reward": self.reward,
            "resources": dict(self.resources),
            "difficulty": self.difficulty,
            "reward_range": {"min": self.reward_range.min, "max": self.reward_range.max},
            "max_resources": self.max_resources,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Contract:
        """Build a contract from ``to_dict`` output. Raises on malformed data."""
        bounds = data.get("reward_range") or {}
        resources = data["resources"]
        if not isinstance(resources, dict):
            raise TypeError("resources must be a mapping")
        return cls(
            id=int(data["id"]),
            label=str(data["label"]),
            value=float(data["value"]),
            reward=int(data["reward"]),
            resources={str(k): int(v) for k, v in resources.items()},
            difficulty=float(data.get("difficulty", 1.0)),
            reward_range=RewardRange(
                float(bounds.get("min", 1.0)), float(bounds.get("max", 1.4))
            ),
            max_resources=data.get("max_resources"),
        )
