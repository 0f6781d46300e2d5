"""ContractBoard - the live contract list and its lifecycle."""
from __future__ import annotations

import logging
import math
import random
from collections.abc import Sequence
from typing import Any

from bazaar_resource import ResourceState

from bazaar_contract.generator import generate_contract, reward_bounds
from bazaar_contract.labels import CONTRACT_LABELS, LabelPool
from bazaar_contract.types import Contract, RewardRange

logger = logging.getLogger(__name__)

ESCALATION = 1.1
# Percent of a resource's value moved per unit on completion or decay.
UNIT_PERCENT = 5
COMPLETION_FLOOR = 2


def consumed_value(value: float, quantity: int) -> int:
    """Value after a completed contract uses *quantity* units."""
    return max(COMPLETION_FLOOR, math.floor(value * (100 - UNIT_PERCENT * quantity) / 100))


def inflated_value(value: float, quantity: int) -> int:
    """Value after a decayed contract leaves *quantity* units unbought."""
    return math.ceil(value * (100 + UNIT_PERCENT * quantity) / 100)


class ContractBoard:
    """Owns active contracts (newest first) and the target-value escalator.

    Resource values are read from, and written back through, the shared
    ``ResourceState``; the board never stores them.
    """

    def __init__(
        self,
        state: ResourceState,
        *,
        start_target_value: float = 50,
        target_count: int = 3,
        difficulty: float = 1.0,
        reward_min: float = 1.0,
        reward_max: float = 1.4,
        max_resources: int | None = None,
        labels: Sequence[str] = CONTRACT_LABELS,
    ) -> None:
        self._state = state
        self._start_target_value = start_target_value
        self._current_target_value = start_target_value
        self._contracts: list[Contract] = []
        self._labels = LabelPool(labels)
        self._next_id = 1
        self._target_count = 0
        self._difficulty = 1.0
        self._reward_min = reward_min
        self._reward_max = reward_max
        self._max_resources: int | None = None
        self.set_target_count(target_count)
        self.set_difficulty(difficulty)
        self.set_max_resources(max_resources)

    # -- Reads --

    @property
    def contracts(self) -> list[Contract]:
        return list(self._contracts)

    @property
    def newest(self) -> Contract | None:
        return self._contracts[0] if self._contracts else None

    @property
    def current_target_value(self) -> float:
        return self._current_target_value

    @property
    def start_target_value(self) -> float:
        return self._start_target_value

    @property
    def target_count(self) -> int:
        return self._target_count

    @property
    def difficulty(self) -> float:
        return self._difficulty

    @property
    def reward_range(self) -> RewardRange:
        return reward_bounds(self._reward_min, self._reward_max)

    @property
    def max_resources(self) -> int | None:
        return self._max_resources

    def get(self, contract_id: int) -> Contract | None:
        for contract in self._contracts:
            if contract.id == contract_id:
                return contract
        return None

    def market_value(self, contract: Contract) -> float:
        """What the bundle is worth at current resource values."""
        values = self._state.values
        return sum(values.get(name, 0) * qty for name, qty in contract.resources.items())

    def __len__(self) -> int:
        return len(self._contracts)

    # -- Settings --

    def set_target_count(self, count: int) -> None:
        if count < 0:
            raise ValueError(f"target_count must be >= 0, got {count}")
        self._target_count = int(count)

    def set_difficulty(self, difficulty: float) -> None:
        if difficulty <= 0:
            raise ValueError(f"difficulty must be > 0, got {difficulty}")
        self._difficulty = difficulty

    def set_reward_range(self, reward_min: float, reward_max: float) -> None:
        self._reward_min = reward_min
        self._reward_max = reward_max

    def set_max_resources(self, max_resources: int | None) -> None:
        if max_resources is not None and max_resources < 1:
            raise ValueError(f"max_resources must be >= 1, got {max_resources}")
        self._max_resources = max_resources

    # -- Lifecycle --

    def add(self, count: int, target_value: float, rng: random.Random) -> list[Contract]:
        """Generate *count* contracts sized for *target_value*."""
        created: list[Contract] = []
        for _ in range(count):
            contract = generate_contract(
                self._state.values,
                target_value,
                self._next_id,
                rng,
                self._labels,
                difficulty=self._difficulty,
                reward_min=self._reward_min,
                reward_max=self._reward_max,
                max_resources=self._max_resources,
            )
            self._next_id += 1
            created.append(contract)
        self._contracts[:0] = reversed(created)
        return created

    def maintain(self, rng: random.Random, paused: bool = False) -> list[Contract]:
        """Fill or trim to the target count. Does nothing while paused."""
        if paused:
            return []
        missing = self._target_count - len(self._contracts)
        if missing > 0:
            return self.add(missing, self._current_target_value, rng)
        if missing < 0:
            for dropped in self._contracts[self._target_count:]:
                self._labels.release(dropped.label)
            del self._contracts[self._target_count:]
        return []

    def _remove(self, contract_id: int) -> Contract | None:
        contract = self.get(contract_id)
        if contract is None:
            logger.debug("no active contract with id %s", contract_id)
            return None
        self._contracts.remove(contract)
        self._labels.release(contract.label)
        return contract

    def complete(self, contract_id: int) -> Contract | None:
        """Fulfil a contract: escalate the target and draw down its resources.

        The drawn-down values are assigned directly, past the floor clamp and
        outside the undo log.
        """
        contract = self._remove(contract_id)
        if contract is None:
            return None
        self._current_target_value *= ESCALATION
        values = self._state.values
        for name, qty in contract.resources.items():
            if name in values:
                self._state.assign(name, consumed_value(values[name], qty))
        logger.info("contract %s (%s) completed for %s", contract.id, contract.label, contract.reward)
        return contract

    def decay(self, contract_id: int) -> Contract | None:
        """Let a contract lapse: no reward, its resources get dearer."""
        contract = self._remove(contract_id)
        if contract is None:
            return None
        values = self._state.values
        for name, qty in contract.resources.items():
            if name in values:
                self._state.assign(name, inflated_value(values[name], qty))
        logger.info("contract %s (%s) decayed", contract.id, contract.label)
        return contract

    def reset(self, rng: random.Random, paused: bool = False) -> None:
        """Drop every contract, rewind the escalator and reseed unless paused."""
        self._contracts.clear()
        self._labels.clear()
        self._current_target_value = self._start_target_value
        if not paused and self._target_count:
            self.add(self._target_count, self._start_target_value, rng)

    # -- Snapshot / restore --

    def snapshot(self) -> dict[str, Any]:
        return {
            "contracts": [c.to_dict() for c in self._contracts],
            "current_target_value": self._current_target_value,
            "difficulty": self._difficulty,
            "next_id": self._next_id,
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Load a snapshot; contracts that fail to parse are dropped."""
        contracts: list[Contract] = []
        raw = data.get("contracts")
        for entry in raw if isinstance(raw, list) else []:
            try:
                contracts.append(Contract.from_dict(entry))
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning("dropping malformed stored contract %r", entry)
        self._contracts = contracts
        self._labels.clear()
        self._labels.claim(c.label for c in contracts)

        target = data.get("current_target_value")
        if isinstance(target, (int, float)) and not isinstance(target, bool) and target > 0:
            self._current_target_value = target
        difficulty = data.get("difficulty")
        if isinstance(difficulty, (int, float)) and not isinstance(difficulty, bool) and difficulty > 0:
            self._difficulty = difficulty
        next_id = data.get("next_id")
        highest = max((c.id for c in contracts), default=0)
        if isinstance(next_id, int) and not isinstance(next_id, bool):
            self._next_id = max(next_id, highest + 1)
        else:
            self._next_id = max(self._next_id, highest + 1)
