"""Procedural contract generation."""
from __future__ import annotations

import math
import random
from collections.abc import Mapping

from bazaar_contract.labels import LabelPool
from bazaar_contract.types import Contract, RewardRange

SPECIALIST_CHANCE = 0.5
MIN_REWARD_MULTIPLIER = 0.1


def reward_bounds(reward_min: float, reward_max: float) -> RewardRange:
    """Order the two bounds; the lower one never drops under 0.1."""
    low = max(MIN_REWARD_MULTIPLIER, min(reward_min, reward_max))
    high = max(low, reward_min, reward_max)
    return RewardRange(low, high)


def generate_contract(
    values: Mapping[str, float],
    target_value: float,
    contract_id: int,
    rng: random.Random,
    labels: LabelPool,
    *,
    difficulty: float = 1.0,
    reward_min: float = 1.0,
    reward_max: float = 1.4,
    max_resources: int | None = None,
) -> Contract:
    """Build a contract whose bundle is worth at most ``target_value * difficulty``.

    Half of all contracts are specialists drawing only from one or two
    randomly chosen resources. The rest draw from any resource that still
    fits under the target, limited to ``max_resources`` distinct types.
    Units are priced at the current ``values``; resources priced at zero or
    below are never drawn.
    """
    scaled_target = target_value * difficulty
    cap = max_resources if max_resources is not None else len(values)
    names = list(values)
    selected: dict[str, int] = {}
    total: float = 0

    if rng.random() < SPECIALIST_CHANCE:
        count = 1 if rng.random() < 0.5 else 2
        pool = list(names)
        rng.shuffle(pool)
        specialists = pool[: min(count, cap)]
        while specialists and total < scaled_target:
            name = rng.choice(specialists)
            price = values[name]
            if price <= 0 or total + price > scaled_target:
                break
            selected[name] = selected.get(name, 0) + 1
            total += price
    else:
        while total < scaled_target:
            eligible = [
                name
                for name in names
                if values[name] > 0
                and total + values[name] <= scaled_target
                and (len(selected) < cap or name in selected)
            ]
            if not eligible:
                break
            name = rng.choice(eligible)
            selected[name] = selected.get(name, 0) + 1
            total += values[name]

    label = labels.acquire(rng, contract_id)
    bounds = reward_bounds(reward_min, reward_max)
    multiplier = bounds.min + rng.random() * (bounds.max - bounds.min)
    return Contract(
        id=contract_id,
        label=label,
        value=total,
        reward=math.floor(total * multiplier),
        resources=selected,
        difficulty=difficulty,
        reward_range=bounds,
        max_resources=max_resources,
    )
