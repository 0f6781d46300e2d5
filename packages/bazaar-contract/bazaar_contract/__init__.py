"""bazaar-contract — Procurement contracts priced off live resource values."""
from bazaar_contract.board import ContractBoard, consumed_value, inflated_value
from bazaar_contract.decay import DecayTracker, make_decay_system
from bazaar_contract.generator import generate_contract, reward_bounds
from bazaar_contract.labels import CONTRACT_LABELS, LabelPool
from bazaar_contract.types import Contract, RewardRange

__all__ = [
    "CONTRACT_LABELS",
    "Contract",
    "ContractBoard",
    "DecayTracker",
    "LabelPool",
    "RewardRange",
    "consumed_value",
    "generate_contract",
    "inflated_value",
    "make_decay_system",
    "reward_bounds",
]
