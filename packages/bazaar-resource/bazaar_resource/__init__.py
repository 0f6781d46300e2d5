"""bazaar-resource — Resource graph, floor-enforcing state engine and noise."""
from bazaar_resource.graph import TIER_LABELS, ResourceGraph, tier_label
from bazaar_resource.noise import NoiseGenerator, make_noise_system
from bazaar_resource.presets import DEFAULT_RESOURCES
from bazaar_resource.state import ResourceState, coerce_number
from bazaar_resource.types import (
    Change,
    ConfigurationError,
    CycleError,
    ResourceDef,
    UnknownResourceError,
)

__all__ = [
    "Change",
    "ConfigurationError",
    "CycleError",
    "DEFAULT_RESOURCES",
    "NoiseGenerator",
    "ResourceDef",
    "ResourceGraph",
    "ResourceState",
    "TIER_LABELS",
    "UnknownResourceError",
    "coerce_number",
    "make_noise_system",
    "tier_label",
]
