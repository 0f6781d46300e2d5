"""Default resource declarations: three raw inputs and their products."""
from __future__ import annotations

from bazaar_resource.types import ResourceDef

DEFAULT_RESOURCES: tuple[ResourceDef, ...] = (
    ResourceDef(name="iron", label="Iron Ore", icon="🪨", base_min=5),
    ResourceDef(name="coal", label="Coal", icon="🪨", base_min=10),
    ResourceDef(name="oil", label="Crude Oil", icon="🛢️", base_min=5),
    ResourceDef(name="steel", label="Steel", icon="🔩", components=("iron", "coal")),
    ResourceDef(name="plastics", label="Plastics", icon="🧴", components=("oil", "coal")),
    ResourceDef(
        name="consumer_goods",
        label="Consumer Goods",
        icon="📱",
        components=("steel", "plastics"),
    ),
)
