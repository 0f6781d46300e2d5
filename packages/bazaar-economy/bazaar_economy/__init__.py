"""bazaar-economy — One-stop facade over resources, noise and contracts."""
from bazaar_economy.config import EconomyConfig, Settings
from bazaar_economy.economy import ENTRIES, Economy
from bazaar_economy.views import Connection, ContractView, ResourceView, TierView

__all__ = [
    "ENTRIES",
    "Connection",
    "ContractView",
    "Economy",
    "EconomyConfig",
    "ResourceView",
    "Settings",
    "TierView",
]
