"""Payment settlement adapter resource exports."""

from resources.adapters.settlement.adapter import PaymentSettlement, SettlementError
from resources.adapters.settlement.component import MANIFEST, RESOURCE_COMPONENT_ID
from resources.adapters.settlement.in_memory import InMemorySettlement

__all__ = [
    "InMemorySettlement",
    "MANIFEST",
    "PaymentSettlement",
    "RESOURCE_COMPONENT_ID",
    "SettlementError",
]
