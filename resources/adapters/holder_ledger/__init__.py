"""Holder ledger adapter resource exports."""

from resources.adapters.holder_ledger.adapter import HolderLedger, HolderLedgerError
from resources.adapters.holder_ledger.component import MANIFEST, RESOURCE_COMPONENT_ID
from resources.adapters.holder_ledger.in_memory import InMemoryHolderLedger

__all__ = [
    "HolderLedger",
    "HolderLedgerError",
    "InMemoryHolderLedger",
    "MANIFEST",
    "RESOURCE_COMPONENT_ID",
]
