"""Protocol for the external ledger tracking who holds each identifier."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


class HolderLedgerError(Exception):
    """Ledger rejected or failed one assignment, transfer, or lookup."""


@runtime_checkable
class HolderLedger(Protocol):
    """Read and write side of the holder ledger consumed by registries."""

    def owner_of(self, sequence_id: int) -> str | None:
        """Return the current holder of one identifier, or ``None``."""

    def assign(self, sequence_ids: Sequence[int], holder: str) -> None:
        """Assign freshly issued identifiers to ``holder`` all-or-nothing."""

    def transfer(self, sequence_id: int, recipient: str) -> None:
        """Move one assigned identifier to ``recipient``."""

    def balance_of(self, holder: str) -> int:
        """Return how many identifiers ``holder`` currently holds."""
