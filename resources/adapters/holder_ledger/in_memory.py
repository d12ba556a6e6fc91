"""Process-local holder ledger used by default and in tests."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from threading import Lock

from resources.adapters.holder_ledger.adapter import HolderLedgerError


class InMemoryHolderLedger:
    """Dictionary-backed holder ledger for one registry."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._holders: dict[int, str] = {}
        self._balances: Counter[str] = Counter()

    def owner_of(self, sequence_id: int) -> str | None:
        with self._lock:
            return self._holders.get(sequence_id)

    def assign(self, sequence_ids: Sequence[int], holder: str) -> None:
        holder = _require_holder(holder)
        with self._lock:
            if len(set(sequence_ids)) != len(sequence_ids):
                raise HolderLedgerError("duplicate sequence ids in one assignment")
            taken = [sid for sid in sequence_ids if sid in self._holders]
            if taken:
                raise HolderLedgerError(f"identifier already assigned: {taken[0]}")
            for sequence_id in sequence_ids:
                self._holders[sequence_id] = holder
            self._balances[holder] += len(sequence_ids)

    def transfer(self, sequence_id: int, recipient: str) -> None:
        recipient = _require_holder(recipient)
        with self._lock:
            current = self._holders.get(sequence_id)
            if current is None:
                raise HolderLedgerError(f"identifier not assigned: {sequence_id}")
            self._holders[sequence_id] = recipient
            self._balances[current] -= 1
            self._balances[recipient] += 1

    def balance_of(self, holder: str) -> int:
        with self._lock:
            return self._balances[holder]


def _require_holder(holder: str) -> str:
    normalized = holder.strip()
    if normalized == "":
        raise HolderLedgerError("holder identity is required")
    return normalized
