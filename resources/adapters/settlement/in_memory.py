"""Process-local settlement ledger used by default and in tests."""

from __future__ import annotations

from threading import Lock

from resources.adapters.settlement.adapter import SettlementError


class InMemorySettlement:
    """Keeps a running balance plus per-party totals of payments and payouts."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._balance = 0
        self._paid_by: dict[str, int] = {}
        self._paid_out: dict[str, int] = {}

    def settle(self, *, payer: str, amount: int) -> None:
        if amount < 0:
            raise SettlementError("payment amount must be non-negative")
        with self._lock:
            self._balance += amount
            self._paid_by[payer] = self._paid_by.get(payer, 0) + amount

    def refund(self, *, payer: str, amount: int) -> None:
        with self._lock:
            if amount < 0 or amount > self._paid_by.get(payer, 0):
                raise SettlementError(f"refund exceeds settled payments of {payer}")
            self._balance -= amount
            self._paid_by[payer] -= amount

    def balance(self) -> int:
        with self._lock:
            return self._balance

    def withdraw(self, *, recipient: str) -> int:
        with self._lock:
            amount = self._balance
            self._balance = 0
            self._paid_out[recipient] = self._paid_out.get(recipient, 0) + amount
            return amount

    def paid_by(self, payer: str) -> int:
        with self._lock:
            return self._paid_by.get(payer, 0)

    def paid_out(self, recipient: str) -> int:
        with self._lock:
            return self._paid_out.get(recipient, 0)
