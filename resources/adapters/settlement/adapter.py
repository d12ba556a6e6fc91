"""Protocol for the external step that settles issuance payments."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class SettlementError(Exception):
    """Settlement rejected or failed one payment, refund, or withdrawal."""


@runtime_checkable
class PaymentSettlement(Protocol):
    """Collects issuance payments and pays the balance out to the owner."""

    def settle(self, *, payer: str, amount: int) -> None:
        """Accept ``amount`` from ``payer`` into the settled balance."""

    def refund(self, *, payer: str, amount: int) -> None:
        """Return a previously settled ``amount`` to ``payer``."""

    def balance(self) -> int:
        """Return the settled balance not yet withdrawn."""

    def withdraw(self, *, recipient: str) -> int:
        """Pay the whole settled balance to ``recipient`` and return it."""
