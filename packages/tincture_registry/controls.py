"""Owner-only administrative controls: issuance switch, pricing, suppression."""

from __future__ import annotations

from packages.tincture_registry.domain import RegistrySnapshot
from packages.tincture_registry.errors import (
    InvalidInput,
    IssuanceDisabled,
    Locked,
    NotIssued,
    NotOwner,
    PaymentMismatch,
)
from packages.tincture_registry.state import RegistryState


def require_owner(state: RegistryState, caller: str) -> None:
    """Raise ``NotOwner`` unless ``caller`` is the registry owner."""
    if caller != state.owner:
        raise NotOwner("caller is not the registry owner", caller=caller)


class RegistryControls:
    """Administrative flags of one registry and the checks that read them.

    ``price_granularity`` is the smallest priceable unit: every unit price must
    be a non-negative whole multiple of it.
    """

    def __init__(
        self, state: RegistryState, *, capacity: int, price_granularity: int = 1
    ) -> None:
        if price_granularity <= 0:
            raise ValueError("price_granularity must be positive")
        self._state = state
        self._capacity = capacity
        self._price_granularity = price_granularity

    def set_issuance_enabled(self, *, caller: str, enabled: bool) -> None:
        with self._state.transaction() as state:
            require_owner(state, caller)
            state.set_flag("issuance_enabled", enabled)
            state.append_event("issuance_toggled", enabled=enabled)

    def set_policy_changes_allowed(self, *, caller: str, allowed: bool) -> None:
        """Freeze or unfreeze price changes and owner name overrides."""
        with self._state.transaction() as state:
            require_owner(state, caller)
            state.set_flag("policy_changes_allowed", allowed)
            state.append_event("policy_changes_toggled", allowed=allowed)

    def set_unit_price(self, *, caller: str, unit_price: int) -> None:
        with self._state.transaction() as state:
            require_owner(state, caller)
            self.require_policy_changes_allowed()
            if unit_price < 0 or unit_price % self._price_granularity != 0:
                raise InvalidInput(
                    "unit price must be a non-negative multiple of the price granularity",
                    unit_price=unit_price,
                    granularity=self._price_granularity,
                )
            state.set_flag("unit_price", unit_price)
            state.append_event("price_changed", unit_price=unit_price)

    def set_suppressed(self, *, caller: str, sequence_id: int, suppressed: bool) -> None:
        """Suppress or restore one identifier until suppression is locked."""
        with self._state.transaction() as state:
            require_owner(state, caller)
            if state.suppression_locked:
                raise Locked("suppression is permanently locked")
            if sequence_id not in state.records:
                raise NotIssued("identifier was never issued", sequence_id=sequence_id)
            state.set_suppressed(sequence_id, suppressed)
            state.append_event(
                "suppressed" if suppressed else "unsuppressed",
                sequence_id=sequence_id,
            )

    def lock_suppression(self, *, caller: str) -> None:
        """Irreversibly disable further suppress/unsuppress calls."""
        with self._state.transaction() as state:
            require_owner(state, caller)
            if state.suppression_locked:
                raise Locked("suppression is already locked")
            state.set_flag("suppression_locked", True)
            state.append_event("suppression_locked")

    def set_staking_custody(self, *, caller: str, identity: str | None) -> None:
        with self._state.transaction() as state:
            require_owner(state, caller)
            state.set_flag("staking_custody", identity or None)
            state.append_event("staking_custody_set", identity=identity or "")

    def require_issuance_enabled(self) -> None:
        with self._state.transaction() as state:
            if not state.issuance_enabled:
                raise IssuanceDisabled("issuance is disabled")

    def require_policy_changes_allowed(self) -> None:
        with self._state.transaction() as state:
            if not state.policy_changes_allowed:
                raise Locked("price and name-override changes are frozen")

    def quote(self, quantity: int) -> int:
        """Return the exact payment due for ``quantity`` identifiers."""
        with self._state.transaction() as state:
            return state.unit_price * quantity

    def require_payment(self, *, quantity: int, amount: int) -> None:
        """Raise unless ``amount`` equals price times quantity exactly."""
        due = self.quote(quantity)
        if amount != due:
            raise PaymentMismatch(
                "payment must equal price times quantity",
                expected=due,
                received=amount,
            )

    @property
    def capacity(self) -> int:
        return self._capacity

    def snapshot(self) -> RegistrySnapshot:
        with self._state.transaction() as state:
            return RegistrySnapshot(
                issued_count=state.counter,
                capacity=self._capacity,
                issuance_enabled=state.issuance_enabled,
                unit_price=state.unit_price,
                policy_changes_allowed=state.policy_changes_allowed,
                suppression_locked=state.suppression_locked,
                staking_custody=state.staking_custody,
            )
