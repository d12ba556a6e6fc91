"""Per-identifier attribute storage gated by global trait policies."""

from __future__ import annotations

from packages.tincture_registry.controls import require_owner
from packages.tincture_registry.domain import (
    DISPLAY_NAME_TRAIT,
    AttributeEntry,
    AttributeOrigin,
    IssuanceRecord,
    TraitPolicy,
)
from packages.tincture_registry.errors import (
    InvalidInput,
    NotHolder,
    NotIssued,
    PolicyDenied,
    ReservedTraitName,
)
from packages.tincture_registry.interfaces import HolderLookup
from packages.tincture_registry.state import RegistryState


class AttributeStore:
    """Owns every ``AttributeEntry`` and every ``TraitPolicy`` of one registry.

    Holder writes are allowed only when the trait's policy is user-modifiable
    and either enabled for all identifiers or present in the identifier's
    whitelist. The policy is joined at write time, so owner policy edits apply
    to the next call without touching stored values.
    """

    def __init__(self, state: RegistryState, *, holders: HolderLookup) -> None:
        self._state = state
        self._holders = holders

    def initialize(self, sequence_id: int, display_name: str) -> None:
        """Record the display-name entry of a freshly issued identifier."""
        self._write(sequence_id, DISPLAY_NAME_TRAIT, display_name, "issuance")

    def set_display_name(
        self, sequence_id: int, display_name: str, *, origin: AttributeOrigin
    ) -> None:
        """Overwrite the display-name entry; only the rename path calls this."""
        self._write(sequence_id, DISPLAY_NAME_TRAIT, display_name, origin)

    def set_attribute(
        self, *, caller: str, sequence_id: int, trait_name: str, value: str
    ) -> None:
        """Write one trait on behalf of the identifier's current holder."""
        with self._state.transaction() as state:
            _require_writable_trait(trait_name)
            record = self._record(sequence_id)
            if self._holders.owner_of(sequence_id) != caller:
                raise NotHolder(
                    "caller does not hold this identifier",
                    sequence_id=sequence_id,
                    caller=caller,
                )
            if not _holder_may_write(state.policies.get(trait_name), record, trait_name):
                raise PolicyDenied(
                    "trait is not modifiable for this identifier",
                    sequence_id=sequence_id,
                    trait_name=trait_name,
                )
            self._write(sequence_id, trait_name, value, "holder")
            state.append_event(
                "attribute_set", sequence_id=sequence_id, trait_name=trait_name
            )

    def admin_set_attribute(
        self, *, caller: str, sequence_id: int, trait_name: str, value: str
    ) -> None:
        """Write one trait as the registry owner, bypassing holder policy."""
        with self._state.transaction() as state:
            require_owner(state, caller)
            _require_writable_trait(trait_name)
            self._record(sequence_id)
            self._write(sequence_id, trait_name, value, "admin")
            state.append_event(
                "attribute_set",
                sequence_id=sequence_id,
                trait_name=trait_name,
                origin="admin",
            )

    def set_policy(
        self,
        *,
        caller: str,
        trait_name: str,
        user_modifiable: bool,
        enabled_for_all: bool,
    ) -> TraitPolicy:
        """Upsert the global policy of one trait."""
        with self._state.transaction() as state:
            require_owner(state, caller)
            _require_writable_trait(trait_name)
            policy = TraitPolicy(
                trait_name=trait_name,
                user_modifiable=user_modifiable,
                enabled_for_all_identifiers=enabled_for_all,
            )
            state.put_policy(policy)
            state.append_event(
                "policy_set",
                trait_name=trait_name,
                user_modifiable=user_modifiable,
                enabled_for_all=enabled_for_all,
            )
            return policy

    def grant_trait(self, *, caller: str, sequence_id: int, trait_name: str) -> IssuanceRecord:
        """Add ``trait_name`` to one identifier's whitelist (idempotent)."""
        with self._state.transaction() as state:
            require_owner(state, caller)
            _require_writable_trait(trait_name)
            record = self._record(sequence_id)
            if trait_name in record.modifiable_trait_whitelist:
                return record
            updated = record.model_copy(
                update={
                    "modifiable_trait_whitelist": (
                        *record.modifiable_trait_whitelist,
                        trait_name,
                    )
                }
            )
            state.put_record(updated)
            state.append_event(
                "trait_granted", sequence_id=sequence_id, trait_name=trait_name
            )
            return updated

    def revoke_trait(self, *, caller: str, sequence_id: int, trait_name: str) -> IssuanceRecord:
        """Remove ``trait_name`` from one identifier's whitelist (idempotent)."""
        with self._state.transaction() as state:
            require_owner(state, caller)
            record = self._record(sequence_id)
            if trait_name not in record.modifiable_trait_whitelist:
                return record
            updated = record.model_copy(
                update={
                    "modifiable_trait_whitelist": tuple(
                        name
                        for name in record.modifiable_trait_whitelist
                        if name != trait_name
                    )
                }
            )
            state.put_record(updated)
            state.append_event(
                "trait_revoked", sequence_id=sequence_id, trait_name=trait_name
            )
            return updated

    def get_policy(self, trait_name: str) -> TraitPolicy | None:
        with self._state.transaction() as state:
            return state.policies.get(trait_name)

    def list_policies(self) -> tuple[TraitPolicy, ...]:
        with self._state.transaction() as state:
            return tuple(state.policies[name] for name in sorted(state.policies))

    def entries(self, sequence_id: int) -> tuple[AttributeEntry, ...]:
        """Return entries in first-write order; display name is always first."""
        with self._state.transaction() as state:
            self._record(sequence_id)
            return tuple(state.attributes.get(sequence_id, {}).values())

    def list_attributes(self, sequence_id: int) -> tuple[tuple[str, str], ...]:
        return tuple(
            (entry.trait_name, entry.value) for entry in self.entries(sequence_id)
        )

    def entry(self, sequence_id: int, trait_name: str) -> AttributeEntry | None:
        with self._state.transaction() as state:
            return state.attributes.get(sequence_id, {}).get(trait_name)

    def _record(self, sequence_id: int) -> IssuanceRecord:
        with self._state.transaction() as state:
            record = state.records.get(sequence_id)
            if record is None:
                raise NotIssued("identifier was never issued", sequence_id=sequence_id)
            return record

    def _write(
        self, sequence_id: int, trait_name: str, value: str, origin: AttributeOrigin
    ) -> None:
        self._state.put_attribute(
            AttributeEntry(
                sequence_id=sequence_id,
                trait_name=trait_name,
                value=value,
                origin=origin,
            )
        )


def _require_writable_trait(trait_name: str) -> None:
    if trait_name == DISPLAY_NAME_TRAIT:
        raise ReservedTraitName(
            "display name can only change through rename", trait_name=trait_name
        )
    if trait_name.strip() == "":
        raise InvalidInput("trait name is required")


def _holder_may_write(
    policy: TraitPolicy | None, record: IssuanceRecord, trait_name: str
) -> bool:
    if policy is None or not policy.user_modifiable:
        return False
    return (
        policy.enabled_for_all_identifiers
        or trait_name in record.modifiable_trait_whitelist
    )
