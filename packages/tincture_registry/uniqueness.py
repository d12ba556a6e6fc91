"""Authoritative key, name, and word-combination registry."""

from __future__ import annotations

from collections.abc import Sequence

from packages.tincture_registry.attributes import AttributeStore
from packages.tincture_registry.controls import require_owner
from packages.tincture_registry.domain import (
    DISPLAY_NAME_TRAIT,
    AttributeOrigin,
    IssuanceRecord,
)
from packages.tincture_registry.errors import (
    AlreadyClaimed,
    CapacityExceeded,
    InvalidInput,
    Locked,
    NameTaken,
    NotHolder,
    NotIssued,
    ReservedNameMismatch,
)
from packages.tincture_registry.interfaces import HolderLookup
from packages.tincture_registry.naming import (
    canonicalize_key,
    canonicalize_name,
    is_valid_display_name,
    is_valid_key,
    names_match_key,
)
from packages.tincture_registry.state import RegistryState
from packages.tincture_registry.words import (
    WordVerifier,
    combination_hash,
    filled_words,
)


class UniquenessRegistry:
    """Issues identifiers and enforces key, name, and combination exclusivity.

    With ``reserve_names`` set (colors) every display name is an exclusive,
    case-insensitive reservation and hex-shaped names must match their own key.
    Without it (words) the display name is the word tuple itself and uniqueness
    comes from the combination set.
    """

    def __init__(
        self,
        state: RegistryState,
        *,
        attributes: AttributeStore,
        holders: HolderLookup,
        capacity: int,
        reserve_names: bool = True,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._state = state
        self._attributes = attributes
        self._holders = holders
        self._capacity = capacity
        self._reserve_names = reserve_names
        self._verifier = WordVerifier(state)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def issued_count(self) -> int:
        with self._state.transaction() as state:
            return state.counter

    @property
    def verifier(self) -> WordVerifier:
        return self._verifier

    def require_capacity(self, quantity: int) -> None:
        """Raise ``CapacityExceeded`` unless ``quantity`` more ids fit."""
        with self._state.transaction() as state:
            if state.counter + quantity > self._capacity:
                raise CapacityExceeded(
                    "issuance would exceed registry capacity",
                    requested=quantity,
                    issued=state.counter,
                    capacity=self._capacity,
                )

    def issue(self, key: str, display_name: str) -> int:
        """Issue one key under ``display_name`` and return its sequence id."""
        with self._state.transaction() as state:
            canonical = canonicalize_key(key)
            if not is_valid_key(canonical):
                raise InvalidInput("malformed color key", key=key)
            if not is_valid_display_name(display_name):
                raise InvalidInput("malformed display name", display_name=display_name)
            if self._reserve_names and not names_match_key(canonical, display_name):
                raise ReservedNameMismatch(
                    "hex-shaped display name must match its own key",
                    key=canonical,
                    display_name=display_name,
                )
            self.require_capacity(1)
            if canonical in state.key_index:
                raise AlreadyClaimed("key already issued", key=canonical)
            name_key = canonicalize_name(display_name)
            if self._reserve_names and name_key in state.name_reservations:
                raise NameTaken("display name already reserved", display_name=display_name)

            sequence_id = self._allocate(canonical, display_name)
            if self._reserve_names:
                state.reserve_name(name_key, canonical)
            return sequence_id

    def issue_combination(self, words: Sequence[str]) -> int:
        """Commit one verified word tuple and return its sequence id."""
        with self._state.transaction() as state:
            self._verifier.require_valid(words)
            self.require_capacity(1)
            state.add_combination(combination_hash(words))
            phrase = " ".join(filled_words(words))
            return self._allocate(phrase, phrase)

    def rename(self, *, caller: str, sequence_id: int, new_name: str) -> IssuanceRecord:
        """Move the holder's identifier to a new reserved display name."""
        with self._state.transaction():
            self._require_renamable(new_name)
            self.record(sequence_id)
            if self._holders.owner_of(sequence_id) != caller:
                raise NotHolder(
                    "caller does not hold this identifier",
                    sequence_id=sequence_id,
                    caller=caller,
                )
            return self._rename(sequence_id, new_name, origin="holder")

    def override_name(
        self, *, caller: str, sequence_id: int, new_name: str
    ) -> IssuanceRecord:
        """Owner path for renaming any identifier while policy changes are allowed."""
        with self._state.transaction() as state:
            require_owner(state, caller)
            if not state.policy_changes_allowed:
                raise Locked("price and name-override changes are frozen")
            self._require_renamable(new_name)
            self.record(sequence_id)
            return self._rename(sequence_id, new_name, origin="admin")

    def record(self, sequence_id: int) -> IssuanceRecord:
        with self._state.transaction() as state:
            record = state.records.get(sequence_id)
            if record is None:
                raise NotIssued("identifier was never issued", sequence_id=sequence_id)
            return record

    def sequence_id_of(self, key: str) -> int:
        canonical = canonicalize_key(key)
        with self._state.transaction() as state:
            sequence_id = state.key_index.get(canonical)
            if sequence_id is None:
                raise NotIssued("key was never issued", key=canonical)
            return sequence_id

    def key_of(self, sequence_id: int) -> str:
        return self.record(sequence_id).canonical_key

    def keys_in_range(self, start: int, end: int) -> tuple[str, ...]:
        """Return canonical keys for the half-open id range ``[start, end)``."""
        with self._state.transaction() as state:
            if start < 0 or start >= end:
                raise InvalidInput("range requires 0 <= start < end", start=start, end=end)
            if end > state.counter:
                raise CapacityExceeded(
                    "range end exceeds issued count",
                    end=end,
                    issued=state.counter,
                )
            return tuple(
                state.records[sequence_id].canonical_key
                for sequence_id in range(start, end)
            )

    def display_name(self, sequence_id: int) -> str:
        with self._state.transaction():
            self.record(sequence_id)
            entry = self._attributes.entry(sequence_id, DISPLAY_NAME_TRAIT)
            assert entry is not None
            return entry.value

    def display_name_for_key(self, key: str) -> str | None:
        """Typed peer query: current display name of ``key``, or ``None``."""
        with self._state.transaction() as state:
            sequence_id = state.key_index.get(canonicalize_key(key))
            if sequence_id is None:
                return None
            entry = self._attributes.entry(sequence_id, DISPLAY_NAME_TRAIT)
            return entry.value if entry is not None else None

    def _allocate(self, canonical_key: str, display_name: str) -> int:
        state = self._state
        sequence_id = state.advance_counter()
        state.put_record(
            IssuanceRecord(sequence_id=sequence_id, canonical_key=canonical_key)
        )
        state.index_key(canonical_key, sequence_id)
        self._attributes.initialize(sequence_id, display_name)
        state.append_event("issued", sequence_id=sequence_id, key=canonical_key)
        return sequence_id

    def _require_renamable(self, new_name: str) -> None:
        if not self._reserve_names:
            raise InvalidInput("this registry does not support renaming")
        if not is_valid_display_name(new_name):
            raise InvalidInput("malformed display name", display_name=new_name)

    def _rename(
        self, sequence_id: int, new_name: str, *, origin: AttributeOrigin
    ) -> IssuanceRecord:
        state = self._state
        record = state.records[sequence_id]
        key = record.canonical_key
        if not names_match_key(key, new_name):
            raise ReservedNameMismatch(
                "hex-shaped display name must match its own key",
                key=key,
                display_name=new_name,
            )
        new_key = canonicalize_name(new_name)
        holder_key = state.name_reservations.get(new_key)
        if holder_key is not None and holder_key != key:
            raise NameTaken("display name already reserved", display_name=new_name)

        old_name = self.display_name(sequence_id)
        state.release_name(canonicalize_name(old_name))
        state.reserve_name(new_key, key)
        self._attributes.set_display_name(sequence_id, new_name, origin=origin)
        updated = record.model_copy(
            update={"name_change_count": record.name_change_count + 1}
        )
        state.put_record(updated)
        state.append_event(
            "renamed",
            sequence_id=sequence_id,
            old_name=old_name,
            new_name=new_name,
            origin=origin,
        )
        return updated
