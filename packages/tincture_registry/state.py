"""Injected, journaled state container for one registry instance.

Every mutation goes through a ``RegistryState`` method that records an undo
action in the active transaction's journal. ``transaction()`` is the single
serialization point: it holds the instance lock for the whole operation and
replays the journal backwards when the operation raises, so callers observe
either the complete effect of an operation or none of it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from threading import RLock

from packages.tincture_registry.domain import (
    AttributeEntry,
    EventKind,
    IssuanceRecord,
    RegistryEvent,
    TraitPolicy,
)

_MISSING = object()


class RegistryState:
    """Authoritative in-memory maps, sets, counters, and flags of one registry."""

    def __init__(
        self,
        *,
        name: str,
        owner: str,
        unit_price: int = 0,
        issuance_enabled: bool = True,
        policy_changes_allowed: bool = True,
    ) -> None:
        self.name = name
        self.owner = owner
        self._lock = RLock()
        self._journal: list[Callable[[], None]] | None = None

        self.records: dict[int, IssuanceRecord] = {}
        self.key_index: dict[str, int] = {}
        self.name_reservations: dict[str, str] = {}
        self.combinations: set[str] = set()
        self.attributes: dict[int, dict[str, AttributeEntry]] = {}
        self.policies: dict[str, TraitPolicy] = {}
        self.suppressed: set[int] = set()
        self.events: list[RegistryEvent] = []
        self.counter = 0

        self.issuance_enabled = issuance_enabled
        self.unit_price = unit_price
        self.policy_changes_allowed = policy_changes_allowed
        self.suppression_locked = False
        self.staking_custody: str | None = None

    @contextmanager
    def transaction(self) -> Iterator["RegistryState"]:
        """Serialize one operation and roll back its mutations on failure.

        Nested transactions join the outermost one; a failure inside a nested
        block only undoes the nested block's own mutations.
        """
        with self._lock:
            outermost = self._journal is None
            if outermost:
                self._journal = []
            assert self._journal is not None
            mark = len(self._journal)
            try:
                yield self
            except BaseException:
                undo = self._journal[mark:]
                del self._journal[mark:]
                for action in reversed(undo):
                    action()
                raise
            finally:
                if outermost:
                    self._journal = None

    @property
    def in_transaction(self) -> bool:
        return self._journal is not None

    def put_record(self, record: IssuanceRecord) -> None:
        self._assign(self.records, record.sequence_id, record)

    def index_key(self, key: str, sequence_id: int) -> None:
        self._assign(self.key_index, key, sequence_id)

    def reserve_name(self, name_key: str, key: str) -> None:
        self._assign(self.name_reservations, name_key, key)

    def release_name(self, name_key: str) -> None:
        journal = self._active_journal()
        previous = self.name_reservations.pop(name_key, _MISSING)
        if previous is not _MISSING:
            journal.append(lambda: self.name_reservations.__setitem__(name_key, previous))

    def add_combination(self, combination_hash: str) -> None:
        journal = self._active_journal()
        if combination_hash in self.combinations:
            return
        self.combinations.add(combination_hash)
        journal.append(lambda: self.combinations.discard(combination_hash))

    def put_attribute(self, entry: AttributeEntry) -> None:
        entries = self.attributes.get(entry.sequence_id)
        if entries is None:
            entries = {}
            self._assign(self.attributes, entry.sequence_id, entries)
        self._assign(entries, entry.trait_name, entry)

    def put_policy(self, policy: TraitPolicy) -> None:
        self._assign(self.policies, policy.trait_name, policy)

    def advance_counter(self) -> int:
        """Return the next sequence id and advance the counter past it."""
        journal = self._active_journal()
        allocated = self.counter
        self.counter = allocated + 1
        journal.append(lambda: setattr(self, "counter", allocated))
        return allocated

    def set_suppressed(self, sequence_id: int, suppressed: bool) -> None:
        journal = self._active_journal()
        if suppressed == (sequence_id in self.suppressed):
            return
        if suppressed:
            self.suppressed.add(sequence_id)
            journal.append(lambda: self.suppressed.discard(sequence_id))
        else:
            self.suppressed.discard(sequence_id)
            journal.append(lambda: self.suppressed.add(sequence_id))

    def set_flag(self, name: str, value: object) -> None:
        """Set one administrative flag (price, toggles, custody identity)."""
        if name not in _FLAG_NAMES:
            raise AttributeError(f"unknown registry flag: {name}")
        journal = self._active_journal()
        previous = getattr(self, name)
        setattr(self, name, value)
        journal.append(lambda: setattr(self, name, previous))

    def append_event(
        self, kind: EventKind, *, sequence_id: int | None = None, **detail: object
    ) -> RegistryEvent:
        journal = self._active_journal()
        event = RegistryEvent(
            sequence=len(self.events),
            kind=kind,
            sequence_id=sequence_id,
            detail={key: str(value) for key, value in detail.items()},
        )
        self.events.append(event)
        journal.append(self.events.pop)
        return event

    def _assign(self, mapping: dict, key: object, value: object) -> None:
        journal = self._active_journal()
        previous = mapping.get(key, _MISSING)
        mapping[key] = value
        if previous is _MISSING:
            journal.append(lambda: mapping.pop(key, None))
        else:
            journal.append(lambda: mapping.__setitem__(key, previous))

    def _active_journal(self) -> list[Callable[[], None]]:
        if self._journal is None:
            raise RuntimeError("registry state mutated outside a transaction")
        return self._journal


_FLAG_NAMES = frozenset(
    {
        "issuance_enabled",
        "unit_price",
        "policy_changes_allowed",
        "suppression_locked",
        "staking_custody",
    }
)
