"""Unit tests for key, name, and combination exclusivity."""

from __future__ import annotations

import pytest

from packages.tincture_registry.attributes import AttributeStore
from packages.tincture_registry.errors import (
    AlreadyClaimed,
    CapacityExceeded,
    CombinationUsed,
    InvalidInput,
    Locked,
    NameTaken,
    NotHolder,
    NotIssued,
    NotOwner,
    ReservedNameMismatch,
)
from packages.tincture_registry.state import RegistryState
from packages.tincture_registry.uniqueness import UniquenessRegistry


class _FakeHolders:
    """Holder lookup backed by a plain dict."""

    def __init__(self) -> None:
        self.holders: dict[int, str] = {}

    def owner_of(self, sequence_id: int) -> str | None:
        return self.holders.get(sequence_id)


def _registry(
    *, capacity: int = 16, reserve_names: bool = True
) -> tuple[UniquenessRegistry, RegistryState, _FakeHolders]:
    state = RegistryState(name="colors", owner="owner")
    holders = _FakeHolders()
    attributes = AttributeStore(state, holders=holders)
    registry = UniquenessRegistry(
        state,
        attributes=attributes,
        holders=holders,
        capacity=capacity,
        reserve_names=reserve_names,
    )
    return registry, state, holders


def test_issue_assigns_contiguous_sequence_ids() -> None:
    registry, state, _holders = _registry()

    first = registry.issue("#ff00aa", "Magenta")
    second = registry.issue("#00FF00", "Lime")

    assert (first, second) == (0, 1)
    assert registry.key_of(0) == "#FF00AA"
    assert registry.sequence_id_of("#ff00aa") == 0
    assert registry.display_name(1) == "Lime"
    assert state.name_reservations == {"magenta": "#FF00AA", "lime": "#00FF00"}
    assert [event.kind for event in state.events] == ["issued", "issued"]


def test_key_can_be_claimed_once_in_any_case() -> None:
    registry, _state, _holders = _registry()
    registry.issue("#FF00AA", "Magenta")

    with pytest.raises(AlreadyClaimed):
        registry.issue("#ff00aa", "Fuchsia")


def test_display_names_are_exclusive_case_insensitively() -> None:
    registry, state, _holders = _registry()
    registry.issue("#000080", "Navy")

    with pytest.raises(NameTaken):
        registry.issue("#000081", "NAVY")
    assert state.counter == 1


def test_hex_shaped_name_must_match_own_key() -> None:
    registry, _state, _holders = _registry()

    assert registry.issue("#FF00AA", "ff00aa") == 0
    with pytest.raises(ReservedNameMismatch):
        registry.issue("#FF00AB", "ff00ac")


@pytest.mark.parametrize(
    ("key", "name"),
    [("FF00AA", "Magenta"), ("#FF00AA", "Hot Pink"), ("#FF00AA", "")],
)
def test_malformed_input_is_rejected(key: str, name: str) -> None:
    registry, state, _holders = _registry()

    with pytest.raises(InvalidInput):
        registry.issue(key, name)
    assert state.counter == 0


def test_capacity_is_enforced() -> None:
    registry, _state, _holders = _registry(capacity=1)
    registry.issue("#000001", "One")

    with pytest.raises(CapacityExceeded):
        registry.issue("#000002", "Two")


def test_keys_in_range_is_half_open_and_bounded() -> None:
    registry, _state, _holders = _registry()
    for index in range(3):
        registry.issue(f"#00000{index}", f"N{index}")

    assert registry.keys_in_range(0, 3) == ("#000000", "#000001", "#000002")
    assert registry.keys_in_range(1, 2) == ("#000001",)
    with pytest.raises(InvalidInput):
        registry.keys_in_range(2, 2)
    with pytest.raises(InvalidInput):
        registry.keys_in_range(-1, 1)
    with pytest.raises(CapacityExceeded):
        registry.keys_in_range(0, 4)


def test_rename_moves_reservation_and_counts_changes() -> None:
    registry, state, holders = _registry()
    registry.issue("#87CEEB", "Sky")
    holders.holders[0] = "alice"

    record = registry.rename(caller="alice", sequence_id=0, new_name="Azure")

    assert record.name_change_count == 1
    assert registry.display_name(0) == "Azure"
    assert "sky" not in state.name_reservations
    assert state.name_reservations["azure"] == "#87CEEB"
    assert registry.issue("#87CEEC", "Sky") == 1


def test_rename_to_own_name_in_other_case_is_allowed() -> None:
    registry, _state, holders = _registry()
    registry.issue("#87CEEB", "Sky")
    holders.holders[0] = "alice"

    registry.rename(caller="alice", sequence_id=0, new_name="SKY")

    assert registry.display_name(0) == "SKY"


def test_failed_rename_leaves_state_untouched() -> None:
    registry, state, holders = _registry()
    registry.issue("#87CEEB", "Sky")
    registry.issue("#000080", "Navy")
    holders.holders[0] = "alice"
    before = dict(state.name_reservations)

    with pytest.raises(NameTaken):
        registry.rename(caller="alice", sequence_id=0, new_name="navy")
    with pytest.raises(NotHolder):
        registry.rename(caller="bob", sequence_id=0, new_name="Azure")
    with pytest.raises(NotIssued):
        registry.rename(caller="alice", sequence_id=9, new_name="Azure")

    assert state.name_reservations == before
    assert registry.record(0).name_change_count == 0


def test_override_name_requires_owner_and_unfrozen_policy() -> None:
    registry, state, _holders = _registry()
    registry.issue("#87CEEB", "Sky")

    with pytest.raises(NotOwner):
        registry.override_name(caller="alice", sequence_id=0, new_name="Azure")
    registry.override_name(caller="owner", sequence_id=0, new_name="Azure")
    with state.transaction():
        state.set_flag("policy_changes_allowed", False)
    with pytest.raises(Locked):
        registry.override_name(caller="owner", sequence_id=0, new_name="Cerulean")

    assert registry.display_name(0) == "Azure"


def test_word_registry_commits_combinations_without_name_reservations() -> None:
    registry, state, _holders = _registry(reserve_names=False)

    sequence_id = registry.issue_combination(("RED", "FOX", ""))

    assert registry.key_of(sequence_id) == "RED FOX"
    assert registry.display_name(sequence_id) == "RED FOX"
    assert state.name_reservations == {}
    with pytest.raises(CombinationUsed):
        registry.issue_combination(("RED", "FOX"))
    with pytest.raises(InvalidInput):
        registry.rename(caller="owner", sequence_id=sequence_id, new_name="Other")


def test_display_name_for_key_returns_none_for_unissued_keys() -> None:
    registry, _state, _holders = _registry()
    registry.issue("#87CEEB", "Sky")

    assert registry.display_name_for_key("#87ceeb") == "Sky"
    assert registry.display_name_for_key("#000000") is None
