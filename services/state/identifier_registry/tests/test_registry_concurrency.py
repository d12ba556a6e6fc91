"""Concurrency tests: readers never observe an issuance that is still in flight."""

from __future__ import annotations

import json
import threading
from typing import Any

from packages.tincture_shared.envelope import EnvelopeKind, EnvelopeMeta, new_meta
from resources.adapters.holder_ledger import InMemoryHolderLedger
from resources.adapters.settlement import InMemorySettlement, SettlementError
from services.state.identifier_registry.config import (
    ColorRegistrySettings,
    WordRegistrySettings,
)
from services.state.identifier_registry.implementation import (
    DefaultColorRegistryService,
    DefaultWordRegistryService,
)

_WAIT_SECONDS = 5.0


class _StallingSettlement(InMemorySettlement):
    """Settlement that parks inside ``settle`` and then declines the payment."""

    def __init__(self) -> None:
        super().__init__()
        self.stall = True
        self.entered = threading.Event()
        self.release = threading.Event()

    def settle(self, *, payer: str, amount: int) -> None:
        if self.stall:
            self.entered.set()
            self.release.wait(_WAIT_SECONDS)
            raise SettlementError("payment declined")
        super().settle(payer=payer, amount=amount)


def _meta() -> EnvelopeMeta:
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="operator")


def _registries() -> tuple[
    DefaultColorRegistryService, DefaultWordRegistryService, _StallingSettlement
]:
    settlement = _StallingSettlement()
    colors = DefaultColorRegistryService(
        settings=ColorRegistrySettings(unit_price=100),
        holders=InMemoryHolderLedger(),
        settlement=settlement,
    )
    words = DefaultWordRegistryService(
        settings=WordRegistrySettings(),
        holders=InMemoryHolderLedger(),
        settlement=InMemorySettlement(),
        peer=colors,
    )
    return colors, words, settlement


def _issue_crimson(colors: DefaultColorRegistryService):
    return colors.issue_colors(
        meta=_meta(),
        caller="alice",
        recipient="alice",
        keys=["#FF0000"],
        payment=100,
        display_names=["crimson"],
    )


def test_readers_wait_for_in_flight_issuance_and_see_rollback() -> None:
    colors, words, settlement = _registries()
    words.issue_words(
        meta=_meta(), caller="alice", recipient="alice", word_tuples=[["RED"]], payment=0
    )
    words.set_attribute(
        meta=_meta(),
        caller="alice",
        sequence_id=0,
        trait_name="Background",
        value="#ff0000",
    )
    outcome: dict[str, Any] = {}
    seen: dict[str, Any] = {}

    def issue() -> None:
        outcome["issue"] = _issue_crimson(colors)

    def read() -> None:
        seen["name"] = colors.display_name_for_key("#FF0000")
        seen["count"] = colors.issued_count(meta=_meta()).value
        seen["record"] = colors.get_record(meta=_meta(), sequence_id=0).error_codes
        seen["display"] = colors.get_display_name(meta=_meta(), key="#FF0000").value
        document = words.get_document(meta=_meta(), sequence_id=0).value
        seen["attributes"] = json.loads(document.attributes_json)

    writer = threading.Thread(target=issue)
    writer.start()
    assert settlement.entered.wait(_WAIT_SECONDS)

    reader = threading.Thread(target=read)
    reader.start()
    reader.join(timeout=0.2)
    assert reader.is_alive()

    settlement.release.set()
    writer.join(_WAIT_SECONDS)
    reader.join(_WAIT_SECONDS)

    assert outcome["issue"].error_codes == ["DEPENDENCY_FAILURE"]
    assert seen["name"] is None
    assert seen["count"] == 0
    assert seen["record"] == ["NOT_ISSUED"]
    assert seen["display"] is None
    assert {"trait_type": "Background", "value": "#FF0000"} in seen["attributes"]


def test_rolled_back_issuance_leaves_key_and_name_free() -> None:
    colors, _words, settlement = _registries()
    settlement.release.set()
    failed = _issue_crimson(colors)

    settlement.stall = False
    retried = _issue_crimson(colors)

    assert failed.error_codes == ["DEPENDENCY_FAILURE"]
    assert retried.ok is True
    assert retried.value.sequence_ids == (0,)
    assert colors.display_name_for_key("#ff0000") == "crimson"
    assert settlement.balance() == 100
