"""Tests for envelope metadata construction and validation."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta, timezone

import pytest

from packages.tincture_shared.envelope import EnvelopeKind, new_meta, validate_meta


def _meta(**overrides: object):
    meta = new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="operator")
    return replace(meta, **overrides)


def test_new_meta_generates_ids_and_utc_timestamp() -> None:
    meta = new_meta(kind=EnvelopeKind.QUERY, source="cli", principal="alice")

    assert len(meta.envelope_id) == 32
    assert len(meta.trace_id) == 32
    assert meta.envelope_id != meta.trace_id
    assert meta.parent_id == ""
    assert meta.timestamp.tzinfo is UTC


def test_new_meta_normalizes_naive_and_offset_timestamps() -> None:
    naive = new_meta(
        kind=EnvelopeKind.QUERY,
        source="cli",
        principal="alice",
        timestamp=datetime(2026, 3, 1, 8, 0, 0),
    )
    offset = new_meta(
        kind=EnvelopeKind.QUERY,
        source="cli",
        principal="alice",
        timestamp=datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone(timedelta(hours=2))),
    )

    assert naive.timestamp == datetime(2026, 3, 1, 8, 0, 0, tzinfo=UTC)
    assert offset.timestamp == datetime(2026, 3, 1, 8, 0, 0, tzinfo=UTC)


def test_validate_meta_accepts_complete_metadata() -> None:
    validate_meta(_meta())


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"envelope_id": ""}, "metadata.envelope_id is required"),
        ({"trace_id": ""}, "metadata.trace_id is required"),
        ({"source": ""}, "metadata.source is required"),
        ({"principal": ""}, "metadata.principal is required"),
        ({"kind": EnvelopeKind.UNSPECIFIED}, "metadata.kind must be specified"),
    ],
)
def test_validate_meta_reports_first_problem(
    overrides: dict[str, object], message: str
) -> None:
    """Each missing field maps to one stable public message."""
    with pytest.raises(ValueError) as exc_info:
        validate_meta(_meta(**overrides))

    assert str(exc_info.value) == message
