"""Tests for envelope model and builder behavior."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from packages.tincture_shared.envelope import (
    Envelope,
    EnvelopeKind,
    EnvelopeMeta,
    failure,
    new_meta,
    success,
)
from packages.tincture_shared.envelope.envelope import Payload
from packages.tincture_shared.errors import ErrorCategory, ErrorDetail


def _meta() -> EnvelopeMeta:
    """Return deterministic metadata for envelope tests."""
    return new_meta(
        kind=EnvelopeKind.RESULT,
        source="service_identifier_registry",
        principal="operator",
        timestamp=datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC),
        envelope_id="env-1",
        trace_id="trace-1",
    )


def _error(code: str = "INVALID_ARGUMENT") -> ErrorDetail:
    return ErrorDetail(
        code=code,
        message="Invalid input",
        category=ErrorCategory.VALIDATION,
    )


def test_success_builder_returns_ok_envelope_with_payload() -> None:
    """success should build an ok envelope with payload and no errors."""
    envelope = success(meta=_meta(), payload={"sequence_id": 0})

    assert envelope.ok is True
    assert envelope.value == {"sequence_id": 0}
    assert envelope.errors == []
    assert envelope.error_codes == []


def test_failure_builder_without_payload_has_no_value() -> None:
    envelope = failure(meta=_meta(), errors=[_error("NAME_TAKEN")])

    assert envelope.ok is False
    assert envelope.payload is None
    assert envelope.value is None
    assert envelope.error_codes == ["NAME_TAKEN"]


def test_failure_builder_keeps_partial_progress_payload() -> None:
    """failure may carry how far a batch got before the failing item."""
    envelope = failure(
        meta=_meta(),
        errors=[_error("NOT_HOLDER")],
        payload={"requested": 3, "applied": 1},
    )

    assert envelope.ok is False
    assert envelope.value == {"requested": 3, "applied": 1}


def test_envelope_is_frozen() -> None:
    envelope = success(meta=_meta(), payload=1)

    with pytest.raises(ValidationError):
        envelope.errors = [_error()]  # type: ignore[misc]


def test_payload_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        Payload[int].model_validate({"value": 1, "extra": 2})


def test_envelope_type_parameter_validates_payload_value() -> None:
    """A typed envelope should coerce and validate its payload value."""
    envelope = Envelope[int](
        metadata=_meta(), payload=Payload[int](value=3), errors=[]
    )

    assert envelope.value == 3
    with pytest.raises(ValidationError):
        Payload[int](value="not-a-number")  # type: ignore[arg-type]
