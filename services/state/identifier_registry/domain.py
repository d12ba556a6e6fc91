"""Domain contracts for Identifier Registry Service payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from packages.tincture_registry.domain import (
    AttributeEntry,
    IssuanceRecord,
    RegistryEvent,
    RegistrySnapshot,
    RenderedDocument,
    TraitPolicy,
    VerifyOutcome,
)

__all__ = [
    "AttributeEntry",
    "AttributeList",
    "BatchProgress",
    "HealthStatus",
    "IssuanceRecord",
    "IssueResult",
    "KeyRange",
    "RegistryEvent",
    "RegistrySnapshot",
    "RenderedDocument",
    "TraitPolicy",
    "TransferResult",
    "VerifyOutcome",
    "WithdrawResult",
    "WordVerification",
]


class IssueResult(BaseModel):
    """Identifiers created by one issuance call, in sequence order."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sequence_ids: tuple[int, ...]
    keys: tuple[str, ...]
    recipient: str
    payment: int


class BatchProgress(BaseModel):
    """How far one sequential batch got; failed batches keep earlier items."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    requested: int
    applied: int


class AttributeList(BaseModel):
    """Attribute entries of one identifier in first-write order."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sequence_id: int
    entries: tuple[AttributeEntry, ...]


class KeyRange(BaseModel):
    """Canonical keys of the half-open sequence range ``[start, end)``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    start: int
    end: int
    keys: tuple[str, ...]


class WordVerification(BaseModel):
    """Read-only verdict on one candidate word tuple."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    words: tuple[str, ...]
    outcome: VerifyOutcome
    combination_key: str


class TransferResult(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    sequence_id: int
    sender: str
    recipient: str


class WithdrawResult(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    recipient: str
    amount: int


class HealthStatus(BaseModel):
    """Registry readiness and headline counters."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    registry: str
    issued_count: int
    capacity: int
    detail: str
