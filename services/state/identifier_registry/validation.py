"""Request validation models for Identifier Registry Service public API.

These models check argument shape only. Key, name, and word syntax is left to
the registry engine so that callers see its specific error codes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _strip_text(value: object) -> object:
    """Normalize surrounding whitespace for identity fields."""
    if isinstance(value, str):
        return value.strip()
    return value


class _ValidationModel(BaseModel):
    """Base request model with strict shape semantics."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class _CallerRequest(_ValidationModel):
    """Base request carrying the identity of the calling party."""

    caller: str = Field(min_length=1)

    @field_validator("caller", mode="before")
    @classmethod
    def _strip_caller(cls, value: object) -> object:
        return _strip_text(value)


class SequenceIdRequest(_ValidationModel):
    sequence_id: int = Field(ge=0)


class KeyRequest(_ValidationModel):
    key: str = Field(min_length=1)


class RangeRequest(_ValidationModel):
    """Half-open range bounds; ordering is checked by the registry."""

    start: int
    end: int


class EventsRequest(_ValidationModel):
    since: int = Field(default=0, ge=0)


class SetAttributeRequest(_CallerRequest):
    sequence_id: int = Field(ge=0)
    trait_name: str
    value: str


class SetAttributesRequest(_CallerRequest):
    """Parallel lists applied item by item."""

    sequence_ids: list[int] = Field(min_length=1)
    trait_names: list[str]
    values: list[str]

    @model_validator(mode="after")
    def _require_equal_lengths(self) -> "SetAttributesRequest":
        if not len(self.sequence_ids) == len(self.trait_names) == len(self.values):
            raise ValueError("sequence_ids, trait_names and values must have equal length")
        return self


class TraitPolicyRequest(_CallerRequest):
    trait_name: str
    user_modifiable: bool
    enabled_for_all: bool


class TraitGrantRequest(_CallerRequest):
    sequence_id: int = Field(ge=0)
    trait_name: str


class TransferRequest(_CallerRequest):
    sequence_id: int = Field(ge=0)
    recipient: str = Field(min_length=1)

    @field_validator("recipient", mode="before")
    @classmethod
    def _strip_recipient(cls, value: object) -> object:
        return _strip_text(value)


class ToggleRequest(_CallerRequest):
    enabled: bool


class PriceRequest(_CallerRequest):
    unit_price: int


class SuppressRequest(_CallerRequest):
    sequence_id: int = Field(ge=0)
    suppressed: bool


class CustodyRequest(_CallerRequest):
    identity: str | None = None

    @field_validator("identity", mode="before")
    @classmethod
    def _strip_identity(cls, value: object) -> object:
        return _strip_text(value)


class CallerRequest(_CallerRequest):
    """Request carrying only the caller, for owner-only actions."""


class IssueColorsRequest(_CallerRequest):
    """Batch color issuance; missing display names default to the hex digits."""

    recipient: str = Field(min_length=1)
    keys: list[str] = Field(min_length=1)
    display_names: list[str | None] | None = None
    payment: int = Field(ge=0)

    @field_validator("recipient", mode="before")
    @classmethod
    def _strip_recipient(cls, value: object) -> object:
        return _strip_text(value)

    @model_validator(mode="after")
    def _require_matching_names(self) -> "IssueColorsRequest":
        if self.display_names is not None and len(self.display_names) != len(self.keys):
            raise ValueError("display_names must match keys in length")
        return self


class IssueWordsRequest(_CallerRequest):
    recipient: str = Field(min_length=1)
    word_tuples: list[list[str]] = Field(min_length=1)
    payment: int = Field(ge=0)

    @field_validator("recipient", mode="before")
    @classmethod
    def _strip_recipient(cls, value: object) -> object:
        return _strip_text(value)


class VerifyWordsRequest(_ValidationModel):
    words: list[str]


class RenameRequest(_CallerRequest):
    sequence_id: int = Field(ge=0)
    new_name: str


class RenameManyRequest(_CallerRequest):
    sequence_ids: list[int] = Field(min_length=1)
    new_names: list[str]

    @model_validator(mode="after")
    def _require_equal_lengths(self) -> "RenameManyRequest":
        if len(self.sequence_ids) != len(self.new_names):
            raise ValueError("sequence_ids and new_names must have equal length")
        return self


class EmptyRequest(_ValidationModel):
    """Request for operations that take no arguments besides metadata."""
