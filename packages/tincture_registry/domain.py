"""Domain contracts for the identifier registry engine."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.tincture_registry.naming import canonicalize_key, is_valid_key

DISPLAY_NAME_TRAIT = "Name"
BLOCKED_TRAIT = "Blocked"
WORD_COUNT_TRAIT = "Word Count"
CUSTOMIZED_TRAIT = "Customized"
STAKED_TRAIT = "Staked"

COLOR_NAMESPACE_SIZE = 2**24
MAX_WORDS = 3

AttributeOrigin = Literal["issuance", "holder", "admin"]
EventKind = Literal[
    "issued",
    "renamed",
    "attribute_set",
    "policy_set",
    "trait_granted",
    "trait_revoked",
    "suppressed",
    "unsuppressed",
    "suppression_locked",
    "transferred",
    "price_changed",
    "issuance_toggled",
    "policy_changes_toggled",
    "staking_custody_set",
    "withdrawn",
]


class IssuanceRecord(BaseModel):
    """Permanent record of one issued identifier."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sequence_id: int = Field(ge=0)
    canonical_key: str = Field(min_length=1)
    is_active: bool = True
    name_change_count: int = Field(default=0, ge=0)
    modifiable_trait_whitelist: tuple[str, ...] = ()


class TraitPolicy(BaseModel):
    """Global rule deciding whether holders may write one trait."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    trait_name: str = Field(min_length=1)
    user_modifiable: bool = False
    enabled_for_all_identifiers: bool = False


class AttributeEntry(BaseModel):
    """One named value attached to an identifier."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sequence_id: int = Field(ge=0)
    trait_name: str = Field(min_length=1)
    value: str
    origin: AttributeOrigin


class RegistryEvent(BaseModel):
    """Append-only audit entry for one committed registry mutation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sequence: int = Field(ge=0)
    kind: EventKind
    sequence_id: int | None = None
    detail: dict[str, str] = Field(default_factory=dict)


class VerifyOutcome(str, Enum):
    """Result of verifying one candidate word tuple."""

    VALID = "valid"
    INVALID_COUNT = "invalid_count"
    INVALID_LENGTH = "invalid_length"
    INVALID_CHARACTER = "invalid_character"
    COMBINATION_USED = "combination_used"


class RenderProfile(BaseModel):
    """Per-registry rendering choices: trait names, palette, derived traits."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    collection_name: str = Field(min_length=1)
    description: str = ""
    background_trait: str = "Background"
    foreground_trait: str = "Foreground"
    default_background: str = "#000000"
    default_foreground: str = "#FFFFFF"
    key_as_background: bool = False
    include_word_count: bool = False
    width: int = Field(default=350, gt=0)
    height: int = Field(default=350, gt=0)
    font_family: str = "monospace"
    font_size: int = Field(default=24, gt=0)

    @field_validator("default_background", "default_foreground")
    @classmethod
    def _validate_palette_key(cls, value: str) -> str:
        """Require palette defaults to be well-formed color keys."""
        if not is_valid_key(value):
            raise ValueError(f"palette default must be a color key: {value!r}")
        return canonicalize_key(value)


class RenderedDocument(BaseModel):
    """Canonical rendered output for one identifier."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sequence_id: int
    svg: str
    attributes_json: str
    document_json: str
    data_uri: str


class RegistrySnapshot(BaseModel):
    """Read-only view of administrative flags and counters."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    issued_count: int
    capacity: int
    issuance_enabled: bool
    unit_price: int
    policy_changes_allowed: bool
    suppression_locked: bool
    staking_custody: str | None
