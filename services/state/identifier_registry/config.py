"""Pydantic settings for the color and word identifier registries."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from packages.tincture_registry.domain import COLOR_NAMESPACE_SIZE, DISPLAY_NAME_TRAIT
from packages.tincture_registry.naming import canonicalize_key, is_valid_key
from packages.tincture_shared.config import TinctureSettings, resolve_component_settings
from services.state.identifier_registry.component import SERVICE_COMPONENT_ID


class TraitPolicyDefault(BaseModel):
    """One trait policy seeded when a registry starts."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    trait_name: str = Field(min_length=1)
    user_modifiable: bool = False
    enabled_for_all: bool = False

    @field_validator("trait_name")
    @classmethod
    def _reject_display_name_trait(cls, value: str) -> str:
        """The display-name trait has no policy; it changes only by rename."""
        if value == DISPLAY_NAME_TRAIT:
            raise ValueError(f"'{DISPLAY_NAME_TRAIT}' cannot carry a trait policy")
        return value


class RegistryInstanceSettings(BaseModel):
    """Runtime settings of one registry instance."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    owner: str = "owner"
    collection_name: str = Field(default="Tincture", min_length=1)
    description: str = ""
    unit_price: int = Field(default=0, ge=0)
    price_granularity: int = Field(default=1, gt=0)
    capacity: int = Field(default=COLOR_NAMESPACE_SIZE, gt=0)
    max_per_transaction: int = Field(default=20, gt=0)
    max_per_holder: int | None = Field(default=None, gt=0)
    issuance_enabled: bool = True
    policy_changes_allowed: bool = True
    default_background: str = "#000000"
    default_foreground: str = "#FFFFFF"
    default_policies: tuple[TraitPolicyDefault, ...] = ()

    @field_validator("owner", mode="before")
    @classmethod
    def _require_owner(cls, value: object) -> object:
        """Require a non-empty owner identity."""
        if not isinstance(value, str):
            return value
        normalized = value.strip()
        if normalized == "":
            raise ValueError("owner must be non-empty")
        return normalized

    @field_validator("default_background", "default_foreground")
    @classmethod
    def _validate_palette(cls, value: str) -> str:
        if not is_valid_key(value):
            raise ValueError(f"palette default must look like '#RRGGBB': {value!r}")
        return canonicalize_key(value)

    @model_validator(mode="after")
    def _validate_price_granularity(self) -> "RegistryInstanceSettings":
        if self.unit_price % self.price_granularity != 0:
            raise ValueError("unit_price must be a multiple of price_granularity")
        return self


class ColorRegistrySettings(RegistryInstanceSettings):
    """Color registry settings; the namespace holds at most 2**24 keys."""

    collection_name: str = Field(default="Tincture Colors", min_length=1)
    description: str = "Named hex colors."
    capacity: int = Field(default=COLOR_NAMESPACE_SIZE, gt=0, le=COLOR_NAMESPACE_SIZE)


class WordRegistrySettings(RegistryInstanceSettings):
    """Word registry settings; holders may recolor every phrase by default."""

    collection_name: str = Field(default="Tincture Words", min_length=1)
    description: str = "Unique one to three word phrases."
    capacity: int = Field(default=100_000, gt=0)
    default_policies: tuple[TraitPolicyDefault, ...] = (
        TraitPolicyDefault(
            trait_name="Background", user_modifiable=True, enabled_for_all=True
        ),
        TraitPolicyDefault(
            trait_name="Foreground", user_modifiable=True, enabled_for_all=True
        ),
    )


class IdentifierRegistrySettings(BaseModel):
    """Settings for the ``colors`` and ``words`` registry instances."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    colors: ColorRegistrySettings = Field(default_factory=ColorRegistrySettings)
    words: WordRegistrySettings = Field(default_factory=WordRegistrySettings)


def resolve_identifier_registry_settings(
    settings: TinctureSettings,
) -> IdentifierRegistrySettings:
    """Resolve settings from ``components.service.identifier_registry``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=IdentifierRegistrySettings,
    )
