"""Tests for pydantic-settings-backed shared configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import BaseModel, ValidationError

from packages.tincture_shared.config import (
    ComponentsSettings,
    load_settings,
    resolve_component_settings,
)
from services.state.identifier_registry.config import (
    IdentifierRegistrySettings,
    resolve_identifier_registry_settings,
)


def _write_config(path: Path, *lines: str) -> Path:
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def test_load_settings_uses_tincture_precedence_cascade(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Init params should override env, env should override YAML, then defaults."""
    config_file = _write_config(
        tmp_path / "tincture.yaml",
        "logging:",
        "  level: WARNING",
        "  service: from-yaml",
        "  environment: staging",
    )
    monkeypatch.setenv("TINCTURE_LOGGING__LEVEL", "ERROR")
    monkeypatch.setenv("TINCTURE_LOGGING__SERVICE", "from-env")

    settings = load_settings(
        cli_params={"logging": {"level": "DEBUG"}},
        config_path=config_file,
    )

    assert settings.logging.level == "DEBUG"
    assert settings.logging.service == "from-env"
    assert settings.logging.environment == "staging"
    assert settings.logging.json_output is True


def test_load_settings_uses_model_defaults_when_sources_missing(tmp_path: Path) -> None:
    """A missing YAML file is treated as empty."""
    settings = load_settings(config_path=tmp_path / "missing.yaml")

    assert settings.logging.level == "INFO"
    assert settings.observability.public_api.otel.meter_name == "tincture.public_api"


def test_registry_settings_resolve_from_grouped_component_keys(tmp_path: Path) -> None:
    config_file = _write_config(
        tmp_path / "tincture.yaml",
        "components:",
        "  service:",
        "    identifier_registry:",
        "      colors:",
        "        owner: curator",
        "        unit_price: 500",
        "        price_granularity: 100",
        "        capacity: 64",
        "      words:",
        "        max_per_holder: 3",
    )

    registries = resolve_identifier_registry_settings(
        load_settings(config_path=config_file)
    )

    assert registries.colors.owner == "curator"
    assert registries.colors.unit_price == 500
    assert registries.colors.capacity == 64
    assert registries.colors.collection_name == "Tincture Colors"
    assert registries.words.max_per_holder == 3
    assert [policy.trait_name for policy in registries.words.default_policies] == [
        "Background",
        "Foreground",
    ]


def test_registry_settings_default_when_component_absent(tmp_path: Path) -> None:
    registries = resolve_component_settings(
        settings=load_settings(config_path=tmp_path / "missing.yaml"),
        component_id="service_identifier_registry",
        model=IdentifierRegistrySettings,
    )

    assert registries.colors.capacity == 2**24
    assert registries.words.capacity == 100_000
    assert registries.colors.default_policies == ()


def test_resolve_component_settings_rejects_unknown_namespace(tmp_path: Path) -> None:
    class _Empty(BaseModel):
        pass

    with pytest.raises(ValueError):
        resolve_component_settings(
            settings=load_settings(config_path=tmp_path / "missing.yaml"),
            component_id="substrate_postgres",
            model=_Empty,
        )


def test_components_reject_flat_component_keys() -> None:
    """Flat ``service_*`` keys must be written as grouped namespaces."""
    with pytest.raises(ValidationError) as exc_info:
        ComponentsSettings.model_validate({"service_identifier_registry": {}})

    assert "components.service.identifier_registry" in str(exc_info.value)


def test_registry_settings_reject_unaligned_price() -> None:
    with pytest.raises(ValidationError):
        IdentifierRegistrySettings.model_validate(
            {"colors": {"unit_price": 150, "price_granularity": 100}}
        )


def test_registry_settings_reject_policy_for_display_name_trait() -> None:
    with pytest.raises(ValidationError):
        IdentifierRegistrySettings.model_validate(
            {"words": {"default_policies": [{"trait_name": "Name"}]}}
        )


def test_registry_settings_canonicalize_palette_and_reject_bad_keys() -> None:
    registries = IdentifierRegistrySettings.model_validate(
        {"colors": {"default_background": "#abcdef"}}
    )

    assert registries.colors.default_background == "#ABCDEF"
    with pytest.raises(ValidationError):
        IdentifierRegistrySettings.model_validate(
            {"colors": {"default_foreground": "white"}}
        )


def test_color_capacity_cannot_exceed_namespace_size() -> None:
    with pytest.raises(ValidationError):
        IdentifierRegistrySettings.model_validate({"colors": {"capacity": 2**24 + 1}})
