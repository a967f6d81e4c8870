"""Tests for HubSpot adapter settings resolution."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.steward_shared.config import load_settings
from resources.adapters.hubspot.config import (
    HubSpotAdapterSettings,
    resolve_hubspot_adapter_settings,
)


def test_resolve_hubspot_adapter_settings_defaults(tmp_path: Path) -> None:
    """Resolver should return defaults when component config is absent."""
    settings = load_settings(config_path=tmp_path / "steward.yaml", environ={})

    resolved = resolve_hubspot_adapter_settings(settings)

    assert resolved == HubSpotAdapterSettings()
    assert resolved.base_url == "https://api.hubapi.com"
    assert resolved.max_retries == 4
    assert resolved.safety_margin == 0.1


def test_resolve_hubspot_adapter_settings_cli_override(tmp_path: Path) -> None:
    """CLI params should hydrate explicit component overrides."""
    settings = load_settings(
        cli_params={
            "components": {
                "adapter": {
                    "hubspot": {
                        "access_token": "  pat-123  ",
                        "max_retries": 2,
                        "burst_capacity": 190,
                    }
                }
            }
        },
        config_path=tmp_path / "steward.yaml",
        environ={},
    )

    resolved = resolve_hubspot_adapter_settings(settings)

    assert resolved.access_token == "pat-123"
    assert resolved.max_retries == 2
    assert resolved.burst_capacity == 190


def test_environment_overrides_yaml(tmp_path: Path) -> None:
    """Environment values win over the YAML file for the same key."""
    config_path = tmp_path / "steward.yaml"
    config_path.write_text(
        "components:\n"
        "  adapter:\n"
        "    hubspot:\n"
        "      safety_margin: 0.2\n"
        "      daily_capacity: 1000\n",
        encoding="utf-8",
    )

    settings = load_settings(
        config_path=config_path,
        environ={"STEWARD_COMPONENTS__ADAPTER__HUBSPOT__SAFETY_MARGIN": "0.3"},
    )

    resolved = resolve_hubspot_adapter_settings(settings)

    assert resolved.safety_margin == 0.3
    assert resolved.daily_capacity == 1000


def test_jitter_must_stay_below_base_delay() -> None:
    """Settings reject a jitter ceiling as wide as the base delay."""
    with pytest.raises(ValidationError):
        HubSpotAdapterSettings(base_delay_ms=500, jitter_ceiling_ms=500)


def test_unknown_keys_are_rejected() -> None:
    """Adapter settings forbid unknown keys."""
    with pytest.raises(ValidationError):
        HubSpotAdapterSettings.model_validate({"api_key": "x"})
