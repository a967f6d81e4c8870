"""Tests for pydantic-settings-backed shared configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import BaseModel, ValidationError

from packages.steward_shared.config import load_settings, resolve_component_settings
from packages.steward_shared.config.sources import coerce_env_value
from resources.adapters.hubspot.config import HubSpotAdapterSettings
from services.content.content_authority.config import ContentAuthoritySettings


class _DemoSettings(BaseModel):
    pool_size: int = 5


def test_load_settings_uses_steward_precedence_cascade(tmp_path: Path) -> None:
    """Init params should override env, env should override YAML, then defaults."""
    config_file = tmp_path / "steward.yaml"
    config_file.write_text(
        "\n".join(
            [
                "logging:",
                "  level: WARNING",
                "components:",
                "  adapter:",
                "    hubspot:",
                "      max_retries: 2",
                "      burst_capacity: 150",
                "  service:",
                "    content_authority:",
                "      default_list_limit: 10",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(
        cli_params={"logging": {"level": "DEBUG"}},
        environ={
            "STEWARD_LOGGING__LEVEL": "ERROR",
            "STEWARD_LOGGING__JSON_OUTPUT": "false",
            "STEWARD_COMPONENTS__ADAPTER__HUBSPOT__MAX_RETRIES": "3",
        },
        config_path=config_file,
    )

    hubspot = resolve_component_settings(
        settings=settings,
        component_id="adapter_hubspot",
        model=HubSpotAdapterSettings,
    )
    service = resolve_component_settings(
        settings=settings,
        component_id="service_content_authority",
        model=ContentAuthoritySettings,
    )

    assert settings.logging.level == "DEBUG"
    assert settings.logging.json_output is False
    assert hubspot.max_retries == 3
    assert hubspot.burst_capacity == 150
    assert service.default_list_limit == 10


def test_load_settings_uses_model_defaults_when_sources_missing(tmp_path: Path) -> None:
    """Settings should fall back to model defaults when env and YAML are absent."""
    settings = load_settings(config_path=tmp_path / "steward.yaml", environ={})

    assert settings.logging.service == "steward"
    assert settings.logging.level == "INFO"
    assert settings.logging.json_output is True
    assert (
        resolve_component_settings(
            settings=settings, component_id="adapter_demo", model=_DemoSettings
        ).pool_size
        == 5
    )


def test_environment_values_are_coerced(tmp_path: Path) -> None:
    """Numeric and JSON env strings become typed values."""
    settings = load_settings(
        config_path=tmp_path / "steward.yaml",
        environ={
            "STEWARD_COMPONENTS__ADAPTER__HUBSPOT__SAFETY_MARGIN": "0.2",
            "STEWARD_COMPONENTS__ADAPTER__DEMO": '{"pool_size": 8}',
            "UNRELATED": "ignored",
        },
    )

    hubspot = resolve_component_settings(
        settings=settings, component_id="adapter_hubspot", model=HubSpotAdapterSettings
    )
    demo = resolve_component_settings(
        settings=settings, component_id="adapter_demo", model=_DemoSettings
    )

    assert hubspot.safety_margin == 0.2
    assert demo.pool_size == 8


def test_flat_component_keys_are_rejected(tmp_path: Path) -> None:
    """Component settings must use the grouped namespace."""
    config_file = tmp_path / "steward.yaml"
    config_file.write_text(
        "components:\n  adapter_hubspot:\n    max_retries: 1\n", encoding="utf-8"
    )

    with pytest.raises(ValidationError, match="components.adapter.hubspot"):
        load_settings(config_path=config_file, environ={})


def test_unknown_component_kind_is_rejected(tmp_path: Path) -> None:
    """Resolution only accepts adapter and service component ids."""
    settings = load_settings(config_path=tmp_path / "steward.yaml", environ={})

    with pytest.raises(ValueError):
        resolve_component_settings(
            settings=settings, component_id="substrate_postgres", model=_DemoSettings
        )


def test_conventional_token_variable_is_honored(tmp_path: Path) -> None:
    """HUBSPOT_ACCESS_TOKEN fills the adapter token unless a prefixed value exists."""
    aliased = load_settings(
        config_path=tmp_path / "steward.yaml",
        environ={"HUBSPOT_ACCESS_TOKEN": " pat-alias "},
    )
    both = load_settings(
        config_path=tmp_path / "steward.yaml",
        environ={
            "HUBSPOT_ACCESS_TOKEN": "pat-alias",
            "STEWARD_COMPONENTS__ADAPTER__HUBSPOT__ACCESS_TOKEN": "pat-prefixed",
        },
    )

    def token(settings) -> str:
        return resolve_component_settings(
            settings=settings, component_id="adapter_hubspot", model=HubSpotAdapterSettings
        ).access_token

    assert token(aliased) == "pat-alias"
    assert token(both) == "pat-prefixed"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("TRUE", True),
        ("none", None),
        ("42", 42),
        ("1.5", 1.5),
        ("[1, 2]", [1, 2]),
        ("{broken", "{broken"),
        ("pat-na1-abc", "pat-na1-abc"),
    ],
)
def test_environment_strings_are_coerced(raw: str, expected: object) -> None:
    """Environment text becomes the obvious Python value."""
    assert coerce_env_value(raw) == expected
