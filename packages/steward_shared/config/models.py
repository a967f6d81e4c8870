"""Typed settings for Steward and per-component resolution."""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Literal, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .sources import PrefixedEnvironmentSource

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "steward" / "steward.yaml"

COMPONENT_KINDS = ("adapter", "service")

TComponent = TypeVar("TComponent", bound=BaseModel)


class LoggingSettings(BaseModel):
    """Root logger behavior."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "steward"
    environment: str = "dev"


class _Namespace(BaseModel):
    model_config = ConfigDict(extra="allow")


class ComponentsSettings(BaseModel):
    """``components.adapter.<name>`` and ``components.service.<name>`` blocks.

    Each block stays an untyped mapping here and is validated against the
    owning component's model in ``resolve_component_settings``.
    """

    model_config = ConfigDict(extra="forbid")

    adapter: _Namespace = Field(default_factory=_Namespace)
    service: _Namespace = Field(default_factory=_Namespace)

    @model_validator(mode="before")
    @classmethod
    def _grouped_keys_only(cls, value: object) -> object:
        if isinstance(value, dict):
            for key in value:
                kind, sep, name = str(key).partition("_")
                if sep and kind in COMPONENT_KINDS:
                    raise ValueError(
                        f"components.{key} is not supported; "
                        f"nest it as components.{kind}.{name}"
                    )
        return value


class StewardSettings(BaseSettings):
    """Process-wide settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    components: ComponentsSettings = Field(default_factory=ComponentsSettings)

    config_path: ClassVar[Path] = DEFAULT_CONFIG_PATH
    environ_override: ClassVar[Mapping[str, str] | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            PrefixedEnvironmentSource(settings_cls, environ=cls.environ_override),
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls.config_path,
                yaml_file_encoding="utf-8",
            ),
        )


def resolve_component_settings(
    *,
    settings: StewardSettings,
    component_id: str,
    model: type[TComponent],
) -> TComponent:
    """Validate one component's block, e.g. ``adapter_hubspot``.

    Absent blocks yield the model's defaults.
    """
    kind, sep, name = component_id.partition("_")
    if not sep or kind not in COMPONENT_KINDS:
        raise ValueError(
            f"component id must start with adapter_ or service_: {component_id}"
        )
    namespace: dict[str, Any] = getattr(settings.components, kind).model_dump()
    block = namespace.get(name, {})
    if not isinstance(block, dict):
        raise TypeError(f"components.{kind}.{name} must be a mapping")
    return model.model_validate(block)
