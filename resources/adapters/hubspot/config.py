"""Pydantic settings for the HubSpot CMS adapter resource."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from packages.steward_shared.config import StewardSettings, resolve_component_settings

RESOURCE_COMPONENT_ID = "adapter_hubspot"


class HubSpotAdapterSettings(BaseModel):
    """Runtime settings for HubSpot CMS API access and rate governance."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = "https://api.hubapi.com"
    access_token: str = ""
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=4, ge=0)
    base_delay_ms: int = Field(default=2000, gt=0)
    jitter_ceiling_ms: int = Field(default=1000, ge=0)
    safety_margin: float = Field(default=0.1, ge=0, lt=1.0)
    burst_capacity: int = Field(default=100, gt=0)
    burst_window_ms: int = Field(default=10_000, gt=0)
    daily_capacity: int = Field(default=500_000, gt=0)

    @field_validator("base_url", "access_token", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        """Normalize surrounding whitespace for textual settings."""
        if isinstance(value, str):
            return value.strip()
        return value

    @model_validator(mode="after")
    def _jitter_below_base(self) -> "HubSpotAdapterSettings":
        """Keep retry jitter narrower than one base delay unit."""
        if self.jitter_ceiling_ms >= self.base_delay_ms:
            raise ValueError("jitter_ceiling_ms must be less than base_delay_ms")
        return self


def resolve_hubspot_adapter_settings(
    settings: StewardSettings,
) -> HubSpotAdapterSettings:
    """Resolve adapter settings from ``components.adapter.hubspot``."""
    return resolve_component_settings(
        settings=settings,
        component_id=RESOURCE_COMPONENT_ID,
        model=HubSpotAdapterSettings,
    )
