"""Pydantic settings for Content Authority Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from packages.steward_shared.config import StewardSettings, resolve_component_settings

SERVICE_COMPONENT_ID = "service_content_authority"


class ContentAuthoritySettings(BaseModel):
    """Content Authority runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_list_limit: int = Field(default=20, gt=0)
    max_list_limit: int = Field(default=100, gt=0, le=100)
    tag_list_limit: int = Field(default=100, gt=0, le=100)
    audit_log_path: str = ""

    @model_validator(mode="after")
    def _default_within_max(self) -> "ContentAuthoritySettings":
        """Keep the default page size inside the maximum."""
        if self.default_list_limit > self.max_list_limit:
            raise ValueError("default_list_limit must not exceed max_list_limit")
        return self


def resolve_content_authority_settings(
    settings: StewardSettings,
) -> ContentAuthoritySettings:
    """Resolve service settings from ``components.service.content_authority``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=ContentAuthoritySettings,
    )
