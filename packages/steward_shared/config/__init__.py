"""Shared configuration for Steward components."""

from .loader import load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    LoggingSettings,
    StewardSettings,
    resolve_component_settings,
)
from .sources import ENV_ALIASES, ENV_PREFIX

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ENV_ALIASES",
    "ENV_PREFIX",
    "LoggingSettings",
    "StewardSettings",
    "load_settings",
    "resolve_component_settings",
]
