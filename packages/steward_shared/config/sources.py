"""Environment settings source for Steward.

``STEWARD_``-prefixed variables address nested keys with ``__``::

    STEWARD_COMPONENTS__ADAPTER__HUBSPOT__MAX_RETRIES=3
        -> components.adapter.hubspot.max_retries = 3

A small alias table maps conventional unprefixed names onto the same tree.
Prefixed variables win over aliases.
"""

from __future__ import annotations

import json
import os
from typing import Any, Mapping

from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

ENV_PREFIX = "STEWARD_"

ENV_ALIASES: Mapping[str, tuple[str, ...]] = {
    "HUBSPOT_ACCESS_TOKEN": ("components", "adapter", "hubspot", "access_token"),
}


class PrefixedEnvironmentSource(PydanticBaseSettingsSource):
    """Nested settings read from an environment mapping."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(settings_cls)
        self._environ = os.environ if environ is None else environ

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        # Whole tree is produced in __call__.
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        tree: dict[str, Any] = {}
        for name, path in ENV_ALIASES.items():
            raw = self._environ.get(name)
            if raw:
                _assign(tree, path, raw.strip())
        for name, raw in self._environ.items():
            if not name.startswith(ENV_PREFIX):
                continue
            path = tuple(
                part.strip().lower()
                for part in name[len(ENV_PREFIX) :].split("__")
                if part.strip()
            )
            if path:
                _assign(tree, path, coerce_env_value(raw))
        return tree


def coerce_env_value(raw: str) -> Any:
    """Turn an environment string into bool, None, number, JSON or text."""
    text = raw.strip()
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("null", "none"):
        return None
    if text[:1] in ("{", "["):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return raw
    for kind in (int, float):
        try:
            return kind(text)
        except ValueError:
            continue
    return raw


def _assign(tree: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    node = tree
    for part in path[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = node[part] = {}
        node = child
    node[path[-1]] = value
