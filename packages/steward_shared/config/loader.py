"""Settings loading with a fixed precedence.

Highest first: explicit ``cli_params``, environment (see ``sources``), the
YAML file, then model defaults. Mappings merge key by key across layers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Mapping

from .models import DEFAULT_CONFIG_PATH, StewardSettings


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
) -> StewardSettings:
    """Resolve settings for one process.

    ``environ`` defaults to ``os.environ``. A missing YAML file is treated as
    empty.
    """
    path = DEFAULT_CONFIG_PATH if config_path is None else Path(config_path)

    class _Bound(StewardSettings):
        config_path: ClassVar[Path] = path
        environ_override: ClassVar[Mapping[str, str] | None] = environ

    return _Bound(**dict(cli_params or {}))
