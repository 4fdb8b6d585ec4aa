"""
warehouse_config -- single public entrypoint for runtime settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``.  No other component reads settings files or
    environment variables directly.

Architecture position:
    Configuration.  This package sits above ``warehouse_kernel`` and below
    ``warehouse_services``.  The kernel MUST NEVER import from
    ``warehouse_config``; ``bridges`` translates settings into
    kernel-compatible inputs.

Environment:
    WAREHOUSE_CONFIG -- path of a YAML file layered over defaults.yaml.
    DATABASE_URL     -- replaces database.url.

Failure modes:
    - ``FileNotFoundError`` -- WAREHOUSE_CONFIG names a missing file.
    - ``ValueError`` -- a setting has the wrong type, is out of range or
      is unknown; the message names the key.

Audit relevance:
    Every successful ``get_active_settings()`` call emits a
    ``config_loaded`` log entry with the settings checksum.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from warehouse_config.loader import load_settings
from warehouse_config.schema import (
    CapacitySettings,
    DatabaseSettings,
    KernelSettings,
    LoggingSettings,
    RetrySettings,
)

_logger = logging.getLogger("warehouse_kernel.config")

CONFIG_PATH_ENV = "WAREHOUSE_CONFIG"
DATABASE_URL_ENV = "DATABASE_URL"


def get_active_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> KernelSettings:
    """The ONLY public settings entrypoint.

    Args:
        config_path: Override file.  Defaults to $WAREHOUSE_CONFIG.
        environ: Environment mapping.  Defaults to os.environ.

    Returns:
        Frozen KernelSettings.
    """
    env = os.environ if environ is None else environ
    if config_path is None and env.get(CONFIG_PATH_ENV):
        config_path = Path(env[CONFIG_PATH_ENV])

    settings = load_settings(
        override_path=config_path,
        database_url=env.get(DATABASE_URL_ENV),
    )

    _logger.info(
        "config_loaded",
        extra={
            "checksum": settings.checksum,
            "override_path": str(config_path) if config_path else None,
            "dialect": settings.database.url.split(":", 1)[0],
            "retry_max_attempts": settings.retry.max_attempts,
        },
    )
    return settings


__all__ = [
    "get_active_settings",
    "KernelSettings",
    "DatabaseSettings",
    "RetrySettings",
    "LoggingSettings",
    "CapacitySettings",
]
