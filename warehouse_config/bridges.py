"""
Config -> Kernel Bridges.

Functions that convert KernelSettings into kernel-compatible inputs.  They
live in warehouse_config because the kernel must NEVER import
warehouse_config.

Usage:
    from warehouse_config.bridges import engine_kwargs

    settings = get_active_settings()
    init_engine_from_url(settings.database.url, **engine_kwargs(settings))
"""

from __future__ import annotations

import logging
from typing import Any

from warehouse_config.schema import KernelSettings


def engine_kwargs(settings: KernelSettings) -> dict[str, Any]:
    """Keyword arguments for init_engine_from_url, excluding the URL."""
    db = settings.database
    return {
        "echo": db.echo,
        "pool_size": db.pool_size,
        "max_overflow": db.max_overflow,
        "pool_pre_ping": db.pool_pre_ping,
        "pool_timeout": db.pool_timeout,
        "pool_recycle": db.pool_recycle,
        "sqlite_busy_timeout": db.sqlite_busy_timeout,
    }


def logging_level(settings: KernelSettings) -> int:
    """Numeric level for configure_logging."""
    return logging.getLevelNamesMapping()[settings.logging.level]
