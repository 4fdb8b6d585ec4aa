"""
KernelSettings schema.

Typed, frozen settings parsed from YAML by the loader.  The kernel never
sees these types directly; warehouse_config.bridges translates them into
plain keyword arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection and pool settings for init_engine_from_url."""

    url: str = "sqlite:///warehouse.db"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_pre_ping: bool = True
    pool_timeout: int = 30
    pool_recycle: int = 1800
    sqlite_busy_timeout: float = 30.0


@dataclass(frozen=True)
class RetrySettings:
    """Whole-unit retry on concurrency conflicts."""

    max_attempts: int = 3
    backoff_seconds: float = 0.05  # multiplied by the attempt number


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class CapacitySettings:
    alert_threshold: float = 0.75  # utilization fraction


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KernelSettings:
    """Complete runtime settings."""

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    retry: RetrySettings = field(default_factory=RetrySettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    capacity: CapacitySettings = field(default_factory=CapacitySettings)
    checksum: str = ""
