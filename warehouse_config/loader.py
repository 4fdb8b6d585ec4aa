"""
Settings Loader (``warehouse_config.loader``).

Responsibility
--------------
Loads YAML settings files, layers an override file on top of the
defaults, and parses the result into the frozen dataclasses of
``warehouse_config.schema``.  Runtime callers go through
``warehouse_config.get_active_settings()``.

Invariants enforced
-------------------
* Every parse error raises ``ValueError`` naming the offending key.
* Unknown sections and keys are rejected rather than ignored.
* ``compute_checksum`` is deterministic for identical settings.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong type, out-of-range value or unknown key  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from warehouse_config.schema import (
    CapacitySettings,
    DatabaseSettings,
    KernelSettings,
    LoggingSettings,
    RetrySettings,
)

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

_LOG_LEVELS = frozenset(logging.getLevelNamesMapping())


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def merge_settings(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively layer ``override`` on top of ``base``; neither is mutated."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------


def _check_keys(section: str, data: dict[str, Any], allowed: set[str]) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ValueError(f"{section}.{unknown[0]}: unknown setting")


def _int(key: str, value: Any, *, minimum: int = 0) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key}: expected an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"{key}: must be >= {minimum}, got {value}")
    return value


def _float(key: str, value: Any, *, minimum: float = 0.0, maximum: float | None = None) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key}: expected a number, got {value!r}")
    if value < minimum or (maximum is not None and value > maximum):
        raise ValueError(f"{key}: out of range, got {value}")
    return float(value)


def _bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{key}: expected true or false, got {value!r}")
    return value


def _str(key: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key}: expected a non-empty string, got {value!r}")
    return value


# ---------------------------------------------------------------------------
# Section parsers
# ---------------------------------------------------------------------------


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    """Parse the ``database`` section."""
    _check_keys("database", data, set(DatabaseSettings.__dataclass_fields__))
    defaults = DatabaseSettings()
    return DatabaseSettings(
        url=_str("database.url", data.get("url", defaults.url)),
        echo=_bool("database.echo", data.get("echo", defaults.echo)),
        pool_size=_int("database.pool_size", data.get("pool_size", defaults.pool_size), minimum=1),
        max_overflow=_int("database.max_overflow", data.get("max_overflow", defaults.max_overflow)),
        pool_pre_ping=_bool(
            "database.pool_pre_ping", data.get("pool_pre_ping", defaults.pool_pre_ping)
        ),
        pool_timeout=_int("database.pool_timeout", data.get("pool_timeout", defaults.pool_timeout)),
        pool_recycle=_int("database.pool_recycle", data.get("pool_recycle", defaults.pool_recycle)),
        sqlite_busy_timeout=_float(
            "database.sqlite_busy_timeout",
            data.get("sqlite_busy_timeout", defaults.sqlite_busy_timeout),
        ),
    )


def parse_retry(data: dict[str, Any]) -> RetrySettings:
    """Parse the ``retry`` section."""
    _check_keys("retry", data, set(RetrySettings.__dataclass_fields__))
    defaults = RetrySettings()
    return RetrySettings(
        max_attempts=_int(
            "retry.max_attempts", data.get("max_attempts", defaults.max_attempts), minimum=1
        ),
        backoff_seconds=_float(
            "retry.backoff_seconds", data.get("backoff_seconds", defaults.backoff_seconds)
        ),
    )


def parse_logging(data: dict[str, Any]) -> LoggingSettings:
    """Parse the ``logging`` section."""
    _check_keys("logging", data, set(LoggingSettings.__dataclass_fields__))
    level = _str("logging.level", data.get("level", LoggingSettings().level)).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"logging.level: unknown level {level!r}")
    return LoggingSettings(level=level)


def parse_capacity(data: dict[str, Any]) -> CapacitySettings:
    """Parse the ``capacity`` section."""
    _check_keys("capacity", data, set(CapacitySettings.__dataclass_fields__))
    return CapacitySettings(
        alert_threshold=_float(
            "capacity.alert_threshold",
            data.get("alert_threshold", CapacitySettings().alert_threshold),
            maximum=1.0,
        ),
    )


_SECTIONS = {
    "database": parse_database,
    "retry": parse_retry,
    "logging": parse_logging,
    "capacity": parse_capacity,
}


def parse_settings(data: dict[str, Any]) -> KernelSettings:
    """
    Parse a complete settings mapping into ``KernelSettings``.

    Raises:
        ValueError: on an unknown section, unknown key or invalid value.
    """
    unknown = sorted(set(data) - set(_SECTIONS))
    if unknown:
        raise ValueError(f"{unknown[0]}: unknown settings section")

    sections: dict[str, Any] = {}
    for name, parser in _SECTIONS.items():
        raw = data.get(name) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"{name}: expected a mapping, got {raw!r}")
        sections[name] = parser(raw)

    return KernelSettings(**sections, checksum=compute_checksum(data))


def load_settings(
    override_path: Path | None = None,
    database_url: str | None = None,
) -> KernelSettings:
    """
    Load defaults, layer the optional override file and database URL, parse.

    Args:
        override_path: YAML file whose values replace the defaults.
        database_url: Replaces ``database.url`` when given.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    if override_path is not None:
        data = merge_settings(data, load_yaml_file(override_path))
    if database_url:
        data = merge_settings(data, {"database": {"url": database_url}})
    return parse_settings(data)


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
