"""Database layer - engine, base classes and types."""

from warehouse_kernel.db.base import UUID, Base, TrackedBase, UUIDString, version_column
from warehouse_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session_factory,
    init_engine_from_url,
    is_postgres,
    reset_engine,
)

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session_factory",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "is_postgres",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "version_column",
]
