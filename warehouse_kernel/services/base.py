"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor, the flush-only session contract and
    the translation of optimistic-lock and unique-constraint failures into
    typed kernel exceptions.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Every service in ``warehouse_kernel/services/`` that performs write
    operations extends this class.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or rollback themselves.  The caller
      (the unit of work in warehouse_services, or a test harness) owns
      commit/rollback.
    - Every quantity write goes through a version-checked flush; a row
      changed by a concurrent transaction surfaces as OptimisticLockError.

Failure modes:
    - OptimisticLockError when the flush hits a version mismatch.
    - IntegrityError is re-raised unchanged unless a subclass recognises
      the violated constraint.
"""

from abc import ABC
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from warehouse_kernel.db.base import Base
from warehouse_kernel.exceptions import OptimisticLockError
from warehouse_kernel.logging_config import get_logger

ModelType = TypeVar("ModelType", bound=Base)

logger = get_logger("services.base")


def constraint_violated(exc: IntegrityError, name: str, *columns: str) -> bool:
    """
    Whether ``exc`` reports a violation of the named unique constraint.

    PostgreSQL reports the constraint name; SQLite reports the
    ``table.column`` list instead, so both forms are matched.
    """
    message = str(exc.orig)
    if name in message:
        return True
    return bool(columns) and all(column in message for column in columns)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT retry.  Retryable errors propagate to the caller.
        - Does NOT provide reporting queries -- those belong in
          ``warehouse_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        """
        Initialize the service.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session

    def _flush(self, entity_type: str, entity_id: UUID | None = None) -> None:
        """Flush pending writes, translating version conflicts."""
        try:
            self.session.flush()
        except StaleDataError as exc:
            logger.warning(
                "optimistic_lock_conflict",
                extra={
                    "entity_type": entity_type,
                    "entity_id": str(entity_id) if entity_id else None,
                },
            )
            raise OptimisticLockError(entity_type, entity_id) from exc
