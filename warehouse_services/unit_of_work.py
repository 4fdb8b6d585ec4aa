"""
Unit of work -- one transaction per kernel operation, with whole-unit retry.

Responsibility:
    Opens a session, runs a unit of kernel work on it, commits on success
    and rolls back on any failure.  Store-level exceptions (SQLAlchemy /
    DBAPI) are translated into the kernel taxonomy here, at the transaction
    boundary.  RetryingRunner re-runs a unit that failed with a retryable
    ConcurrencyError, each attempt on a fresh session.

Architecture position:
    Services -- transaction ownership.  The kernel services flush and never
    commit or retry; this module is the only place that does either.

Invariants enforced:
    - All-or-nothing: a unit that raises leaves no committed writes.
    - Only ConcurrencyError subclasses are retried.  Domain errors and
      infrastructure errors propagate on the first attempt.

Failure modes:
    - OptimisticLockError, ConcurrentInsertError, TransactionConflictError
      from a single attempt.
    - RetryExhaustedError when every attempt conflicted.
    - StoreUnavailableError for any other store failure, chained to the
      original exception.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from warehouse_config.schema import RetrySettings
from warehouse_kernel.exceptions import (
    ConcurrencyError,
    ConcurrentInsertError,
    OptimisticLockError,
    RetryExhaustedError,
    StoreUnavailableError,
    TransactionConflictError,
    WarehouseKernelError,
)
from warehouse_kernel.logging_config import get_logger
from warehouse_kernel.services.base import constraint_violated
from warehouse_kernel.services.inventory_service import (
    ITEM_SKU_COLUMNS,
    ITEM_SKU_CONSTRAINT,
)

logger = get_logger("services.unit_of_work")

T = TypeVar("T")

# PostgreSQL deadlock_detected and serialization_failure
RETRYABLE_SQLSTATES = frozenset({"40P01", "40001"})


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def translate_store_error(exc: SQLAlchemyError, operation: str) -> WarehouseKernelError:
    """Map a SQLAlchemy/DBAPI failure onto the kernel exception taxonomy."""
    if isinstance(exc, StaleDataError):
        return OptimisticLockError("unknown")

    if isinstance(exc, IntegrityError) and constraint_violated(
        exc, ITEM_SKU_CONSTRAINT, *ITEM_SKU_COLUMNS
    ):
        return ConcurrentInsertError("InventoryItem", ITEM_SKU_CONSTRAINT)

    if isinstance(exc, DBAPIError):
        sqlstate = _sqlstate(exc)
        if sqlstate in RETRYABLE_SQLSTATES:
            return TransactionConflictError(sqlstate)
        # SQLite reports writer contention past its busy timeout this way.
        if "database is locked" in str(exc.orig):
            return TransactionConflictError(None)
        return StoreUnavailableError(operation, type(exc.orig).__name__)

    return StoreUnavailableError(operation, type(exc).__name__)


class UnitOfWork:
    """
    A single transactional attempt.

    Usage:
        uow = UnitOfWork(session_factory, "add_item")
        info = uow.run(lambda session: InventoryService(session).add_item(wid, draft))
    """

    def __init__(self, session_factory: sessionmaker[Session], operation: str):
        self._session_factory = session_factory
        self.operation = operation

    def run(self, work: Callable[[Session], T]) -> T:
        session = self._session_factory()
        logger.debug("transaction_started", extra={"operation": self.operation})
        try:
            result = work(session)
            session.commit()
        except WarehouseKernelError as exc:
            session.rollback()
            logger.info(
                "transaction_rolled_back",
                extra={"operation": self.operation, "error_code": exc.code},
            )
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            translated = translate_store_error(exc, self.operation)
            logger.warning(
                "transaction_rolled_back",
                extra={"operation": self.operation, "error_code": translated.code},
                exc_info=True,
            )
            raise translated from exc
        except Exception:
            session.rollback()
            logger.error(
                "transaction_rolled_back",
                extra={"operation": self.operation, "error_code": "INTERNAL_ERROR"},
                exc_info=True,
            )
            raise
        finally:
            session.close()

        logger.debug("transaction_committed", extra={"operation": self.operation})
        return result


class RetryingRunner:
    """
    Runs units of work, retrying the whole unit on concurrency conflicts.

    Backoff is linear: attempt n sleeps ``backoff_seconds * n`` before
    attempt n + 1.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        retry: RetrySettings,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._session_factory = session_factory
        self._retry = retry
        self._sleep = sleep

    def run(self, operation: str, work: Callable[[Session], T]) -> T:
        max_attempts = self._retry.max_attempts
        for attempt in range(1, max_attempts + 1):
            try:
                return UnitOfWork(self._session_factory, operation).run(work)
            except ConcurrencyError as exc:
                logger.warning(
                    "unit_of_work_conflict",
                    extra={
                        "operation": operation,
                        "attempt": attempt,
                        "max_attempts": max_attempts,
                        "error_code": exc.code,
                    },
                )
                if attempt == max_attempts:
                    logger.error(
                        "retry_exhausted",
                        extra={"operation": operation, "attempts": attempt},
                    )
                    raise RetryExhaustedError(operation, attempt) from exc
                self._sleep(self._retry.backoff_seconds * attempt)

        # max_attempts >= 1 is guaranteed by the settings loader
        raise RetryExhaustedError(operation, max_attempts)
