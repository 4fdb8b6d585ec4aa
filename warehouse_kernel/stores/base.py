"""
Module: warehouse_kernel.stores.base
Responsibility: Generic keyed storage over a caller-owned Session.  A store
    loads, locks, adds and deletes rows of one model; it never flushes,
    commits or validates.
Architecture position: Kernel > Stores.  May import from db/ and models/.
    MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    - Locking reads use SELECT ... FOR UPDATE and populate_existing, so the
      returned object reflects the row as locked, not a stale identity-map
      copy.  SQLite renders no FOR UPDATE clause; the model's version
      column is the guard there.

Failure modes:
    - None raised directly.  Missing rows return None; callers decide
      which not-found error applies.
"""

from abc import ABC
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from warehouse_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseStore(ABC, Generic[ModelType]):
    """
    Abstract base class for all stores.

    Contract:
        Subclasses set ``model``.  All methods work inside the caller's
        transaction; persistence happens when the service flushes.
    """

    model: type[ModelType]

    def __init__(self, session: Session):
        self.session = session

    def get(self, entity_id: UUID) -> ModelType | None:
        """Load a row by primary key without locking."""
        return self.session.get(self.model, entity_id)

    def get_for_update(self, entity_id: UUID) -> ModelType | None:
        """Load a row by primary key with a row lock for concurrent mutation."""
        return self.session.execute(
            select(self.model)
            .where(self.model.id == entity_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def add(self, entity: ModelType) -> ModelType:
        self.session.add(entity)
        return entity

    def delete(self, entity: ModelType) -> None:
        self.session.delete(entity)
