"""
Module: warehouse_kernel.stores.warehouse_store
Responsibility: Keyed storage for Warehouse rows, including the ordered
    multi-row lock used by transfers.
Architecture position: Kernel > Stores.  Leaf component.

Invariants enforced:
    - lock_ordered() acquires row locks in ascending id order.  Two
      transfers over the same pair of warehouses, in either direction,
      request locks in the same order and cannot deadlock each other.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select

from warehouse_kernel.models.warehouse import Warehouse
from warehouse_kernel.stores.base import BaseStore


class WarehouseStore(BaseStore[Warehouse]):
    """Durable keyed storage for warehouse records."""

    model = Warehouse

    def lock_ordered(self, warehouse_ids: Iterable[UUID]) -> dict[UUID, Warehouse | None]:
        """
        Lock several warehouse rows in ascending id order.

        Returns:
            Mapping of every requested id to its locked row, or None when
            the warehouse does not exist.
        """
        locked: dict[UUID, Warehouse | None] = {}
        for warehouse_id in sorted(set(warehouse_ids), key=str):
            locked[warehouse_id] = self.get_for_update(warehouse_id)
        return locked

    def find_by_name(self, name: str) -> Warehouse | None:
        return self.session.execute(
            select(Warehouse).where(Warehouse.name == name)
        ).scalar_one_or_none()

    def list_all(self) -> list[Warehouse]:
        """All warehouses ordered by name."""
        return list(
            self.session.execute(
                select(Warehouse).order_by(Warehouse.name)
            ).scalars()
        )
