"""
Module: warehouse_kernel.stores.item_store
Responsibility: Keyed storage for InventoryItem rows, queryable by owning
    warehouse and by (warehouse, SKU).
Architecture position: Kernel > Stores.  Leaf component.
"""

from uuid import UUID

from sqlalchemy import func, select

from warehouse_kernel.models.inventory_item import InventoryItem
from warehouse_kernel.stores.base import BaseStore


class ItemStore(BaseStore[InventoryItem]):
    """Durable keyed storage for inventory items."""

    model = InventoryItem

    def find_by_sku(
        self,
        warehouse_id: UUID,
        sku: str,
        *,
        for_update: bool = False,
    ) -> InventoryItem | None:
        """The item holding ``sku`` in ``warehouse_id``, if any."""
        stmt = select(InventoryItem).where(
            InventoryItem.warehouse_id == warehouse_id,
            InventoryItem.sku == sku,
        )
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_by_warehouse(self, warehouse_id: UUID) -> list[InventoryItem]:
        """Items owned by ``warehouse_id`` ordered by SKU."""
        return list(
            self.session.execute(
                select(InventoryItem)
                .where(InventoryItem.warehouse_id == warehouse_id)
                .order_by(InventoryItem.sku)
            ).scalars()
        )

    def count_for_warehouse(self, warehouse_id: UUID) -> int:
        return self.session.execute(
            select(func.count(InventoryItem.id)).where(
                InventoryItem.warehouse_id == warehouse_id
            )
        ).scalar_one()
