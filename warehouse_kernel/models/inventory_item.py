"""
Module: warehouse_kernel.models.inventory_item
Responsibility: ORM persistence for stock held in a warehouse under a SKU.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - quantity > 0 (ck_item_quantity_positive).  Stock driven to zero is
      deleted, never stored.
    - At most one item per (warehouse_id, sku) (uq_item_warehouse_sku).
    - warehouse_id is a non-null foreign key: every item has exactly one
      owner.

Failure modes:
    - IntegrityError on a duplicate (warehouse_id, sku), on quantity <= 0,
      or on an unknown warehouse_id.
    - StaleDataError on a version mismatch.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from warehouse_kernel.db.base import TrackedBase, UUIDString, version_column


class InventoryItem(TrackedBase):
    """
    A quantity of one SKU owned by one warehouse.

    Guarantees:
        - sku is unique within its warehouse.
        - quantity is strictly positive.
    """

    __tablename__ = "inventory_items"

    __table_args__ = (
        UniqueConstraint("warehouse_id", "sku", name="uq_item_warehouse_sku"),
        CheckConstraint("quantity > 0", name="ck_item_quantity_positive"),
        Index("idx_item_warehouse", "warehouse_id"),
    )

    warehouse_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("warehouses.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    sku: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    category: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    # Bin, aisle or shelf code inside the warehouse
    storage_location: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    quantity: Mapped[int] = mapped_column(
        nullable=False,
    )

    expiration_date: Mapped[date | None] = mapped_column(
        nullable=True,
    )

    version: Mapped[int] = version_column()

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<InventoryItem {self.sku} x{self.quantity} @ {self.warehouse_id}>"
