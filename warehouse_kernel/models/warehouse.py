"""
Module: warehouse_kernel.models.warehouse
Responsibility: ORM persistence for warehouses, the capacity-bounded
    containers that own inventory items.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - 0 <= current_capacity <= max_capacity (check constraints).
    - name is unique across all warehouses (uq_warehouse_name).
    - current_capacity equals the sum of the owned items' quantities.  This
      is not expressible as a constraint; the services keep it true by
      writing capacity and items in the same transaction.

Failure modes:
    - IntegrityError on duplicate name or on a capacity outside its bounds.
    - StaleDataError when the version read no longer matches on UPDATE/DELETE.
"""

from sqlalchemy import CheckConstraint, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from warehouse_kernel.db.base import TrackedBase, version_column


class Warehouse(TrackedBase):
    """
    A storage site with a fixed maximum capacity.

    Contract:
        current_capacity is only ever changed by a CapacityLedger-approved
        delta applied together with the item write that caused it.

    Guarantees:
        - name is unique (uq_warehouse_name).
        - max_capacity >= 0 and 0 <= current_capacity <= max_capacity.
        - version increments on every UPDATE.

    Non-goals:
        - No in-memory collection of items.  Ownership lives on
          InventoryItem.warehouse_id.
    """

    __tablename__ = "warehouses"

    __table_args__ = (
        UniqueConstraint("name", name="uq_warehouse_name"),
        CheckConstraint("max_capacity >= 0", name="ck_warehouse_max_capacity_nonneg"),
        CheckConstraint(
            "current_capacity >= 0", name="ck_warehouse_current_capacity_nonneg"
        ),
        CheckConstraint(
            "current_capacity <= max_capacity",
            name="ck_warehouse_current_within_max",
        ),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    location: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    max_capacity: Mapped[int] = mapped_column(
        nullable=False,
    )

    current_capacity: Mapped[int] = mapped_column(
        nullable=False,
        default=0,
    )

    version: Mapped[int] = version_column()

    __mapper_args__ = {"version_id_col": version}

    @property
    def headroom(self) -> int:
        """Capacity still available: max_capacity - current_capacity."""
        return self.max_capacity - self.current_capacity

    @property
    def utilization(self) -> float:
        """Fraction of max_capacity in use; 0.0 for a zero-capacity warehouse."""
        if self.max_capacity == 0:
            return 0.0
        return self.current_capacity / self.max_capacity

    def __repr__(self) -> str:
        return (
            f"<Warehouse {self.name}: "
            f"{self.current_capacity}/{self.max_capacity}>"
        )
