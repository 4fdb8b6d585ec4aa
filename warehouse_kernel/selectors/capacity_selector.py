"""
Module: warehouse_kernel.selectors.capacity_selector
Responsibility: Capacity reporting across all warehouses: utilization per
    warehouse with network totals, high-utilization alerts, and the audit
    of stored capacities against item quantities.
Architecture position: Kernel > Selectors.  Read-only.

Invariants enforced:
    - find_capacity_drift() is the audit of capacity conservation; it is
      empty in a consistent store.
    - A warehouse with max_capacity 0 has utilization 0 and never alerts.
"""

from sqlalchemy import func, select

from warehouse_kernel.domain.dtos import CapacityDrift, UtilizationReport, WarehouseUtilization
from warehouse_kernel.models.inventory_item import InventoryItem
from warehouse_kernel.models.warehouse import Warehouse
from warehouse_kernel.selectors.base import BaseSelector

DEFAULT_ALERT_THRESHOLD = 0.75


class CapacitySelector(BaseSelector[Warehouse]):
    """Read-only capacity queries."""

    def _utilizations(self) -> list[WarehouseUtilization]:
        rows = self.session.execute(
            select(
                Warehouse.id,
                Warehouse.name,
                Warehouse.current_capacity,
                Warehouse.max_capacity,
            ).order_by(Warehouse.name)
        ).all()
        return [
            WarehouseUtilization(
                warehouse_id=row.id,
                name=row.name,
                current_capacity=row.current_capacity,
                max_capacity=row.max_capacity,
            )
            for row in rows
        ]

    def utilization_report(self) -> UtilizationReport:
        """Per-warehouse utilization ordered by name, plus totals."""
        warehouses = tuple(self._utilizations())
        return UtilizationReport(
            warehouses=warehouses,
            total_current=sum(w.current_capacity for w in warehouses),
            total_max=sum(w.max_capacity for w in warehouses),
        )

    def capacity_alerts(
        self, threshold: float = DEFAULT_ALERT_THRESHOLD
    ) -> list[WarehouseUtilization]:
        """
        Warehouses at or above ``threshold`` utilization.

        Args:
            threshold: Fraction between 0 and 1.

        Returns:
            Alerted warehouses, highest utilization first, ties by name.
        """
        if not 0 <= threshold <= 1:
            raise ValueError(f"threshold must be between 0 and 1, got {threshold}")
        alerts = [
            w
            for w in self._utilizations()
            if w.max_capacity > 0 and w.utilization >= threshold
        ]
        alerts.sort(key=lambda w: (-w.utilization, w.name))
        return alerts

    def find_capacity_drift(self) -> list[CapacityDrift]:
        """Warehouses whose current_capacity differs from their items' total."""
        totals = (
            select(
                InventoryItem.warehouse_id.label("warehouse_id"),
                func.sum(InventoryItem.quantity).label("item_total"),
            )
            .group_by(InventoryItem.warehouse_id)
            .subquery()
        )
        item_total = func.coalesce(totals.c.item_total, 0)
        rows = self.session.execute(
            select(
                Warehouse.id,
                Warehouse.name,
                Warehouse.current_capacity,
                item_total.label("item_total"),
            )
            .outerjoin(totals, totals.c.warehouse_id == Warehouse.id)
            .where(Warehouse.current_capacity != item_total)
            .order_by(Warehouse.name)
        ).all()
        return [
            CapacityDrift(
                warehouse_id=row.id,
                name=row.name,
                stored_capacity=row.current_capacity,
                item_total=int(row.item_total),
            )
            for row in rows
        ]
