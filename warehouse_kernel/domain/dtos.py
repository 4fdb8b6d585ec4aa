"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures that cross the kernel boundary:
    drafts coming in (ItemDraft, WarehouseDraft, WarehouseChanges), records
    going out (ItemInfo, WarehouseInfo, TransferResult) and capacity report
    rows (WarehouseUtilization, UtilizationReport, CapacityDrift).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods exist as boundary converters but are only
    invoked from the service and selector layers.

Invariants enforced:
    - Services and selectors return these DTOs, never ORM entities.
    - All DTOs are frozen; a caller cannot mutate kernel state through them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from warehouse_kernel.models.inventory_item import InventoryItem as InventoryItemModel
    from warehouse_kernel.models.warehouse import Warehouse as WarehouseModel


# ---------------------------------------------------------------------------
# Inbound drafts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ItemAttributes:
    """Descriptive attributes of an item, everything except SKU and quantity."""

    name: str
    description: str | None = None
    category: str | None = None
    storage_location: str | None = None
    expiration_date: date | None = None


@dataclass(frozen=True)
class ItemDraft:
    """
    Caller-supplied item data for add and update.

    The draft never carries a warehouse; the target warehouse is always an
    explicit argument of the operation.
    """

    name: str
    sku: str
    quantity: int
    description: str | None = None
    category: str | None = None
    storage_location: str | None = None
    expiration_date: date | None = None

    @property
    def attributes(self) -> ItemAttributes:
        return ItemAttributes(
            name=self.name,
            description=self.description,
            category=self.category,
            storage_location=self.storage_location,
            expiration_date=self.expiration_date,
        )


@dataclass(frozen=True)
class WarehouseDraft:
    """Caller-supplied data for a new warehouse."""

    name: str
    max_capacity: int
    location: str | None = None
    current_capacity: int | None = None


@dataclass(frozen=True)
class WarehouseChanges:
    """Replacement values for a warehouse update; current_capacity is absent."""

    name: str
    max_capacity: int
    location: str | None = None


# ---------------------------------------------------------------------------
# Outbound records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WarehouseInfo:
    """Immutable snapshot of a warehouse."""

    id: UUID
    name: str
    location: str | None
    max_capacity: int
    current_capacity: int
    version: int

    @property
    def headroom(self) -> int:
        return self.max_capacity - self.current_capacity

    @property
    def utilization(self) -> float:
        if self.max_capacity == 0:
            return 0.0
        return self.current_capacity / self.max_capacity

    @classmethod
    def from_model(cls, model: WarehouseModel) -> WarehouseInfo:
        return cls(
            id=model.id,
            name=model.name,
            location=model.location,
            max_capacity=model.max_capacity,
            current_capacity=model.current_capacity,
            version=model.version,
        )


@dataclass(frozen=True)
class ItemInfo:
    """Immutable snapshot of an inventory item."""

    id: UUID
    warehouse_id: UUID
    name: str
    sku: str
    quantity: int
    description: str | None
    category: str | None
    storage_location: str | None
    expiration_date: date | None

    @classmethod
    def from_model(cls, model: InventoryItemModel) -> ItemInfo:
        return cls(
            id=model.id,
            warehouse_id=model.warehouse_id,
            name=model.name,
            sku=model.sku,
            quantity=model.quantity,
            description=model.description,
            category=model.category,
            storage_location=model.storage_location,
            expiration_date=model.expiration_date,
        )


@dataclass(frozen=True)
class TransferResult:
    """
    Outcome of a completed transfer.

    source_item_id always names the item the stock left; when
    source_item_removed is True that item no longer exists.
    destination_merged tells whether the stock joined an existing item
    (True) or created a new one (False).
    """

    source_warehouse_id: UUID
    destination_warehouse_id: UUID
    sku: str
    quantity: int
    source_item_id: UUID
    destination_item_id: UUID
    source_item_removed: bool
    destination_merged: bool


# ---------------------------------------------------------------------------
# Capacity reporting
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WarehouseUtilization:
    """Capacity figures for one warehouse."""

    warehouse_id: UUID
    name: str
    current_capacity: int
    max_capacity: int

    @property
    def headroom(self) -> int:
        return self.max_capacity - self.current_capacity

    @property
    def utilization(self) -> float:
        if self.max_capacity == 0:
            return 0.0
        return self.current_capacity / self.max_capacity

    @property
    def percent(self) -> float:
        """Utilization as a percentage rounded to one decimal place."""
        return round(self.utilization * 100, 1)


@dataclass(frozen=True)
class UtilizationReport:
    """Per-warehouse utilization plus network totals."""

    warehouses: tuple[WarehouseUtilization, ...]
    total_current: int
    total_max: int

    @property
    def total_headroom(self) -> int:
        return self.total_max - self.total_current

    @property
    def utilization(self) -> float:
        if self.total_max == 0:
            return 0.0
        return self.total_current / self.total_max


@dataclass(frozen=True)
class CapacityDrift:
    """A warehouse whose stored capacity disagrees with its items."""

    warehouse_id: UUID
    name: str
    stored_capacity: int
    item_total: int

    @property
    def drift(self) -> int:
        return self.stored_capacity - self.item_total
