"""
InventoryService -- add, update, delete and read items of one warehouse.

Responsibility:
    Single-warehouse item operations.  Every quantity change is admitted by
    the CapacityLedger and written in the same flush as the warehouse's new
    current_capacity.

Architecture position:
    Kernel > Services -- imperative shell.
    Uses WarehouseStore, ItemStore, StockMergePolicy and the pure
    capacity_ledger.  Called by InventoryOrchestrator inside a unit of work.

Invariants enforced:
    - Capacity conservation: warehouse.current_capacity moves by exactly the
      item quantity delta, in the same flush as the item write.
    - Positive quantity: drafts with quantity <= 0 are rejected.
    - SKU uniqueness per warehouse: add merges, update rejects a SKU held
      by another item.
    - All checks precede writes; a rejected operation leaves the session
      untouched.

Locking:
    The warehouse row is locked first, then the item row.  TransferService
    uses the same order (warehouses, then items).

Failure modes:
    - InvalidQuantityError, InvalidItemError: bad draft.
    - WarehouseNotFoundError, ItemNotFoundError, ItemWarehouseMismatchError.
    - DuplicateSkuError: update renames SKU onto another item's SKU.
    - InsufficientCapacityError: not enough headroom.
    - OptimisticLockError, ConcurrentInsertError: concurrent writer; retry
      the whole unit.
"""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from warehouse_kernel.domain import capacity_ledger
from warehouse_kernel.domain.dtos import ItemDraft, ItemInfo
from warehouse_kernel.domain.stock_merge import MergeDecision, MergeInto
from warehouse_kernel.exceptions import (
    CapacityConflictError,
    ConcurrentInsertError,
    DuplicateSkuError,
    InvalidItemError,
    InvalidQuantityError,
    ItemNotFoundError,
    ItemWarehouseMismatchError,
    WarehouseNotFoundError,
)
from warehouse_kernel.logging_config import get_logger
from warehouse_kernel.models.inventory_item import InventoryItem
from warehouse_kernel.models.warehouse import Warehouse
from warehouse_kernel.services.base import BaseService, constraint_violated
from warehouse_kernel.services.stock_merge_policy import StockMergePolicy
from warehouse_kernel.stores.item_store import ItemStore
from warehouse_kernel.stores.warehouse_store import WarehouseStore

logger = get_logger("services.inventory")

ITEM_SKU_CONSTRAINT = "uq_item_warehouse_sku"
ITEM_SKU_COLUMNS = ("inventory_items.warehouse_id", "inventory_items.sku")


def validate_item_draft(draft: ItemDraft) -> None:
    """Reject drafts with a non-positive quantity or a blank name or SKU."""
    if isinstance(draft.quantity, bool) or not isinstance(draft.quantity, int):
        raise InvalidQuantityError(draft.quantity)
    if draft.quantity <= 0:
        raise InvalidQuantityError(draft.quantity)
    if not draft.name or not draft.name.strip():
        raise InvalidItemError("name", "must not be blank")
    if not draft.sku or not draft.sku.strip():
        raise InvalidItemError("sku", "must not be blank")


def reserve_or_log(warehouse: Warehouse, delta: int) -> int:
    """capacity_ledger.reserve() with a warning entry on rejection."""
    try:
        return capacity_ledger.reserve(warehouse, delta)
    except CapacityConflictError as exc:
        logger.warning(
            "capacity_reservation_rejected",
            extra={
                "warehouse_id": str(warehouse.id),
                "delta": delta,
                "current_capacity": warehouse.current_capacity,
                "max_capacity": warehouse.max_capacity,
                "error_code": exc.code,
            },
        )
        raise


class InventoryService(BaseService[InventoryItem]):
    """
    Item operations within a single warehouse.

    Contract:
        Accepts warehouse and item ids plus ItemDraft DTOs, returns frozen
        ItemInfo DTOs.  Flushes within the caller's transaction.

    Non-goals:
        - Does NOT move stock between warehouses (see TransferService).
        - Does NOT commit, rollback or retry.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._warehouses = WarehouseStore(session)
        self._items = ItemStore(session)
        self._merge = StockMergePolicy(self._items)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def add_item(self, warehouse_id: UUID, draft: ItemDraft) -> ItemInfo:
        """
        Add stock to a warehouse, merging into an existing same-SKU item.

        Returns:
            The created or merged item.
        """
        validate_item_draft(draft)
        warehouse = self._get_warehouse_for_update(warehouse_id)

        decision = self._merge.resolve(warehouse_id, draft.sku, draft)
        new_capacity = reserve_or_log(warehouse, decision.delta)

        item = self._apply_decision(warehouse, decision, new_capacity)

        logger.info(
            "item_added",
            extra={
                "warehouse_id": str(warehouse_id),
                "item_id": str(item.id),
                "sku": item.sku,
                "quantity_added": draft.quantity,
                "quantity": item.quantity,
                "merged": isinstance(decision, MergeInto),
                "current_capacity": warehouse.current_capacity,
            },
        )
        return ItemInfo.from_model(item)

    def update_item(
        self,
        warehouse_id: UUID,
        item_id: UUID,
        draft: ItemDraft,
    ) -> ItemInfo:
        """
        Replace every attribute of an item, SKU and quantity included.

        The warehouse's capacity moves by ``draft.quantity - item.quantity``.
        """
        validate_item_draft(draft)
        warehouse = self._get_warehouse_for_update(warehouse_id)
        item = self._get_owned_item(warehouse_id, item_id, for_update=True)

        if draft.sku != item.sku:
            holder = self._items.find_by_sku(warehouse_id, draft.sku)
            if holder is not None and holder.id != item.id:
                raise DuplicateSkuError(warehouse_id, draft.sku)

        old_quantity = item.quantity
        new_capacity = reserve_or_log(warehouse, draft.quantity - old_quantity)

        item.name = draft.name
        item.sku = draft.sku
        item.quantity = draft.quantity
        item.description = draft.description
        item.category = draft.category
        item.storage_location = draft.storage_location
        item.expiration_date = draft.expiration_date
        warehouse.current_capacity = new_capacity
        self._flush_item_write(warehouse_id, draft.sku)

        logger.info(
            "item_updated",
            extra={
                "warehouse_id": str(warehouse_id),
                "item_id": str(item.id),
                "sku": item.sku,
                "old_quantity": old_quantity,
                "quantity": item.quantity,
                "current_capacity": warehouse.current_capacity,
            },
        )
        return ItemInfo.from_model(item)

    def delete_item(self, warehouse_id: UUID, item_id: UUID) -> None:
        """Delete an item and release its quantity from the warehouse."""
        warehouse = self._get_warehouse_for_update(warehouse_id)
        item = self._get_owned_item(warehouse_id, item_id, for_update=True)

        new_capacity = reserve_or_log(warehouse, -item.quantity)

        self._items.delete(item)
        warehouse.current_capacity = new_capacity
        self._flush("InventoryItem", item_id)

        logger.info(
            "item_deleted",
            extra={
                "warehouse_id": str(warehouse_id),
                "item_id": str(item_id),
                "sku": item.sku,
                "quantity_released": item.quantity,
                "current_capacity": warehouse.current_capacity,
            },
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_items(self, warehouse_id: UUID) -> list[ItemInfo]:
        """Items of a warehouse ordered by SKU."""
        self._get_warehouse(warehouse_id)
        return [ItemInfo.from_model(i) for i in self._items.list_by_warehouse(warehouse_id)]

    def get_item(self, warehouse_id: UUID, item_id: UUID) -> ItemInfo:
        self._get_warehouse(warehouse_id)
        return ItemInfo.from_model(self._get_owned_item(warehouse_id, item_id))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply_decision(
        self,
        warehouse: Warehouse,
        decision: MergeDecision,
        new_capacity: int,
    ) -> InventoryItem:
        """Persist a merge-or-create decision together with the new capacity."""
        item = self._merge.apply(decision)
        warehouse.current_capacity = new_capacity
        self._flush_item_write(warehouse.id, item.sku)
        return item

    def _flush_item_write(self, warehouse_id: UUID, sku: str) -> None:
        try:
            self._flush("InventoryItem")
        except IntegrityError as exc:
            if constraint_violated(exc, ITEM_SKU_CONSTRAINT, *ITEM_SKU_COLUMNS):
                logger.warning(
                    "concurrent_item_insert",
                    extra={"warehouse_id": str(warehouse_id), "sku": sku},
                )
                raise ConcurrentInsertError(
                    "InventoryItem", f"{warehouse_id}/{sku}"
                ) from exc
            raise

    def _get_warehouse(self, warehouse_id: UUID) -> Warehouse:
        warehouse = self._warehouses.get(warehouse_id)
        if warehouse is None:
            raise WarehouseNotFoundError(warehouse_id)
        return warehouse

    def _get_warehouse_for_update(self, warehouse_id: UUID) -> Warehouse:
        warehouse = self._warehouses.get_for_update(warehouse_id)
        if warehouse is None:
            raise WarehouseNotFoundError(warehouse_id)
        return warehouse

    def _get_owned_item(
        self,
        warehouse_id: UUID,
        item_id: UUID,
        *,
        for_update: bool = False,
    ) -> InventoryItem:
        """Load an item and check it belongs to ``warehouse_id``."""
        if for_update:
            item = self._items.get_for_update(item_id)
        else:
            item = self._items.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        if item.warehouse_id != warehouse_id:
            raise ItemWarehouseMismatchError(item_id, warehouse_id, item.warehouse_id)
        return item
