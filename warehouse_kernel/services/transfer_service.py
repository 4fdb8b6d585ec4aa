"""
TransferService -- atomic stock moves between two warehouses.

Responsibility:
    Moves a quantity of one SKU from a source warehouse to a destination
    warehouse.  The source item is reduced (deleted at exactly zero) and
    the destination merges into its same-SKU item or creates one.  Both
    capacities move by the same amount in opposite directions.

Architecture position:
    Kernel > Services -- imperative shell.
    Uses WarehouseStore, ItemStore, StockMergePolicy and capacity_ledger.

Invariants enforced:
    - All-or-nothing: every precondition is evaluated before the first
      write.  A failure at any step leaves both warehouses and both items
      exactly as they were.
    - Capacity conservation on both sides: source -q, destination +q,
      flushed together with the item writes.
    - Deadlock freedom: both warehouse rows are locked in ascending id
      order before any item row.

Preconditions, first failure wins:
    1. source != destination         InvalidTransferError
    2. quantity > 0                  InvalidQuantityError
    3. both warehouses exist         WarehouseNotFoundError
    4. source holds sku              ItemNotFoundError
       with quantity >= requested    InsufficientStockError
    5. destination headroom          InsufficientCapacityError

Failure modes:
    - The precondition errors above.
    - OptimisticLockError / ConcurrentInsertError from the flush when a
      concurrent writer got there first; retry the whole unit.
"""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from warehouse_kernel.domain.dtos import ItemDraft, TransferResult
from warehouse_kernel.domain.stock_merge import MergeInto
from warehouse_kernel.exceptions import (
    ConcurrentInsertError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidTransferError,
    ItemNotFoundError,
    WarehouseNotFoundError,
)
from warehouse_kernel.logging_config import get_logger
from warehouse_kernel.models.inventory_item import InventoryItem
from warehouse_kernel.services.base import BaseService, constraint_violated
from warehouse_kernel.services.inventory_service import (
    ITEM_SKU_COLUMNS,
    ITEM_SKU_CONSTRAINT,
    reserve_or_log,
)
from warehouse_kernel.services.stock_merge_policy import StockMergePolicy
from warehouse_kernel.stores.item_store import ItemStore
from warehouse_kernel.stores.warehouse_store import WarehouseStore

logger = get_logger("services.transfer")


class TransferService(BaseService[InventoryItem]):
    """
    Two-warehouse stock moves under one transaction.

    Contract:
        transfer() either applies the whole move and returns a
        TransferResult, or raises and writes nothing.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._warehouses = WarehouseStore(session)
        self._items = ItemStore(session)
        self._merge = StockMergePolicy(self._items)

    def transfer(
        self,
        source_id: UUID,
        destination_id: UUID,
        sku: str,
        quantity: int,
    ) -> TransferResult:
        """
        Move ``quantity`` units of ``sku`` from source to destination.

        Args:
            source_id: Warehouse the stock leaves.
            destination_id: Warehouse the stock enters.
            sku: SKU being moved.
            quantity: Units to move, > 0.

        Returns:
            TransferResult describing both legs.
        """
        # 1-2. Request shape
        if source_id == destination_id:
            raise InvalidTransferError(
                source_id, destination_id, "source and destination are the same warehouse"
            )
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantityError(quantity)

        # 3. Both warehouses, locked in ascending id order
        locked = self._warehouses.lock_ordered([source_id, destination_id])
        source = locked[source_id]
        if source is None:
            raise WarehouseNotFoundError(source_id)
        destination = locked[destination_id]
        if destination is None:
            raise WarehouseNotFoundError(destination_id)

        # 4. Source stock
        source_item = self._items.find_by_sku(source_id, sku, for_update=True)
        if source_item is None:
            raise ItemNotFoundError(warehouse_id=source_id, sku=sku)
        if source_item.quantity < quantity:
            raise InsufficientStockError(
                warehouse_id=source_id,
                sku=sku,
                requested=quantity,
                available=source_item.quantity,
            )

        # 5. Destination headroom; the source leg cannot fail once 4 holds
        destination_capacity = reserve_or_log(destination, quantity)
        source_capacity = reserve_or_log(source, -quantity)

        incoming = ItemDraft(
            name=source_item.name,
            sku=source_item.sku,
            quantity=quantity,
            description=source_item.description,
            category=source_item.category,
            storage_location=source_item.storage_location,
            expiration_date=source_item.expiration_date,
        )
        decision = self._merge.resolve(destination_id, sku, incoming)

        # Writes
        source_item_id = source_item.id
        remaining = source_item.quantity - quantity
        if remaining == 0:
            self._items.delete(source_item)
        else:
            source_item.quantity = remaining
        source.current_capacity = source_capacity

        destination_item = self._merge.apply(decision)
        destination.current_capacity = destination_capacity

        try:
            self._flush("Warehouse")
        except IntegrityError as exc:
            if constraint_violated(exc, ITEM_SKU_CONSTRAINT, *ITEM_SKU_COLUMNS):
                raise ConcurrentInsertError(
                    "InventoryItem", f"{destination_id}/{sku}"
                ) from exc
            raise

        result = TransferResult(
            source_warehouse_id=source_id,
            destination_warehouse_id=destination_id,
            sku=sku,
            quantity=quantity,
            source_item_id=source_item_id,
            destination_item_id=destination_item.id,
            source_item_removed=remaining == 0,
            destination_merged=isinstance(decision, MergeInto),
        )

        logger.info(
            "transfer_completed",
            extra={
                "source_warehouse_id": str(source_id),
                "destination_warehouse_id": str(destination_id),
                "sku": sku,
                "quantity": quantity,
                "source_item_removed": result.source_item_removed,
                "destination_merged": result.destination_merged,
                "source_capacity": source.current_capacity,
                "destination_capacity": destination.current_capacity,
            },
        )
        return result
