"""Kernel services - flush-only operations over a caller-owned session."""

from warehouse_kernel.services.inventory_service import InventoryService
from warehouse_kernel.services.stock_merge_policy import StockMergePolicy
from warehouse_kernel.services.transfer_service import TransferService
from warehouse_kernel.services.warehouse_service import WarehouseService

__all__ = [
    "InventoryService",
    "StockMergePolicy",
    "TransferService",
    "WarehouseService",
]
