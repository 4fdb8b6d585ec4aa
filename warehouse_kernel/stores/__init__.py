"""Keyed storage for warehouse and inventory item records."""

from warehouse_kernel.stores.item_store import ItemStore
from warehouse_kernel.stores.warehouse_store import WarehouseStore

__all__ = [
    "WarehouseStore",
    "ItemStore",
]
