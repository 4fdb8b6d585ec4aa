"""Domain models for the warehouse kernel."""

from warehouse_kernel.models.inventory_item import InventoryItem
from warehouse_kernel.models.warehouse import Warehouse

__all__ = [
    "Warehouse",
    "InventoryItem",
]
