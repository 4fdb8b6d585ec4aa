"""Pure domain logic for the warehouse kernel: capacity ledger, stock merge, DTOs."""

from warehouse_kernel.domain.capacity_ledger import WarehouseCapacity, headroom, reserve
from warehouse_kernel.domain.dtos import (
    CapacityDrift,
    ItemAttributes,
    ItemDraft,
    ItemInfo,
    TransferResult,
    UtilizationReport,
    WarehouseChanges,
    WarehouseDraft,
    WarehouseInfo,
    WarehouseUtilization,
)
from warehouse_kernel.domain.stock_merge import CreateNew, MergeDecision, MergeInto, decide_merge

__all__ = [
    "reserve",
    "headroom",
    "WarehouseCapacity",
    "decide_merge",
    "MergeInto",
    "CreateNew",
    "MergeDecision",
    "ItemAttributes",
    "ItemDraft",
    "ItemInfo",
    "WarehouseDraft",
    "WarehouseChanges",
    "WarehouseInfo",
    "TransferResult",
    "WarehouseUtilization",
    "UtilizationReport",
    "CapacityDrift",
]
