"""
Kernel Invariants Contract.

These invariants are structural law. They are enforced by the capacity
ledger, the inventory/transfer/warehouse services and database
constraints. No configuration setting may relax them.

This module exists solely to declare these invariants explicitly.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    CAPACITY_CONSERVATION = "capacity_conservation"
    """A warehouse's current_capacity equals the sum of the quantities of
    the items it owns. Enforced by routing every quantity change through
    CapacityLedger in the same transaction as the item write; audited by
    CapacitySelector.find_capacity_drift()."""

    CAPACITY_BOUND = "capacity_bound"
    """0 <= current_capacity <= max_capacity. Enforced by CapacityLedger,
    WarehouseService and DB check constraints."""

    POSITIVE_QUANTITY = "positive_quantity"
    """A live item always has quantity > 0; stock driven to zero deletes
    the item. Enforced by InventoryService, TransferService and a DB check
    constraint."""

    SKU_UNIQUE_PER_WAREHOUSE = "sku_unique_per_warehouse"
    """At most one item per (warehouse, SKU). Enforced by the merge policy
    and the uq_item_warehouse_sku constraint."""

    EXCLUSIVE_OWNERSHIP = "exclusive_ownership"
    """Every item is owned by exactly one warehouse through a non-null
    foreign key."""

    ALL_OR_NOTHING = "all_or_nothing"
    """Every mutating operation validates before writing and runs inside a
    single transaction that rolls back on any failure."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "warehouse_services",
    "warehouse_config",
)
