"""
Warehouse Kernel

Inventory tracking across capacity-bounded warehouses with:
- Capacity conservation (occupied capacity equals the sum of item quantities)
- Per-warehouse SKU merge on add and transfer
- Atomic two-warehouse transfers
- Row locking and optimistic versioning for concurrent writers
"""

__version__ = "0.1.0"
