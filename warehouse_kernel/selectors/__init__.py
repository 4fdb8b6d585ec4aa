"""Read-only selectors for the warehouse kernel."""

from warehouse_kernel.selectors.capacity_selector import CapacitySelector

__all__ = ["CapacitySelector"]
