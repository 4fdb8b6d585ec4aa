"""
warehouse_services -- Package init and public API.

Responsibility:
    Transaction ownership over the warehouse kernel: the unit-of-work
    runner and InventoryOrchestrator, the entry point a request layer
    calls.

Architecture position:
    Services -- orchestration over kernel + config.

    Dependency direction (enforced by tests/architecture/test_kernel_boundary.py):
        warehouse_services/ -> warehouse_kernel/  (allowed)
        warehouse_services/ -> warehouse_config/  (allowed)
        warehouse_kernel/   -> warehouse_services/ (FORBIDDEN)
"""

from warehouse_services.inventory_orchestrator import InventoryOrchestrator
from warehouse_services.unit_of_work import RetryingRunner, UnitOfWork, translate_store_error

__all__ = [
    "InventoryOrchestrator",
    "RetryingRunner",
    "UnitOfWork",
    "translate_store_error",
]
