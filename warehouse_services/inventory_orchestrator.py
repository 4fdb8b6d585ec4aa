"""
InventoryOrchestrator -- the entry point a request layer calls.

Responsibility:
    One method per kernel operation.  Each call runs the matching kernel
    service or selector inside its own unit of work, binds the operation
    name and ids into the log context, and returns frozen DTOs.

Architecture position:
    Services -- composition root over the kernel.  All kernel service
    wiring is centralised here; no kernel service constructs another
    service's session.

Invariants enforced:
    - One transaction per call; nothing is visible until it commits.
    - Retryable concurrency conflicts re-run the whole call (see
      RetryingRunner); domain errors propagate untouched.

Failure modes:
    - Every kernel exception of the called operation.
    - RetryExhaustedError, StoreUnavailableError.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from contextlib import contextmanager
from typing import Any, Iterator
from uuid import UUID, uuid4

from sqlalchemy.orm import Session, sessionmaker

from warehouse_config.bridges import engine_kwargs, logging_level
from warehouse_config.schema import KernelSettings
from warehouse_kernel.db.engine import get_session_factory, init_engine_from_url
from warehouse_kernel.domain.dtos import (
    CapacityDrift,
    ItemDraft,
    ItemInfo,
    TransferResult,
    UtilizationReport,
    WarehouseChanges,
    WarehouseDraft,
    WarehouseInfo,
    WarehouseUtilization,
)
from warehouse_kernel.exceptions import (
    ItemNotFoundError,
    NotFoundError,
    WarehouseNotFoundError,
)
from warehouse_kernel.logging_config import LogContext, configure_logging, get_logger
from warehouse_kernel.selectors.capacity_selector import CapacitySelector
from warehouse_kernel.services.inventory_service import InventoryService
from warehouse_kernel.services.transfer_service import TransferService
from warehouse_kernel.services.warehouse_service import WarehouseService
from warehouse_services.unit_of_work import RetryingRunner

logger = get_logger("services.orchestrator")


def _as_uuid(value: UUID | str, not_found: Callable[[Any], NotFoundError]) -> UUID:
    """Coerce an id; a malformed id cannot name a record, so it is not found."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise not_found(value) from None


class InventoryOrchestrator:
    """
    Transactional facade over the warehouse kernel.

    Usage:
        settings = get_active_settings()
        ops = InventoryOrchestrator.from_settings(settings)
        warehouse = ops.create_warehouse(WarehouseDraft(name="W1", max_capacity=100))
        ops.add_item(warehouse.id, ItemDraft(name="Bolt", sku="SKU-A", quantity=60))
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        settings: KernelSettings | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._settings = settings or KernelSettings()
        self._runner = RetryingRunner(session_factory, self._settings.retry, sleep=sleep)

    @classmethod
    def from_settings(cls, settings: KernelSettings) -> InventoryOrchestrator:
        """Initialize logging and the engine from settings and build an orchestrator."""
        configure_logging(level=logging_level(settings))
        init_engine_from_url(settings.database.url, **engine_kwargs(settings))
        return cls(get_session_factory(), settings)

    @contextmanager
    def _operation(self, name: str, **ids: UUID | None) -> Iterator[None]:
        correlation_id = LogContext.get_all().get("correlation_id") or str(uuid4())
        with LogContext.bind(correlation_id=correlation_id, operation=name, **ids):
            yield

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def list_items(self, warehouse_id: UUID | str) -> list[ItemInfo]:
        wid = _as_uuid(warehouse_id, WarehouseNotFoundError)
        with self._operation("list_items", warehouse_id=wid):
            return self._runner.run(
                "list_items", lambda s: InventoryService(s).list_items(wid)
            )

    def get_item(self, warehouse_id: UUID | str, item_id: UUID | str) -> ItemInfo:
        wid = _as_uuid(warehouse_id, WarehouseNotFoundError)
        iid = _as_uuid(item_id, ItemNotFoundError)
        with self._operation("get_item", warehouse_id=wid, item_id=iid):
            return self._runner.run(
                "get_item", lambda s: InventoryService(s).get_item(wid, iid)
            )

    def add_item(self, warehouse_id: UUID | str, draft: ItemDraft) -> ItemInfo:
        wid = _as_uuid(warehouse_id, WarehouseNotFoundError)
        with self._operation("add_item", warehouse_id=wid):
            return self._runner.run(
                "add_item", lambda s: InventoryService(s).add_item(wid, draft)
            )

    def update_item(
        self,
        warehouse_id: UUID | str,
        item_id: UUID | str,
        draft: ItemDraft,
    ) -> ItemInfo:
        wid = _as_uuid(warehouse_id, WarehouseNotFoundError)
        iid = _as_uuid(item_id, ItemNotFoundError)
        with self._operation("update_item", warehouse_id=wid, item_id=iid):
            return self._runner.run(
                "update_item", lambda s: InventoryService(s).update_item(wid, iid, draft)
            )

    def delete_item(self, warehouse_id: UUID | str, item_id: UUID | str) -> None:
        wid = _as_uuid(warehouse_id, WarehouseNotFoundError)
        iid = _as_uuid(item_id, ItemNotFoundError)
        with self._operation("delete_item", warehouse_id=wid, item_id=iid):
            self._runner.run(
                "delete_item", lambda s: InventoryService(s).delete_item(wid, iid)
            )

    def transfer(
        self,
        source_id: UUID | str,
        destination_id: UUID | str,
        sku: str,
        quantity: int,
    ) -> TransferResult:
        src = _as_uuid(source_id, WarehouseNotFoundError)
        dst = _as_uuid(destination_id, WarehouseNotFoundError)
        with self._operation(
            "transfer", warehouse_id=src, destination_warehouse_id=dst
        ):
            return self._runner.run(
                "transfer",
                lambda s: TransferService(s).transfer(src, dst, sku, quantity),
            )

    # ------------------------------------------------------------------
    # Warehouses
    # ------------------------------------------------------------------

    def create_warehouse(self, draft: WarehouseDraft) -> WarehouseInfo:
        with self._operation("create_warehouse"):
            return self._runner.run(
                "create_warehouse", lambda s: WarehouseService(s).create(draft)
            )

    def update_warehouse(
        self, warehouse_id: UUID | str, changes: WarehouseChanges
    ) -> WarehouseInfo:
        wid = _as_uuid(warehouse_id, WarehouseNotFoundError)
        with self._operation("update_warehouse", warehouse_id=wid):
            return self._runner.run(
                "update_warehouse", lambda s: WarehouseService(s).update(wid, changes)
            )

    def delete_warehouse(self, warehouse_id: UUID | str) -> None:
        wid = _as_uuid(warehouse_id, WarehouseNotFoundError)
        with self._operation("delete_warehouse", warehouse_id=wid):
            self._runner.run(
                "delete_warehouse", lambda s: WarehouseService(s).delete(wid)
            )

    def get_warehouse(self, warehouse_id: UUID | str) -> WarehouseInfo:
        wid = _as_uuid(warehouse_id, WarehouseNotFoundError)
        with self._operation("get_warehouse", warehouse_id=wid):
            return self._runner.run(
                "get_warehouse", lambda s: WarehouseService(s).get(wid)
            )

    def list_warehouses(self) -> list[WarehouseInfo]:
        with self._operation("list_warehouses"):
            return self._runner.run(
                "list_warehouses", lambda s: WarehouseService(s).list()
            )

    # ------------------------------------------------------------------
    # Capacity reporting
    # ------------------------------------------------------------------

    def utilization_report(self) -> UtilizationReport:
        with self._operation("utilization_report"):
            return self._runner.run(
                "utilization_report", lambda s: CapacitySelector(s).utilization_report()
            )

    def capacity_alerts(self, threshold: float | None = None) -> list[WarehouseUtilization]:
        """Warehouses at or above ``threshold``; defaults to capacity.alert_threshold."""
        if threshold is None:
            threshold = self._settings.capacity.alert_threshold
        with self._operation("capacity_alerts"):
            return self._runner.run(
                "capacity_alerts", lambda s: CapacitySelector(s).capacity_alerts(threshold)
            )

    def find_capacity_drift(self) -> list[CapacityDrift]:
        with self._operation("find_capacity_drift"):
            drift = self._runner.run(
                "find_capacity_drift", lambda s: CapacitySelector(s).find_capacity_drift()
            )
        if drift:
            logger.error(
                "capacity_drift_detected",
                extra={"warehouse_ids": [str(d.warehouse_id) for d in drift]},
            )
        return drift
