"""
WarehouseService -- warehouse lifecycle.

Responsibility:
    Create, update, delete and read warehouses while keeping
    0 <= current_capacity <= max_capacity and blocking deletion of a
    warehouse that still owns items.

Architecture position:
    Kernel > Services -- imperative shell.

Invariants enforced:
    - Capacity bounds are validated, never clamped.
    - current_capacity is set only at creation; afterwards it moves only
      through item operations and transfers.
    - Warehouse names are unique (pre-check plus uq_warehouse_name).

Failure modes:
    - InvalidWarehouseError: blank name.
    - InvalidCapacityError: negative capacity, or current above max.
    - DuplicateNameError: name already used by another warehouse.
    - WarehouseNotFoundError, WarehouseNotEmptyError.
"""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from warehouse_kernel.domain.dtos import WarehouseChanges, WarehouseDraft, WarehouseInfo
from warehouse_kernel.exceptions import (
    DuplicateNameError,
    InvalidCapacityError,
    InvalidWarehouseError,
    WarehouseNotEmptyError,
    WarehouseNotFoundError,
)
from warehouse_kernel.logging_config import get_logger
from warehouse_kernel.models.warehouse import Warehouse
from warehouse_kernel.services.base import BaseService, constraint_violated
from warehouse_kernel.stores.item_store import ItemStore
from warehouse_kernel.stores.warehouse_store import WarehouseStore

logger = get_logger("services.warehouse")

WAREHOUSE_NAME_CONSTRAINT = "uq_warehouse_name"


def _is_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_name(name: str) -> None:
    if not name or not name.strip():
        raise InvalidWarehouseError("name", "must not be blank")


def _validate_capacity(max_capacity, current_capacity) -> None:
    if not _is_count(max_capacity) or max_capacity < 0:
        raise InvalidCapacityError(
            max_capacity, current_capacity, "max_capacity must be a non-negative integer"
        )
    if not _is_count(current_capacity) or current_capacity < 0:
        raise InvalidCapacityError(
            max_capacity, current_capacity, "current_capacity must be a non-negative integer"
        )
    if current_capacity > max_capacity:
        raise InvalidCapacityError(
            max_capacity,
            current_capacity,
            f"current_capacity {current_capacity} exceeds max_capacity {max_capacity}",
        )


class WarehouseService(BaseService[Warehouse]):
    """
    Service for managing warehouses.

    Contract:
        Accepts WarehouseDraft / WarehouseChanges DTOs and returns frozen
        WarehouseInfo DTOs.  Flushes within the caller's transaction.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._warehouses = WarehouseStore(session)
        self._items = ItemStore(session)

    def _get_by_id(self, warehouse_id: UUID, *, for_update: bool = False) -> Warehouse:
        """Get warehouse by ID, raising if not found."""
        if for_update:
            warehouse = self._warehouses.get_for_update(warehouse_id)
        else:
            warehouse = self._warehouses.get(warehouse_id)
        if warehouse is None:
            raise WarehouseNotFoundError(warehouse_id)
        return warehouse

    def _check_name_free(self, name: str, warehouse_id: UUID | None = None) -> None:
        holder = self._warehouses.find_by_name(name)
        if holder is not None and holder.id != warehouse_id:
            raise DuplicateNameError(name)

    def _flush_named(self, name: str, warehouse_id: UUID | None = None) -> None:
        try:
            self._flush("Warehouse", warehouse_id)
        except IntegrityError as exc:
            if constraint_violated(exc, WAREHOUSE_NAME_CONSTRAINT, "warehouses.name"):
                raise DuplicateNameError(name) from exc
            raise

    def create(self, draft: WarehouseDraft) -> WarehouseInfo:
        """
        Create a warehouse.

        current_capacity defaults to 0 when the draft leaves it unset.
        """
        current_capacity = 0 if draft.current_capacity is None else draft.current_capacity
        _validate_name(draft.name)
        _validate_capacity(draft.max_capacity, current_capacity)
        self._check_name_free(draft.name)

        warehouse = self._warehouses.add(
            Warehouse(
                name=draft.name,
                location=draft.location,
                max_capacity=draft.max_capacity,
                current_capacity=current_capacity,
            )
        )
        self._flush_named(draft.name)

        logger.info(
            "warehouse_created",
            extra={
                "warehouse_id": str(warehouse.id),
                "warehouse_name": warehouse.name,
                "max_capacity": warehouse.max_capacity,
                "current_capacity": warehouse.current_capacity,
            },
        )
        return WarehouseInfo.from_model(warehouse)

    def update(self, warehouse_id: UUID, changes: WarehouseChanges) -> WarehouseInfo:
        """Replace name, location and max_capacity of a warehouse."""
        warehouse = self._get_by_id(warehouse_id, for_update=True)
        _validate_name(changes.name)
        _validate_capacity(changes.max_capacity, warehouse.current_capacity)
        if changes.name != warehouse.name:
            self._check_name_free(changes.name, warehouse_id)

        warehouse.name = changes.name
        warehouse.location = changes.location
        warehouse.max_capacity = changes.max_capacity
        self._flush_named(changes.name, warehouse_id)

        logger.info(
            "warehouse_updated",
            extra={
                "warehouse_id": str(warehouse_id),
                "warehouse_name": warehouse.name,
                "max_capacity": warehouse.max_capacity,
                "current_capacity": warehouse.current_capacity,
            },
        )
        return WarehouseInfo.from_model(warehouse)

    def delete(self, warehouse_id: UUID) -> None:
        """Hard-delete an empty warehouse."""
        warehouse = self._get_by_id(warehouse_id, for_update=True)
        item_count = self._items.count_for_warehouse(warehouse_id)
        if item_count > 0:
            raise WarehouseNotEmptyError(warehouse_id, item_count)

        self._warehouses.delete(warehouse)
        self._flush("Warehouse", warehouse_id)

        logger.info(
            "warehouse_deleted",
            extra={"warehouse_id": str(warehouse_id), "warehouse_name": warehouse.name},
        )

    def get(self, warehouse_id: UUID) -> WarehouseInfo:
        return WarehouseInfo.from_model(self._get_by_id(warehouse_id))

    def list(self) -> list[WarehouseInfo]:
        """All warehouses ordered by name."""
        return [WarehouseInfo.from_model(w) for w in self._warehouses.list_all()]
