"""
Tests for TransferService.

Covers:
- Partial transfer into an empty destination (create path)
- Transfer that empties the source (item deleted) and merges at destination
- The full two-step scenario where the second move is rejected for
  destination capacity and nothing changes
- Precondition order: same warehouse, quantity, warehouses, SKU, stock
- Attribute copy on create and merge
"""

from datetime import date
from uuid import uuid4

import pytest

from warehouse_kernel.exceptions import (
    InsufficientCapacityError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidTransferError,
    ItemNotFoundError,
    WarehouseNotFoundError,
)
from warehouse_kernel.models.inventory_item import InventoryItem
from warehouse_kernel.models.warehouse import Warehouse
from warehouse_kernel.services.inventory_service import InventoryService
from warehouse_kernel.services.transfer_service import TransferService


@pytest.fixture
def stocked(session, create_warehouse, item_draft):
    """W1 (max 100) holding 60 of SKU-A, W2 (max 50) empty."""
    w1 = create_warehouse("W1", max_capacity=100)
    w2 = create_warehouse("W2", max_capacity=50)
    item = InventoryService(session).add_item(
        w1.id,
        item_draft(
            "SKU-A",
            60,
            name="Widget",
            description="blue",
            category="parts",
            storage_location="A-01",
            expiration_date=date(2027, 6, 30),
        ),
    )
    return w1, w2, item


def _state(session, warehouse_id) -> tuple[int, dict[str, int]]:
    warehouse = session.get(Warehouse, warehouse_id)
    items = InventoryService(session).list_items(warehouse_id)
    return warehouse.current_capacity, {i.sku: i.quantity for i in items}


class TestTransfer:
    def test_partial_transfer_creates_destination_item(self, session, stocked):
        w1, w2, item = stocked

        result = TransferService(session).transfer(w1.id, w2.id, "SKU-A", 30)

        assert result.source_item_id == item.id
        assert result.source_item_removed is False
        assert result.destination_merged is False
        assert result.destination_item_id != item.id
        assert _state(session, w1.id) == (30, {"SKU-A": 30})
        assert _state(session, w2.id) == (30, {"SKU-A": 30})

    def test_created_item_copies_source_attributes(self, session, stocked):
        w1, w2, _ = stocked

        result = TransferService(session).transfer(w1.id, w2.id, "SKU-A", 10)

        created = InventoryService(session).get_item(w2.id, result.destination_item_id)
        assert created.name == "Widget"
        assert created.description == "blue"
        assert created.category == "parts"
        assert created.storage_location == "A-01"
        assert created.expiration_date == date(2027, 6, 30)

    def test_second_transfer_over_destination_capacity_changes_nothing(
        self, session, stocked
    ):
        w1, w2, _ = stocked
        service = TransferService(session)
        service.transfer(w1.id, w2.id, "SKU-A", 30)

        with pytest.raises(InsufficientCapacityError) as exc_info:
            service.transfer(w1.id, w2.id, "SKU-A", 30)

        assert exc_info.value.available == 20
        assert exc_info.value.warehouse_id == str(w2.id)
        assert _state(session, w1.id) == (30, {"SKU-A": 30})
        assert _state(session, w2.id) == (30, {"SKU-A": 30})

    def test_emptying_source_deletes_item_and_merges(
        self, session, create_warehouse, item_draft
    ):
        w1 = create_warehouse("W1", max_capacity=100)
        w2 = create_warehouse("W2", max_capacity=100)
        inventory = InventoryService(session)
        source = inventory.add_item(w1.id, item_draft("SKU-A", 25, name="New name"))
        existing = inventory.add_item(w2.id, item_draft("SKU-A", 10, name="Old name"))

        result = TransferService(session).transfer(w1.id, w2.id, "SKU-A", 25)

        assert result.source_item_removed is True
        assert result.destination_merged is True
        assert result.destination_item_id == existing.id
        assert session.get(InventoryItem, source.id) is None
        assert _state(session, w1.id) == (0, {})
        assert _state(session, w2.id) == (35, {"SKU-A": 35})
        assert inventory.get_item(w2.id, existing.id).name == "New name"

    def test_transfer_back_and_forth_conserves_totals(self, session, stocked):
        w1, w2, _ = stocked
        service = TransferService(session)

        service.transfer(w1.id, w2.id, "SKU-A", 20)
        service.transfer(w2.id, w1.id, "SKU-A", 20)

        assert _state(session, w1.id) == (60, {"SKU-A": 60})
        assert _state(session, w2.id) == (0, {})


class TestTransferPreconditions:
    def test_same_warehouse(self, session, stocked):
        w1, _, _ = stocked
        with pytest.raises(InvalidTransferError):
            TransferService(session).transfer(w1.id, w1.id, "SKU-A", 1)

    def test_same_warehouse_checked_before_quantity(self, session, stocked):
        w1, _, _ = stocked
        with pytest.raises(InvalidTransferError):
            TransferService(session).transfer(w1.id, w1.id, "SKU-A", 0)

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity(self, session, stocked, quantity):
        w1, w2, _ = stocked
        with pytest.raises(InvalidQuantityError):
            TransferService(session).transfer(w1.id, w2.id, "SKU-A", quantity)

    def test_quantity_checked_before_warehouses(self, session):
        with pytest.raises(InvalidQuantityError):
            TransferService(session).transfer(uuid4(), uuid4(), "SKU-A", 0)

    def test_unknown_source(self, session, stocked):
        _, w2, _ = stocked
        missing = uuid4()
        with pytest.raises(WarehouseNotFoundError) as exc_info:
            TransferService(session).transfer(missing, w2.id, "SKU-A", 1)
        assert exc_info.value.warehouse_id == str(missing)

    def test_unknown_destination(self, session, stocked):
        w1, _, _ = stocked
        with pytest.raises(WarehouseNotFoundError):
            TransferService(session).transfer(w1.id, uuid4(), "SKU-A", 1)
        assert _state(session, w1.id) == (60, {"SKU-A": 60})

    def test_sku_missing_in_source(self, session, stocked):
        w1, w2, _ = stocked
        with pytest.raises(ItemNotFoundError) as exc_info:
            TransferService(session).transfer(w1.id, w2.id, "SKU-X", 1)
        assert exc_info.value.sku == "SKU-X"
        assert exc_info.value.warehouse_id == str(w1.id)

    def test_insufficient_stock_reports_available(self, session, stocked):
        w1, w2, _ = stocked
        with pytest.raises(InsufficientStockError) as exc_info:
            TransferService(session).transfer(w1.id, w2.id, "SKU-A", 61)
        assert exc_info.value.available == 60
        assert _state(session, w1.id) == (60, {"SKU-A": 60})
        assert _state(session, w2.id) == (0, {})

    def test_stock_checked_before_destination_capacity(self, session, stocked):
        """61 exceeds both the source stock and W2's headroom; stock wins."""
        w1, w2, _ = stocked
        with pytest.raises(InsufficientStockError):
            TransferService(session).transfer(w1.id, w2.id, "SKU-A", 61)

    def test_exact_destination_headroom(self, session, stocked):
        w1, w2, _ = stocked
        TransferService(session).transfer(w1.id, w2.id, "SKU-A", 50)
        assert _state(session, w2.id) == (50, {"SKU-A": 50})
