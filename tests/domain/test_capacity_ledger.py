"""
Tests for the pure capacity ledger.

Covers:
- Admission of positive, zero and negative deltas
- Exact-headroom boundary and headroom + 1
- Negative-capacity rejection
- Purity (no mutation of the input)
"""

from uuid import uuid4

import pytest

from warehouse_kernel.domain.capacity_ledger import WarehouseCapacity, headroom, reserve
from warehouse_kernel.exceptions import InsufficientCapacityError, NegativeCapacityError


def _warehouse(current: int, maximum: int = 100) -> WarehouseCapacity:
    return WarehouseCapacity(id=uuid4(), max_capacity=maximum, current_capacity=current)


class TestReserve:
    def test_positive_delta_within_headroom(self):
        assert reserve(_warehouse(60), 30) == 90

    def test_exact_headroom_is_admitted(self):
        assert reserve(_warehouse(60), 40) == 100

    def test_headroom_plus_one_is_rejected_with_available(self):
        wh = _warehouse(60)
        with pytest.raises(InsufficientCapacityError) as exc_info:
            reserve(wh, 41)
        assert exc_info.value.available == 40
        assert exc_info.value.requested == 41
        assert exc_info.value.warehouse_id == str(wh.id)

    def test_negative_delta_releases_capacity(self):
        assert reserve(_warehouse(60), -60) == 0

    def test_zero_delta_is_identity(self):
        assert reserve(_warehouse(60), 0) == 60

    def test_below_zero_is_rejected(self):
        with pytest.raises(NegativeCapacityError) as exc_info:
            reserve(_warehouse(10), -11)
        assert exc_info.value.current_capacity == 10
        assert exc_info.value.delta == -11

    def test_negative_delta_allowed_when_over_max(self):
        """Shedding stock is never blocked by the upper bound."""
        over = WarehouseCapacity(id=uuid4(), max_capacity=50, current_capacity=80)
        assert reserve(over, -10) == 70

    def test_zero_capacity_warehouse_rejects_any_addition(self):
        with pytest.raises(InsufficientCapacityError) as exc_info:
            reserve(_warehouse(0, maximum=0), 1)
        assert exc_info.value.available == 0

    def test_reserve_is_pure_and_idempotent(self):
        wh = _warehouse(25)
        assert reserve(wh, 5) == reserve(wh, 5) == 30
        assert wh.current_capacity == 25


class TestHeadroom:
    def test_headroom(self):
        wh = _warehouse(30, maximum=50)
        assert headroom(wh) == 20
        assert wh.headroom == 20
