"""
Tests for CapacitySelector.

Covers:
- Utilization report per warehouse and totals
- Alerts at the 75% threshold, ordering, zero-capacity exclusion
- Drift audit: empty when consistent, reports a tampered warehouse
"""

import pytest
from sqlalchemy import update

from warehouse_kernel.models.warehouse import Warehouse
from warehouse_kernel.selectors.capacity_selector import CapacitySelector
from warehouse_kernel.services.inventory_service import InventoryService


@pytest.fixture
def network(session, create_warehouse, item_draft):
    """Alpha 80/100, Bravo 10/50, Charlie 45/60, Zero 0/0."""
    inventory = InventoryService(session)
    alpha = create_warehouse("Alpha", max_capacity=100)
    bravo = create_warehouse("Bravo", max_capacity=50)
    charlie = create_warehouse("Charlie", max_capacity=60)
    zero = create_warehouse("Zero", max_capacity=0)
    inventory.add_item(alpha.id, item_draft("SKU-A", 50))
    inventory.add_item(alpha.id, item_draft("SKU-B", 30))
    inventory.add_item(bravo.id, item_draft("SKU-A", 10))
    inventory.add_item(charlie.id, item_draft("SKU-C", 45))
    return alpha, bravo, charlie, zero


class TestUtilizationReport:
    def test_per_warehouse_figures(self, session, network):
        report = CapacitySelector(session).utilization_report()

        rows = {w.name: w for w in report.warehouses}
        assert [w.name for w in report.warehouses] == ["Alpha", "Bravo", "Charlie", "Zero"]
        assert rows["Alpha"].current_capacity == 80
        assert rows["Alpha"].headroom == 20
        assert rows["Alpha"].percent == 80.0
        assert rows["Bravo"].percent == 20.0
        assert rows["Zero"].utilization == 0.0

    def test_totals(self, session, network):
        report = CapacitySelector(session).utilization_report()

        assert report.total_current == 135
        assert report.total_max == 210
        assert report.total_headroom == 75

    def test_empty_network(self, session):
        report = CapacitySelector(session).utilization_report()
        assert report.warehouses == ()
        assert report.utilization == 0.0


class TestCapacityAlerts:
    def test_default_threshold(self, session, network):
        alerts = CapacitySelector(session).capacity_alerts()
        assert [a.name for a in alerts] == ["Alpha", "Charlie"]

    def test_below_threshold_not_alerted(self, session, network):
        alerts = CapacitySelector(session).capacity_alerts(0.76)
        assert [a.name for a in alerts] == ["Alpha"]

    def test_exactly_at_threshold_alerts(self, session, network):
        # Charlie is at exactly 75%.
        alerts = CapacitySelector(session).capacity_alerts(0.75)
        assert "Charlie" in [a.name for a in alerts]

    def test_highest_first(self, session, network):
        alerts = CapacitySelector(session).capacity_alerts(0.1)
        assert [a.name for a in alerts] == ["Alpha", "Charlie", "Bravo"]

    def test_zero_capacity_never_alerts(self, session, network):
        alerts = CapacitySelector(session).capacity_alerts(0.0)
        assert "Zero" not in [a.name for a in alerts]

    def test_threshold_out_of_range(self, session):
        with pytest.raises(ValueError):
            CapacitySelector(session).capacity_alerts(1.5)


class TestCapacityDrift:
    def test_consistent_store_has_no_drift(self, session, network):
        assert CapacitySelector(session).find_capacity_drift() == []

    def test_reports_tampered_warehouse(self, session, network):
        _, bravo, _, _ = network
        session.execute(
            update(Warehouse)
            .where(Warehouse.id == bravo.id)
            .values(current_capacity=12)
            .execution_options(synchronize_session=False)
        )

        drift = CapacitySelector(session).find_capacity_drift()

        assert len(drift) == 1
        assert drift[0].warehouse_id == bravo.id
        assert drift[0].stored_capacity == 12
        assert drift[0].item_total == 10
        assert drift[0].drift == 2

    def test_empty_warehouse_with_capacity_is_drift(self, session, create_warehouse):
        create_warehouse("Ghost", max_capacity=10, current_capacity=4)

        drift = CapacitySelector(session).find_capacity_drift()

        assert [(d.name, d.item_total) for d in drift] == [("Ghost", 0)]
