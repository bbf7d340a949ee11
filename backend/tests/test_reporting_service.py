# Overview: Pytest coverage for the demand debug report.

from datetime import date

import pytest

from warehouse_engine.services.demand_service import generate_daily_demand
from warehouse_engine.services.fulfillment_service import fulfill
from warehouse_engine.services.reporting_service import get_demand_debug_report
from warehouse_engine.validation import NotFoundError, ValidationError


DAY = date(2026, 3, 2)


class TestDemandDebugReport:
    def test_rows_explain_demand(self, db_session, company_a, warehouse_a, listing):
        generate_daily_demand(
            company_id=company_a.id,
            warehouse_id=warehouse_a.id,
            day_key=DAY,
            scorer=lambda base_qty, price_multiplier, season_score: 120,
        )
        fulfill(company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY)

        rows = get_demand_debug_report(company_id=company_a.id, day_key="2026-03-02")

        assert len(rows) == 1
        row = rows[0]
        assert row["listing_id"] == listing.id
        assert row["warehouse_label"] == "Warehouse - USA"
        assert row["final_desired"] == 120
        assert row["qty_accepted"] == 120
        assert row["qty_ordered"] == 120
        assert row["qty_shipped"] == 100
        assert row["season_score"] == 100
        assert row["price_multiplier"] == 1.0
        assert row["blocked_by_price"] is False
        assert row["blocked_by_season"] is False

    def test_blocked_listing_has_no_sales_log(self, db_session, company_a, warehouse_a, listing):
        listing.blocked_by_price = True
        db_session.commit()
        generate_daily_demand(company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY)

        row = get_demand_debug_report(company_id=company_a.id, day_key=DAY)[0]
        assert row["blocked_by_price"] is True
        assert row["qty_ordered"] == 0

    def test_other_days_are_excluded(self, db_session, company_a, warehouse_a, listing):
        generate_daily_demand(company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY)
        assert get_demand_debug_report(company_id=company_a.id, day_key="2026-03-03") == []

    def test_warehouse_filter_checks_ownership(self, db_session, company_a, warehouse_b):
        with pytest.raises(NotFoundError):
            get_demand_debug_report(company_id=company_a.id, day_key=DAY, warehouse_id=warehouse_b.id)

    def test_day_key_required(self, db_session, company_a):
        with pytest.raises(ValidationError):
            get_demand_debug_report(company_id=company_a.id, day_key=None)
