# Overview: Pytest coverage for daily demand generation.

"""
Daily Demand Tests

- One evaluation per (listing, day); repeats are skipped.
- Accepted units never exceed unreserved stock.
- Price and season blocks force zero demand but still write a snapshot.
"""

from datetime import date

import pytest

from warehouse_engine.models import DailySalesLog, DemandSnapshot, InventoryItem, Listing, SeasonScenario
from warehouse_engine.models.sales import LISTING_STATUS_LISTED, LISTING_STATUS_PAUSED, PAUSED_REASON_OUT_OF_STOCK
from warehouse_engine.services.demand_service import default_demand_scorer, generate_daily_demand
from warehouse_engine.validation import NotFoundError, ValidationError


DAY = date(2026, 3, 2)


def _wants(units):
    return lambda base_qty, price_multiplier, season_score: units


class TestDefaultScorer:
    @pytest.mark.parametrize(
        "base_qty, multiplier, score, expected",
        [
            (10, 1.0, 100, 10),
            (10, 0.85, 100, 9),
            (3, 0.5, 100, 2),
            (10, 1.3, 50, 7),
            (10, 0.0, 100, 0),
            (10, 1.0, 0, 0),
        ],
    )
    def test_half_up_rounding(self, base_qty, multiplier, score, expected):
        assert default_demand_scorer(base_qty, multiplier, score) == expected


class TestGenerateDailyDemand:
    def test_accepts_orders_and_reserves_stock(self, db_session, company_a, warehouse_a, listing, inventory_item):
        result = generate_daily_demand(
            company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(250)
        )

        assert result.listings_evaluated == 1
        assert result.units_ordered == 250

        log = db_session.query(DailySalesLog).filter_by(listing_id=listing.id, day_key=DAY).one()
        assert log.qty_ordered == 250
        assert log.qty_shipped == 0
        item = db_session.get(InventoryItem, inventory_item.id)
        assert item.qty_reserved == 250
        assert item.qty_on_hand == 1000

    def test_second_call_same_day_is_skipped(self, db_session, company_a, warehouse_a, listing, inventory_item):
        generate_daily_demand(company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(30))
        again = generate_daily_demand(company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(30))

        assert again.listings_evaluated == 0
        assert again.listings_skipped == 1
        assert again.units_ordered == 0
        assert db_session.get(InventoryItem, inventory_item.id).qty_reserved == 30
        assert db_session.query(DemandSnapshot).count() == 1

    def test_next_day_is_evaluated_again(self, db_session, company_a, warehouse_a, listing, inventory_item):
        generate_daily_demand(company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(30))
        generate_daily_demand(
            company_id=company_a.id, warehouse_id=warehouse_a.id, day_key="2026-03-03", scorer=_wants(30)
        )
        assert db_session.get(InventoryItem, inventory_item.id).qty_reserved == 60
        assert db_session.query(DailySalesLog).count() == 2

    def test_accepted_is_capped_by_available_stock(self, db_session, company_a, warehouse_a, listing, inventory_item):
        inventory_item.qty_reserved = 990
        db_session.commit()

        result = generate_daily_demand(
            company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(50)
        )

        assert result.units_ordered == 10
        item = db_session.get(InventoryItem, inventory_item.id)
        assert item.qty_reserved == item.qty_on_hand == 1000
        snap = db_session.query(DemandSnapshot).one()
        assert snap.final_desired == 50
        assert snap.qty_accepted == 10

    def test_no_unreserved_stock_pauses_listing(self, db_session, company_a, warehouse_a, listing, inventory_item):
        inventory_item.qty_reserved = 1000
        db_session.commit()

        result = generate_daily_demand(
            company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(5)
        )

        assert result.units_ordered == 0
        assert result.listings_paused == 1
        refreshed = db_session.get(Listing, listing.id)
        assert refreshed.status == LISTING_STATUS_PAUSED
        assert refreshed.paused_reason == PAUSED_REASON_OUT_OF_STOCK

    def test_paused_listing_is_not_evaluated(self, db_session, company_a, warehouse_a, listing):
        listing.status = LISTING_STATUS_PAUSED
        db_session.commit()

        result = generate_daily_demand(
            company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(5)
        )
        assert result.listings_evaluated == 0
        assert db_session.query(DemandSnapshot).count() == 0

    def test_price_block_forces_zero(self, db_session, company_a, warehouse_a, listing, inventory_item):
        listing.blocked_by_price = True
        listing.price_multiplier = 0.0
        db_session.commit()

        result = generate_daily_demand(
            company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(40)
        )

        assert result.units_ordered == 0
        snap = db_session.query(DemandSnapshot).one()
        assert snap.blocked_by_price is True
        assert snap.final_desired == 0
        assert db_session.query(DailySalesLog).count() == 0
        assert db_session.get(Listing, listing.id).status == LISTING_STATUS_LISTED

    def test_season_block_forces_zero(self, db_session, company_a, warehouse_a, listing, product):
        weeks = [100] * 52
        weeks[8] = 0
        db_session.add(SeasonScenario(definition_id=5, market_zone="USA", weeks=weeks))
        product.season_definition_id = 5
        db_session.commit()

        result = generate_daily_demand(
            company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(40)
        )

        assert result.units_ordered == 0
        snap = db_session.query(DemandSnapshot).one()
        assert snap.blocked_by_season is True
        assert snap.season_score == 0
        assert snap.missing_season is False

    def test_default_scorer_uses_band_snapshot(self, db_session, company_a, warehouse_a, listing):
        result = generate_daily_demand(company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY)

        assert result.units_ordered == listing.base_qty
        snap = db_session.query(DemandSnapshot).one()
        assert snap.season_score == 100
        assert snap.missing_season is True
        assert snap.base_qty == listing.base_qty

    def test_invariants_hold_over_several_days(self, db_session, company_a, warehouse_a, listing, inventory_item):
        for day in range(2, 12):
            generate_daily_demand(
                company_id=company_a.id,
                warehouse_id=warehouse_a.id,
                day_key=date(2026, 3, day),
                scorer=_wants(150),
            )
            item = db_session.get(InventoryItem, inventory_item.id)
            assert 0 <= item.qty_reserved <= item.qty_on_hand

        total_ordered = sum(log.qty_ordered for log in db_session.query(DailySalesLog).all())
        assert total_ordered == db_session.get(InventoryItem, inventory_item.id).qty_reserved == 1000

    def test_foreign_warehouse_is_not_found(self, db_session, company_a, warehouse_b):
        with pytest.raises(NotFoundError):
            generate_daily_demand(company_id=company_a.id, warehouse_id=warehouse_b.id, day_key=DAY)

    def test_bad_day_key_rejected(self, db_session, company_a, warehouse_a):
        with pytest.raises(ValidationError):
            generate_daily_demand(company_id=company_a.id, warehouse_id=warehouse_a.id, day_key="not-a-day")
