# Overview: Pytest coverage for the warehouse day tick and backlog warnings.

from datetime import date

import pytest

from warehouse_engine.models import InventoryItem, PlayerMessage, PlayerWallet, WalletTransaction
from warehouse_engine.models.communications import MESSAGE_LEVEL_CRITICAL, MESSAGE_LEVEL_WARNING
from warehouse_engine.models.finance import CATEGORY_FULFILLMENT_XP, CURRENCY_XP
from warehouse_engine.services.day_tick_service import run_warehouse_day_tick
from warehouse_engine.services.notification_service import backlog_warning_level


DAY = date(2026, 3, 2)


def _wants(units):
    return lambda base_qty, price_multiplier, season_score: units


class TestDayTick:
    def test_tick_orders_ships_and_rewards(self, db_session, company_a, player_a, warehouse_a, listing, inventory_item):
        result = run_warehouse_day_tick(
            company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(250)
        )

        assert result.demand.units_ordered == 250
        assert result.fulfillment.shipped_units == 100
        assert result.fulfillment.backlog_units == 150
        assert result.xp_awarded == 100
        assert result.backlog_warning is True

        item = db_session.get(InventoryItem, inventory_item.id)
        assert (item.qty_on_hand, item.qty_reserved) == (900, 150)

        tx = db_session.query(WalletTransaction).one()
        assert tx.currency == CURRENCY_XP
        assert tx.category == CATEGORY_FULFILLMENT_XP
        wallet = db_session.query(PlayerWallet).filter_by(player_id=player_a.id).one()
        assert wallet.balance_xp == 100

        message = db_session.query(PlayerMessage).one()
        assert message.level == MESSAGE_LEVEL_WARNING
        assert message.dedupe_key == f"BACKLOG_WARNING:{company_a.id}:{warehouse_a.id}:2026-03-02"
        assert "Backlog remaining: 150 units" in message.body
        assert message.context["capacity"] == 100

    def test_rerun_same_day_changes_nothing(self, db_session, company_a, player_a, warehouse_a, listing, inventory_item):
        run_warehouse_day_tick(company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(250))
        again = run_warehouse_day_tick(
            company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(250)
        )

        assert again.demand.listings_skipped == 1
        assert again.fulfillment.shipped_units == 0
        assert again.xp_awarded == 0
        assert again.backlog_warning is False

        assert db_session.query(WalletTransaction).count() == 1
        assert db_session.query(PlayerMessage).count() == 1
        item = db_session.get(InventoryItem, inventory_item.id)
        assert (item.qty_on_hand, item.qty_reserved) == (900, 150)

    def test_no_backlog_no_warning(self, db_session, company_a, warehouse_a, listing):
        result = run_warehouse_day_tick(
            company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(40)
        )

        assert result.fulfillment.backlog_units == 0
        assert result.backlog_warning is False
        assert db_session.query(PlayerMessage).count() == 0

    def test_xp_can_be_disabled(self, app, db_session, company_a, warehouse_a, listing):
        app.config["FULFILLMENT_XP_PER_UNIT"] = 0
        try:
            result = run_warehouse_day_tick(
                company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(40)
            )
        finally:
            app.config["FULFILLMENT_XP_PER_UNIT"] = 1

        assert result.xp_awarded == 0
        assert db_session.query(WalletTransaction).count() == 0

    def test_deep_backlog_is_critical(self, db_session, company_a, warehouse_a, listing):
        run_warehouse_day_tick(company_id=company_a.id, warehouse_id=warehouse_a.id, day_key=DAY, scorer=_wants(500))

        message = db_session.query(PlayerMessage).one()
        assert message.level == MESSAGE_LEVEL_CRITICAL


class TestBacklogWarningLevel:
    @pytest.mark.parametrize(
        "backlog, capacity, expected",
        [
            (150, 100, MESSAGE_LEVEL_WARNING),
            (300, 100, MESSAGE_LEVEL_WARNING),
            (301, 100, MESSAGE_LEVEL_CRITICAL),
            (5, 0, MESSAGE_LEVEL_CRITICAL),
        ],
    )
    def test_levels(self, backlog, capacity, expected):
        assert backlog_warning_level(backlog, capacity) == expected
