# Overview: Pytest coverage for settlement returns restocking.

"""
Returns Restock Tests

Scenario: 50 units at an average cost of 10, settlement returns 20 ->
70 units, average still 10, exactly one notification no matter how many
times the settlement is applied.
"""

from datetime import date

import pytest

from warehouse_engine.models import (
    InventoryItem,
    InventoryMovement,
    PlayerMessage,
    ProductTemplate,
    Settlement,
    SettlementLine,
)
from warehouse_engine.models.inventory import MOVEMENT_IN, SOURCE_RETURNS_RESTOCK
from warehouse_engine.models.metrics import METRIC_STOCK_COUNT
from warehouse_engine.services.returns_service import apply_returns
from warehouse_engine.services.warehouse_service import get_metric_count
from warehouse_engine.validation import NotFoundError


PAYOUT_DAY = date(2026, 3, 9)


def _settlement(db_session, company, warehouse, lines):
    settlement = Settlement(
        company_id=company.id,
        warehouse_id=warehouse.id,
        period_start_day_key=date(2026, 3, 1),
        period_end_day_key=date(2026, 3, 7),
        payout_day_key=PAYOUT_DAY,
    )
    db_session.add(settlement)
    db_session.flush()
    for product_id, return_qty in lines:
        db_session.add(SettlementLine(
            settlement_id=settlement.id,
            product_template_id=product_id,
            fulfilled_qty=return_qty * 5,
            return_qty=return_qty,
        ))
    db_session.commit()
    return settlement


@pytest.fixture
def stocked_item(db_session, warehouse_a, product):
    item = InventoryItem(
        warehouse_id=warehouse_a.id,
        product_template_id=product.id,
        qty_on_hand=50,
        avg_unit_cost_cents=10,
        last_unit_cost_cents=10,
    )
    db_session.add(item)
    db_session.commit()
    return item


class TestApplyReturns:
    def test_restock_scenario(self, db_session, company_a, player_a, warehouse_a, product, stocked_item):
        settlement = _settlement(db_session, company_a, warehouse_a, [(product.id, 20)])

        first = apply_returns(settlement.id)
        second = apply_returns(settlement.id)

        assert first.total_returned_units == 20
        assert first.lines_applied == 1
        assert first.notification_created is True
        assert second.total_returned_units == 0
        assert second.lines_skipped == 1
        assert second.notification_created is False

        item = db_session.get(InventoryItem, stocked_item.id)
        assert item.qty_on_hand == 70
        assert item.avg_unit_cost_cents == 10

        movement = db_session.query(InventoryMovement).one()
        assert movement.direction == MOVEMENT_IN
        assert movement.source_type == SOURCE_RETURNS_RESTOCK
        assert movement.source_ref_id == f"{settlement.id}:{product.id}"
        assert movement.unit_cost_cents == 10
        assert movement.day_key == PAYOUT_DAY

        messages = db_session.query(PlayerMessage).filter_by(player_id=player_a.id).all()
        assert len(messages) == 1
        assert messages[0].dedupe_key == f"RETURNS_RESTOCK:{settlement.id}"
        assert "20 units returned" in messages[0].body
        assert "- Frying Pan (PAN-001): 20" in messages[0].body

        assert get_metric_count(warehouse_a.id, METRIC_STOCK_COUNT) == 20
        assert db_session.get(Settlement, settlement.id).returns_applied_at is not None

    def test_missing_item_is_created_at_zero_cost(self, db_session, company_a, warehouse_a, product):
        settlement = _settlement(db_session, company_a, warehouse_a, [(product.id, 7)])

        apply_returns(settlement.id)

        item = db_session.query(InventoryItem).filter_by(warehouse_id=warehouse_a.id, product_template_id=product.id).one()
        assert item.qty_on_hand == 7
        assert item.avg_unit_cost_cents == 0

    def test_zero_return_lines_are_ignored(self, db_session, company_a, warehouse_a, product, stocked_item):
        settlement = _settlement(db_session, company_a, warehouse_a, [(product.id, 0)])

        result = apply_returns(settlement.id)

        assert result.total_returned_units == 0
        assert result.notification_created is False
        assert db_session.query(PlayerMessage).count() == 0
        assert db_session.get(InventoryItem, stocked_item.id).qty_on_hand == 50

    def test_message_lists_top_products_with_trailer(self, app, db_session, company_a, warehouse_a, category_tree):
        _, l3 = category_tree
        lines = []
        for i in range(10):
            template = ProductTemplate(code=f"SKU-{i:02d}", name=f"Item {i}", category_id=l3.id)
            db_session.add(template)
            db_session.flush()
            lines.append((template.id, i + 1))
        db_session.commit()
        settlement = _settlement(db_session, company_a, warehouse_a, lines)

        result = apply_returns(settlement.id)

        assert result.total_returned_units == sum(range(1, 11))
        body = db_session.query(PlayerMessage).one().body
        top_n = app.config["RETURNS_NOTIFICATION_TOP_N"]
        assert body.count("\n- ") == top_n
        assert body.index("(SKU-09): 10") < body.index("(SKU-08): 9")
        assert f"+{10 - top_n} more items." in body

    def test_unknown_settlement_is_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            apply_returns(999_999)

    def test_other_company_cannot_apply(self, db_session, company_a, company_b, warehouse_a, product):
        settlement = _settlement(db_session, company_a, warehouse_a, [(product.id, 3)])
        with pytest.raises(NotFoundError):
            apply_returns(settlement.id, company_id=company_b.id)
        assert db_session.query(InventoryMovement).count() == 0
