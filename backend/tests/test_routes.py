# Overview: Pytest coverage for HTTP routes and error mapping.

"""
Route Tests

Every route maps engine errors to {"error", "reason"} with 400/404/409 and
hides unexpected failures behind a generic 500.
"""

import importlib
from datetime import date

import pytest

from warehouse_engine.models import PlayerWallet, Settlement, SettlementLine


DAY = "2026-03-02"


class TestHealth:
    def test_health_ok(self, client, db_session):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"
        assert resp.json["checks"]["database"]["details"]["warehouses"] == 0


class TestListingRoutes:
    def test_create_listing(self, client, company_a, warehouse_a, inventory_item):
        resp = client.post("/api/listings", json={
            "company_id": company_a.id,
            "warehouse_id": warehouse_a.id,
            "inventory_item_id": inventory_item.id,
            "sale_price_cents": 1000,
        })
        assert resp.status_code == 200
        listing = resp.json["listing"]
        assert listing["status"] == "LISTED"
        assert listing["band"]["band_missing"] is True

        resp = client.get(f"/api/listings?company_id={company_a.id}")
        assert resp.status_code == 200
        assert len(resp.json["listings"]) == 1

    def test_missing_fields_is_400(self, client, db_session):
        resp = client.post("/api/listings", json={"company_id": 1})
        assert resp.status_code == 400
        assert resp.json["reason"] == "validation_failed"
        assert "sale_price_cents" in resp.json["error"]

    def test_unknown_field_is_400(self, client, company_a, warehouse_a, inventory_item):
        resp = client.post("/api/listings", json={
            "company_id": company_a.id,
            "warehouse_id": warehouse_a.id,
            "inventory_item_id": inventory_item.id,
            "sale_price_cents": 1000,
            "base_qty": 500,
        })
        assert resp.status_code == 400

    def test_decimal_price_is_400(self, client, company_a, warehouse_a, inventory_item):
        resp = client.post("/api/listings", json={
            "company_id": company_a.id,
            "warehouse_id": warehouse_a.id,
            "inventory_item_id": inventory_item.id,
            "sale_price_cents": 10.5,
        })
        assert resp.status_code == 400

    def test_conflict_is_409(self, client, db_session, company_a, listing, product):
        from warehouse_engine.models import InventoryItem, Warehouse

        second = Warehouse(company_id=company_a.id, market_zone="USA")
        db_session.add(second)
        db_session.flush()
        item = InventoryItem(warehouse_id=second.id, product_template_id=product.id, qty_on_hand=3)
        db_session.add(item)
        db_session.commit()

        resp = client.post("/api/listings", json={
            "company_id": company_a.id,
            "warehouse_id": second.id,
            "inventory_item_id": item.id,
            "sale_price_cents": 1000,
        })
        assert resp.status_code == 409
        assert resp.json["reason"] == "conflict"

    def test_list_requires_company(self, client, db_session):
        resp = client.get("/api/listings")
        assert resp.status_code == 400


class TestWarehouseRoutes:
    def test_demand_then_fulfill(self, client, company_a, warehouse_a, listing):
        resp = client.post(f"/api/warehouses/{warehouse_a.id}/demand", json={"company_id": company_a.id, "day_key": DAY})
        assert resp.status_code == 200
        assert resp.json["listings_evaluated"] == 1

        resp = client.post(f"/api/warehouses/{warehouse_a.id}/fulfill", json={"company_id": company_a.id, "day_key": DAY})
        assert resp.status_code == 200
        assert resp.json["capacity_total"] == 100
        assert resp.json["backlog_units"] == 0
        assert resp.json["shipped_lines"] == len(resp.json["lines"])

    def test_tick(self, client, company_a, warehouse_a, listing):
        resp = client.post(f"/api/warehouses/{warehouse_a.id}/tick", json={"company_id": company_a.id, "day_key": DAY})
        assert resp.status_code == 200
        assert set(resp.json) == {"demand", "fulfillment", "xp_awarded", "backlog_warning"}

    def test_foreign_warehouse_is_404(self, client, company_a, warehouse_b):
        resp = client.post(f"/api/warehouses/{warehouse_b.id}/fulfill", json={"company_id": company_a.id, "day_key": DAY})
        assert resp.status_code == 404
        assert resp.json["reason"] == "not_found"

    def test_missing_day_key_is_400(self, client, company_a, warehouse_a):
        resp = client.post(f"/api/warehouses/{warehouse_a.id}/demand", json={"company_id": company_a.id})
        assert resp.status_code == 400

    def test_backlog_clear_preview(self, client, company_a, warehouse_a):
        resp = client.get(
            f"/api/warehouses/{warehouse_a.id}/backlog-clear/preview?company_id={company_a.id}&staff_count=2"
        )
        assert resp.status_code == 200
        assert resp.json["cost_cents"] == 12_000
        assert resp.json["backlog_units"] == 0

    def test_backlog_clear_insufficient_funds(self, client, db_session, company_a, player_a, warehouse_a):
        db_session.add(PlayerWallet(player_id=player_a.id, balance_usd_cents=10))
        db_session.commit()

        resp = client.post(
            f"/api/warehouses/{warehouse_a.id}/backlog-clear",
            json={"company_id": company_a.id, "staff_count": 1},
        )
        assert resp.status_code == 400
        assert resp.json["reason"] == "insufficient_funds"

    def test_backlog_clear_replay(self, client, company_a, warehouse_a, funded_wallet):
        body = {"company_id": company_a.id, "staff_count": 1, "idempotency_key": "UI-CLICK-1"}
        first = client.post(f"/api/warehouses/{warehouse_a.id}/backlog-clear", json=body)
        second = client.post(f"/api/warehouses/{warehouse_a.id}/backlog-clear", json=body)

        assert first.status_code == second.status_code == 200
        assert first.json["was_replay"] is False
        assert second.json["was_replay"] is True
        assert second.json["balance_usd_after_cents"] == 94_000

    def test_unexpected_error_is_500(self, client, monkeypatch, company_a, warehouse_a):
        from warehouse_engine.services import fulfillment_service

        def boom(**kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(fulfillment_service, "fulfill", boom)
        resp = client.post(f"/api/warehouses/{warehouse_a.id}/fulfill", json={"company_id": company_a.id, "day_key": DAY})

        assert resp.status_code == 500
        assert resp.json == {"error": "Internal server error", "reason": "internal_error"}


class TestInventoryRoutes:
    def _receive(self, client, company, warehouse, product, **extra):
        body = {
            "company_id": company.id,
            "warehouse_id": warehouse.id,
            "product_template_id": product.id,
            "quantity": 20,
            "unit_cost_cents": 50,
            "source_ref_id": "PO-77",
            "charge_wallet": False,
        }
        body.update(extra)
        return client.post("/api/inventory/receive", json=body)

    def test_receive_and_replay(self, client, company_a, warehouse_a, product):
        first = self._receive(client, company_a, warehouse_a, product)
        second = self._receive(client, company_a, warehouse_a, product)

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json["was_replay"] is True

        item_id = first.json["item"]["id"]
        resp = client.get(f"/api/inventory/{item_id}/movements?company_id={company_a.id}")
        assert resp.status_code == 200
        assert len(resp.json["movements"]) == 1

    def test_charge_wallet_must_be_boolean(self, client, company_a, warehouse_a, product):
        resp = self._receive(client, company_a, warehouse_a, product, charge_wallet="yes")
        assert resp.status_code == 400

    def test_movements_of_other_company_is_404(self, client, company_a, company_b, warehouse_a, product):
        first = self._receive(client, company_a, warehouse_a, product)
        resp = client.get(f"/api/inventory/{first.json['item']['id']}/movements?company_id={company_b.id}")
        assert resp.status_code == 404


class TestSettlementRoutes:
    def test_apply_returns(self, client, db_session, company_a, warehouse_a, product):
        settlement = Settlement(
            company_id=company_a.id,
            warehouse_id=warehouse_a.id,
            period_start_day_key=date(2026, 3, 1),
            period_end_day_key=date(2026, 3, 7),
            payout_day_key=date(2026, 3, 9),
        )
        db_session.add(settlement)
        db_session.flush()
        db_session.add(SettlementLine(settlement_id=settlement.id, product_template_id=product.id, return_qty=4))
        db_session.commit()

        resp = client.post(f"/api/settlements/{settlement.id}/apply-returns", json={"company_id": company_a.id})
        assert resp.status_code == 200
        assert resp.json["total_returned_units"] == 4

        resp = client.get(f"/api/messages/{company_a.player_id}")
        assert resp.status_code == 200
        assert [m["title"] for m in resp.json["messages"]] == ["Returns processed"]

    def test_unknown_settlement_is_404(self, client, db_session):
        resp = client.post("/api/settlements/424242/apply-returns")
        assert resp.status_code == 404


class TestLedgerRoutes:
    def test_wallet(self, client, player_a, funded_wallet):
        resp = client.get(f"/api/wallet/{player_a.id}")
        assert resp.status_code == 200
        assert resp.json["wallet"]["balance_usd_cents"] == 100_000

    def test_missing_wallet_is_404(self, client, db_session):
        resp = client.get("/api/wallet/31337")
        assert resp.status_code == 404

    def test_ledger_lists_company_entries(self, client, company_a, warehouse_a, funded_wallet):
        client.post(f"/api/warehouses/{warehouse_a.id}/backlog-clear", json={"company_id": company_a.id, "staff_count": 1})

        resp = client.get(f"/api/ledger?company_id={company_a.id}")
        assert resp.status_code == 200
        assert [e["category"] for e in resp.json["entries"]] == ["PART_TIME"]


class TestReportRoutes:
    def test_demand_debug(self, client, company_a, warehouse_a, listing):
        client.post(f"/api/warehouses/{warehouse_a.id}/demand", json={"company_id": company_a.id, "day_key": DAY})

        resp = client.get(f"/api/reports/demand-debug?company_id={company_a.id}&day_key={DAY}")
        assert resp.status_code == 200
        assert resp.json["count"] == 1

    def test_bad_day_key_is_400(self, client, company_a):
        resp = client.get(f"/api/reports/demand-debug?company_id={company_a.id}&day_key=yesterday")
        assert resp.status_code == 400


class TestRouteModules:
    @pytest.mark.parametrize(
        "module",
        ["errors", "inventory", "ledger", "listings", "reports", "settlements", "system", "warehouses"],
    )
    def test_module_opens_with_overview(self, module):
        mod = importlib.import_module(f"warehouse_engine.routes.{module}")
        with open(mod.__file__, encoding="utf-8") as fh:
            assert fh.readline().startswith("# Overview: ")
