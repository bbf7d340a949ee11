# Overview: Service-layer operations for inventory; stock receiving, moving-average cost and movement history.

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..models import InventoryItem, InventoryMovement, ProductTemplate
from ..models.finance import CATEGORY_PURCHASE, DIRECTION_OUT
from ..models.inventory import MOVEMENT_IN, SOURCE_PURCHASE
from ..models.metrics import METRIC_STOCK_COUNT
from warehouse_engine.validation import (
    InsufficientFundsError,
    NotFoundError,
    ValidationError,
    coerce_int,
    enforce_rules_inventory_receive,
    require_day_key,
)
from .concurrency import lock_for_update, run_with_retry
from .ledger_service import (
    generate_idempotency_key,
    get_wallet_for_update,
    post_ledger_entry,
    update_wallet_usd_from_ledger,
)
from .warehouse_service import (
    get_current_day_key,
    get_player_id_for_company,
    get_warehouse_for_company,
    increment_metric,
)
"""
Inventory Invariants & Cost Semantics (authoritative)

- Stock is a mutable counter per (warehouse, product template), audited by
  append-only InventoryMovement rows.
- Quantities never go negative and qty_reserved never exceeds qty_on_hand.
- avg_unit_cost_cents is a moving weighted average recomputed only on
  PURCHASE inbound, as:
    (on_hand * avg + qty * unit_cost) / (on_hand + qty)  (nearest cent, half-up)
  Returns restock at the current average and never re-cost.
- A PURCHASE source_ref_id can be received once per warehouse.
"""


@dataclass
class ReceiveResult:
    item: InventoryItem
    movement: InventoryMovement
    was_replay: bool
    charged_cents: int = 0

    def to_dict(self) -> dict:
        return {
            "item": self.item.to_dict(),
            "movement": self.movement.to_dict(),
            "was_replay": self.was_replay,
            "charged_cents": self.charged_cents,
        }


def moving_average_cost_cents(on_hand: int, avg_cents: int, quantity: int, unit_cost_cents: int) -> int:
    """Weighted average of existing stock and an inbound lot, rounded half-up to the cent."""
    total_qty = on_hand + quantity
    if total_qty <= 0:
        return unit_cost_cents
    numerator = on_hand * avg_cents + quantity * unit_cost_cents
    return (2 * numerator + total_qty) // (2 * total_qty)


def get_or_create_inventory_item(warehouse_id: int, product_template_id: int, *, lock: bool = True) -> InventoryItem:
    """Inventory row for (warehouse, product); new rows start empty at zero cost."""
    query = db.session.query(InventoryItem).filter_by(
        warehouse_id=warehouse_id,
        product_template_id=product_template_id,
    )
    if lock:
        query = lock_for_update(query.populate_existing())
    item = query.first()
    if item:
        return item

    item = InventoryItem(
        warehouse_id=warehouse_id,
        product_template_id=product_template_id,
        qty_on_hand=0,
        qty_reserved=0,
        avg_unit_cost_cents=0,
        last_unit_cost_cents=0,
    )
    db.session.add(item)
    db.session.flush()
    return item


def find_movement(warehouse_id: int, source_type: str, source_ref_id: str) -> InventoryMovement | None:
    return (
        db.session.query(InventoryMovement)
        .filter_by(warehouse_id=warehouse_id, source_type=source_type, source_ref_id=source_ref_id)
        .first()
    )


def receive_stock(
    *,
    company_id: int,
    warehouse_id: int,
    product_template_id: int,
    quantity: int,
    unit_cost_cents: int,
    source_ref_id: str,
    day_key=None,
    charge_wallet: bool = True,
) -> ReceiveResult:
    """
    Receive a purchased lot into a warehouse.

    Replays of the same source_ref_id return the first movement untouched.
    With charge_wallet the lot cost is posted as a PURCHASE ledger OUT and
    the player's wallet must cover it.
    """
    quantity = coerce_int("quantity", quantity)
    unit_cost_cents = coerce_int("unit_cost_cents", unit_cost_cents)
    enforce_rules_inventory_receive(quantity, unit_cost_cents)
    source_ref_id = str(source_ref_id or "").strip()
    if not source_ref_id:
        raise ValidationError("source_ref_id is required")
    day = require_day_key(day_key) if day_key is not None else None

    def _op():
        warehouse = get_warehouse_for_company(company_id, warehouse_id)
        if not db.session.get(ProductTemplate, product_template_id):
            raise NotFoundError(f"Product template {product_template_id} not found")

        existing = find_movement(warehouse.id, SOURCE_PURCHASE, source_ref_id)
        if existing:
            return ReceiveResult(item=existing.inventory_item, movement=existing, was_replay=True)

        receive_day = day or get_current_day_key(company_id)
        total_cost = quantity * unit_cost_cents
        player_id = get_player_id_for_company(company_id)

        if charge_wallet and total_cost > 0:
            wallet = get_wallet_for_update(player_id)
            if wallet.balance_usd_cents < total_cost:
                raise InsufficientFundsError(
                    f"Purchase costs {total_cost} cents but wallet holds {wallet.balance_usd_cents}"
                )

        item = get_or_create_inventory_item(warehouse.id, product_template_id)
        new_avg = moving_average_cost_cents(item.qty_on_hand, item.avg_unit_cost_cents, quantity, unit_cost_cents)

        item.avg_unit_cost_cents = new_avg
        item.last_unit_cost_cents = unit_cost_cents
        item.qty_on_hand = InventoryItem.qty_on_hand + quantity

        movement = InventoryMovement(
            warehouse_id=warehouse.id,
            inventory_item_id=item.id,
            product_template_id=product_template_id,
            direction=MOVEMENT_IN,
            source_type=SOURCE_PURCHASE,
            source_ref_id=source_ref_id,
            quantity=quantity,
            unit_cost_cents=unit_cost_cents,
            day_key=receive_day,
        )
        db.session.add(movement)
        db.session.flush()

        increment_metric(warehouse.id, METRIC_STOCK_COUNT, quantity)

        charged = 0
        if charge_wallet and total_cost > 0:
            result = post_ledger_entry(
                idempotency_key=generate_idempotency_key("PURCHASE", warehouse.id, source_ref_id),
                company_id=company_id,
                day_key=receive_day,
                direction=DIRECTION_OUT,
                amount_cents=total_cost,
                category=CATEGORY_PURCHASE,
                scope_type="WAREHOUSE",
                scope_id=warehouse.id,
                ref_type="INVENTORY_MOVEMENT",
                ref_id=str(movement.id),
                note=f"PURCHASE {source_ref_id} qty={quantity} unitCost={unit_cost_cents}",
            )
            update_wallet_usd_from_ledger(player_id, result)
            charged = total_cost if result.is_new else 0

        db.session.commit()
        current_app.logger.info(
            "Received %s x product %s into warehouse %s (avg cost %s)",
            quantity,
            product_template_id,
            warehouse.id,
            new_avg,
        )
        return ReceiveResult(item=item, movement=movement, was_replay=False, charged_cents=charged)

    return run_with_retry(_op)


def get_inventory_item_for_company(company_id: int, item_id: int) -> InventoryItem:
    item = db.session.get(InventoryItem, item_id)
    if not item or item.warehouse.company_id != company_id:
        raise NotFoundError(f"Inventory item {item_id} not found")
    return item


def list_movements(*, inventory_item_id: int, limit: int = 200) -> list[InventoryMovement]:
    return (
        db.session.query(InventoryMovement)
        .filter(InventoryMovement.inventory_item_id == inventory_item_id)
        .order_by(InventoryMovement.id.desc())
        .limit(limit)
        .all()
    )
