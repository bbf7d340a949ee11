# Overview: Service-layer operations for fulfillment; ships backlog oldest-first within daily capacity.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import DailySalesLog, InventoryItem, InventoryMovement, Warehouse
from ..models.inventory import MOVEMENT_OUT, SOURCE_SALES_FULFILLMENT
from warehouse_engine.validation import require_day_key
from .concurrency import lock_for_update, run_with_retry
from .listing_service import pause_listing_out_of_stock
from .warehouse_service import get_daily_capacity, get_warehouse_for_company
"""
Fulfillment invariants (authoritative)

Ordering:
- Open rows (qty_shipped < qty_ordered, day_key <= day) are served by
  (day_key, listing_id, id): oldest backlog first, stable within a day.

Capacity:
- capacity_total is the tier's daily capacity.
- capacity_used starts at the units already shipped by SALES_FULFILLMENT
  movements for this warehouse and day. It is derived from stored state,
  never passed in, so calling fulfill() twice for one day cannot ship more
  than one day's capacity.
- The reported capacity_used is capped at capacity_total, which can shrink
  mid-day when the tier drops.

Per shipment (one transaction, inventory row locked):
- qty_on_hand and qty_reserved drop by the same amount, qty_shipped rises by
  it, and one OUT movement is written at the current average cost.
- A row never ships more than min(qty_on_hand, qty_reserved).
- A listing whose item reaches zero on-hand is paused (OUT_OF_STOCK).
"""


@dataclass
class FulfillmentResult:
    shipped_units: int
    backlog_units: int
    capacity_used: int
    capacity_total: int
    was_idempotent: bool
    shipped_lines: int = 0
    lines: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "shipped_units": self.shipped_units,
            "backlog_units": self.backlog_units,
            "capacity_used": self.capacity_used,
            "capacity_total": self.capacity_total,
            "was_idempotent": self.was_idempotent,
            "shipped_lines": self.shipped_lines,
            "lines": self.lines,
        }


def open_backlog_query(warehouse_id: int, up_to_day: date | None = None):
    """Sales log rows with unshipped units, oldest first."""
    query = db.session.query(DailySalesLog).filter(
        DailySalesLog.warehouse_id == warehouse_id,
        DailySalesLog.qty_shipped < DailySalesLog.qty_ordered,
    )
    if up_to_day is not None:
        query = query.filter(DailySalesLog.day_key <= up_to_day)
    return query.order_by(DailySalesLog.day_key.asc(), DailySalesLog.listing_id.asc(), DailySalesLog.id.asc())


def get_backlog_total(warehouse_id: int, up_to_day: date | None = None) -> int:
    query = db.session.query(
        func.coalesce(func.sum(DailySalesLog.qty_ordered - DailySalesLog.qty_shipped), 0)
    ).filter(
        DailySalesLog.warehouse_id == warehouse_id,
        DailySalesLog.qty_shipped < DailySalesLog.qty_ordered,
    )
    if up_to_day is not None:
        query = query.filter(DailySalesLog.day_key <= up_to_day)
    return int(query.scalar() or 0)


def get_units_shipped_on_day(warehouse_id: int, day: date) -> int:
    total = (
        db.session.query(func.coalesce(func.sum(InventoryMovement.quantity), 0))
        .filter(
            InventoryMovement.warehouse_id == warehouse_id,
            InventoryMovement.day_key == day,
            InventoryMovement.source_type == SOURCE_SALES_FULFILLMENT,
            InventoryMovement.direction == MOVEMENT_OUT,
        )
        .scalar()
    )
    return int(total or 0)


def _fulfill_inner(*, warehouse: Warehouse, day: date) -> FulfillmentResult:
    """Core shipping loop without retry or commit (shared with the day tick)."""
    capacity_total = get_daily_capacity(warehouse.id)
    capacity_used = get_units_shipped_on_day(warehouse.id, day)
    remaining = max(0, capacity_total - capacity_used)

    shipped_units = 0
    lines: list[dict] = []

    if remaining > 0:
        for row in open_backlog_query(warehouse.id, day).all():
            if remaining <= 0:
                break

            to_ship = row.qty_ordered - row.qty_shipped
            item = lock_for_update(
                db.session.query(InventoryItem).filter(InventoryItem.id == row.inventory_item_id).populate_existing()
            ).one()
            ship = min(to_ship, remaining, min(item.qty_on_hand, item.qty_reserved))
            if ship <= 0:
                continue

            shipped_before = row.qty_shipped
            db.session.add(
                InventoryMovement(
                    warehouse_id=warehouse.id,
                    inventory_item_id=item.id,
                    product_template_id=item.product_template_id,
                    direction=MOVEMENT_OUT,
                    source_type=SOURCE_SALES_FULFILLMENT,
                    source_ref_id=f"{row.id}:{day.isoformat()}:{shipped_before}",
                    quantity=ship,
                    unit_cost_cents=item.avg_unit_cost_cents,
                    day_key=day,
                )
            )
            item.qty_on_hand = InventoryItem.qty_on_hand - ship
            item.qty_reserved = InventoryItem.qty_reserved - ship
            row.qty_shipped = DailySalesLog.qty_shipped + ship
            db.session.flush()

            remaining -= ship
            capacity_used += ship
            shipped_units += ship
            lines.append(
                {
                    "sales_log_id": row.id,
                    "listing_id": row.listing_id,
                    "day_key": row.day_key.isoformat(),
                    "qty": ship,
                }
            )

            if item.qty_on_hand == 0:
                pause_listing_out_of_stock(row.listing)

    db.session.flush()
    return FulfillmentResult(
        shipped_units=shipped_units,
        backlog_units=get_backlog_total(warehouse.id, day),
        capacity_used=min(capacity_used, capacity_total),
        capacity_total=capacity_total,
        was_idempotent=shipped_units == 0,
        shipped_lines=len(lines),
        lines=lines,
    )


def fulfill(*, company_id: int, warehouse_id: int, day_key) -> FulfillmentResult:
    """Ship as much open backlog as the day's remaining capacity allows."""
    day = require_day_key(day_key)

    def _op():
        warehouse = get_warehouse_for_company(company_id, warehouse_id)
        result = _fulfill_inner(warehouse=warehouse, day=day)
        db.session.commit()
        current_app.logger.info(
            "Fulfillment warehouse=%s day=%s shipped=%s backlog=%s capacity=%s/%s",
            warehouse_id,
            day.isoformat(),
            result.shipped_units,
            result.backlog_units,
            result.capacity_used,
            result.capacity_total,
        )
        return result

    return run_with_retry(_op)
