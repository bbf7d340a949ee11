# Overview: Service-layer operations for returns; restocks settlement returns into warehouse inventory.

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..models import InventoryItem, InventoryMovement, ProductTemplate, Settlement
from ..models.inventory import MOVEMENT_IN, SOURCE_RETURNS_RESTOCK
from ..models.metrics import METRIC_STOCK_COUNT
from warehouse_engine.time_utils import utcnow
from warehouse_engine.validation import NotFoundError
from .concurrency import run_with_retry
from .inventory_service import find_movement, get_or_create_inventory_item
from .notification_service import create_message_once
from .warehouse_service import get_player_id_for_company, increment_metric
"""
Returns restocking

WHY: a settlement reports units customers sent back. Those units go back on
the shelf exactly once, whatever the number of times billing replays the
settlement.

DESIGN PRINCIPLES:
- Idempotent per (settlement, product): the RETURNS_RESTOCK movement with
  source_ref_id "{settlement_id}:{product_template_id}" marks a line done.
- Restock increments qty_on_hand only. avg_unit_cost_cents is untouched;
  the movement records the current average as its unit cost.
- A missing inventory row is created empty at zero cost before restocking.
- No ledger entry: the money side of returns is settled by billing.
- One "Returns processed" message per settlement (dedupe key
  RETURNS_RESTOCK:{settlement_id}).
"""


@dataclass
class ReturnsResult:
    settlement_id: int
    total_returned_units: int
    lines_applied: int
    lines_skipped: int
    notification_created: bool

    def to_dict(self) -> dict:
        return {
            "settlement_id": self.settlement_id,
            "total_returned_units": self.total_returned_units,
            "lines_applied": self.lines_applied,
            "lines_skipped": self.lines_skipped,
            "notification_created": self.notification_created,
        }


def _returns_message_body(settlement: Settlement, applied: list[tuple[int, int]], total: int, top_n: int) -> str:
    label = settlement.warehouse.label if settlement.warehouse else "warehouse"

    ranked = sorted(applied, key=lambda pair: pair[1], reverse=True)
    templates = {
        t.id: t
        for t in db.session.query(ProductTemplate)
        .filter(ProductTemplate.id.in_([pid for pid, _ in ranked]))
        .all()
    }

    bullets = []
    for product_id, qty in ranked[:top_n]:
        template = templates.get(product_id)
        name = template.name if template else "Unknown"
        code = template.code if template else str(product_id)
        bullets.append(f"- {name} ({code}): {qty}")

    body = f"{total} units returned and added back to {label} stock."
    if bullets:
        body += "\n\nReturned items:\n" + "\n".join(bullets)
        remaining = len(ranked) - top_n
        if remaining > 0:
            body += f"\n+{remaining} more items."
    return body


def apply_returns(settlement_id: int, *, company_id: int | None = None) -> ReturnsResult:
    """
    Restock every returned line of a settlement not restocked before.

    company_id, when given, scopes the lookup to that company's settlements.
    """
    def _op():
        settlement = db.session.get(Settlement, settlement_id)
        if not settlement or (company_id is not None and settlement.company_id != company_id):
            raise NotFoundError(f"Settlement {settlement_id} not found")

        warehouse_id = settlement.warehouse_id
        total = 0
        skipped = 0
        applied: list[tuple[int, int]] = []

        for line in settlement.lines:
            if line.return_qty <= 0:
                continue

            source_ref_id = f"{settlement.id}:{line.product_template_id}"
            if find_movement(warehouse_id, SOURCE_RETURNS_RESTOCK, source_ref_id):
                skipped += 1
                continue

            item = get_or_create_inventory_item(warehouse_id, line.product_template_id)
            db.session.add(
                InventoryMovement(
                    warehouse_id=warehouse_id,
                    inventory_item_id=item.id,
                    product_template_id=line.product_template_id,
                    direction=MOVEMENT_IN,
                    source_type=SOURCE_RETURNS_RESTOCK,
                    source_ref_id=source_ref_id,
                    quantity=line.return_qty,
                    unit_cost_cents=item.avg_unit_cost_cents,
                    day_key=settlement.payout_day_key,
                )
            )
            item.qty_on_hand = InventoryItem.qty_on_hand + line.return_qty
            db.session.flush()

            total += line.return_qty
            applied.append((line.product_template_id, line.return_qty))

        notification_created = False
        if total > 0:
            increment_metric(warehouse_id, METRIC_STOCK_COUNT, total)
            _, notification_created = create_message_once(
                player_id=get_player_id_for_company(settlement.company_id),
                company_id=settlement.company_id,
                dedupe_key=f"RETURNS_RESTOCK:{settlement.id}",
                title="Returns processed",
                body=_returns_message_body(
                    settlement,
                    applied,
                    total,
                    current_app.config["RETURNS_NOTIFICATION_TOP_N"],
                ),
                context={
                    "building_id": warehouse_id,
                    "settlement_id": settlement.id,
                    "total_returned_units": total,
                },
            )

        if settlement.returns_applied_at is None:
            settlement.returns_applied_at = utcnow()

        db.session.commit()
        current_app.logger.info(
            "Returns settlement=%s restocked=%s applied=%s skipped=%s",
            settlement.id,
            total,
            len(applied),
            skipped,
        )
        return ReturnsResult(
            settlement_id=settlement.id,
            total_returned_units=total,
            lines_applied=len(applied),
            lines_skipped=skipped,
            notification_created=notification_created,
        )

    return run_with_retry(_op)
