# Overview: Service-layer operations for reporting; demand debug rows per warehouse and listing.

from __future__ import annotations

from ..extensions import db
from ..models import DailySalesLog, DemandSnapshot, Listing, Warehouse
from warehouse_engine.validation import require_day_key
from .warehouse_service import get_company, get_warehouse_for_company


def get_demand_debug_report(*, company_id: int, day_key, warehouse_id: int | None = None) -> list[dict]:
    """
    How each listing's demand was resolved on a day.

    Diagnostic only: one row per demand snapshot, joined with the listing
    and the day's ordered/shipped counts.
    """
    day = require_day_key(day_key)
    get_company(company_id)
    if warehouse_id is not None:
        get_warehouse_for_company(company_id, warehouse_id)

    query = (
        db.session.query(DemandSnapshot, Listing, Warehouse, DailySalesLog)
        .join(Listing, Listing.id == DemandSnapshot.listing_id)
        .join(Warehouse, Warehouse.id == DemandSnapshot.warehouse_id)
        .outerjoin(
            DailySalesLog,
            (DailySalesLog.listing_id == DemandSnapshot.listing_id) & (DailySalesLog.day_key == DemandSnapshot.day_key),
        )
        .filter(DemandSnapshot.company_id == company_id, DemandSnapshot.day_key == day)
    )
    if warehouse_id is not None:
        query = query.filter(DemandSnapshot.warehouse_id == warehouse_id)

    rows = []
    for snap, listing, warehouse, log in query.order_by(DemandSnapshot.warehouse_id, DemandSnapshot.listing_id):
        rows.append(
            {
                "day_key": snap.day_key.isoformat(),
                "warehouse_id": warehouse.id,
                "warehouse_label": warehouse.label,
                "listing_id": listing.id,
                "product_template_id": listing.product_template_id,
                "sale_price_cents": listing.sale_price_cents,
                "price_index": snap.price_index,
                "season_score": snap.season_score,
                "missing_season": snap.missing_season,
                "price_multiplier": snap.price_multiplier,
                "tier_used": snap.tier_used,
                "band_matched": snap.band_matched,
                "base_qty": snap.base_qty,
                "final_desired": snap.final_desired,
                "qty_accepted": snap.qty_accepted,
                "blocked_by_price": snap.blocked_by_price,
                "blocked_by_season": snap.blocked_by_season,
                "qty_ordered": log.qty_ordered if log else 0,
                "qty_shipped": log.qty_shipped if log else 0,
            }
        )
    return rows
