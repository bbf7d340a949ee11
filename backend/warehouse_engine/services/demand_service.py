# Overview: Service-layer operations for demand; once-per-day order intake for listed products.

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Callable

from flask import current_app

from ..extensions import db
from ..models import DailySalesLog, DemandSnapshot, InventoryItem, Listing, ProductTemplate, Warehouse
from ..models.sales import LISTING_STATUS_LISTED
from warehouse_engine.validation import require_day_key
from .concurrency import lock_for_update, run_with_retry
from .listing_service import pause_listing_out_of_stock
from .season_service import get_season_score
from .warehouse_service import get_warehouse_for_company
"""
Daily demand invariants

- Each (listing, day) is evaluated at most once; the DemandSnapshot row is
  both the audit record and the "already done" marker.
- Accepted units never exceed unreserved stock (qty_on_hand - qty_reserved),
  so 0 <= qty_reserved <= qty_on_hand holds after every call.
- Accepted units increment the day's DailySalesLog.qty_ordered and the
  item's qty_reserved by the same amount, in the same transaction.
"""

# (base_qty, price_multiplier, season_score) -> desired units
DemandScorer = Callable[[int, float, int], int]


@dataclass(frozen=True)
class DemandResult:
    listings_evaluated: int
    listings_skipped: int
    units_ordered: int
    listings_paused: int

    def to_dict(self) -> dict:
        return {
            "listings_evaluated": self.listings_evaluated,
            "listings_skipped": self.listings_skipped,
            "units_ordered": self.units_ordered,
            "listings_paused": self.listings_paused,
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def default_demand_scorer(base_qty: int, price_multiplier: float, season_score: int) -> int:
    """round(base_qty x price_multiplier x season_score / 100), half-up."""
    return max(0, _round_half_up(base_qty * price_multiplier * season_score / 100.0))


def _get_or_create_sales_log(listing: Listing, day: date) -> DailySalesLog:
    log = db.session.query(DailySalesLog).filter_by(listing_id=listing.id, day_key=day).first()
    if log:
        return log
    log = DailySalesLog(
        company_id=listing.company_id,
        warehouse_id=listing.warehouse_id,
        listing_id=listing.id,
        inventory_item_id=listing.inventory_item_id,
        product_template_id=listing.product_template_id,
        market_zone=listing.market_zone,
        day_key=day,
        qty_ordered=0,
        qty_shipped=0,
        qty_manual_cleared=0,
        sale_price_cents=listing.sale_price_cents,
        list_price_cents=listing.list_price_cents,
    )
    db.session.add(log)
    db.session.flush()
    return log


def _generate_daily_demand_inner(
    *,
    warehouse: Warehouse,
    day: date,
    scorer: DemandScorer,
) -> DemandResult:
    """Core demand logic without retry or commit (shared with the day tick)."""
    listings = (
        db.session.query(Listing)
        .filter(Listing.warehouse_id == warehouse.id, Listing.status == LISTING_STATUS_LISTED)
        .order_by(Listing.id.asc())
        .all()
    )

    evaluated = skipped = units = paused = 0

    for listing in listings:
        already = db.session.query(DemandSnapshot.id).filter_by(listing_id=listing.id, day_key=day).first()
        if already:
            skipped += 1
            continue

        item = lock_for_update(
            db.session.query(InventoryItem).filter(InventoryItem.id == listing.inventory_item_id).populate_existing()
        ).one()
        template = db.session.get(ProductTemplate, listing.product_template_id)

        season = get_season_score(listing.market_zone, template.season_definition_id if template else None, day)
        blocked_by_season = season.score == 0

        if listing.blocked_by_price or blocked_by_season:
            desired = 0
        else:
            desired = max(0, int(scorer(listing.base_qty, listing.price_multiplier, season.score)))

        available = max(0, item.qty_on_hand - item.qty_reserved)
        accepted = min(desired, available)

        if accepted > 0:
            log = _get_or_create_sales_log(listing, day)
            log.qty_ordered = DailySalesLog.qty_ordered + accepted
            item.qty_reserved = InventoryItem.qty_reserved + accepted
            db.session.flush()

        db.session.add(
            DemandSnapshot(
                company_id=listing.company_id,
                warehouse_id=listing.warehouse_id,
                listing_id=listing.id,
                day_key=day,
                tier_used=listing.tier_used,
                band_matched=listing.band_matched,
                base_qty=listing.base_qty,
                price_index=listing.price_index,
                price_multiplier=listing.price_multiplier,
                season_score=season.score,
                missing_season=season.missing_scenario,
                blocked_by_price=listing.blocked_by_price,
                blocked_by_season=blocked_by_season,
                final_desired=desired,
                qty_accepted=accepted,
            )
        )

        if available == 0 and pause_listing_out_of_stock(listing):
            paused += 1

        evaluated += 1
        units += accepted

    db.session.flush()
    return DemandResult(
        listings_evaluated=evaluated,
        listings_skipped=skipped,
        units_ordered=units,
        listings_paused=paused,
    )


def generate_daily_demand(
    *,
    company_id: int,
    warehouse_id: int,
    day_key,
    scorer: DemandScorer | None = None,
) -> DemandResult:
    """
    Take the day's orders for every LISTED listing of a warehouse.

    Listings already evaluated for the day are skipped, so repeating the
    call for the same day changes nothing.
    """
    day = require_day_key(day_key)

    def _op():
        warehouse = get_warehouse_for_company(company_id, warehouse_id)
        result = _generate_daily_demand_inner(warehouse=warehouse, day=day, scorer=scorer or default_demand_scorer)
        db.session.commit()
        current_app.logger.info(
            "Demand warehouse=%s day=%s evaluated=%s skipped=%s units=%s paused=%s",
            warehouse_id,
            day.isoformat(),
            result.listings_evaluated,
            result.listings_skipped,
            result.units_ordered,
            result.listings_paused,
        )
        return result

    return run_with_retry(_op)
