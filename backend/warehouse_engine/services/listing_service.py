# Overview: Service-layer operations for listings; create/update with band and price snapshots, pause handling.

from __future__ import annotations

import random

from flask import current_app

from ..extensions import db
from ..models import InventoryItem, Listing, ProductTemplate
from ..models.sales import (
    LISTING_STATUS_LISTED,
    LISTING_STATUS_PAUSED,
    PAUSED_REASON_NONE,
    PAUSED_REASON_OUT_OF_STOCK,
)
from warehouse_engine.time_utils import utcnow
from warehouse_engine.validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    coerce_int,
    enforce_rules_price,
)
from .band_service import resolve_band
from .concurrency import run_with_retry
from .pricing_service import compute_price_snapshot, get_zone_multiplier
from .warehouse_service import get_current_day_key, get_warehouse_for_company, get_warehouse_tier
"""
Listing lifecycle

- One listing per (company, market zone, product template). The listing is
  bound to the warehouse it was created from; listing the same product in
  the same zone from another warehouse is a conflict.
- The band snapshot (tier, min/max, base_qty draw) is taken once at creation
  and never changes. Demand reads only the snapshot.
- The price snapshot is recomputed every time the sale price is written.
- Listings are paused (OUT_OF_STOCK) by demand/fulfillment when stock runs
  out and re-activated by the next upsert.
"""


def _apply_price_snapshot(listing: Listing, template: ProductTemplate, market_zone: str) -> None:
    snapshot = compute_price_snapshot(
        listing.sale_price_cents,
        template.suggested_sale_price_cents,
        get_zone_multiplier(market_zone),
    )
    listing.normal_price_cents = snapshot.normal_price_cents
    listing.price_index = snapshot.price_index
    listing.price_multiplier = snapshot.price_multiplier
    listing.blocked_by_price = snapshot.blocked_by_price


def pause_listing_out_of_stock(listing: Listing) -> bool:
    """Mark a listing PAUSED/OUT_OF_STOCK. Returns False if it was already paused."""
    if listing.status == LISTING_STATUS_PAUSED:
        return False
    listing.status = LISTING_STATUS_PAUSED
    listing.paused_reason = PAUSED_REASON_OUT_OF_STOCK
    listing.paused_at = utcnow()
    return True


def upsert_listing(
    *,
    company_id: int,
    warehouse_id: int,
    inventory_item_id: int,
    sale_price_cents: int,
    list_price_cents: int | None = None,
    rng: random.Random | None = None,
) -> Listing:
    """
    Create or re-price the listing for an inventory item.

    Checks run in order validation -> not found -> conflict, all before the
    first write.
    """
    for key, value in (
        ("company_id", company_id),
        ("warehouse_id", warehouse_id),
        ("inventory_item_id", inventory_item_id),
    ):
        if value is None:
            raise ValidationError(f"{key} is required")
        coerce_int(key, value)
    if sale_price_cents is None:
        raise ValidationError("sale_price_cents is required")
    sale_price_cents = coerce_int("sale_price_cents", sale_price_cents)
    enforce_rules_price("sale_price_cents", sale_price_cents, required=True)
    if list_price_cents is not None:
        list_price_cents = coerce_int("list_price_cents", list_price_cents)
        enforce_rules_price("list_price_cents", list_price_cents, required=False)

    rng = rng or random

    def _op():
        warehouse = get_warehouse_for_company(company_id, warehouse_id)

        item = db.session.get(InventoryItem, inventory_item_id)
        if not item or item.warehouse_id != warehouse.id:
            raise NotFoundError(f"Inventory item {inventory_item_id} not found in warehouse {warehouse_id}")
        template = db.session.get(ProductTemplate, item.product_template_id)
        if not template:
            raise NotFoundError(f"Product template {item.product_template_id} not found")

        listing = (
            db.session.query(Listing)
            .filter_by(
                company_id=company_id,
                market_zone=warehouse.market_zone,
                product_template_id=template.id,
            )
            .first()
        )
        if listing and listing.warehouse_id != warehouse.id:
            raise ConflictError(
                f"Product {template.id} is already listed in {warehouse.market_zone} "
                f"from warehouse {listing.warehouse_id}"
            )

        if listing:
            listing.sale_price_cents = sale_price_cents
            listing.list_price_cents = list_price_cents
            listing.inventory_item_id = item.id
            listing.status = LISTING_STATUS_LISTED
            listing.paused_reason = PAUSED_REASON_NONE
            listing.paused_at = None
            _apply_price_snapshot(listing, template, warehouse.market_zone)
            db.session.commit()
            return listing

        if item.qty_on_hand <= 0:
            raise ValidationError("Cannot list an item with no stock on hand")

        band = resolve_band(template.category_id, template.quality, get_warehouse_tier(warehouse.id))
        listing = Listing(
            company_id=company_id,
            warehouse_id=warehouse.id,
            inventory_item_id=item.id,
            product_template_id=template.id,
            market_zone=warehouse.market_zone,
            sale_price_cents=sale_price_cents,
            list_price_cents=list_price_cents,
            status=LISTING_STATUS_LISTED,
            paused_reason=PAUSED_REASON_NONE,
            tier_used=band.tier_used,
            base_min_daily=band.min_daily,
            base_max_daily=band.max_daily,
            base_qty=rng.randint(band.min_daily, band.max_daily),
            band_matched=band.band_matched,
            band_missing=band.missing_band,
            band_category_id=band.resolved_category_id,
            launched_at_day_key=get_current_day_key(company_id),
        )
        _apply_price_snapshot(listing, template, warehouse.market_zone)
        db.session.add(listing)
        db.session.commit()

        current_app.logger.info(
            "Listed product %s from warehouse %s (tier=%s base_qty=%s band_matched=%s)",
            template.id,
            warehouse.id,
            listing.tier_used,
            listing.base_qty,
            listing.band_matched,
        )
        return listing

    return run_with_retry(_op)


def list_listings(*, company_id: int, warehouse_id: int | None = None, status: str | None = None) -> list[Listing]:
    query = db.session.query(Listing).filter(Listing.company_id == company_id)
    if warehouse_id is not None:
        query = query.filter(Listing.warehouse_id == warehouse_id)
    if status:
        query = query.filter(Listing.status == status)
    return query.order_by(Listing.id.asc()).all()
