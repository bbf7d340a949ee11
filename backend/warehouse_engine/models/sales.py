from __future__ import annotations

from ..extensions import db
from warehouse_engine.time_utils import to_utc_z


LISTING_STATUS_LISTED = "LISTED"
LISTING_STATUS_PAUSED = "PAUSED"

PAUSED_REASON_NONE = "NONE"
PAUSED_REASON_OUT_OF_STOCK = "OUT_OF_STOCK"


class Listing(db.Model):
    """
    A product offered for sale from one warehouse into its market zone.

    BAND SNAPSHOT (immutable after creation):
    tier_used, base_min_daily, base_max_daily, base_qty (one random draw),
    band_matched / band_missing / band_category_id (how the band resolved).

    PRICE SNAPSHOT (recomputed on every price update):
    normal_price_cents, price_index, price_multiplier, blocked_by_price.

    INVARIANT: base_max_daily >= base_min_daily >= 1.
    """
    __tablename__ = "listings"
    __table_args__ = (
        db.UniqueConstraint("company_id", "market_zone", "product_template_id", name="uq_listings_company_zone_product"),
        db.Index("ix_listings_warehouse_status", "warehouse_id", "status"),
        db.CheckConstraint("base_min_daily >= 1", name="ck_listings_band_min"),
        db.CheckConstraint("base_max_daily >= base_min_daily", name="ck_listings_band_order"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=False, index=True)
    inventory_item_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=False, index=True)
    product_template_id = db.Column(db.Integer, db.ForeignKey("product_templates.id"), nullable=False)
    market_zone = db.Column(db.String(32), nullable=False)

    sale_price_cents = db.Column(db.Integer, nullable=False)
    list_price_cents = db.Column(db.Integer, nullable=True)

    status = db.Column(db.String(16), nullable=False, default=LISTING_STATUS_LISTED, index=True)
    paused_reason = db.Column(db.String(32), nullable=False, default=PAUSED_REASON_NONE)
    paused_at = db.Column(db.DateTime(timezone=True), nullable=True)

    # Band snapshot
    tier_used = db.Column(db.Integer, nullable=False)
    base_min_daily = db.Column(db.Integer, nullable=False)
    base_max_daily = db.Column(db.Integer, nullable=False)
    base_qty = db.Column(db.Integer, nullable=False)
    band_matched = db.Column(db.Boolean, nullable=False, default=False)
    band_missing = db.Column(db.Boolean, nullable=False, default=False)
    band_category_id = db.Column(db.Integer, nullable=True)

    # Price snapshot
    normal_price_cents = db.Column(db.Integer, nullable=False)
    price_index = db.Column(db.Float, nullable=False, default=1.0)
    price_multiplier = db.Column(db.Float, nullable=False, default=1.0)
    blocked_by_price = db.Column(db.Boolean, nullable=False, default=False)

    launched_at_day_key = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    warehouse = db.relationship("Warehouse", backref=db.backref("listings", lazy=True))
    inventory_item = db.relationship("InventoryItem")
    product_template = db.relationship("ProductTemplate")

    def __repr__(self) -> str:
        return f"<Listing id={self.id} warehouse_id={self.warehouse_id} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "warehouse_id": self.warehouse_id,
            "inventory_item_id": self.inventory_item_id,
            "product_template_id": self.product_template_id,
            "market_zone": self.market_zone,
            "sale_price_cents": self.sale_price_cents,
            "list_price_cents": self.list_price_cents,
            "status": self.status,
            "paused_reason": self.paused_reason,
            "paused_at": to_utc_z(self.paused_at) if self.paused_at else None,
            "band": {
                "tier_used": self.tier_used,
                "base_min_daily": self.base_min_daily,
                "base_max_daily": self.base_max_daily,
                "base_qty": self.base_qty,
                "band_matched": self.band_matched,
                "band_missing": self.band_missing,
                "band_category_id": self.band_category_id,
            },
            "price": {
                "normal_price_cents": self.normal_price_cents,
                "price_index": self.price_index,
                "price_multiplier": self.price_multiplier,
                "blocked_by_price": self.blocked_by_price,
            },
            "launched_at_day_key": self.launched_at_day_key.isoformat() if self.launched_at_day_key else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class DailySalesLog(db.Model):
    """
    One row per (listing, day): demand accepted that day and how much of it
    has been closed.

    INVARIANT: 0 <= qty_shipped <= qty_ordered. Backlog = qty_ordered - qty_shipped.
    qty_manual_cleared is the part of qty_shipped closed by part-time staff
    (no stock left the warehouse for those units).
    """
    __tablename__ = "daily_sales_logs"
    __table_args__ = (
        db.UniqueConstraint("listing_id", "day_key", name="uq_sales_logs_listing_day"),
        db.Index("ix_sales_logs_warehouse_day", "warehouse_id", "day_key"),
        db.CheckConstraint("qty_shipped >= 0", name="ck_sales_logs_shipped_nonneg"),
        db.CheckConstraint("qty_shipped <= qty_ordered", name="ck_sales_logs_shipped_le_ordered"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=False)
    listing_id = db.Column(db.Integer, db.ForeignKey("listings.id"), nullable=False, index=True)
    inventory_item_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=False)
    product_template_id = db.Column(db.Integer, db.ForeignKey("product_templates.id"), nullable=False)
    market_zone = db.Column(db.String(32), nullable=False)

    day_key = db.Column(db.Date, nullable=False)

    qty_ordered = db.Column(db.Integer, nullable=False, default=0)
    qty_shipped = db.Column(db.Integer, nullable=False, default=0)
    qty_manual_cleared = db.Column(db.Integer, nullable=False, default=0)

    sale_price_cents = db.Column(db.Integer, nullable=True)
    list_price_cents = db.Column(db.Integer, nullable=True)

    listing = db.relationship("Listing", backref=db.backref("sales_logs", lazy=True))

    @property
    def backlog(self) -> int:
        return max(0, self.qty_ordered - self.qty_shipped)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "warehouse_id": self.warehouse_id,
            "listing_id": self.listing_id,
            "inventory_item_id": self.inventory_item_id,
            "product_template_id": self.product_template_id,
            "market_zone": self.market_zone,
            "day_key": self.day_key.isoformat(),
            "qty_ordered": self.qty_ordered,
            "qty_shipped": self.qty_shipped,
            "qty_manual_cleared": self.qty_manual_cleared,
            "backlog": self.backlog,
            "sale_price_cents": self.sale_price_cents,
            "list_price_cents": self.list_price_cents,
        }


class DemandSnapshot(db.Model):
    """
    Immutable record of how one listing's demand was resolved for one day.

    Written once by demand generation; its existence also marks the
    (listing, day) as already evaluated. Read by the debug report only.
    """
    __tablename__ = "demand_snapshots"
    __table_args__ = (
        db.UniqueConstraint("listing_id", "day_key", name="uq_demand_snapshots_listing_day"),
        db.Index("ix_demand_snapshots_company_day", "company_id", "day_key"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=False, index=True)
    listing_id = db.Column(db.Integer, db.ForeignKey("listings.id"), nullable=False)
    day_key = db.Column(db.Date, nullable=False)

    tier_used = db.Column(db.Integer, nullable=False)
    band_matched = db.Column(db.Boolean, nullable=False)
    base_qty = db.Column(db.Integer, nullable=False)

    price_index = db.Column(db.Float, nullable=False)
    price_multiplier = db.Column(db.Float, nullable=False)
    season_score = db.Column(db.Integer, nullable=False)
    missing_season = db.Column(db.Boolean, nullable=False, default=False)

    blocked_by_price = db.Column(db.Boolean, nullable=False, default=False)
    blocked_by_season = db.Column(db.Boolean, nullable=False, default=False)

    final_desired = db.Column(db.Integer, nullable=False)
    qty_accepted = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "warehouse_id": self.warehouse_id,
            "listing_id": self.listing_id,
            "day_key": self.day_key.isoformat(),
            "tier_used": self.tier_used,
            "band_matched": self.band_matched,
            "base_qty": self.base_qty,
            "price_index": self.price_index,
            "price_multiplier": self.price_multiplier,
            "season_score": self.season_score,
            "missing_season": self.missing_season,
            "blocked_by_price": self.blocked_by_price,
            "blocked_by_season": self.blocked_by_season,
            "final_desired": self.final_desired,
            "qty_accepted": self.qty_accepted,
        }
