from __future__ import annotations

from ..extensions import db


PRODUCT_QUALITIES = ("STANDARD", "PREMIUM", "LUXURY")

CATEGORY_LEVEL_L1 = "L1"
CATEGORY_LEVEL_L2 = "L2"
CATEGORY_LEVEL_L3 = "L3"


class CategoryNode(db.Model):
    """
    Product category tree node (L1 > L2 > L3).

    Catalog administration is out of scope; the engine only walks leaf ->
    parent when resolving sales bands.
    """
    __tablename__ = "category_nodes"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    parent_id = db.Column(db.Integer, db.ForeignKey("category_nodes.id"), nullable=True, index=True)
    level = db.Column(db.String(4), nullable=False, default=CATEGORY_LEVEL_L3)
    name = db.Column(db.String(120), nullable=False)

    parent = db.relationship("CategoryNode", remote_side=[id], backref=db.backref("children", lazy=True))

    def __repr__(self) -> str:
        return f"<CategoryNode id={self.id} level={self.level} name={self.name!r}>"


class ProductTemplate(db.Model):
    __tablename__ = "product_templates"
    __table_args__ = (
        db.UniqueConstraint("code", name="uq_product_templates_code"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)

    category_id = db.Column(db.Integer, db.ForeignKey("category_nodes.id"), nullable=False, index=True)
    quality = db.Column(db.String(16), nullable=False, default="STANDARD")

    # Reference retail price before the market zone multiplier
    suggested_sale_price_cents = db.Column(db.Integer, nullable=False, default=0)

    # Seasonality curve; None means "always 100"
    season_definition_id = db.Column(db.Integer, nullable=True, index=True)

    category = db.relationship("CategoryNode")

    def __repr__(self) -> str:
        return f"<ProductTemplate id={self.id} code={self.code!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "category_id": self.category_id,
            "quality": self.quality,
            "suggested_sale_price_cents": self.suggested_sale_price_cents,
            "season_definition_id": self.season_definition_id,
        }


class SalesBandConfig(db.Model):
    """
    Baseline daily demand range for (category, quality, tier range).

    Configured at L3 (leaf) or L2 (parent) categories. A row applies to a
    tier when tier_min <= tier <= tier_max.
    """
    __tablename__ = "sales_band_configs"
    __table_args__ = (
        db.Index("ix_sales_bands_lookup", "category_id", "quality", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("category_nodes.id"), nullable=False)
    quality = db.Column(db.String(16), nullable=False)

    tier_min = db.Column(db.Integer, nullable=False, default=1)
    tier_max = db.Column(db.Integer, nullable=False, default=5)

    min_daily = db.Column(db.Integer, nullable=False)
    max_daily = db.Column(db.Integer, nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category_id": self.category_id,
            "quality": self.quality,
            "tier_min": self.tier_min,
            "tier_max": self.tier_max,
            "min_daily": self.min_daily,
            "max_daily": self.max_daily,
            "is_active": self.is_active,
        }


class MarketZonePriceIndex(db.Model):
    """Zone price level applied to suggested prices (seeded elsewhere)."""
    __tablename__ = "market_zone_price_indexes"
    __table_args__ = (
        db.UniqueConstraint("market_zone", name="uq_zone_price_index_zone"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    market_zone = db.Column(db.String(32), nullable=False)
    multiplier = db.Column(db.Float, nullable=False, default=1.0)


class SeasonScenario(db.Model):
    """
    Weekly demand score curve for a season definition in one market zone.

    weeks is a JSON list of 52 ints in 0..100; index 0 is week 1.
    """
    __tablename__ = "season_scenarios"
    __table_args__ = (
        db.UniqueConstraint("definition_id", "market_zone", name="uq_season_scenarios_definition_zone"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    definition_id = db.Column(db.Integer, nullable=False, index=True)
    market_zone = db.Column(db.String(32), nullable=False)
    weeks = db.Column(db.JSON, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
