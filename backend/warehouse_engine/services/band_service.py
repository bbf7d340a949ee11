# Overview: Service-layer operations for sales bands; baseline daily demand range per category/quality/tier.

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..models import CategoryNode, SalesBandConfig
from ..models.catalog import CATEGORY_LEVEL_L3
from .warehouse_service import clamp_tier
"""
Band resolution order (first hit wins):

1. Active band configured at the product's leaf (L3) category covering the tier.
2. Active band configured at the leaf's parent (L2) category covering the tier.
3. Fallback: min=1, max=clamp(tier + 1, 2, 5), missing_band=True.

Missing configuration is never an error; it is logged and the fallback is used.
The result always satisfies 1 <= min_daily <= max_daily.
"""


@dataclass(frozen=True)
class BandResolution:
    min_daily: int
    max_daily: int
    tier_used: int
    band_matched: bool
    resolved_category_id: int | None
    missing_band: bool


def _find_band(category_id: int, quality: str, tier: int) -> SalesBandConfig | None:
    return (
        db.session.query(SalesBandConfig)
        .filter(
            SalesBandConfig.category_id == category_id,
            SalesBandConfig.quality == quality,
            SalesBandConfig.is_active.is_(True),
            SalesBandConfig.tier_min <= tier,
            SalesBandConfig.tier_max >= tier,
        )
        .order_by(SalesBandConfig.id.asc())
        .first()
    )


def resolve_band(category_id: int, quality: str, tier: int | None) -> BandResolution:
    tier_used = clamp_tier(tier)

    band = _find_band(category_id, quality, tier_used)
    resolved_category_id = category_id if band else None

    if not band:
        node = db.session.get(CategoryNode, category_id)
        if node and node.level == CATEGORY_LEVEL_L3 and node.parent_id:
            band = _find_band(node.parent_id, quality, tier_used)
            if band:
                resolved_category_id = node.parent_id

    if not band:
        current_app.logger.warning(
            "No sales band for category=%s quality=%s tier=%s; using fallback",
            category_id,
            quality,
            tier_used,
        )
        return BandResolution(
            min_daily=1,
            max_daily=max(2, min(5, tier_used + 1)),
            tier_used=tier_used,
            band_matched=False,
            resolved_category_id=None,
            missing_band=True,
        )

    min_daily = max(1, band.min_daily)
    max_daily = max(min_daily, band.max_daily)
    return BandResolution(
        min_daily=min_daily,
        max_daily=max_daily,
        tier_used=tier_used,
        band_matched=True,
        resolved_category_id=resolved_category_id,
        missing_band=False,
    )
