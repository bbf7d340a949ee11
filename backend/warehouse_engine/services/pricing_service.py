# Overview: Service-layer operations for pricing; zone price level, price index and the stepped demand multiplier.

from __future__ import annotations

import math
from dataclasses import dataclass

from ..extensions import db
from ..models import MarketZonePriceIndex


@dataclass(frozen=True)
class PriceSnapshot:
    normal_price_cents: int
    price_index: float
    price_multiplier: float
    blocked_by_price: bool


# (threshold, multiplier) pairs checked in order; first match wins.
_OVERPRICED_STEPS = ((1.15, 0.0), (1.10, 0.60), (1.05, 0.85))
_UNDERPRICED_STEPS = ((0.70, 1.30), (0.80, 1.20), (0.90, 1.10))


def get_price_multiplier(price_index: float) -> float:
    """
    Stepped demand multiplier for a price index.

    > 1.15 -> 0 (listing blocked), > 1.10 -> 0.60, > 1.05 -> 0.85,
    <= 0.70 -> 1.30, <= 0.80 -> 1.20, <= 0.90 -> 1.10, otherwise 1.00.
    """
    for threshold, multiplier in _OVERPRICED_STEPS:
        if price_index > threshold:
            return multiplier
    for threshold, multiplier in _UNDERPRICED_STEPS:
        if price_index <= threshold:
            return multiplier
    return 1.0


def get_zone_multiplier(market_zone: str) -> float:
    row = db.session.query(MarketZonePriceIndex).filter_by(market_zone=market_zone).first()
    if not row or row.multiplier is None:
        return 1.0
    return float(row.multiplier)


def compute_price_snapshot(
    sale_price_cents: int,
    suggested_price_cents: int | None,
    zone_multiplier: float,
) -> PriceSnapshot:
    """
    normal price = suggested price x zone multiplier; price index = sale / normal.

    A non-positive or non-finite normal price falls back to the sale price,
    which yields index 1.0 (never blocks).
    """
    normal = float(suggested_price_cents or 0) * float(zone_multiplier)
    if not math.isfinite(normal) or normal <= 0:
        normal = float(sale_price_cents)

    price_index = sale_price_cents / normal if normal > 0 else 1.0
    if not math.isfinite(price_index):
        price_index = 1.0

    multiplier = get_price_multiplier(price_index)
    return PriceSnapshot(
        normal_price_cents=int(round(normal)),
        price_index=price_index,
        price_multiplier=multiplier,
        blocked_by_price=multiplier == 0,
    )
