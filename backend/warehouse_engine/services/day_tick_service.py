# Overview: Service-layer operations for the warehouse day tick; demand, fulfillment and rewards for one day.

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..models.finance import CATEGORY_FULFILLMENT_XP, CURRENCY_XP, DIRECTION_IN
from warehouse_engine.validation import require_day_key
from .concurrency import run_with_retry
from .demand_service import DemandResult, DemandScorer, _generate_daily_demand_inner, default_demand_scorer
from .fulfillment_service import FulfillmentResult, _fulfill_inner
from .ledger_service import generate_idempotency_key, post_wallet_transaction_and_update_balance
from .notification_service import create_backlog_warning_if_needed
from .warehouse_service import get_player_id_for_company, get_warehouse_for_company


@dataclass
class DayTickResult:
    demand: DemandResult
    fulfillment: FulfillmentResult
    xp_awarded: int
    backlog_warning: bool

    def to_dict(self) -> dict:
        return {
            "demand": self.demand.to_dict(),
            "fulfillment": self.fulfillment.to_dict(),
            "xp_awarded": self.xp_awarded,
            "backlog_warning": self.backlog_warning,
        }


def run_warehouse_day_tick(
    *,
    company_id: int,
    warehouse_id: int,
    day_key,
    scorer: DemandScorer | None = None,
) -> DayTickResult:
    """
    Demand then fulfillment for one warehouse and one day, in one transaction.

    Shipped units earn FULFILLMENT_XP_PER_UNIT XP each; the reward key covers
    (warehouse, day, capacity used), so re-running a finished day awards
    nothing more. Leftover backlog raises at most one warning per day.
    """
    day = require_day_key(day_key)

    def _op():
        warehouse = get_warehouse_for_company(company_id, warehouse_id)
        player_id = get_player_id_for_company(company_id)

        demand = _generate_daily_demand_inner(warehouse=warehouse, day=day, scorer=scorer or default_demand_scorer)
        fulfillment = _fulfill_inner(warehouse=warehouse, day=day)

        xp_awarded = 0
        xp_amount = current_app.config["FULFILLMENT_XP_PER_UNIT"] * fulfillment.shipped_units
        if xp_amount > 0:
            posted = post_wallet_transaction_and_update_balance(
                idempotency_key=generate_idempotency_key(
                    "FULFILLMENT_XP", warehouse.id, day, fulfillment.capacity_used
                ),
                player_id=player_id,
                company_id=company_id,
                day_key=day,
                currency=CURRENCY_XP,
                direction=DIRECTION_IN,
                amount=xp_amount,
                category=CATEGORY_FULFILLMENT_XP,
                ref_type="WAREHOUSE",
                ref_id=str(warehouse.id),
                note=f"FULFILLMENT shipped={fulfillment.shipped_units}",
            )
            xp_awarded = xp_amount if posted.is_new else 0

        warning = create_backlog_warning_if_needed(
            player_id=player_id,
            company_id=company_id,
            warehouse=warehouse,
            day=day,
            backlog_units=fulfillment.backlog_units,
            capacity=fulfillment.capacity_total,
        )

        db.session.commit()
        current_app.logger.info(
            "Day tick warehouse=%s day=%s ordered=%s shipped=%s backlog=%s xp=%s",
            warehouse_id,
            day.isoformat(),
            demand.units_ordered,
            fulfillment.shipped_units,
            fulfillment.backlog_units,
            xp_awarded,
        )
        return DayTickResult(
            demand=demand,
            fulfillment=fulfillment,
            xp_awarded=xp_awarded,
            backlog_warning=warning is not None,
        )

    return run_with_retry(_op)
