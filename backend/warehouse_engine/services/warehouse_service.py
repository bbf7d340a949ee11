# Overview: Service-layer operations for warehouses; ownership checks, tier, capacity and metric counters.

from __future__ import annotations

from datetime import date

from flask import current_app

from ..extensions import db
from ..models import BuildingMetricState, Company, GameClock, MetricLevelConfig, Warehouse
from ..models.metrics import BUILDING_ROLE_WAREHOUSE, METRIC_SALES_COUNT
from warehouse_engine.time_utils import utcnow
from warehouse_engine.validation import NotFoundError


MIN_TIER = 1
MAX_TIER = 5


def get_company(company_id: int) -> Company:
    company = db.session.get(Company, company_id)
    if not company:
        raise NotFoundError(f"Company {company_id} not found")
    return company


def get_warehouse_for_company(company_id: int, warehouse_id: int) -> Warehouse:
    """
    Warehouse owned by company_id.

    Another company's warehouse is reported exactly like a missing one.
    """
    warehouse = db.session.get(Warehouse, warehouse_id)
    if not warehouse or warehouse.company_id != company_id:
        raise NotFoundError(f"Warehouse {warehouse_id} not found")
    return warehouse


def get_player_id_for_company(company_id: int) -> int:
    return get_company(company_id).player_id


def get_current_day_key(company_id: int) -> date:
    """
    Company's current simulated day.

    Companies without a GameClock row fall back to today's UTC date.
    """
    clock = db.session.query(GameClock).filter_by(company_id=company_id).first()
    if clock:
        return clock.current_day_key
    current_app.logger.warning("No game clock for company %s; using UTC today", company_id)
    return utcnow().date()


def _metric_state(warehouse_id: int, metric_type: str) -> BuildingMetricState | None:
    return (
        db.session.query(BuildingMetricState)
        .filter_by(building_id=warehouse_id, metric_type=metric_type)
        .first()
    )


def get_warehouse_tier(warehouse_id: int) -> int:
    """SALES_COUNT level of the warehouse (1 when no metric row exists yet)."""
    state = _metric_state(warehouse_id, METRIC_SALES_COUNT)
    return state.current_level if state and state.current_level else 1


def clamp_tier(tier: int | None) -> int:
    if tier is None:
        return MIN_TIER
    return max(MIN_TIER, min(MAX_TIER, int(tier)))


def get_daily_capacity(warehouse_id: int) -> int:
    """
    Units the warehouse can ship per day.

    max_allowed of the WAREHOUSE/SALES_COUNT level config for the current
    tier; 0 when the level is not configured.
    """
    level = get_warehouse_tier(warehouse_id)
    config = (
        db.session.query(MetricLevelConfig)
        .filter_by(building_role=BUILDING_ROLE_WAREHOUSE, metric_type=METRIC_SALES_COUNT, level=level)
        .first()
    )
    if not config:
        return 0
    return max(0, config.max_allowed)


def increment_metric(warehouse_id: int, metric_type: str, delta: int) -> None:
    """Add delta to a building counter, creating the counter row on first use."""
    if delta == 0:
        return
    state = _metric_state(warehouse_id, metric_type)
    if not state:
        state = BuildingMetricState(building_id=warehouse_id, metric_type=metric_type, current_count=0, current_level=1)
        db.session.add(state)
        db.session.flush()

    db.session.query(BuildingMetricState).filter(BuildingMetricState.id == state.id).update(
        {
            BuildingMetricState.current_count: BuildingMetricState.current_count + delta,
            BuildingMetricState.last_evaluated_at: utcnow(),
        },
        synchronize_session="fetch",
    )


def get_metric_count(warehouse_id: int, metric_type: str) -> int:
    state = _metric_state(warehouse_id, metric_type)
    return state.current_count if state else 0
