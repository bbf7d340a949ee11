# Overview: Service-layer operations for part-time staff; paid manual clearing of fulfillment backlog.

from __future__ import annotations

import re
from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..models import DailySalesLog, InventoryItem, LedgerEntry, Warehouse
from ..models.finance import CATEGORY_PART_TIME, DIRECTION_OUT
from ..models.metrics import METRIC_SALES_COUNT
from warehouse_engine.validation import InsufficientFundsError, ValidationError, coerce_int
from .concurrency import lock_for_update, run_with_retry
from .fulfillment_service import get_backlog_total, open_backlog_query
from .ledger_service import (
    generate_idempotency_key,
    get_wallet,
    get_wallet_for_update,
    post_ledger_entry,
    update_wallet_usd_from_ledger,
)
from .warehouse_service import (
    get_current_day_key,
    get_player_id_for_company,
    get_warehouse_for_company,
    increment_metric,
)
"""
Part-time backlog clearing

- Cost: staff_count x PART_TIME_COST_PER_WORKER_CENTS x country salary
  multiplier (rounded half-up to the cent).
- Clears up to staff_count x PART_TIME_UNITS_PER_WORKER units of backlog,
  oldest rows first. Cleared units count as shipped (qty_shipped and
  qty_manual_cleared rise) but no stock leaves the warehouse; the
  reservation behind them is released.
- Exactly one PART_TIME ledger OUT per idempotency key. Its note records
  "clearedUnits=N" and is what a replay reports back. Caller-supplied keys
  are hashed together with company and building before use.
- Replay is detected before the funds check; a replay never charges and
  never touches backlog.
"""

_CLEARED_UNITS_RE = re.compile(r"clearedUnits=(\d+)")


@dataclass
class BacklogClearPreview:
    building_id: int
    staff_count: int
    salary_multiplier: float
    backlog_units: int
    extra_capacity: int
    will_clear: int
    cost_cents: int

    def to_dict(self) -> dict:
        return {
            "building_id": self.building_id,
            "staff_count": self.staff_count,
            "salary_multiplier": self.salary_multiplier,
            "backlog_units": self.backlog_units,
            "extra_capacity": self.extra_capacity,
            "will_clear": self.will_clear,
            "cost_cents": self.cost_cents,
            "backlog_after": self.backlog_units - self.will_clear,
        }


@dataclass
class BacklogClearResult:
    building_id: int
    day_key: str
    staff_count: int
    salary_multiplier: float
    cost_cents: int
    requested_clear_units: int
    cleared_units: int
    backlog_before: int
    backlog_after: int
    balance_usd_after_cents: int
    was_replay: bool
    idempotency_key: str | None = None

    def to_dict(self) -> dict:
        return {
            "building_id": self.building_id,
            "day_key": self.day_key,
            "staff_count": self.staff_count,
            "salary_multiplier": self.salary_multiplier,
            "cost_cents": self.cost_cents,
            "requested_clear_units": self.requested_clear_units,
            "cleared_units": self.cleared_units,
            "backlog_before": self.backlog_before,
            "backlog_after": self.backlog_after,
            "balance_usd_after_cents": self.balance_usd_after_cents,
            "was_replay": self.was_replay,
            "idempotency_key": self.idempotency_key,
        }


def parse_cleared_units(note: str | None) -> int:
    if not note:
        return 0
    m = _CLEARED_UNITS_RE.search(note)
    return int(m.group(1)) if m else 0


def _part_time_note(staff_count: int, cleared_units: int) -> str:
    return f"PART_TIME staffCount={staff_count}, clearedUnits={cleared_units}"


def _validate_staff_count(staff_count) -> int:
    if staff_count is None:
        raise ValidationError("staff_count is required")
    staff_count = coerce_int("staff_count", staff_count)
    staff_max = current_app.config["PART_TIME_STAFF_MAX"]
    if staff_count < 0 or staff_count > staff_max:
        raise ValidationError(f"staff_count must be between 0 and {staff_max}")
    return staff_count


def _salary_multiplier(warehouse: Warehouse) -> float:
    if warehouse.country and warehouse.country.salary_multiplier:
        return float(warehouse.country.salary_multiplier)
    return 1.0


def _cost_cents(staff_count: int, salary_multiplier: float) -> int:
    raw = staff_count * current_app.config["PART_TIME_COST_PER_WORKER_CENTS"] * salary_multiplier
    return int(raw + 0.5)


def preview_backlog_clear(*, company_id: int, building_id: int, staff_count) -> BacklogClearPreview:
    """What clear_backlog would do right now. Read-only."""
    staff_count = _validate_staff_count(staff_count)
    warehouse = get_warehouse_for_company(company_id, building_id)

    multiplier = _salary_multiplier(warehouse)
    backlog = get_backlog_total(warehouse.id)
    extra_capacity = staff_count * current_app.config["PART_TIME_UNITS_PER_WORKER"]
    return BacklogClearPreview(
        building_id=warehouse.id,
        staff_count=staff_count,
        salary_multiplier=multiplier,
        backlog_units=backlog,
        extra_capacity=extra_capacity,
        will_clear=min(backlog, extra_capacity),
        cost_cents=_cost_cents(staff_count, multiplier),
    )


def clear_backlog(
    *,
    company_id: int,
    building_id: int,
    staff_count,
    idempotency_key: str | None = None,
) -> BacklogClearResult:
    """
    Hire part-time staff for the current game day and clear backlog with them.

    Raises InsufficientFundsError (nothing written) when the wallet cannot
    cover the cost.
    """
    staff_count = _validate_staff_count(staff_count)
    if idempotency_key is not None:
        idempotency_key = str(idempotency_key).strip() or None

    def _op():
        warehouse = get_warehouse_for_company(company_id, building_id)
        player_id = get_player_id_for_company(company_id)
        day = get_current_day_key(company_id)
        multiplier = _salary_multiplier(warehouse)

        if staff_count == 0:
            wallet = get_wallet(player_id)
            return BacklogClearResult(
                building_id=warehouse.id,
                day_key=day.isoformat(),
                staff_count=0,
                salary_multiplier=multiplier,
                cost_cents=0,
                requested_clear_units=0,
                cleared_units=0,
                backlog_before=0,
                backlog_after=0,
                balance_usd_after_cents=wallet.balance_usd_cents if wallet else 0,
                was_replay=False,
            )

        if idempotency_key:
            # Client keys are only unique per company and building
            key = generate_idempotency_key("PART_TIME", company_id, warehouse.id, "CLIENT", idempotency_key)
        else:
            key = generate_idempotency_key("PART_TIME", company_id, warehouse.id, day, staff_count)
        requested = staff_count * current_app.config["PART_TIME_UNITS_PER_WORKER"]
        backlog_before = get_backlog_total(warehouse.id)

        replay = db.session.query(LedgerEntry).filter_by(idempotency_key=key).first()
        if replay:
            cleared = parse_cleared_units(replay.note)
            wallet = get_wallet(player_id)
            return BacklogClearResult(
                building_id=warehouse.id,
                day_key=day.isoformat(),
                staff_count=staff_count,
                salary_multiplier=multiplier,
                cost_cents=replay.amount_cents,
                requested_clear_units=requested,
                cleared_units=cleared,
                backlog_before=backlog_before + cleared,
                backlog_after=backlog_before,
                balance_usd_after_cents=wallet.balance_usd_cents if wallet else 0,
                was_replay=True,
                idempotency_key=key,
            )

        cost = _cost_cents(staff_count, multiplier)
        wallet = get_wallet_for_update(player_id)
        if wallet.balance_usd_cents < cost:
            raise InsufficientFundsError(
                f"Part-time staff costs {cost} cents but wallet holds {wallet.balance_usd_cents}"
            )

        # Plan first so the ledger note is final when written.
        target = min(backlog_before, requested)
        plan: list[tuple[DailySalesLog, int]] = []
        remaining = target
        for row in open_backlog_query(warehouse.id).all():
            if remaining <= 0:
                break
            clear = min(row.qty_ordered - row.qty_shipped, remaining)
            if clear <= 0:
                continue
            plan.append((row, clear))
            remaining -= clear
        cleared_total = target - remaining

        result = post_ledger_entry(
            idempotency_key=key,
            company_id=company_id,
            day_key=day,
            direction=DIRECTION_OUT,
            amount_cents=cost,
            category=CATEGORY_PART_TIME,
            scope_type="BUILDING",
            scope_id=warehouse.id,
            counterparty_type="SYSTEM",
            ref_type="PART_TIME_BACKLOG_CLEAR",
            ref_id=str(warehouse.id),
            note=_part_time_note(staff_count, cleared_total),
        )
        update_wallet_usd_from_ledger(player_id, result)

        for row, clear in plan:
            item = lock_for_update(
                db.session.query(InventoryItem).filter(InventoryItem.id == row.inventory_item_id).populate_existing()
            ).one()
            release = min(clear, item.qty_reserved)
            if release > 0:
                item.qty_reserved = InventoryItem.qty_reserved - release
            row.qty_shipped = DailySalesLog.qty_shipped + clear
            row.qty_manual_cleared = DailySalesLog.qty_manual_cleared + clear
            db.session.flush()

        increment_metric(warehouse.id, METRIC_SALES_COUNT, cleared_total)

        db.session.commit()
        wallet_after = get_wallet(player_id)
        current_app.logger.info(
            "Part-time clear warehouse=%s staff=%s cleared=%s cost=%s",
            warehouse.id,
            staff_count,
            cleared_total,
            cost,
        )
        return BacklogClearResult(
            building_id=warehouse.id,
            day_key=day.isoformat(),
            staff_count=staff_count,
            salary_multiplier=multiplier,
            cost_cents=cost,
            requested_clear_units=requested,
            cleared_units=cleared_total,
            backlog_before=backlog_before,
            backlog_after=backlog_before - cleared_total,
            balance_usd_after_cents=wallet_after.balance_usd_cents if wallet_after else 0,
            was_replay=False,
            idempotency_key=key,
        )

    return run_with_retry(_op)
