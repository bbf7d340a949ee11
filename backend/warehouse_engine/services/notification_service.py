# Overview: Service-layer operations for player messages; dedupe-keyed inbox notifications.

from __future__ import annotations

from datetime import date

from ..extensions import db
from ..models import PlayerMessage, Warehouse
from ..models.communications import MESSAGE_LEVEL_CRITICAL, MESSAGE_LEVEL_INFO, MESSAGE_LEVEL_WARNING


CATEGORY_OPERATION = "OPERATION"
DEPARTMENT_LOGISTICS = "LOGISTICS"

KIND_INFO = "INFO"
KIND_ACTION = "ACTION"

# Backlog deeper than this many days of capacity escalates to CRITICAL
BACKLOG_CRITICAL_DAYS = 3


def create_message_once(
    *,
    player_id: int,
    dedupe_key: str,
    title: str,
    body: str,
    category: str = CATEGORY_OPERATION,
    department: str = DEPARTMENT_LOGISTICS,
    level: str = MESSAGE_LEVEL_INFO,
    kind: str = KIND_INFO,
    company_id: int | None = None,
    context: dict | None = None,
) -> tuple[PlayerMessage, bool]:
    """
    Insert a message unless (player_id, dedupe_key) already exists.

    Returns (message, created). Does not commit.
    """
    existing = db.session.query(PlayerMessage).filter_by(player_id=player_id, dedupe_key=dedupe_key).first()
    if existing:
        return existing, False

    msg = PlayerMessage(
        player_id=player_id,
        company_id=company_id,
        category=category,
        department=department,
        level=level,
        kind=kind,
        title=title,
        body=body,
        context=context,
        dedupe_key=dedupe_key,
    )
    db.session.add(msg)
    db.session.flush()
    return msg, True


def backlog_warning_level(backlog_units: int, capacity: int) -> str:
    """WARNING up to BACKLOG_CRITICAL_DAYS days of capacity, CRITICAL beyond (or with no capacity)."""
    if capacity <= 0:
        return MESSAGE_LEVEL_CRITICAL
    return MESSAGE_LEVEL_CRITICAL if backlog_units / capacity > BACKLOG_CRITICAL_DAYS else MESSAGE_LEVEL_WARNING


def create_backlog_warning_if_needed(
    *,
    player_id: int,
    company_id: int,
    warehouse: Warehouse,
    day: date,
    backlog_units: int,
    capacity: int,
) -> PlayerMessage | None:
    """
    At most one backlog warning per warehouse per day.

    Returns the new message, or None when there is no backlog or the day
    was already warned about.
    """
    if backlog_units <= 0:
        return None

    day_str = day.isoformat()
    backlog_days = backlog_units / capacity if capacity > 0 else None
    body = (
        f"{warehouse.label}: Orders exceeded daily shipping capacity.\n"
        f"Backlog remaining: {backlog_units} units\n"
        f"Today's capacity: {capacity} units\n"
        "Suggested action: Review Logistics or use part-time staff to clear backlog."
    )
    msg, created = create_message_once(
        player_id=player_id,
        company_id=company_id,
        dedupe_key=f"BACKLOG_WARNING:{company_id}:{warehouse.id}:{day_str}",
        title="Backlog warning - capacity exceeded",
        body=body,
        level=backlog_warning_level(backlog_units, capacity),
        kind=KIND_ACTION,
        context={
            "building_id": warehouse.id,
            "day_key": day_str,
            "backlog_after": backlog_units,
            "capacity": capacity,
            "backlog_days_eq": backlog_days,
        },
    )
    return msg if created else None


def list_messages(*, player_id: int, limit: int = 100) -> list[PlayerMessage]:
    return (
        db.session.query(PlayerMessage)
        .filter(PlayerMessage.player_id == player_id)
        .order_by(PlayerMessage.id.desc())
        .limit(limit)
        .all()
    )
