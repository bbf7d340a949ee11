from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Date, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from warehouse_engine.time_utils import normalize_day_key


# Maximum price: $9,999,999.99 (999,999,999 cents)
MAX_PRICE_CENTS = 999_999_999


class EngineError(ValueError):
    """
    Base class for business-rule failures.

    `reason` is the machine-readable code returned to API clients next to
    the human message.
    """
    reason = "invalid_request"

    def __init__(self, message: str, reason: str | None = None):
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class ValidationError(EngineError):
    """400-level input problem."""
    reason = "validation_failed"


class NotFoundError(EngineError):
    """404-level: entity absent or not owned by the caller's company."""
    reason = "not_found"


class InsufficientFundsError(EngineError):
    """Wallet balance below the required cost. Nothing was charged."""
    reason = "insufficient_funds"


class ConflictError(EngineError):
    """409-level business rule conflict (e.g., listing bound to another warehouse)."""
    reason = "conflict"


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(key: str, value: Any) -> int:
    """Strict integer coercion: rejects floats, decimals, and scientific notation."""
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        if 'e' in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        if '.' in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    raise ValidationError(f"{key} must be an integer")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return coerce_int(col.key, value)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        return bool(value)

    if isinstance(coltype, Date):
        try:
            return normalize_day_key(value)
        except ValueError:
            raise ValidationError(f"{col.key} must be a YYYY-MM-DD date")

    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) is None)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def require_int(payload: dict, key: str, *, minimum: int | None = None) -> int:
    """Required integer field from a JSON payload or query dict."""
    if payload is None or payload.get(key) is None:
        raise ValidationError(f"{key} is required")
    value = coerce_int(key, payload.get(key))
    if minimum is not None and value < minimum:
        raise ValidationError(f"{key} must be >= {minimum}")
    return value


def optional_int(payload: dict, key: str, *, minimum: int | None = None) -> int | None:
    if payload is None or payload.get(key) is None:
        return None
    return require_int(payload, key, minimum=minimum)


def enforce_rules_price(key: str, price_cents: int | None, *, required: bool) -> None:
    if price_cents is None:
        if required:
            raise ValidationError(f"{key} is required")
        return
    if price_cents <= 0:
        raise ValidationError(f"{key} must be > 0")
    if price_cents > MAX_PRICE_CENTS:
        raise ValidationError(f"{key} cannot exceed {MAX_PRICE_CENTS} (${MAX_PRICE_CENTS / 100:,.2f})")


def enforce_rules_inventory_receive(quantity: int, unit_cost_cents: int) -> None:
    if quantity <= 0:
        raise ValidationError("quantity must be > 0 for PURCHASE")
    if unit_cost_cents < 0:
        raise ValidationError("unit_cost_cents must be >= 0")
    if unit_cost_cents > MAX_PRICE_CENTS:
        raise ValidationError(f"unit_cost_cents cannot exceed {MAX_PRICE_CENTS}")


def require_day_key(value, key: str = "day_key"):
    """Day key from API/CLI input; ValidationError instead of ValueError."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{key} is required")
    try:
        return normalize_day_key(value)
    except ValueError:
        raise ValidationError(f"{key} must be a YYYY-MM-DD date")
