# Overview: Flask API routes for warehouse simulation steps; parses input and returns JSON responses.

"""
Per-warehouse simulation routes.

All take company_id (body for POST, query string for GET) and reject
warehouses owned by another company with 404.

- POST /demand          take the day's orders
- POST /fulfill         ship backlog within the day's capacity
- POST /tick            demand + fulfillment + rewards for one day
- GET  /backlog-clear/preview, POST /backlog-clear   part-time staff
"""
from flask import Blueprint, jsonify, request

from ..validation import EngineError, require_int
from .errors import engine_error_response, internal_error_response


warehouses_bp = Blueprint("warehouses", __name__, url_prefix="/api/warehouses")


@warehouses_bp.post("/<int:warehouse_id>/demand")
def generate_demand_route(warehouse_id: int):
    payload = request.get_json(silent=True) or {}

    from ..services.demand_service import generate_daily_demand

    try:
        result = generate_daily_demand(
            company_id=require_int(payload, "company_id", minimum=1),
            warehouse_id=warehouse_id,
            day_key=payload.get("day_key"),
        )
        return jsonify(result.to_dict()), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to generate demand")


@warehouses_bp.post("/<int:warehouse_id>/fulfill")
def fulfill_route(warehouse_id: int):
    payload = request.get_json(silent=True) or {}

    from ..services.fulfillment_service import fulfill

    try:
        result = fulfill(
            company_id=require_int(payload, "company_id", minimum=1),
            warehouse_id=warehouse_id,
            day_key=payload.get("day_key"),
        )
        return jsonify(result.to_dict()), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to run fulfillment")


@warehouses_bp.post("/<int:warehouse_id>/tick")
def day_tick_route(warehouse_id: int):
    payload = request.get_json(silent=True) or {}

    from ..services.day_tick_service import run_warehouse_day_tick

    try:
        result = run_warehouse_day_tick(
            company_id=require_int(payload, "company_id", minimum=1),
            warehouse_id=warehouse_id,
            day_key=payload.get("day_key"),
        )
        return jsonify(result.to_dict()), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to run warehouse day tick")


@warehouses_bp.get("/<int:warehouse_id>/backlog-clear/preview")
def backlog_clear_preview_route(warehouse_id: int):
    """Read-only cost/effect of hiring staff_count part-time workers."""
    from ..services.backlog_service import preview_backlog_clear

    try:
        preview = preview_backlog_clear(
            company_id=require_int(request.args, "company_id", minimum=1),
            building_id=warehouse_id,
            staff_count=request.args.get("staff_count"),
        )
        return jsonify(preview.to_dict()), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to preview backlog clear")


@warehouses_bp.post("/<int:warehouse_id>/backlog-clear")
def backlog_clear_route(warehouse_id: int):
    """
    Pay part-time staff to clear backlog.

    Body: company_id, staff_count, optional idempotency_key. Replays return
    the original result with was_replay=true and charge nothing.
    """
    payload = request.get_json(silent=True) or {}

    from ..services.backlog_service import clear_backlog

    try:
        result = clear_backlog(
            company_id=require_int(payload, "company_id", minimum=1),
            building_id=warehouse_id,
            staff_count=payload.get("staff_count"),
            idempotency_key=payload.get("idempotency_key"),
        )
        return jsonify(result.to_dict()), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to clear backlog")
