# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

"""
Inventory routes.

- POST /receive books a purchased lot (idempotent per source_ref_id).
- GET /<item_id>/movements lists the audit trail of one inventory item.
"""
from flask import Blueprint, jsonify, request

from ..validation import EngineError, ValidationError, optional_int, require_int
from .errors import engine_error_response, internal_error_response


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.post("/receive")
def receive_stock_route():
    """
    Receive stock into a warehouse.

    Body: company_id, warehouse_id, product_template_id, quantity,
    unit_cost_cents, source_ref_id, optional day_key and charge_wallet.
    """
    payload = request.get_json(silent=True) or {}

    from ..services.inventory_service import receive_stock

    try:
        charge_wallet = payload.get("charge_wallet", True)
        if not isinstance(charge_wallet, bool):
            raise ValidationError("charge_wallet must be a boolean")
        result = receive_stock(
            company_id=require_int(payload, "company_id", minimum=1),
            warehouse_id=require_int(payload, "warehouse_id", minimum=1),
            product_template_id=require_int(payload, "product_template_id", minimum=1),
            quantity=require_int(payload, "quantity"),
            unit_cost_cents=require_int(payload, "unit_cost_cents"),
            source_ref_id=payload.get("source_ref_id"),
            day_key=payload.get("day_key"),
            charge_wallet=charge_wallet,
        )
        return jsonify(result.to_dict()), 200 if result.was_replay else 201
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to receive stock")


@inventory_bp.get("/<int:item_id>/movements")
def list_movements_route(item_id: int):
    from ..services.inventory_service import get_inventory_item_for_company, list_movements

    try:
        company_id = require_int(request.args, "company_id", minimum=1)
        limit = min(optional_int(request.args, "limit", minimum=1) or 200, 1000)
        item = get_inventory_item_for_company(company_id, item_id)
        movements = list_movements(inventory_item_id=item.id, limit=limit)
        return jsonify({
            "item": item.to_dict(),
            "movements": [m.to_dict() for m in movements],
        }), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to list movements")
