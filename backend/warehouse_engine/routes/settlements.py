# Overview: Flask API routes for settlement returns; parses input and returns JSON responses.

"""
Settlement routes.

Settlements are created by billing; this service only restocks their
returned units.
"""
from flask import Blueprint, jsonify, request

from ..validation import EngineError, optional_int
from .errors import engine_error_response, internal_error_response


settlements_bp = Blueprint("settlements", __name__, url_prefix="/api/settlements")


@settlements_bp.post("/<int:settlement_id>/apply-returns")
def apply_returns_route(settlement_id: int):
    payload = request.get_json(silent=True) or {}

    from ..services.returns_service import apply_returns

    try:
        result = apply_returns(settlement_id, company_id=optional_int(payload, "company_id", minimum=1))
        return jsonify(result.to_dict()), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to apply settlement returns")
