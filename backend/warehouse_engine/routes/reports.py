# Overview: Flask API routes for diagnostic reports; parses input and returns JSON responses.

"""
Diagnostic reports.

demand-debug explains, per listing, why the day's demand came out the way
it did (band, price index, season score, blocks).
"""
from flask import Blueprint, jsonify, request

from ..validation import EngineError, optional_int, require_int
from .errors import engine_error_response, internal_error_response


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/demand-debug")
def demand_debug_route():
    from ..services.reporting_service import get_demand_debug_report

    try:
        rows = get_demand_debug_report(
            company_id=require_int(request.args, "company_id", minimum=1),
            day_key=request.args.get("day_key"),
            warehouse_id=optional_int(request.args, "warehouse_id", minimum=1),
        )
        return jsonify({"rows": rows, "count": len(rows)}), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to build demand debug report")
