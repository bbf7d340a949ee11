# Overview: Flask API routes for wallet, ledger, and message reads; parses input and returns JSON responses.

"""
Wallet, ledger and player message read endpoints.

Balances and entries are written only by engine operations; there is no
write endpoint here.
"""
from flask import Blueprint, jsonify, request

from ..validation import EngineError, NotFoundError, optional_int, require_int
from .errors import engine_error_response, internal_error_response


ledger_bp = Blueprint("ledger", __name__, url_prefix="/api")


@ledger_bp.get("/wallet/<int:player_id>")
def get_wallet_route(player_id: int):
    from ..services.ledger_service import get_wallet

    try:
        wallet = get_wallet(player_id)
        if not wallet:
            raise NotFoundError(f"Wallet for player {player_id} not found")
        return jsonify({"wallet": wallet.to_dict()}), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to load wallet")


@ledger_bp.get("/ledger")
def list_ledger_route():
    from ..services.ledger_service import list_ledger_entries
    from ..services.warehouse_service import get_company

    try:
        company_id = require_int(request.args, "company_id", minimum=1)
        limit = min(optional_int(request.args, "limit", minimum=1) or 200, 1000)
        get_company(company_id)
        entries = list_ledger_entries(company_id=company_id, limit=limit)
        return jsonify({"entries": [e.to_dict() for e in entries]}), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to list ledger entries")


@ledger_bp.get("/messages/<int:player_id>")
def list_messages_route(player_id: int):
    from ..services.notification_service import list_messages

    try:
        limit = min(optional_int(request.args, "limit", minimum=1) or 100, 500)
        messages = list_messages(player_id=player_id, limit=limit)
        return jsonify({"messages": [m.to_dict() for m in messages]}), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to list messages")
