# Overview: Flask API routes for listing operations; parses input and returns JSON responses.

"""
Listing routes.

POST upserts the listing of an inventory item (create, or re-price and
re-activate). The band snapshot is only taken on create.
"""
from flask import Blueprint, jsonify, request

from ..models import Listing
from ..validation import (
    EngineError,
    ModelValidationPolicy,
    require_int,
    optional_int,
    validate_payload,
)
from .errors import engine_error_response, internal_error_response


listings_bp = Blueprint("listings", __name__, url_prefix="/api/listings")

LISTING_UPSERT_POLICY = ModelValidationPolicy(
    writable_fields={"company_id", "warehouse_id", "inventory_item_id", "sale_price_cents", "list_price_cents"},
    required_on_create={"company_id", "warehouse_id", "inventory_item_id", "sale_price_cents"},
)


@listings_bp.post("")
def upsert_listing_route():
    payload = request.get_json(silent=True) or {}

    from ..services.listing_service import upsert_listing

    try:
        patch = validate_payload(
            model=Listing,
            payload=payload,
            policy=LISTING_UPSERT_POLICY,
            partial=False,
        )
        listing = upsert_listing(
            company_id=patch["company_id"],
            warehouse_id=patch["warehouse_id"],
            inventory_item_id=patch["inventory_item_id"],
            sale_price_cents=patch["sale_price_cents"],
            list_price_cents=patch.get("list_price_cents"),
        )
        return jsonify({"listing": listing.to_dict()}), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to upsert listing")


@listings_bp.get("")
def list_listings_route():
    from ..services.listing_service import list_listings

    try:
        company_id = require_int(request.args, "company_id", minimum=1)
        warehouse_id = optional_int(request.args, "warehouse_id", minimum=1)
        listings = list_listings(
            company_id=company_id,
            warehouse_id=warehouse_id,
            status=(request.args.get("status") or "").strip().upper() or None,
        )
        return jsonify({"listings": [l.to_dict() for l in listings]}), 200
    except EngineError as e:
        return engine_error_response(e)
    except Exception:
        return internal_error_response("Failed to list listings")
