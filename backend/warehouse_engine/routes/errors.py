# Overview: Shared error mapping for Flask API routes; turns engine exceptions into JSON responses.

"""
Shared mapping from engine exceptions to JSON error responses.

Body is always {"error": <message>, "reason": <machine code>}.
InsufficientFundsError and ValidationError are both 400; the reason tells
them apart.
"""
from flask import current_app, jsonify

from ..validation import ConflictError, EngineError, NotFoundError


def engine_error_response(exc: EngineError):
    if isinstance(exc, NotFoundError):
        status = 404
    elif isinstance(exc, ConflictError):
        status = 409
    else:
        status = 400
    return jsonify({"error": str(exc), "reason": exc.reason}), status


def internal_error_response(message: str):
    """Log the active exception and hide its details from the client."""
    current_app.logger.exception(message)
    return jsonify({"error": "Internal server error", "reason": "internal_error"}), 500
