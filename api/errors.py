from flask import jsonify, current_app, request
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from utils.exceptions import APIError

logger = logging.getLogger(__name__)


def error_response(error: str, message: str, status: int, details: dict | None = None,
                   hint: str | None = None, headers: dict | None = None):
    payload = {"success": False, "error": error, "message": message, "status": status}
    if hint:
        payload["hint"] = hint
    if details:
        payload["details"] = details
    response = jsonify(payload)
    response.status_code = status
    for key, value in (headers or {}).items():
        response.headers[key] = value
    return response


def register_error_handlers(app):
    # Component-level failures carry their own kind, status and hint
    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        if err.status >= 500:
            logger.exception("Internal failure", exc_info=err)
        return error_response(err.error, err.message, err.status, details=err.details,
                              hint=err.hint, headers=err.headers())

    # 404 Not Found
    @app.errorhandler(404)
    def not_found(e):
        if request.path.startswith("/api/"):
            return error_response("NOT_FOUND", "API endpoint not found", 404, details={"path": request.path})
        return error_response("NOT_FOUND", "Resource not found", 404)

    # Marshmallow validation errors map to 400
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        if current_app and current_app.debug:
            logger.debug("Validation failed: %s", err.messages)
        return error_response("INVALID_INPUT", "All fields are required and must be valid", 400,
                              details=err.messages)

    # Integrity errors (unique constraints) surface as conflicts
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        if current_app and current_app.debug:
            logger.exception("Integrity error", exc_info=err)
        if "unique constraint" in lower_msg or "unique violation" in lower_msg:
            return error_response("CONFLICT", "Unique constraint violated.", 409)
        return error_response("BAD_REQUEST", "Integrity error.", 400)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.name.upper().replace(" ", "_"), err.description, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        # In dev, include exception details to speed up debugging
        details = None
        logger.exception("Unhandled exception", exc_info=err)
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
