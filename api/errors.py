from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
import logging

from utils.exceptions import AuthError

logger = logging.getLogger(__name__)


def error_response(message: str, status: int):
    """Every failure uses the same body: {"error": "<message>"}."""
    return jsonify({"error": message}), status


def register_error_handlers(app):
    # Auth taxonomy: client errors carry their own status, server errors stay generic
    @app.errorhandler(AuthError)
    def handle_auth_error(err: AuthError):
        return error_response(err.message, err.status)

    # Marshmallow validation errors map to 400
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        fields = sorted(err.messages) if isinstance(err.messages, dict) else []
        if current_app and current_app.debug:
            logger.info("Validation error: %s", err.messages)
        message = "Invalid input: " + ", ".join(fields) if fields else "Invalid input"
        return error_response(message, 400)

    # Werkzeug HTTPExceptions (404, 405, malformed JSON, ...) map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.description or err.name, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        return error_response("An unexpected error occurred", 500)
