import logging
from flask import jsonify, g
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, message, status_code=400, code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


def json_error(message, status, code=None):
    """Enveloppe d'erreur commune: {success, data, error} (+ code si catégorisé)."""
    body = {"success": False, "data": None, "error": message}
    if code:
        body["code"] = code
    return jsonify(body), status


def _flatten_messages(messages, prefix=""):
    # {"title": ["Not a valid string."]} -> ["title: Not a valid string."]
    if isinstance(messages, dict):
        out = []
        for key, value in messages.items():
            label = f"{prefix}{key}" if key != "_schema" else prefix.rstrip(".")
            out.extend(_flatten_messages(value, f"{label}." if label else ""))
        return out
    if isinstance(messages, (list, tuple)):
        out = []
        for m in messages:
            out.extend(_flatten_messages(m, prefix))
        return out
    label = prefix.rstrip(".")
    return [f"{label}: {messages}" if label else str(messages)]


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        return json_error(e.message, e.status_code, e.code)

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        return json_error("; ".join(_flatten_messages(e.messages)), 400)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        # Ex: 404, 405, 413…
        return json_error(e.description or "HTTP error", e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception(
            "unhandled_exception",
            extra={"request_id": getattr(g, "request_id", "-")},
        )
        return json_error("Internal server error", 500)
