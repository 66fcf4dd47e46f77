"""
Application error kinds and the JSON error handlers registered on the app.

Services raise these; blueprints let them propagate so every route answers
with the same ``{"error": "..."}`` shape.
"""

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException, NotFound, RequestEntityTooLarge

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error carrying an HTTP status and a stable code."""

    def __init__(
        self, message: str, status_code: int = 500, code: str = "SERVER_ERROR"
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class ValidationError(AppError):
    """Malformed or missing client input. Never retried."""

    def __init__(self, message: str):
        super().__init__(message, 400, "VALIDATION_ERROR")


class NotFoundError(AppError):
    def __init__(self, message: str):
        super().__init__(message, 404, "NOT_FOUND")


class DatabaseError(AppError):
    """The backing store is unavailable; callers may retry later."""

    def __init__(self, message: str):
        super().__init__(message, 503, "DATABASE_ERROR")


class UnauthorizedError(AppError):
    def __init__(self, message: str):
        super().__init__(message, 401, "UNAUTHORIZED")


def register_error_handlers(app: Flask) -> None:
    """Attach JSON error handlers for application and HTTP errors."""

    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        if isinstance(err, DatabaseError):
            logger.error("Database error on %s %s: %s", request.method, request.path, err)
            return jsonify({"error": "Database service unavailable."}), 503
        if err.status_code >= 500:
            logger.error("Server error on %s %s: %s", request.method, request.path, err)
            return jsonify({"error": "Internal server error."}), err.status_code
        return jsonify({"error": err.message}), err.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(err: RequestEntityTooLarge):
        limit_mb = (app.config.get("MAX_CONTENT_LENGTH") or 0) // (1024 * 1024)
        return (
            jsonify({"error": f"File too large. Maximum size is {limit_mb}MB."}),
            400,
        )

    @app.errorhandler(NotFound)
    def handle_not_found(err: NotFound):
        return (
            jsonify({"error": f"Route {request.method} {request.path} not found."}),
            404,
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(err: HTTPException):
        return jsonify({"error": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error."}), 500
