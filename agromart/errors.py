from flask import jsonify
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.exceptions import HTTPException


class AppError(Exception):
    status_code = 400

    def __init__(self, message, status_code=None, details=None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        body = {"success": False, "error": self.message}
        if self.details:
            body["errors"] = self.details
        return body


class InvalidIdentifier(AppError):
    status_code = 400


class ValidationFailed(AppError):
    status_code = 400


class NotFound(AppError):
    status_code = 404


class Forbidden(AppError):
    status_code = 403


class Conflict(AppError):
    status_code = 409


class StorageFailure(AppError):
    status_code = 500

    def __init__(self, message="Server error"):
        super().__init__(message)


UNIQUE_VIOLATION_SQLSTATE = "23505"
CONSTRAINT_MESSAGE = "Request violates a data constraint."


def is_unique_violation(exc):
    """True when an IntegrityError comes from a unique key rather than a CHECK or FK."""
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    text = str(orig if orig is not None else exc).lower()
    return "unique" in text or "duplicate entry" in text


def _error(message, status_code):
    return jsonify({"success": False, "error": message}), status_code


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(err):
        if err.status_code >= 500:
            app.logger.error("Request failed: %s", err.message)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err):
        app.logger.warning("Database integrity error: %s", err.orig)
        if is_unique_violation(err):
            return _error("Conflict. Resource already exists.", 409)
        return _error(CONSTRAINT_MESSAGE, 400)

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(_err):
        app.logger.exception("Database error")
        return _error("Server error", 500)

    @app.errorhandler(400)
    def bad_request(_err):
        return _error("Bad request", 400)

    @app.errorhandler(401)
    def unauthorized(_err):
        return _error("Unauthorized", 401)

    @app.errorhandler(403)
    def forbidden(_err):
        return _error("Forbidden", 403)

    @app.errorhandler(404)
    def not_found(_err):
        return _error("Route not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_err):
        return _error("Method not allowed", 405)

    @app.errorhandler(413)
    def payload_too_large(_err):
        return _error("Uploaded file is too large.", 413)

    @app.errorhandler(429)
    def rate_limited(_err):
        return _error("Too many requests", 429)

    @app.errorhandler(500)
    def server_error(_err):
        app.logger.exception("Internal server error")
        return _error("Internal Server Error", 500)

    @app.errorhandler(Exception)
    def unhandled_error(err):
        if isinstance(err, HTTPException):
            return _error(err.description or err.name, err.code or 500)
        app.logger.exception("Unhandled error")
        return _error("Internal Server Error", 500)
