from flask import jsonify, request
from sqlalchemy.exc import IntegrityError

from .models import db

# Driver message fragments (SQLite, PostgreSQL, MySQL) -> violation kind
_INTEGRITY_MARKERS = (
    ("unique", ("unique constraint", "duplicate key", "duplicate entry")),
    ("foreign_key", ("foreign key constraint", "violates foreign key", "a foreign key constraint fails")),
    ("check", ("check constraint",)),
    ("not_null", ("not null constraint", "violates not-null", "cannot be null")),
)


def classify_integrity_error(exc):
    """Return which kind of constraint an IntegrityError violated."""
    message = str(getattr(exc, "orig", exc)).lower()
    for kind, markers in _INTEGRITY_MARKERS:
        if any(marker in message for marker in markers):
            return kind
    return "integrity"


def error_response(status, error, **extra):
    payload = {"error": error}
    payload.update(extra)
    return jsonify(payload), status


def register_error_handlers(app):
    @app.errorhandler(IntegrityError)
    def integrity_error(e):
        db.session.rollback()
        kind = classify_integrity_error(e)
        app.logger.warning("Integrity violation (%s) on %s %s", kind, request.method, request.path)
        return error_response(409, "integrity_error", kind=kind)

    @app.errorhandler(400)
    def bad_request(e):
        return error_response(400, "bad_request")

    @app.errorhandler(404)
    def not_found(e):
        return error_response(404, "not_found")

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response(405, "method_not_allowed")

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.exception("Internal server error: %s", e)
        db.session.rollback()
        return error_response(500, "internal_error")
