"""Error taxonomy for catalog operations and its JSON rendering."""
import logging
from flask import jsonify
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)

MISSING_TABLE_CODES = {"42P01", "42703", "PGRST204", "PGRST205"}
MISSING_SCHEMA_MARKERS = ("no such table", "no such column", "does not exist")
UNIQUE_VIOLATION_CODES = {"23505", "SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}
# Older sqlite3 modules expose no error name
UNIQUE_VIOLATION_MARKERS = ("unique constraint", "duplicate key")

MIGRATION_HINT = "Run `flask db upgrade` to apply the latest migrations."


class CatalogError(Exception):
    status_code = 500
    message = "Unexpected error."

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {"error": self.message}


class ValidationError(CatalogError):
    """Malformed or inconsistent payload, reported per field."""

    status_code = 400
    message = "Invalid product details."

    def __init__(self, message=None, field_errors=None, form_errors=None, issues=None):
        super().__init__(message)
        self.field_errors = field_errors or {}
        self.form_errors = form_errors or []
        self.issues = issues
        if self.issues is None:
            self.issues = [
                {"path": [field], "message": msg}
                for field, messages in self.field_errors.items()
                for msg in messages
            ] + [{"path": [], "message": msg} for msg in self.form_errors]

    @classmethod
    def for_field(cls, field, message):
        return cls(message, field_errors={field: [message]})

    @classmethod
    def from_pydantic(cls, exc, message=None):
        field_errors = {}
        form_errors = []
        issues = []
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ())]
            msg = err.get("msg", "Invalid value")
            issues.append({"path": loc, "message": msg, "code": err.get("type")})
            if loc:
                field_errors.setdefault(loc[0], []).append(msg)
            else:
                form_errors.append(msg)
        return cls(message, field_errors, form_errors, issues)

    def to_dict(self):
        return {
            "error": self.message,
            "validation": {
                "field_errors": self.field_errors,
                "form_errors": self.form_errors,
                "issues": self.issues,
            },
        }


class InvalidSlug(ValidationError):
    message = "Invalid slug."

    def __init__(self, message=None):
        message = message or self.message
        super().__init__(message, field_errors={"slug": [message]})


class AuthorizationError(CatalogError):
    status_code = 403
    message = "Forbidden."


class NotFoundError(CatalogError):
    status_code = 404
    message = "Not found."


class ConflictError(CatalogError):
    status_code = 409
    message = "Slug or SKU already exists."


class SchemaDriftError(CatalogError):
    status_code = 500

    def __init__(self, table="products"):
        super().__init__(f"{table} table not found. {MIGRATION_HINT}")


class DependencyError(CatalogError):
    status_code = 500
    message = "Unable to update product relationships."


def _driver_code(exc):
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlite_errorname", None)


def _is_unique_violation(code, text):
    if code is not None:
        return code in UNIQUE_VIOLATION_CODES
    return any(m in text for m in UNIQUE_VIOLATION_MARKERS)


def translate_db_error(exc, message, table="products"):
    """Map a SQLAlchemy failure onto the catalog error taxonomy.

    The driver error is logged here; the returned error carries only a
    coarse message for the client.
    """
    code = _driver_code(exc)
    logger.error("%s (driver code=%s): %s", message, code, exc)

    text = str(getattr(exc, "orig", exc)).lower()
    if isinstance(exc, IntegrityError):
        if _is_unique_violation(code, text):
            return ConflictError()
        return DependencyError(message)
    if code in MISSING_TABLE_CODES or any(m in text for m in MISSING_SCHEMA_MARKERS):
        return SchemaDriftError(table)
    if isinstance(exc, SQLAlchemyError):
        return DependencyError(message)
    return CatalogError(message)


def register_error_handlers(app):
    @app.errorhandler(CatalogError)
    def handle_catalog_error(exc):
        if exc.status_code >= 500:
            app.logger.error("Request failed: %s", exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(404)
    def handle_not_found(exc):
        return jsonify({"error": "Not found."}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(exc):
        return jsonify({"error": "Method not allowed."}), 405
