"""Tests for mapping database failures onto catalog errors."""
from sqlalchemy.exc import IntegrityError, OperationalError
from catalog_admin.errors import (
    ConflictError,
    DependencyError,
    SchemaDriftError,
    translate_db_error,
)


class DriverError(Exception):
    def __init__(self, text, pgcode=None, sqlite_errorname=None):
        super().__init__(text)
        self.pgcode = pgcode
        self.sqlite_errorname = sqlite_errorname


def _integrity(text, **codes):
    return IntegrityError("INSERT INTO products", {}, DriverError(text, **codes))


def test_unique_violation_is_conflict():
    exc = _integrity("duplicate key value", pgcode="23505")
    assert isinstance(translate_db_error(exc, "Unable to save product."), ConflictError)

    exc = _integrity(
        "UNIQUE constraint failed: products.slug", sqlite_errorname="SQLITE_CONSTRAINT_UNIQUE"
    )
    assert isinstance(translate_db_error(exc, "Unable to save product."), ConflictError)


def test_unique_violation_without_driver_code():
    exc = _integrity("UNIQUE constraint failed: products.sku")
    assert isinstance(translate_db_error(exc, "Unable to save product."), ConflictError)


def test_foreign_key_violation_is_dependency_error():
    exc = _integrity(
        "FOREIGN KEY constraint failed", sqlite_errorname="SQLITE_CONSTRAINT_FOREIGNKEY"
    )
    error = translate_db_error(exc, "Unable to update product relationships.")

    assert isinstance(error, DependencyError)
    assert error.status_code == 500


def test_check_violation_is_not_a_conflict():
    exc = _integrity("new row violates check constraint", pgcode="23514")
    assert not isinstance(translate_db_error(exc, "Unable to save product."), ConflictError)


def test_missing_table_is_schema_drift():
    exc = OperationalError("SELECT 1", {}, DriverError("no such table: products"))
    error = translate_db_error(exc, "Unable to load products.")

    assert isinstance(error, SchemaDriftError)
    assert "flask db upgrade" in error.message
