"""
Data-integrity exceptions, helpers, and FastAPI exception handlers.

Only the hosted backend enforces foreign keys and unique constraints
natively. The validation layer re-implements those guarantees in
application code and reports violations with the exceptions below,
identically for every storage mode.

Exception hierarchy:
    DataIntegrityError (base)
    ├── ReferentialIntegrityError  — FK value doesn't resolve to a live,
    │                                same-tenant record
    ├── ConstraintViolationError   — unique-scope collision
    └── CascadeDeleteError         — non-cascading delete with live dependents

Backend errors (a failed HTTP call, a driver error) are never wrapped in
these types. They propagate as-is, so callers can tell "the data is
invalid" apart from "the store is unreachable" by type alone.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class DataIntegrityError(Exception):
    """Base exception for all validation-layer integrity errors."""

    def __init__(self, detail: str = "A data integrity error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Integrity exceptions
# ---------------------------------------------------------------------------

class ReferentialIntegrityError(DataIntegrityError):
    """
    Raised when a foreign-key value does not resolve to a live record.

    Attributes:
        table: The entity being written.
        field: The foreign-key field that failed.
        value: The referenced id.
        referenced_table: The entity the field points at.
    """

    def __init__(self, table: str, field: str, value: Any, referenced_table: str):
        self.table = table
        self.field = field
        self.value = value
        self.referenced_table = referenced_table
        super().__init__(
            f"Foreign key constraint violation: {table}.{field} = '{value}' "
            f"does not exist in {referenced_table}"
        )


class ConstraintViolationError(DataIntegrityError):
    """
    Raised when a write would duplicate a unique scope.

    Attributes:
        constraint: Name of the violated unique constraint.
        table: The entity being written.
    """

    def __init__(self, message: str, constraint: str, table: str):
        self.constraint = constraint
        self.table = table
        super().__init__(message)


class CascadeDeleteError(DataIntegrityError):
    """
    Raised when a non-cascading delete would orphan live dependents.

    Attributes:
        table: The entity being deleted.
        id: The record being deleted.
        dependent_table: The first entity holding live references.
        dependent_count: How many live records reference it there.
    """

    def __init__(self, table: str, id: str, dependent_table: str, dependent_count: int):
        self.table = table
        self.id = id
        self.dependent_table = dependent_table
        self.dependent_count = dependent_count
        super().__init__(
            f"Cannot delete {table} '{id}': {dependent_count} dependent records "
            f"exist in {dependent_table}"
        )


class RecordNotFoundError(Exception):
    """
    Raised by CRUD code when the record to update or delete is not live.

    Not part of the integrity hierarchy: it describes the request, not the
    data it would write.
    """

    def __init__(self, table: str, id: str):
        self.table = table
        self.id = id
        self.detail = f"{table} record '{id}' not found"
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Helpers for presentation layers
# ---------------------------------------------------------------------------

def is_referential_integrity_error(error: BaseException | None) -> bool:
    return isinstance(error, ReferentialIntegrityError)


def is_constraint_violation_error(error: BaseException | None) -> bool:
    return isinstance(error, ConstraintViolationError)


def is_cascade_delete_error(error: BaseException | None) -> bool:
    return isinstance(error, CascadeDeleteError)


def get_user_friendly_message(error: BaseException | None) -> str:
    """Map an error to a message suitable for showing to an end user."""
    if is_referential_integrity_error(error):
        return "The referenced record does not exist or has been deleted."
    if is_constraint_violation_error(error):
        return error.detail or "A constraint violation occurred."
    if is_cascade_delete_error(error):
        return "Cannot delete this record because it is being used by other records."
    if error is not None and str(error):
        return str(error)
    return "An unknown validation error occurred."


_DETAIL_ATTRIBUTES = (
    "table",
    "field",
    "value",
    "constraint",
    "referenced_table",
    "dependent_table",
    "dependent_count",
)


def get_detailed_error_info(error: BaseException | None) -> dict:
    """
    Describe an error for debugging: its type, message, and every
    integrity attribute it carries (None where absent).
    """
    return {
        "type": type(error).__name__ if error is not None else "UnknownError",
        "message": str(error) if error is not None and str(error) else "Unknown error",
        "details": {name: getattr(error, name, None) for name in _DETAIL_ATTRIBUTES},
    }


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register handlers that turn integrity errors into JSON responses.

    Every response has the shape {"detail", "error_type", ...attributes}.
    Backend errors are left to FastAPI's default 500 handling.
    """

    @app.exception_handler(ReferentialIntegrityError)
    async def referential_integrity_handler(
        request: Request, exc: ReferentialIntegrityError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "detail": exc.detail,
                "error_type": "referential_integrity",
                "table": exc.table,
                "field": exc.field,
                "value": exc.value,
                "referenced_table": exc.referenced_table,
            },
        )

    @app.exception_handler(ConstraintViolationError)
    async def constraint_violation_handler(
        request: Request, exc: ConstraintViolationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={
                "detail": exc.detail,
                "error_type": "constraint_violation",
                "constraint": exc.constraint,
                "table": exc.table,
            },
        )

    @app.exception_handler(RecordNotFoundError)
    async def record_not_found_handler(
        request: Request, exc: RecordNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"detail": exc.detail, "error_type": "record_not_found"},
        )

    @app.exception_handler(CascadeDeleteError)
    async def cascade_delete_handler(
        request: Request, exc: CascadeDeleteError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={
                "detail": exc.detail,
                "error_type": "cascade_delete",
                "table": exc.table,
                "id": exc.id,
                "dependent_table": exc.dependent_table,
                "dependent_count": exc.dependent_count,
            },
        )
