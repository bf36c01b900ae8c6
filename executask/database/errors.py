"""Translation of store-level failures into ExecuTask domain errors.

Repositories call `translate_db_error` after rolling back so that driver-specific
exceptions never travel above the data-access layer.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from executask.errors import AppError, BadRequestError, InternalServerError

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE codes for integrity violations
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"


def _sqlstate(exc: IntegrityError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _classify_integrity_error(exc: IntegrityError) -> str:
    code = _sqlstate(exc)
    if code:
        return {
            UNIQUE_VIOLATION: "unique",
            FOREIGN_KEY_VIOLATION: "foreign_key",
            NOT_NULL_VIOLATION: "not_null",
        }.get(code, "other")

    # SQLite reports the constraint kind only in the message text.
    message = str(getattr(exc, "orig", exc)).lower()
    if "unique constraint" in message:
        return "unique"
    if "foreign key constraint" in message:
        return "foreign_key"
    if "not null constraint" in message:
        return "not_null"
    return "other"


def translate_db_error(exc: Exception, entity: str) -> AppError:
    """Map a persistence exception to the closed set of domain errors.

    Args:
        exc: Exception raised by SQLAlchemy (or the driver beneath it)
        entity: Human-readable entity name used in the error message

    Returns:
        The AppError to raise in place of `exc`
    """
    if isinstance(exc, AppError):
        return exc

    if isinstance(exc, IntegrityError):
        kind = _classify_integrity_error(exc)
        if kind == "unique":
            return BadRequestError(f"{entity} already exists", code="ALREADY_EXISTS")
        if kind == "foreign_key":
            return BadRequestError(f"{entity} references a record that does not exist", code="INVALID_REFERENCE")
        if kind == "not_null":
            return BadRequestError(f"{entity} is missing a required field", code="MISSING_FIELD")

    if isinstance(exc, SQLAlchemyError):
        logger.error(f"Database error on {entity}: {type(exc).__name__}: {str(exc)}")
    else:
        logger.error(f"Unexpected error on {entity}: {type(exc).__name__}: {str(exc)}")
    return InternalServerError(f"Failed to persist {entity}")
