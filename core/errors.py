# core/errors.py

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from core.logging_config import logger
from core.policy import Decision, DenyReason


# -----------------------------------------------------
# Deny reason → HTTP status
# -----------------------------------------------------
DENY_STATUS = {
    DenyReason.unauthenticated: 401,
    DenyReason.insufficient_role: 403,
    DenyReason.not_owner: 403,
    DenyReason.admin_immutable: 403,
    DenyReason.self_action: 403,
}


def unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def http_error_for(decision: Decision) -> HTTPException:
    """
    Convert a denied policy decision into the HTTPException to raise.
    """
    if decision.allowed:
        raise ValueError("Cannot build an error from an allowing decision")

    status_code = DENY_STATUS[decision.reason]
    if status_code == 401:
        return unauthorized(decision.detail or "Unauthorized")

    return HTTPException(status_code=status_code, detail=decision.detail or "Forbidden")


def extract_db_error(error: Exception) -> str:
    """
    Readable details from SQLAlchemy / DBAPI errors.
    """
    orig = getattr(error, "orig", None)
    if orig is not None:
        return str(orig)
    try:
        return str(error)
    except Exception:
        return "Unknown database error"


def handle_db_error(error: Exception, operation: str = "Database operation", status_code: int = 500) -> HTTPException:
    """
    Handle database errors with consistent formatting.
    Returns HTTPException (doesn't raise) so caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: Description of what operation failed (e.g., "Failed to create order")
        status_code: HTTP status code for anything not recognised (default 500)
    """
    error_detail = extract_db_error(error)
    logger.error(f"{operation}: {error_detail}")

    error_lower = error_detail.lower()
    if isinstance(error, IntegrityError) and ("unique" in error_lower or "duplicate" in error_lower):
        return HTTPException(status_code=409, detail=f"{operation}: Record already exists")
    elif "foreign key" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Invalid reference")
    else:
        return HTTPException(status_code=status_code, detail=f"{operation} failed")
