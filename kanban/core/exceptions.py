"""
Domain errors raised by the service layer.

Each error is an HTTPException carrying the standard
{"code": ..., "message": ...} detail body, so routers let them propagate.
"""

from __future__ import annotations

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Referenced task, project or user does not exist."""

    def __init__(self, code: str = "NOT_FOUND", message: str = "Resource not found") -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": code, "message": message},
        )


class InvalidArgumentError(HTTPException):
    """An argument is outside its allowed set."""

    def __init__(self, code: str = "INVALID_ARGUMENT", message: str = "Invalid argument") -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": code, "message": message},
        )


class ConflictError(HTTPException):
    """
    The transaction could not be committed because of a concurrent writer.

    Never retried internally; the caller decides whether to retry.
    """

    def __init__(
        self,
        code: str = "CONFLICT",
        message: str = "Concurrent modification, please retry",
    ) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": code, "message": message},
        )


# SQLSTATEs: serialization_failure, deadlock_detected, lock_not_available
_CONFLICT_SQLSTATES = {"40001", "40P01", "55P03"}


def is_conflict_error(exc: BaseException) -> bool:
    """Return True if a DBAPI error signals contention rather than a bug."""
    orig = getattr(exc, "orig", None)
    if orig is None:
        return False
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _CONFLICT_SQLSTATES:
        return True
    return "database is locked" in str(orig)
