"""
Error taxonomy shared by services and routes.

Every error is an HTTPException so FastAPI renders it as
{"detail": ...} with the matching status code. Services raise these
directly; nothing downstream needs to translate them.
"""

from typing import Optional

from fastapi import HTTPException, status

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class Forbidden(HTTPException):
    def __init__(self, detail: str = "You are not allowed to perform this action"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(HTTPException):
    """409. `field` names the offending column(s) when a uniqueness rule failed."""

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
        self.field = field

    @classmethod
    def unique(cls, field: str) -> "Conflict":
        return cls(f"Field {field} must be unique.", field=field)


class ValidationError(HTTPException):
    def __init__(self, field: str, detail: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail or f"Invalid {field}",
        )
        self.field = field
