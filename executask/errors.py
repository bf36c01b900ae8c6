"""Domain error taxonomy for ExecuTask.

Every failure that can reach an HTTP caller is one of these. The API layer is the only
place that turns them into a response (see `executask.api.errors`).
"""

from typing import Dict, List, Optional

from pydantic import BaseModel


class FieldError(BaseModel):
    """A single field-level validation failure."""
    field: str
    error: str


class AppError(Exception):
    """Base exception for ExecuTask."""

    status: int = 500
    default_code: str = "INTERNAL_SERVER_ERROR"
    default_message: str = "Internal server error"
    headers: Optional[Dict[str, str]] = None

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        errors: Optional[List[FieldError]] = None,
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Uniform error envelope."""
        body = {
            "code": self.code,
            "message": self.message,
            "status": self.status,
        }
        if self.errors:
            body["errors"] = [e.model_dump() for e in self.errors]
        return body


class BadRequestError(AppError):
    """Validation or business-invariant failure."""
    status = 400
    default_code = "BAD_REQUEST"
    default_message = "Bad request"


class UnauthorizedError(AppError):
    status = 401
    default_code = "UNAUTHORIZED"
    default_message = "Not authenticated"
    headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenError(AppError):
    status = 403
    default_code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFoundError(AppError):
    """Entity missing or not owned by the principal (deliberately indistinguishable)."""
    status = 404
    default_code = "NOT_FOUND"
    default_message = "Resource not found"


class InternalServerError(AppError):
    status = 500
    default_code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"
