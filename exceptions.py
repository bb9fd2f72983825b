"""Error types raised by the store, the validator and the auth helpers.

Each error carries the HTTP status it maps to; ``main.py`` renders them
with ``to_dict()``.
"""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base application error."""

    status_code = 500
    code = "APP_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class ValidationError(AppError):
    """Client-supplied fields failed one or more constraints."""

    status_code = 422
    code = "VALIDATION_ERROR"

    def __init__(self, errors: List[Dict[str, str]], message: str = "Invalid user data"):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["errors"] = self.errors
        return result


class InvalidInput(AppError):
    status_code = 400
    code = "INVALID_INPUT"


class Conflict(AppError):
    status_code = 409
    code = "CONFLICT"


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"


class Unauthorized(AppError):
    status_code = 401
    code = "UNAUTHORIZED"


class Forbidden(AppError):
    status_code = 403
    code = "FORBIDDEN"


class StorageFault(AppError):
    """Unexpected persistence failure.

    The message shown to clients is always generic; the underlying
    exception is logged where it is caught.
    """

    status_code = 500
    code = "STORAGE_FAULT"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
