"""Error taxonomy shared by the API, the auth layer and the repositories.

Every error a handler can produce is an `ApiError`. The FastAPI app registers a
single handler that renders them as `{"message": ..., "details": ...}` with the
error's status code, so routes just raise.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ApiError(Exception):
    status_code: int = 500
    default_message: str = "Server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(ApiError):
    """Missing or malformed input."""

    status_code = 400
    default_message = "Missing fields"


class ConflictError(ApiError):
    """Uniqueness violation (duplicate email)."""

    status_code = 400
    default_message = "Email already exists"


class NotFoundError(ApiError):
    # Unknown account on signin. Reported as 400, not 404.
    status_code = 400
    default_message = "User doesn't exist"


class AuthError(ApiError):
    status_code = 401
    default_message = "Invalid token"

    def __init__(self, message: Optional[str] = None, *, details: Optional[str] = None) -> None:
        super().__init__(message, details=details, headers={"WWW-Authenticate": "Bearer"})


class TokenExpired(AuthError):
    pass


class TokenInvalid(AuthError):
    pass


class InternalError(ApiError):
    """Unexpected store or signing failure."""

    status_code = 500
    default_message = "Server error"
