# medialytics/core/exceptions.py
from __future__ import annotations

"""
Medialytics: Application Exceptions
====================================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException` that
lets us attach structured metadata and integrate cleanly with the JSON error
shape rendered by `medialytics.core.exception_handlers`.

Taxonomy
--------
- `ValidationException`          400  malformed input
- `AuthMissingException`         401  no credential presented
- `InvalidCredentialsException`  401  login with unknown email / bad password
- `AuthInvalidException`         403  credential present but fails verification
- `NotFoundException`            404  referenced entity absent
- `ConflictException`            409  entity already exists
- `RateLimitedException`         429  quota exceeded
- `InternalErrorException`       500  store/signing failure (generic message)

Usage
-----
    raise NotFoundException("Media not found")
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "ValidationException",
    "AuthMissingException",
    "InvalidCredentialsException",
    "AuthInvalidException",
    "NotFoundException",
    "ConflictException",
    "RateLimitedException",
    "InternalErrorException",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code.
    message : str
        Human-readable error message (serialized as `detail` as well).
    code : int
        Optional internal/typed error code. Defaults to `status_code`.
    details : dict | list | str | None
        Machine-readable details (e.g., validation errors).
    headers : dict | None
        Optional headers (e.g., `{"WWW-Authenticate": "Bearer"}`).
    """

    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        code: Optional[int] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        status_code = int(status_code or self.default_status)
        message = message or self.default_message
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.details: Optional[Any] = details

    # ── [Helper] Canonical body used by handlers ───────────────────────────
    def to_problem(self, *, request_id: Optional[str] = None) -> Dict[str, Any]:
        """Return a dict matching our error JSON shape."""
        body: Dict[str, Any] = {
            "error": True,
            "message": self.message,
            "code": self.code,
            "request_id": request_id or "N/A",
        }
        if self.details is not None:
            body["details"] = self.details
        return body


# ──────────────────────────────────────────────────────────────
# 🧾 Input
# ──────────────────────────────────────────────────────────────
class ValidationException(AppException):
    """Malformed input: bad identifier, missing or ill-typed fields."""

    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


# ──────────────────────────────────────────────────────────────
# 🔑 Auth/Token exceptions
# ──────────────────────────────────────────────────────────────
class AuthMissingException(AppException):
    """No bearer credential was presented."""

    default_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized: No token provided"

    def __init__(self, message: Optional[str] = None, **kwargs: Any) -> None:
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, **kwargs)


class InvalidCredentialsException(AppException):
    default_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class AuthInvalidException(AppException):
    """A bearer credential was presented but failed verification."""

    default_status = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden: Invalid token"


# ──────────────────────────────────────────────────────────────
# 📚 Entities
# ──────────────────────────────────────────────────────────────
class NotFoundException(AppException):
    default_status = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictException(AppException):
    default_status = status.HTTP_409_CONFLICT
    default_message = "Already exists"


# ──────────────────────────────────────────────────────────────
# 🚦 Quota / server
# ──────────────────────────────────────────────────────────────
class RateLimitedException(AppException):
    """Quota exceeded; carries a `Retry-After` hint in seconds."""

    default_status = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests, please try again later."

    def __init__(self, message: Optional[str] = None, *, retry_after: int = 60, **kwargs: Any) -> None:
        headers = dict(kwargs.pop("headers", None) or {})
        headers.setdefault("Retry-After", str(max(0, int(retry_after))))
        super().__init__(message, headers=headers, **kwargs)
        self.retry_after = int(retry_after)


class InternalErrorException(AppException):
    """Store or signing failure. The message is always generic."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"
