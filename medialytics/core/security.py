# medialytics/core/security.py
from __future__ import annotations

"""
Medialytics: Authentication & Security Helpers
===============================================
- bcrypt password hashing (passlib)
- Bearer parsing and session-token verification for route dependencies

Token signing/verification lives in `medialytics.core.tokens`; this module
only *uses* the `TokenService` instances hung on `app.state` at startup.

Status mapping
--------------
- no `Authorization` header, or a scheme other than `Bearer` → **401**
- token present but failing verification (signature, expiry, type) → **403**
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger
from passlib.context import CryptContext

from medialytics.core.exceptions import AuthInvalidException, AuthMissingException
from medialytics.core.tokens import TokenService, Valid
from medialytics.schemas.auth import SessionClaims

# ───────────────────────────────────────────────
# 🔐 Security Constants and Setup
# ───────────────────────────────────────────────
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
security = HTTPBearer(auto_error=False)


# ───────────────────────────────────────────────
# 🔐 Password Hashing Utilities
# ───────────────────────────────────────────────
def get_password_hash(password: str) -> str:
    """Return a salted hash using Passlib's bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time verify of a plaintext password against a stored hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Unknown/corrupt hash format
        return False


# ───────────────────────────────────────────────
# 🎟️ Token services (built once in create_app)
# ───────────────────────────────────────────────
def get_session_tokens(request: Request) -> TokenService:
    return request.app.state.session_tokens


def get_stream_tokens(request: Request) -> TokenService:
    return request.app.state.stream_tokens


# ───────────────────────────────────────────────
# 👤 Current operator
# ───────────────────────────────────────────────
async def get_current_operator(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_session_tokens),
) -> SessionClaims:
    """Resolve the operator identity from `Authorization: Bearer <token>`.

    Raises
    ------
    AuthMissingException
        401 when no bearer credential is presented.
    AuthInvalidException
        403 when the credential does not verify as a live session token.
    """
    if credentials is None or not credentials.credentials:
        raise AuthMissingException()

    result = tokens.verify(credentials.credentials)
    if not isinstance(result, Valid):
        logger.debug("[Auth] session token rejected | reason={}", result.reason)
        raise AuthInvalidException()

    user_id = result.payload.get("user_id")
    email = result.payload.get("email")
    if not user_id or not email:
        raise AuthInvalidException()
    return SessionClaims(user_id=str(user_id), email=str(email))


__all__ = [
    "pwd_context",
    "get_password_hash",
    "verify_password",
    "get_session_tokens",
    "get_stream_tokens",
    "get_current_operator",
]
