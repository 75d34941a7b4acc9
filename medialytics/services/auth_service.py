"""
Auth service
============
Signup and login for operator accounts.

Key behaviors
-------------
- **Normalized email** (trimmed, lowercase) and a light format check (**400**).
- **bcrypt** hashing via passlib; plaintext passwords are never stored.
- **Race-safe** duplicate handling: fast pre-check plus `IntegrityError`
  recovery, both mapped to **409**.
- Login answers **401 Invalid credentials** for an unknown email and for a
  wrong password alike, then issues a 1-hour session token.
"""

import re

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.core.exceptions import (
    ConflictException,
    InternalErrorException,
    InvalidCredentialsException,
    ValidationException,
)
from medialytics.core.security import get_password_hash, verify_password
from medialytics.core.tokens import TokenService
from medialytics.repositories.user import get_user_repository
from medialytics.schemas.auth import LoginRequest, SignupPayload, SignupResponse, TokenResponse

# ─────────────────────────────────────────────────────────────
# 🔧 Helpers
# ─────────────────────────────────────────────────────────────
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]{2,}$")


def _norm_email(email: str) -> str:
    return (email or "").strip().lower()


def _is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def _require_fields(email: str, password: str) -> None:
    if not email or not password:
        raise ValidationException("Email and password are required")


# ─────────────────────────────────────────────────────────────
# 📝 Sign up
# ─────────────────────────────────────────────────────────────
async def signup_user(payload: SignupPayload, db: AsyncSession) -> SignupResponse:
    """Create an operator account.

    Steps
    -----
    1) Normalize and require email/password (400).
    2) Validate email format (400).
    3) Fast duplicate check (409).
    4) Hash and insert; a concurrent duplicate trips the UNIQUE index (409).
    """
    email = _norm_email(payload.email)
    _require_fields(email, payload.password)
    if not _is_valid_email(email):
        raise ValidationException("Invalid email format")

    users = get_user_repository(db)
    try:
        existing = await users.get_by_email(email)
    except SQLAlchemyError:
        logger.exception("[Auth] signup lookup failed")
        raise InternalErrorException()
    if existing is not None:
        raise ConflictException("User already exists")

    try:
        user = await users.create(email=email, hashed_password=get_password_hash(payload.password))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("[Auth] signup duplicate (race) | email_domain={}", email.split("@")[-1])
        raise ConflictException("User already exists")
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("[Auth] signup insert failed")
        raise InternalErrorException()

    logger.info("[Auth] signup | user_id={}", user.id)
    return SignupResponse(id=user.id, email=user.email)


# ─────────────────────────────────────────────────────────────
# 🔑 Log in
# ─────────────────────────────────────────────────────────────
async def login_user(payload: LoginRequest, db: AsyncSession, tokens: TokenService) -> TokenResponse:
    email = _norm_email(payload.email)
    _require_fields(email, payload.password)

    try:
        user = await get_user_repository(db).get_by_email(email)
    except SQLAlchemyError:
        logger.exception("[Auth] login lookup failed")
        raise InternalErrorException()

    if user is None or not verify_password(payload.password, user.hashed_password):
        logger.info("[Auth] login failed | email_domain={}", email.split("@")[-1])
        raise InvalidCredentialsException()

    token = tokens.issue({"user_id": str(user.id), "email": user.email})
    logger.info("[Auth] login | user_id={}", user.id)
    return TokenResponse(token=token)


__all__ = ["signup_user", "login_user"]
