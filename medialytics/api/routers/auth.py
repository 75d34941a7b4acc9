# medialytics/api/routers/auth.py
"""
Authentication API
==================

POST /auth/signup
    Create an operator account. 201 `{id, email}`; 409 on a duplicate email.

POST /auth/login
    Email + password sign-in. 200 `{token}` (1-hour session token).

Token-bearing responses are marked `Cache-Control: no-store`.
"""

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.api.http_utils import set_sensitive_cache
from medialytics.core.security import get_session_tokens
from medialytics.core.tokens import TokenService
from medialytics.db.session import get_async_db
from medialytics.schemas.auth import LoginRequest, SignupPayload, SignupResponse, TokenResponse
from medialytics.services.auth_service import login_user, signup_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ──────────────────────────────────────────────────────────────
# 📝 POST /auth/signup
# ──────────────────────────────────────────────────────────────
@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an operator",
)
async def signup(
    payload: SignupPayload = Body(...),
    db: AsyncSession = Depends(get_async_db),
) -> SignupResponse:
    return await signup_user(payload, db)


# ──────────────────────────────────────────────────────────────
# 🔐 POST /auth/login
# ──────────────────────────────────────────────────────────────
@router.post("/login", response_model=TokenResponse, summary="Email + password login")
async def login(
    response: Response,
    payload: LoginRequest = Body(...),
    db: AsyncSession = Depends(get_async_db),
    tokens: TokenService = Depends(get_session_tokens),
) -> TokenResponse:
    """Authenticate with email/password and return a session token."""
    # [Step 0] Cache hardening
    set_sensitive_cache(response)

    # [Step 1] Delegate to the service (401 on unknown email or bad password)
    return await login_user(payload, db, tokens)


__all__ = ["router", "signup", "login"]
