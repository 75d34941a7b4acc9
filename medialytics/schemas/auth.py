# medialytics/schemas/auth.py

from uuid import UUID

from pydantic import BaseModel, ConfigDict


# ──────────────── Sign Up / Login ────────────────
class SignupPayload(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    email: str
    password: str


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    email: str
    password: str


class SignupResponse(BaseModel):
    id: UUID
    email: str


class TokenResponse(BaseModel):
    token: str


# ──────────────── Token claims ────────────────
class SessionClaims(BaseModel):
    """Identity carried by a verified session token."""

    user_id: str
    email: str
