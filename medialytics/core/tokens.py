# medialytics/core/tokens.py
from __future__ import annotations

"""
Medialytics: Signed, time-limited tokens (python-jose)
======================================================
Two classes of self-contained JWTs, each signed with its **own** secret:

- **Session tokens** (`typ="session"`, 1 hour): `{user_id, email}`
- **Stream tokens**  (`typ="stream"`, 10 minutes): `{media_id, file_url}`

Nothing is persisted: a token exists only as its signed payload.

Validity window
---------------
A token is valid for `iat <= now < exp`. Expiry is checked here rather than
by python-jose (which still accepts a token at exactly `exp`).

Verification never raises. `verify()` returns a tagged result:

    result = tokens.verify(raw)
    if isinstance(result, Valid):
        result.payload["media_id"]
    else:
        result.reason   # "malformed" | "signature" | "expired" | ...
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Union

from jose import JWTError, jwt
from jose.exceptions import JWSSignatureError

from medialytics.core.config import Settings

# ─────────────────────────────────────────────────────────────
# 🔐 Policy constants
# ─────────────────────────────────────────────────────────────
SESSION_TOKEN_TTL_SECONDS = 60 * 60
STREAM_TOKEN_TTL_SECONDS = 10 * 60

SESSION_TOKEN_TYPE = "session"
STREAM_TOKEN_TYPE = "stream"

# Claims owned by the service; callers cannot override them via payload.
_RESERVED_CLAIMS = ("iat", "exp", "typ")


# ─────────────────────────────────────────────────────────────
# 🏷️ Tagged verification result
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Valid:
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def issued_at(self) -> int:
        return int(self.payload["iat"])

    @property
    def expires_at(self) -> int:
        return int(self.payload["exp"])


@dataclass(frozen=True)
class Invalid:
    reason: str


VerifyResult = Union[Valid, Invalid]


# ─────────────────────────────────────────────────────────────
# 🎟️ Token service
# ─────────────────────────────────────────────────────────────
class TokenService:
    """Issue and verify one class of signed, time-limited tokens.

    Parameters
    ----------
    secret : str
        HMAC signing secret. Passed in explicitly; never read from globals.
    ttl_seconds : int
        Lifetime added to `iat` to produce `exp`.
    token_type : str
        Value of the `typ` claim; tokens of another type are rejected.
    clock : callable
        Returns current epoch seconds. Injectable for tests.
    """

    def __init__(
        self,
        secret: str,
        *,
        ttl_seconds: int,
        token_type: str,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        if ttl_seconds <= 0:
            raise ValueError("Token TTL must be positive")
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock
        self.ttl_seconds = int(ttl_seconds)
        self.token_type = token_type

    def issue(self, payload: Mapping[str, Any]) -> str:
        """Sign `payload` plus `iat`/`exp`/`typ` and return the compact JWT."""
        now = int(self._clock())
        claims: Dict[str, Any] = {k: v for k, v in payload.items() if k not in _RESERVED_CLAIMS}
        claims.update({"iat": now, "exp": now + self.ttl_seconds, "typ": self.token_type})
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> VerifyResult:
        """Check signature, type and validity window. Never raises."""
        if not token or not isinstance(token, str):
            return Invalid("malformed")
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_iat": False, "verify_nbf": False, "verify_aud": False},
            )
        except JWSSignatureError:
            return Invalid("signature")
        except JWTError as e:
            # python-jose reports a bad signature as a plain JWTError too
            if "signature" in str(e).lower():
                return Invalid("signature")
            return Invalid("malformed")
        except Exception:
            return Invalid("malformed")

        try:
            iat = int(claims["iat"])
            exp = int(claims["exp"])
        except (KeyError, TypeError, ValueError):
            return Invalid("malformed")

        if claims.get("typ") != self.token_type:
            return Invalid("wrong_type")

        now = self._clock()
        if now < iat:
            return Invalid("not_yet_valid")
        if now >= exp:
            return Invalid("expired")
        return Valid(claims)


# ─────────────────────────────────────────────────────────────
# 🏭 Builders (secrets come from settings, loaded once at startup)
# ─────────────────────────────────────────────────────────────
def build_session_token_service(cfg: Settings, *, clock: Callable[[], float] = time.time) -> TokenService:
    return TokenService(
        cfg.JWT_SECRET_KEY.get_secret_value(),
        ttl_seconds=SESSION_TOKEN_TTL_SECONDS,
        token_type=SESSION_TOKEN_TYPE,
        algorithm=cfg.JWT_ALGORITHM,
        clock=clock,
    )


def build_stream_token_service(cfg: Settings, *, clock: Callable[[], float] = time.time) -> TokenService:
    return TokenService(
        cfg.STREAM_TOKEN_SECRET.get_secret_value(),
        ttl_seconds=STREAM_TOKEN_TTL_SECONDS,
        token_type=STREAM_TOKEN_TYPE,
        algorithm=cfg.JWT_ALGORITHM,
        clock=clock,
    )


__all__ = [
    "SESSION_TOKEN_TTL_SECONDS",
    "STREAM_TOKEN_TTL_SECONDS",
    "TokenService",
    "Valid",
    "Invalid",
    "VerifyResult",
    "build_session_token_service",
    "build_stream_token_service",
]
