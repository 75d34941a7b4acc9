from __future__ import annotations

"""
HTTP helpers shared by routers and the rate limiter.

- `get_client_ip`       best-effort client address (forwarded headers opt-in)
- `set_sensitive_cache` mark token-bearing responses as non-cacheable
"""

import ipaddress
from typing import Optional

from fastapi import Request, Response

from medialytics.core.config import Settings, settings


def _parse_ip(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    candidate = value.strip()
    try:
        return str(ipaddress.ip_address(candidate))
    except ValueError:
        return None


def _app_settings(request: Request) -> Settings:
    """Settings the serving app was built with; process settings otherwise."""
    app = request.scope.get("app")
    return getattr(getattr(app, "state", None), "settings", None) or settings


def get_client_ip(request: Request) -> str:
    """Determine the best-guess client IP for logging and rate limiting.

    Trust behavior (opt-in)
    -----------------------
    • By default, uses the socket peer address.
    • If ``TRUST_FORWARD_HEADERS`` is enabled on the app's settings, consults (in order):
        1) ``X-Real-Ip``
        2) ``X-Forwarded-For`` (first IP)

    Returns
    -------
    str
        The best-effort client IP, the raw peer host when it is not an IP
        literal (e.g. ``testclient``), or ``"unknown"``.
    """
    peer = request.client.host if request.client and request.client.host else None

    if _app_settings(request).TRUST_FORWARD_HEADERS:
        ip = _parse_ip(request.headers.get("x-real-ip"))
        if ip:
            return ip
        xff = request.headers.get("x-forwarded-for")
        if xff:
            ip = _parse_ip(xff.split(",")[0])
            if ip:
                return ip

    return _parse_ip(peer) or peer or "unknown"


def set_sensitive_cache(response: Response) -> None:
    """Mark a response as sensitive: never stored by browsers or proxies."""
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"


__all__ = ["get_client_ip", "set_sensitive_cache"]
