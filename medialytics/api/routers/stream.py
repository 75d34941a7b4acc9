# medialytics/api/routers/stream.py
"""
GET /stream/{token}
    Redeem a stream link. Plaintext 200 naming the bound file while the token
    is valid (any number of times); plaintext 403 once it is invalid or
    expired.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse

from medialytics.api.deps import get_stream_redeemer
from medialytics.services.stream_service import StreamLinkService

router = APIRouter(prefix="/stream", tags=["Stream"])

FORBIDDEN_STREAM_MESSAGE = "Forbidden: Invalid or expired stream link."


@router.get("/{token}", response_class=PlainTextResponse, summary="Redeem a stream link")
async def redeem_stream(
    token: str,
    streams: StreamLinkService = Depends(get_stream_redeemer),
) -> PlainTextResponse:
    file_url = streams.redeem(token)
    if file_url is None:
        return PlainTextResponse(FORBIDDEN_STREAM_MESSAGE, status_code=status.HTTP_403_FORBIDDEN)
    return PlainTextResponse(f"Access granted to stream file: {file_url}")


__all__ = ["router", "redeem_stream", "FORBIDDEN_STREAM_MESSAGE"]
