"""HTTP response builders for the chat relay.

* :func:`stream_text` adapts a vendor chunk stream into plain text chunks.
* :class:`StreamingTextResponse` sends those chunks as they arrive.
* :func:`create_error_response` renders a structured error as JSON.
"""

import json
from collections.abc import AsyncGenerator, AsyncIterable
from typing import Any

from fastapi.responses import JSONResponse, StreamingResponse

from chatrelay.providers.errors import ChatErrorType

# ---------------------------------------------------------------------------
# HTTP status codes for each error kind
# ---------------------------------------------------------------------------
# 577 is a non-standard status reserved for failures reported by the vendor,
# keeping them distinguishable from failures of the relay itself.
_ERROR_STATUS: dict[ChatErrorType, int] = {
    ChatErrorType.VENDOR_BUSINESS_ERROR: 577,
    ChatErrorType.INTERNAL_SERVER_ERROR: 500,
    ChatErrorType.NO_API_KEY: 401,
    ChatErrorType.INVALID_REQUEST: 400,
}


# ---------------------------------------------------------------------------
# Streaming
# ---------------------------------------------------------------------------


async def stream_text(response: AsyncIterable[Any]) -> AsyncGenerator[str, None]:
    """Yield the text delta of every vendor chunk in arrival order.

    Chunks without text (role announcements, the final ``finish_reason``
    chunk, usage-only chunks) are skipped.
    """
    async for raw_chunk in response:
        choices = getattr(raw_chunk, "choices", None)
        if not choices:
            continue
        delta = getattr(choices[0], "delta", None)
        content = getattr(delta, "content", None) if delta is not None else None
        if content:
            yield content


class StreamingTextResponse(StreamingResponse):
    """A ``text/plain`` response whose body is written chunk by chunk."""

    media_type = "text/plain; charset=utf-8"

    def __init__(
        self,
        content: AsyncIterable[str],
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(content, status_code=status_code, headers=headers)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def _encode_unknown(obj: Any) -> Any:
    if isinstance(obj, BaseException):
        return {"name": type(obj).__name__, "message": str(obj)}
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    return str(obj)


class _LenientJSONResponse(JSONResponse):
    """JSONResponse that tolerates exceptions and other non-JSON values."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
            default=_encode_unknown,
        ).encode("utf-8")


def create_error_response(error_type: ChatErrorType, metadata: dict[str, Any]) -> JSONResponse:
    """Build the HTTP error response for *error_type*.

    The body has the shape ``{"errorType": ..., "body": metadata}``.
    """
    return _LenientJSONResponse(
        status_code=_ERROR_STATUS.get(error_type, 500),
        content={"errorType": error_type.value, "body": metadata},
    )
