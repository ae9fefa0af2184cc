"""POST /api/openai/chat endpoint.

Resolves the vendor credential for the request, validates the body into a
:class:`~chatrelay.providers.ChatPayload` and relays the adapter's response
unchanged.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request
from fastapi.responses import Response

from chatrelay.config import settings
from chatrelay.providers import (
    ChatCompletionAdapter,
    ChatErrorType,
    ChatPayload,
    InvalidRequestError,
    VendorClient,
    create_error_response,
)

router = APIRouter(prefix="/api/openai", tags=["chat"])

_log = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_adapter(request: Request) -> ChatCompletionAdapter:
    """Return the shared :class:`ChatCompletionAdapter` from ``app.state``."""
    adapter: ChatCompletionAdapter | None = getattr(request.app.state, "adapter", None)
    if adapter is None:
        raise HTTPException(status_code=503, detail="Adapter not initialised")
    return adapter


def get_vendor_client(
    x_openai_api_key: str | None = Header(default=None),
    x_openai_endpoint: str | None = Header(default=None),
) -> VendorClient | None:
    """Build the :class:`VendorClient` for this request.

    A caller-supplied key or endpoint wins over the server's configuration.
    Returns ``None`` when no credential is available from either side.
    """
    api_key = x_openai_api_key
    if not api_key and settings.openai_api_key is not None:
        api_key = settings.openai_api_key.get_secret_value()
    if not api_key:
        return None
    return VendorClient(api_key=api_key, base_url=x_openai_endpoint or settings.openai_base_url)


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------


@router.post("/chat", response_model=None)
async def chat(
    body: dict[str, Any] = Body(...),
    adapter: ChatCompletionAdapter = Depends(get_adapter),
    client: VendorClient | None = Depends(get_vendor_client),
) -> Response:
    """Stream a chat completion as plain text.

    Returns:
        The adapter's streaming text response, or a JSON error response with
        ``errorType`` ``NoAPIKey`` / ``InvalidRequest`` when the request never
        reaches the vendor.
    """
    if client is None:
        _log.warning("chat_request_rejected", reason="no_api_key")
        return create_error_response(ChatErrorType.NO_API_KEY, {"error": "No API key provided"})

    try:
        payload = ChatPayload.from_dict(body)
    except InvalidRequestError as exc:
        _log.warning("chat_request_rejected", reason="invalid_request", error=exc.message)
        return create_error_response(
            ChatErrorType.INVALID_REQUEST,
            {"endpoint": client.base_url, "error": exc.message},
        )

    return await adapter.invoke(payload, client)
