"""Vendor adapter layer.

Public surface area for the providers package.  Import from here rather than
from the individual submodules so internal structure can change freely.

Example::

    from chatrelay.providers import (
        ChatCompletionAdapter,
        ChatPayload,
        ModelDowngradePolicy,
        VendorClient,
    )

    adapter = ChatCompletionAdapter(ModelDowngradePolicy(default_api_key=None))
    response = await adapter.invoke(
        ChatPayload.from_dict({"model": "gpt-4o", "messages": [{"role": "user", "content": "Hi"}]}),
        VendorClient(api_key="sk-...", base_url="https://api.openai.com/v1"),
    )
"""

from chatrelay.providers.classify import classify_error, is_vendor_error
from chatrelay.providers.errors import ChatErrorType, ChatRelayError, InvalidRequestError
from chatrelay.providers.models import (
    ChatMessage,
    ChatPayload,
    StructuredErrorResponse,
    VendorClient,
)
from chatrelay.providers.openai_adapter import ChatCompletionAdapter
from chatrelay.providers.policy import ModelDowngradePolicy
from chatrelay.providers.responses import (
    StreamingTextResponse,
    create_error_response,
    stream_text,
)

__all__ = [
    # Models
    "ChatMessage",
    "ChatPayload",
    "VendorClient",
    "StructuredErrorResponse",
    # Adapter
    "ChatCompletionAdapter",
    "ModelDowngradePolicy",
    # Responses
    "StreamingTextResponse",
    "create_error_response",
    "stream_text",
    # Errors
    "ChatErrorType",
    "ChatRelayError",
    "InvalidRequestError",
    "classify_error",
    "is_vendor_error",
]
