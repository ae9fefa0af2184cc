"""Classification of failures raised by the vendor completion call.

Every exception caught around the vendor call ends up in one of two buckets:

* a *vendor error*: the SDK raised it on behalf of the remote API, so it
  carries an HTTP status and usually a structured error body;
* anything else (bugs, serialisation failures, errors raised before the SDK
  got involved).

The bucket is picked with a capability check on the error object (does it
carry an HTTP status?) rather than an ``isinstance`` test against one SDK's
hierarchy, so LiteLLM and bare OpenAI SDK errors are treated alike.  Errors
that never got a response (refused connections, timeouts) are not vendor
errors even when the SDK stamps a status on them.
"""

import json
import traceback
from typing import Any

import httpx
import openai

from chatrelay.providers.errors import ChatErrorType
from chatrelay.providers.models import StructuredErrorResponse


_TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    httpx.TransportError,
    openai.APIConnectionError,
)


def is_transport_failure(error: BaseException) -> bool:
    """Return ``True`` when no HTTP response was ever received for *error*.

    LiteLLM re-raises connection failures as errors carrying a made-up
    status (500 or 408), so the whole chain of causes and contexts is
    searched for the transport error underneath.
    """
    seen: set[int] = set()
    link: BaseException | None = error
    while link is not None and id(link) not in seen:
        if isinstance(link, _TRANSPORT_ERRORS):
            return True
        seen.add(id(link))
        link = link.__cause__ or link.__context__
    return False


def is_vendor_error(error: BaseException) -> bool:
    """Return ``True`` when *error* reports a response from the vendor API.

    The error must expose an HTTP ``status_code`` and must not stem from a
    transport failure.
    """
    return getattr(error, "status_code", None) is not None and not is_transport_failure(error)


def vendor_error_result(error: BaseException) -> Any:
    """Pick the most informative payload carried by a vendor error.

    Priority order:

    1. the structured error body returned by the vendor,
    2. the underlying cause explicitly attached to the error,
    3. a ``{headers, stack, status}`` snapshot taken from the error itself.
    """
    body = getattr(error, "body", None)
    if body is not None:
        return body

    cause = getattr(error, "cause", None) or error.__cause__
    if cause is not None:
        return cause

    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None)
    return {
        "headers": dict(headers) if headers is not None else None,
        "stack": "".join(traceback.format_exception(error)),
        "status": getattr(error, "status_code", None),
    }


def serialize_error(error: BaseException) -> str:
    """JSON-encode an arbitrary exception as ``{"name", "message"}``."""
    return json.dumps({"name": type(error).__name__, "message": str(error)})


def classify_error(error: BaseException, endpoint: str) -> StructuredErrorResponse:
    """Map an exception raised by the vendor call to a structured error.

    Args:
        error: Whatever the vendor call raised.
        endpoint: Base URL of the vendor the request was sent to.

    Returns:
        A ``VendorBusinessError`` carrying the best-effort error result for
        vendor errors, otherwise an ``InternalServerError`` carrying the
        JSON-serialised exception.
    """
    if is_vendor_error(error):
        return StructuredErrorResponse(
            error_type=ChatErrorType.VENDOR_BUSINESS_ERROR,
            metadata={"endpoint": endpoint, "error": vendor_error_result(error)},
        )

    return StructuredErrorResponse(
        error_type=ChatErrorType.INTERNAL_SERVER_ERROR,
        metadata={"endpoint": endpoint, "error": serialize_error(error)},
    )
