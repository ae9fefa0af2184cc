"""Chat-completion adapter over an OpenAI-compatible vendor API.

The adapter does one thing per call: sanitise the payload, apply the
downgrade policy, open a streaming completion through LiteLLM, and hand back
either a streaming text response or a structured error response.  It adds:

* Error classification (:mod:`chatrelay.providers.classify`) instead of
  propagating SDK exceptions
* OpenTelemetry spans using GenAI semantic conventions
* Structured logging via structlog

One attempt is made per call; retrying is left to the caller.
"""

import logging
from typing import Any

import litellm
import structlog
from fastapi.responses import Response
from opentelemetry import trace
from opentelemetry.trace import StatusCode

from chatrelay.providers.classify import classify_error
from chatrelay.providers.errors import ChatErrorType
from chatrelay.providers.models import ChatPayload, VendorClient
from chatrelay.providers.policy import ModelDowngradePolicy
from chatrelay.providers.responses import (
    StreamingTextResponse,
    create_error_response,
    stream_text,
)

# ---------------------------------------------------------------------------
# Module-level setup
# ---------------------------------------------------------------------------

# Quieten LiteLLM; this module emits its own structured logs.
logging.getLogger("LiteLLM").setLevel(logging.WARNING)

_log = structlog.get_logger(__name__)
_tracer = trace.get_tracer(__name__)

_REQUEST_HEADERS: dict[str, str] = {"Accept": "*/*"}

# OpenAI chat-completion body fields LiteLLM understands as keyword arguments.
# Every other caller-supplied field travels in ``extra_body`` so it can only
# reach the vendor's JSON body, never LiteLLM's routing or credential options.
_GENERATION_PARAMS: frozenset[str] = frozenset(
    {
        "audio",
        "frequency_penalty",
        "function_call",
        "functions",
        "logit_bias",
        "logprobs",
        "max_completion_tokens",
        "max_tokens",
        "modalities",
        "n",
        "parallel_tool_calls",
        "prediction",
        "presence_penalty",
        "reasoning_effort",
        "response_format",
        "seed",
        "service_tier",
        "stop",
        "store",
        "stream_options",
        "temperature",
        "tool_choice",
        "tools",
        "top_logprobs",
        "top_p",
        "user",
    }
)
_RESERVED_PARAMS: frozenset[str] = frozenset({"model", "messages", "stream"})


class ChatCompletionAdapter:
    """Translate a :class:`ChatPayload` into one streaming vendor call.

    Example::

        adapter = ChatCompletionAdapter(ModelDowngradePolicy(default_api_key="sk-..."))
        client = VendorClient(api_key="sk-...", base_url="https://api.openai.com/v1")
        payload = ChatPayload.from_dict(
            {"model": "gpt-4o", "messages": [{"role": "user", "content": "Hello"}]}
        )
        response = await adapter.invoke(payload, client)

    Args:
        policy: Downgrade policy holding the server's default credential.
        timeout: Per-request timeout in seconds passed to LiteLLM.
    """

    def __init__(self, policy: ModelDowngradePolicy, timeout: int = 60) -> None:
        self._policy = policy
        self._timeout = timeout

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def invoke(self, payload: ChatPayload, client: VendorClient) -> Response:
        """Send *payload* to the vendor and return the HTTP response to relay.

        Args:
            payload: Validated chat payload.  It is never modified.
            client: Credential and endpoint to call.

        Returns:
            A :class:`StreamingTextResponse` once the vendor accepted the
            request, otherwise the JSON error response built from
            :func:`~chatrelay.providers.classify.classify_error`.  Errors raised
            after streaming started are not caught here.
        """
        params = self.build_params(payload, client)

        with _tracer.start_as_current_span("chat.completion") as span:
            span.set_attribute("gen_ai.system", "openai")
            span.set_attribute("gen_ai.request.model", params["model"])
            span.set_attribute("chat.model_downgraded", params["model"] != payload.model)
            span.set_attribute("server.address", client.base_url)

            try:
                response = await litellm.acompletion(
                    api_key=client.api_key,
                    api_base=client.base_url,
                    custom_llm_provider="openai",
                    extra_headers=dict(_REQUEST_HEADERS),
                    timeout=self._timeout,
                    max_retries=0,
                    **params,
                )
            except Exception as exc:
                span.record_exception(exc)
                span.set_status(StatusCode.ERROR, str(exc))
                error = classify_error(exc, client.base_url)
                if error.error_type is ChatErrorType.VENDOR_BUSINESS_ERROR:
                    _log.error(
                        "chat_completion_error",
                        error_type=error.error_type.value,
                        endpoint=client.base_url,
                        error=error.metadata["error"],
                    )
                else:
                    _log.error(
                        "chat_completion_error",
                        error_type=error.error_type.value,
                        endpoint=client.base_url,
                        exc_info=exc,
                    )
                return create_error_response(error.error_type, error.metadata)

            return StreamingTextResponse(stream_text(response))

    def build_params(self, payload: ChatPayload, client: VendorClient) -> dict[str, Any]:
        """Build the keyword arguments for the vendor call.

        Messages are reduced to ``{content, name, role}`` and the downgrade
        policy is applied to a copy of the payload's params.  Known generation
        parameters become keyword arguments; anything else is forwarded in
        ``extra_body``.  Endpoint and credential only ever come from *client*.
        """
        messages = payload.sanitized_messages()
        params: dict[str, Any] = {
            "model": self._policy.resolve_model(payload.model, len(messages), client.api_key),
            "messages": [msg.to_dict() for msg in messages],
            "stream": True,
        }
        extra_body: dict[str, Any] = {}
        for key, value in payload.params.items():
            if key in _RESERVED_PARAMS:
                continue
            if key in _GENERATION_PARAMS:
                params[key] = value
            else:
                extra_body[key] = value
        if extra_body:
            params["extra_body"] = extra_body
        return params
