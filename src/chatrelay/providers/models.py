"""Request-scoped value objects for the chat relay.

Nothing here outlives a single request.  Payloads are validated at
construction time so callers get a fast, explicit error rather than a
cryptic vendor-side rejection.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from chatrelay.providers.errors import ChatErrorType, InvalidRequestError


@dataclass(frozen=True)
class ChatMessage:
    """A message reduced to the fields the vendor API understands.

    Extension fields added by chat front-ends (``plugins``, ``files``, ...)
    are dropped by :meth:`from_raw`.
    """

    content: Any
    role: str
    name: str | None = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "ChatMessage":
        return cls(content=raw.get("content"), role=raw.get("role"), name=raw.get("name"))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"content": self.content, "role": self.role}
        # An unset name is left off the wire rather than sent as null.
        if self.name is not None:
            data["name"] = self.name
        return data


@dataclass(frozen=True)
class ChatPayload:
    """A normalised chat-completion request.

    Args:
        messages: Conversation history in order.  Each mapping must contain
            ``"role"`` and ``"content"``; any other keys are carried along
            and stripped by :meth:`sanitized_messages`.
        params: Every other generation parameter (``model``, ``temperature``,
            ``top_p``, ...), forwarded to the vendor as-is.

    Raises:
        InvalidRequestError: If ``params["model"]`` is missing or blank, or a
            message is not an object, lacks a required key or has a blank role.
    """

    messages: Sequence[Mapping[str, Any]]
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        model = self.params.get("model")
        if not isinstance(model, str) or not model.strip():
            raise InvalidRequestError("model must be a non-empty string")

        for i, msg in enumerate(self.messages):
            if not isinstance(msg, Mapping):
                raise InvalidRequestError(f"messages[{i}] must be an object")
            if "role" not in msg or "content" not in msg:
                raise InvalidRequestError(
                    f"messages[{i}] must contain both 'role' and 'content' keys"
                )
            # Roles are open-ended (e.g. "developer"); only the type is checked.
            role = msg["role"]
            if not isinstance(role, str) or not role.strip():
                raise InvalidRequestError(f"messages[{i}] role must be a non-empty string")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatPayload":
        """Split a flat request body into messages and generation params."""
        params = {key: value for key, value in data.items() if key != "messages"}
        messages = data.get("messages") or []
        if not isinstance(messages, list):
            raise InvalidRequestError("messages must be a list")
        return cls(messages=list(messages), params=params)

    @property
    def model(self) -> str:
        return self.params["model"]

    def sanitized_messages(self) -> list[ChatMessage]:
        return [ChatMessage.from_raw(msg) for msg in self.messages]


@dataclass(frozen=True)
class VendorClient:
    """Credentials and endpoint used for one vendor call.

    Attributes:
        api_key: Bearer credential sent to the vendor.
        base_url: Vendor API base URL, e.g. ``https://api.openai.com/v1``.
    """

    api_key: str
    base_url: str

    def __repr__(self) -> str:
        return f"VendorClient(api_key='***', base_url={self.base_url!r})"


@dataclass(frozen=True)
class StructuredErrorResponse:
    """Terminal error returned to the caller instead of a stream.

    Attributes:
        error_type: Error kind, serialised as ``errorType``.
        metadata: ``{"endpoint": <vendor base URL>, "error": <error result>}``.
    """

    error_type: ChatErrorType
    metadata: dict[str, Any]
