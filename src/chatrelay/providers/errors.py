"""Custom exception hierarchy and error kinds for the chat relay."""

from enum import Enum


class ChatErrorType(str, Enum):
    """Error kinds surfaced to HTTP callers in the ``errorType`` field."""

    VENDOR_BUSINESS_ERROR = "VendorBusinessError"
    INTERNAL_SERVER_ERROR = "InternalServerError"
    NO_API_KEY = "NoAPIKey"
    INVALID_REQUEST = "InvalidRequest"


class ChatRelayError(Exception):
    """Base exception for all chat relay errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(ChatRelayError):
    """Raised when a chat payload fails validation at construction time."""
