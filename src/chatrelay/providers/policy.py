"""Model downgrade policy for requests made with the shared server credential."""

from dataclasses import dataclass

DEFAULT_PREMIUM_PREFIX = "gpt-4"
DEFAULT_FALLBACK_MODEL = "gpt-3.5-turbo-16k"
DEFAULT_MESSAGE_THRESHOLD = 2


@dataclass(frozen=True)
class ModelDowngradePolicy:
    """Swap premium models for a cheaper one when the shared key is in use.

    Callers that bring their own credential are never affected; the rule only
    caps what longer conversations can cost on the server's own key.

    Args:
        default_api_key: The server's configured credential, or ``None`` when
            the server has none (the policy then never fires).
        premium_prefix: Model identifiers starting with this are downgraded.
        fallback_model: Identifier substituted for a downgraded model.
        message_threshold: Downgrade only when the conversation has *more*
            messages than this.
    """

    default_api_key: str | None
    premium_prefix: str = DEFAULT_PREMIUM_PREFIX
    fallback_model: str = DEFAULT_FALLBACK_MODEL
    message_threshold: int = DEFAULT_MESSAGE_THRESHOLD

    def should_downgrade(self, model: str, message_count: int, api_key: str) -> bool:
        return (
            message_count > self.message_threshold
            and self.default_api_key is not None
            and api_key == self.default_api_key
            and model.startswith(self.premium_prefix)
        )

    def resolve_model(self, model: str, message_count: int, api_key: str) -> str:
        """Return the model identifier that should actually reach the vendor."""
        if self.should_downgrade(model, message_count, api_key):
            return self.fallback_model
        return model
