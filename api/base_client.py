from abc import ABC, abstractmethod
from typing import Any

from api.streaming import DeltaStream
from utils.errors import ValidationError

VALID_ROLES = {"system", "user", "assistant"}


def normalize_messages(messages: list[dict[str, str]]) -> list[dict[str, str]]:
    """
    Validate role-tagged chat messages and return plain dict copies.

    Raises:
        ValidationError: If the list is empty or a message has an unknown role
    """
    if not messages:
        raise ValidationError("At least one message is required")
    normalized = []
    for msg in messages:
        role = msg.get("role")
        if role not in VALID_ROLES:
            raise ValidationError(f"Unsupported message role: {role!r}")
        normalized.append({"role": role, "content": str(msg.get("content") or "")})
    return normalized


class BaseLLMClient(ABC):
    """
    Abstract base class for chat-completion clients.

    Subclasses provide a buffered call (optionally constrained by a JSON schema)
    and a streaming call returning a DeltaStream.
    """

    provider_name: str = "unknown"

    def __init__(self, api_key: str, **kwargs):
        """
        Args:
            api_key: API key for the model service
            **kwargs: Additional provider-specific parameters (model_name, ...)
        """
        self.api_key = api_key
        self.model_name = kwargs.get("model_name")

    @abstractmethod
    def complete(
        self,
        messages: list[dict[str, str]],
        schema: dict[str, Any] | None = None,
        **kwargs,
    ) -> str:
        """
        Get one complete response.

        Args:
            messages: Ordered role-tagged messages
            schema: Optional strict JSON schema for the response shape
            **kwargs: schema_name, temperature, max_tokens overrides

        Returns:
            The generated text (JSON text when a schema is given)

        Raises:
            ProviderError: After retries are exhausted
        """

    @abstractmethod
    def complete_streaming(self, messages: list[dict[str, str]], **kwargs) -> DeltaStream:
        """
        Open a streaming completion.

        The request is sent before this returns, so transport and HTTP status
        failures raise here; the returned stream yields content deltas.

        Raises:
            ProviderError: If the stream cannot be opened
        """
