import time
from collections.abc import Callable, Iterator
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from api.base_client import BaseLLMClient, normalize_messages
from api.streaming import DeltaStream, iter_content_deltas
from api.wire_models import ChatCompletionResponse
from config.config import ProviderSettings
from utils.errors import ProviderError
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4000
DEFAULT_TOP_P = 0.9
DEFAULT_SCHEMA_NAME = "writing_response"
MAX_RETRIES = 3
BACKOFF_BASE_SECONDS = 2


class _AttemptFailed(Exception):
    """One buffered attempt failed in a way that is worth retrying."""


class SolarClient(BaseLLMClient):
    """
    Client for the Upstage Solar chat-completions endpoint (OpenAI-compatible).

    Buffered calls retry up to ``max_retries`` extra times with exponential
    backoff (2, 4, 8 seconds). Streaming calls are never retried.
    """

    provider_name = "upstage"

    def __init__(
        self,
        settings: ProviderSettings,
        *,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        top_p: float = DEFAULT_TOP_P,
        max_retries: int = MAX_RETRIES,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the Solar client.

        Args:
            settings: Credential, model name, base URL and timeout
            temperature: Default sampling temperature
            max_tokens: Maximum tokens to generate
            top_p: Nucleus sampling parameter
            max_retries: Additional attempts after the first buffered call fails
            http_client: Pre-built httpx client (tests inject a MockTransport here)
            sleep: Backoff sleep function
        """
        super().__init__(settings.api_key, model_name=settings.model_name)
        self.settings = settings
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_p = top_p
        self.max_retries = max_retries
        self._sleep = sleep
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=settings.timeout_s)

    @property
    def endpoint(self) -> str:
        return f"{self.settings.base_url.rstrip('/')}/chat/completions"

    def _headers(self) -> dict[str, str]:
        if not self.settings.is_configured:
            raise ProviderError(
                "UPSTAGE_API_KEY environment variable is required", provider=self.provider_name
            )
        return {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }

    def _build_payload(
        self,
        messages: list[dict[str, str]],
        *,
        schema: dict[str, Any] | None = None,
        schema_name: str = DEFAULT_SCHEMA_NAME,
        temperature: float | None = None,
        max_tokens: int | None = None,
        stream: bool = False,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model_name,
            "messages": normalize_messages(messages),
            "temperature": self.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.max_tokens,
            "top_p": self.top_p,
        }
        if schema is not None:
            payload["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": schema_name, "schema": schema, "strict": True},
            }
        if stream:
            payload["stream"] = True
        return payload

    def complete(
        self,
        messages: list[dict[str, str]],
        schema: dict[str, Any] | None = None,
        **kwargs,
    ) -> str:
        payload = self._build_payload(
            messages,
            schema=schema,
            schema_name=kwargs.get("schema_name", DEFAULT_SCHEMA_NAME),
            temperature=kwargs.get("temperature"),
            max_tokens=kwargs.get("max_tokens"),
        )
        headers = self._headers()
        total_attempts = self.max_retries + 1
        last_error: Exception | None = None

        for attempt in range(1, total_attempts + 1):
            try:
                return self._request_once(payload, headers)
            except (httpx.HTTPError, _AttemptFailed) as e:
                last_error = e
                logger.error(
                    f"Upstage API call failed (attempt {attempt}/{total_attempts}): {e}",
                    extra={
                        "extra_fields": {
                            "provider": self.provider_name,
                            "model": self.model_name,
                            "attempt": attempt,
                            "error_type": type(e).__name__,
                        }
                    },
                )
                if attempt == total_attempts:
                    break
                delay = BACKOFF_BASE_SECONDS**attempt
                logger.info(f"Retrying in {delay}s...")
                self._sleep(delay)

        raise ProviderError(
            f"Upstage API failed after {total_attempts} attempts: {last_error}",
            provider=self.provider_name,
            attempts=total_attempts,
            details={"last_error": str(last_error)},
        )

    def _request_once(self, payload: dict[str, Any], headers: dict[str, str]) -> str:
        response = self._client.post(
            self.endpoint, json=payload, headers=headers, timeout=self.settings.timeout_s
        )
        if not response.is_success:
            raise _AttemptFailed(
                f"Upstage SolarLLM API error: {response.status_code} - {response.text}"
            )
        try:
            result = ChatCompletionResponse.model_validate_json(response.content)
        except (PydanticValidationError, ValueError) as e:
            raise _AttemptFailed(f"No response from SolarLLM: {e}") from e
        return result.choices[0].message.content

    def complete_streaming(self, messages: list[dict[str, str]], **kwargs) -> DeltaStream:
        payload = self._build_payload(
            messages,
            temperature=kwargs.get("temperature"),
            max_tokens=kwargs.get("max_tokens"),
            stream=True,
        )
        request = self._client.build_request(
            "POST",
            self.endpoint,
            json=payload,
            headers=self._headers(),
            timeout=self.settings.timeout_s,
        )
        try:
            response = self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"Upstage streaming request failed: {e}")
            raise ProviderError(
                f"Upstage streaming request failed: {e}", provider=self.provider_name
            ) from e

        if not response.is_success:
            body = response.read().decode("utf-8", errors="replace")
            response.close()
            raise ProviderError(
                f"Upstage SolarLLM API error: {response.status_code} - {body}",
                provider=self.provider_name,
                details={"status_code": response.status_code},
            )

        logger.debug(f"Streaming completion opened (model={self.model_name})")
        return DeltaStream(self._iter_deltas(response), on_close=response.close)

    def _iter_deltas(self, response: httpx.Response) -> Iterator[str]:
        try:
            yield from iter_content_deltas(response.iter_lines())
        except httpx.HTTPError as e:
            logger.error(f"Upstage stream broke mid-response: {e}")
            raise ProviderError(
                f"Upstage stream interrupted: {e}", provider=self.provider_name
            ) from e

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "SolarClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
