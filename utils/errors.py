"""
Error taxonomy for the content pipeline.

Each stage that has a fallback catches these locally and degrades; only
ValidationError and a final ProviderError ever reach the HTTP layer.
"""

from typing import Any


class ContentPipelineError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ValidationError(ContentPipelineError):
    """Missing or malformed caller input (maps to HTTP 400)."""


class ProviderError(ContentPipelineError):
    """Upstream LLM/search/parsing failure after retries were exhausted (HTTP 500)."""

    def __init__(
        self,
        message: str,
        *,
        provider: str = "unknown",
        attempts: int = 1,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.provider = provider
        self.attempts = attempts


class NoContentError(ContentPipelineError):
    """Coherence pass invoked without any usable section content."""


class ParseError(ContentPipelineError):
    """Model returned structured output that does not match the expected schema."""

    def __init__(self, message: str, *, raw_text: str = "", details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.raw_text = raw_text
