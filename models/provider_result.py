from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

from utils.errors import ParseError, ProviderError

T = TypeVar("T")

VALID_ERROR_CODES = {
    "timeout",
    "auth",
    "rate_limit",
    "bad_request",
    "provider_error",
    "parse_error",
    "unknown",
}


@dataclass(frozen=True)
class NormalizedError:
    code: str
    message: str
    provider: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.code not in VALID_ERROR_CODES:
            object.__setattr__(self, "code", "unknown")


@dataclass(frozen=True)
class ProviderResult(Generic[T]):
    """
    Tagged outcome of a provider call or boundary validation.

    Exactly one of ``payload`` / ``error`` is meaningful: a success carries the
    validated payload, a failure carries the reason. ``raw_text`` keeps the
    unvalidated provider text for fallbacks that want to surface it anyway.
    """

    payload: T | None = None
    error: NormalizedError | None = None
    raw_text: str = ""
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat() + "Z")

    @classmethod
    def ok(cls, payload: T, raw_text: str = "") -> "ProviderResult[T]":
        return cls(payload=payload, error=None, raw_text=raw_text)

    @classmethod
    def fail(
        cls,
        code: str,
        message: str,
        *,
        provider: str = "unknown",
        retryable: bool = False,
        raw_text: str = "",
        details: dict[str, Any] | None = None,
    ) -> "ProviderResult[T]":
        return cls(
            payload=None,
            error=NormalizedError(
                code=code,
                message=message,
                provider=provider,
                retryable=retryable,
                details=details or {},
            ),
            raw_text=raw_text,
        )

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def unwrap(self) -> T:
        """Return the payload or raise the matching pipeline exception."""
        if self.error is None:
            return self.payload  # type: ignore[return-value]
        if self.error.code == "parse_error":
            raise ParseError(self.error.message, raw_text=self.raw_text, details=self.error.details)
        raise ProviderError(
            self.error.message, provider=self.error.provider, details=self.error.details
        )
