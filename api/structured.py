"""Boundary validation of structured (JSON) model output."""

import json
import re
from typing import TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from models.provider_result import ProviderResult

T = TypeVar("T", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)


def strip_code_fences(raw_output: str) -> str:
    """Remove markdown code fences the model sometimes wraps JSON in."""
    cleaned = raw_output.strip()
    match = _FENCE_RE.search(cleaned)
    if match:
        return match.group(1).strip()
    return cleaned


def parse_structured_output(
    raw_output: str | None, model_cls: type[T], *, provider: str = "upstage"
) -> ProviderResult[T]:
    """
    Parse model text as JSON and validate it against ``model_cls``.

    Never raises: malformed JSON and schema violations come back as a
    ``parse_error`` failure carrying the raw text.
    """
    if not raw_output or not raw_output.strip():
        return ProviderResult.fail(
            "parse_error", f"Empty response for {model_cls.__name__}", provider=provider
        )

    cleaned = strip_code_fences(raw_output)
    candidates = [cleaned]
    if "{" in cleaned:
        candidates.append(cleaned[cleaned.find("{"):cleaned.rfind("}") + 1])

    last_error: Exception | None = None
    for candidate in candidates:
        try:
            return ProviderResult.ok(model_cls.model_validate_json(candidate), raw_text=raw_output)
        except (PydanticValidationError, json.JSONDecodeError, ValueError) as e:
            last_error = e

    return ProviderResult.fail(
        "parse_error",
        f"Failed to parse {model_cls.__name__}: {last_error}",
        provider=provider,
        raw_text=raw_output,
        details={"model": model_cls.__name__},
    )
