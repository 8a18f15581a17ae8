"""Shared utilities for FastAPI routes."""

import json
from collections.abc import Iterable, Iterator
from typing import Any

from fastapi.responses import StreamingResponse

from orchestrator.pipeline_types import PipelineEvent

MAX_CONTEXT_MESSAGES = 10
MAX_CONTEXT_CHARS = 16000
NDJSON_MEDIA_TYPE = "application/x-ndjson"
STREAM_HEADERS = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}


def trim_history(history):
    """
    Keep the most recent history items that fit the context budget.

    Oldest messages are dropped first. The newest message is always kept,
    even when it alone exceeds the character budget.
    """
    if not history:
        return []

    history = list(history[-MAX_CONTEXT_MESSAGES:])
    total_chars = sum(len(item.content) for item in history)
    while len(history) > 1 and total_chars > MAX_CONTEXT_CHARS:
        total_chars -= len(history.pop(0).content)

    return [{"role": item.role, "content": item.content} for item in history]


def to_ndjson(event: dict[str, Any] | PipelineEvent) -> str:
    """Serialize one stream event as NDJSON."""
    if isinstance(event, PipelineEvent):
        event = event.to_dict()
    return json.dumps(event, ensure_ascii=False, default=str) + "\n"


def ndjson_response(events: Iterable[dict[str, Any] | PipelineEvent]) -> StreamingResponse:
    """Wrap a (sync) event iterator; Starlette drains it in a worker thread."""

    def body() -> Iterator[str]:
        for event in events:
            yield to_ndjson(event)

    return StreamingResponse(body(), media_type=NDJSON_MEDIA_TYPE, headers=STREAM_HEADERS)
