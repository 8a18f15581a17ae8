from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tools.web.contracts import SearchResult


class PipelinePhase(str, Enum):
    REFINING_SECTIONS = "refining-sections"
    WRITING = "writing"
    COHERENCE = "coherence"
    COMPLETE = "complete"


class EventType(str, Enum):
    PHASE = "phase"
    SECTION = "section"
    PROGRESS = "progress"
    KEYWORDS = "keywords"
    SEARCH_RESULTS = "search_results"
    CONTENT = "content"
    DOCUMENT = "document"
    ERROR = "error"
    DONE = "done"


PROGRESS_START = 10
PROGRESS_REFINING_ANALYSIS = 15
PROGRESS_REFINING_RESULT = 20
PROGRESS_WRITING_START = 25
PROGRESS_WRITING_SPAN = 50
PROGRESS_COHERENCE = 80
PROGRESS_COMPLETE = 100


def writing_progress(sections_completed: int, total_sections: int) -> int:
    """Linear progress across the writing range (25..75)."""
    if total_sections <= 0:
        return PROGRESS_WRITING_START
    ratio = min(sections_completed, total_sections) / total_sections
    return PROGRESS_WRITING_START + round(ratio * PROGRESS_WRITING_SPAN)


@dataclass(frozen=True)
class PipelineEvent:
    """One typed event of the writer/pipeline stream; ``to_dict`` is its wire form."""

    type: EventType
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, **self.data}

    def with_data(self, **extra) -> "PipelineEvent":
        return PipelineEvent(self.type, {**self.data, **extra})


def progress_event(message: str) -> PipelineEvent:
    return PipelineEvent(EventType.PROGRESS, {"message": message})


def keywords_event(keywords: list[str]) -> PipelineEvent:
    return PipelineEvent(
        EventType.KEYWORDS,
        {"keywords": list(keywords), "message": f"Keywords extracted: {', '.join(keywords)}"},
    )


def search_results_event(results: list[SearchResult]) -> PipelineEvent:
    return PipelineEvent(
        EventType.SEARCH_RESULTS,
        {
            "results": [r.preview() for r in results],
            "message": f"Found {len(results)} relevant sources",
        },
    )


def content_event(delta: str) -> PipelineEvent:
    return PipelineEvent(EventType.CONTENT, {"content": delta})


def error_event(message: str) -> PipelineEvent:
    return PipelineEvent(EventType.ERROR, {"message": message})
