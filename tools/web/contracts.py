"""Data contracts for the web research and scraping tools."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SearchResult:
    """One ranked hit from the search provider."""

    title: str
    url: str
    content: str = ""
    raw_content: str | None = None
    score: float = 0.0

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SearchResult":
        """Build from one provider result object; raises ValueError without a url."""
        url = payload.get("url")
        if not url or not isinstance(url, str):
            raise ValueError(f"Search result without url: {payload!r}")
        try:
            score = float(payload.get("score") or 0.0)
        except (TypeError, ValueError):
            score = 0.0
        return cls(
            title=str(payload.get("title") or "Untitled"),
            url=url,
            content=str(payload.get("content") or ""),
            raw_content=payload.get("raw_content") or None,
            score=score,
        )

    def preview(self, limit: int = 200) -> dict[str, str]:
        """Client-facing summary: title, url and a truncated snippet."""
        return {"title": self.title, "url": self.url, "content": self.content[:limit] + "..."}


@dataclass(frozen=True)
class ResearchContext:
    """Outcome of the research step for one section."""

    keywords: list[str] = field(default_factory=list)
    results: list[SearchResult] = field(default_factory=list)

    @property
    def used(self) -> bool:
        return bool(self.results)


@dataclass(frozen=True)
class ScrapedPage:
    """Main content of a scraped web page plus its metadata."""

    url: str
    title: str
    text: str
    description: str = ""
    author: str = ""
    published_date: str = ""
    word_count: int = 0
