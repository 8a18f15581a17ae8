import json

import pytest

from api.base_client import BaseLLMClient
from api.streaming import DeltaStream
from config.config import ProviderSettings
from models.project import ProjectSpec
from tools.web.contracts import SearchResult
from utils.errors import ProviderError


class FakeLLMClient(BaseLLMClient):
    """
    Scripted LLM client (keeps tests offline & deterministic).

    ``responses`` are consumed in order by ``complete``; ``streams`` by
    ``complete_streaming``. A script entry may be a string, a list of deltas
    (streams only), an exception instance to raise, or a callable taking the
    messages.
    """

    provider_name = "fake"

    def __init__(self, responses=None, streams=None, default: str | None = None):
        super().__init__("fake-key", model_name="fake-model")
        self.responses = list(responses or [])
        self.streams = list(streams or [])
        self.default = default
        self.calls: list[dict] = []
        self.stream_calls: list[list[dict[str, str]]] = []

    def _next(self, script: list, messages):
        if not script:
            if self.default is not None:
                return self.default
            raise ProviderError("No scripted response left", provider=self.provider_name)
        item = script.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(messages)
        return item

    def complete(self, messages, schema=None, **kwargs) -> str:
        self.calls.append({"messages": messages, "schema": schema, **kwargs})
        return self._next(self.responses, messages)

    def complete_streaming(self, messages, **kwargs) -> DeltaStream:
        self.stream_calls.append(messages)
        item = self._next(self.streams, messages)
        if isinstance(item, DeltaStream):
            return item
        if isinstance(item, str):
            return DeltaStream.from_text(item)
        return DeltaStream(item)


def broken_stream(*deltas: str, error: Exception | None = None):
    """Yield ``deltas`` then raise (a connection dropping mid-response)."""
    yield from deltas
    raise error or ProviderError("stream interrupted", provider="fake")


class FakeSearchClient:
    """Stands in for TavilySearchClient.search_many."""

    def __init__(self, results: list[SearchResult] | None = None, enabled: bool = True):
        self.results = results or []
        self.enabled = enabled
        self.queries: list[list[str]] = []

    def search_many(self, keywords):
        self.queries.append(list(keywords))
        return list(self.results) if self.enabled else []


class FakeTavily:
    """Stands in for tavily.TavilyClient: maps query -> response dict or exception."""

    def __init__(self, responses: dict):
        self.responses = responses
        self.calls: list[dict] = []

    def search(self, **kwargs):
        self.calls.append(kwargs)
        response = self.responses.get(kwargs["query"], {"results": []})
        if isinstance(response, Exception):
            raise response
        return response


def refined_sections_json(*titles: str) -> str:
    return json.dumps(
        {
            "sections": [
                {
                    "id": f"sec-{i}",
                    "title": title,
                    "description": f"About {title}",
                    "keyPoints": [f"{title} basics", f"{title} details"],
                    "estimatedLength": 400,
                }
                for i, title in enumerate(titles)
            ]
        }
    )


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def fake_search():
    return FakeSearchClient(
        [
            SearchResult(title="Result A", url="https://a.example", content="Alpha", score=0.9),
            SearchResult(title="Result B", url="https://b.example", content="Beta", score=0.5),
        ]
    )


@pytest.fixture
def project():
    return ProjectSpec.from_sources(
        title="Remote Work",
        content_type="blogPost",
        outline="Intro\nBody\nConclusion",
        text="Remote work is growing.",
    )


@pytest.fixture
def llm_settings():
    return ProviderSettings(
        api_key="test-key",
        model_name="solar-pro2-preview",
        base_url="https://api.upstage.test/v1",
        timeout_ms=5_000,
    )
