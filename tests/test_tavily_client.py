import pytest

from config.config import ProviderSettings
from tools.web.contracts import SearchResult
from tools.web.research_pack import build_enriched_context
from tools.web.tavily_client import EXCLUDED_DOMAINS, TavilySearchClient, merge_results

from conftest import FakeTavily

SETTINGS = ProviderSettings(api_key="tvly-test", timeout_ms=30_000)


def hit(url: str, score: float, title: str = "T") -> dict:
    return {"title": title, "url": url, "content": f"content of {url}", "score": score}


def test_search_sends_research_parameters():
    tavily = FakeTavily({"remote work": {"results": [hit("https://a.example", 0.4)]}})
    client = TavilySearchClient(SETTINGS, client=tavily)

    results = client.search("remote work")

    assert [r.url for r in results] == ["https://a.example"]
    call = tavily.calls[0]
    assert call["query"] == "remote work"
    assert call["search_depth"] == "advanced"
    assert call["include_raw_content"] is True
    assert call["max_results"] == 3
    assert call["exclude_domains"] == EXCLUDED_DOMAINS
    assert call["timeout"] == 30


def test_failing_keyword_is_isolated():
    tavily = FakeTavily(
        {
            "x": RuntimeError("tavily exploded"),
            "y": {"results": [hit("https://low.example", 0.2), hit("https://high.example", 0.8)]},
        }
    )
    client = TavilySearchClient(SETTINGS, client=tavily)

    results = client.search_many(["x", "y"])

    assert [r.url for r in results] == ["https://high.example", "https://low.example"]


def test_results_are_deduplicated_by_url_first_wins():
    tavily = FakeTavily(
        {
            "a": {"results": [hit("https://same.example", 0.3, title="first")]},
            "b": {"results": [hit("https://same.example", 0.9, title="second")]},
        }
    )
    client = TavilySearchClient(SETTINGS, client=tavily)

    results = client.search_many(["a", "b"])

    assert len(results) == 1
    assert results[0].title == "first"


def test_merge_caps_at_eight_sorted_by_score():
    lists = [
        [SearchResult(title=str(i), url=f"https://{i}.example", score=i / 10) for i in range(5)],
        [SearchResult(title=str(i), url=f"https://{i}.example", score=i / 10) for i in range(5, 10)],
    ]
    merged = merge_results(lists)

    assert len(merged) == 8
    assert [r.score for r in merged] == sorted((r.score for r in merged), reverse=True)
    assert merged[0].url == "https://9.example"


def test_results_without_url_are_skipped():
    tavily = FakeTavily({"q": {"results": [{"title": "no url"}, hit("https://ok.example", 0.5)]}})
    client = TavilySearchClient(SETTINGS, client=tavily)

    assert [r.url for r in client.search("q")] == ["https://ok.example"]


def test_disabled_client_returns_empty():
    client = TavilySearchClient(ProviderSettings())

    assert not client.enabled
    assert client.search_many(["anything"]) == []


def test_preview_truncates_content():
    result = SearchResult(title="T", url="https://u.example", content="x" * 500)
    preview = result.preview()

    assert preview["content"] == "x" * 200 + "..."
    assert preview["url"] == "https://u.example"


def test_from_payload_requires_url():
    with pytest.raises(ValueError):
        SearchResult.from_payload({"title": "nothing"})


def test_enriched_context_lists_results_and_keywords():
    results = [
        SearchResult(
            title="Study", url="https://s.example", content="Findings", raw_content="r" * 2000
        )
    ]
    enriched = build_enriched_context("Base context", results, ["remote", "work"])

    assert enriched.startswith("Base context")
    assert "## RECENT SEARCH RESULTS AND CURRENT INFORMATION:" in enriched
    assert "Source: https://s.example" in enriched
    assert "r" * 1500 + "..." in enriched
    assert "r" * 1501 not in enriched
    assert enriched.endswith("## SEARCH KEYWORDS USED:\nremote, work")


def test_enriched_context_unchanged_without_results():
    assert build_enriched_context("Base context", [], ["k"]) == "Base context"
