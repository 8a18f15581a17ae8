"""Tavily API client for section research.

Each keyword is searched independently; a failing keyword is logged and
skipped. Results are merged into one deduplicated, score-ranked list.
"""

from collections.abc import Iterable
from typing import Any

from config.config import ProviderSettings
from utils.logger import get_logger

from .contracts import SearchResult

logger = get_logger(__name__)

MAX_MERGED_RESULTS = 8
RESULTS_PER_KEYWORD = 3
EXCLUDED_DOMAINS = ["facebook.com", "twitter.com", "instagram.com", "reddit.com"]


def merge_results(
    result_lists: Iterable[list[SearchResult]], limit: int = MAX_MERGED_RESULTS
) -> list[SearchResult]:
    """
    Concatenate per-keyword results, drop repeated urls (first wins),
    sort by score descending and keep the top ``limit``.
    """
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for results in result_lists:
        for result in results:
            if result.url in seen:
                continue
            seen.add(result.url)
            unique.append(result)
    unique.sort(key=lambda r: r.score, reverse=True)
    return unique[:limit]


class TavilySearchClient:
    """
    Tavily-powered keyword search.

    Without a configured API key the client is disabled and every search
    returns an empty list, so writing proceeds without research.
    """

    def __init__(
        self,
        settings: ProviderSettings,
        *,
        client: Any = None,
        results_per_keyword: int = RESULTS_PER_KEYWORD,
        search_depth: str = "advanced",
    ):
        """
        Initialize the search client.

        Args:
            settings: Tavily credential and timeout
            client: Pre-built object exposing ``search(**kwargs) -> dict`` (tests)
            results_per_keyword: max_results sent per query
            search_depth: "basic" (faster) or "advanced" (deeper)
        """
        self.settings = settings
        self.results_per_keyword = results_per_keyword
        self.search_depth = search_depth
        self.client = client

        if self.client is None and settings.is_configured:
            # Lazy import so tests and keyless deployments don't need the SDK loaded
            from tavily import TavilyClient

            self.client = TavilyClient(api_key=settings.api_key)
            logger.info("Tavily client initialized")

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def search(self, keyword: str) -> list[SearchResult]:
        """
        Search the web for one keyword.

        Raises whatever the provider raises; ``search_many`` isolates failures.
        """
        if not self.enabled:
            return []

        response = self.client.search(
            query=keyword,
            search_depth=self.search_depth,
            include_raw_content=True,
            max_results=self.results_per_keyword,
            exclude_domains=EXCLUDED_DOMAINS,
            timeout=int(self.settings.timeout_s),
        )

        results = []
        for item in response.get("results", []):
            try:
                results.append(SearchResult.from_payload(item))
            except ValueError as e:
                logger.debug(f"Skipping malformed Tavily result: {e}")
        return results

    def search_many(self, keywords: list[str]) -> list[SearchResult]:
        """
        Search every keyword and merge the results.

        Returns:
            Deduplicated results sorted by score (at most 8); empty when the
            client is disabled or every keyword failed
        """
        if not self.enabled:
            logger.warning("TAVILY_API_KEY not provided, skipping search enhancement")
            return []

        per_keyword: list[list[SearchResult]] = []
        for keyword in keywords:
            try:
                per_keyword.append(self.search(keyword))
            except Exception as e:
                logger.error(
                    f"Search failed for keyword '{keyword}': {e}",
                    extra={"extra_fields": {"keyword": keyword, "error_type": type(e).__name__}},
                )
                continue

        merged = merge_results(per_keyword)
        logger.info(f"Tavily returned {len(merged)} merged results for {len(keywords)} keywords")
        return merged
