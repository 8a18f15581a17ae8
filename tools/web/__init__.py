"""Web research and scraping tools."""

from .contracts import ResearchContext, ScrapedPage, SearchResult
from .factory import create_scraper, create_search_client

__all__ = [
    "ResearchContext",
    "ScrapedPage",
    "SearchResult",
    "create_scraper",
    "create_search_client",
]
