"""Factories for the research and scraping tools from application configuration."""

from config.config import Config
from utils.logger import get_logger

from .firecrawl_scraper import FirecrawlScraper
from .tavily_client import TavilySearchClient

logger = get_logger(__name__)


def create_search_client(config: Config) -> TavilySearchClient:
    """
    Create the Tavily search client.

    A missing TAVILY_API_KEY yields a disabled client rather than an error.
    """
    settings = config.search_settings()
    if not settings.is_configured:
        logger.warning("TAVILY_API_KEY not set; web research disabled")
    return TavilySearchClient(settings)


def create_scraper(config: Config) -> FirecrawlScraper:
    return FirecrawlScraper(config.scrape_settings())
