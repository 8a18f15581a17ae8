"""Firecrawl-backed URL scraping for project source material."""

from typing import Any
from urllib.parse import urlparse

import httpx

from config.config import ProviderSettings
from utils.errors import ProviderError, ValidationError
from utils.logger import get_logger

from .contracts import ScrapedPage

logger = get_logger(__name__)

NO_TITLE = "No title available"
NO_CONTENT = "No content extracted"


def validate_url(url: str | None) -> str:
    """Return the trimmed url or raise ValidationError when it is missing/invalid."""
    if not url or not url.strip():
        raise ValidationError("No URL provided")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("Invalid URL format", details={"url": url})
    return url


def page_from_payload(url: str, payload: dict[str, Any]) -> ScrapedPage:
    data = payload.get("data") or payload
    metadata = data.get("metadata") or {}
    markdown = data.get("markdown") or ""
    return ScrapedPage(
        url=data.get("url") or metadata.get("sourceURL") or url,
        title=metadata.get("title") or NO_TITLE,
        text=markdown or data.get("content") or NO_CONTENT,
        description=metadata.get("description") or "",
        author=metadata.get("author") or "",
        published_date=metadata.get("publishedTime") or "",
        word_count=len(markdown.split()) if markdown else 0,
    )


class FirecrawlScraper:
    def __init__(self, settings: ProviderSettings, *, http_client: httpx.Client | None = None):
        self.settings = settings
        self._client = http_client or httpx.Client(timeout=settings.timeout_s)

    def scrape(self, url: str) -> ScrapedPage:
        """
        Scrape the main content of ``url``.

        Raises:
            ValidationError: If the url is missing or malformed
            ProviderError: If the key is missing or the scrape fails
        """
        url = validate_url(url)
        if not self.settings.is_configured:
            raise ProviderError("Firecrawl API key not configured", provider="firecrawl")

        logger.info(f"Scraping website: {url}")
        try:
            response = self._client.post(
                f"{self.settings.base_url.rstrip('/')}/scrape",
                headers={"Authorization": f"Bearer {self.settings.api_key}"},
                json={"url": url, "formats": ["markdown", "html"], "onlyMainContent": True},
                timeout=self.settings.timeout_s,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Firecrawl HTTP error for {url}: {e.response.status_code}")
            raise ProviderError(
                f"Failed to scrape URL: {e.response.status_code}",
                provider="firecrawl",
                details={"status_code": e.response.status_code},
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Firecrawl error for {url}: {e}")
            raise ProviderError(f"Failed to scrape URL: {e}", provider="firecrawl") from e

        if payload.get("success") is False:
            raise ProviderError(
                f"Failed to scrape URL: {payload.get('error', 'unknown error')}", provider="firecrawl"
            )

        page = page_from_payload(url, payload)
        logger.info(f"Scraped {url}: {page.word_count} words, title: {page.title}")
        return page
