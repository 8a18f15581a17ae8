"""URL scraping endpoint."""

import asyncio

from fastapi import APIRouter, Depends

from server.dependencies import get_scraper
from server.schemas.requests import ScrapeRequest
from server.schemas.responses import ScrapeResponseDTO
from tools.web.firecrawl_scraper import FirecrawlScraper, validate_url

router = APIRouter(prefix="/v1", tags=["Sources"])


@router.post("/scrape", response_model=ScrapeResponseDTO)
async def scrape(request: ScrapeRequest, scraper: FirecrawlScraper = Depends(get_scraper)):
    url = validate_url(request.url)
    page = await asyncio.to_thread(scraper.scrape, url)
    return ScrapeResponseDTO.from_page(page)
