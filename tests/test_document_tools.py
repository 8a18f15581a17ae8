import httpx
import pytest

from config.config import ProviderSettings
from tools.documents.upstage_parser import UpstageDocumentParser, document_from_payload, html_to_text
from tools.web.firecrawl_scraper import NO_TITLE, FirecrawlScraper, validate_url
from utils.errors import ProviderError, ValidationError

PARSE_SETTINGS = ProviderSettings(api_key="up-key", base_url="https://parse.test/document-parse")
SCRAPE_SETTINGS = ProviderSettings(api_key="fc-key", base_url="https://firecrawl.test/v1")


def mock_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


# -------------------------------------------------------------------
# Document parsing
# -------------------------------------------------------------------


def test_html_to_text():
    assert html_to_text("<h1>Title</h1>\n<p>Body  text</p>") == "Title Body text"


def test_flat_payload():
    doc = document_from_payload(
        "a.pdf", 10, {"html": "<p>Hello</p>", "page_count": 2, "table_count": 1, "figure_count": 0}
    )
    assert doc.text == "Hello"
    assert (doc.page_count, doc.table_count, doc.figure_count) == (2, 1, 0)


def test_nested_payload():
    payload = {
        "content": {"html": "<p>ignored</p>", "markdown": "# Hello"},
        "elements": [{"category": "table"}, {"category": "figure"}, {"category": "table"}],
        "usage": {"pages": 3},
    }
    doc = document_from_payload("a.pdf", 10, payload)

    assert doc.text == "# Hello"
    assert (doc.page_count, doc.table_count, doc.figure_count) == (3, 2, 1)


def test_parse_uploads_document():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["content_type"] = request.headers["Content-Type"]
        return httpx.Response(200, json={"text": "Extracted", "page_count": 1})

    parser = UpstageDocumentParser(PARSE_SETTINGS, http_client=mock_client(handler))
    doc = parser.parse("brief.txt", b"hello world", "text/plain")

    assert doc.text == "Extracted"
    assert doc.file_name == "brief.txt"
    assert doc.file_size == 11
    assert seen["auth"] == "Bearer up-key"
    assert seen["content_type"].startswith("multipart/form-data")


def test_parse_rejects_unsupported_type():
    parser = UpstageDocumentParser(PARSE_SETTINGS, http_client=mock_client(lambda r: httpx.Response(200)))
    with pytest.raises(ValidationError, match="Unsupported file type"):
        parser.parse("image.png", b"\x89PNG", "image/png")


def test_parse_rejects_empty_file():
    parser = UpstageDocumentParser(PARSE_SETTINGS, http_client=mock_client(lambda r: httpx.Response(200)))
    with pytest.raises(ValidationError, match="No file provided"):
        parser.parse("a.pdf", b"", "application/pdf")


def test_parse_provider_failure():
    parser = UpstageDocumentParser(
        PARSE_SETTINGS, http_client=mock_client(lambda r: httpx.Response(502, text="bad gateway"))
    )
    with pytest.raises(ProviderError) as exc_info:
        parser.parse("a.pdf", b"%PDF", "application/pdf")
    assert exc_info.value.provider == "upstage-document-parse"


def test_parse_requires_key():
    parser = UpstageDocumentParser(
        ProviderSettings(base_url="https://parse.test"),
        http_client=mock_client(lambda r: httpx.Response(200)),
    )
    with pytest.raises(ProviderError):
        parser.parse("a.txt", b"hi", "text/plain")


# -------------------------------------------------------------------
# Scraping
# -------------------------------------------------------------------


@pytest.mark.parametrize("url,message", [(None, "No URL provided"), ("ftp://x", "Invalid URL format")])
def test_validate_url(url, message):
    with pytest.raises(ValidationError, match=message):
        validate_url(url)


def test_scrape_returns_page():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": {
                    "markdown": "one two three",
                    "metadata": {"title": "Page", "author": "A. Writer", "sourceURL": "https://x.test"},
                },
            },
        )

    scraper = FirecrawlScraper(SCRAPE_SETTINGS, http_client=mock_client(handler))
    page = scraper.scrape(" https://x.test ")

    assert seen["url"] == "https://firecrawl.test/v1/scrape"
    assert b'"onlyMainContent":true' in seen["body"].replace(b" ", b"")
    assert page.title == "Page"
    assert page.text == "one two three"
    assert page.word_count == 3
    assert page.author == "A. Writer"


def test_scrape_defaults_missing_metadata():
    scraper = FirecrawlScraper(
        SCRAPE_SETTINGS,
        http_client=mock_client(lambda r: httpx.Response(200, json={"success": True, "data": {}})),
    )
    page = scraper.scrape("https://x.test")

    assert page.title == NO_TITLE
    assert page.word_count == 0


def test_scrape_failure_raises_provider_error():
    scraper = FirecrawlScraper(
        SCRAPE_SETTINGS,
        http_client=mock_client(lambda r: httpx.Response(200, json={"success": False, "error": "blocked"})),
    )
    with pytest.raises(ProviderError, match="blocked"):
        scraper.scrape("https://x.test")
