"""Upstage Document Parse client for uploaded source files."""

import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any

import httpx

from config.config import ProviderSettings
from utils.errors import ProviderError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}
ALLOWED_EXTENSIONS = {"pdf", "doc", "docx", "txt"}

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ParsedDocument:
    text: str
    file_name: str
    file_size: int
    page_count: int = 0
    table_count: int = 0
    figure_count: int = 0


def html_to_text(html: str) -> str:
    """Crude tag strip plus whitespace collapse."""
    return _WS_RE.sub(" ", _TAG_RE.sub(" ", html)).strip()


def is_supported(file_name: str, content_type: str | None) -> bool:
    if content_type and content_type.split(";")[0].strip() in ALLOWED_CONTENT_TYPES:
        return True
    extension = PurePath(file_name or "").suffix.lower().lstrip(".")
    return extension in ALLOWED_EXTENSIONS


def document_from_payload(file_name: str, file_size: int, payload: dict[str, Any]) -> ParsedDocument:
    """
    Normalize both response shapes of the parse endpoint.

    Flat: ``html``, ``text``, ``page_count``, ``table_count``, ``figure_count``.
    Nested: ``content.{html,markdown,text}``, ``elements[]``, ``usage.pages``.
    """
    content = payload.get("content")
    if isinstance(content, dict):
        text = content.get("text") or content.get("markdown") or ""
        html = content.get("html") or ""
        elements = payload.get("elements") or []
        page_count = (payload.get("usage") or {}).get("pages", 0)
        table_count = sum(1 for el in elements if el.get("category") == "table")
        figure_count = sum(1 for el in elements if el.get("category") == "figure")
    else:
        text = payload.get("text") or ""
        html = payload.get("html") or ""
        page_count = payload.get("page_count", 0)
        table_count = payload.get("table_count", 0)
        figure_count = payload.get("figure_count", 0)

    if not text and html:
        text = html_to_text(html)

    return ParsedDocument(
        text=text,
        file_name=file_name,
        file_size=file_size,
        page_count=int(page_count or 0),
        table_count=int(table_count or 0),
        figure_count=int(figure_count or 0),
    )


class UpstageDocumentParser:
    def __init__(self, settings: ProviderSettings, *, http_client: httpx.Client | None = None):
        self.settings = settings
        self._client = http_client or httpx.Client(timeout=settings.timeout_s)

    def parse(self, file_name: str, data: bytes, content_type: str | None = None) -> ParsedDocument:
        """
        Upload one document and return its extracted text.

        Raises:
            ValidationError: Empty or unsupported file
            ProviderError: Missing key, transport failure or non-2xx response
        """
        if not data:
            raise ValidationError("No file provided")
        if not is_supported(file_name, content_type):
            raise ValidationError(
                "Unsupported file type. Please upload PDF, DOC, DOCX, or TXT files.",
                details={"file_name": file_name, "content_type": content_type},
            )
        if not self.settings.is_configured:
            raise ProviderError("Upstage API key not configured", provider="upstage-document-parse")

        logger.info(f"Parsing document {file_name} ({len(data)} bytes)")
        try:
            response = self._client.post(
                self.settings.base_url,
                headers={"Authorization": f"Bearer {self.settings.api_key}"},
                files={"document": (file_name, data, content_type or "application/octet-stream")},
                timeout=self.settings.timeout_s,
            )
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Document parsing failed: {e}", provider="upstage-document-parse"
            ) from e

        if not response.is_success:
            logger.error(f"Upstage document parse error: {response.status_code} {response.text}")
            raise ProviderError(
                f"Document parsing failed: {response.status_code}",
                provider="upstage-document-parse",
                details={"status_code": response.status_code},
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(
                "Document parsing returned invalid JSON", provider="upstage-document-parse"
            ) from e

        document = document_from_payload(file_name, len(data), payload)
        logger.info(
            f"Parsed {file_name}: {len(document.text)} chars, {document.page_count} pages",
            extra={"extra_fields": {"file_name": file_name, "pages": document.page_count}},
        )
        return document
