"""Document parsing tools."""

from .upstage_parser import ParsedDocument, UpstageDocumentParser

__all__ = ["ParsedDocument", "UpstageDocumentParser"]
