"""
CV scanning services package.

- Identity (name/email) extraction from CV text
- Keyword matching against the active keyword set
- PDF/ZIP ingest helpers
- The scan / rescan / batch pipeline
"""

from .identity import ExtractedIdentity, extract_email, extract_identity, extract_name
from .ingest import ArchiveEntry, DocumentParsingError, extract_pdf_text, list_archive_entries
from .matcher import get_active_keywords, match_keywords
from .scan_pipeline import ScanPipeline

__all__ = [
    # Identity extraction
    "ExtractedIdentity",
    "extract_email",
    "extract_identity",
    "extract_name",
    # Ingest
    "ArchiveEntry",
    "DocumentParsingError",
    "extract_pdf_text",
    "list_archive_entries",
    # Matching
    "get_active_keywords",
    "match_keywords",
    # Pipeline
    "ScanPipeline",
]
