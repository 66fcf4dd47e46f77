"""
CV scanning pipeline.

Combines identity extraction, keyword matching and persistence:
1. ``scan``: one CV's text -> identity + matches -> upsert by email.
2. ``rescan``: re-match a stored CV's text against the current keywords.
3. ``batch_scan``: the scan flow over every PDF in an archive, where a
   failing entry is recorded and never stops its siblings.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from cv_scanner.errors import NotFoundError, ValidationError
from cv_scanner.models import ScannedCv, isoformat, utcnow
from cv_scanner.services.keyword_cache import KeywordCache
from cv_scanner.services.stores import KeywordStore, ScanStore

from .identity import ExtractedIdentity, extract_identity
from .ingest import ArchiveEntry, extract_pdf_text
from .matcher import get_active_keywords, match_keywords

logger = logging.getLogger(__name__)

# Phrases that suggest a document is a CV; two or more must appear.
CV_INDICATORS = (
    "profile",
    "about me",
    "contact",
    "skills",
    "experience",
    "work experience",
    "education",
    "qualification",
    "resume",
    "curriculum vitae",
)
MIN_CV_INDICATORS = 2

NO_EMAIL_BATCH_ERROR = "No email found"

_RESCAN_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def looks_like_cv(text: str) -> bool:
    lower_text = (text or "").lower()
    hits = sum(1 for phrase in CV_INDICATORS if phrase in lower_text)
    return hits >= MIN_CV_INDICATORS


def _scan_response(record: ScannedCv) -> Dict[str, Any]:
    return record.to_dict(include_text=False)


@dataclass
class _BatchAccumulator:
    results: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)

    def fail(self, file_name: str, error: str) -> None:
        self.errors.append({"file": file_name, "error": error})

    def to_response(self) -> Dict[str, Any]:
        return {
            "success": True,
            "processed": len(self.results),
            "failed": len(self.errors),
            "results": self.results,
            "errors": self.errors,
        }


class ScanPipeline:
    """
    Orchestrates single, repeat and batch CV scans.

    Collaborators are injected so tests can supply an isolated keyword cache,
    a fake clock or a stub text extractor.
    """

    def __init__(
        self,
        keyword_store: KeywordStore,
        scan_store: ScanStore,
        keyword_cache: KeywordCache,
        text_extractor: Callable[[bytes], str] = extract_pdf_text,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.keyword_store = keyword_store
        self.scan_store = scan_store
        self.keyword_cache = keyword_cache
        self.text_extractor = text_extractor
        self.clock = clock

    def active_keywords(self) -> List[str]:
        return get_active_keywords(self.keyword_cache, self.keyword_store)

    def _persist(
        self,
        identity: ExtractedIdentity,
        text: str,
        keywords: Sequence[str],
    ) -> ScannedCv:
        matched = match_keywords(text, keywords)
        return self.scan_store.upsert(
            email=identity.email,
            extracted_name=identity.name,
            matched_keywords=matched,
            full_text=text,
            now=self.clock(),
        )

    def scan_document(
        self, payload: bytes, document_label: Optional[str] = None
    ) -> Dict[str, Any]:
        """Extract text from an uploaded PDF and scan it."""
        text = self.text_extractor(payload)
        return self.scan(text, document_label)

    def scan(
        self,
        raw_text: str,
        document_label: Optional[str] = None,
        require_cv: bool = True,
    ) -> Dict[str, Any]:
        """
        Scan one CV's text and upsert its record.

        Args:
            raw_text: Text already extracted from the document
            document_label: File name, used for logging only
            require_cv: Reject text that does not look like a CV

        Returns:
            Dictionary with email, extractedName, matchedKeywords and timestamps
        """
        identity = extract_identity(raw_text)
        if not identity.email:
            raise ValidationError(
                "No email address found in CV. Please ensure the CV contains a valid email."
            )
        if require_cv and not looks_like_cv(raw_text):
            raise ValidationError(
                "The uploaded file does not appear to be a CV/resume. "
                "Please upload a valid CV document."
            )

        record = self._persist(identity, raw_text, self.active_keywords())
        logger.info(
            "Scanned %s as %s (%d keyword matches)",
            document_label or "document",
            record.email,
            len(record.matched_keywords),
        )
        return _scan_response(record)

    def rescan(self, email: Any) -> Dict[str, Any]:
        """Re-match a stored CV against the current active keywords."""
        if not isinstance(email, str) or not email.strip():
            raise ValidationError("Valid email address is required for rescan.")
        email = email.strip()
        if not _RESCAN_EMAIL_RE.match(email):
            raise ValidationError("Invalid email format.")

        record = self.scan_store.get_by_email(email)
        if record is None:
            raise NotFoundError(f"CV with email '{email}' not found.")

        matched = match_keywords(record.full_text, self.active_keywords())
        record = self.scan_store.update_matches(record, matched, self.clock())
        logger.info("Rescanned %s (%d keyword matches)", record.email, len(matched))
        return _scan_response(record)

    def batch_scan(self, entries: Sequence[ArchiveEntry]) -> Dict[str, Any]:
        """Scan every entry, collecting per-entry results and errors."""
        if not entries:
            raise ValidationError(
                "No PDF files found in ZIP. Please ensure the ZIP contains PDF files."
            )

        keywords = self.active_keywords()
        acc = _BatchAccumulator()
        for entry in entries:
            try:
                self._scan_entry(entry, keywords, acc)
            except Exception as exc:
                logger.warning("Batch entry %s failed: %s", entry.name, exc)
                acc.fail(entry.name, str(exc) or exc.__class__.__name__)

        logger.info(
            "Batch scan finished: processed=%d failed=%d",
            len(acc.results),
            len(acc.errors),
        )
        return acc.to_response()

    def _scan_entry(
        self, entry: ArchiveEntry, keywords: Sequence[str], acc: _BatchAccumulator
    ) -> None:
        text = self.text_extractor(entry.read())
        identity = extract_identity(text)
        if not identity.email:
            acc.fail(entry.name, NO_EMAIL_BATCH_ERROR)
            return

        record = self._persist(identity, text, keywords)
        acc.results.append(
            {
                "file": entry.name,
                "email": record.email,
                "extractedName": record.extracted_name,
                "matchedKeywords": list(record.matched_keywords),
                "scannedAt": isoformat(record.scanned_at),
            }
        )
