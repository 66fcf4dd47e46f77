"""Upload ingest helpers for CV scanning.

Responsible for:
1. Reading an upload stream once and validating type/size.
2. Extracting plain text from PDF bytes with pypdf, retrying transient
   decode failures.
3. Listing the PDF entries of a ZIP archive for batch scanning.
"""

from __future__ import annotations

import io
import logging
import os
import re
import time
import unicodedata
import zipfile
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from cv_scanner.errors import ValidationError

logger = logging.getLogger(__name__)

PDF_EXTENSION = ".pdf"
ZIP_EXTENSION = ".zip"
PDF_CONTENT_TYPES = {"application/pdf"}
ZIP_CONTENT_TYPES = {"application/zip", "application/x-zip-compressed"}

DEFAULT_EXTRACT_ATTEMPTS = 5
DEFAULT_EXTRACT_BACKOFF_SECONDS = 0.1


class DocumentParsingError(ValidationError):
    """Raised when a document cannot be turned into text."""


def prepare_upload_bytes(
    file_storage: Optional[FileStorage],
    *,
    allowed_content_types: Sequence[str],
    allowed_extension: str,
    missing_message: str,
) -> Tuple[bytes, str]:
    """
    Read the upload stream exactly once and check its declared type.

    Either a whitelisted content type or the expected filename extension is
    accepted, since browsers disagree on ZIP MIME types.

    Returns: (data, normalized_filename)
    """
    if not file_storage or not file_storage.filename:
        raise ValidationError(missing_message)

    normalized_name = secure_filename(file_storage.filename) or file_storage.filename
    content_type = (file_storage.mimetype or "").lower()
    extension = _detect_extension(normalized_name)
    if content_type not in allowed_content_types and extension != allowed_extension:
        raise ValidationError("Only PDF and ZIP files are allowed!")

    try:
        raw_bytes = file_storage.stream.read() or b""
    except OSError as exc:
        raise ValidationError(f"Failed to read upload stream: {exc}") from exc

    if not raw_bytes:
        raise ValidationError("Empty file.")

    logger.debug(
        "Upload %s accepted (content_type=%s, size=%d bytes)",
        normalized_name,
        content_type,
        len(raw_bytes),
    )
    return raw_bytes, normalized_name


def extract_pdf_text(
    payload: bytes,
    *,
    attempts: int = DEFAULT_EXTRACT_ATTEMPTS,
    backoff_seconds: float = DEFAULT_EXTRACT_BACKOFF_SECONDS,
) -> str:
    """Return the text of every PDF page joined by newlines.

    Decoding is retried up to ``attempts`` times with a fixed sleep between
    tries; the last failure is raised as ``DocumentParsingError``. A PDF
    without a text layer yields an empty string.
    """
    last_exc: Optional[Exception] = None
    for attempt in range(1, attempts + 1):
        try:
            return _read_pdf(payload)
        except Exception as exc:
            last_exc = exc
            if attempt >= attempts:
                break
            logger.warning(
                "PDF text extraction failed (attempt %d/%d): %s",
                attempt,
                attempts,
                exc,
            )
            time.sleep(backoff_seconds)
    raise DocumentParsingError(f"Failed to read PDF: {last_exc}") from last_exc


def _read_pdf(payload: bytes) -> str:
    from pypdf import PdfReader

    reader = PdfReader(io.BytesIO(payload))
    pages: List[str] = []
    for index, page in enumerate(reader.pages):
        text = page.extract_text() or ""
        logger.debug("Page %d raw_text_len=%d", index + 1, len(text))
        pages.append(_normalise_text(text))
    return "\n".join(pages).strip()


@dataclass(frozen=True)
class ArchiveEntry:
    """A document inside an archive; ``read`` is deferred so a corrupt entry
    only fails itself during batch processing."""

    name: str
    read: Callable[[], bytes]

    @classmethod
    def from_bytes(cls, name: str, payload: bytes) -> "ArchiveEntry":
        return cls(name=name, read=lambda: payload)


def list_archive_entries(
    payload: bytes, extension: str = PDF_EXTENSION
) -> List[ArchiveEntry]:
    """Return the non-directory entries whose name ends in ``extension``."""
    suffix = extension.lower()
    try:
        archive = zipfile.ZipFile(io.BytesIO(payload))
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        raise ValidationError(f"Invalid ZIP archive: {exc}") from exc
    return [
        ArchiveEntry(name=info.filename, read=partial(archive.read, info))
        for info in archive.infolist()
        if not info.is_dir() and info.filename.lower().endswith(suffix)
    ]


def _detect_extension(filename: str) -> str:
    _, ext = os.path.splitext(filename.lower())
    return ext


def _normalise_text(text: str) -> str:
    """Unify unicode forms and line endings; keep line structure for name heuristics."""
    text = unicodedata.normalize("NFKC", text)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+", " ", text)
    return text
