from __future__ import annotations

import logging

from flask import Blueprint, current_app, request

from cv_scanner.errors import ValidationError
from cv_scanner.services.cv_scanning import ScanPipeline, extract_pdf_text
from cv_scanner.services.keyword_cache import KeywordCache
from cv_scanner.services.stores import KeywordStore, ScanStore, UserStore

logger = logging.getLogger(__name__)

# Create the blueprint
api_bp = Blueprint("api", __name__, url_prefix="/api/v1")


def json_body() -> dict:
    """Return the request JSON object; a missing body counts as empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def keyword_cache() -> KeywordCache:
    return current_app.extensions["keyword_cache"]


def keyword_store() -> KeywordStore:
    return KeywordStore(cache=keyword_cache())


def user_store() -> UserStore:
    return UserStore()


def pdf_text_extractor(payload: bytes) -> str:
    """pypdf extraction using the app's retry settings."""
    return extract_pdf_text(
        payload,
        attempts=current_app.config["PDF_EXTRACT_ATTEMPTS"],
        backoff_seconds=current_app.config["PDF_EXTRACT_BACKOFF_SECONDS"],
    )


def scan_pipeline() -> ScanPipeline:
    """Build a pipeline over the shared cache and the request's DB session."""
    extractor = current_app.extensions.get("cv_text_extractor", pdf_text_extractor)
    return ScanPipeline(
        keyword_store=keyword_store(),
        scan_store=ScanStore(),
        keyword_cache=keyword_cache(),
        text_extractor=extractor,
    )


# Import API routes to register them on blueprint after blueprint creation
from . import auth, keywords, scans  # noqa: E402,F401
