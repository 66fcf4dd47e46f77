import logging

from flask import jsonify, request

from cv_scanner.blueprints.api import api_bp, json_body, scan_pipeline
from cv_scanner.errors import NotFoundError, ValidationError
from cv_scanner.jwt_auth import require_jwt
from cv_scanner.services.cv_scanning.ingest import (
    PDF_CONTENT_TYPES,
    PDF_EXTENSION,
    ZIP_CONTENT_TYPES,
    ZIP_EXTENSION,
    list_archive_entries,
    prepare_upload_bytes,
)
from cv_scanner.services.stores import ScanStore

logger = logging.getLogger(__name__)


@api_bp.route("/scan", methods=["POST"])
@require_jwt
def scan_cv():
    """Scan a single PDF CV and match it against active keywords"""
    payload, filename = prepare_upload_bytes(
        request.files.get("file"),
        allowed_content_types=PDF_CONTENT_TYPES,
        allowed_extension=PDF_EXTENSION,
        missing_message="No CV file uploaded. Please upload a PDF file.",
    )
    return jsonify(scan_pipeline().scan_document(payload, filename))


@api_bp.route("/rescan", methods=["POST"])
@require_jwt
def rescan_cv():
    """Re-match a stored CV against the current active keywords"""
    data = json_body()
    return jsonify(scan_pipeline().rescan(data.get("email")))


@api_bp.route("/batch/scan", methods=["POST"])
@require_jwt
def batch_scan_cvs():
    """Scan every PDF inside an uploaded ZIP archive"""
    payload, filename = prepare_upload_bytes(
        request.files.get("file"),
        allowed_content_types=ZIP_CONTENT_TYPES,
        allowed_extension=ZIP_EXTENSION,
        missing_message="No ZIP file uploaded. Please upload a ZIP file containing PDFs.",
    )
    entries = list_archive_entries(payload, PDF_EXTENSION)
    logger.info("Batch upload %s contains %d PDF entries", filename, len(entries))
    return jsonify(scan_pipeline().batch_scan(entries))


@api_bp.route("/scanned-cvs", methods=["GET"])
@require_jwt
def list_scanned_cvs():
    records = ScanStore().list_all()
    return jsonify({"items": [record.to_dict() for record in records]})


@api_bp.route("/scanned-cvs/<path:email>", methods=["DELETE"])
@require_jwt
def delete_scanned_cv(email):
    if not email or not email.strip():
        raise ValidationError("Email parameter is required.")
    store = ScanStore()
    record = store.get_by_email(email.strip())
    if record is None:
        raise NotFoundError(f"CV with email '{email}' not found.")
    store.delete(record)
    logger.info("Deleted scanned CV %s", email.strip().lower())
    return jsonify({"success": True})
