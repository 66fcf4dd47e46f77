import logging

from flask import jsonify, request

from cv_scanner.blueprints.api import api_bp, json_body, keyword_store
from cv_scanner.errors import NotFoundError, ValidationError
from cv_scanner.jwt_auth import require_jwt

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def to_boolean(value) -> bool:
    """Coerce JSON booleans and "true"/"false" strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return bool(value)


def _required_name(data) -> str:
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Keyword name is required and must be a non-empty string.")
    return name.strip()


def _get_or_404(store, keyword_id):
    keyword = store.get_by_id(keyword_id)
    if keyword is None:
        raise NotFoundError(f"Keyword with ID '{keyword_id}' not found.")
    return keyword


@api_bp.route("/keywords", methods=["POST"])
@require_jwt
def create_keyword():
    """Create a new active keyword"""
    data = json_body()
    keyword = keyword_store().create(_required_name(data))
    return jsonify(keyword.to_dict()), 201


@api_bp.route("/keywords", methods=["GET"])
@require_jwt
def list_keywords():
    """List keywords with optional isActive filter, sorting and pagination"""
    is_active_arg = request.args.get("isActive")
    is_active = None if is_active_arg is None else is_active_arg == "true"

    sort_by = request.args.get("sortBy", "createdAt")
    if sort_by not in ("name", "createdAt"):
        sort_by = "createdAt"
    descending = request.args.get("sortOrder", "desc").lower() != "asc"

    page = max(DEFAULT_PAGE, request.args.get("page", type=int) or DEFAULT_PAGE)
    limit = request.args.get("limit", type=int) or DEFAULT_LIMIT
    limit = min(max(1, limit), MAX_LIMIT)

    items = keyword_store().list_keywords(
        is_active=is_active,
        sort_by=sort_by,
        descending=descending,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return jsonify(
        {"page": page, "limit": limit, "items": [k.to_dict() for k in items]}
    )


@api_bp.route("/keywords/<keyword_id>", methods=["GET"])
@require_jwt
def get_keyword(keyword_id):
    return jsonify(_get_or_404(keyword_store(), keyword_id).to_dict())


@api_bp.route("/keywords/<keyword_id>", methods=["PUT"])
@require_jwt
def update_keyword(keyword_id):
    """Rename a keyword"""
    data = json_body()
    name = _required_name(data)
    store = keyword_store()
    keyword = store.update_name(_get_or_404(store, keyword_id), name)
    return jsonify(keyword.to_dict())


@api_bp.route("/keywords/<keyword_id>/status", methods=["PATCH"])
@require_jwt
def update_keyword_status(keyword_id):
    """Activate or deactivate a keyword"""
    data = json_body()
    if "isActive" not in data:
        raise ValidationError("isActive field is required.")
    store = keyword_store()
    keyword = store.set_status(_get_or_404(store, keyword_id), to_boolean(data["isActive"]))
    return jsonify(keyword.to_dict())


@api_bp.route("/keywords/<keyword_id>", methods=["DELETE"])
@require_jwt
def delete_keyword(keyword_id):
    store = keyword_store()
    store.delete(_get_or_404(store, keyword_id))
    logger.info("Deleted keyword %s", keyword_id)
    return jsonify({"success": True})
