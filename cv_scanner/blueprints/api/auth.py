import logging
import re

from flask import jsonify

from cv_scanner.blueprints.api import api_bp, json_body, user_store
from cv_scanner.errors import UnauthorizedError, ValidationError
from cv_scanner.extensions import bcrypt
from cv_scanner.jwt_auth import issue_token

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[A-Za-z]{2,}$")


def is_valid_email(email) -> bool:
    return isinstance(email, str) and bool(_EMAIL_RE.match(email))


def _credentials():
    data = json_body()
    email = data.get("email")
    password = data.get("password")
    if not email or not password:
        raise ValidationError("Email and password are required.")
    if not is_valid_email(email):
        raise ValidationError("Invalid email format.")
    return data, email.lower(), str(password)


@api_bp.route("/auth/register", methods=["POST"])
def register():
    """Create a user account and return a session token"""
    data, email, password = _credentials()
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        )

    store = user_store()
    if store.get_by_email(email):
        raise ValidationError("User already exists.")

    name = data.get("name") or ""
    password_hash = bcrypt.generate_password_hash(password).decode("utf-8")
    store.create(email=email, name=name, password_hash=password_hash)
    logger.info("Registered user %s", email)

    return jsonify({"token": issue_token(email), "email": email, "name": name}), 201


@api_bp.route("/auth/login", methods=["POST"])
def login():
    """Authenticate with email and password"""
    _, email, password = _credentials()

    user = user_store().get_by_email(email)
    if user is None or not bcrypt.check_password_hash(user.password_hash, password):
        raise UnauthorizedError("Invalid credentials.")

    return jsonify({"token": issue_token(email), "email": user.email, "name": user.name})
