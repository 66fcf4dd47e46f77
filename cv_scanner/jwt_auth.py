# jwt_auth.py
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Callable

import jwt
from flask import current_app, g, jsonify, request

ALGORITHM = "HS256"


def _secret() -> str:
    """Return the signing secret.

    Raises:
        RuntimeError: If JWT_SECRET is not configured.
    """
    secret = current_app.config.get("JWT_SECRET")
    if not secret:
        raise RuntimeError("JWT_SECRET is not configured.")
    return secret


def issue_token(email: str) -> str:
    """Sign a token identifying the user by lower-cased email.

    Args:
        email (str): The user's email.

    Returns:
        str: The encoded JWT.
    """
    email = email.lower()
    hours = int(current_app.config.get("JWT_EXPIRES_HOURS", 24))
    now = datetime.now(timezone.utc)
    payload = {
        "userId": email,
        "email": email,
        "iat": now,
        "exp": now + timedelta(hours=hours),
    }
    return jwt.encode(payload, _secret(), algorithm=ALGORITHM)


def require_jwt(fn: Callable) -> Callable:
    """Require a valid Bearer token; exposes the claims on ``g``."""

    @wraps(fn)
    def wrapped(*args, **kwargs):
        auth_header = request.headers.get("Authorization", "")
        token = auth_header.replace("Bearer ", "", 1).strip()
        if not token:
            return jsonify({"error": "Authentication token required."}), 401

        try:
            payload = jwt.decode(token, _secret(), algorithms=[ALGORITHM])
        except (jwt.ExpiredSignatureError, jwt.InvalidTokenError):
            return jsonify({"error": "Invalid or expired token."}), 401

        g.jwt_payload = payload
        g.user_email = payload.get("email")
        return fn(*args, **kwargs)

    return wrapped
