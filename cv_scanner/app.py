"""
Flask application factory for the CV Scanner API.
Sets up configuration, database, migrations, CORS, the keyword cache and
registers blueprints.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Mapping, Optional

from flask import Flask, jsonify
from flask_cors import CORS
from dotenv import load_dotenv

# Re-export db for scripts that import from cv_scanner.app
from cv_scanner.extensions import db, bcrypt, migrate
from cv_scanner.errors import register_error_handlers
from cv_scanner.services.keyword_cache import DEFAULT_TTL_SECONDS, KeywordCache


def _resolve_database_uri() -> str:
    """Resolve SQLAlchemy database URI from environment.

    Supports dual modes:
    - sqlite via `DATABASE_MODE=sqlite` and `DATABASE_DEV`
    - postgres via `DATABASE_MODE=postgres` and `DATABASE_PROD`
    """
    mode = (os.getenv("DATABASE_MODE") or "sqlite").lower()
    if mode == "postgres":
        uri = os.getenv("DATABASE_PROD")
        if not uri:
            raise RuntimeError("DATABASE_PROD must be set when DATABASE_MODE=postgres")
        return uri
    return os.getenv("DATABASE_DEV") or "sqlite:///cv_scanner.db"


def _ensure_instance_dir(app: Flask) -> None:
    """Ensure the Flask instance directory exists (for SQLite files)."""
    try:
        Path(app.instance_path).mkdir(parents=True, exist_ok=True)
    except OSError:
        # Non-fatal; sqlite paths outside the instance dir still work
        pass


def _configure_logging(app: Flask) -> None:
    """Info level logging to stderr plus a rotating file, unless already set up."""
    root = logging.getLogger()
    if not root.handlers:
        root.setLevel(logging.INFO)
        formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        sh = logging.StreamHandler()
        sh.setLevel(logging.INFO)
        sh.setFormatter(formatter)
        root.addHandler(sh)
        log_path = os.getenv("CV_SCANNER_LOG", "cv_scanner.log")
        try:
            fh = RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=2)
            fh.setLevel(logging.INFO)
            fh.setFormatter(formatter)
            root.addHandler(fh)
        except OSError:
            pass
    app.logger.setLevel(logging.INFO)


def create_app(config_overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Create and configure the Flask application."""
    # Load .env for development convenience
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)

    if config_overrides:
        app.config.update(config_overrides)

    # Base config
    if "SQLALCHEMY_DATABASE_URI" not in app.config:
        app.config["SQLALCHEMY_DATABASE_URI"] = _resolve_database_uri()
    app.config.setdefault("SQLALCHEMY_TRACK_MODIFICATIONS", False)
    app.config.setdefault("JSON_SORT_KEYS", False)
    app.config.setdefault("JWT_SECRET", os.getenv("JWT_SECRET"))
    app.config.setdefault("JWT_EXPIRES_HOURS", int(os.getenv("JWT_EXPIRES_HOURS", 24)))
    app.config.setdefault(
        "MAX_CONTENT_LENGTH", int(os.getenv("CV_MAX_UPLOAD_MB", 5)) * 1024 * 1024
    )
    app.config.setdefault(
        "KEYWORD_CACHE_TTL_SECONDS",
        float(os.getenv("KEYWORD_CACHE_TTL_SECONDS", DEFAULT_TTL_SECONDS)),
    )
    app.config.setdefault("PDF_EXTRACT_ATTEMPTS", int(os.getenv("PDF_EXTRACT_ATTEMPTS", 5)))
    app.config.setdefault(
        "PDF_EXTRACT_BACKOFF_SECONDS",
        float(os.getenv("PDF_EXTRACT_BACKOFF_SECONDS", 0.1)),
    )
    app.config.setdefault("CORS_ORIGINS", os.getenv("CORS_ORIGINS", "*"))

    _ensure_instance_dir(app)

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    migrate.init_app(app, db)

    # One keyword cache per process, shared by every request
    app.extensions["keyword_cache"] = KeywordCache(
        ttl_seconds=app.config["KEYWORD_CACHE_TTL_SECONDS"]
    )

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    from cv_scanner.blueprints.api import api_bp

    app.register_blueprint(api_bp)
    register_error_handlers(app)

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({"message": "CV Scanner API is running!"})

    _configure_logging(app)

    return app
