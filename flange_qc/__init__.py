"""
Flange QC Tracker
Flask Application Factory.

Usage:
    from flange_qc import create_app
    app = create_app()           # defaults to APP_ENV or "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, abort, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate

from flange_qc.config import config
from flange_qc.models import db
from flange_qc.middleware.logging_config import configure_logging
from flange_qc.middleware.rate_limiter import init_rate_limits
from flange_qc.middleware.security_headers import init_security_headers
from flange_qc.middleware.timing import init_request_timing
from flange_qc.utils.errors import register_error_handlers

logger = logging.getLogger(__name__)

migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # no global limit; applied per blueprint
)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: One of "development", "testing", "production".
                     Defaults to the APP_ENV env var, or "development".

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    # Instantiated so ProductionConfig can refuse to start without its env vars
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    os.makedirs(app.instance_path, exist_ok=True)
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if db_uri.startswith("sqlite:///") and ":memory:" not in db_uri:
        os.makedirs(os.path.dirname(db_uri[len("sqlite:///"):]) or ".", exist_ok=True)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    init_security_headers(app)
    init_request_timing(app)

    # ── Request guards (input length + Content-Type) ─────────────────────
    @app.before_request
    def _guard_request():
        max_len = app.config.get("MAX_CONTENT_LENGTH")
        if max_len and request.content_length and request.content_length > max_len:
            abort(413, description="Request body too large")
        if request.method in ("POST", "PUT", "PATCH") and request.path.startswith("/api/"):
            ct = request.content_type or ""
            if "json" in ct or "multipart/form-data" in ct:
                return None
            if request.content_length:
                abort(415, description="Content-Type must be application/json")
        return None

    # ── Import all models so create_all / Alembic see them ───────────────
    from flange_qc.models import hierarchy as _hierarchy_models  # noqa: F401
    from flange_qc.models import flange as _flange_models        # noqa: F401

    with app.app_context():
        db.create_all()

    # ── Blueprints ───────────────────────────────────────────────────────
    from flange_qc.blueprints.hierarchy_bp import hierarchy_bp
    from flange_qc.blueprints.flange_bp import flange_bp
    from flange_qc.blueprints.upload_bp import upload_bp
    from flange_qc.blueprints.health_bp import health_bp

    app.register_blueprint(hierarchy_bp)
    app.register_blueprint(flange_bp)
    app.register_blueprint(upload_bp)
    app.register_blueprint(health_bp)

    register_error_handlers(app)

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    logger.info("Flange QC Tracker started config=%s", config_name)
    return app
