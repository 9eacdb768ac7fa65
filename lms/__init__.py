import logging
import os
from datetime import UTC
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import Flask
from flask_migrate import Migrate

from .config import MIGRATIONS_DIR, config_by_name
from .models import db
from .settings_store import SettingsStore

migrate = Migrate()


def create_app(config_name=None):
    # Load .env so gunicorn (production) picks up env vars too
    from dotenv import load_dotenv

    load_dotenv(Path(__file__).resolve().parent.parent / ".env")

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    config_cls = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_cls)
    if hasattr(config_cls, "init_app"):
        config_cls.init_app(app)

    _configure_logging(app)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db, directory=str(MIGRATIONS_DIR), render_as_batch=True)
    app.extensions["settings_store"] = SettingsStore()

    # Register blueprints
    from .api.routes import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    from .errors import register_error_handlers

    register_error_handlers(app)

    from .bootstrap import register_commands

    register_commands(app)

    # Health check endpoints
    @app.route("/ping")
    def ping():
        from datetime import datetime

        return {
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat(),
        }, 200

    @app.route("/health")
    def health():
        from datetime import datetime

        from .bootstrap import current_revision

        result = {"timestamp": datetime.now(UTC).isoformat()}

        try:
            db.session.execute(db.text("SELECT 1"))
            result["database"] = {"status": "ok", "revision": current_revision()}
        except Exception:
            app.logger.exception("Health check database probe failed.")
            db.session.rollback()
            result["database"] = {"status": "error", "error": "unavailable"}

        all_ok = result["database"]["status"] == "ok"
        result["status"] = "ok" if all_ok else "degraded"
        return result, 200 if all_ok else 503

    # Apply pending migrations and seed default settings on startup
    if app.config.get("AUTO_MIGRATE"):
        from .bootstrap import migrate_database, seed_default_settings

        with app.app_context():
            migrate_database(app)
            if app.config.get("SEED_DEFAULT_SETTINGS"):
                seed_default_settings(app)
            app.extensions["settings_store"].load()

    return app


def _configure_logging(app):
    """Set up file-based logging with rotation outside debug and testing."""
    app.logger.setLevel(getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO))
    if app.debug or app.testing:
        return

    log_dir = Path(app.config["LOG_DIR"])
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_dir / "lms.log",
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=5,
    )
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    file_handler.setLevel(logging.INFO)
    app.logger.addHandler(file_handler)
