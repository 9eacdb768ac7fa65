import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
MIGRATIONS_DIR = BASE_DIR / "migrations"


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or os.urandom(32).hex()
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", f"sqlite:///{BASE_DIR / 'lms.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Schema lifecycle
    AUTO_MIGRATE = os.environ.get("AUTO_MIGRATE", "true").lower() == "true"
    SEED_DEFAULT_SETTINGS = os.environ.get("SEED_DEFAULT_SETTINGS", "true").lower() == "true"

    # Defaults written to system_settings on first run
    DEFAULT_LOAN_DAYS = int(os.environ.get("DEFAULT_LOAN_DAYS", "14"))
    MAX_LOANS_PER_MEMBER = int(os.environ.get("MAX_LOANS_PER_MEMBER", "5"))
    MAX_RENEWALS = int(os.environ.get("MAX_RENEWALS", "2"))
    FINE_PER_DAY = os.environ.get("FINE_PER_DAY", "0.25")
    RESERVATION_HOLD_DAYS = int(os.environ.get("RESERVATION_HOLD_DAYS", "3"))

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_DIR = os.environ.get("LOG_DIR", str(BASE_DIR / "logs"))


class DevelopmentConfig(Config):
    DEBUG = True

    @classmethod
    def init_app(cls, app):
        if not os.environ.get("SECRET_KEY"):
            app.logger.warning("SECRET_KEY not set; using an ephemeral key.")


_PLACEHOLDER_MARKERS = ("changeme", "change-this", "replace", "secret", "example", "default")


def _check_secret_key(secret_key):
    if not secret_key:
        raise RuntimeError("Production needs SECRET_KEY.")
    if len(secret_key) < 32:
        raise RuntimeError("SECRET_KEY must be at least 32 characters in production.")
    if any(marker in secret_key.lower() for marker in _PLACEHOLDER_MARKERS):
        raise RuntimeError("SECRET_KEY looks like a placeholder; use a random value.")


class ProductionConfig(Config):
    DEBUG = False

    @classmethod
    def init_app(cls, app):
        _check_secret_key(os.environ.get("SECRET_KEY", "").strip())

        if not os.environ.get("DATABASE_URL", "").strip():
            raise RuntimeError("Production needs DATABASE_URL.")

        # SettingsStore is process-local; extra workers would serve stale settings
        workers = os.environ.get("WEB_CONCURRENCY")
        if workers:
            try:
                count = int(workers)
            except ValueError as exc:
                raise RuntimeError(f"WEB_CONCURRENCY={workers!r} is not an integer.") from exc
            if count != 1:
                raise RuntimeError(f"WEB_CONCURRENCY={count}: the settings cache needs a single worker.")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False
    AUTO_MIGRATE = False
    SEED_DEFAULT_SETTINGS = False
    SECRET_KEY = "testing-secret-key"


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
