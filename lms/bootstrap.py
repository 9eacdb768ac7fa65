"""Schema lifecycle: migrate, reset and seed the library database."""

from pathlib import Path

import click
from alembic.runtime.migration import MigrationContext
from flask import current_app
from flask_migrate import upgrade
from sqlalchemy.engine import make_url

from .models import SystemSetting, db

# (setting_name, config key holding the default, description)
DEFAULT_SETTINGS = (
    ("loan_period_days", "DEFAULT_LOAN_DAYS", "Number of days a book may be kept on loan."),
    ("max_loans_per_member", "MAX_LOANS_PER_MEMBER", "Maximum number of outstanding loans per member."),
    ("max_renewals", "MAX_RENEWALS", "Maximum number of times a loan may be renewed."),
    ("fine_per_day", "FINE_PER_DAY", "Fine charged per overdue day."),
    ("reservation_hold_days", "RESERVATION_HOLD_DAYS", "Days an available reservation is held for pickup."),
)


def _ensure_sqlite_directory(uri):
    url = make_url(uri)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).resolve().parent.mkdir(parents=True, exist_ok=True)


def migrate_database(app):
    """Apply every pending migration."""
    _ensure_sqlite_directory(app.config["SQLALCHEMY_DATABASE_URI"])
    upgrade()
    app.logger.info("Database schema at revision %s", current_revision())


def reset_database(app):
    """Drop the whole schema if present, then rebuild it from migrations."""
    _ensure_sqlite_directory(app.config["SQLALCHEMY_DATABASE_URI"])
    db.session.remove()
    db.drop_all()
    db.session.execute(db.text("DROP TABLE IF EXISTS alembic_version"))
    db.session.commit()
    app.logger.warning("All library tables dropped")

    migrate_database(app)

    store = app.extensions.get("settings_store")
    if store is not None:
        store.invalidate()


def seed_default_settings(app):
    """Insert missing default settings. Existing rows are never overwritten.

    Returns the number of rows created.
    """
    existing = {name for (name,) in db.session.query(SystemSetting.setting_name)}
    created = 0
    for name, config_key, description in DEFAULT_SETTINGS:
        if name in existing:
            continue
        db.session.add(
            SystemSetting(
                setting_name=name,
                setting_value=str(app.config[config_key]),
                description=description,
            )
        )
        created += 1
    if created:
        db.session.commit()
        app.logger.info("Seeded %d default system settings", created)

        store = app.extensions.get("settings_store")
        if store is not None:
            store.invalidate()
    return created


def current_revision():
    with db.engine.connect() as connection:
        return MigrationContext.configure(connection).get_current_revision()


def register_commands(app):
    @app.cli.command("reset-db")
    @click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
    def reset_db_command(yes):
        """Drop every library table and rebuild the schema."""
        if not yes:
            click.confirm("This permanently deletes all library data. Continue?", abort=True)
        reset_database(current_app)
        if current_app.config.get("SEED_DEFAULT_SETTINGS"):
            seed_default_settings(current_app)
        click.echo(f"Database reset to revision {current_revision()}.")

    @app.cli.command("seed-settings")
    def seed_settings_command():
        """Insert any missing default system settings."""
        created = seed_default_settings(current_app)
        click.echo(f"{created} setting(s) created.")
