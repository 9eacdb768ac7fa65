"""Process-wide cache over the ``system_settings`` table."""

import logging
import threading
from decimal import Decimal, InvalidOperation

from flask import current_app

from .models import SystemSetting, db

logger = logging.getLogger(__name__)


class SettingsStore:
    """Load settings once, serve them from memory, write through on update."""

    def __init__(self):
        self._lock = threading.Lock()
        self._values = None

    @property
    def loaded(self):
        return self._values is not None

    def load(self):
        rows = SystemSetting.query.all()
        values = {row.setting_name: row.setting_value for row in rows}
        with self._lock:
            self._values = values
        logger.info("Loaded %d system settings", len(rows))
        return values

    def invalidate(self):
        with self._lock:
            self._values = None

    def reload(self):
        self.invalidate()
        self.load()

    def _snapshot(self):
        """Return the cached mapping, loading it first if needed."""
        with self._lock:
            values = self._values
        if values is None:
            values = self.load()
        return values

    def get(self, name, default=None):
        value = self._snapshot().get(name)
        return default if value is None else value

    def get_int(self, name, default=None):
        value = self.get(name)
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Setting %s=%r is not an integer", name, value)
            return default

    def get_decimal(self, name, default=None):
        value = self.get(name)
        if value is None:
            return default
        try:
            return Decimal(value)
        except InvalidOperation:
            logger.warning("Setting %s=%r is not a decimal", name, value)
            return default

    def all(self):
        return dict(self._snapshot())

    def set(self, name, value, description=None):
        """Insert or update a setting and refresh the cached value."""
        stored = None if value is None else str(value)
        entry = SystemSetting.query.filter_by(setting_name=name).first()
        if entry:
            entry.setting_value = stored
            if description is not None:
                entry.description = description
        else:
            entry = SystemSetting(setting_name=name, setting_value=stored, description=description)
            db.session.add(entry)
        db.session.commit()
        # Copy on write; an unloaded cache picks the row up on its next load
        with self._lock:
            if self._values is not None:
                self._values = {**self._values, name: stored}
        logger.info("System setting %s updated", name)
        return entry

    def delete(self, name):
        entry = SystemSetting.query.filter_by(setting_name=name).first()
        if entry is None:
            return False
        db.session.delete(entry)
        db.session.commit()
        with self._lock:
            if self._values is not None:
                self._values = {key: value for key, value in self._values.items() if key != name}
        logger.info("System setting %s deleted", name)
        return True


def get_settings_store():
    return current_app.extensions["settings_store"]
