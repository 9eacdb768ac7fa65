"""Tests for the cached system settings store."""

from decimal import Decimal

from lms.models import SystemSetting
from lms.settings_store import SettingsStore, get_settings_store


def test_store_is_registered_on_app(app, settings_store):
    assert get_settings_store() is settings_store


def test_get_loads_lazily_and_returns_default(db, settings_store):
    db.session.add(SystemSetting(setting_name="max_renewals", setting_value="2"))
    db.session.commit()

    assert not settings_store.loaded
    assert settings_store.get("max_renewals") == "2"
    assert settings_store.loaded
    assert settings_store.get("missing", "fallback") == "fallback"


def test_null_value_falls_back_to_default(db, settings_store):
    db.session.add(SystemSetting(setting_name="banner_text", setting_value=None))
    db.session.commit()
    assert settings_store.get("banner_text", "none") == "none"


def test_cache_does_not_see_direct_writes_until_reload(db, settings_store):
    settings_store.load()
    db.session.add(SystemSetting(setting_name="fine_per_day", setting_value="0.50"))
    db.session.commit()

    assert settings_store.get("fine_per_day") is None
    settings_store.reload()
    assert settings_store.get("fine_per_day") == "0.50"


def test_set_inserts_then_updates(db, settings_store):
    settings_store.set("loan_period_days", 14, description="Days per loan")
    settings_store.set("loan_period_days", 21)

    entry = SystemSetting.query.filter_by(setting_name="loan_period_days").one()
    assert entry.setting_value == "21"
    assert entry.description == "Days per loan"
    assert settings_store.get("loan_period_days") == "21"


def test_set_is_visible_to_a_fresh_store(db, settings_store):
    settings_store.set("reservation_hold_days", 5)
    fresh = SettingsStore()
    assert fresh.get_int("reservation_hold_days") == 5


def test_typed_getters(db, settings_store):
    settings_store.set("fine_per_day", "0.25")
    settings_store.set("max_loans_per_member", "five")

    assert settings_store.get_decimal("fine_per_day") == Decimal("0.25")
    assert settings_store.get_int("max_loans_per_member", 5) == 5
    assert settings_store.get_decimal("max_loans_per_member", Decimal("0")) == Decimal("0")
    assert settings_store.get_int("absent") is None


def test_delete(db, settings_store):
    settings_store.set("obsolete", "x")
    assert settings_store.delete("obsolete") is True
    assert settings_store.delete("obsolete") is False
    assert "obsolete" not in settings_store.all()
    assert SystemSetting.query.count() == 0


def test_all_returns_a_copy(db, settings_store):
    settings_store.set("a", "1")
    snapshot = settings_store.all()
    snapshot["a"] = "changed"
    assert settings_store.get("a") == "1"


def test_reads_survive_invalidation_right_after_load(db, settings_store, monkeypatch):
    settings_store.set("max_renewals", "2")
    load = settings_store.load

    def load_then_invalidate():
        values = load()
        # A reset or reseed landing between the load and the read
        settings_store.invalidate()
        return values

    monkeypatch.setattr(settings_store, "load", load_then_invalidate)

    assert settings_store.get("max_renewals") == "2"
    assert settings_store.all() == {"max_renewals": "2"}


def test_writes_with_unloaded_cache(db, settings_store):
    settings_store.invalidate()
    settings_store.set("a", "1")
    assert not settings_store.loaded
    assert settings_store.get("a") == "1"

    settings_store.invalidate()
    assert settings_store.delete("a") is True
    assert not settings_store.loaded
    assert settings_store.get("a") is None


def test_earlier_snapshot_is_not_mutated_by_writes(db, settings_store):
    settings_store.set("a", "1")
    before = settings_store._snapshot()
    settings_store.set("a", "2")
    settings_store.set("b", "3")
    assert before == {"a": "1"}
    assert settings_store.all() == {"a": "2", "b": "3"}
