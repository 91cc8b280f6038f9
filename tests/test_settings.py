from decimal import Decimal

from backend.app.core.settings import get_settings


def test_settings_defaults():
    settings = get_settings()
    assert settings.app_name == "Center Billing"
    assert isinstance(settings.database_url, str) and settings.database_url
    assert settings.price_per_session == Decimal("150000")
    assert settings.expiring_threshold == 5
    assert settings.default_schedule_days == frozenset({1, 3})
    assert settings.projection_horizon_days == 365


def test_settings_singleton():
    assert get_settings() is get_settings()
