import os
from decimal import Decimal


class Settings:
    def __init__(self):
        self.app_name = "Center Billing"
        self.api_version = "1.0.0"
        self.environment = os.getenv("CENTER_BILLING_ENV", "development")
        self.database_url = os.getenv("CENTER_BILLING_DATABASE_URL", "sqlite:///./center_billing.db")
        self.log_level = os.getenv("CENTER_BILLING_LOG_LEVEL", "INFO")
        self.price_per_session = Decimal(os.getenv("CENTER_BILLING_PRICE_PER_SESSION", "150000"))
        self.expiring_threshold = 5
        # Monday, Wednesday (0 = Sunday)
        self.default_schedule_days = frozenset({1, 3})
        self.projection_horizon_days = 365


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
