"""
Configuration and helper tests.

Run with: pytest tests/test_config.py -v
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from config import load_config
from crm.analytics import AnalyticsConfig
from crm.scoring import ChurnScoringConfig
from crm.utils.helpers import calculate_percentage_change, days_between, format_percentage, safe_divide


class TestConfigFile:
    def test_sections_present(self):
        config = load_config()
        for section in ["api", "storage", "database", "logging", "scoring", "analytics"]:
            assert section in config

    def test_shipped_defaults_match_models(self):
        config = load_config()

        assert ChurnScoringConfig.from_config(config) == ChurnScoringConfig()
        assert AnalyticsConfig.from_config(config) == AnalyticsConfig()

    def test_database_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///tmp/crm-test.db")
        assert load_config()["database"]["url"] == "sqlite:///tmp/crm-test.db"

    def test_storage_backend_and_api_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("CRM_STORAGE_BACKEND", "sql")
        monkeypatch.setenv("CRM_API_URL", "http://crm-api:8000")

        config = load_config()
        assert config["storage"]["backend"] == "sql"
        assert config["dashboard"]["api_url"] == "http://crm-api:8000"

    def test_custom_path(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("storage:\n  backend: sql\n")

        assert load_config(path)["storage"]["backend"] == "sql"


class TestHelpers:
    def test_days_between_date_and_datetime(self):
        assert days_between(date(2024, 6, 1), datetime(2024, 6, 15, 12)) == 14.5

    def test_days_between_converts_offsets_to_utc(self):
        """10:00 at UTC+05:00 is 05:00 UTC, seven hours before noon."""
        earlier = datetime(2024, 6, 15, 10, tzinfo=timezone(timedelta(hours=5)))
        assert days_between(earlier, datetime(2024, 6, 15, 12)) == pytest.approx(7 / 24)

    def test_days_between_future_is_negative(self):
        assert days_between(datetime(2024, 6, 2), datetime(2024, 6, 1)) == -1

    def test_format_percentage(self):
        assert format_percentage(6.5) == "6.5%"
        assert format_percentage(100 / 3) == "33.3%"

    def test_safe_divide(self):
        assert safe_divide(1, 0) == 0.0
        assert safe_divide(1, 4) == 0.25

    def test_percentage_change(self):
        assert calculate_percentage_change(200, 250) == 25.0
