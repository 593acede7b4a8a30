"""
Unit tests for engine settings loading.
"""

from decimal import Decimal
from pathlib import Path

import pytest

from src.config import AnalyticsConfig, CleanerConfig, Settings, load_settings

SETTINGS_FILE = Path(__file__).resolve().parents[2] / "config" / "analytics.yaml"


class TestSettings:
    """Tests for Settings and load_settings"""

    def test_defaults(self):
        settings = load_settings()

        assert settings.cleaner.unit_threshold == Decimal("1000")
        assert settings.cleaner.outlier_mrp == Decimal("10000")
        assert settings.analytics.top_n == 10
        assert settings.analytics.stock_threshold == 20
        assert settings.rules_path is None

    def test_shipped_file_matches_defaults(self):
        settings = load_settings(SETTINGS_FILE)

        assert settings.cleaner == CleanerConfig()
        assert settings.analytics == AnalyticsConfig()
        assert settings.rules_path == "config/validation_rules.yaml"

    def test_partial_override(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("analytics:\n  top_n: 3\n  mrp_threshold: 150\n")

        settings = load_settings(path)

        assert settings.analytics.top_n == 3
        assert settings.analytics.mrp_threshold == Decimal("150")
        assert settings.analytics.premium_mrp == Decimal("500")
        assert settings.cleaner == CleanerConfig()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")

        assert load_settings(path) == Settings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ValueError, match="mapping"):
            load_settings(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("cleaner:\n  unit_divisor: 0\n")

        # pydantic's ValidationError is a ValueError
        with pytest.raises(ValueError):
            load_settings(path)
