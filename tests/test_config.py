"""Tests for environment-driven settings."""

import os
from unittest.mock import patch

from recon_insights.config import EngineSettings, get_settings


class TestGetSettings:
    """Tests for get_settings."""

    def test_defaults(self):
        """Test defaults when no RECON_* variables are set."""
        env = {k: v for k, v in os.environ.items() if not k.startswith("RECON_")}
        with patch.dict(os.environ, env, clear=True):
            settings = get_settings()

        assert settings == EngineSettings()
        assert settings.locale.symbol == "₹"
        assert settings.locale.grouping == "indian"

    def test_overrides(self):
        """Test every variable is read."""
        with patch.dict(os.environ, {
            "RECON_CURRENCY_SYMBOL": "$",
            "RECON_DIGIT_GROUPING": "Western",
            "RECON_DECIMALS": "0",
            "RECON_EXPORT_DIR": "/tmp/exports",
            "RECON_LOG_LEVEL": "debug",
        }):
            settings = get_settings()

        assert settings.currency_symbol == "$"
        assert settings.digit_grouping == "western"
        assert settings.decimals == 0
        assert settings.export_dir == "/tmp/exports"
        assert settings.log_level == "DEBUG"
        assert settings.locale.decimals == 0

    def test_invalid_values_fall_back(self):
        """Test bad grouping and decimals fall back to defaults."""
        with patch.dict(os.environ, {"RECON_DIGIT_GROUPING": "metric", "RECON_DECIMALS": "two"}):
            settings = get_settings()

        assert settings.digit_grouping == "indian"
        assert settings.decimals == 2

    def test_decimals_are_clamped(self):
        """Test decimals are kept within 0..6."""
        with patch.dict(os.environ, {"RECON_DECIMALS": "12"}):
            assert get_settings().decimals == 6
        with patch.dict(os.environ, {"RECON_DECIMALS": "-3"}):
            assert get_settings().decimals == 0
