"""Tests for Settings validation."""

import pytest
from pydantic import ValidationError

from stocksignal.config import Settings


class TestSettingsDefaults:
    def test_default_is_development(self):
        s = Settings(_env_file=None)
        assert s.app_env == "development"
        assert not s.is_production

    def test_backtest_defaults(self):
        s = Settings(_env_file=None)
        assert s.initial_capital == 10_000.0
        assert s.transaction_fee == 0.0
        assert s.history_buffer == 20
        assert s.verbose is False

    def test_api_key_optional_in_dev(self):
        s = Settings(_env_file=None)
        assert s.alpha_vantage_api_key is None
        assert s.alpha_vantage_base_url.startswith("https://www.alphavantage.co")

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("TRANSACTION_FEE", "2.5")
        s = Settings(_env_file=None)
        assert s.transaction_fee == 2.5


class TestValueValidation:
    def test_rejects_non_positive_capital(self):
        with pytest.raises(ValidationError, match="INITIAL_CAPITAL"):
            Settings(_env_file=None, initial_capital=0)

    def test_rejects_negative_fee(self):
        with pytest.raises(ValidationError, match="TRANSACTION_FEE"):
            Settings(_env_file=None, transaction_fee=-1)

    def test_rejects_negative_buffer(self):
        with pytest.raises(ValidationError, match="HISTORY_BUFFER"):
            Settings(_env_file=None, history_buffer=-1)


class TestProductionValidation:
    def test_rejects_missing_api_key(self):
        with pytest.raises(ValidationError, match="ALPHA_VANTAGE_API_KEY"):
            Settings(_env_file=None, app_env="production", debug=False)

    def test_rejects_debug_true(self):
        with pytest.raises(ValidationError, match="DEBUG"):
            Settings(
                _env_file=None,
                app_env="production",
                alpha_vantage_api_key="real-key",
                debug=True,
            )

    def test_accepts_valid_production_config(self):
        s = Settings(
            _env_file=None,
            app_env="production",
            alpha_vantage_api_key="real-key",
            debug=False,
        )
        assert s.is_production
