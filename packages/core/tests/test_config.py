"""Tests for the configuration system."""

from decimal import Decimal
from pathlib import Path

import pytest

from taxify_core.config import OptimizationSettings, TaxifyConfig


class TestOptimizationSettings:
    """Test suite for OptimizationSettings."""

    def test_default_values(self):
        settings = OptimizationSettings()

        assert settings.retirement_min_capacity == Decimal("10000")
        assert settings.life_insurance_min_capacity == Decimal("5000")
        assert settings.health_insurance_min_capacity == Decimal("1000")
        assert settings.home_loan_min_capacity == Decimal("5000")
        assert settings.donation_min_capacity == Decimal("10000")
        assert settings.bracket_warning_window == Decimal("100000")
        assert settings.retirement_income_cap_rate == Decimal("0.30")
        assert settings.parent_allowance_potential == Decimal("60000")

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValueError):
            OptimizationSettings(retirement_min_capacity=Decimal("-1"))

    def test_warning_window_must_be_positive(self):
        with pytest.raises(ValueError):
            OptimizationSettings(bracket_warning_window=Decimal("0"))

    def test_income_cap_rate_bounds(self):
        OptimizationSettings(retirement_income_cap_rate=Decimal("1"))

        with pytest.raises(ValueError):
            OptimizationSettings(retirement_income_cap_rate=Decimal("1.1"))

        with pytest.raises(ValueError):
            OptimizationSettings(retirement_income_cap_rate=Decimal("0"))

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TAXIFY_OPTIMIZATION_BRACKET_WARNING_WINDOW", "50000")

        settings = OptimizationSettings()
        assert settings.bracket_warning_window == Decimal("50000")


class TestTaxifyConfig:
    """Test suite for TaxifyConfig."""

    def test_default_values(self):
        config = TaxifyConfig()

        assert config.env == "development"
        assert config.log_level == "INFO"
        assert config.default_tax_year is None
        assert isinstance(config.optimization, OptimizationSettings)

    def test_env_validation(self):
        TaxifyConfig(env="development")
        TaxifyConfig(env="staging")
        TaxifyConfig(env="production")
        TaxifyConfig(env="test")

        with pytest.raises(ValueError):
            TaxifyConfig(env="invalid")

    def test_env_normalization(self):
        assert TaxifyConfig(env="PRODUCTION").env == "production"
        assert TaxifyConfig(env="  Staging  ").env == "staging"

    def test_log_level_validation(self):
        assert TaxifyConfig(log_level="debug").log_level == "DEBUG"
        assert TaxifyConfig(log_level="warning").log_level == "WARNING"

        with pytest.raises(ValueError):
            TaxifyConfig(log_level="VERBOSE")

    def test_tax_year_bounds(self):
        assert TaxifyConfig(default_tax_year=2024).default_tax_year == 2024

        with pytest.raises(ValueError):
            TaxifyConfig(default_tax_year=1999)

    def test_is_production(self):
        assert TaxifyConfig(env="production").is_production
        assert not TaxifyConfig(env="development").is_production

    def test_is_debug(self):
        assert TaxifyConfig(log_level="DEBUG").is_debug
        assert not TaxifyConfig(log_level="INFO").is_debug

    def test_load_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TAXIFY_ENV", "staging")
        monkeypatch.setenv("TAXIFY_LOG_LEVEL", "error")
        monkeypatch.setenv("TAXIFY_DEFAULT_TAX_YEAR", "2025")

        config = TaxifyConfig()

        assert config.env == "staging"
        assert config.log_level == "ERROR"
        assert config.default_tax_year == 2025

    def test_load_from_env_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / ".env").write_text("TAXIFY_ENV=test\nTAXIFY_LOG_LEVEL=DEBUG\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("TAXIFY_ENV", raising=False)
        monkeypatch.delenv("TAXIFY_LOG_LEVEL", raising=False)

        config = TaxifyConfig()

        assert config.env == "test"
        assert config.is_debug

    def test_nested_optimization_settings(self):
        config = TaxifyConfig(
            optimization=OptimizationSettings(bracket_warning_window=Decimal("50000")),
        )
        assert config.optimization.bracket_warning_window == Decimal("50000")
