"""Configuration system for the Taxify tax engine.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults. Statutory numbers live in
``tax_rules``; this module only holds tunable advisory thresholds and
runtime settings.

Usage:
    from taxify_core.config import TaxifyConfig

    # Load from environment variables and .env file
    config = TaxifyConfig()

    # Access optimization thresholds
    print(config.optimization.bracket_warning_window)
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OptimizationSettings(BaseSettings):
    """Thresholds for the optimization advisory engine.

    A suggestion is suppressed when the unused capacity behind it is below
    its minimum, since the saving would not be worth the taxpayer's effort.

    Environment Variables:
        TAXIFY_OPTIMIZATION_RETIREMENT_MIN_CAPACITY: Minimum unused RMF/SSF/pension room
        TAXIFY_OPTIMIZATION_LIFE_INSURANCE_MIN_CAPACITY: Minimum unused life insurance room
        TAXIFY_OPTIMIZATION_HEALTH_INSURANCE_MIN_CAPACITY: Minimum unused health insurance room
        TAXIFY_OPTIMIZATION_HOME_LOAN_MIN_CAPACITY: Minimum unused home loan interest room
        TAXIFY_OPTIMIZATION_DONATION_MIN_CAPACITY: Minimum unused donation room
        TAXIFY_OPTIMIZATION_BRACKET_WARNING_WINDOW: Distance to next bracket that triggers a warning
        TAXIFY_OPTIMIZATION_RETIREMENT_INCOME_CAP_RATE: Share of income investable in RMF/SSF
        TAXIFY_OPTIMIZATION_PARENT_ALLOWANCE_POTENTIAL: Parent allowance assumed for the reminder
    """

    model_config = SettingsConfigDict(
        env_prefix="TAXIFY_OPTIMIZATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    retirement_min_capacity: Decimal = Field(
        default=Decimal("10000"),
        ge=0,
        description="Minimum unused retirement capacity worth suggesting",
    )
    life_insurance_min_capacity: Decimal = Field(
        default=Decimal("5000"),
        ge=0,
        description="Minimum unused life insurance capacity worth suggesting",
    )
    health_insurance_min_capacity: Decimal = Field(
        default=Decimal("1000"),
        ge=0,
        description="Minimum unused health insurance capacity worth suggesting",
    )
    home_loan_min_capacity: Decimal = Field(
        default=Decimal("5000"),
        ge=0,
        description="Minimum unused home loan interest capacity worth suggesting",
    )
    donation_min_capacity: Decimal = Field(
        default=Decimal("10000"),
        ge=0,
        description="Minimum unused donation capacity worth suggesting",
    )
    bracket_warning_window: Decimal = Field(
        default=Decimal("100000"),
        gt=0,
        description="Warn when taxable income is this close to the next bracket",
    )
    retirement_income_cap_rate: Decimal = Field(
        default=Decimal("0.30"),
        gt=0,
        le=1,
        description="RMF/SSF contributions are deductible up to this share of income",
    )
    parent_allowance_potential: Decimal = Field(
        default=Decimal("60000"),
        ge=0,
        description="Allowance assumed when reminding about parent support (two parents)",
    )


class TaxifyConfig(BaseSettings):
    """Root configuration for the Taxify engine.

    Environment Variables:
        TAXIFY_ENV: Environment name (development, staging, production, test)
        TAXIFY_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        TAXIFY_DEFAULT_TAX_YEAR: Tax year used when a caller does not pass one

    Example:
        config = TaxifyConfig(
            optimization=OptimizationSettings(bracket_warning_window=Decimal("50000")),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="TAXIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    default_tax_year: Optional[int] = Field(
        default=None,
        ge=2000,
        le=2100,
        description="Tax year used when none is given",
    )

    optimization: OptimizationSettings = Field(default_factory=OptimizationSettings)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        """Check if debug logging is enabled."""
        return self.log_level == "DEBUG"
