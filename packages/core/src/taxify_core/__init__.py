"""Taxify Core - Thai personal income tax calculation and optimization."""

__version__ = "0.1.0"

from .calculator import (
    TaxCalculator,
    calculate_alternative_tax,
    calculate_expense_deduction,
    calculate_progressive_tax,
    calculate_tax,
    compare_deduction_scenarios,
    income_entries_from_totals,
)
from .config import OptimizationSettings, TaxifyConfig
from .exceptions import (
    ConfigurationError,
    MissingRuleError,
    TaxifyError,
    UnsupportedDeductionModeError,
    ValidationError,
)
from .filing import (
    estimate_tax_to_date,
    get_filing_deadlines,
    get_filing_status,
    summarize_withholding,
)
from .logging_config import configure_logging
from .models import (
    DeductionMode,
    Deductions,
    IncomeEntry,
    IncomeType,
    OptimizationResult,
    OptimizationSuggestion,
    PenaltyKind,
    PenaltyResult,
    PenaltyScenario,
    TaxCalculationInput,
    TaxCalculationResult,
    TaxMethod,
    TaxOptimizationInput,
)
from .optimization import TaxOptimizationAnalyzer, analyze_optimization
from .penalties import calculate_penalties, calculate_surcharge

__all__ = [
    # Calculation
    "TaxCalculator",
    "calculate_tax",
    "calculate_expense_deduction",
    "calculate_progressive_tax",
    "calculate_alternative_tax",
    "compare_deduction_scenarios",
    "income_entries_from_totals",
    # Penalties
    "calculate_penalties",
    "calculate_surcharge",
    # Optimization
    "TaxOptimizationAnalyzer",
    "analyze_optimization",
    # Filing
    "summarize_withholding",
    "estimate_tax_to_date",
    "get_filing_deadlines",
    "get_filing_status",
    # Models
    "IncomeType",
    "DeductionMode",
    "TaxMethod",
    "PenaltyKind",
    "IncomeEntry",
    "Deductions",
    "TaxCalculationInput",
    "TaxCalculationResult",
    "PenaltyScenario",
    "PenaltyResult",
    "TaxOptimizationInput",
    "OptimizationResult",
    "OptimizationSuggestion",
    # Configuration
    "TaxifyConfig",
    "OptimizationSettings",
    "configure_logging",
    # Errors
    "TaxifyError",
    "ValidationError",
    "UnsupportedDeductionModeError",
    "ConfigurationError",
    "MissingRuleError",
]
