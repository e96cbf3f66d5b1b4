"""Tests for the tax optimization analyzer."""

from datetime import date
from decimal import Decimal

import pytest

from taxify_core import (
    Deductions,
    IncomeType,
    OptimizationSettings,
    TaxOptimizationAnalyzer,
    TaxOptimizationInput,
    analyze_optimization,
    calculate_progressive_tax,
)
from taxify_core.models import Priority, SuggestionCategory


def _by_id(result):
    return {s.id: s for s in result.suggestions}


@pytest.fixture
def analyzer() -> TaxOptimizationAnalyzer:
    return TaxOptimizationAnalyzer()


@pytest.fixture
def mid_income_input() -> TaxOptimizationInput:
    """800,000 taxable income (20% bracket) with no deductions claimed."""
    taxable = Decimal("800000")
    return TaxOptimizationInput(
        tax_year=2024,
        taxable_income=taxable,
        current_tax_amount=calculate_progressive_tax(taxable),
    )


class TestBracketPosition:
    """Tests for bracket lookup and distance to the next bracket."""

    def test_current_and_next_bracket(self, analyzer, mid_income_input):
        result = analyzer.analyze(mid_income_input)

        assert result.current_bracket.rate == Decimal("0.20")
        assert result.next_bracket.rate == Decimal("0.25")
        assert result.amount_to_next_bracket == Decimal("200001")

    def test_effective_rate(self, analyzer, mid_income_input):
        result = analyzer.analyze(mid_income_input)
        assert result.effective_tax_rate == Decimal("74999.8") / Decimal("800000")

    def test_top_bracket_has_no_next(self, analyzer):
        result = analyzer.analyze(TaxOptimizationInput(
            tax_year=2024,
            taxable_income=Decimal("6000000"),
            current_tax_amount=Decimal("1614999.65"),
        ))

        assert result.current_bracket.rate == Decimal("0.35")
        assert result.next_bracket is None
        assert result.amount_to_next_bracket == 0
        assert "bracket-warning" not in _by_id(result)

    def test_zero_income(self, analyzer):
        result = analyzer.analyze(TaxOptimizationInput(
            tax_year=2024,
            taxable_income=Decimal("0"),
            current_tax_amount=Decimal("0"),
        ))

        assert result.current_bracket.rate == 0
        assert result.amount_to_next_bracket == Decimal("150001")
        assert result.effective_tax_rate == 0
        assert all(s.potential_saving == 0 for s in result.suggestions)


class TestSuggestions:
    """Tests for individual suggestion rules."""

    def test_retirement_capped_by_income(self, analyzer, mid_income_input):
        """30% of income (240,000) binds before the 500,000 combined cap."""
        retirement = _by_id(analyzer.analyze(mid_income_input))["maximize-retirement"]

        assert retirement.potential_saving == Decimal("48000")
        assert retirement.category == SuggestionCategory.INVESTMENT_OPPORTUNITY
        assert retirement.priority == Priority.HIGH
        assert retirement.deadline == date(2024, 12, 31)

    def test_retirement_medium_priority_in_low_bracket(self, analyzer):
        result = analyzer.analyze(TaxOptimizationInput(
            tax_year=2024,
            taxable_income=Decimal("400000"),
            current_tax_amount=calculate_progressive_tax(Decimal("400000")),
        ))
        assert _by_id(result)["maximize-retirement"].priority == Priority.MEDIUM

    def test_insurance_home_loan_and_donation(self, analyzer, mid_income_input):
        suggestions = _by_id(analyzer.analyze(mid_income_input))

        assert suggestions["life-insurance"].potential_saving == Decimal("20000")
        assert suggestions["health-insurance"].potential_saving == Decimal("5000")
        assert suggestions["home-loan"].potential_saving == Decimal("20000")
        # 10% of 800,000 donated counts double
        assert suggestions["donation-strategy"].potential_saving == Decimal("32000")
        assert suggestions["parent-allowance"].potential_saving == Decimal("12000")

    def test_small_capacity_suppressed(self, analyzer, mid_income_input):
        nearly_maxed = mid_income_input.model_copy(update={
            "current_deductions": Deductions(
                rmf=Decimal("495000"),
                life_insurance=Decimal("96000"),
                health_insurance=Decimal("24500"),
                home_loan_interest=Decimal("96000"),
                donation=Decimal("75000"),
                parent_allowance=Decimal("30000"),
            ),
        })
        assert analyzer.analyze(nearly_maxed).suggestions == []

    def test_over_cap_contributions(self, analyzer, mid_income_input):
        overfunded = mid_income_input.model_copy(update={
            "current_deductions": Deductions(rmf=Decimal("600000")),
        })
        result = analyzer.analyze(overfunded)

        assert "maximize-retirement" not in _by_id(result)
        assert result.unused_deduction_capacity.rmf == 0

    def test_negative_deductions_count_as_zero(self, analyzer, mid_income_input):
        """Negative amounts never widen capacity beyond the statutory cap."""
        result = analyzer.analyze(mid_income_input.model_copy(update={
            "current_deductions": Deductions(
                life_insurance=Decimal("-50000"),
                rmf=Decimal("-100000"),
                donation=Decimal("-10000"),
                parent_allowance=Decimal("-30000"),
            ),
        }))
        suggestions = _by_id(result)

        assert suggestions["life-insurance"].potential_saving == Decimal("20000")
        assert suggestions["maximize-retirement"].potential_saving == Decimal("48000")
        assert suggestions["donation-strategy"].potential_saving == Decimal("32000")
        assert "parent-allowance" in suggestions
        assert result.unused_deduction_capacity.rmf == Decimal("500000")
        assert result.unused_deduction_capacity.life_insurance == Decimal("100000")
        assert result.total_potential_savings == Decimal("137000")

    @pytest.mark.parametrize("months", [-1, 13])
    def test_months_elapsed_out_of_range(self, months: int):
        """Out-of-range months are clamped instead of rejected."""
        result = analyze_optimization(
            2024,
            400000,
            calculate_progressive_tax(Decimal("400000")),
            income_by_type={IncomeType.SERVICE: Decimal("300000")},
            months_elapsed=months,
        )
        assert "income-timing" not in _by_id(result)

    def test_bracket_warning(self, analyzer):
        result = analyzer.analyze(TaxOptimizationInput(
            tax_year=2024,
            taxable_income=Decimal("950000"),
            current_tax_amount=calculate_progressive_tax(Decimal("950000")),
        ))
        warning = _by_id(result)["bracket-warning"]

        assert result.amount_to_next_bracket == Decimal("50001")
        assert warning.category == SuggestionCategory.BRACKET_OPTIMIZATION
        assert warning.potential_saving == Decimal("0.05") * Decimal("50001")

    def test_no_bracket_warning_when_far(self, analyzer, mid_income_input):
        assert "bracket-warning" not in _by_id(analyzer.analyze(mid_income_input))

    def test_income_timing(self, analyzer):
        """300,000 of service income in six months projects into the 15% bracket."""
        result = analyzer.analyze(TaxOptimizationInput(
            tax_year=2024,
            taxable_income=Decimal("400000"),
            current_tax_amount=calculate_progressive_tax(Decimal("400000")),
            income_by_type={IncomeType.SERVICE: Decimal("300000")},
            months_elapsed=6,
        ))
        timing = _by_id(result)["income-timing"]

        assert timing.category == SuggestionCategory.INCOME_TIMING
        assert timing.potential_saving == Decimal("99999") * Decimal("0.05")

    def test_no_income_timing_for_salary(self, analyzer):
        result = analyzer.analyze(TaxOptimizationInput(
            tax_year=2024,
            taxable_income=Decimal("400000"),
            current_tax_amount=calculate_progressive_tax(Decimal("400000")),
            income_by_type={IncomeType.SALARY: Decimal("300000")},
            months_elapsed=6,
        ))
        assert "income-timing" not in _by_id(result)

    def test_no_income_timing_when_projection_stays_in_bracket(self, analyzer):
        result = analyzer.analyze(TaxOptimizationInput(
            tax_year=2024,
            taxable_income=Decimal("400000"),
            current_tax_amount=calculate_progressive_tax(Decimal("400000")),
            income_by_type={IncomeType.BUSINESS: Decimal("300000")},
            months_elapsed=12,
        ))
        assert "income-timing" not in _by_id(result)

    def test_project_annual_income(self):
        income = {IncomeType.PROFESSIONAL: Decimal("100000"), IncomeType.SALARY: Decimal("200000")}

        assert TaxOptimizationAnalyzer.project_annual_income(income, 3) == Decimal("1200000")
        assert TaxOptimizationAnalyzer.project_annual_income(income, 0) == Decimal("300000")
        assert TaxOptimizationAnalyzer.project_annual_income(income, -2) == Decimal("300000")
        assert TaxOptimizationAnalyzer.project_annual_income(income, 13) == Decimal("300000")

    def test_withholding_certificates(self, analyzer, mid_income_input):
        result = analyzer.analyze(
            mid_income_input.model_copy(update={"uncertified_withholding": Decimal("3000")})
        )
        reminder = _by_id(result)["withholding-certificates"]

        assert reminder.category == SuggestionCategory.MISSING_DOCUMENT
        assert reminder.potential_saving == Decimal("3000")

    def test_suggestions_have_thai_titles(self, analyzer, mid_income_input):
        assert all(s.title_th for s in analyzer.analyze(mid_income_input).suggestions)


class TestOptimizationResult:
    """Tests for ranking and totals."""

    def test_sorted_by_saving(self, analyzer, mid_income_input):
        result = analyzer.analyze(mid_income_input)
        savings = [s.potential_saving for s in result.suggestions]

        assert savings == sorted(savings, reverse=True)
        assert result.suggestions[0].id == "maximize-retirement"

    def test_total_is_plain_sum(self, analyzer, mid_income_input):
        """The total is an upper bound; it double counts cash shared by suggestions."""
        result = analyzer.analyze(mid_income_input)

        assert result.total_potential_savings == sum(s.potential_saving for s in result.suggestions)
        assert result.total_potential_savings == Decimal("137000")

    def test_unused_capacity(self, analyzer, mid_income_input):
        capacity = analyzer.analyze(
            mid_income_input.model_copy(update={
                "current_deductions": Deductions(ssf=Decimal("50000"), health_insurance=Decimal("5000")),
            })
        ).unused_deduction_capacity

        assert capacity.rmf == Decimal("500000")
        assert capacity.ssf == Decimal("150000")
        assert capacity.pension_insurance == Decimal("200000")
        assert capacity.life_insurance == Decimal("100000")
        assert capacity.health_insurance == Decimal("20000")
        assert capacity.home_loan_interest == Decimal("100000")

    def test_analysis_is_pure(self, analyzer, mid_income_input):
        assert analyzer.analyze(mid_income_input) == analyzer.analyze(mid_income_input)

    def test_settings_override(self, mid_income_input):
        analyzer = TaxOptimizationAnalyzer(
            settings=OptimizationSettings(bracket_warning_window=Decimal("300000"))
        )
        warning = _by_id(analyzer.analyze(mid_income_input))["bracket-warning"]

        assert warning.potential_saving == Decimal("0.05") * Decimal("200001")

    def test_analyze_optimization_helper(self):
        result = analyze_optimization(
            2024,
            800000,
            "74999.8",
            income_by_type={"salary": 1000000},
        )

        assert result.current_bracket.rate == Decimal("0.20")
        assert _by_id(result)["maximize-retirement"].potential_saving == Decimal("48000")
