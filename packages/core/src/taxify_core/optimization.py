"""Tax optimization advice from a calculated tax position.

The analyzer locates the taxpayer in the bracket table, measures unused
room under each capped deduction and turns it into suggestions ranked by
estimated saving. Each rule is independent: savings are not deduplicated
across suggestions that would draw on the same cash.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

import structlog

from .calculator import ZERO, _non_negative, find_bracket, to_decimal
from .config import OptimizationSettings
from .models import (
    Deductions,
    Difficulty,
    IncomeType,
    OptimizationResult,
    OptimizationSuggestion,
    Priority,
    SuggestionCategory,
    TaxBracket,
    TaxOptimizationInput,
    UnusedDeductionCapacity,
)
from .tax_rules import (
    DONATION_DEDUCTION_MULTIPLIER,
    DONATION_MAX_RATE,
    HEALTH_INSURANCE_MAX,
    HOME_LOAN_INTEREST_MAX,
    LIFE_INSURANCE_MAX,
    PENSION_INSURANCE_MAX,
    RETIREMENT_COMBINED_MAX,
    RMF_MAX,
    SSF_MAX,
    get_tax_brackets,
)

logger = structlog.get_logger()

# Income types whose payment dates the taxpayer can usually negotiate
FREELANCE_INCOME_TYPES = (
    IncomeType.SERVICE,
    IncomeType.PROFESSIONAL,
    IncomeType.BUSINESS,
)


def _remaining(cap: Decimal, used: Decimal) -> Decimal:
    return max(ZERO, cap - _non_negative(used))


def _claimed_retirement(current: Deductions) -> Decimal:
    """RMF + SSF + pension insurance, ignoring negative amounts."""
    return (
        _non_negative(current.rmf)
        + _non_negative(current.ssf)
        + _non_negative(current.pension_insurance)
    )


def _percent(rate: Decimal) -> str:
    return f"{rate * 100:.0f}%"


class TaxOptimizationAnalyzer:
    """
    Produce ranked tax-saving suggestions.

    Thresholds come from OptimizationSettings; statutory caps come from
    the rule tables.
    """

    def __init__(
        self,
        settings: Optional[OptimizationSettings] = None,
        brackets: Optional[Iterable[TaxBracket]] = None,
    ):
        self.settings = settings or OptimizationSettings()
        self.brackets = tuple(brackets) if brackets is not None else get_tax_brackets()

    # -------------------------------------------------------------------------
    # Bracket lookup
    # -------------------------------------------------------------------------

    def current_bracket(self, taxable_income: Decimal) -> TaxBracket:
        """Bracket containing the income (top bracket as fallback)."""
        return find_bracket(taxable_income, self.brackets) or self.brackets[-1]

    def next_bracket(self, taxable_income: Decimal) -> Optional[TaxBracket]:
        """Bracket after the one containing the income, None at the top."""
        for i, bracket in enumerate(self.brackets[:-1]):
            if bracket.contains(taxable_income):
                return self.brackets[i + 1]
        return None

    # -------------------------------------------------------------------------
    # Capacity
    # -------------------------------------------------------------------------

    @staticmethod
    def unused_capacity(current: Deductions) -> UnusedDeductionCapacity:
        """Room left under each individual cap, never negative."""
        return UnusedDeductionCapacity(
            rmf=_remaining(RMF_MAX, current.rmf),
            ssf=_remaining(SSF_MAX, current.ssf),
            pension_insurance=_remaining(PENSION_INSURANCE_MAX, current.pension_insurance),
            life_insurance=_remaining(LIFE_INSURANCE_MAX, current.life_insurance),
            health_insurance=_remaining(HEALTH_INSURANCE_MAX, current.health_insurance),
            home_loan_interest=_remaining(HOME_LOAN_INTEREST_MAX, current.home_loan_interest),
        )

    # -------------------------------------------------------------------------
    # Suggestion rules
    # -------------------------------------------------------------------------

    def _retirement_suggestion(
        self,
        current: Deductions,
        taxable_income: Decimal,
        rate: Decimal,
        deadline: date,
    ) -> Optional[OptimizationSuggestion]:
        remaining = RETIREMENT_COMBINED_MAX - _claimed_retirement(current)
        if remaining < self.settings.retirement_min_capacity:
            return None

        # The income-based cap usually binds before the absolute one
        investable = min(remaining, taxable_income * self.settings.retirement_income_cap_rate)
        saving = max(ZERO, investable) * rate

        return OptimizationSuggestion(
            id="maximize-retirement",
            category=SuggestionCategory.INVESTMENT_OPPORTUNITY,
            title="Maximize Retirement Savings (RMF/SSF)",
            title_th="เพิ่มการลงทุน RMF/SSF",
            description=(
                f"You can contribute up to {remaining:,.0f} THB more to RMF/SSF/pension insurance. "
                f"The combined deduction limit is {RETIREMENT_COMBINED_MAX:,.0f} THB or "
                f"{_percent(self.settings.retirement_income_cap_rate)} of income, whichever is lower."
            ),
            action_required="Invest in RMF or SSF before year-end",
            potential_saving=saving,
            difficulty=Difficulty.MEDIUM,
            priority=Priority.HIGH if rate >= Decimal("0.20") else Priority.MEDIUM,
            deadline=deadline,
        )

    def _life_insurance_suggestion(
        self,
        current: Deductions,
        rate: Decimal,
    ) -> Optional[OptimizationSuggestion]:
        remaining = LIFE_INSURANCE_MAX - _non_negative(current.life_insurance)
        if remaining < self.settings.life_insurance_min_capacity:
            return None

        return OptimizationSuggestion(
            id="life-insurance",
            category=SuggestionCategory.INVESTMENT_OPPORTUNITY,
            title="Life Insurance Premium",
            title_th="เบี้ยประกันชีวิต",
            description=(
                f"You can claim up to {remaining:,.0f} THB more in life insurance premiums. "
                f"Maximum deduction is {LIFE_INSURANCE_MAX:,.0f} THB per year."
            ),
            action_required="Review life insurance policy and ensure premiums are paid",
            potential_saving=remaining * rate,
            difficulty=Difficulty.MEDIUM,
            priority=Priority.MEDIUM,
        )

    def _health_insurance_suggestion(
        self,
        current: Deductions,
        rate: Decimal,
    ) -> Optional[OptimizationSuggestion]:
        remaining = HEALTH_INSURANCE_MAX - _non_negative(current.health_insurance)
        if remaining < self.settings.health_insurance_min_capacity:
            return None

        return OptimizationSuggestion(
            id="health-insurance",
            category=SuggestionCategory.INVESTMENT_OPPORTUNITY,
            title="Health Insurance Premium",
            title_th="เบี้ยประกันสุขภาพ",
            description=(
                f"You can claim up to {remaining:,.0f} THB more in health insurance premiums. "
                f"Maximum deduction is {HEALTH_INSURANCE_MAX:,.0f} THB per year "
                f"(combined with life insurance not exceeding {LIFE_INSURANCE_MAX:,.0f} THB)."
            ),
            action_required="Review health insurance coverage and premiums",
            potential_saving=remaining * rate,
            difficulty=Difficulty.EASY,
            priority=Priority.MEDIUM,
        )

    def _home_loan_suggestion(
        self,
        current: Deductions,
        rate: Decimal,
    ) -> Optional[OptimizationSuggestion]:
        remaining = HOME_LOAN_INTEREST_MAX - _non_negative(current.home_loan_interest)
        if remaining < self.settings.home_loan_min_capacity:
            return None

        return OptimizationSuggestion(
            id="home-loan",
            category=SuggestionCategory.ADDITIONAL_DEDUCTION,
            title="Home Loan Interest",
            title_th="ดอกเบี้ยเงินกู้บ้าน",
            description=(
                f"You can claim up to {remaining:,.0f} THB more in home loan interest. "
                f"Maximum deduction is {HOME_LOAN_INTEREST_MAX:,.0f} THB per year for a primary residence."
            ),
            action_required="Prepare home loan interest certificate from bank",
            potential_saving=remaining * rate,
            difficulty=Difficulty.HARD,
            priority=Priority.MEDIUM,
        )

    def _donation_suggestion(
        self,
        current: Deductions,
        taxable_income: Decimal,
        rate: Decimal,
        deadline: date,
    ) -> Optional[OptimizationSuggestion]:
        remaining = taxable_income * DONATION_MAX_RATE - _non_negative(current.donation)
        if remaining < self.settings.donation_min_capacity:
            return None

        return OptimizationSuggestion(
            id="donation-strategy",
            category=SuggestionCategory.ADDITIONAL_DEDUCTION,
            title="Charitable Donations (2x Deduction)",
            title_th="บริจาคเพื่อการกุศล (หัก 2 เท่า)",
            description=(
                f"You can donate up to {remaining:,.0f} THB more and receive a double deduction. "
                "Donations to approved charities are deductible at 2x the donation amount."
            ),
            action_required="Donate to Revenue Department-approved charities",
            potential_saving=remaining * rate * DONATION_DEDUCTION_MULTIPLIER,
            difficulty=Difficulty.EASY,
            priority=Priority.LOW,
            deadline=deadline,
        )

    def _bracket_suggestion(
        self,
        current_bracket: TaxBracket,
        next_bracket: Optional[TaxBracket],
        amount_to_next: Decimal,
        deadline: date,
    ) -> Optional[OptimizationSuggestion]:
        if next_bracket is None:
            return None
        if not (0 < amount_to_next < self.settings.bracket_warning_window):
            return None

        rate_step = next_bracket.rate - current_bracket.rate
        return OptimizationSuggestion(
            id="bracket-warning",
            category=SuggestionCategory.BRACKET_OPTIMIZATION,
            title="Approaching Higher Tax Bracket",
            title_th="ใกล้ถึงขั้นบันไดภาษีถัดไป",
            description=(
                f"You are {amount_to_next:,.0f} THB away from the next tax bracket "
                f"({_percent(next_bracket.rate)}). Consider maximizing deductions to stay "
                "in your current bracket."
            ),
            action_required="Maximize all available deductions before year-end",
            potential_saving=max(ZERO, rate_step * amount_to_next),
            difficulty=Difficulty.MEDIUM,
            priority=Priority.HIGH,
            deadline=deadline,
        )

    def _parent_allowance_suggestion(
        self,
        current: Deductions,
        rate: Decimal,
    ) -> Optional[OptimizationSuggestion]:
        if _non_negative(current.parent_allowance) > 0:
            return None

        return OptimizationSuggestion(
            id="parent-allowance",
            category=SuggestionCategory.ADDITIONAL_DEDUCTION,
            title="Parent Allowance Available",
            title_th="สิทธิลดหย่อนบิดา-มารดา",
            description=(
                "You can claim 30,000 THB per parent (60,000 THB total if supporting both). "
                "Ensure you have documentation of support."
            ),
            action_required="Gather parent support documentation",
            potential_saving=self.settings.parent_allowance_potential * rate,
            difficulty=Difficulty.EASY,
            priority=Priority.MEDIUM,
        )

    def _income_timing_suggestion(
        self,
        income_by_type: Mapping[IncomeType, Decimal],
        months_elapsed: int,
        current_bracket: TaxBracket,
    ) -> Optional[OptimizationSuggestion]:
        if not any(income_by_type.get(t, ZERO) > 0 for t in FREELANCE_INCOME_TYPES):
            return None

        projected = self.project_annual_income(income_by_type, months_elapsed)
        projected_bracket = self.current_bracket(projected)
        if projected_bracket.rate <= current_bracket.rate:
            return None

        rate_step = projected_bracket.rate - current_bracket.rate
        saving = max(ZERO, (projected - projected_bracket.min_income) * rate_step)

        return OptimizationSuggestion(
            id="income-timing",
            category=SuggestionCategory.INCOME_TIMING,
            title="Consider Income Timing",
            title_th="พิจารณาการเลื่อนรายได้",
            description=(
                f"Based on your current trajectory, you may reach the {_percent(projected_bracket.rate)} "
                "bracket. Consider deferring some income to next year if possible."
            ),
            action_required="Review client contracts for payment timing flexibility",
            potential_saving=saving,
            difficulty=Difficulty.HARD,
            priority=Priority.MEDIUM,
        )

    def _withholding_certificate_suggestion(
        self,
        uncertified_withholding: Decimal,
    ) -> Optional[OptimizationSuggestion]:
        if uncertified_withholding <= 0:
            return None

        return OptimizationSuggestion(
            id="withholding-certificates",
            category=SuggestionCategory.MISSING_DOCUMENT,
            title="Collect Withholding Tax Certificates",
            title_th="ขอหนังสือรับรองการหักภาษี ณ ที่จ่าย (50 ทวิ)",
            description=(
                f"{uncertified_withholding:,.0f} THB of tax withheld at source has no withholding "
                "certificate. Without certificates it cannot be credited against your tax."
            ),
            action_required="Request 50 Tawi certificates from payers",
            potential_saving=uncertified_withholding,
            difficulty=Difficulty.EASY,
            priority=Priority.HIGH,
        )

    @staticmethod
    def project_annual_income(
        income_by_type: Mapping[IncomeType, Decimal],
        months_elapsed: int,
    ) -> Decimal:
        """Annualize year-to-date income.

        ``months_elapsed`` is clamped to 0-12; at 0 the total is returned as is.
        """
        current_total = sum((_non_negative(v) for v in income_by_type.values()), ZERO)
        months_elapsed = min(max(months_elapsed, 0), 12)
        if months_elapsed == 0:
            return current_total
        return current_total / months_elapsed * 12

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    def analyze(self, opt_input: TaxOptimizationInput) -> OptimizationResult:
        """
        Analyze a tax position and rank suggestions by potential saving.

        Args:
            opt_input: Taxable income, tax, deductions and year-to-date income

        Returns:
            OptimizationResult with suggestions sorted by saving (descending)
        """
        taxable_income = max(opt_input.taxable_income, ZERO)
        current = opt_input.current_deductions
        deadline = date(opt_input.tax_year, 12, 31)

        current_bracket = self.current_bracket(taxable_income)
        next_bracket = self.next_bracket(taxable_income)
        amount_to_next = next_bracket.min_income - taxable_income if next_bracket else ZERO
        effective_rate = (
            opt_input.current_tax_amount / taxable_income if taxable_income > 0 else ZERO
        )
        rate = current_bracket.rate

        candidates = [
            self._retirement_suggestion(current, taxable_income, rate, deadline),
            self._life_insurance_suggestion(current, rate),
            self._health_insurance_suggestion(current, rate),
            self._home_loan_suggestion(current, rate),
            self._donation_suggestion(current, taxable_income, rate, deadline),
            self._bracket_suggestion(current_bracket, next_bracket, amount_to_next, deadline),
            self._parent_allowance_suggestion(current, rate),
            self._income_timing_suggestion(
                opt_input.income_by_type, opt_input.months_elapsed, current_bracket
            ),
            self._withholding_certificate_suggestion(opt_input.uncertified_withholding),
        ]
        suggestions = sorted(
            (s for s in candidates if s is not None),
            key=lambda s: s.potential_saving,
            reverse=True,
        )

        for suggestion in suggestions:
            logger.info(
                "optimization_suggestion",
                id=suggestion.id,
                category=suggestion.category.value,
                potential_saving=str(suggestion.potential_saving),
            )

        # Upper bound: suggestions are not mutually exclusive
        total_savings = sum((s.potential_saving for s in suggestions), ZERO)

        logger.info(
            "optimization_analysis_complete",
            tax_year=opt_input.tax_year,
            bracket_rate=str(rate),
            suggestions=len(suggestions),
            total_potential_savings=str(total_savings),
        )

        return OptimizationResult(
            current_bracket=current_bracket,
            next_bracket=next_bracket,
            amount_to_next_bracket=amount_to_next,
            effective_tax_rate=effective_rate,
            suggestions=suggestions,
            total_potential_savings=total_savings,
            unused_deduction_capacity=self.unused_capacity(current),
        )


def analyze_optimization(
    tax_year: int,
    taxable_income: Any,
    current_tax_amount: Any,
    current_deductions: Optional[Deductions] = None,
    income_by_type: Optional[Mapping[IncomeType, Any]] = None,
    months_elapsed: int = 12,
    uncertified_withholding: Any = ZERO,
    settings: Optional[OptimizationSettings] = None,
) -> OptimizationResult:
    """Analyze a tax position with default brackets."""
    analyzer = TaxOptimizationAnalyzer(settings=settings)
    return analyzer.analyze(TaxOptimizationInput(
        tax_year=tax_year,
        taxable_income=to_decimal(taxable_income),
        current_tax_amount=to_decimal(current_tax_amount),
        current_deductions=current_deductions or Deductions(),
        income_by_type={
            IncomeType(k): to_decimal(v) for k, v in (income_by_type or {}).items()
        },
        months_elapsed=months_elapsed,
        uncertified_withholding=to_decimal(uncertified_withholding),
    ))
