"""Thai personal income tax calculation.

This module provides the building blocks and the composed engine:
1. calculate_expense_deduction - Section 40 expense deduction for one entry
2. calculate_progressive_tax - bracket tax on taxable income
3. calculate_alternative_tax - 0.5% minimum tax on non-employment income
4. TaxCalculator - full declaration to TaxCalculationResult with audit trail
"""

from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

import structlog

from .exceptions import UnsupportedDeductionModeError
from .models import (
    AuditEntry,
    DeductionMode,
    Deductions,
    IncomeEntry,
    IncomeType,
    TaxBracket,
    TaxCalculationInput,
    TaxCalculationResult,
    TaxMethod,
)
from .tax_rules import (
    ALTERNATIVE_TAX_EXEMPT_MAX,
    ALTERNATIVE_TAX_MIN_INCOME,
    ALTERNATIVE_TAX_RATE,
    DONATION_MAX_RATE,
    HEALTH_INSURANCE_MAX,
    HOME_LOAN_INTEREST_MAX,
    LIFE_INSURANCE_MAX,
    RETIREMENT_COMBINED_MAX,
    SOCIAL_SECURITY_MAX,
    FixedDeduction,
    PercentageDeduction,
    get_expense_rule,
    get_tax_brackets,
    get_tax_rules_version,
)

logger = structlog.get_logger()

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Convert an amount to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    return Decimal(str(value))


def _non_negative(value: Any) -> Decimal:
    amount = to_decimal(value)
    return amount if amount > 0 else ZERO


def calculate_expense_deduction(
    income_type: IncomeType,
    amount: Any,
    mode: DeductionMode = DeductionMode.STANDARD,
    actual_expenses: Optional[Any] = None,
) -> Decimal:
    """Allowed expense deduction for a single income entry.

    Actual expenses are taken as claimed (no cap) when the rule permits
    them and they are supplied; otherwise the rule's standard deduction
    applies. An actual-mode claim on a rule that does not permit it falls
    back to standard here; TaxCalculator rejects such entries up front.

    Args:
        income_type: Section 40 income type
        amount: Gross income of the entry
        mode: Standard or actual expense deduction
        actual_expenses: Documented expenses for actual mode

    Returns:
        Deduction amount, zero for non-positive income
    """
    rule = get_expense_rule(income_type)
    amount = to_decimal(amount)
    if amount <= 0:
        return ZERO

    if mode == DeductionMode.ACTUAL and rule.allows_actual_expense and actual_expenses is not None:
        return _non_negative(actual_expenses)

    deduction = rule.deduction
    if isinstance(deduction, PercentageDeduction):
        calculated = amount * deduction.rate
        if deduction.cap is not None:
            return min(calculated, deduction.cap)
        return calculated
    if isinstance(deduction, FixedDeduction):
        return deduction.amount
    return ZERO


def find_bracket(
    taxable_income: Decimal,
    brackets: Optional[Iterable[TaxBracket]] = None,
) -> Optional[TaxBracket]:
    """First bracket whose ceiling is at or above the income."""
    for bracket in get_tax_brackets() if brackets is None else brackets:
        if bracket.contains(taxable_income):
            return bracket
    return None


def calculate_progressive_tax(
    taxable_income: Any,
    brackets: Optional[Iterable[TaxBracket]] = None,
) -> Decimal:
    """Tax on taxable income under the progressive bracket table.

    Negative income is treated as zero.
    """
    income = max(to_decimal(taxable_income), ZERO)
    bracket = find_bracket(income, brackets)
    if bracket is None:
        return ZERO
    return max(bracket.base_tax + bracket.rate * (income - bracket.min_income), ZERO)


def calculate_alternative_tax(non_employment_gross_income: Any) -> Decimal:
    """Minimum tax on gross income of Section 40(2)-(8).

    Applies only from 1,000,000 THB of such income, and amounts up to
    5,000 THB are waived entirely.
    """
    income = to_decimal(non_employment_gross_income)
    if income < ALTERNATIVE_TAX_MIN_INCOME:
        return ZERO

    tax = income * ALTERNATIVE_TAX_RATE
    if tax <= ALTERNATIVE_TAX_EXEMPT_MAX:
        return ZERO
    return tax


class TaxCalculator:
    """
    Calculate Thai personal income tax for a full declaration.

    Every step is recorded in the result's audit log and emitted as a
    structured log event. The calculator holds no per-call state, so one
    instance can serve concurrent callers.
    """

    def __init__(self, brackets: Optional[Iterable[TaxBracket]] = None):
        """
        Initialize calculator.

        Args:
            brackets: Override bracket table (default: current rule tables)
        """
        self.brackets = tuple(brackets) if brackets is not None else get_tax_brackets()
        self.rules_version = get_tax_rules_version()

    def _log_step(
        self,
        audit_log: list[AuditEntry],
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None,
    ) -> None:
        """Add an entry to the audit log."""
        audit_log.append(AuditEntry(
            step=step,
            input_value=input_value,
            output_value=output_value,
            source=source,
            notes=notes,
        ))
        logger.info(
            "tax_calculation_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    def validate(self, incomes: Iterable[IncomeEntry]) -> None:
        """Reject entries the engine must not compute.

        Raises:
            MissingRuleError: An income type has no expense rule.
            UnsupportedDeductionModeError: Actual expenses claimed where
                only the standard deduction is allowed.
        """
        for entry in incomes:
            rule = get_expense_rule(entry.income_type)
            if entry.deduction_mode == DeductionMode.ACTUAL and not rule.allows_actual_expense:
                raise UnsupportedDeductionModeError(income_type=entry.income_type.value)

    def _aggregate_income(
        self,
        incomes: list[IncomeEntry],
        audit_log: list[AuditEntry],
    ) -> tuple[dict[IncomeType, Decimal], Decimal]:
        """Sum income per type and the expense deductions of every entry.

        Returns:
            Tuple of (income_by_type, total_expense_deduction)
        """
        income_by_type = {income_type: ZERO for income_type in IncomeType}
        total_expense = ZERO

        for i, entry in enumerate(incomes):
            if entry.amount < 0:
                logger.warning(
                    "negative_income_ignored",
                    income_type=entry.income_type.value,
                    amount=str(entry.amount),
                )
            amount = _non_negative(entry.amount)

            if entry.deduction_mode == DeductionMode.ACTUAL and entry.actual_expenses is None:
                logger.warning(
                    "actual_expenses_missing",
                    income_type=entry.income_type.value,
                    notes="Falling back to standard deduction",
                )

            deduction = calculate_expense_deduction(
                entry.income_type,
                amount,
                entry.deduction_mode,
                entry.actual_expenses,
            )
            income_by_type[entry.income_type] += amount
            total_expense += deduction

            self._log_step(
                audit_log,
                step=f"income_{i+1}_{entry.income_type.value}",
                input_value=f"amount={amount}, mode={entry.deduction_mode.value}",
                output_value=f"expense_deduction={deduction}",
                source=f"Section 40({entry.income_type.section})",
            )

        return income_by_type, total_expense

    def _calculate_allowances(self, deductions: Deductions) -> Decimal:
        return (
            _non_negative(deductions.personal_allowance)
            + _non_negative(deductions.spouse_allowance)
            + _non_negative(deductions.child_allowance)
            + _non_negative(deductions.parent_allowance)
            + _non_negative(deductions.disability_allowance)
        )

    def _calculate_investments(
        self,
        deductions: Deductions,
        audit_log: list[AuditEntry],
    ) -> Decimal:
        """Capped insurance, retirement, social security and home loan deductions."""
        life = min(_non_negative(deductions.life_insurance), LIFE_INSURANCE_MAX)
        health = min(_non_negative(deductions.health_insurance), HEALTH_INSURANCE_MAX)
        home_loan = min(_non_negative(deductions.home_loan_interest), HOME_LOAN_INTEREST_MAX)
        social_security = min(_non_negative(deductions.social_security), SOCIAL_SECURITY_MAX)

        # Combined cap applies to the sum, so reallocating among the three
        # does not change the deduction once the cap binds
        retirement_declared = (
            _non_negative(deductions.rmf)
            + _non_negative(deductions.ssf)
            + _non_negative(deductions.pension_insurance)
        )
        retirement = min(retirement_declared, RETIREMENT_COMBINED_MAX)

        self._log_step(
            audit_log,
            step="retirement_deduction",
            input_value=f"rmf={deductions.rmf}, ssf={deductions.ssf}, pension={deductions.pension_insurance}",
            output_value=str(retirement),
            source=f"Combined cap {RETIREMENT_COMBINED_MAX}",
        )

        total = life + health + retirement + social_security + home_loan
        self._log_step(
            audit_log,
            step="total_investments",
            input_value=(
                f"life={life}, health={health}, retirement={retirement}, "
                f"social_security={social_security}, home_loan={home_loan}"
            ),
            output_value=str(total),
            source="Section 47 deduction limits",
        )
        return total

    def calculate(self, tax_input: TaxCalculationInput) -> TaxCalculationResult:
        """
        Calculate tax due for a declaration.

        Args:
            tax_input: Incomes, deductions and withholding credit for a tax year

        Returns:
            TaxCalculationResult with both tax methods and full audit trail

        Raises:
            UnsupportedDeductionModeError: See validate()
            MissingRuleError: See validate()
        """
        self.validate(tax_input.incomes)
        audit_log: list[AuditEntry] = []
        deductions = tax_input.deductions

        # Step 1: Group income and expense deductions
        income_by_type, total_expense = self._aggregate_income(tax_input.incomes, audit_log)
        total_gross = sum(income_by_type.values(), ZERO)

        # Step 2: Net income (no floor yet)
        net_income = total_gross - total_expense
        self._log_step(
            audit_log,
            step="net_income",
            input_value=f"{total_gross} - {total_expense}",
            output_value=str(net_income),
            source="Section 40 expense deductions",
        )

        # Step 3: Allowances
        total_allowances = self._calculate_allowances(deductions)
        self._log_step(
            audit_log,
            step="total_allowances",
            input_value=(
                f"personal={deductions.personal_allowance}, spouse={deductions.spouse_allowance}, "
                f"child={deductions.child_allowance}, parent={deductions.parent_allowance}, "
                f"disability={deductions.disability_allowance}"
            ),
            output_value=str(total_allowances),
            source="Section 47 allowances",
        )

        # Step 4: Insurance and investment deductions
        total_investments = self._calculate_investments(deductions, audit_log)

        # Step 5: Donation, capped on income after allowances
        income_after_allowances = max(ZERO, net_income - total_allowances)
        donation_cap = income_after_allowances * DONATION_MAX_RATE
        donation_deduction = min(_non_negative(deductions.donation), donation_cap)
        self._log_step(
            audit_log,
            step="donation_deduction",
            input_value=f"declared={deductions.donation}, cap={donation_cap}",
            output_value=str(donation_deduction),
            source=f"{DONATION_MAX_RATE:%} of income after allowances",
        )

        # Step 6: Taxable income
        total_deductions = total_allowances + total_investments + donation_deduction
        taxable_income = max(ZERO, net_income - total_deductions)
        self._log_step(
            audit_log,
            step="taxable_income",
            input_value=f"{net_income} - {total_deductions}",
            output_value=str(taxable_income),
            source="Calculated",
        )

        # Step 7: Both methods
        progressive_tax = calculate_progressive_tax(taxable_income, self.brackets)
        non_employment_income = sum(
            (amount for income_type, amount in income_by_type.items() if not income_type.is_employment),
            ZERO,
        )
        alternative_tax = calculate_alternative_tax(non_employment_income)
        self._log_step(
            audit_log,
            step="progressive_tax",
            input_value=str(taxable_income),
            output_value=str(progressive_tax),
            source=f"Bracket table {self.rules_version}",
        )
        self._log_step(
            audit_log,
            step="alternative_tax",
            input_value=str(non_employment_income),
            output_value=str(alternative_tax),
            source=f"{ALTERNATIVE_TAX_RATE:%} of Section 40(2)-(8) income",
        )

        # Step 8: The alternative method is a floor, not a replacement
        final_tax = max(progressive_tax, alternative_tax)
        binding_method = (
            TaxMethod.ALTERNATIVE if alternative_tax > progressive_tax else TaxMethod.PROGRESSIVE
        )

        # Step 9: Effective rate
        effective_rate = final_tax / total_gross if total_gross > 0 else ZERO

        # Step 10: Settlement against withholding
        withholding = _non_negative(tax_input.withholding_tax_credit)
        payable_or_refund = final_tax - withholding
        self._log_step(
            audit_log,
            step="final_tax_due",
            input_value=f"max({progressive_tax}, {alternative_tax}), withholding={withholding}",
            output_value=f"due={final_tax}, payable_or_refund={payable_or_refund}",
            source=f"{binding_method.value} method",
        )

        return TaxCalculationResult(
            tax_year=tax_input.tax_year,
            income_by_type=income_by_type,
            total_gross_income=total_gross,
            total_expense_deduction=total_expense,
            net_income=net_income,
            total_allowances=total_allowances,
            total_investments=total_investments,
            donation_deduction=donation_deduction,
            taxable_income=taxable_income,
            tax_by_progressive_method=progressive_tax,
            tax_by_alternative_method=alternative_tax,
            final_tax_due=final_tax,
            binding_method=binding_method,
            effective_tax_rate=effective_rate,
            withholding_tax_credit=withholding,
            tax_payable_or_refund=payable_or_refund,
            audit_log=audit_log,
        )


_default_calculator = TaxCalculator()


def calculate_tax(
    tax_year: int,
    incomes: Iterable[IncomeEntry],
    deductions: Optional[Deductions] = None,
    withholding_tax_credit: Any = ZERO,
) -> TaxCalculationResult:
    """Calculate tax with the current rule tables."""
    return _default_calculator.calculate(TaxCalculationInput(
        tax_year=tax_year,
        incomes=list(incomes),
        deductions=deductions or Deductions(),
        withholding_tax_credit=to_decimal(withholding_tax_credit),
    ))


def income_entries_from_totals(income_by_type: Mapping[IncomeType, Any]) -> list[IncomeEntry]:
    """Standard-mode entries from per-type income totals.

    Non-positive totals are skipped.
    """
    entries = []
    for income_type, amount in income_by_type.items():
        amount = to_decimal(amount)
        if amount > 0:
            entries.append(IncomeEntry(income_type=IncomeType(income_type), amount=amount))
    return entries


def compare_deduction_scenarios(
    tax_year: int,
    incomes: Iterable[IncomeEntry],
    scenarios: Mapping[str, Deductions],
    withholding_tax_credit: Any = ZERO,
) -> dict[str, TaxCalculationResult]:
    """Run one calculation per named what-if deduction set.

    Results are independent of each other.
    """
    incomes = list(incomes)
    results = {
        name: calculate_tax(tax_year, incomes, deductions, withholding_tax_credit)
        for name, deductions in scenarios.items()
    }
    logger.info(
        "deduction_scenarios_compared",
        tax_year=tax_year,
        scenarios=len(results),
    )
    return results
