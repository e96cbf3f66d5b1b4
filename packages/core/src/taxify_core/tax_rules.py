"""Thai personal income tax rule tables.

This module contains the statutory numbers used by the calculators:
progressive brackets, Section 40 expense deduction rules, allowance and
deduction limits, penalty rates, alternative (minimum) tax parameters and
the filing calendar.

Sources:
- Revenue Code Section 40 (income types) and Section 42 bis-50 (expenses)
- Revenue Code Section 47 (allowances), Section 48 (rates)
- Revenue Code Sections 22, 27 (surcharges and penalties)

Updated: tax year 2024
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from .exceptions import MissingRuleError
from .models import IncomeType, TaxBracket


# =============================================================================
# VERSION TRACKING
# =============================================================================

TAX_RULES_VERSION = "TH-PIT-2024"


def get_tax_rules_version() -> str:
    """Return current rule table version."""
    return TAX_RULES_VERSION


# =============================================================================
# PROGRESSIVE BRACKETS
# =============================================================================
# base_tax is the tax owed at min_income, rounded to whole baht.

TAX_BRACKETS_2024: tuple[TaxBracket, ...] = (
    TaxBracket(min_income=Decimal("0"), max_income=Decimal("150000"), rate=Decimal("0"), base_tax=Decimal("0")),
    TaxBracket(min_income=Decimal("150001"), max_income=Decimal("300000"), rate=Decimal("0.05"), base_tax=Decimal("0")),
    TaxBracket(min_income=Decimal("300001"), max_income=Decimal("500000"), rate=Decimal("0.10"), base_tax=Decimal("7500")),
    TaxBracket(min_income=Decimal("500001"), max_income=Decimal("750000"), rate=Decimal("0.15"), base_tax=Decimal("27500")),
    TaxBracket(min_income=Decimal("750001"), max_income=Decimal("1000000"), rate=Decimal("0.20"), base_tax=Decimal("65000")),
    TaxBracket(min_income=Decimal("1000001"), max_income=Decimal("2000000"), rate=Decimal("0.25"), base_tax=Decimal("115000")),
    TaxBracket(min_income=Decimal("2000001"), max_income=Decimal("5000000"), rate=Decimal("0.30"), base_tax=Decimal("365000")),
    TaxBracket(min_income=Decimal("5000001"), max_income=None, rate=Decimal("0.35"), base_tax=Decimal("1265000")),
)


def get_tax_brackets() -> tuple[TaxBracket, ...]:
    """Return the bracket table, sorted ascending by min_income."""
    return TAX_BRACKETS_2024


# =============================================================================
# SECTION 40 EXPENSE DEDUCTION RULES
# =============================================================================

@dataclass(frozen=True)
class PercentageDeduction:
    """Deduct a share of gross income, optionally capped."""
    rate: Decimal
    cap: Optional[Decimal] = None


@dataclass(frozen=True)
class FixedDeduction:
    """Deduct a fixed amount regardless of income."""
    amount: Decimal


ExpenseDeduction = Union[PercentageDeduction, FixedDeduction]


@dataclass(frozen=True)
class ExpenseDeductionRule:
    """Statutory expense deduction for one income type."""
    name: str
    name_th: str
    deduction: ExpenseDeduction
    allows_actual_expense: bool
    special_rules: Optional[str] = None


SALARY_SERVICE_MAX_EXPENSE = Decimal("100000")

SECTION_40_RULES: dict[IncomeType, ExpenseDeductionRule] = {
    IncomeType.SALARY: ExpenseDeductionRule(
        name="Employment Income",
        name_th="เงินได้จากการจ้างแรงงาน",
        deduction=PercentageDeduction(Decimal("0.50"), cap=SALARY_SERVICE_MAX_EXPENSE),
        allows_actual_expense=False,
    ),
    IncomeType.SERVICE: ExpenseDeductionRule(
        name="Service Income",
        name_th="เงินได้จากหน้าที่หรือตำแหน่งงาน",
        deduction=PercentageDeduction(Decimal("0.50"), cap=SALARY_SERVICE_MAX_EXPENSE),
        allows_actual_expense=False,
        special_rules="Combined with 40(1), max 100,000 THB",
    ),
    IncomeType.INTELLECTUAL_PROPERTY: ExpenseDeductionRule(
        name="Intellectual Property",
        name_th="ค่าลิขสิทธิ์ กู๊ดวิลล์",
        deduction=PercentageDeduction(Decimal("0.50"), cap=Decimal("100000")),
        allows_actual_expense=True,
    ),
    IncomeType.PASSIVE: ExpenseDeductionRule(
        name="Passive Income",
        name_th="ดอกเบี้ย เงินปันผล",
        deduction=PercentageDeduction(Decimal("0")),
        allows_actual_expense=False,
        special_rules="Final tax option available (10-15% withholding)",
    ),
    IncomeType.RENTAL: ExpenseDeductionRule(
        name="Rental Income",
        name_th="ค่าเช่าทรัพย์สิน",
        deduction=PercentageDeduction(Decimal("0.30")),
        allows_actual_expense=True,
        special_rules="30% for buildings, 20% agricultural land, 15% other land, 30% vehicles",
    ),
    IncomeType.PROFESSIONAL: ExpenseDeductionRule(
        name="Professional Services",
        name_th="วิชาชีพอิสระ",
        deduction=PercentageDeduction(Decimal("0.30")),
        allows_actual_expense=True,
        special_rules="60% for medical professionals",
    ),
    IncomeType.CONTRACT: ExpenseDeductionRule(
        name="Contract Work",
        name_th="การรับเหมา",
        deduction=PercentageDeduction(Decimal("0.60")),
        allows_actual_expense=True,
    ),
    IncomeType.BUSINESS: ExpenseDeductionRule(
        name="Business Income",
        name_th="เงินได้จากการธุรกิจ",
        deduction=PercentageDeduction(Decimal("0.60")),
        allows_actual_expense=True,
        special_rules="Must be in Royal Decree list for 60% deduction",
    ),
}


def get_expense_rule(income_type: IncomeType) -> ExpenseDeductionRule:
    """Get the expense deduction rule for an income type.

    Raises:
        MissingRuleError: If the rule table has no entry for the type.
    """
    try:
        return SECTION_40_RULES[income_type]
    except KeyError:
        raise MissingRuleError(income_type=income_type) from None


def get_section40_name(income_type: IncomeType, language: str = "en") -> str:
    """Display name of an income type in English ("en") or Thai ("th")."""
    rule = get_expense_rule(income_type)
    return rule.name_th if language == "th" else rule.name


def get_section40_types() -> list[IncomeType]:
    """All income types in Section 40 paragraph order."""
    return list(IncomeType)


# =============================================================================
# ALLOWANCES AND DEDUCTIONS
# =============================================================================

PERSONAL_ALLOWANCE = Decimal("60000")
SPOUSE_ALLOWANCE = Decimal("60000")
CHILD_ALLOWANCE_PER_CHILD = Decimal("30000")
PARENT_ALLOWANCE_PER_PARENT = Decimal("30000")
DISABILITY_ALLOWANCE = Decimal("60000")

LIFE_INSURANCE_MAX = Decimal("100000")
HEALTH_INSURANCE_MAX = Decimal("25000")
PENSION_INSURANCE_MAX = Decimal("200000")
RMF_MAX = Decimal("500000")
SSF_MAX = Decimal("200000")
RETIREMENT_COMBINED_MAX = Decimal("500000")  # RMF + SSF + pension insurance
SOCIAL_SECURITY_MAX = Decimal("9000")
HOME_LOAN_INTEREST_MAX = Decimal("100000")

DONATION_MAX_RATE = Decimal("0.10")  # Of income after expenses and allowances
DONATION_DEDUCTION_MULTIPLIER = Decimal("2")  # Qualifying donations count double


# =============================================================================
# ALTERNATIVE (MINIMUM) TAX
# =============================================================================
# Applies to gross income of Section 40(2)-(8); the taxpayer owes the
# higher of this and the progressive tax.

ALTERNATIVE_TAX_RATE = Decimal("0.005")
ALTERNATIVE_TAX_MIN_INCOME = Decimal("1000000")
ALTERNATIVE_TAX_EXEMPT_MAX = Decimal("5000")


# =============================================================================
# SURCHARGES AND PENALTIES
# =============================================================================

SURCHARGE_MONTHLY_RATE = Decimal("0.015")
SURCHARGE_MAX_MULTIPLIER = Decimal("1.0")

LATE_FILING_FINE_LOW = Decimal("100")   # Filed within one month
LATE_FILING_FINE_HIGH = Decimal("200")

NON_FILING_PENALTY_RATE = Decimal("2.0")
INACCURATE_FILING_PENALTY_RATE = Decimal("1.0")

# Voluntary settlement: (max days to pay, penalty rate); last bucket is open ended
VOLUNTARY_PENALTY_SCHEDULE: tuple[tuple[Optional[int], Decimal], ...] = (
    (15, Decimal("0.02")),
    (30, Decimal("0.05")),
    (60, Decimal("0.10")),
    (None, Decimal("0.20")),
)


def get_voluntary_penalty_rate(payment_timeline_days: int) -> Decimal:
    """Penalty rate for a voluntary settlement paid within the given days."""
    for max_days, rate in VOLUNTARY_PENALTY_SCHEDULE:
        if max_days is None or payment_timeline_days <= max_days:
            return rate
    return VOLUNTARY_PENALTY_SCHEDULE[-1][1]


# =============================================================================
# FILING CALENDAR
# =============================================================================
# Month/day in the year after the tax year.

PAPER_FILING_DEADLINE = (3, 31)  # PND 90/91 on paper
E_FILING_DEADLINE = (4, 8)  # Revenue Department extension for online filing
DUE_SOON_DAYS = 30
