"""Core data models for Thai personal income tax calculations.

This module implements the value types exchanged with the tax engine:
income declarations, deductions, calculation results, penalty scenarios
and optimization suggestions. Every model is constructed per request and
discarded after the caller reads it.

All monetary amounts are Thai Baht as ``Decimal``.

Reference: Thai Revenue Code, Section 40 (assessable income) and
Sections 47-48 (allowances and rates).
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


# =============================================================================
# ENUMERATIONS
# =============================================================================

class IncomeType(str, Enum):
    """Section 40 assessable income categories."""
    SALARY = "salary"                                # 40(1)
    SERVICE = "service"                              # 40(2)
    INTELLECTUAL_PROPERTY = "intellectual_property"  # 40(3)
    PASSIVE = "passive"                              # 40(4) interest, dividends
    RENTAL = "rental"                                # 40(5)
    PROFESSIONAL = "professional"                    # 40(6)
    CONTRACT = "contract"                            # 40(7)
    BUSINESS = "business"                            # 40(8)

    @property
    def section(self) -> int:
        """Paragraph number of Section 40 (1-8)."""
        return _SECTION_NUMBERS[self]

    @property
    def is_employment(self) -> bool:
        """Whether this is employment income, excluded from the alternative method."""
        return self is IncomeType.SALARY

    @classmethod
    def from_section(cls, section: int) -> "IncomeType":
        """Look up an income type by its Section 40 paragraph number."""
        for income_type, number in _SECTION_NUMBERS.items():
            if number == section:
                return income_type
        raise ValueError(f"Section 40 has no paragraph {section}")


_SECTION_NUMBERS = {income_type: i for i, income_type in enumerate(IncomeType, start=1)}


class DeductionMode(str, Enum):
    """How the expense deduction of an income entry is claimed."""
    STANDARD = "standard"
    ACTUAL = "actual"


class TaxMethod(str, Enum):
    """Method that produced the final tax due."""
    PROGRESSIVE = "progressive"
    ALTERNATIVE = "alternative"


class PenaltyKind(str, Enum):
    """Filing scenarios that attract surcharges or penalties."""
    LATE_FILING = "late_filing"
    NON_FILING = "non_filing"
    INACCURATE_FILING = "inaccurate_filing"
    VOLUNTARY_DISCLOSURE = "voluntary_disclosure"


class SuggestionCategory(str, Enum):
    """Kinds of optimization advice."""
    ADDITIONAL_DEDUCTION = "additional_deduction"
    INVESTMENT_OPPORTUNITY = "investment_opportunity"
    INCOME_TIMING = "income_timing"
    BRACKET_OPTIMIZATION = "bracket_optimization"
    MISSING_DOCUMENT = "missing_document"


class Difficulty(str, Enum):
    """Effort needed to act on a suggestion."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Priority(str, Enum):
    """Urgency of a suggestion."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FilingStatus(str, Enum):
    """Filing urgency for a tax year."""
    NOT_DUE = "not_due"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"


# =============================================================================
# DECLARATION
# =============================================================================

class IncomeEntry(BaseModel):
    """A single item of declared income for a tax year."""
    model_config = {"frozen": True}

    income_type: IncomeType
    amount: Decimal = Decimal("0")
    deduction_mode: DeductionMode = DeductionMode.STANDARD
    actual_expenses: Optional[Decimal] = None  # Used only in actual mode


class Deductions(BaseModel):
    """Allowances and deductions claimed for a tax year.

    Per-dependent allowances are supplied already multiplied out
    (e.g. child_allowance = 30,000 x number of children).
    """
    model_config = {"frozen": True}

    # Allowances
    personal_allowance: Decimal = Decimal("0")
    spouse_allowance: Decimal = Decimal("0")
    child_allowance: Decimal = Decimal("0")
    parent_allowance: Decimal = Decimal("0")
    disability_allowance: Decimal = Decimal("0")

    # Insurance and investments
    life_insurance: Decimal = Decimal("0")
    health_insurance: Decimal = Decimal("0")
    pension_insurance: Decimal = Decimal("0")
    rmf: Decimal = Decimal("0")
    ssf: Decimal = Decimal("0")
    social_security: Decimal = Decimal("0")
    home_loan_interest: Decimal = Decimal("0")

    # Capped against income after allowances
    donation: Decimal = Decimal("0")

    @property
    def retirement_total(self) -> Decimal:
        """RMF + SSF + pension insurance, which share one combined cap."""
        return self.rmf + self.ssf + self.pension_insurance


class TaxCalculationInput(BaseModel):
    """Complete income and deduction declaration for one tax year."""
    model_config = {"frozen": True}

    tax_year: int
    incomes: list[IncomeEntry] = Field(default_factory=list)
    deductions: Deductions = Field(default_factory=Deductions)
    withholding_tax_credit: Decimal = Decimal("0")


# =============================================================================
# RULE DATA
# =============================================================================

class TaxBracket(BaseModel):
    """One progressive bracket. ``max_income`` of None means unbounded."""
    model_config = {"frozen": True}

    min_income: Decimal
    max_income: Optional[Decimal] = None
    rate: Decimal
    base_tax: Decimal

    def contains(self, income: Decimal) -> bool:
        """Whether ``income`` falls at or below this bracket's ceiling."""
        return self.max_income is None or income <= self.max_income


# =============================================================================
# CALCULATION RESULTS
# =============================================================================

class AuditEntry(BaseModel):
    """Audit log entry for calculation transparency."""
    model_config = {"frozen": True}

    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None


class TaxCalculationResult(BaseModel):
    """Complete breakdown of a tax calculation."""
    model_config = {"frozen": True}

    tax_year: int

    # Income
    income_by_type: dict[IncomeType, Decimal]
    total_gross_income: Decimal
    total_expense_deduction: Decimal
    net_income: Decimal

    # Deductions
    total_allowances: Decimal
    total_investments: Decimal
    donation_deduction: Decimal
    taxable_income: Decimal

    # Tax
    tax_by_progressive_method: Decimal
    tax_by_alternative_method: Decimal
    final_tax_due: Decimal
    binding_method: TaxMethod
    effective_tax_rate: Decimal

    # Settlement
    withholding_tax_credit: Decimal
    tax_payable_or_refund: Decimal  # Negative means refund

    audit_log: list[AuditEntry] = Field(default_factory=list)

    @property
    def total_deductions(self) -> Decimal:
        """Allowances + investments + donation."""
        return self.total_allowances + self.total_investments + self.donation_deduction

    @property
    def is_refund(self) -> bool:
        """Whether withholding exceeds the final tax due."""
        return self.tax_payable_or_refund < 0

    @property
    def non_employment_income(self) -> Decimal:
        """Gross income of Section 40(2)-(8)."""
        return sum(
            (amount for income_type, amount in self.income_by_type.items()
             if not income_type.is_employment),
            Decimal("0"),
        )

    def to_tool_payload(self) -> dict[str, Any]:
        """JSON-safe summary for a chat assistant's tax estimate tool."""
        return {
            "taxYear": self.tax_year,
            "totalIncome": float(self.total_gross_income),
            "taxableIncome": float(self.taxable_income),
            "estimatedTax": float(self.final_tax_due),
            "effectiveTaxRate": float(self.effective_tax_rate),
            "method": self.binding_method.value.capitalize(),
        }


# =============================================================================
# PENALTIES
# =============================================================================

class PenaltyScenario(BaseModel):
    """Circumstances of a late, missing or inaccurate filing."""
    model_config = {"frozen": True}

    kind: PenaltyKind
    months_late: int = 0  # Negative is treated as zero
    is_voluntary: bool = False
    payment_timeline_days: int = 0


class PenaltyResult(BaseModel):
    """Amounts owed under a penalty scenario."""
    model_config = {"frozen": True}

    original_tax: Decimal
    surcharge: Decimal
    penalty: Decimal
    criminal_fine: Decimal
    total_due: Decimal


# =============================================================================
# OPTIMIZATION
# =============================================================================

class OptimizationSuggestion(BaseModel):
    """A single tax-saving opportunity."""
    model_config = {"frozen": True}

    id: str
    category: SuggestionCategory
    title: str
    title_th: str
    description: str
    action_required: str
    potential_saving: Decimal = Field(ge=0)
    difficulty: Difficulty
    priority: Priority
    deadline: Optional[date] = None


class UnusedDeductionCapacity(BaseModel):
    """Remaining room under each capped deduction (never negative)."""
    model_config = {"frozen": True}

    rmf: Decimal
    ssf: Decimal
    pension_insurance: Decimal
    life_insurance: Decimal
    health_insurance: Decimal
    home_loan_interest: Decimal


class TaxOptimizationInput(BaseModel):
    """Inputs for optimization analysis."""
    model_config = {"frozen": True}

    tax_year: int
    taxable_income: Decimal
    current_tax_amount: Decimal
    current_deductions: Deductions = Field(default_factory=Deductions)
    income_by_type: dict[IncomeType, Decimal] = Field(default_factory=dict)
    months_elapsed: int = 12  # Clamped to 0-12 when projecting
    uncertified_withholding: Decimal = Decimal("0")


class OptimizationResult(BaseModel):
    """Bracket position and ranked suggestions.

    ``total_potential_savings`` is the plain sum of independent suggestions;
    several of them assume the same unspent cash, so it is an upper bound.
    """
    model_config = {"frozen": True}

    current_bracket: TaxBracket
    next_bracket: Optional[TaxBracket] = None
    amount_to_next_bracket: Decimal
    effective_tax_rate: Decimal
    suggestions: list[OptimizationSuggestion] = Field(default_factory=list)
    total_potential_savings: Decimal
    unused_deduction_capacity: UnusedDeductionCapacity


# =============================================================================
# WITHHOLDING AND FILING
# =============================================================================

class WithholdingTransaction(BaseModel):
    """An income transaction with tax withheld at source."""
    amount: Decimal
    withholding_tax: Decimal = Decimal("0")
    withholding_tax_rate: Optional[Decimal] = None  # e.g. Decimal("3") for 3%
    income_type: Optional[IncomeType] = None
    has_withholding_certificate: bool = False


class WithholdingTaxSummary(BaseModel):
    """Totals of tax withheld at source."""
    total_withheld: Decimal = Decimal("0")
    by_rate: dict[Decimal, Decimal] = Field(default_factory=dict)
    by_income_type: dict[Optional[IncomeType], Decimal] = Field(default_factory=dict)
    missing_certificates: int = 0
    uncertified_amount: Decimal = Decimal("0")


class FilingDeadlines(BaseModel):
    """Personal income tax filing deadlines for a tax year."""
    tax_year: int
    paper_filing_deadline: date
    e_filing_deadline: date
    days_until_paper_deadline: int
    days_until_e_filing_deadline: int
    is_overdue: bool
