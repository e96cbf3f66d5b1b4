#!/usr/bin/env python3
"""
Thai Personal Income Tax Demonstration

This script walks a freelancer with a side salary through the engine:
1. Declare income and deductions
2. Calculate tax under both methods
3. Rank tax-saving suggestions
4. Price a late filing

Run: python packages/core/examples/thai_tax_demo.py
"""

from datetime import date
from decimal import Decimal

from taxify_core import (
    DeductionMode,
    Deductions,
    IncomeEntry,
    IncomeType,
    PenaltyKind,
    PenaltyScenario,
    TaxifyConfig,
    analyze_optimization,
    calculate_penalties,
    calculate_tax,
    configure_logging,
    get_filing_deadlines,
)

TAX_YEAR = 2024


def create_sample_declaration() -> tuple[list[IncomeEntry], Deductions]:
    """Salary plus consulting and rental income with common deductions."""
    incomes = [
        IncomeEntry(income_type=IncomeType.SALARY, amount=Decimal("480000")),
        IncomeEntry(income_type=IncomeType.PROFESSIONAL, amount=Decimal("350000")),
        IncomeEntry(
            income_type=IncomeType.RENTAL,
            amount=Decimal("144000"),
            deduction_mode=DeductionMode.ACTUAL,
            actual_expenses=Decimal("52000"),
        ),
    ]
    deductions = Deductions(
        personal_allowance=Decimal("60000"),
        parent_allowance=Decimal("30000"),
        life_insurance=Decimal("24000"),
        social_security=Decimal("9000"),
        ssf=Decimal("50000"),
        donation=Decimal("5000"),
    )
    return incomes, deductions


def main():
    """Run the demo."""
    configure_logging(TaxifyConfig(log_level="WARNING"))

    print("=" * 70)
    print("TAXIFY CORE - Thai Personal Income Tax Demo")
    print("=" * 70)
    print()

    # Step 1: Declaration
    print("Step 1: Creating sample declaration...")
    incomes, deductions = create_sample_declaration()
    for entry in incomes:
        print(f"  - 40({entry.income_type.section}) {entry.income_type.value}: {entry.amount:,.2f} THB")
    print()

    # Step 2: Calculation
    print("Step 2: Calculating tax...")
    result = calculate_tax(TAX_YEAR, incomes, deductions, withholding_tax_credit=Decimal("15000"))
    print(f"  - Gross Income: {result.total_gross_income:,.2f} THB")
    print(f"  - Expense Deduction: {result.total_expense_deduction:,.2f} THB")
    print(f"  - Total Deductions: {result.total_deductions:,.2f} THB")
    print(f"  - Taxable Income: {result.taxable_income:,.2f} THB")
    print(f"  - Progressive Tax: {result.tax_by_progressive_method:,.2f} THB")
    print(f"  - Alternative Tax: {result.tax_by_alternative_method:,.2f} THB")
    print(f"  - Final Tax ({result.binding_method.value}): {result.final_tax_due:,.2f} THB")
    print(f"  - Effective Rate: {result.effective_tax_rate:.2%}")
    label = "Refund" if result.is_refund else "Payable"
    print(f"  - {label}: {abs(result.tax_payable_or_refund):,.2f} THB")
    print()

    # Step 3: Optimization
    print("Step 3: Looking for savings...")
    advice = analyze_optimization(
        TAX_YEAR,
        result.taxable_income,
        result.final_tax_due,
        deductions,
        {IncomeType.PROFESSIONAL: Decimal("350000")},
        months_elapsed=9,
    )
    print(f"  - Current Bracket: {advice.current_bracket.rate:.0%}")
    print(f"  - To Next Bracket: {advice.amount_to_next_bracket:,.2f} THB")
    for suggestion in advice.suggestions:
        print(f"  - [{suggestion.priority.value}] {suggestion.title} / {suggestion.title_th}: "
              f"save up to {suggestion.potential_saving:,.2f} THB")
    print(f"  - Combined (upper bound): {advice.total_potential_savings:,.2f} THB")
    print()

    # Step 4: Late filing
    print("Step 4: Pricing a filing two months late...")
    deadlines = get_filing_deadlines(TAX_YEAR, today=date(TAX_YEAR + 1, 1, 15))
    print(f"  - E-filing Deadline: {deadlines.e_filing_deadline.isoformat()}")
    penalty = calculate_penalties(
        max(result.tax_payable_or_refund, Decimal("0")),
        PenaltyScenario(kind=PenaltyKind.LATE_FILING, months_late=2),
    )
    print(f"  - Surcharge: {penalty.surcharge:,.2f} THB")
    print(f"  - Fine: {penalty.criminal_fine:,.2f} THB")
    print(f"  - Total Due: {penalty.total_due:,.2f} THB")
    print()

    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
