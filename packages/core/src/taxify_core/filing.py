"""Withholding totals, year-to-date estimates and filing deadlines."""

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

import structlog

from .calculator import ZERO, to_decimal
from .models import (
    FilingDeadlines,
    FilingStatus,
    WithholdingTaxSummary,
    WithholdingTransaction,
)
from .tax_rules import DUE_SOON_DAYS, E_FILING_DEADLINE, PAPER_FILING_DEADLINE

logger = structlog.get_logger()

RATE_PRECISION = Decimal("0.01")


def _withholding_rate(tx: WithholdingTransaction) -> Optional[Decimal]:
    """Declared rate in percent, else derived from the amounts."""
    if tx.withholding_tax_rate is not None:
        return tx.withholding_tax_rate
    if tx.amount > 0:
        return (tx.withholding_tax / tx.amount * 100).quantize(RATE_PRECISION)
    return None


def summarize_withholding(transactions: Iterable[WithholdingTransaction]) -> WithholdingTaxSummary:
    """
    Total tax withheld at source across income transactions.

    Only transactions with positive withholding are counted. Withholding
    without a certificate is tallied separately because it cannot be
    credited until the payer issues one.
    """
    summary = WithholdingTaxSummary()

    for tx in transactions:
        if tx.withholding_tax <= 0:
            continue

        summary.total_withheld += tx.withholding_tax

        rate = _withholding_rate(tx)
        if rate is not None:
            summary.by_rate[rate] = summary.by_rate.get(rate, ZERO) + tx.withholding_tax

        summary.by_income_type[tx.income_type] = (
            summary.by_income_type.get(tx.income_type, ZERO) + tx.withholding_tax
        )

        if not tx.has_withholding_certificate:
            summary.missing_certificates += 1
            summary.uncertified_amount += tx.withholding_tax

    if summary.missing_certificates:
        logger.warning(
            "withholding_certificates_missing",
            count=summary.missing_certificates,
            uncertified_amount=str(summary.uncertified_amount),
        )

    return summary


def estimate_tax_to_date(yearly_estimate: Any, current_month: int) -> Decimal:
    """Pro-rata share of the yearly tax through ``current_month`` (0 = January)."""
    if not 0 <= current_month <= 11:
        raise ValueError(f"current_month must be 0-11, got {current_month}")
    return to_decimal(yearly_estimate) / 12 * (current_month + 1)


def get_filing_deadlines(tax_year: int, today: Optional[date] = None) -> FilingDeadlines:
    """Paper and e-filing deadlines for a tax year, relative to ``today``."""
    today = today or date.today()
    paper = date(tax_year + 1, *PAPER_FILING_DEADLINE)
    e_filing = date(tax_year + 1, *E_FILING_DEADLINE)
    days_until_e_filing = (e_filing - today).days

    return FilingDeadlines(
        tax_year=tax_year,
        paper_filing_deadline=paper,
        e_filing_deadline=e_filing,
        days_until_paper_deadline=(paper - today).days,
        days_until_e_filing_deadline=days_until_e_filing,
        is_overdue=days_until_e_filing < 0,
    )


def get_filing_status(
    estimated_tax: Any,
    deadline: date,
    today: Optional[date] = None,
) -> FilingStatus:
    """
    Filing urgency for an estimated tax amount.

    Nothing is due when no tax is owed. Otherwise the status turns
    DUE_SOON within 30 days of the deadline and OVERDUE after it.
    """
    if to_decimal(estimated_tax) <= 0:
        return FilingStatus.NOT_DUE

    today = today or date.today()
    days_left = (deadline - today).days
    if days_left < 0:
        return FilingStatus.OVERDUE
    if days_left <= DUE_SOON_DAYS:
        return FilingStatus.DUE_SOON
    return FilingStatus.NOT_DUE
