"""Surcharges, penalties and fines for late or incorrect filing."""

from decimal import Decimal
from typing import Any

import structlog

from .calculator import ZERO, to_decimal
from .models import PenaltyKind, PenaltyResult, PenaltyScenario
from .tax_rules import (
    INACCURATE_FILING_PENALTY_RATE,
    LATE_FILING_FINE_HIGH,
    LATE_FILING_FINE_LOW,
    NON_FILING_PENALTY_RATE,
    SURCHARGE_MAX_MULTIPLIER,
    SURCHARGE_MONTHLY_RATE,
    VOLUNTARY_PENALTY_SCHEDULE,
    get_voluntary_penalty_rate,
)

logger = structlog.get_logger()


def calculate_surcharge(tax_due: Decimal, months_late: int) -> Decimal:
    """Monthly surcharge, capped at 100% of the tax due.

    Negative ``months_late`` is treated as zero.
    """
    months_late = max(months_late, 0)
    if tax_due <= 0 or months_late == 0:
        return ZERO
    return min(
        tax_due * SURCHARGE_MONTHLY_RATE * months_late,
        tax_due * SURCHARGE_MAX_MULTIPLIER,
    )


def calculate_penalties(tax_due: Any, scenario: PenaltyScenario) -> PenaltyResult:
    """
    Calculate the amounts owed under a filing scenario.

    The surcharge accrues for every scenario kind. On top of it:
    - Late filing: criminal fine only (higher after the first month)
    - Non-filing: 200% penalty, or the voluntary schedule if self-reported
    - Inaccurate filing: 100% penalty, or the voluntary schedule if self-reported
    - Voluntary disclosure: the prompt-payment (<= 15 days) rate only

    Args:
        tax_due: Tax owed before penalties (negative is treated as zero)
        scenario: Filing circumstances (negative months or days count as zero)

    Returns:
        PenaltyResult with total amount due
    """
    tax_due = max(to_decimal(tax_due), ZERO)
    months_late = max(scenario.months_late, 0)
    payment_days = max(scenario.payment_timeline_days, 0)
    surcharge = calculate_surcharge(tax_due, months_late)
    penalty = ZERO
    criminal_fine = ZERO

    if scenario.kind == PenaltyKind.LATE_FILING:
        criminal_fine = LATE_FILING_FINE_LOW if months_late <= 1 else LATE_FILING_FINE_HIGH

    elif scenario.kind == PenaltyKind.NON_FILING:
        if scenario.is_voluntary:
            penalty = tax_due * get_voluntary_penalty_rate(payment_days)
        else:
            # Detected on audit
            penalty = tax_due * NON_FILING_PENALTY_RATE

    elif scenario.kind == PenaltyKind.INACCURATE_FILING:
        if scenario.is_voluntary:
            penalty = tax_due * get_voluntary_penalty_rate(payment_days)
        else:
            penalty = tax_due * INACCURATE_FILING_PENALTY_RATE

    elif scenario.kind == PenaltyKind.VOLUNTARY_DISCLOSURE:
        prompt_days, prompt_rate = VOLUNTARY_PENALTY_SCHEDULE[0]
        if payment_days <= prompt_days:
            penalty = tax_due * prompt_rate

    total_due = tax_due + surcharge + penalty + criminal_fine

    logger.info(
        "penalty_calculated",
        kind=scenario.kind.value,
        tax_due=str(tax_due),
        surcharge=str(surcharge),
        penalty=str(penalty),
        criminal_fine=str(criminal_fine),
        total_due=str(total_due),
    )

    return PenaltyResult(
        original_tax=tax_due,
        surcharge=surcharge,
        penalty=penalty,
        criminal_fine=criminal_fine,
        total_due=total_due,
    )
