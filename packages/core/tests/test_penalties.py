"""Tests for surcharge and penalty calculations."""

from decimal import Decimal

import pytest

from taxify_core import PenaltyKind, PenaltyScenario, calculate_penalties, calculate_surcharge
from taxify_core.tax_rules import get_voluntary_penalty_rate

TAX_DUE = Decimal("10000")


class TestSurcharge:
    """Tests for calculate_surcharge."""

    def test_monthly_accrual(self):
        assert calculate_surcharge(TAX_DUE, 1) == Decimal("150")
        assert calculate_surcharge(TAX_DUE, 4) == Decimal("600")

    def test_capped_at_tax_due(self):
        assert calculate_surcharge(TAX_DUE, 100) == TAX_DUE

    def test_no_surcharge_without_tax(self):
        assert calculate_surcharge(Decimal("0"), 12) == 0

    def test_no_surcharge_when_on_time(self):
        assert calculate_surcharge(TAX_DUE, 0) == 0


class TestVoluntaryPenaltyRate:
    """Tests for the voluntary settlement schedule."""

    @pytest.mark.parametrize(
        "days,rate",
        [(0, "0.02"), (15, "0.02"), (16, "0.05"), (30, "0.05"), (60, "0.10"), (61, "0.20"), (365, "0.20")],
    )
    def test_schedule(self, days: int, rate: str):
        assert get_voluntary_penalty_rate(days) == Decimal(rate)


class TestCalculatePenalties:
    """Tests for calculate_penalties."""

    def test_late_filing_within_a_month(self):
        result = calculate_penalties(TAX_DUE, PenaltyScenario(kind=PenaltyKind.LATE_FILING, months_late=1))

        assert result.surcharge == Decimal("150")
        assert result.penalty == 0
        assert result.criminal_fine == Decimal("100")
        assert result.total_due == Decimal("10250")

    def test_late_filing_after_a_month(self):
        result = calculate_penalties(TAX_DUE, PenaltyScenario(kind=PenaltyKind.LATE_FILING, months_late=3))

        assert result.surcharge == Decimal("450")
        assert result.criminal_fine == Decimal("200")

    def test_non_filing_detected(self):
        result = calculate_penalties(TAX_DUE, PenaltyScenario(kind=PenaltyKind.NON_FILING, months_late=2))

        assert result.penalty == Decimal("20000")
        assert result.surcharge == Decimal("300")
        assert result.criminal_fine == 0
        assert result.total_due == Decimal("30300")

    def test_non_filing_voluntary_within_30_days(self):
        """Self-reported and settled in 20 days: 5% penalty."""
        result = calculate_penalties(
            TAX_DUE,
            PenaltyScenario(
                kind=PenaltyKind.NON_FILING,
                months_late=1,
                is_voluntary=True,
                payment_timeline_days=20,
            ),
        )

        assert result.penalty == Decimal("500")
        assert result.surcharge == Decimal("150")
        assert result.total_due == Decimal("10650")

    def test_inaccurate_filing_detected(self):
        result = calculate_penalties(TAX_DUE, PenaltyScenario(kind=PenaltyKind.INACCURATE_FILING))
        assert result.penalty == TAX_DUE

    def test_inaccurate_filing_voluntary(self):
        result = calculate_penalties(
            TAX_DUE,
            PenaltyScenario(kind=PenaltyKind.INACCURATE_FILING, is_voluntary=True, payment_timeline_days=45),
        )
        assert result.penalty == Decimal("1000")

    def test_voluntary_disclosure_paid_promptly(self):
        result = calculate_penalties(
            TAX_DUE,
            PenaltyScenario(kind=PenaltyKind.VOLUNTARY_DISCLOSURE, payment_timeline_days=10),
        )
        assert result.penalty == Decimal("200")

    def test_voluntary_disclosure_after_15_days_has_no_penalty(self):
        result = calculate_penalties(
            TAX_DUE,
            PenaltyScenario(kind=PenaltyKind.VOLUNTARY_DISCLOSURE, payment_timeline_days=20),
        )
        assert result.penalty == 0

    def test_surcharge_independent_of_kind(self):
        surcharges = {
            calculate_penalties(TAX_DUE, PenaltyScenario(kind=kind, months_late=5)).surcharge
            for kind in PenaltyKind
        }
        assert surcharges == {Decimal("750")}

    def test_zero_tax_late_filing_still_fined(self):
        result = calculate_penalties(0, PenaltyScenario(kind=PenaltyKind.LATE_FILING, months_late=2))

        assert result.surcharge == 0
        assert result.criminal_fine == Decimal("200")
        assert result.total_due == Decimal("200")

    def test_negative_tax_treated_as_zero(self):
        result = calculate_penalties(
            Decimal("-500"), PenaltyScenario(kind=PenaltyKind.NON_FILING, months_late=3)
        )
        assert result.original_tax == 0
        assert result.total_due == 0

    def test_total_is_sum_of_parts(self):
        result = calculate_penalties(
            Decimal("12345.67"),
            PenaltyScenario(kind=PenaltyKind.INACCURATE_FILING, months_late=7, is_voluntary=True,
                            payment_timeline_days=100),
        )
        assert result.total_due == (
            result.original_tax + result.surcharge + result.penalty + result.criminal_fine
        )

    def test_negative_months_treated_as_zero(self):
        negative = calculate_penalties(TAX_DUE, PenaltyScenario(kind=PenaltyKind.LATE_FILING, months_late=-1))
        on_time = calculate_penalties(TAX_DUE, PenaltyScenario(kind=PenaltyKind.LATE_FILING, months_late=0))

        assert negative == on_time
        assert negative.surcharge == 0

    def test_negative_payment_days_treated_as_zero(self):
        result = calculate_penalties(
            TAX_DUE,
            PenaltyScenario(kind=PenaltyKind.VOLUNTARY_DISCLOSURE, payment_timeline_days=-5),
        )
        assert result.penalty == Decimal("200")

    def test_surcharge_negative_months(self):
        assert calculate_surcharge(TAX_DUE, -3) == 0
