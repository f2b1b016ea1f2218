"""Property-based tests for payroll calculation invariants.

Random gross amounts, allowances and day counts must never break the
arithmetic relationships between the monthly and annual figures.
"""

from __future__ import annotations

from decimal import Decimal

from hypothesis import given, settings, strategies as st

from compwise_payroll.calculators.engine import PayrollEngine
from compwise_payroll.calculators.policy import DEFAULT_POLICY, update_policy
from compwise_payroll.calculators.types import FixedAllowances, LineItem, PayInput

ENGINE = PayrollEngine()
ESI_POLICY = update_policy(DEFAULT_POLICY, {"state_insurance": {"apply": True}})

amounts = st.integers(min_value=0, max_value=500_000).map(Decimal)
allowance_amounts = st.integers(min_value=0, max_value=5_000).map(Decimal)


@st.composite
def pay_inputs(draw) -> PayInput:
    month_days = draw(st.integers(min_value=1, max_value=31))
    return PayInput(
        monthly_gross=draw(amounts),
        fixed_allowances=FixedAllowances(
            conveyance=draw(allowance_amounts),
            medical=draw(allowance_amounts),
            lunch=draw(allowance_amounts),
        ),
        month_days=month_days,
        payment_days=draw(st.integers(min_value=0, max_value=month_days)),
        additional_exemptions_annual=draw(amounts),
        custom_earnings=tuple(
            LineItem(f"Earning {i}", amount)
            for i, amount in enumerate(draw(st.lists(allowance_amounts, max_size=3)))
        ),
        custom_deductions=tuple(
            LineItem(f"Deduction {i}", amount)
            for i, amount in enumerate(draw(st.lists(allowance_amounts, max_size=3)))
        ),
    )


class TestMonthlyInvariants:
    """Monthly figures stay internally consistent."""

    @given(pay_input=pay_inputs())
    @settings(max_examples=200)
    def test_net_is_gross_payable_minus_deductions(self, pay_input):
        monthly = ENGINE.calculate(pay_input, ESI_POLICY).monthly

        assert monthly.gross_payable == monthly.earnings.total + monthly.custom_earnings_total
        assert monthly.total_deductions == (
            monthly.deductions.total + monthly.custom_deductions_total
        )
        assert monthly.net_pay == monthly.gross_payable - monthly.total_deductions

    @given(pay_input=pay_inputs())
    def test_full_month_split_reconstructs_gross(self, pay_input):
        """Without the allowance warning, the split adds back up to gross."""
        result = ENGINE.calculate(pay_input, DEFAULT_POLICY)
        full = result.monthly.earnings_full

        if not result.flags.fixed_allowances_exceed_gross:
            assert full.total == pay_input.monthly_gross
        else:
            assert full.special == 0

    @given(pay_input=pay_inputs())
    def test_prorated_components_never_exceed_full_month(self, pay_input):
        result = ENGINE.calculate(pay_input, DEFAULT_POLICY)
        prorated = result.monthly.earnings
        full = result.monthly.earnings_full

        assert Decimal("0") <= result.prorated_factor <= Decimal("1")
        assert prorated.basic <= full.basic
        assert prorated.hra <= full.hra
        assert prorated.special <= full.special

    @given(pay_input=pay_inputs())
    def test_fixed_allowances_never_prorated(self, pay_input):
        earnings = ENGINE.calculate(pay_input, DEFAULT_POLICY).monthly.earnings
        fixed = pay_input.fixed_allowances

        assert (earnings.conveyance, earnings.medical, earnings.lunch) == (
            fixed.conveyance,
            fixed.medical,
            fixed.lunch,
        )

    @given(pay_input=pay_inputs())
    def test_provident_fund_within_ceiling(self, pay_input):
        """Restricted PF never exceeds 12% of the wage ceiling."""
        pf = ENGINE.calculate(pay_input, DEFAULT_POLICY).monthly.deductions.provident_fund
        assert Decimal("0") <= pf <= Decimal("1800")


class TestAnnualInvariants:
    """Annual figures do not depend on attendance."""

    @given(pay_input=pay_inputs())
    def test_annual_view_independent_of_payment_days(self, pay_input):
        full_month = PayInput(
            monthly_gross=pay_input.monthly_gross,
            fixed_allowances=pay_input.fixed_allowances,
            month_days=pay_input.month_days,
            payment_days=pay_input.month_days,
            additional_exemptions_annual=pay_input.additional_exemptions_annual,
            custom_earnings=pay_input.custom_earnings,
            custom_deductions=pay_input.custom_deductions,
        )

        partial = ENGINE.calculate(pay_input, ESI_POLICY)
        full = ENGINE.calculate(full_month, ESI_POLICY)

        assert partial.annual == full.annual
        assert partial.monthly.deductions.income_tax == full.monthly.deductions.income_tax

    @given(pay_input=pay_inputs())
    def test_annual_net_is_earnings_minus_deductions(self, pay_input):
        result = ENGINE.calculate(pay_input, DEFAULT_POLICY)
        annual = result.annual
        custom_earnings = result.monthly.custom_earnings_total * 12

        assert annual.net_pay == annual.earnings.total + custom_earnings - annual.total_deductions
        assert annual.gross == pay_input.monthly_gross * 12
        assert annual.tax_projected >= 0
