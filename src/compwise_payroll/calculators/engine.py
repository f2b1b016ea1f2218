"""Payroll calculation engine - main orchestrator."""

from __future__ import annotations

import logging
from decimal import Decimal

from compwise_payroll.calculators.coercion import MONTHS_PER_YEAR, clamp
from compwise_payroll.calculators.policy import DEFAULT_POLICY
from compwise_payroll.calculators.rounding import round_amount
from compwise_payroll.calculators.slab_tax import compute_slab_tax
from compwise_payroll.calculators.types import (
    ZERO,
    AnnualBreakdown,
    CompensationPolicy,
    DeductionsBreakdown,
    EarningsBreakdown,
    LineItem,
    MonthlyBreakdown,
    PayInput,
    PayrollFlags,
    PayrollResult,
    TaxRegime,
)

logger = logging.getLogger(__name__)

ONE = Decimal("1")


class PayrollEngine:
    """Main payroll calculation engine.

    Calculation pipeline (stable order):
    1) Proration factor from payment days
    2) Full-month earnings split (Basic, HRA, fixed, Special as residual)
    3) Prorate Basic/HRA/Special (fixed allowances are never prorated)
    4) Gross payable, including custom earnings
    5) Provident fund on Basic
    6) State insurance on gross payable, if monthly gross is under threshold
    7) Flat professional tax
    8) Income tax projected from the annualized full gross
    9) Totals and net pay
    10) Annual view recomputed from full-month figures
    11) Advisory flags

    Every listed amount is rounded to whole units before it feeds the next
    step. The engine holds no state and never raises for finite inputs
    inside the decimal context's exponent range.
    """

    def calculate(self, pay_input: PayInput, policy: CompensationPolicy) -> PayrollResult:
        """Calculate the monthly and annual breakdown for one employee."""
        gross = pay_input.monthly_gross
        allowances = pay_input.fixed_allowances

        # 1) Proration
        factor = clamp(
            Decimal(pay_input.payment_days) / Decimal(max(1, pay_input.month_days)),
            ZERO,
            ONE,
        )

        # 2) Full-month split
        basic_full = round_amount(gross * policy.basic_pct_of_gross)
        hra_full = round_amount(basic_full * policy.hra_pct_of_basic)
        fixed_full = round_amount(allowances.total)
        special_raw = gross - (basic_full + hra_full + fixed_full)
        special_full = round_amount(max(ZERO, special_raw))
        fixed_too_high = special_raw < 0

        earnings_full = EarningsBreakdown(
            basic=basic_full,
            hra=hra_full,
            special=special_full,
            conveyance=allowances.conveyance,
            medical=allowances.medical,
            lunch=allowances.lunch,
        )

        # 3) Prorated earnings
        earnings = EarningsBreakdown(
            basic=round_amount(basic_full * factor),
            hra=round_amount(hra_full * factor),
            special=round_amount(special_full * factor),
            conveyance=allowances.conveyance,
            medical=allowances.medical,
            lunch=allowances.lunch,
        )

        # 4) Gross payable
        custom_earnings_total = _sum_items(pay_input.custom_earnings)
        gross_payable = earnings.total + custom_earnings_total

        # 5) Provident fund
        pf, vpf = self._provident_fund(basic_full * factor, policy)

        # 6) State insurance
        si_eligible = (
            policy.state_insurance.apply
            and gross <= policy.state_insurance.monthly_threshold
        )
        state_insurance = (
            round_amount(gross_payable * policy.state_insurance.employee_rate)
            if si_eligible
            else ZERO
        )

        # 7) Professional tax
        professional_tax = self._professional_tax(policy)

        # 8) Income tax projection
        annual_tax, tds = self._income_tax(pay_input, policy)

        # 9) Totals
        custom_deductions_total = _sum_items(pay_input.custom_deductions)
        deductions = DeductionsBreakdown(
            provident_fund=pf,
            voluntary_provident_fund=vpf,
            state_insurance=state_insurance,
            professional_tax=professional_tax,
            income_tax=tds,
        )
        total_deductions = deductions.total + custom_deductions_total
        net_pay = gross_payable - total_deductions

        monthly = MonthlyBreakdown(
            earnings=earnings,
            earnings_full=earnings_full,
            gross_payable=gross_payable,
            deductions=deductions,
            total_deductions=total_deductions,
            net_pay=net_pay,
            custom_earnings=pay_input.custom_earnings,
            custom_deductions=pay_input.custom_deductions,
            custom_earnings_total=custom_earnings_total,
            custom_deductions_total=custom_deductions_total,
        )

        # 10) Annual view
        annual = self._annual_view(
            pay_input=pay_input,
            policy=policy,
            earnings_full=earnings_full,
            fixed_full=fixed_full,
            si_eligible=si_eligible,
            tds=tds,
            annual_tax=annual_tax,
            custom_earnings_total=custom_earnings_total,
            custom_deductions_total=custom_deductions_total,
        )

        # 11) Flags
        flags = PayrollFlags(
            negative_net=net_pay < 0,
            state_insurance_eligible=si_eligible,
            fixed_allowances_exceed_gross=fixed_too_high,
        )

        logger.debug(
            "Calculated payroll: gross=%s factor=%s gross_payable=%s net=%s regime=%s",
            gross,
            factor,
            gross_payable,
            net_pay,
            policy.income_tax.regime.value,
        )

        return PayrollResult(
            prorated_factor=factor,
            monthly=monthly,
            annual=annual,
            flags=flags,
        )

    def _provident_fund(
        self, base: Decimal, policy: CompensationPolicy
    ) -> tuple[Decimal, Decimal]:
        """Employee PF and VPF on a (possibly prorated) Basic base."""
        pf_policy = policy.provident_fund
        if not pf_policy.apply:
            return ZERO, ZERO

        if pf_policy.restrict_base_to_ceiling:
            base = min(base, pf_policy.wage_ceiling)

        pf = round_amount(base * pf_policy.employee_rate)
        vpf = (
            round_amount(base * pf_policy.voluntary_rate)
            if pf_policy.voluntary_rate > 0
            else ZERO
        )
        return pf, vpf

    def _professional_tax(self, policy: CompensationPolicy) -> Decimal:
        if not policy.professional_tax.apply:
            return ZERO
        return round_amount(policy.professional_tax.monthly_amount)

    def _income_tax(
        self, pay_input: PayInput, policy: CompensationPolicy
    ) -> tuple[Decimal, Decimal]:
        """Projected annual tax (with cess) and its monthly TDS share.

        The projection always uses the full, un-prorated monthly gross.
        """
        tax_policy = policy.income_tax
        if not tax_policy.apply:
            return ZERO, ZERO

        regime = tax_policy.regime
        annual_gross = pay_input.monthly_gross * MONTHS_PER_YEAR
        # New regime allows no exemptions beyond the standard deduction
        exemptions = (
            pay_input.additional_exemptions_annual if regime == TaxRegime.OLD else ZERO
        )
        taxable = max(ZERO, annual_gross - tax_policy.standard_deduction - exemptions)

        core_tax = compute_slab_tax(taxable, tax_policy.slabs_for(regime))
        if regime == TaxRegime.NEW and taxable <= tax_policy.rebate_threshold:
            core_tax = ZERO

        annual_tax = round_amount(core_tax * (ONE + tax_policy.cess_rate))
        tds = round_amount(annual_tax / MONTHS_PER_YEAR)
        return annual_tax, tds

    def _annual_view(
        self,
        pay_input: PayInput,
        policy: CompensationPolicy,
        earnings_full: EarningsBreakdown,
        fixed_full: Decimal,
        si_eligible: bool,
        tds: Decimal,
        annual_tax: Decimal,
        custom_earnings_total: Decimal,
        custom_deductions_total: Decimal,
    ) -> AnnualBreakdown:
        """Full-year view from full-month figures, not monthly x 12."""
        months = MONTHS_PER_YEAR

        pf, vpf = self._provident_fund(earnings_full.basic, policy)
        full_month_gross = (
            earnings_full.basic + earnings_full.hra + earnings_full.special + fixed_full
        )
        state_insurance = (
            round_amount(full_month_gross * policy.state_insurance.employee_rate)
            if si_eligible
            else ZERO
        )

        deductions = DeductionsBreakdown(
            provident_fund=pf * months,
            voluntary_provident_fund=vpf * months,
            state_insurance=state_insurance * months,
            professional_tax=self._professional_tax(policy) * months,
            income_tax=tds * months,
        )
        total_deductions = deductions.total + custom_deductions_total * months
        net_pay = (full_month_gross + custom_earnings_total) * months - total_deductions

        earnings = EarningsBreakdown(
            basic=earnings_full.basic * months,
            hra=earnings_full.hra * months,
            special=earnings_full.special * months,
            conveyance=earnings_full.conveyance * months,
            medical=earnings_full.medical * months,
            lunch=earnings_full.lunch * months,
        )

        return AnnualBreakdown(
            earnings=earnings,
            gross=pay_input.monthly_gross * months,
            deductions=deductions,
            total_deductions=total_deductions,
            net_pay=net_pay,
            tax_projected=annual_tax,
        )


def calculate_payroll(
    pay_input: PayInput, policy: CompensationPolicy | None = None
) -> PayrollResult:
    """Calculate with ``policy`` or the default policy when omitted."""
    if policy is None:
        policy = DEFAULT_POLICY
    return PayrollEngine().calculate(pay_input, policy)


def _sum_items(items: tuple[LineItem, ...]) -> Decimal:
    return sum((item.amount for item in items), ZERO)
