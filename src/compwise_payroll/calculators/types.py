"""Type definitions for the payroll calculation pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

ZERO = Decimal("0")


class TaxRegime(str, Enum):
    """Income tax regimes."""

    NEW = "new"
    OLD = "old"


@dataclass(frozen=True)
class TaxSlab:
    """One bracket of a progressive tax schedule."""

    up_to: Decimal | None  # None = no upper limit
    rate: Decimal  # As decimal, e.g., 0.05 for 5%

    @property
    def is_unbounded(self) -> bool:
        return self.up_to is None


@dataclass(frozen=True)
class ProvidentFundPolicy:
    """Provident fund (PF/VPF) deduction rules."""

    apply: bool = True
    employee_rate: Decimal = Decimal("0.12")
    voluntary_rate: Decimal = Decimal("0")
    restrict_base_to_ceiling: bool = True
    wage_ceiling: Decimal = Decimal("15000")


@dataclass(frozen=True)
class StateInsurancePolicy:
    """State insurance deduction rules (applies below a monthly threshold)."""

    apply: bool = False
    monthly_threshold: Decimal = Decimal("21000")
    employee_rate: Decimal = Decimal("0.0075")


@dataclass(frozen=True)
class ProfessionalTaxPolicy:
    """Flat monthly professional tax."""

    apply: bool = True
    monthly_amount: Decimal = Decimal("200")


@dataclass(frozen=True)
class IncomeTaxPolicy:
    """Income tax (TDS) projection rules."""

    apply: bool = True
    regime: TaxRegime = TaxRegime.NEW
    standard_deduction: Decimal = Decimal("50000")
    rebate_threshold: Decimal = Decimal("700000")
    slabs_new: tuple[TaxSlab, ...] = ()
    slabs_old: tuple[TaxSlab, ...] = ()
    cess_rate: Decimal = Decimal("0.04")

    def slabs_for(self, regime: TaxRegime) -> tuple[TaxSlab, ...]:
        return self.slabs_new if regime == TaxRegime.NEW else self.slabs_old


@dataclass(frozen=True)
class CompensationPolicy:
    """Compensation policy, immutable per calculation.

    Use ``compwise_payroll.calculators.policy.update_policy`` to derive a
    modified copy instead of mutating an instance.
    """

    basic_pct_of_gross: Decimal = Decimal("0.40")
    hra_pct_of_basic: Decimal = Decimal("0.50")
    provident_fund: ProvidentFundPolicy = field(default_factory=ProvidentFundPolicy)
    state_insurance: StateInsurancePolicy = field(default_factory=StateInsurancePolicy)
    professional_tax: ProfessionalTaxPolicy = field(default_factory=ProfessionalTaxPolicy)
    income_tax: IncomeTaxPolicy = field(default_factory=IncomeTaxPolicy)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping (decimals as strings, unbounded slabs as None)."""
        return _jsonable(asdict(self))


@dataclass(frozen=True)
class FixedAllowances:
    """Attendance-independent monthly allowances (never prorated)."""

    conveyance: Decimal = ZERO
    medical: Decimal = ZERO
    lunch: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.conveyance + self.medical + self.lunch


@dataclass(frozen=True)
class LineItem:
    """A named custom earning or deduction (never prorated)."""

    name: str
    amount: Decimal


@dataclass(frozen=True)
class PayInput:
    """Per-calculation input.

    Numeric fields are expected to be finite decimals already; see
    ``compwise_payroll.calculators.coercion`` for turning raw user input
    into a valid instance.
    """

    monthly_gross: Decimal
    fixed_allowances: FixedAllowances = field(default_factory=FixedAllowances)
    month_days: int = 30
    payment_days: int = 30
    additional_exemptions_annual: Decimal = ZERO  # Old regime only
    custom_earnings: tuple[LineItem, ...] = ()
    custom_deductions: tuple[LineItem, ...] = ()


@dataclass(frozen=True)
class EarningsBreakdown:
    """Earnings components for one month (or year)."""

    basic: Decimal
    hra: Decimal
    special: Decimal
    conveyance: Decimal
    medical: Decimal
    lunch: Decimal

    @property
    def total(self) -> Decimal:
        return (
            self.basic + self.hra + self.special
            + self.conveyance + self.medical + self.lunch
        )


@dataclass(frozen=True)
class DeductionsBreakdown:
    """Statutory deductions for one month (or year)."""

    provident_fund: Decimal
    voluntary_provident_fund: Decimal
    state_insurance: Decimal
    professional_tax: Decimal
    income_tax: Decimal

    @property
    def total(self) -> Decimal:
        return (
            self.provident_fund
            + self.voluntary_provident_fund
            + self.state_insurance
            + self.professional_tax
            + self.income_tax
        )


@dataclass(frozen=True)
class MonthlyBreakdown:
    """Monthly view: prorated earnings plus the full-month reference split."""

    earnings: EarningsBreakdown
    earnings_full: EarningsBreakdown
    gross_payable: Decimal
    deductions: DeductionsBreakdown
    total_deductions: Decimal
    net_pay: Decimal
    custom_earnings: tuple[LineItem, ...]
    custom_deductions: tuple[LineItem, ...]
    custom_earnings_total: Decimal
    custom_deductions_total: Decimal


@dataclass(frozen=True)
class AnnualBreakdown:
    """Annual view of a full, un-prorated year."""

    earnings: EarningsBreakdown
    gross: Decimal
    deductions: DeductionsBreakdown
    total_deductions: Decimal
    net_pay: Decimal
    tax_projected: Decimal


@dataclass(frozen=True)
class PayrollFlags:
    """Advisory flags; none of them stop a calculation."""

    negative_net: bool
    state_insurance_eligible: bool
    fixed_allowances_exceed_gross: bool


@dataclass(frozen=True)
class PayrollResult:
    """Result of one payroll calculation."""

    prorated_factor: Decimal
    monthly: MonthlyBreakdown
    annual: AnnualBreakdown
    flags: PayrollFlags

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping (decimals rendered as strings)."""
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    return value
