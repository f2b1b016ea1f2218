"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from compwise_payroll.calculators.coercion import (
    check_amount,
    monthly_gross_from_annual,
    normalize_days,
    to_decimal,
)
from compwise_payroll.calculators.types import FixedAllowances, LineItem, PayInput

ZERO = Decimal("0")


def _non_negative(value: Any) -> Decimal:
    return check_amount(max(ZERO, to_decimal(value)))


# ============================================================================
# Request schemas
# ============================================================================


class FixedAllowancesIn(BaseModel):
    """Fixed monthly allowances; malformed values count as 0."""

    conveyance: Decimal = ZERO
    medical: Decimal = ZERO
    lunch: Decimal = ZERO

    @field_validator("conveyance", "medical", "lunch", mode="before")
    @classmethod
    def coerce_amount(cls, value: Any) -> Decimal:
        return _non_negative(value)

    def to_domain(self) -> FixedAllowances:
        return FixedAllowances(
            conveyance=self.conveyance, medical=self.medical, lunch=self.lunch
        )


class LineItemIn(BaseModel):
    """A named custom earning or deduction."""

    name: str = Field(min_length=1)
    amount: Decimal = ZERO

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, value: Any) -> Decimal:
        return check_amount(to_decimal(value))


class PayrollRequest(BaseModel):
    """Schema for a payroll calculation.

    Either ``monthly_gross`` or ``annual_gross`` may be given; when only the
    annual figure is present the monthly gross is annual / 12.
    """

    monthly_gross: Decimal | None = None
    annual_gross: Decimal | None = None
    fixed_allowances: FixedAllowancesIn = Field(default_factory=FixedAllowancesIn)
    month_days: int = 30
    payment_days: int = 30
    additional_exemptions_annual: Decimal = ZERO
    custom_earnings: list[LineItemIn] = Field(default_factory=list)
    custom_deductions: list[LineItemIn] = Field(default_factory=list)
    policy_overrides: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def normalize_day_counts(cls, data: Any) -> Any:
        if isinstance(data, dict):
            month_days, payment_days = normalize_days(
                data.get("month_days", 30), data.get("payment_days", data.get("month_days", 30))
            )
            data = {**data, "month_days": month_days, "payment_days": payment_days}
        return data

    @field_validator("monthly_gross", "annual_gross", mode="before")
    @classmethod
    def coerce_gross(cls, value: Any) -> Decimal | None:
        if value is None:
            return None
        return _non_negative(value)

    @field_validator("additional_exemptions_annual", mode="before")
    @classmethod
    def coerce_exemptions(cls, value: Any) -> Decimal:
        return _non_negative(value)

    def resolved_monthly_gross(self) -> Decimal:
        if self.monthly_gross is not None:
            return self.monthly_gross
        if self.annual_gross is not None:
            return monthly_gross_from_annual(self.annual_gross)
        return ZERO

    def to_pay_input(self) -> PayInput:
        return PayInput(
            monthly_gross=self.resolved_monthly_gross(),
            fixed_allowances=self.fixed_allowances.to_domain(),
            month_days=self.month_days,
            payment_days=self.payment_days,
            additional_exemptions_annual=self.additional_exemptions_annual,
            custom_earnings=tuple(LineItem(i.name, i.amount) for i in self.custom_earnings),
            custom_deductions=tuple(LineItem(i.name, i.amount) for i in self.custom_deductions),
        )


class SalaryAssignmentRequest(PayrollRequest):
    """Schema for exporting a salary structure assignment."""

    employee: str | None = None
    from_date: date | None = None
    salary_structure: str | None = None


# ============================================================================
# Response schemas
# ============================================================================


class PayrollFlagsResponse(BaseModel):
    """Advisory flags."""

    negative_net: bool
    state_insurance_eligible: bool
    fixed_allowances_exceed_gross: bool


class EarningsResponse(BaseModel):
    """Earnings components for a month or a year."""

    basic: Decimal
    hra: Decimal
    special: Decimal
    conveyance: Decimal
    medical: Decimal
    lunch: Decimal


class DeductionsResponse(BaseModel):
    """Statutory deductions for a month or a year."""

    provident_fund: Decimal
    voluntary_provident_fund: Decimal
    state_insurance: Decimal
    professional_tax: Decimal
    income_tax: Decimal


class LineItemResponse(BaseModel):
    """A custom earning or deduction as entered."""

    name: str
    amount: Decimal


class MonthlyBreakdownResponse(BaseModel):
    """Monthly view; ``earnings_full`` is the un-prorated split."""

    earnings: EarningsResponse
    earnings_full: EarningsResponse
    gross_payable: Decimal
    deductions: DeductionsResponse
    total_deductions: Decimal
    net_pay: Decimal
    custom_earnings: list[LineItemResponse]
    custom_deductions: list[LineItemResponse]
    custom_earnings_total: Decimal
    custom_deductions_total: Decimal


class AnnualBreakdownResponse(BaseModel):
    """Annual view of a full year."""

    earnings: EarningsResponse
    gross: Decimal
    deductions: DeductionsResponse
    total_deductions: Decimal
    net_pay: Decimal
    tax_projected: Decimal


class PayrollResponse(BaseModel):
    """Schema for a payroll calculation result.

    Decimals serialize as strings to keep precision on the wire.
    """

    prorated_factor: Decimal
    monthly: MonthlyBreakdownResponse
    annual: AnnualBreakdownResponse
    flags: PayrollFlagsResponse


class SalaryComponentResponse(BaseModel):
    """One exported salary component (whole currency units)."""

    salary_component: str
    amount: int


class SalaryAssignmentResponse(BaseModel):
    """Schema for an exported salary structure assignment."""

    filename: str
    employee: str
    salary_structure: str
    from_date: date
    earnings: list[SalaryComponentResponse]
    deductions: list[SalaryComponentResponse]
    notes: str


class PresetResponse(BaseModel):
    """Schema for an employee preset."""

    name: str
    gross: Decimal
    fixed: FixedAllowancesIn


class PresetListResponse(BaseModel):
    """Schema for listing presets."""

    items: list[PresetResponse]
    template: PresetResponse
    total: int


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    detail: str | list[str]
    code: str
