"""Read-only employee presets used to pre-fill pay inputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from compwise_payroll.calculators.types import FixedAllowances, LineItem, PayInput


@dataclass(frozen=True)
class EmployeePreset:
    """Name, monthly gross and fixed allowances for one employee."""

    name: str
    gross: Decimal
    fixed: FixedAllowances = field(default_factory=FixedAllowances)

    def to_pay_input(
        self,
        month_days: int = 30,
        payment_days: int = 30,
        additional_exemptions_annual: Decimal = Decimal("0"),
        custom_earnings: tuple[LineItem, ...] = (),
        custom_deductions: tuple[LineItem, ...] = (),
    ) -> PayInput:
        return PayInput(
            monthly_gross=self.gross,
            fixed_allowances=self.fixed,
            month_days=month_days,
            payment_days=payment_days,
            additional_exemptions_annual=additional_exemptions_annual,
            custom_earnings=custom_earnings,
            custom_deductions=custom_deductions,
        )


DEFAULT_PRESETS: tuple[EmployeePreset, ...] = (
    EmployeePreset(
        name="Pulicharla Gopi Krishna",
        gross=Decimal("50000"),
        fixed=FixedAllowances(
            conveyance=Decimal("1300"),
            medical=Decimal("1200"),
            lunch=Decimal("1500"),
        ),
    ),
)

# Values pre-filled for a newly added employee
NEW_EMPLOYEE_TEMPLATE = EmployeePreset(
    name="",
    gross=Decimal("40000"),
    fixed=FixedAllowances(
        conveyance=Decimal("1600"),
        medical=Decimal("1250"),
        lunch=Decimal("1150"),
    ),
)


def find_preset(
    name: str, presets: tuple[EmployeePreset, ...] = DEFAULT_PRESETS
) -> EmployeePreset | None:
    """Look up a preset by exact name."""
    return next((p for p in presets if p.name == name), None)
