"""Salary-structure export builder."""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from typing import Any

from compwise_payroll.calculators.rounding import round_amount
from compwise_payroll.calculators.types import LineItem, PayInput, PayrollResult

DEFAULT_STRUCTURE_NAME = "Monthly-Standard-2025"
PLACEHOLDER_EMPLOYEE = "EMP-XXXX"
ASSIGNMENT_NOTES = (
    "Auto-generated from CompWise-CTC Payroll Calculator (full-month amounts). "
    "TDS/PF/ESI/PT computed at Salary Slip time."
)


class SalaryStructureBuilder:
    """Builds ERPNext-style salary structure assignments.

    Amount conventions (non-negotiable):
    - Full-month figures, never prorated
    - Whole currency units as ints
    - Earnings: Basic, HRA, Special, fixed allowances, then custom earnings
    - Deductions: an Income Tax (TDS) placeholder at 0, then custom deductions
    """

    @staticmethod
    def to_int_amount(amount: Decimal) -> int:
        """Round to whole units and return an int."""
        return int(round_amount(amount))

    @staticmethod
    def component(name: str, amount: Decimal) -> dict[str, Any]:
        return {
            "salary_component": name,
            "amount": SalaryStructureBuilder.to_int_amount(amount),
        }

    @staticmethod
    def earning_components(
        pay_input: PayInput, result: PayrollResult
    ) -> list[dict[str, Any]]:
        full = result.monthly.earnings_full
        fixed = pay_input.fixed_allowances
        build = SalaryStructureBuilder.component
        lines = [
            build("Basic", full.basic),
            build("HRA", full.hra),
            build("Special Allowance", full.special),
            build("Conveyance Allowance", fixed.conveyance),
            build("Medical Allowance", fixed.medical),
            build("Lunch Allowance", fixed.lunch),
        ]
        lines.extend(SalaryStructureBuilder._custom(pay_input.custom_earnings))
        return lines

    @staticmethod
    def deduction_components(pay_input: PayInput) -> list[dict[str, Any]]:
        lines = [SalaryStructureBuilder.component("Income Tax (TDS)", Decimal("0"))]
        lines.extend(SalaryStructureBuilder._custom(pay_input.custom_deductions))
        return lines

    @staticmethod
    def build_assignment(
        employee: str | None,
        pay_input: PayInput,
        result: PayrollResult,
        from_date: date,
        structure_name: str = DEFAULT_STRUCTURE_NAME,
    ) -> dict[str, Any]:
        """Build the salary assignment payload for one employee."""
        return {
            "employee": employee or PLACEHOLDER_EMPLOYEE,
            "salary_structure": structure_name,
            "from_date": from_date.isoformat(),
            "earnings": SalaryStructureBuilder.earning_components(pay_input, result),
            "deductions": SalaryStructureBuilder.deduction_components(pay_input),
            "notes": ASSIGNMENT_NOTES,
        }

    @staticmethod
    def assignment_filename(employee: str | None) -> str:
        """File name for a downloaded assignment, whitespace runs as underscores."""
        safe_name = re.sub(r"\s+", "_", (employee or "employee").strip()) or "employee"
        return f"salary_assignment_{safe_name}.json"

    @staticmethod
    def _custom(items: tuple[LineItem, ...]) -> list[dict[str, Any]]:
        return [SalaryStructureBuilder.component(item.name, item.amount) for item in items]
