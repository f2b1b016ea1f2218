"""Payroll Command Line Interface.

Provides tools for:
- Calculating a monthly/annual salary breakdown
- Printing the default compensation policy
- Exporting a salary structure assignment

Usage:
    python -m compwise_payroll.cli calculate --gross 50000 --conveyance 1300
    python -m compwise_payroll.cli calculate --gross 600000 --annual --regime old
    python -m compwise_payroll.cli calculate --preset "Pulicharla Gopi Krishna" --format table
    python -m compwise_payroll.cli export-assignment --preset "Pulicharla Gopi Krishna"
    python -m compwise_payroll.cli default-policy
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from decimal import Decimal
from typing import Any

from compwise_payroll.calculators.coercion import (
    AmountOutOfRangeError,
    check_amount,
    monthly_gross_from_annual,
    normalize_days,
    to_decimal,
)
from compwise_payroll.calculators.engine import PayrollEngine
from compwise_payroll.calculators.policy import DEFAULT_POLICY, PolicyUpdateError, resolve_policy
from compwise_payroll.calculators.slab_tax import InvalidSlabScheduleError
from compwise_payroll.calculators.structure_builder import (
    DEFAULT_STRUCTURE_NAME,
    SalaryStructureBuilder,
)
from compwise_payroll.calculators.types import (
    CompensationPolicy,
    FixedAllowances,
    LineItem,
    PayInput,
    PayrollResult,
)
from compwise_payroll.config import configure_logging, get_settings
from compwise_payroll.presets import find_preset

logger = logging.getLogger(__name__)


def parse_line_item(s: str) -> LineItem:
    """Parse NAME=AMOUNT into a line item."""
    name, sep, amount = s.rpartition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=AMOUNT, got {s!r}")
    return LineItem(name=name.strip(), amount=_bounded(to_decimal(amount)))


def parse_amount(s: str) -> Decimal:
    """Parse an amount; malformed values count as 0."""
    return _bounded(max(Decimal("0"), to_decimal(s)))


def _bounded(amount: Decimal) -> Decimal:
    try:
        return check_amount(amount)
    except AmountOutOfRangeError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def parse_date(s: str) -> date:
    """Parse ISO date string."""
    return date.fromisoformat(s)


class PayrollCli:
    """Payroll Command Line Interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()
        self.engine = PayrollEngine()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m compwise_payroll.cli",
            description="Payroll salary breakdown tools",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # calculate command
        calculate = subparsers.add_parser(
            "calculate",
            help="Calculate a monthly and annual salary breakdown",
        )
        self._add_pay_arguments(calculate)
        calculate.add_argument(
            "--format",
            type=str,
            choices=["json", "table"],
            default="json",
            help="Output format",
        )

        # export-assignment command
        export = subparsers.add_parser(
            "export-assignment",
            help="Export a salary structure assignment as JSON",
        )
        self._add_pay_arguments(export)
        export.add_argument(
            "--employee",
            type=str,
            help="Employee name or ID (defaults to the preset name)",
        )
        export.add_argument(
            "--from-date",
            type=parse_date,
            help="Assignment start date (ISO format, default: today)",
        )
        export.add_argument(
            "--structure",
            type=str,
            default=DEFAULT_STRUCTURE_NAME,
            help=f"Salary structure name (default: {DEFAULT_STRUCTURE_NAME})",
        )
        export.add_argument(
            "--output",
            type=str,
            help="Write to this file instead of stdout",
        )

        # default-policy command
        subparsers.add_parser(
            "default-policy",
            help="Print the default compensation policy",
        )

        return parser

    def _add_pay_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--preset",
            type=str,
            help="Pre-fill gross and fixed allowances from a named preset",
        )
        parser.add_argument(
            "--gross",
            type=parse_amount,
            help="Gross pay (monthly unless --annual)",
        )
        parser.add_argument(
            "--annual",
            action="store_true",
            help="Treat --gross as an annual figure",
        )
        for allowance in ("conveyance", "medical", "lunch"):
            parser.add_argument(
                f"--{allowance}",
                type=parse_amount,
                help=f"Fixed monthly {allowance} allowance",
            )
        parser.add_argument(
            "--month-days",
            type=str,
            default="30",
            help="Days in the month (default: 30)",
        )
        parser.add_argument(
            "--payment-days",
            type=str,
            help="Days paid (default: all days in the month)",
        )
        parser.add_argument(
            "--exemptions",
            type=parse_amount,
            default=Decimal("0"),
            help="Additional annual exemptions (old regime only)",
        )
        parser.add_argument(
            "--earning",
            type=parse_line_item,
            action="append",
            default=[],
            help="Custom earning NAME=AMOUNT (repeatable)",
        )
        parser.add_argument(
            "--deduction",
            type=parse_line_item,
            action="append",
            default=[],
            help="Custom deduction NAME=AMOUNT (repeatable)",
        )
        parser.add_argument(
            "--regime",
            type=str,
            choices=["new", "old"],
            help="Income tax regime (default: policy default)",
        )
        parser.add_argument(
            "--policy",
            type=str,
            help="JSON object of policy overrides",
        )

    def run(self, args: list[str] | None = None) -> int:
        """Run CLI with arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers = {
            "calculate": self._cmd_calculate,
            "export-assignment": self._cmd_export_assignment,
            "default-policy": self._cmd_default_policy,
        }

        logger.debug("Running command %s", parsed.command)
        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return handler(parsed)
        except (PolicyUpdateError, InvalidSlabScheduleError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    def _cmd_calculate(self, args: argparse.Namespace) -> int:
        """Execute calculate command."""
        pay_input = self._pay_input(args)
        result = self.engine.calculate(pay_input, self._policy(args))

        if args.format == "table":
            print(self._format_table(result))
        else:
            print(json.dumps(result.to_dict(), indent=2))
        return 0

    def _cmd_export_assignment(self, args: argparse.Namespace) -> int:
        """Execute export-assignment command."""
        pay_input = self._pay_input(args)
        result = self.engine.calculate(pay_input, self._policy(args))
        employee = args.employee or args.preset

        assignment = SalaryStructureBuilder.build_assignment(
            employee=employee,
            pay_input=pay_input,
            result=result,
            from_date=args.from_date or date.today(),
            structure_name=args.structure,
        )
        text = json.dumps(assignment, indent=2)

        if args.output:
            try:
                with open(args.output, "w", encoding="utf-8") as f:
                    f.write(text + "\n")
            except OSError as e:
                print(f"Error: cannot write {args.output}: {e.strerror or e}", file=sys.stderr)
                return 1
            print(f"Wrote {args.output}")
        else:
            print(text)
        return 0

    def _cmd_default_policy(self, args: argparse.Namespace) -> int:
        """Execute default-policy command."""
        print(json.dumps(DEFAULT_POLICY.to_dict(), indent=2))
        return 0

    def _pay_input(self, args: argparse.Namespace) -> PayInput:
        """Build a pay input from arguments, preset values filling the gaps."""
        preset = None
        if args.preset:
            preset = find_preset(args.preset)
            if preset is None:
                self.parser.error(f"unknown preset: {args.preset}")

        gross = args.gross
        if gross is not None and args.annual:
            gross = monthly_gross_from_annual(gross)
        if gross is None:
            gross = preset.gross if preset else Decimal("0")

        base = preset.fixed if preset else FixedAllowances()
        allowances = FixedAllowances(
            conveyance=base.conveyance if args.conveyance is None else args.conveyance,
            medical=base.medical if args.medical is None else args.medical,
            lunch=base.lunch if args.lunch is None else args.lunch,
        )

        month_days, payment_days = normalize_days(
            args.month_days,
            args.payment_days if args.payment_days is not None else args.month_days,
        )

        return PayInput(
            monthly_gross=gross,
            fixed_allowances=allowances,
            month_days=month_days,
            payment_days=payment_days,
            additional_exemptions_annual=args.exemptions,
            custom_earnings=tuple(args.earning),
            custom_deductions=tuple(args.deduction),
        )

    def _policy(self, args: argparse.Namespace) -> CompensationPolicy:
        overrides: dict[str, Any] = {}
        if args.policy:
            try:
                overrides = json.loads(args.policy)
            except json.JSONDecodeError as e:
                self.parser.error(f"--policy is not valid JSON: {e}")
            if not isinstance(overrides, dict):
                self.parser.error("--policy must be a JSON object")
        if args.regime:
            income_tax = dict(overrides.get("income_tax") or {})
            income_tax["regime"] = args.regime
            overrides["income_tax"] = income_tax
        return resolve_policy(overrides)

    def _format_table(self, result: PayrollResult) -> str:
        """Render a plain-text summary."""
        symbol = get_settings().currency_symbol
        monthly = result.monthly
        annual = result.annual

        def money(amount: Decimal) -> str:
            return f"{symbol}{amount:,.0f}"

        rows = [
            ("Basic", monthly.earnings.basic, annual.earnings.basic),
            ("HRA", monthly.earnings.hra, annual.earnings.hra),
            ("Special Allowance", monthly.earnings.special, annual.earnings.special),
            ("Conveyance", monthly.earnings.conveyance, annual.earnings.conveyance),
            ("Medical", monthly.earnings.medical, annual.earnings.medical),
            ("Lunch", monthly.earnings.lunch, annual.earnings.lunch),
        ]
        rows.extend((item.name, item.amount, item.amount * 12) for item in monthly.custom_earnings)
        rows.append(("Gross", monthly.gross_payable, annual.gross))
        rows.extend([
            ("PF", monthly.deductions.provident_fund, annual.deductions.provident_fund),
            ("VPF", monthly.deductions.voluntary_provident_fund,
             annual.deductions.voluntary_provident_fund),
            ("ESI", monthly.deductions.state_insurance, annual.deductions.state_insurance),
            ("Professional Tax", monthly.deductions.professional_tax,
             annual.deductions.professional_tax),
            ("TDS", monthly.deductions.income_tax, annual.deductions.income_tax),
        ])
        rows.extend((item.name, item.amount, item.amount * 12) for item in monthly.custom_deductions)
        rows.extend([
            ("Total Deductions", monthly.total_deductions, annual.total_deductions),
            ("Net Pay", monthly.net_pay, annual.net_pay),
        ])

        width = max(len(label) for label, _, _ in rows)
        lines = [f"{'Component':<{width}}  {'Monthly':>14}  {'Annual':>16}"]
        for label, month_amount, year_amount in rows:
            lines.append(
                f"{label:<{width}}  {money(month_amount):>14}  {money(year_amount):>16}"
            )

        lines.append(f"Proration factor: {result.prorated_factor:.4f}")
        if result.flags.fixed_allowances_exceed_gross:
            lines.append("Warning: fixed allowances exceed gross; Special Allowance set to 0")
        if result.flags.negative_net:
            lines.append("Warning: deductions exceed gross payable")
        return "\n".join(lines)


def main() -> None:
    """CLI entry point."""
    configure_logging()
    cli = PayrollCli()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
