"""Payroll calculation engine."""

from compwise_payroll.calculators.engine import PayrollEngine, calculate_payroll
from compwise_payroll.calculators.policy import (
    DEFAULT_POLICY,
    PolicyUpdateError,
    resolve_policy,
    update_policy,
)
from compwise_payroll.calculators.slab_tax import (
    InvalidSlabScheduleError,
    compute_slab_tax,
    validate_slab_schedule,
)
from compwise_payroll.calculators.structure_builder import SalaryStructureBuilder

__all__ = [
    "PayrollEngine",
    "calculate_payroll",
    "DEFAULT_POLICY",
    "PolicyUpdateError",
    "update_policy",
    "resolve_policy",
    "InvalidSlabScheduleError",
    "compute_slab_tax",
    "validate_slab_schedule",
    "SalaryStructureBuilder",
]
