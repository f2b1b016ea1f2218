"""Payroll calculation endpoints."""

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, status

from compwise_payroll.api.dependencies import Engine
from compwise_payroll.api.schemas import (
    ErrorResponse,
    FixedAllowancesIn,
    PayrollRequest,
    PayrollResponse,
    PresetListResponse,
    PresetResponse,
    SalaryAssignmentRequest,
    SalaryAssignmentResponse,
)
from compwise_payroll.calculators.policy import DEFAULT_POLICY, resolve_policy
from compwise_payroll.calculators.structure_builder import (
    DEFAULT_STRUCTURE_NAME,
    SalaryStructureBuilder,
)
from compwise_payroll.presets import DEFAULT_PRESETS, NEW_EMPLOYEE_TEMPLATE, EmployeePreset

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payroll", tags=["payroll"])


# ============================================================================
# Calculation
# ============================================================================


@router.post(
    "/calculate",
    response_model=PayrollResponse,
    status_code=status.HTTP_200_OK,
    responses={422: {"model": ErrorResponse}},
)
async def calculate(engine: Engine, payload: PayrollRequest) -> dict[str, Any]:
    """Calculate the monthly and annual breakdown for one employee."""
    policy = resolve_policy(payload.policy_overrides)
    result = engine.calculate(payload.to_pay_input(), policy)

    if result.flags.negative_net:
        logger.info("Deductions exceed gross payable (net %s)", result.monthly.net_pay)

    return result.to_dict()


@router.post(
    "/salary-assignment",
    response_model=SalaryAssignmentResponse,
    status_code=status.HTTP_200_OK,
    responses={422: {"model": ErrorResponse}},
)
async def salary_assignment(
    engine: Engine, payload: SalaryAssignmentRequest
) -> dict[str, Any]:
    """Export the full-month salary structure as an assignment payload."""
    policy = resolve_policy(payload.policy_overrides)
    pay_input = payload.to_pay_input()
    result = engine.calculate(pay_input, policy)

    assignment = SalaryStructureBuilder.build_assignment(
        employee=payload.employee,
        pay_input=pay_input,
        result=result,
        from_date=payload.from_date or date.today(),
        structure_name=payload.salary_structure or DEFAULT_STRUCTURE_NAME,
    )
    return {
        "filename": SalaryStructureBuilder.assignment_filename(payload.employee),
        **assignment,
    }


# ============================================================================
# Reference data
# ============================================================================


@router.get("/policy/default", status_code=status.HTTP_200_OK)
async def default_policy() -> dict[str, Any]:
    """Return the default compensation policy."""
    return DEFAULT_POLICY.to_dict()


@router.get(
    "/presets",
    response_model=PresetListResponse,
    status_code=status.HTTP_200_OK,
)
async def list_presets() -> PresetListResponse:
    """List employee presets and the template for a new employee."""
    items = [_preset_response(p) for p in DEFAULT_PRESETS]
    return PresetListResponse(
        items=items,
        template=_preset_response(NEW_EMPLOYEE_TEMPLATE),
        total=len(items),
    )


def _preset_response(preset: EmployeePreset) -> PresetResponse:
    return PresetResponse(
        name=preset.name,
        gross=preset.gross,
        fixed=FixedAllowancesIn(
            conveyance=preset.fixed.conveyance,
            medical=preset.fixed.medical,
            lunch=preset.fixed.lunch,
        ),
    )
