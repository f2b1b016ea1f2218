"""Pytest fixtures for payroll calculator tests."""

from __future__ import annotations

from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from compwise_payroll.api.app import create_app
from compwise_payroll.calculators.engine import PayrollEngine
from compwise_payroll.calculators.policy import DEFAULT_POLICY, update_policy
from compwise_payroll.calculators.types import (
    CompensationPolicy,
    FixedAllowances,
    PayInput,
)


@pytest.fixture
def engine() -> PayrollEngine:
    """Stateless payroll engine."""
    return PayrollEngine()


@pytest.fixture
def policy() -> CompensationPolicy:
    """Default compensation policy."""
    return DEFAULT_POLICY


@pytest.fixture
def esi_policy() -> CompensationPolicy:
    """Default policy with state insurance switched on."""
    return update_policy(DEFAULT_POLICY, {"state_insurance": {"apply": True}})


@pytest.fixture
def preset_allowances() -> FixedAllowances:
    """Fixed allowances of the default preset (total 4000)."""
    return FixedAllowances(
        conveyance=Decimal("1300"),
        medical=Decimal("1200"),
        lunch=Decimal("1500"),
    )


@pytest.fixture
def standard_input(preset_allowances: FixedAllowances) -> PayInput:
    """50,000 monthly gross, full month worked."""
    return PayInput(
        monthly_gross=Decimal("50000"),
        fixed_allowances=preset_allowances,
        month_days=30,
        payment_days=30,
    )


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to a fresh application instance."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
