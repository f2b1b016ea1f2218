"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends

from compwise_payroll.calculators.engine import PayrollEngine
from compwise_payroll.config import Settings, get_settings


def get_payroll_engine() -> PayrollEngine:
    """Get payroll engine dependency (stateless, one per request)."""
    return PayrollEngine()


# Type aliases for cleaner dependency injection
Engine = Annotated[PayrollEngine, Depends(get_payroll_engine)]
AppSettings = Annotated[Settings, Depends(get_settings)]
