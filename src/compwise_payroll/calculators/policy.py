"""Default compensation policy and copy-on-write policy updates.

Pattern:
    policy = update_policy(
        DEFAULT_POLICY,
        {
            "basic_pct_of_gross": "0.50",
            "provident_fund": {"voluntary_rate": "0.02"},
            "income_tax": {"regime": "old"},
        },
    )

Rules:
    1. DEFAULT_POLICY is never mutated; every update returns a new object.
    2. Sub-policies merge field by field.
    3. Slab schedules are replaced wholesale, never merged.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import fields, replace
from decimal import Decimal
from typing import Any

from compwise_payroll.calculators.coercion import to_decimal
from compwise_payroll.calculators.slab_tax import InvalidSlabScheduleError, validate_slab_schedule
from compwise_payroll.calculators.types import (
    CompensationPolicy,
    IncomeTaxPolicy,
    ProfessionalTaxPolicy,
    ProvidentFundPolicy,
    StateInsurancePolicy,
    TaxRegime,
    TaxSlab,
)


class PolicyUpdateError(ValueError):
    """Raised when a policy override names an unknown field or bad value."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid policy override '{path}': {reason}")


NEW_REGIME_SLABS: tuple[TaxSlab, ...] = (
    TaxSlab(up_to=Decimal("300000"), rate=Decimal("0.00")),
    TaxSlab(up_to=Decimal("600000"), rate=Decimal("0.05")),
    TaxSlab(up_to=Decimal("900000"), rate=Decimal("0.10")),
    TaxSlab(up_to=Decimal("1200000"), rate=Decimal("0.15")),
    TaxSlab(up_to=Decimal("1500000"), rate=Decimal("0.20")),
    TaxSlab(up_to=None, rate=Decimal("0.30")),
)

OLD_REGIME_SLABS: tuple[TaxSlab, ...] = (
    TaxSlab(up_to=Decimal("250000"), rate=Decimal("0.00")),
    TaxSlab(up_to=Decimal("500000"), rate=Decimal("0.05")),
    TaxSlab(up_to=Decimal("1000000"), rate=Decimal("0.20")),
    TaxSlab(up_to=None, rate=Decimal("0.30")),
)

DEFAULT_POLICY = CompensationPolicy(
    basic_pct_of_gross=Decimal("0.40"),
    hra_pct_of_basic=Decimal("0.50"),
    provident_fund=ProvidentFundPolicy(
        apply=True,
        employee_rate=Decimal("0.12"),
        voluntary_rate=Decimal("0.00"),
        restrict_base_to_ceiling=True,
        wage_ceiling=Decimal("15000"),
    ),
    state_insurance=StateInsurancePolicy(
        apply=False,
        monthly_threshold=Decimal("21000"),
        employee_rate=Decimal("0.0075"),
    ),
    professional_tax=ProfessionalTaxPolicy(apply=True, monthly_amount=Decimal("200")),
    income_tax=IncomeTaxPolicy(
        apply=True,
        regime=TaxRegime.NEW,
        standard_deduction=Decimal("50000"),
        rebate_threshold=Decimal("700000"),
        slabs_new=NEW_REGIME_SLABS,
        slabs_old=OLD_REGIME_SLABS,
        cess_rate=Decimal("0.04"),
    ),
)

_SUB_POLICIES = {
    "provident_fund",
    "state_insurance",
    "professional_tax",
    "income_tax",
}


def update_policy(
    policy: CompensationPolicy, overrides: Mapping[str, Any]
) -> CompensationPolicy:
    """Return a copy of ``policy`` with ``overrides`` applied."""
    changes: dict[str, Any] = {}
    known = {f.name for f in fields(policy)}

    for key, value in overrides.items():
        if key not in known:
            raise PolicyUpdateError(key, "unknown field")
        if key in _SUB_POLICIES:
            if not isinstance(value, Mapping):
                raise PolicyUpdateError(key, "expected a mapping of fields")
            changes[key] = _update_sub_policy(getattr(policy, key), value, key)
        else:
            changes[key] = _coerce_field(key, value, getattr(policy, key))

    return replace(policy, **changes)


def resolve_policy(
    overrides: Mapping[str, Any] | None = None,
    base: CompensationPolicy = DEFAULT_POLICY,
) -> CompensationPolicy:
    """Apply overrides to ``base`` and reject malformed slab schedules.

    Raises:
        PolicyUpdateError: an override names an unknown field or bad value.
        InvalidSlabScheduleError: a resulting slab schedule is malformed.
    """
    policy = update_policy(base, overrides) if overrides else base

    for regime in TaxRegime:
        problems = validate_slab_schedule(policy.income_tax.slabs_for(regime))
        if problems:
            raise InvalidSlabScheduleError(regime.value, problems)

    return policy


def _update_sub_policy(sub_policy: Any, overrides: Mapping[str, Any], prefix: str) -> Any:
    known = {f.name for f in fields(sub_policy)}
    changes: dict[str, Any] = {}

    for key, value in overrides.items():
        path = f"{prefix}.{key}"
        if key not in known:
            raise PolicyUpdateError(path, "unknown field")
        changes[key] = _coerce_field(path, value, getattr(sub_policy, key))

    return replace(sub_policy, **changes)


def _coerce_field(path: str, value: Any, current: Any) -> Any:
    """Coerce an override value to the type of the field it replaces."""
    if isinstance(current, bool):
        if not isinstance(value, bool):
            raise PolicyUpdateError(path, "expected true or false")
        return value
    if isinstance(current, TaxRegime):
        try:
            return TaxRegime(value)
        except ValueError:
            raise PolicyUpdateError(path, f"unknown regime {value!r}") from None
    if isinstance(current, Decimal):
        return to_decimal(value, fallback=current)
    if isinstance(current, tuple):
        return parse_slabs(path, value)
    raise PolicyUpdateError(path, "field cannot be overridden")


def parse_slabs(path: str, value: Any) -> tuple[TaxSlab, ...]:
    """Parse ``[{"up_to": 300000, "rate": 0}, ..., {"up_to": None, "rate": 0.3}]``."""
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise PolicyUpdateError(path, "expected a list of slabs")

    slabs: list[TaxSlab] = []
    for i, raw in enumerate(value):
        if isinstance(raw, TaxSlab):
            slabs.append(raw)
            continue
        if not isinstance(raw, Mapping) or "rate" not in raw:
            raise PolicyUpdateError(f"{path}[{i}]", "expected {'up_to', 'rate'}")
        up_to = raw.get("up_to")
        slabs.append(
            TaxSlab(
                up_to=None if up_to is None else to_decimal(up_to),
                rate=to_decimal(raw["rate"]),
            )
        )
    return tuple(slabs)
