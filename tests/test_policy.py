"""Tests for the default policy and copy-on-write updates."""

from decimal import Decimal

import pytest

from compwise_payroll.calculators.policy import (
    DEFAULT_POLICY,
    NEW_REGIME_SLABS,
    PolicyUpdateError,
    resolve_policy,
    update_policy,
)
from compwise_payroll.calculators.slab_tax import InvalidSlabScheduleError
from compwise_payroll.calculators.types import TaxRegime, TaxSlab


class TestDefaultPolicy:
    """Test default policy values."""

    def test_split_defaults(self):
        assert DEFAULT_POLICY.basic_pct_of_gross == Decimal("0.40")
        assert DEFAULT_POLICY.hra_pct_of_basic == Decimal("0.50")

    def test_statutory_defaults(self):
        """PF and PT on, state insurance off, new regime."""
        assert DEFAULT_POLICY.provident_fund.apply is True
        assert DEFAULT_POLICY.provident_fund.wage_ceiling == Decimal("15000")
        assert DEFAULT_POLICY.state_insurance.apply is False
        assert DEFAULT_POLICY.state_insurance.monthly_threshold == Decimal("21000")
        assert DEFAULT_POLICY.professional_tax.monthly_amount == Decimal("200")
        assert DEFAULT_POLICY.income_tax.regime == TaxRegime.NEW
        assert DEFAULT_POLICY.income_tax.rebate_threshold == Decimal("700000")
        assert DEFAULT_POLICY.income_tax.cess_rate == Decimal("0.04")

    def test_slabs_end_unbounded(self):
        """Both schedules end with an unbounded slab."""
        assert DEFAULT_POLICY.income_tax.slabs_new[-1].is_unbounded
        assert DEFAULT_POLICY.income_tax.slabs_old[-1].is_unbounded
        assert DEFAULT_POLICY.income_tax.slabs_for(TaxRegime.NEW) is NEW_REGIME_SLABS

    def test_policy_is_frozen(self):
        """Policies cannot be mutated in place."""
        with pytest.raises(AttributeError):
            DEFAULT_POLICY.basic_pct_of_gross = Decimal("0.5")  # type: ignore[misc]

    def test_to_dict(self):
        """Serialized policy renders decimals as strings and unbounded as None."""
        data = DEFAULT_POLICY.to_dict()

        assert data["basic_pct_of_gross"] == "0.40"
        assert data["income_tax"]["regime"] == "new"
        assert data["income_tax"]["slabs_new"][0] == {"up_to": "300000", "rate": "0.00"}
        assert data["income_tax"]["slabs_new"][-1] == {"up_to": None, "rate": "0.30"}


class TestUpdatePolicy:
    """Test copy-on-write policy updates."""

    def test_returns_new_object(self):
        """The original policy is untouched."""
        updated = update_policy(DEFAULT_POLICY, {"basic_pct_of_gross": "0.5"})

        assert updated is not DEFAULT_POLICY
        assert updated.basic_pct_of_gross == Decimal("0.5")
        assert DEFAULT_POLICY.basic_pct_of_gross == Decimal("0.40")

    def test_sub_policy_merges_fields(self):
        """Only named sub-policy fields change."""
        updated = update_policy(DEFAULT_POLICY, {"provident_fund": {"voluntary_rate": 0.02}})

        assert updated.provident_fund.voluntary_rate == Decimal("0.02")
        assert updated.provident_fund.employee_rate == Decimal("0.12")
        assert updated.provident_fund.apply is True
        assert updated.state_insurance is DEFAULT_POLICY.state_insurance

    def test_regime_from_string(self):
        updated = update_policy(DEFAULT_POLICY, {"income_tax": {"regime": "old"}})
        assert updated.income_tax.regime == TaxRegime.OLD

    def test_slabs_replaced_wholesale(self):
        """Slab lists replace the existing schedule."""
        updated = update_policy(
            DEFAULT_POLICY,
            {"income_tax": {"slabs_new": [
                {"up_to": 400000, "rate": 0},
                {"up_to": None, "rate": "0.1"},
            ]}},
        )

        assert updated.income_tax.slabs_new == (
            TaxSlab(up_to=Decimal("400000"), rate=Decimal("0")),
            TaxSlab(up_to=None, rate=Decimal("0.1")),
        )
        assert updated.income_tax.slabs_old == DEFAULT_POLICY.income_tax.slabs_old

    def test_malformed_number_keeps_current_value(self):
        """Unparsable numbers fall back to the current value."""
        updated = update_policy(DEFAULT_POLICY, {"professional_tax": {"monthly_amount": "abc"}})
        assert updated.professional_tax.monthly_amount == Decimal("200")

    def test_unknown_top_level_field(self):
        with pytest.raises(PolicyUpdateError) as exc_info:
            update_policy(DEFAULT_POLICY, {"bonus_pct": "0.1"})
        assert exc_info.value.path == "bonus_pct"

    def test_unknown_sub_policy_field(self):
        with pytest.raises(PolicyUpdateError) as exc_info:
            update_policy(DEFAULT_POLICY, {"provident_fund": {"employer_rate": "0.12"}})
        assert exc_info.value.path == "provident_fund.employer_rate"

    def test_sub_policy_requires_mapping(self):
        with pytest.raises(PolicyUpdateError):
            update_policy(DEFAULT_POLICY, {"income_tax": "old"})

    def test_bool_field_requires_bool(self):
        with pytest.raises(PolicyUpdateError):
            update_policy(DEFAULT_POLICY, {"state_insurance": {"apply": "yes"}})

    def test_unknown_regime(self):
        with pytest.raises(PolicyUpdateError, match="unknown regime") as exc_info:
            update_policy(DEFAULT_POLICY, {"income_tax": {"regime": "flat"}})
        assert exc_info.value.__cause__ is None
        assert exc_info.value.__suppress_context__ is True

    def test_slab_entries_need_rate(self):
        with pytest.raises(PolicyUpdateError) as exc_info:
            update_policy(DEFAULT_POLICY, {"income_tax": {"slabs_old": [{"up_to": 1}]}})
        assert exc_info.value.path == "income_tax.slabs_old[0]"


class TestResolvePolicy:
    """Test override resolution with slab validation."""

    def test_no_overrides_returns_base(self):
        assert resolve_policy() is DEFAULT_POLICY
        assert resolve_policy({}) is DEFAULT_POLICY

    def test_valid_overrides(self):
        policy = resolve_policy({"state_insurance": {"apply": True}})
        assert policy.state_insurance.apply is True

    def test_invalid_slabs_rejected(self):
        """A bounded final slab is rejected with the offending regime."""
        with pytest.raises(InvalidSlabScheduleError) as exc_info:
            resolve_policy({"income_tax": {"slabs_old": [{"up_to": 100000, "rate": 0.1}]}})

        assert exc_info.value.regime == "old"
        assert exc_info.value.problems == ["Last slab must be unbounded"]
