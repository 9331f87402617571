"""Unit tests for capsule budget and dose validation."""
import pytest

from normalization_config import DEFAULT_FORMULA_LIMITS, FormulaLimits
from schemas import FormulaDocument, IngredientEntry
from supplement_safety.formula_limits import max_dosage_for_capsules, validate_formula_limits


def _formula(amounts, target_capsules=9, unit="mg", total_mg=None):
    additions = tuple(
        IngredientEntry(name=f"Ingredient {index}", amount=amount, unit=unit)
        for index, amount in enumerate(amounts, start=1)
    )
    return FormulaDocument(
        additions=additions,
        total_mg=sum(amounts) if total_mg is None else total_mg,
        target_capsules=target_capsules,
    )


@pytest.mark.priority_high
@pytest.mark.unit
class TestFormulaLimits:
    """Each violated rule is reported; a compliant formula is valid."""

    def test_balanced_formula_is_valid(self, balanced_formula):
        report = validate_formula_limits(balanced_formula)

        assert report.valid is True, f"Unexpected errors: {report.errors}"
        assert report.errors == []
        assert report.calculated_total_mg == 2359

    def test_capsule_budget(self):
        assert max_dosage_for_capsules(9) == 4950
        assert max_dosage_for_capsules(6, FormulaLimits(capsule_capacity_mg=500)) == 3000

    def test_within_tolerance_passes(self):
        # 9 capsules = 4950mg, 5% tolerance allows up to 5197mg
        report = validate_formula_limits(_formula([640] * 8))
        assert report.valid is True

    def test_over_budget_reported(self):
        report = validate_formula_limits(_formula([700] * 8))

        assert report.valid is False
        assert any("9-capsule budget of 4950mg" in error for error in report.errors), report.errors
        assert any("max 5197mg" in error for error in report.errors)

    def test_default_capsule_count_used_when_unset(self):
        report = validate_formula_limits(_formula([700] * 8, target_capsules=None))
        assert any("9-capsule budget" in error for error in report.errors)

    def test_invalid_capsule_count(self):
        report = validate_formula_limits(_formula([100] * 8, target_capsules=7))
        assert report.errors[0] == "Invalid capsule count: 7. Must be one of: 6, 9, 12, 15"

    def test_below_minimum_dose(self):
        report = validate_formula_limits(_formula([100] * 7 + [5]))

        assert report.valid is False
        assert 'Ingredient "Ingredient 8" below minimum dose of 10mg (attempted: 5mg)' in report.errors

    def test_minimum_dose_only_applies_to_mg(self):
        report = validate_formula_limits(_formula([5] * 8, unit="mcg"))
        assert report.valid is True, f"mcg doses should not hit the mg floor: {report.errors}"
        assert report.calculated_total_mg == 0

    def test_too_few_ingredients(self):
        report = validate_formula_limits(_formula([100] * 3))
        assert any("at least 8 ingredients" in error for error in report.errors)

    def test_too_many_ingredients(self):
        report = validate_formula_limits(_formula([10] * 51, target_capsules=15))
        assert any("maximum ingredient count of 50" in error for error in report.errors)

    def test_custom_limits(self):
        limits = FormulaLimits(min_ingredient_count=2, valid_capsule_counts=(6,))
        report = validate_formula_limits(_formula([100, 100], target_capsules=6), limits)
        assert report.valid is True

    def test_default_limits_match_product_rules(self):
        assert DEFAULT_FORMULA_LIMITS.valid_capsule_counts == (6, 9, 12, 15)
        assert DEFAULT_FORMULA_LIMITS.max_total_dosage_mg == 5500

    def test_understated_total_does_not_hide_overdose(self):
        # ten 1000mg rows declared as 100mg in total
        report = validate_formula_limits(_formula([1000] * 10, total_mg=100))

        assert report.valid is False
        assert report.calculated_total_mg == 10000
        assert any(
            "9-capsule budget of 4950mg" in error and "Attempted: 10000mg" in error
            for error in report.errors
        ), report.errors

    def test_overstated_total_still_reported(self):
        report = validate_formula_limits(_formula([100] * 8, total_mg=6000))
        assert any("Attempted: 6000mg" in error for error in report.errors), report.errors

    def test_huge_invalid_capsule_count_reported(self):
        report = validate_formula_limits(_formula([100] * 8, target_capsules=10**400))

        assert report.valid is False
        assert report.errors[0].startswith("Invalid capsule count: 1000")
        assert not any("budget" in error for error in report.errors), \
            "An invalid count is sized against the default budget"
