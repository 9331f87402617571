"""Capsule budget and dose checks for supplement formulas.

All thresholds come from FormulaLimits in normalization_config so the
model prompt, the ingestion facade and the version chain agree on them.
"""

from __future__ import annotations

from typing import List

from normalization_config import DEFAULT_FORMULA_LIMITS, FormulaLimits
from schemas import FormulaDocument, FormulaLimitReport


class FormulaLimitError(ValueError):
    """A formula operation would produce a version above the dosage ceiling."""


def max_dosage_for_capsules(
    capsule_count: int,
    limits: FormulaLimits = DEFAULT_FORMULA_LIMITS,
) -> int:
    """Total mg that fits in capsule_count capsules."""
    return capsule_count * limits.capsule_capacity_mg


def _format_mg(value: float) -> str:
    return f"{value:g}"


def validate_formula_limits(
    formula: FormulaDocument,
    limits: FormulaLimits = DEFAULT_FORMULA_LIMITS,
) -> FormulaLimitReport:
    """Check a formula against capsule budget, minimum dose and ingredient count.

    Only bases and additions count toward the ingredient checks; user
    customizations are screened for safety but do not change the budget.

    Args:
        formula: Normalized formula version
        limits: Threshold set, DEFAULT_FORMULA_LIMITS unless overridden

    Returns:
        FormulaLimitReport with every violated rule listed in errors
    """
    errors: List[str] = []

    capsules = formula.target_capsules
    if capsules not in limits.valid_capsule_counts:
        # an invalid count is reported below; size the budget from the default
        capsules = limits.default_capsule_count
    max_dosage = max_dosage_for_capsules(capsules, limits)
    max_with_tolerance = int(max_dosage * (1 + limits.budget_tolerance_pct))

    if formula.target_capsules and formula.target_capsules not in limits.valid_capsule_counts:
        valid = ", ".join(str(count) for count in limits.valid_capsule_counts)
        errors.append(
            f"Invalid capsule count: {formula.target_capsules}. Must be one of: {valid}"
        )

    ingredients = formula.bases + formula.additions
    calculated_total = sum(
        ingredient.amount for ingredient in ingredients if ingredient.unit == "mg"
    )

    # a declared total lower than the rows it lists does not hide an overdose
    budget_total = max(formula.total_mg, calculated_total)
    if budget_total > max_with_tolerance:
        errors.append(
            f"Formula exceeds {capsules}-capsule budget of {max_dosage}mg "
            f"(max {max_with_tolerance}mg with {limits.budget_tolerance_pct:.0%} tolerance). "
            f"Attempted: {_format_mg(budget_total)}mg. "
            "Reduce ingredients or increase capsule count."
        )

    for ingredient in ingredients:
        # mcg/IU/CFU amounts are not comparable to the mg floor
        if ingredient.unit == "mg" and ingredient.amount < limits.min_ingredient_dose_mg:
            errors.append(
                f'Ingredient "{ingredient.name}" below minimum dose of '
                f"{limits.min_ingredient_dose_mg}mg (attempted: {_format_mg(ingredient.amount)}mg)"
            )

    if len(ingredients) > limits.max_ingredient_count:
        errors.append(
            f"Formula exceeds maximum ingredient count of {limits.max_ingredient_count} "
            f"(attempted: {len(ingredients)})"
        )
    if len(ingredients) < limits.min_ingredient_count:
        errors.append(
            f"Formula must contain at least {limits.min_ingredient_count} ingredients "
            f"for comprehensive support (has: {len(ingredients)})"
        )

    return FormulaLimitReport(
        valid=not errors,
        errors=errors,
        calculated_total_mg=calculated_total,
    )
