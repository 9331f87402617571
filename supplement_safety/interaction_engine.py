"""Keyword-based supplement/medication interaction screening.

Matching is case-insensitive substring matching in both directions, so
brand names, qualifiers ("extended-release") and plural forms still hit a
rule. False positives are accepted: it is better to over-warn than to miss
an interaction.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence

from normalizers.ingredient_normalizer import normalize_ingredient
from schemas import FormulaDocument, IngredientEntry, SafetyWarningSet
from supplement_safety.interaction_rules import (
    HIGH_RISK_SUPPLEMENTS,
    INTERACTION_PREFIX,
    MEDICATION_INTERACTIONS,
    SAFETY_DISCLAIMER,
    SUPPLEMENT_CONFLICTS,
)


def _lower_names(ingredients: Sequence[IngredientEntry]) -> List[str]:
    return [ingredient.name.lower() for ingredient in ingredients]


def _clean_medications(medications: Optional[Iterable[Any]]) -> List[str]:
    """Lower-cased, stripped medication names; blanks and non-strings are skipped."""
    if not medications:
        return []
    cleaned = []
    for medication in medications:
        if isinstance(medication, str) and medication.strip():
            cleaned.append(medication.strip().lower())
    return cleaned


def general_warnings_for(ingredient_names: Sequence[str]) -> List[str]:
    """Unconditional warnings for high-risk ingredients."""
    warnings = []
    for name in ingredient_names:
        for keyword, warning in HIGH_RISK_SUPPLEMENTS.items():
            if keyword in name:
                warnings.append(warning)
    return warnings


def medication_warnings_for(ingredient_names: Sequence[str], medications: Sequence[str]) -> List[str]:
    """Warnings for every (ingredient, medication) pair with a known interaction.

    A medication matches a rule keyword when either string contains the
    other ("Warfarin sodium" contains "warfarin", "ssri" is contained in
    "ssri (sertraline)"). Every matching keyword yields its warning.
    """
    warnings = []
    if not medications:
        return warnings

    for name in ingredient_names:
        for ingredient_keyword, rules in MEDICATION_INTERACTIONS.items():
            if ingredient_keyword not in name:
                continue
            for medication in medications:
                for medication_keyword, warning in rules.items():
                    if medication_keyword in medication or medication in medication_keyword:
                        warnings.append(f"{INTERACTION_PREFIX}{warning}")
    return warnings


def supplement_pair_warnings(ingredient_names: Sequence[str]) -> List[str]:
    """Warnings for conflict sets with at least two members present."""
    warnings = []
    for members, warning in SUPPLEMENT_CONFLICTS:
        present = [
            member for member in members
            if any(member in name for name in ingredient_names)
        ]
        if len(present) >= 2:
            warnings.append(warning)
    return warnings


def _dedupe(warnings: Iterable[str]) -> List[str]:
    seen = set()
    unique = []
    for warning in warnings:
        if warning not in seen:
            seen.add(warning)
            unique.append(warning)
    return unique


def evaluate_interactions(
    ingredients: Iterable[Any],
    medications: Optional[Iterable[Any]] = None,
) -> SafetyWarningSet:
    """Screen an ingredient list against the static safety tables.

    Args:
        ingredients: IngredientEntry rows or raw ingredient-like values
            (dicts, bare names); raw values are normalized first
        medications: Free-text medication names from the health profile

    Returns:
        SafetyWarningSet with general, interaction and pair warnings in that
        order, deduplicated, followed by the disclaimer when anything fired
    """
    rows = [normalize_ingredient(item) for item in (ingredients or [])]
    names = _lower_names(rows)
    meds = _clean_medications(medications)

    warnings = _dedupe(
        general_warnings_for(names)
        + medication_warnings_for(names, meds)
        + supplement_pair_warnings(names)
    )
    if warnings:
        warnings.append(SAFETY_DISCLAIMER)
    return SafetyWarningSet(warnings=tuple(warnings))


def evaluate_formula(
    formula: FormulaDocument,
    medications: Optional[Iterable[Any]] = None,
) -> SafetyWarningSet:
    """Screen every ingredient of a formula, user additions included."""
    return evaluate_interactions(formula.all_ingredients, medications)
