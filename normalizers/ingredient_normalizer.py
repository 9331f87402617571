"""Coerce ingredient-like records into the canonical {name, amount, unit, purpose} shape.

Rows are never dropped: a row with no usable name becomes "unknown" and an
unreadable amount becomes 0, so safety checks and dose totals still see it.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel

from schemas import FormulaCustomizations, FormulaDocument, IngredientEntry

UNKNOWN_INGREDIENT = "unknown"
DEFAULT_UNIT = "mg"

# Canonical spelling for units the model and users write in many ways
UNIT_ALIASES: Dict[str, str] = {
    "mg": "mg",
    "milligram": "mg",
    "milligrams": "mg",
    "g": "g",
    "gr": "g",
    "gram": "g",
    "grams": "g",
    "mcg": "mcg",
    "µg": "mcg",
    "μg": "mcg",
    "ug": "mcg",
    "microgram": "mcg",
    "micrograms": "mcg",
    "iu": "IU",
    "ml": "ml",
    "cfu": "CFU",
    "billion cfu": "billion CFU",
}

_FRACTION = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*(.*)$")
_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:[.,]\d+)?|[.,]\d+)\s*(.*)$")
_UNIT_TOKEN = re.compile(r"^([a-zA-Zµμ]+(?:\s+cfu)?)", re.IGNORECASE)


def normalize_unit(value: Any) -> Optional[str]:
    """Canonical unit string, or None when value is not a usable unit."""
    if not isinstance(value, str):
        return None
    unit = value.strip()
    if not unit:
        return None
    return UNIT_ALIASES.get(unit.lower(), unit)


def _unit_from_suffix(rest: str) -> Optional[str]:
    match = _UNIT_TOKEN.match(rest.strip())
    if not match:
        return None
    # Only known units; "2 capsules" or "300 of them" fall back to the default
    return UNIT_ALIASES.get(match.group(1).lower())


def parse_dose(value: Any) -> Tuple[float, Optional[str]]:
    """Best-effort (amount, unit) extraction from a numeric-like value.

    Examples:
        300         -> (300.0, None)
        "300mg-ish" -> (300.0, "mg")
        "1,5 g"     -> (1.5, "g")
        "1/2"       -> (0.5, None)
        "lots"      -> (0.0, None)
    """
    if isinstance(value, bool) or value is None:
        return 0.0, None
    if isinstance(value, (int, float)):
        return _non_negative(_as_float(value)), None
    if not isinstance(value, str):
        return 0.0, None

    fraction = _FRACTION.match(value)
    if fraction:
        numerator, denominator, rest = fraction.groups()
        try:
            amount = int(numerator) / int(denominator)
        except (ValueError, OverflowError, ZeroDivisionError):
            return 0.0, None
        return _non_negative(amount), _unit_from_suffix(rest)

    match = _LEADING_NUMBER.match(value)
    if not match:
        return 0.0, None
    number, rest = match.groups()
    try:
        amount = float(number.replace(",", "."))
    except ValueError:
        return 0.0, None
    return _non_negative(amount), _unit_from_suffix(rest)


def _non_negative(number: float) -> float:
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _as_float(number: Any) -> float:
    """float(number), with ints too large for a float mapped to infinity."""
    try:
        return float(number)
    except OverflowError:
        return math.inf


def coerce_amount(value: Any) -> float:
    """Numeric amount >= 0; anything unreadable becomes 0."""
    return parse_dose(value)[0]


def _name(entry: Dict[str, Any]) -> str:
    for key in ("ingredient", "name"):
        value = entry.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return UNKNOWN_INGREDIENT


def normalize_ingredient(entry: Any) -> IngredientEntry:
    """Normalize one ingredient-like value. Never raises.

    A bare string is treated as an ingredient name ("Vitamin K" ->
    Vitamin K, 0 mg) so lists of names still reach the safety checks.
    """
    if isinstance(entry, IngredientEntry):
        return entry
    if isinstance(entry, BaseModel):
        entry = entry.model_dump()
    if isinstance(entry, str):
        entry = {"ingredient": entry}
    if not isinstance(entry, dict):
        return IngredientEntry()

    amount, embedded_unit = parse_dose(entry.get("amount"))
    unit = normalize_unit(entry.get("unit")) or embedded_unit or DEFAULT_UNIT
    purpose = entry.get("purpose")

    return IngredientEntry(
        name=_name(entry),
        amount=amount,
        unit=unit,
        purpose=purpose.strip() if isinstance(purpose, str) and purpose.strip() else None,
    )


def normalize_ingredient_list(entries: Any) -> List[IngredientEntry]:
    """Normalize every entry, one output row per input row."""
    if not isinstance(entries, (list, tuple)):
        return []
    return [normalize_ingredient(entry) for entry in entries]


def _non_empty_rows(items: Any) -> Optional[Tuple[IngredientEntry, ...]]:
    rows = normalize_ingredient_list(items)
    return tuple(rows) if rows else None


def normalize_formula_customizations(customizations: Any) -> Optional[FormulaCustomizations]:
    """Normalize user-added bases/individuals; None when nothing was added."""
    if isinstance(customizations, FormulaCustomizations):
        return customizations
    if not isinstance(customizations, dict):
        return None

    added_bases = _non_empty_rows(
        customizations.get("addedBases", customizations.get("added_bases"))
    )
    added_individuals = _non_empty_rows(
        customizations.get("addedIndividuals", customizations.get("added_individuals"))
    )
    if added_bases is None and added_individuals is None:
        return None
    return FormulaCustomizations(added_bases=added_bases, added_individuals=added_individuals)


def _total_mg(value: Any, bases: Tuple[IngredientEntry, ...], additions: Tuple[IngredientEntry, ...]) -> float:
    if not isinstance(value, bool) and isinstance(value, (int, float)):
        total = _as_float(value)
        if math.isfinite(total) and total >= 0:
            return total
    return sum(row.amount for row in bases + additions)


def normalize_formula_payload(payload: Any, version: int = 1) -> FormulaDocument:
    """Build a FormulaDocument from a parsed model response or user edit.

    totalMg is trusted when it is a non-negative number and otherwise
    recomputed from the ingredient amounts.
    """
    source = payload if isinstance(payload, dict) else {}

    bases = tuple(normalize_ingredient_list(source.get("bases")))
    additions = tuple(normalize_ingredient_list(source.get("additions")))

    capsules = source.get("targetCapsules", source.get("target_capsules"))
    if isinstance(capsules, bool) or not isinstance(capsules, int) or capsules < 1:
        capsules = None

    warnings = source.get("warnings")
    rationale = source.get("rationale")

    return FormulaDocument(
        version=version,
        bases=bases,
        additions=additions,
        total_mg=_total_mg(source.get("totalMg", source.get("total_mg")), bases, additions),
        target_capsules=capsules,
        user_customizations=normalize_formula_customizations(
            source.get("userCustomizations", source.get("user_customizations"))
        ),
        warnings=tuple(w for w in warnings if isinstance(w, str)) if isinstance(warnings, list) else (),
        rationale=rationale if isinstance(rationale, str) and rationale.strip() else None,
    )
