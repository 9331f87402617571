"""Supplement safety screening: interaction warnings and formula limits."""
from .formula_limits import FormulaLimitError, max_dosage_for_capsules, validate_formula_limits
from .interaction_engine import evaluate_formula, evaluate_interactions
from .interaction_rules import INTERACTION_PREFIX, SAFETY_DISCLAIMER

__all__ = [
    "FormulaLimitError",
    "max_dosage_for_capsules",
    "validate_formula_limits",
    "evaluate_formula",
    "evaluate_interactions",
    "INTERACTION_PREFIX",
    "SAFETY_DISCLAIMER",
]
