"""Centralized configuration for AI-output normalization and formula safety.

Single source of truth for:
- json_repair input limits (ai_json.py)
- placeholder copy and default meal slots (normalizers/plan_normalizer.py)
- formula dosage limits (supplement_safety/formula_limits.py)
- structured log location and retention (observability.py)

Values can be overridden via environment variables or a local .env file.
"""

import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv


def load_env_with_optional_override() -> None:
    """Load .env without clobbering explicit environment overrides."""

    load_dotenv(override=False)
    if os.getenv("DOTENV_FORCE_OVERRIDE", "").strip().lower() in {"1", "true", "yes", "on"}:
        load_dotenv(override=True)


load_env_with_optional_override()

# ============================================================================
# Parsing
# ============================================================================

# 150KB covers a full 7-day plan with recipes; larger blobs skip json_repair
AI_JSON_REPAIR_MAX_CHARS = int(os.getenv("AI_JSON_REPAIR_MAX_CHARS", "150000"))

# ============================================================================
# Logging
# ============================================================================

LOG_DIR = os.getenv("LOG_DIR", "/tmp/normalizer_logs")
LOG_RETENTION_DAYS = int(os.getenv("LOG_RETENTION_DAYS", "7"))
STRUCTURED_LOG_LEVEL = os.getenv("STRUCTURED_LOG_LEVEL", "INFO").upper()

# ============================================================================
# Weekly plans
# ============================================================================

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# Meal slots used when the model returns no usable meal list for a day
DEFAULT_MEAL_TYPES = ("Breakfast", "Snack", "Lunch", "Snack", "Dinner")


@dataclass(frozen=True)
class PlaceholderCopy:
    """User-facing text stamped into content the model failed to produce."""

    message: str = (
        "Plan data missing for this day. Regenerate your plan to receive full guidance."
    )
    regenerate_hint: str = (
        'Open the Optimize tab and select "Regenerate" to refresh your plan.'
    )
    meal_name: str = "Meal Not Generated"


PLACEHOLDER_COPY = PlaceholderCopy()

# ============================================================================
# Formula limits
# ============================================================================


@dataclass(frozen=True)
class FormulaLimits:
    """Immutable dosage limits for supplement formulas.

    The capsule budget is capsule_capacity_mg * capsule count, with
    budget_tolerance_pct headroom before a formula is rejected.
    """

    capsule_capacity_mg: int = 550
    valid_capsule_counts: Tuple[int, ...] = (6, 9, 12, 15)
    default_capsule_count: int = 9
    budget_tolerance_pct: float = 0.05
    min_ingredient_dose_mg: float = 10
    min_ingredient_count: int = 8
    max_ingredient_count: int = 50
    max_total_dosage_mg: float = 5500


DEFAULT_FORMULA_LIMITS = FormulaLimits(
    capsule_capacity_mg=int(os.getenv("FORMULA_CAPSULE_CAPACITY_MG", "550")),
    default_capsule_count=int(os.getenv("FORMULA_DEFAULT_CAPSULE_COUNT", "9")),
)
