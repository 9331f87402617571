"""Total conversions from parsed model output into typed plan and formula records."""
from .day_index import day_name_for, match_weekday, resolve_day_index
from .ingredient_normalizer import (
    coerce_amount,
    normalize_formula_customizations,
    normalize_formula_payload,
    normalize_ingredient,
    normalize_ingredient_list,
    normalize_unit,
    parse_dose,
)
from .plan_normalizer import (
    DAY_NORMALIZERS,
    build_seven_day_plan,
    normalize_lifestyle_day,
    normalize_metadata,
    normalize_nutrition_day,
    normalize_plan_content,
    normalize_week,
    normalize_workout_day,
)

__all__ = [
    "day_name_for",
    "match_weekday",
    "resolve_day_index",
    "coerce_amount",
    "normalize_formula_customizations",
    "normalize_formula_payload",
    "normalize_ingredient",
    "normalize_ingredient_list",
    "normalize_unit",
    "parse_dose",
    "DAY_NORMALIZERS",
    "build_seven_day_plan",
    "normalize_lifestyle_day",
    "normalize_metadata",
    "normalize_nutrition_day",
    "normalize_plan_content",
    "normalize_week",
    "normalize_workout_day",
]
