"""Structural normalization of weekly nutrition, workout and lifestyle plans.

The model is asked for seven days but regularly returns four to six,
repeats a day, or mixes numbering conventions. Whatever it returns, the
persisted plan always has exactly seven day records in Monday..Sunday
order, with missing content replaced by clearly labeled placeholders.

The seven-slot bucket is implemented once in build_seven_day_plan(); each
plan kind only supplies a "normalize one day" function.
"""

from __future__ import annotations

import copy
import math
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel

from normalization_config import DEFAULT_MEAL_TYPES, PLACEHOLDER_COPY
from normalizers.day_index import day_name_for, resolve_day_index
from observability import setup_structured_logger
from schemas import (
    AnyDay,
    AutoHealMeta,
    LifestyleDay,
    MacroBreakdown,
    Meal,
    NutritionDay,
    PlanKind,
    WeeklyPlanDocument,
    Workout,
    WorkoutDay,
)

logger = setup_structured_logger("normalizer.plan")

Record = Dict[str, Any]
DayNormalizer = Callable[[Optional[Record], int], AnyDay]

WEEK_LENGTH = 7


# ============================================================================
# Field coercion helpers
# ============================================================================


def _text(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback


def _title(value: Any, fallback: str) -> str:
    """Upper-case the first letter only, so normalized text is a fixed point."""
    text = _text(value, "")
    if not text:
        return fallback
    return text[0].upper() + text[1:]


def _list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _optional_list(value: Any) -> Optional[List[Any]]:
    return list(value) if isinstance(value, (list, tuple)) else None


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def _is_placeholder(day: Record) -> bool:
    return day.get("isPlaceholder") is True or day.get("is_placeholder") is True


def _first(day: Record, *keys: str) -> Any:
    for key in keys:
        if key in day:
            return day[key]
    return None


# ============================================================================
# Nutrition
# ============================================================================


def ensure_macros(macros: Any) -> MacroBreakdown:
    source = macros if isinstance(macros, dict) else {}
    return MacroBreakdown(
        calories=_number(source.get("calories")) or 0,
        protein=_number(source.get("protein")) or 0,
        carbs=_number(source.get("carbs")) or 0,
        fats=_number(_first(source, "fats", "fat")) or 0,
    )


def create_placeholder_meal(meal_type: str) -> Meal:
    return Meal(
        name=PLACEHOLDER_COPY.meal_name,
        meal_type=meal_type,
        time="TBD",
        ingredients=[],
        instructions=[PLACEHOLDER_COPY.message],
        macros=MacroBreakdown(),
    )


def placeholder_meals() -> List[Meal]:
    return [create_placeholder_meal(meal_type) for meal_type in DEFAULT_MEAL_TYPES]


def normalize_meal(meal: Any) -> Optional[Meal]:
    if isinstance(meal, str) and meal.strip():
        meal = {"name": meal}
    if not isinstance(meal, dict):
        return None

    instructions = _first(meal, "instructions")
    if isinstance(instructions, str) and instructions.strip():
        instructions = [instructions.strip()]

    return Meal(
        name=_title(meal.get("name"), "Unnamed Meal"),
        meal_type=_title(_first(meal, "mealType", "meal_type"), "Snack"),
        time=_text(meal.get("time"), "Flexible"),
        ingredients=_list(meal.get("ingredients")),
        instructions=_list(instructions),
        macros=ensure_macros(meal.get("macros")),
        alternatives=_optional_list(meal.get("alternatives")),
    )


def normalize_meals(meals: Any) -> List[Meal]:
    """Normalize a meal list; a missing or empty list becomes placeholder meals."""
    normalized = [m for m in (normalize_meal(meal) for meal in _list(meals)) if m is not None]
    return normalized or placeholder_meals()


def normalize_nutrition_day(day: Optional[Record], ordinal: int) -> NutritionDay:
    if day is None:
        return NutritionDay(
            day_ordinal=ordinal,
            day_name=day_name_for(ordinal),
            is_placeholder=True,
            meals=placeholder_meals(),
            daily_hydration_goal="8 glasses",
            daily_summary=PLACEHOLDER_COPY.message,
        )

    return NutritionDay(
        day_ordinal=ordinal,
        day_name=day_name_for(ordinal),
        is_placeholder=_is_placeholder(day),
        meals=normalize_meals(day.get("meals")),
        daily_hydration_goal=_text(
            _first(day, "dailyHydrationGoal", "daily_hydration_goal"), "8 glasses"
        ),
        daily_summary=_text(_first(day, "dailySummary", "daily_summary"), "Follow the meal plan."),
    )


# ============================================================================
# Workout
# ============================================================================


def create_placeholder_workout() -> Workout:
    return Workout(
        type="Rest",
        focus="Recovery",
        duration_minutes=0,
        exercises=[],
        warmup=[],
        cooldown=[],
    )


def normalize_workout(workout: Any) -> Workout:
    if not isinstance(workout, dict):
        return create_placeholder_workout()

    duration = _number(_first(workout, "durationMinutes", "duration_minutes"))
    return Workout(
        type=_title(workout.get("type"), "Mixed"),
        focus=_title(workout.get("focus"), "General Fitness"),
        duration_minutes=int(duration) if duration is not None else 30,
        exercises=_list(workout.get("exercises")),
        warmup=_list(workout.get("warmup")),
        cooldown=_list(workout.get("cooldown")),
    )


def normalize_workout_day(day: Optional[Record], ordinal: int) -> WorkoutDay:
    if day is None:
        return WorkoutDay(
            day_ordinal=ordinal,
            day_name=day_name_for(ordinal),
            is_placeholder=True,
            is_rest_day=True,
            workout=create_placeholder_workout(),
            notes=PLACEHOLDER_COPY.message,
        )

    notes = day.get("notes")
    return WorkoutDay(
        day_ordinal=ordinal,
        day_name=day_name_for(ordinal),
        is_placeholder=_is_placeholder(day),
        is_rest_day=_first(day, "isRestDay", "is_rest_day") is True,
        workout=normalize_workout(day.get("workout")),
        active_recovery=_first(day, "activeRecovery", "active_recovery"),
        notes=notes.strip() if isinstance(notes, str) and notes.strip() else None,
    )


# ============================================================================
# Lifestyle
# ============================================================================


def normalize_lifestyle_day(day: Optional[Record], ordinal: int) -> LifestyleDay:
    if day is None:
        return LifestyleDay(
            day_ordinal=ordinal,
            day_name=day_name_for(ordinal),
            is_placeholder=True,
            morning_routine=[PLACEHOLDER_COPY.message],
            evening_routine=[],
            habit_focus="General Wellness",
            sleep_target="8 hours",
        )

    return LifestyleDay(
        day_ordinal=ordinal,
        day_name=day_name_for(ordinal),
        is_placeholder=_is_placeholder(day),
        morning_routine=_list(_first(day, "morningRoutine", "morning_routine")),
        evening_routine=_list(_first(day, "eveningRoutine", "evening_routine")),
        work_productivity=_optional_list(_first(day, "workProductivity", "work_productivity")),
        mindfulness=_optional_list(day.get("mindfulness")),
        habit_focus=_text(_first(day, "habitFocus", "habit_focus"), "General Wellness"),
        sleep_target=_text(_first(day, "sleepTarget", "sleep_target"), "8 hours"),
    )


DAY_NORMALIZERS: Dict[PlanKind, DayNormalizer] = {
    PlanKind.NUTRITION: normalize_nutrition_day,
    PlanKind.WORKOUT: normalize_workout_day,
    PlanKind.LIFESTYLE: normalize_lifestyle_day,
}


# ============================================================================
# Plan-level metadata
# ============================================================================

_GUIDANCE_FALLBACK = (
    "Personalized guidance was not generated for this plan. "
    + PLACEHOLDER_COPY.regenerate_hint
)

METADATA_DEFAULTS: Dict[PlanKind, Dict[str, Any]] = {
    PlanKind.NUTRITION: {
        "macroTargets": {
            "dailyCalories": 0,
            "proteinGrams": 0,
            "carbsGrams": 0,
            "fatGrams": 0,
        },
        "nutritionalStrategy": {
            "primaryFocus": "Balanced whole-food nutrition",
            "hydrationGoal": "8 glasses",
            "caffeineLimit": None,
            "alcoholLimit": None,
            "intermittentFasting": None,
        },
        "mealPrepTips": [],
        "weeklyGuidance": _GUIDANCE_FALLBACK,
    },
    PlanKind.WORKOUT: {
        "programOverview": {
            "daysPerWeek": 3,
            "durationWeeks": 4,
            "focus": "General Fitness",
            "targetAudience": "general",
        },
        "recoveryTips": [],
        "progressionPlan": {},
        "safetyGuidelines": ["Stop immediately if you feel sharp pain or dizziness."],
        "equipmentNeeded": [],
        "weeklyGuidance": _GUIDANCE_FALLBACK,
    },
    PlanKind.LIFESTYLE: {
        "sleepTargets": {
            "targetHours": "7-9 hours",
            "bedtime": None,
            "wakeTime": None,
            "tips": [],
        },
        "stressTools": {"techniques": []},
        "morningIntentions": {"routine": []},
        "eveningRoutine": {"routine": []},
        "weeklyFocus": {
            "title": "General Wellness",
            "description": _GUIDANCE_FALLBACK,
            "actionItems": [],
        },
        "weeklyGuidance": _GUIDANCE_FALLBACK,
    },
}

DAY_LIST_KEYS = ("weekPlan", "week_plan", "days")
ENVELOPE_KEYS = frozenset(DAY_LIST_KEYS) | {
    "planKind",
    "plan_kind",
    "metadata",
    "autoHealMeta",
    "auto_heal_meta",
}


def normalize_metadata(plan_kind: PlanKind, metadata: Any) -> Dict[str, Any]:
    """Fill every documented metadata key for the plan kind.

    Object defaults are merged under supplied objects, list and text
    defaults replace missing or wrongly typed values. Unknown keys pass
    through untouched.
    """
    source = metadata if isinstance(metadata, dict) else {}
    result: Dict[str, Any] = {k: v for k, v in source.items() if k not in ENVELOPE_KEYS}

    for key, default in METADATA_DEFAULTS[plan_kind].items():
        value = source.get(key)
        if isinstance(default, dict):
            result[key] = {**copy.deepcopy(default), **value} if isinstance(value, dict) else copy.deepcopy(default)
        elif isinstance(default, list):
            result[key] = list(value) if isinstance(value, list) else copy.deepcopy(default)
        else:
            result[key] = _text(value, default)

    return result


# ============================================================================
# Seven-day bucket
# ============================================================================


def _as_record(value: Any) -> Optional[Record]:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    if isinstance(value, dict):
        return value
    return None


def build_seven_day_plan(
    source_days: Any,
    normalizer: DayNormalizer,
) -> Tuple[List[AnyDay], AutoHealMeta]:
    """Bucket raw day records into seven slots and normalize each slot.

    First writer wins: a record whose ordinal is already claimed is
    discarded. Non-object records never claim a slot.

    Args:
        source_days: Raw list of day records (anything else counts as empty)
        normalizer: Plan-kind day normalizer, called with (record or None, ordinal)

    Returns:
        Tuple of (seven normalized days, AutoHealMeta)
    """
    records = list(source_days) if isinstance(source_days, (list, tuple)) else []
    slots: List[Optional[Record]] = [None] * WEEK_LENGTH
    duplicates: List[int] = []

    for position, raw in enumerate(records, start=1):
        record = _as_record(raw)
        if record is None:
            continue
        ordinal = resolve_day_index(record, position)
        if slots[ordinal - 1] is None:
            slots[ordinal - 1] = record
        elif ordinal not in duplicates:
            duplicates.append(ordinal)

    days = [normalizer(slots[index], index + 1) for index in range(WEEK_LENGTH)]
    meta = AutoHealMeta(
        missing_days=[day.day_ordinal for day in days if day.is_placeholder],
        duplicate_days=sorted(duplicates),
        source_day_count=len(records),
    )
    return days, meta


def normalize_week(
    source_days: Any,
    plan_kind: Union[PlanKind, str],
    metadata: Any = None,
) -> WeeklyPlanDocument:
    """Produce a complete WeeklyPlanDocument from raw day records.

    Args:
        source_days: Day records as parsed from the model response
        plan_kind: "nutrition", "workout" or "lifestyle"
        metadata: Plan-level fields from the response (macro targets, ...)

    Raises:
        ValueError: plan_kind is not one of the supported kinds
    """
    kind = PlanKind(plan_kind)
    days, meta = build_seven_day_plan(source_days, DAY_NORMALIZERS[kind])

    if meta.missing_days or meta.duplicate_days:
        logger.warning(
            f"Auto-healed {kind.value} plan",
            extra={
                "extra_fields": {
                    "plan_kind": kind.value,
                    "missing_days": meta.missing_days,
                    "duplicate_days": meta.duplicate_days,
                    "source_day_count": meta.source_day_count,
                }
            },
        )

    return WeeklyPlanDocument(
        plan_kind=kind,
        week_plan=days,
        metadata=normalize_metadata(kind, metadata),
        auto_heal_meta=meta,
    )


def normalize_plan_content(plan_kind: Union[PlanKind, str], content: Any) -> WeeklyPlanDocument:
    """Normalize a whole parsed plan response.

    Accepts the response object ({"weekPlan": [...], "macroTargets": ...}),
    a bare list of days, a previously normalized document dump, or None.
    """
    if isinstance(content, BaseModel):
        content = content.model_dump(by_alias=True)

    if isinstance(content, (list, tuple)):
        return normalize_week(content, plan_kind)

    if not isinstance(content, dict):
        return normalize_week([], plan_kind)

    source_days: Any = []
    for key in DAY_LIST_KEYS:
        if isinstance(content.get(key), (list, tuple)):
            source_days = content[key]
            break

    metadata = dict(content)
    nested = content.get("metadata")
    if isinstance(nested, dict):
        metadata = {**nested, **metadata}

    return normalize_week(source_days, plan_kind, metadata)
