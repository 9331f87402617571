"""Pydantic models for normalized plan and formula documents."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

# Python attributes are snake_case, persisted JSON is camelCase
CAMEL_CONFIG = {"alias_generator": to_camel, "populate_by_name": True}


class PlanKind(str, Enum):
    """Weekly plan categories produced by the optimize flow."""

    NUTRITION = "nutrition"
    WORKOUT = "workout"
    LIFESTYLE = "lifestyle"


# ============================================================================
# Weekly plan documents
# ============================================================================


class MacroBreakdown(BaseModel):
    """Macros for a single meal. Missing values are 0, never null."""

    model_config = CAMEL_CONFIG

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0


class Meal(BaseModel):
    """One meal slot of a nutrition day."""

    model_config = CAMEL_CONFIG

    name: str = Field(..., description="Menu-style meal name")
    meal_type: str = Field(..., description="Breakfast, Snack, Lunch or Dinner")
    time: str = Field(default="Flexible", description="Suggested time or 'TBD'")
    ingredients: List[Any] = Field(default_factory=list)
    instructions: List[Any] = Field(default_factory=list)
    macros: MacroBreakdown = Field(default_factory=MacroBreakdown)
    alternatives: Optional[List[Any]] = None


class DayRecord(BaseModel):
    """Fields shared by every day of a weekly plan."""

    model_config = CAMEL_CONFIG

    day_ordinal: int = Field(..., ge=1, le=7, alias="day", description="Monday=1 ... Sunday=7")
    day_name: str = Field(..., description="Weekday name derived from day_ordinal")
    is_placeholder: bool = Field(
        default=False,
        description="True when the model produced no record for this day",
    )


class NutritionDay(DayRecord):
    meals: List[Meal]
    daily_hydration_goal: str = "8 glasses"
    daily_summary: str = "Follow the meal plan."


class Workout(BaseModel):
    """Session prescribed for a workout day."""

    model_config = CAMEL_CONFIG

    type: str
    focus: str
    duration_minutes: int = 30
    exercises: List[Any] = Field(default_factory=list)
    warmup: List[Any] = Field(default_factory=list)
    cooldown: List[Any] = Field(default_factory=list)


class WorkoutDay(DayRecord):
    is_rest_day: bool = False
    workout: Workout
    active_recovery: Optional[Any] = None
    notes: Optional[str] = None


class LifestyleDay(DayRecord):
    morning_routine: List[Any]
    evening_routine: List[Any] = Field(default_factory=list)
    work_productivity: Optional[List[Any]] = None
    mindfulness: Optional[List[Any]] = None
    habit_focus: str = "General Wellness"
    sleep_target: str = "8 hours"


AnyDay = Union[NutritionDay, WorkoutDay, LifestyleDay]


class AutoHealMeta(BaseModel):
    """What the structural normalizer had to fill in or throw away."""

    model_config = CAMEL_CONFIG

    missing_days: List[int] = Field(
        default_factory=list,
        description="Ordinals filled with placeholder content",
    )
    duplicate_days: List[int] = Field(
        default_factory=list,
        description="Ordinals for which later duplicate records were discarded",
    )
    source_day_count: int = Field(default=0, description="Records supplied by the model")

    @property
    def degraded(self) -> bool:
        return bool(self.missing_days)


class WeeklyPlanDocument(BaseModel):
    """Exactly seven ordered day records plus plan-kind metadata."""

    model_config = CAMEL_CONFIG

    plan_kind: PlanKind
    week_plan: List[AnyDay] = Field(..., min_length=7, max_length=7)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    auto_heal_meta: AutoHealMeta = Field(default_factory=AutoHealMeta)

    @model_validator(mode="after")
    def _check_day_order(self) -> "WeeklyPlanDocument":
        for index, day in enumerate(self.week_plan):
            if day.day_ordinal != index + 1:
                raise ValueError(
                    f"week_plan[{index}] has day {day.day_ordinal}, expected {index + 1}"
                )
        return self

    @property
    def days(self) -> List[AnyDay]:
        return self.week_plan


# ============================================================================
# Supplement formulas
# ============================================================================


class IngredientEntry(BaseModel):
    """Canonical ingredient row embedded in a formula."""

    model_config = {**CAMEL_CONFIG, "frozen": True}

    name: str = Field(default="unknown", min_length=1)
    amount: float = Field(default=0, ge=0)
    unit: str = Field(default="mg", min_length=1)
    purpose: Optional[str] = None


class FormulaCustomizations(BaseModel):
    """Ingredients the user added on top of the generated formula."""

    model_config = {**CAMEL_CONFIG, "frozen": True}

    added_bases: Optional[Tuple[IngredientEntry, ...]] = None
    added_individuals: Optional[Tuple[IngredientEntry, ...]] = None

    @property
    def all_ingredients(self) -> Tuple[IngredientEntry, ...]:
        return (self.added_bases or ()) + (self.added_individuals or ())


class FormulaDocument(BaseModel):
    """One immutable version of a supplement formula."""

    model_config = {**CAMEL_CONFIG, "frozen": True}

    version: int = Field(default=1, ge=1)
    bases: Tuple[IngredientEntry, ...] = ()
    additions: Tuple[IngredientEntry, ...] = ()
    total_mg: float = Field(default=0, ge=0)
    target_capsules: Optional[int] = Field(default=None, ge=1)
    user_customizations: Optional[FormulaCustomizations] = None
    warnings: Tuple[str, ...] = ()
    rationale: Optional[str] = None

    @property
    def all_ingredients(self) -> Tuple[IngredientEntry, ...]:
        """Bases, additions, then user-added ingredients, in that order."""
        extras = self.user_customizations.all_ingredients if self.user_customizations else ()
        return self.bases + self.additions + extras


class SafetyWarningSet(BaseModel):
    """Deduplicated warnings; the clinician disclaimer is last when non-empty."""

    model_config = {"frozen": True}

    warnings: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.warnings

    @property
    def interaction_warnings(self) -> Tuple[str, ...]:
        return tuple(w for w in self.warnings if w.startswith("INTERACTION:"))


class FormulaLimitReport(BaseModel):
    """Outcome of checking a formula against FormulaLimits."""

    valid: bool
    errors: List[str] = Field(default_factory=list)
    calculated_total_mg: float = 0


class FormulaIngestionResult(BaseModel):
    """Everything the persistence collaborator receives for a formula turn."""

    formula: FormulaDocument
    safety: SafetyWarningSet
    limits: FormulaLimitReport
