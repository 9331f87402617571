"""Integration tests: raw model text through parsing, normalization and screening."""
import pytest

from ai_json import EmptyResponseError, UnrecoverableResponseError
from normalization_config import PLACEHOLDER_COPY
from response_ingestion import ingest_formula_response, ingest_plan_response
from schemas import NutritionDay, PlanKind, WorkoutDay
from supplement_safety.interaction_rules import INTERACTION_PREFIX, SAFETY_DISCLAIMER
from tests.fixtures.model_responses import (
    FORMULA_RESPONSE,
    FULL_LIFESTYLE_RESPONSE,
    MEDICATIONS,
    MIXED_WORKOUT_RESPONSE,
    OVER_BUDGET_FORMULA,
    OVERSIZED_DAY_RESPONSE,
    PARTIAL_NUTRITION_RESPONSE,
    REFUSAL_RESPONSE,
    SMART_QUOTE_RESPONSE,
)


@pytest.mark.priority_high
@pytest.mark.integration
class TestPlanIngestion:
    """Weekly plans always come out complete."""

    @pytest.mark.timeout(30)
    def test_partial_nutrition_plan(self):
        document = ingest_plan_response(PARTIAL_NUTRITION_RESPONSE, "nutrition")

        assert document.plan_kind == PlanKind.NUTRITION
        assert len(document.days) == 7
        assert document.auto_heal_meta.missing_days == [3, 5, 7]
        assert document.auto_heal_meta.source_day_count == 4

        thursday = document.days[3]
        assert isinstance(thursday, NutritionDay)
        assert thursday.is_placeholder is False
        assert thursday.meals[1].name == "Grilled Chicken Bowl"

        wednesday = document.days[2]
        assert wednesday.daily_summary == PLACEHOLDER_COPY.message
        assert wednesday.meals[0].name == PLACEHOLDER_COPY.meal_name

        assert document.metadata["macroTargets"]["dailyCalories"] == 2400
        assert document.metadata["macroTargets"]["fatGrams"] == 0
        assert document.metadata["mealPrepTips"] == ["Batch cook rice on Sunday"]
        assert document.metadata["weeklyGuidance"] == "Prioritize protein at breakfast."

    @pytest.mark.timeout(30)
    def test_mixed_numbering_workout_plan(self):
        document = ingest_plan_response(MIXED_WORKOUT_RESPONSE, PlanKind.WORKOUT)

        assert [day.day_ordinal for day in document.days] == [1, 2, 3, 4, 5, 6, 7]
        assert document.auto_heal_meta.duplicate_days == [3]
        assert document.auto_heal_meta.missing_days == [2, 4, 6, 7]

        wednesday = document.days[2]
        assert isinstance(wednesday, WorkoutDay)
        assert wednesday.workout.type == "Cardio", "First Wednesday record should win"
        assert wednesday.workout.focus == "Zone 2"

        friday = document.days[4]
        assert friday.is_rest_day is True
        assert friday.is_placeholder is False

        assert document.metadata["programOverview"]["daysPerWeek"] == 3
        assert document.metadata["programOverview"]["durationWeeks"] == 4
        assert document.metadata["equipmentNeeded"] == []

    @pytest.mark.timeout(30)
    def test_complete_lifestyle_plan_not_degraded(self):
        document = ingest_plan_response(FULL_LIFESTYLE_RESPONSE, "lifestyle")

        assert document.auto_heal_meta.degraded is False
        assert all(day.habit_focus == "Sleep consistency" for day in document.days)
        assert document.metadata["sleepTargets"]["bedtime"] == "22:30"
        assert document.metadata["sleepTargets"]["targetHours"] == "8 hours"
        assert document.metadata["weeklyFocus"]["actionItems"] == []

    @pytest.mark.timeout(30)
    def test_smart_quotes_response(self):
        document = ingest_plan_response(SMART_QUOTE_RESPONSE, "nutrition")

        tuesday = document.days[1]
        assert tuesday.is_placeholder is False
        assert len(tuesday.meals) == 5, "Empty meal list should be filled with placeholder meals"

    def test_empty_response_propagates(self):
        with pytest.raises(EmptyResponseError):
            ingest_plan_response("   ", "nutrition")

    def test_unrecoverable_response_propagates(self, monkeypatch):
        import ai_json

        def broken_repair(text, return_objects=True):
            raise RuntimeError("parser crashed")

        monkeypatch.setattr(ai_json.json_repair, "repair_json", broken_repair)
        with pytest.raises(UnrecoverableResponseError):
            ingest_plan_response("{weekPlan: [", "workout")

    def test_refusal_is_unrecoverable(self):
        with pytest.raises(UnrecoverableResponseError) as exc_info:
            ingest_plan_response(REFUSAL_RESPONSE, "nutrition")

        assert exc_info.value.original_text == REFUSAL_RESPONSE
        assert "no structured value" in exc_info.value.reason

    @pytest.mark.timeout(30)
    def test_oversized_day_numbers_fall_back_to_position(self):
        document = ingest_plan_response(OVERSIZED_DAY_RESPONSE, "nutrition")

        assert [day.day_ordinal for day in document.days] == [1, 2, 3, 4, 5, 6, 7]
        assert document.auto_heal_meta.missing_days == [3, 4, 5, 6, 7]
        assert document.days[1].meals[0].name == "Oats"
        assert document.days[1].meals[0].macros.calories == 0


@pytest.mark.priority_high
@pytest.mark.integration
class TestFormulaIngestion:
    """Formula responses are normalized, screened and validated."""

    @pytest.mark.timeout(30)
    def test_formula_with_medications(self):
        result = ingest_formula_response(FORMULA_RESPONSE, MEDICATIONS)
        formula = result.formula

        assert len(formula.bases) == 2
        assert len(formula.additions) == 8
        assert formula.bases[1].amount == 530
        assert formula.additions[0].unit == "mcg"
        assert formula.additions[2].unit == "mg"
        assert formula.total_mg == 2984, "totalMg missing, so it is summed from the rows"
        assert formula.target_capsules == 9
        assert formula.rationale == "Cardiovascular focus with bone support"

        interactions = result.safety.interaction_warnings
        assert len(interactions) == 3, f"Expected K/warfarin, garlic/warfarin, calcium/levothyroxine. Got: {interactions}"
        assert all(warning.startswith(INTERACTION_PREFIX) for warning in interactions)
        assert result.safety.warnings[-1] == SAFETY_DISCLAIMER

        assert result.limits.valid is True, f"Unexpected limit errors: {result.limits.errors}"
        assert result.limits.calculated_total_mg == 2884

    @pytest.mark.timeout(30)
    def test_over_budget_formula(self):
        import json

        result = ingest_formula_response(json.dumps(OVER_BUDGET_FORMULA))

        assert result.limits.valid is False
        assert len(result.limits.errors) == 2
        assert result.safety.is_empty

    def test_formula_version_stamped(self):
        result = ingest_formula_response('{"bases": []}', version=4)
        assert result.formula.version == 4

    def test_empty_formula_response_propagates(self):
        with pytest.raises(EmptyResponseError):
            ingest_formula_response("", ["Warfarin"])
