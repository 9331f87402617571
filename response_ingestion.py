"""Entry points used by the plan and formula generation flows.

Each function takes the raw completion text, parses it, normalizes it and
returns the documents handed to the persistence layer. Parse failures are
the only errors; they are logged and re-raised so the caller can retry the
model call instead of storing a corrupted plan.
"""

from __future__ import annotations

from typing import Iterable, Optional, Union

from ai_json import parse_ai_json
from normalization_config import DEFAULT_FORMULA_LIMITS, FormulaLimits
from normalizers.ingredient_normalizer import normalize_formula_payload
from normalizers.plan_normalizer import normalize_plan_content
from observability import log_data_structure, log_workflow, setup_structured_logger
from schemas import FormulaIngestionResult, PlanKind, WeeklyPlanDocument
from supplement_safety.formula_limits import validate_formula_limits
from supplement_safety.interaction_engine import evaluate_formula

logger = setup_structured_logger("normalizer.ingestion")


def ingest_plan_response(raw_text: Optional[str], plan_kind: Union[PlanKind, str]) -> WeeklyPlanDocument:
    """Parse and normalize a weekly plan completion.

    Args:
        raw_text: Raw model output for a nutrition, workout or lifestyle plan
        plan_kind: Kind of plan the model was asked for

    Returns:
        WeeklyPlanDocument with exactly seven days

    Raises:
        EmptyResponseError: The model returned no text
        UnrecoverableResponseError: The text could not be parsed or repaired
        ValueError: plan_kind is not a supported plan kind
    """
    kind = PlanKind(plan_kind)
    with log_workflow(logger, "plan_ingestion", plan_kind=kind.value):
        content = parse_ai_json(raw_text)
        log_data_structure(logger, "Parsed plan response", content)
        document = normalize_plan_content(kind, content)

        logger.info(
            f"Normalized {kind.value} plan",
            extra={
                "extra_fields": {
                    "plan_kind": kind.value,
                    "missing_days": document.auto_heal_meta.missing_days,
                    "source_day_count": document.auto_heal_meta.source_day_count,
                }
            },
        )
        return document


def ingest_formula_response(
    raw_text: Optional[str],
    medications: Optional[Iterable[str]] = None,
    limits: FormulaLimits = DEFAULT_FORMULA_LIMITS,
    version: int = 1,
) -> FormulaIngestionResult:
    """Parse a formula completion and screen it.

    Safety warnings and limit violations are reported, not raised: the
    caller decides whether a formula with errors is shown or regenerated.

    Args:
        raw_text: Raw model output describing the formula
        medications: Medication names from the user's health profile
        limits: Dosage thresholds to validate against
        version: Version number to stamp on the formula

    Returns:
        FormulaIngestionResult with the formula, its warnings and its limit report

    Raises:
        EmptyResponseError: The model returned no text
        UnrecoverableResponseError: The text could not be parsed or repaired
    """
    medications = list(medications or [])
    with log_workflow(logger, "formula_ingestion", medication_count=len(medications)):
        payload = parse_ai_json(raw_text)
        log_data_structure(logger, "Parsed formula response", payload)

        formula = normalize_formula_payload(payload, version=version)
        safety = evaluate_formula(formula, medications)
        report = validate_formula_limits(formula, limits)

        logger.info(
            "Screened formula",
            extra={
                "extra_fields": {
                    "ingredient_count": len(formula.all_ingredients),
                    "total_mg": formula.total_mg,
                    "warning_count": len(safety.warnings),
                    "interaction_count": len(safety.interaction_warnings),
                    "limits_valid": report.valid,
                }
            },
        )
        if not report.valid:
            logger.warning(
                "Formula violates dosage limits",
                extra={"extra_fields": {"errors": report.errors}},
            )

        return FormulaIngestionResult(formula=formula, safety=safety, limits=report)
