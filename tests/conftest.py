"""Shared test fixtures for the AI-output normalizer tests."""
import os
import tempfile

import pytest

# Keep structured logs out of the real LOG_DIR; must run before modules import config
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="normalizer-test-logs-"))

from schemas import FormulaDocument, IngredientEntry  # noqa: E402


@pytest.fixture
def balanced_formula():
    """Eight mg ingredients, well inside the 9-capsule budget."""
    bases = (
        IngredientEntry(name="Heart Support", amount=689, purpose="Cardiovascular support"),
        IngredientEntry(name="Liver Support", amount=530),
    )
    additions = (
        IngredientEntry(name="Magnesium Glycinate", amount=200),
        IngredientEntry(name="Omega-3", amount=500),
        IngredientEntry(name="CoQ10", amount=100),
        IngredientEntry(name="Ashwagandha", amount=300),
        IngredientEntry(name="Zinc", amount=15),
        IngredientEntry(name="Vitamin D3", amount=25),
    )
    return FormulaDocument(
        bases=bases,
        additions=additions,
        total_mg=sum(row.amount for row in bases + additions),
        target_capsules=9,
    )


@pytest.fixture
def blood_thinner_medications():
    """Medication list of a user on anticoagulants."""
    return ["Warfarin"]


@pytest.fixture
def nutrition_day_record():
    """A single well-formed nutrition day as the model returns it."""
    from tests.fixtures.model_responses import NUTRITION_DAY_TEMPLATE

    return {"day": 5, "dayName": "Friday", **NUTRITION_DAY_TEMPLATE}
