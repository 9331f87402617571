"""Append-only version history for a user's supplement formula.

Every change (model proposal, manual edit, revert) produces a new
FormulaDocument; earlier versions are never modified, so the history can be
handed to the persistence layer as-is.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from normalization_config import DEFAULT_FORMULA_LIMITS, FormulaLimits
from normalizers.ingredient_normalizer import (
    normalize_formula_customizations,
    normalize_formula_payload,
    normalize_ingredient_list,
)
from observability import setup_structured_logger
from schemas import FormulaDocument
from supplement_safety.formula_limits import FormulaLimitError

logger = setup_structured_logger("normalizer.formula_versions")

INGREDIENT_FIELDS = ("bases", "additions")


class FormulaVersionChain:
    """Ordered, append-only list of formula versions (version 1 first)."""

    def __init__(self, limits: FormulaLimits = DEFAULT_FORMULA_LIMITS) -> None:
        self.limits = limits
        self._versions: Tuple[FormulaDocument, ...] = ()

    @property
    def versions(self) -> Tuple[FormulaDocument, ...]:
        return self._versions

    @property
    def latest(self) -> Optional[FormulaDocument]:
        return self._versions[-1] if self._versions else None

    def __len__(self) -> int:
        return len(self._versions)

    def get(self, version: int) -> FormulaDocument:
        """Return a specific version.

        Raises:
            KeyError: No such version in the chain
        """
        for formula in self._versions:
            if formula.version == version:
                return formula
        raise KeyError(f"Formula version {version} not found")

    def append(self, formula: Any) -> FormulaDocument:
        """Add a formula as the next version.

        Args:
            formula: FormulaDocument or a raw payload dict; raw payloads are
                normalized first. Any version number it carries is replaced.

        Returns:
            The stored document with its assigned version number
        """
        if not isinstance(formula, FormulaDocument):
            formula = normalize_formula_payload(formula)

        next_version = self.latest.version + 1 if self.latest else 1
        stored = formula.model_copy(update={"version": next_version})
        self._versions = self._versions + (stored,)
        return stored

    def revise(self, **changes: Any) -> FormulaDocument:
        """Create a new version from the latest one with changes applied.

        Ingredient lists are normalized like model output. When bases or
        additions change and no explicit total_mg is given, the total is
        recomputed from the new ingredient amounts.

        Raises:
            ValueError: The chain is empty
            pydantic.ValidationError: A change is not a valid formula value
                (for example a negative total_mg); the chain is left unchanged
        """
        latest = self.latest
        if latest is None:
            raise ValueError("Cannot revise an empty formula history")

        updates = dict(changes)
        updates.pop("version", None)

        for field in INGREDIENT_FIELDS:
            if field in updates:
                updates[field] = tuple(normalize_ingredient_list(updates[field]))

        if "user_customizations" in updates:
            updates["user_customizations"] = normalize_formula_customizations(
                updates["user_customizations"]
            )

        if any(field in updates for field in INGREDIENT_FIELDS) and "total_mg" not in updates:
            bases = updates.get("bases", latest.bases)
            additions = updates.get("additions", latest.additions)
            updates["total_mg"] = sum(row.amount for row in bases + additions)

        return self.append(FormulaDocument.model_validate({**latest.model_dump(), **updates}))

    def revert_to(self, version: int) -> FormulaDocument:
        """Copy an earlier version forward as the newest version.

        Raises:
            KeyError: No such version in the chain
            FormulaLimitError: That version exceeds the maximum total dosage
        """
        target = self.get(version)
        if target.total_mg > self.limits.max_total_dosage_mg:
            logger.warning(
                "Refused formula revert above dosage ceiling",
                extra={
                    "extra_fields": {
                        "version": version,
                        "total_mg": target.total_mg,
                        "max_total_dosage_mg": self.limits.max_total_dosage_mg,
                    }
                },
            )
            raise FormulaLimitError(
                f"Cannot revert to version {version}: total {target.total_mg:g}mg exceeds "
                f"the {self.limits.max_total_dosage_mg:g}mg maximum"
            )

        reverted = self.append(target)
        logger.info(
            f"Reverted formula to version {version}",
            extra={"extra_fields": {"from_version": version, "new_version": reverted.version}},
        )
        return reverted
