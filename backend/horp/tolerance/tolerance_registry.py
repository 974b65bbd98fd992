"""
Loads allergen tolerance relations from data/tolerances.json.
Falls back to the built-in table when the file is absent.
An allergen without a relation never qualifies for tolerance; that is policy, not an error.
"""
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional
import json
import logging

from .tolerance_schema import ToleranceRelation
from horp.config import get_tolerances_path

logger = logging.getLogger(__name__)

DEFAULT_RELATIONS: tuple = (
    ToleranceRelation(
        allergen="gluten",
        related_flags=("soy_sauce",),
        tolerated_flag="soy_sauce",
        tolerance_key="canUseSoySauce",
        question="Gluten allergy: can they have soy sauce?",
    ),
    ToleranceRelation(
        allergen="shellfish",
        related_flags=("oyster_sauce",),
        tolerated_flag="oyster_sauce",
        tolerance_key="canUseOysterSauce",
        question="Shellfish allergy: can they have oyster sauce?",
    ),
    ToleranceRelation(
        allergen="peanut",
        related_flags=("peanut_oil",),
        tolerated_flag="peanut_oil",
        tolerance_key="canUsePeanutOil",
        question="Peanut allergy: can they have peanut oil?",
    ),
    ToleranceRelation(
        allergen="sesame",
        related_flags=("sesame_seed", "sesame_oil"),
        tolerated_flag="sesame_oil",
        tolerance_key="canUseSesameOil",
        question="Sesame allergy: can they have sesame oil?",
    ),
)


class ToleranceRegistry:
    """Read-only lookup: allergen id -> ToleranceRelation."""

    def __init__(self, relations: Optional[Any] = None):
        by_allergen: dict[str, ToleranceRelation] = {}
        for rel in relations if relations is not None else DEFAULT_RELATIONS:
            by_allergen[rel.allergen] = rel
        self._by_allergen = MappingProxyType(by_allergen)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ToleranceRegistry":
        path = path or get_tolerances_path()
        if not path.exists():
            logger.warning("Tolerances file not found at %s; using built-in relations.", path)
            return cls()
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        relations = [ToleranceRelation.from_dict(d) for d in data.get("relations", [])]
        logger.info("Loaded %d tolerance relations from %s", len(relations), path)
        return cls(relations)

    def get(self, allergen: str) -> Optional[ToleranceRelation]:
        return self._by_allergen.get(allergen)

    def list_allergens(self) -> list[str]:
        return list(self._by_allergen.keys())

    def is_related(self, flag: str, allergen: str) -> bool:
        rel = self._by_allergen.get(allergen)
        return rel is not None and rel.is_related(flag)

    def accepts_tolerated_form(self, allergen: str, declaration: Mapping[str, Any]) -> bool:
        """
        Interpret a per-allergen tolerance declaration.
        Accepts {"gluten": true} or the nested legacy form {"gluten": {"canUseSoySauce": true}}.
        """
        rel = self._by_allergen.get(allergen)
        if rel is None or rel.tolerated_flag is None:
            logger.debug("TOLERANCE_NO_MAPPING allergen=%s", allergen)
            return False
        answer = declaration.get(allergen)
        if isinstance(answer, Mapping):
            return bool(rel.tolerance_key and answer.get(rel.tolerance_key))
        return answer is True

    def __len__(self) -> int:
        return len(self._by_allergen)
