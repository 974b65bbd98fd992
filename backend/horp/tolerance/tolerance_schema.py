"""
Allergen -> processed-form relation. Data-driven; evaluator code never names an allergen.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ToleranceRelation:
    """
    related_flags: every ingredient flag that is a form of this allergen.
    tolerated_flag: the one processed form a diner may declare they accept (None if none exists).
    tolerance_key: legacy key in nested declarations, e.g. {"gluten": {"canUseSoySauce": true}}.
    """
    allergen: str
    related_flags: tuple
    tolerated_flag: Optional[str] = None
    tolerance_key: Optional[str] = None
    question: Optional[str] = None

    def is_related(self, flag: str) -> bool:
        return flag in self.related_flags

    def to_dict(self) -> dict:
        return {
            "allergen": self.allergen,
            "related_flags": list(self.related_flags),
            "tolerated_flag": self.tolerated_flag,
            "tolerance_key": self.tolerance_key,
            "question": self.question,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ToleranceRelation":
        allergen = str(d["allergen"]).lower()
        related = tuple(str(f).lower() for f in d.get("related_flags", []) or [])
        tolerated = d.get("tolerated_flag")
        if tolerated is not None:
            tolerated = str(tolerated).lower()
            if tolerated not in related:
                related = related + (tolerated,)
        return cls(
            allergen=allergen,
            related_flags=related,
            tolerated_flag=tolerated,
            tolerance_key=d.get("tolerance_key"),
            question=d.get("question"),
        )
