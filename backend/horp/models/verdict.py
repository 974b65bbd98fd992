"""
Structured per-item verdicts and menu report. Single format for API and wizard consumers.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from horp.catalog.menu_schema import MenuItem


class ItemCategory(str, Enum):
    SAFE = "SAFE"
    CAN_BE_MODIFIED = "CAN_BE_MODIFIED"
    FILTERED = "FILTERED"


@dataclass(frozen=True)
class ComplianceResult:
    """Outcome of one compliance check. Overall safety requires both booleans."""
    compliant: bool
    dietary_compliant: bool
    reasons: tuple = ()

    @property
    def is_safe(self) -> bool:
        return self.compliant and self.dietary_compliant


@dataclass(frozen=True)
class ModificationOutcome:
    modifiable: bool
    modifications: tuple = ()
    effective_components: tuple = ()
    reasons: tuple = ()


@dataclass
class ItemVerdict:
    id: str
    name: str
    category: str
    reasons: list[str] = field(default_factory=list)
    modifications: Optional[list] = None  # only when the item can be modified
    tolerance_notes: Optional[list[str]] = None  # only when promoted by tolerance
    tolerance_allowed: bool = False

    @classmethod
    def for_item(cls, item: MenuItem, reasons: tuple = ()) -> "ItemVerdict":
        return cls(id=item.id, name=item.name, category=item.category, reasons=list(reasons))

    def promoted(self, notes: list[str]) -> "ItemVerdict":
        """Copy of a filtered verdict moved to safe because of a tolerated form."""
        return replace(
            self,
            reasons=list(self.reasons),
            tolerance_notes=list(notes),
            tolerance_allowed=True,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "reasons": list(self.reasons),
        }
        if self.modifications is not None:
            d["modifications"] = [m.to_dict() for m in self.modifications]
        if self.tolerance_notes is not None:
            d["tolerance_notes"] = list(self.tolerance_notes)
            d["toleranceAllowed"] = self.tolerance_allowed
        return d


@dataclass
class EvaluationResult:
    """One evaluation run: every catalog item is in exactly one list."""
    safe: list[ItemVerdict] = field(default_factory=list)
    can_be_modified: list[ItemVerdict] = field(default_factory=list)
    filtered: list[ItemVerdict] = field(default_factory=list)

    def add(self, category: ItemCategory, verdict: ItemVerdict) -> None:
        if category == ItemCategory.SAFE:
            self.safe.append(verdict)
        elif category == ItemCategory.CAN_BE_MODIFIED:
            self.can_be_modified.append(verdict)
        else:
            self.filtered.append(verdict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "safe": [v.to_dict() for v in self.safe],
            "canBeModified": [v.to_dict() for v in self.can_be_modified],
            "filtered": [v.to_dict() for v in self.filtered],
        }


@dataclass
class MenuReport:
    safe_for_all: list[ItemVerdict] = field(default_factory=list)
    can_be_modified_for_all: list[ItemVerdict] = field(default_factory=list)
    filtered_for_all: list[ItemVerdict] = field(default_factory=list)
    safe_by_allergy: dict[str, list[ItemVerdict]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "safeForAll": [v.to_dict() for v in self.safe_for_all],
            "canBeModifiedForAll": [v.to_dict() for v in self.can_be_modified_for_all],
            "filteredForAll": [v.to_dict() for v in self.filtered_for_all],
            "safeByAllergy": {
                allergen: [v.to_dict() for v in verdicts]
                for allergen, verdicts in self.safe_by_allergy.items()
            },
        }
