from .diner_profile import DinerProfile, NONE_OPTION
from .verdict import (
    ComplianceResult,
    EvaluationResult,
    ItemCategory,
    ItemVerdict,
    MenuReport,
    ModificationOutcome,
)

__all__ = [
    "DinerProfile",
    "NONE_OPTION",
    "ComplianceResult",
    "EvaluationResult",
    "ItemCategory",
    "ItemVerdict",
    "MenuReport",
    "ModificationOutcome",
]
