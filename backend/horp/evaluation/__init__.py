from .compliance_engine import ComplianceEngine, DIETARY_TAG_REQUIREMENTS, check_dietary
from .modification_resolver import (
    ModificationResolver,
    apply_modification,
    derive_effective_components,
    select_applicable,
)
from .tolerance_refiner import ToleranceRefiner, only_tolerably_present, promoted_ids
from .report_builder import ReportBuilder, run_menu_report

__all__ = [
    "ComplianceEngine",
    "DIETARY_TAG_REQUIREMENTS",
    "check_dietary",
    "ModificationResolver",
    "apply_modification",
    "derive_effective_components",
    "select_applicable",
    "ToleranceRefiner",
    "only_tolerably_present",
    "promoted_ids",
    "ReportBuilder",
    "run_menu_report",
]
