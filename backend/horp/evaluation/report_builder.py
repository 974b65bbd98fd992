"""
Report builder: combined pass over the catalog, optional per-allergen isolation passes,
then the tolerance refiner over the combined result.
Each run reads one catalog snapshot and allocates its own verdicts.
"""
from typing import Optional
import logging

from horp.catalog.menu_catalog import MenuCatalog
from horp.catalog.menu_schema import MenuItem
from horp.evaluation.compliance_engine import ComplianceEngine
from horp.evaluation.modification_resolver import ModificationResolver
from horp.evaluation.tolerance_refiner import ToleranceRefiner
from horp.models.diner_profile import DinerProfile
from horp.models.verdict import EvaluationResult, ItemCategory, ItemVerdict, MenuReport
from horp.tolerance.tolerance_registry import ToleranceRegistry

logger = logging.getLogger(__name__)


class ReportBuilder:
    """
    Pipeline: compliance -> (if rejected and dietarily ok) modification resolver
    -> categorize -> (if tolerances declared) tolerance refiner.
    """

    def __init__(
        self,
        catalog: MenuCatalog,
        tolerance_registry: Optional[ToleranceRegistry] = None,
    ):
        self._catalog = catalog
        self._engine = ComplianceEngine(tolerance_registry)
        self._resolver = ModificationResolver(self._engine)
        self._refiner = ToleranceRefiner(self._engine)

    @property
    def catalog(self) -> MenuCatalog:
        return self._catalog

    def classify_item(self, item: MenuItem, profile: DinerProfile) -> tuple:
        """Returns (ItemCategory, ItemVerdict) for one item."""
        result = self._engine.evaluate(item, profile)
        verdict = ItemVerdict.for_item(item, result.reasons)
        if result.is_safe:
            return ItemCategory.SAFE, verdict
        # Dietary failures are never rescued by modification
        if result.dietary_compliant and not result.compliant and item.modifications:
            outcome = self._resolver.resolve(item, profile)
            if outcome.modifiable:
                verdict.modifications = list(outcome.modifications)
                return ItemCategory.CAN_BE_MODIFIED, verdict
        return ItemCategory.FILTERED, verdict

    def filter_menu(self, profile: DinerProfile) -> EvaluationResult:
        """Single pass over the catalog with the profile's full avoid-set."""
        results = EvaluationResult()
        for item in self._catalog:
            category, verdict = self.classify_item(item, profile)
            results.add(category, verdict)
        logger.debug(
            "FILTER_RUN allergens=%s flags=%s safe=%d modifiable=%d filtered=%d",
            list(profile.avoid_allergens), list(profile.avoid_ingredient_flags),
            len(results.safe), len(results.can_be_modified), len(results.filtered),
        )
        return results

    def build_report(self, profile: DinerProfile, per_allergen: bool = True) -> MenuReport:
        combined = self.filter_menu(profile)

        safe_by_allergy = {}
        if per_allergen:
            for allergen in profile.avoid_allergens:
                single = self.filter_menu(profile.for_single_allergen(allergen))
                safe_by_allergy[allergen] = single.safe

        if profile.has_tolerances():
            combined = self._refiner.refine(combined, self._catalog, profile)

        logger.info(
            "REPORT_BUILT items=%d safe=%d modifiable=%d filtered=%d per_allergen=%s tolerances=%s",
            len(self._catalog), len(combined.safe), len(combined.can_be_modified),
            len(combined.filtered), list(safe_by_allergy.keys()), sorted(profile.tolerances.keys()),
        )
        return MenuReport(
            safe_for_all=combined.safe,
            can_be_modified_for_all=combined.can_be_modified,
            filtered_for_all=combined.filtered,
            safe_by_allergy=safe_by_allergy,
        )


def run_menu_report(
    catalog: MenuCatalog,
    profile: DinerProfile,
    per_allergen: bool = True,
    tolerance_registry: Optional[ToleranceRegistry] = None,
) -> MenuReport:
    """Convenience: one-off report with a fresh builder."""
    return ReportBuilder(catalog, tolerance_registry).build_report(profile, per_allergen=per_allergen)
