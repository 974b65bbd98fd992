"""
Tolerance refiner: second pass over filtered items only.
Promotes an item to safe when every avoided allergen it contains appears solely through a
processed form the diner declared acceptable (e.g. sesame oil but not sesame seed), and
nothing else blocks it. Safe and can-be-modified items pass through untouched.
"""
from typing import Any, List, Mapping, Optional
import logging

from horp.catalog.menu_catalog import MenuCatalog
from horp.catalog.menu_schema import MenuItem
from horp.evaluation.compliance_engine import ComplianceEngine, check_dietary
from horp.models.diner_profile import DinerProfile
from horp.models.verdict import EvaluationResult
from horp.tolerance.tolerance_schema import ToleranceRelation

logger = logging.getLogger(__name__)


def only_tolerably_present(item: MenuItem, allergen: str, relation: ToleranceRelation) -> bool:
    """
    Every component declaring the allergen must carry the tolerated flag and no other
    related form. A component with both the tolerated and an intolerable form fails.
    """
    for component in item.components:
        if allergen not in component.allergens:
            continue
        flags = component.ingredient_flags
        has_tolerated = relation.tolerated_flag in flags
        has_other_forms = any(
            f != relation.tolerated_flag and relation.is_related(f) for f in flags
        )
        if has_other_forms or not has_tolerated:
            return False
    return True


class ToleranceRefiner:
    def __init__(self, engine: Optional[ComplianceEngine] = None):
        self._engine = engine or ComplianceEngine()
        self._registry = self._engine.tolerance_registry

    def _tolerated_by_flags(self, item: MenuItem, allergen: str, profile: DinerProfile) -> bool:
        """Allergen already covered on every carrying component by the profile's tolerate flags."""
        return all(
            self._engine.is_allergen_tolerable(c, allergen, profile.tolerate_set)
            for c in item.components
            if allergen in c.allergens
        )

    def _has_other_blocker(self, item: MenuItem, profile: DinerProfile) -> bool:
        if profile.dietary_preferences and not check_dietary(item, profile.dietary_preferences, []):
            return True
        flag_set = profile.flag_set
        if any(f in flag_set for c in item.components for f in c.ingredient_flags):
            return True
        if not profile.cross_contact_ok and any(
            r in profile.allergen_set for r in item.cross_contact_risk
        ):
            return True
        return False

    def tolerance_notes(
        self, item: MenuItem, profile: DinerProfile, tolerances: Mapping[str, Any]
    ) -> Optional[List[str]]:
        """
        Notes explaining why the item is safe under the declared tolerances,
        or None when at least one avoided allergen in the item is not covered.
        """
        if self._has_other_blocker(item, profile):
            return None
        present = item.allergens
        notes: List[str] = []
        for allergen in profile.avoid_allergens:
            if allergen not in present:
                continue
            if self._registry.accepts_tolerated_form(allergen, tolerances):
                relation = self._registry.get(allergen)
                if only_tolerably_present(item, allergen, relation):
                    notes.append(f"Can tolerate {allergen} in form: {relation.tolerated_flag}")
                    continue
            if self._tolerated_by_flags(item, allergen, profile):
                continue
            return None
        return notes

    def refine(
        self,
        result: EvaluationResult,
        catalog: MenuCatalog,
        profile: DinerProfile,
        tolerances: Optional[Mapping[str, Any]] = None,
    ) -> EvaluationResult:
        tolerances = profile.tolerances if tolerances is None else tolerances
        if not tolerances:
            return result

        refined = EvaluationResult(
            safe=list(result.safe),
            can_be_modified=list(result.can_be_modified),
            filtered=[],
        )
        for verdict in result.filtered:
            item = catalog.get(verdict.id)
            if item is None:
                refined.filtered.append(verdict)
                continue
            notes = self.tolerance_notes(item, profile, tolerances)
            if notes:
                logger.info("TOLERANCE_PROMOTE id=%s notes=%s", item.id, notes)
                refined.safe.append(verdict.promoted(notes))
            else:
                refined.filtered.append(verdict)
        return refined


def promoted_ids(result: EvaluationResult) -> List[str]:
    """Ids of safe items that are safe only because of a tolerated form."""
    return [v.id for v in result.safe if v.tolerance_allowed]

