"""
Modification resolver: select triggered modifications, apply them jointly to an effective
component list, and re-verify. Catalog components are never mutated; every application
derives a new tuple.
"""
from typing import Iterable, List, Optional
import logging

from horp.catalog.menu_schema import Component, MenuItem, Modification, ModificationAction
from horp.evaluation.compliance_engine import ComplianceEngine
from horp.models.diner_profile import DinerProfile
from horp.models.verdict import ModificationOutcome

logger = logging.getLogger(__name__)


def select_applicable(
    item: MenuItem, avoid_allergens: frozenset, avoid_flags: frozenset
) -> tuple:
    """Modifications whose `when` clause intersects the avoid-set, in declaration order."""
    return tuple(
        mod for mod in item.modifications
        if mod.when.matches(avoid_allergens, avoid_flags)
    )


def apply_modification(components: Iterable[Component], modification: Modification) -> tuple:
    """One edit on a component list. Returns a new tuple."""
    if modification.action == ModificationAction.REMOVE:
        return tuple(c for c in components if c.name != modification.target_component)
    if modification.action == ModificationAction.SUBSTITUTE:
        # Substitute is assumed clean; its own allergen data is not looked up
        return tuple(
            Component(
                name=modification.target_component,
                notes=f"substituted with {modification.substitute_with}" if modification.substitute_with else None,
            )
            if c.name == modification.target_component
            else c
            for c in components
        )
    return tuple(components)


def derive_effective_components(
    components: Iterable[Component], modifications: Iterable[Modification]
) -> tuple:
    """Apply all modifications cumulatively to the same working view."""
    effective = tuple(components)
    for mod in modifications:
        effective = apply_modification(effective, mod)
    return effective


class ModificationResolver:
    def __init__(self, engine: Optional[ComplianceEngine] = None):
        self._engine = engine or ComplianceEngine()

    def resolve(self, item: MenuItem, profile: DinerProfile) -> ModificationOutcome:
        """
        Decide whether the item's triggered modifications, applied together, clear every
        allergen / flag / cross-contact issue. Dietary tags are not re-checked here.
        """
        applicable = select_applicable(item, profile.allergen_set, profile.flag_set)
        if not applicable:
            return ModificationOutcome(modifiable=False)

        effective = derive_effective_components(item.components, applicable)
        reasons: List[str] = []
        now_safe = self._engine.check_components(
            effective,
            item.cross_contact_risk,
            profile.allergen_set,
            profile.flag_set,
            profile.cross_contact_ok,
            profile.tolerate_set,
            reasons,
            report_tolerated=False,
        )
        logger.debug(
            "MODIFICATION_CHECK item=%s applicable=%d modifiable=%s remaining=%s",
            item.id, len(applicable), now_safe, reasons,
        )
        if not now_safe:
            return ModificationOutcome(
                modifiable=False, effective_components=effective, reasons=tuple(reasons)
            )
        return ModificationOutcome(
            modifiable=True, modifications=applicable, effective_components=effective
        )
