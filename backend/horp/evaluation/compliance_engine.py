"""
Deterministic compliance engine for menu items.
Checks: 1) dietary tags 2) component allergens (tolerance-aware) 3) avoided ingredient flags
4) cross-contact risk. Dietary and allergen failures are evaluated independently.
"""
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from horp.catalog.menu_schema import Component, MenuItem
from horp.models.diner_profile import DinerProfile
from horp.models.verdict import ComplianceResult
from horp.tolerance.tolerance_registry import ToleranceRegistry

logger = logging.getLogger(__name__)

# Dietary preference -> (required tag, reason when the tag is missing)
DIETARY_TAG_REQUIREMENTS: Dict[str, Tuple[str, str]] = {
    "vegetarian": ("vegetarian", "Contains meat or animal products - not vegetarian"),
    "vegan": ("vegan", "Contains dairy, eggs or animal products - not vegan"),
}


def check_dietary(item: MenuItem, dietary_preferences: Iterable[str], reasons: List[str]) -> bool:
    """First missing required tag fails the item. Preferences with no tag requirement are ignored."""
    for pref in dietary_preferences:
        requirement = DIETARY_TAG_REQUIREMENTS.get(pref)
        if requirement is None:
            logger.debug("DIETARY_UNKNOWN_PREFERENCE pref=%s item=%s", pref, item.id)
            continue
        tag, reason = requirement
        if tag not in item.tags:
            reasons.append(reason)
            return False
    return True


class ComplianceEngine:
    """
    Allergen / flag / cross-contact evaluation against one avoid-set.
    Tolerance relations come from the registry; no allergen is named in code here.
    """

    def __init__(self, tolerance_registry: Optional[ToleranceRegistry] = None):
        self._tolerances = tolerance_registry or ToleranceRegistry()

    @property
    def tolerance_registry(self) -> ToleranceRegistry:
        return self._tolerances

    def is_allergen_tolerable(
        self, component: Component, allergen: str, tolerate_flags: frozenset
    ) -> bool:
        """Tolerable only if a tolerated flag is declared on this component and is a form of the allergen."""
        if not tolerate_flags:
            return False
        return any(
            flag in tolerate_flags and self._tolerances.is_related(flag, allergen)
            for flag in component.ingredient_flags
        )

    def check_components(
        self,
        components: Iterable[Component],
        cross_contact_risk: Iterable[str],
        avoid_allergens: frozenset,
        avoid_flags: frozenset,
        cross_contact_ok: bool,
        tolerate_flags: frozenset,
        reasons: List[str],
        report_tolerated: bool = True,
    ) -> bool:
        """
        Returns True when nothing forces rejection. Every forbidden allergen or flag found
        produces a reason; tolerated allergens produce an informational reason only.
        """
        if not avoid_allergens and not avoid_flags:
            return True

        has_issue = False
        for component in components:
            forbidden = [a for a in component.allergens if a in avoid_allergens]
            if forbidden:
                tolerable = [
                    a for a in forbidden
                    if self.is_allergen_tolerable(component, a, tolerate_flags)
                ]
                intolerable = [a for a in forbidden if a not in tolerable]
                if intolerable:
                    reasons.append(
                        f'"{component.name}" contains intolerable allergen(s): {", ".join(intolerable)}'
                    )
                    has_issue = True
                elif report_tolerated:
                    reasons.append(
                        f'"{component.name}" contains tolerated form: {", ".join(tolerable)}'
                    )

            forbidden_flags = [f for f in component.ingredient_flags if f in avoid_flags]
            if forbidden_flags:
                reasons.append(
                    f'"{component.name}" contains ingredient flag(s): {", ".join(forbidden_flags)}'
                )
                has_issue = True

        if not cross_contact_ok:
            risks = [r for r in cross_contact_risk if r in avoid_allergens]
            if risks:
                reasons.append(f"Cross-contact risk: {', '.join(risks)}")
                has_issue = True

        return not has_issue

    def evaluate(self, item: MenuItem, profile: DinerProfile) -> ComplianceResult:
        """Full check of an item as served: dietary + allergen/flag/cross-contact."""
        reasons: List[str] = []
        dietary_ok = True
        if profile.dietary_preferences:
            dietary_ok = check_dietary(item, profile.dietary_preferences, reasons)
        compliant = self.check_components(
            item.components,
            item.cross_contact_risk,
            profile.allergen_set,
            profile.flag_set,
            profile.cross_contact_ok,
            profile.tolerate_set,
            reasons,
        )
        if not (compliant and dietary_ok):
            logger.debug(
                "COMPLIANCE_REJECT item=%s dietary_ok=%s compliant=%s reasons=%s",
                item.id, dietary_ok, compliant, reasons,
            )
        return ComplianceResult(
            compliant=compliant,
            dietary_compliant=dietary_ok,
            reasons=tuple(reasons),
        )
