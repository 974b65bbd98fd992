"""
Diner (table) profile consumed by the evaluation engine.
A profile with no fields set means "no restrictions"; that is the permissive default, not an error.
Accepts the camelCase keys the HTTP layer and wizard send, and snake_case equivalents.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

# Sentinel the wizard uses for "no dietary restrictions" / "no allergies"
NONE_OPTION = "none"

_KEY_ALIASES = {
    "dietary_preferences": ("dietaryPreferences", "dietary_preferences"),
    "avoid_allergens": ("avoidAllergens", "avoid_allergens", "allergies"),
    "avoid_ingredient_flags": ("avoidIngredientFlags", "avoid_ingredient_flags"),
    "tolerate_flags": ("tolerateFlags", "tolerate_flags"),
    "cross_contact_ok": ("crossContactOk", "cross_contact_ok"),
    "tolerances": ("tolerances",),
}


def _pick(data: dict, name: str) -> Any:
    for key in _KEY_ALIASES[name]:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _clean_ids(values: Any) -> tuple:
    """Lower-case, strip, drop the 'none' sentinel and duplicates; keep first-seen order."""
    if isinstance(values, str):
        values = [values]
    out = []
    for v in values or []:
        key = str(v).strip().lower()
        if key and key != NONE_OPTION and key not in out:
            out.append(key)
    return tuple(out)


_TRUE_STRINGS = frozenset(("true", "1", "yes", "on"))


def _as_flag(value: Any) -> bool:
    """JSON boolean or its string spelling; anything unrecognised reads as False."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return value is True or (isinstance(value, int) and value == 1)


@dataclass(frozen=True)
class DinerProfile:
    dietary_preferences: tuple = ()
    avoid_allergens: tuple = ()
    avoid_ingredient_flags: tuple = ()
    tolerate_flags: tuple = ()
    cross_contact_ok: bool = False
    # allergen -> True, or legacy nested {"canUseSoySauce": True}
    tolerances: Dict[str, Any] = field(default_factory=dict, hash=False, compare=True)

    @property
    def allergen_set(self) -> frozenset:
        return frozenset(self.avoid_allergens)

    @property
    def flag_set(self) -> frozenset:
        return frozenset(self.avoid_ingredient_flags)

    @property
    def tolerate_set(self) -> frozenset:
        return frozenset(self.tolerate_flags)

    def is_empty(self) -> bool:
        """True if the profile imposes no constraint at all."""
        return (
            not self.dietary_preferences
            and not self.avoid_allergens
            and not self.avoid_ingredient_flags
        )

    def has_tolerances(self) -> bool:
        return bool(self.tolerances)

    def for_single_allergen(self, allergen: str) -> "DinerProfile":
        """Same profile with only one avoided allergen (per-allergen isolation pass)."""
        return replace(self, avoid_allergens=(allergen,))

    def to_dict(self) -> dict:
        return {
            "dietaryPreferences": list(self.dietary_preferences),
            "avoidAllergens": list(self.avoid_allergens),
            "avoidIngredientFlags": list(self.avoid_ingredient_flags),
            "tolerateFlags": list(self.tolerate_flags),
            "crossContactOk": self.cross_contact_ok,
            "tolerances": dict(self.tolerances),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "DinerProfile":
        """Load from dict; missing keys mean no restriction of that kind."""
        data = data or {}
        raw_tolerances = _pick(data, "tolerances") or {}
        tolerances = {
            str(k).strip().lower(): v
            for k, v in (raw_tolerances.items() if isinstance(raw_tolerances, dict) else [])
        }
        return cls(
            dietary_preferences=_clean_ids(_pick(data, "dietary_preferences")),
            avoid_allergens=_clean_ids(_pick(data, "avoid_allergens")),
            avoid_ingredient_flags=_clean_ids(_pick(data, "avoid_ingredient_flags")),
            tolerate_flags=_clean_ids(_pick(data, "tolerate_flags")),
            cross_contact_ok=_as_flag(_pick(data, "cross_contact_ok")),
            tolerances=tolerances,
        )
