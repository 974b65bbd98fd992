"""
Strict contract for menu catalog entries.
All fields are structured for deterministic evaluation; absent optional lists load as empty.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from horp.errors import MalformedCatalogError


def _id_list(values: Any, field_name: str, item_id: Optional[str]) -> list:
    """None or missing -> empty; anything but a list is malformed (a bare string would split into letters)."""
    if values is None:
        return []
    if not isinstance(values, (list, tuple)):
        raise MalformedCatalogError(
            f"{field_name} of {item_id!r} must be a list, got {type(values).__name__}", item_id
        )
    return list(values)


def _as_ids(values: Any, field_name: str, item_id: Optional[str] = None) -> frozenset:
    """Lower-cased identifier set."""
    return frozenset(
        str(v).strip().lower() for v in _id_list(values, field_name, item_id) if str(v).strip()
    )


def _as_id_tuple(values: Any, field_name: str, item_id: Optional[str] = None) -> tuple:
    seen = []
    for v in _id_list(values, field_name, item_id):
        key = str(v).strip().lower()
        if key and key not in seen:
            seen.append(key)
    return tuple(seen)


class ModificationAction(str, Enum):
    REMOVE = "remove"
    SUBSTITUTE = "substitute"


@dataclass(frozen=True)
class Component:
    name: str
    allergens: tuple = ()
    ingredient_flags: tuple = ()
    # Set only on synthetic components produced by a substitution
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        d = {
            "name": self.name,
            "contains_allergens": list(self.allergens),
            "contains_ingredient_flags": list(self.ingredient_flags),
        }
        if self.notes:
            d["notes"] = self.notes
        return d

    @classmethod
    def from_dict(cls, d: Any, item_id: Optional[str] = None) -> "Component":
        if not isinstance(d, dict):
            raise MalformedCatalogError(f"component of {item_id!r} is not a mapping", item_id)
        name = d.get("name")
        if not name:
            raise MalformedCatalogError(f"component of {item_id!r} has no name", item_id)
        return cls(
            name=str(name),
            allergens=_as_id_tuple(d.get("contains_allergens"), "contains_allergens", item_id),
            ingredient_flags=_as_id_tuple(d.get("contains_ingredient_flags"), "contains_ingredient_flags", item_id),
            notes=d.get("notes"),
        )


@dataclass(frozen=True)
class ModificationTrigger:
    """`when` clause: the modification fires if any listed allergen or flag is avoided."""
    avoid_allergens: frozenset = field(default_factory=frozenset)
    avoid_ingredient_flags: frozenset = field(default_factory=frozenset)

    def matches(self, avoid_allergens: frozenset, avoid_flags: frozenset) -> bool:
        return bool(self.avoid_allergens & avoid_allergens) or bool(
            self.avoid_ingredient_flags & avoid_flags
        )

    def to_dict(self) -> dict:
        return {
            "avoid_allergens": sorted(self.avoid_allergens),
            "avoid_ingredient_flags": sorted(self.avoid_ingredient_flags),
        }

    @classmethod
    def from_dict(cls, d: Any, item_id: Optional[str] = None) -> "ModificationTrigger":
        if d is None:
            d = {}
        if not isinstance(d, dict):
            raise MalformedCatalogError(f"modification trigger of {item_id!r} is not a mapping", item_id)
        return cls(
            avoid_allergens=_as_ids(d.get("avoid_allergens"), "when.avoid_allergens", item_id),
            avoid_ingredient_flags=_as_ids(d.get("avoid_ingredient_flags"), "when.avoid_ingredient_flags", item_id),
        )


@dataclass(frozen=True)
class Modification:
    action: ModificationAction
    target_component: str
    substitute_with: Optional[str] = None
    when: ModificationTrigger = field(default_factory=ModificationTrigger)

    def to_dict(self) -> dict:
        d = {
            "action": self.action.value,
            "target_component": self.target_component,
            "when": self.when.to_dict(),
        }
        if self.substitute_with is not None:
            d["substitute_with"] = self.substitute_with
        return d

    @classmethod
    def from_dict(cls, d: Any, item_id: Optional[str] = None) -> "Modification":
        if not isinstance(d, dict):
            raise MalformedCatalogError(f"modification of {item_id!r} is not a mapping", item_id)
        try:
            action = ModificationAction(str(d.get("action", "")).lower())
        except ValueError:
            raise MalformedCatalogError(
                f"modification of {item_id!r} has unknown action {d.get('action')!r}", item_id
            ) from None
        target = d.get("target_component")
        if not target:
            raise MalformedCatalogError(f"modification of {item_id!r} has no target_component", item_id)
        substitute_with = d.get("substitute_with")
        if action is ModificationAction.SUBSTITUTE and not substitute_with:
            raise MalformedCatalogError(f"substitution in {item_id!r} has no substitute_with", item_id)
        return cls(
            action=action,
            target_component=str(target),
            substitute_with=str(substitute_with) if substitute_with else None,
            when=ModificationTrigger.from_dict(d.get("when"), item_id),
        )


@dataclass(frozen=True)
class MenuItem:
    id: str
    name: str
    category: str = ""
    components: tuple = ()
    modifications: tuple = ()
    tags: frozenset = field(default_factory=frozenset)
    cross_contact_risk: tuple = ()

    @property
    def allergens(self) -> frozenset:
        """Union of allergens declared on any component."""
        out = frozenset()
        for comp in self.components:
            out |= frozenset(comp.allergens)
        return out

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "components": [c.to_dict() for c in self.components],
            "modifications": [m.to_dict() for m in self.modifications],
            "tags": sorted(self.tags),
            "cross_contact_risk": list(self.cross_contact_risk),
        }

    @classmethod
    def from_dict(cls, d: Any) -> "MenuItem":
        if not isinstance(d, dict):
            raise MalformedCatalogError(f"menu entry is not a mapping: {type(d).__name__}")
        item_id = d.get("id")
        if item_id is None or str(item_id).strip() == "":
            raise MalformedCatalogError("menu entry has no id")
        item_id = str(item_id)
        return cls(
            id=item_id,
            name=str(d.get("name") or item_id),
            category=str(d.get("category") or ""),
            components=tuple(Component.from_dict(c, item_id) for c in d.get("components") or []),
            modifications=tuple(Modification.from_dict(m, item_id) for m in d.get("modifications") or []),
            tags=_as_ids(d.get("tags"), "tags", item_id),
            cross_contact_risk=_as_id_tuple(d.get("cross_contact_risk"), "cross_contact_risk", item_id),
        )
