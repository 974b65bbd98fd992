"""
Unit tests: modification selection, joint application, re-verification.
Run from repo root: python -m pytest backend/tests/test_modification_resolver.py -v
"""
from horp.catalog.menu_schema import Component, Modification, ModificationAction
from horp.evaluation.modification_resolver import (
    ModificationResolver,
    apply_modification,
    derive_effective_components,
    select_applicable,
)


def _remove(target, allergens=(), flags=()):
    return {
        "action": "remove",
        "target_component": target,
        "when": {"avoid_allergens": list(allergens), "avoid_ingredient_flags": list(flags)},
    }


def _substitute(target, substitute, allergens=(), flags=()):
    return {
        "action": "substitute",
        "target_component": target,
        "substitute_with": substitute,
        "when": {"avoid_allergens": list(allergens), "avoid_ingredient_flags": list(flags)},
    }


def test_select_by_allergen_or_flag(make_item, component):
    item = make_item("x", [component("a")], modifications=[
        _remove("a", allergens=["gluten"]),
        _remove("b", flags=["pork"]),
        _remove("c", allergens=["peanut"]),
    ])
    selected = select_applicable(item, frozenset({"gluten"}), frozenset({"pork"}))
    assert [m.target_component for m in selected] == ["a", "b"]


def test_remove_and_substitute(make_item, component):
    item = make_item("x", [
        component("soy glaze", ["gluten"], ["soy_sauce"]),
        component("shrimp", ["shellfish"]),
        component("rice"),
    ], modifications=[_remove("soy glaze", ["gluten"]), _substitute("shrimp", "tofu", ["shellfish"])])
    removed = apply_modification(item.components, item.modifications[0])
    assert [c.name for c in removed] == ["shrimp", "rice"]

    substituted = apply_modification(item.components, item.modifications[1])
    shrimp = substituted[1]
    assert shrimp.name == "shrimp"
    assert shrimp.allergens == ()
    assert shrimp.ingredient_flags == ()
    assert shrimp.notes == "substituted with tofu"
    assert item.modifications[1].action == ModificationAction.SUBSTITUTE


def test_derive_effective_view_does_not_touch_catalog(make_item, component):
    item = make_item("x", [component("shrimp", ["shellfish"])],
                     modifications=[_substitute("shrimp", "tofu", ["shellfish"])])
    effective = derive_effective_components(item.components, item.modifications)
    assert effective[0].allergens == ()
    assert item.components[0].allergens == ("shellfish",)


def test_soy_glaze_removal_rescues_item(make_item, component, profile):
    item = make_item("salmon", [component("salmon"), component("soy glaze", ["gluten"])],
                     modifications=[_remove("soy glaze", ["gluten"])])
    outcome = ModificationResolver().resolve(item, profile(avoidAllergens=["gluten"]))
    assert outcome.modifiable is True
    assert [m.target_component for m in outcome.modifications] == ["soy glaze"]


def test_no_applicable_modification_not_modifiable(make_item, component, profile):
    item = make_item("salmon", [component("soy glaze", ["gluten"])],
                     modifications=[_remove("soy glaze", ["shellfish"])])
    outcome = ModificationResolver().resolve(item, profile(avoidAllergens=["gluten"]))
    assert outcome.modifiable is False
    assert outcome.modifications == ()


def test_joint_modifications_rescue_when_each_alone_insufficient(make_item, component, profile):
    item = make_item("kung-pao", [
        component("peanuts", ["peanut"]),
        component("wok oil", ["peanut"], ["peanut_oil"]),
    ], modifications=[
        _remove("peanuts", ["peanut"]),
        _substitute("wok oil", "canola oil", ["peanut"]),
    ])
    p = profile(avoidAllergens=["peanut"])
    resolver = ModificationResolver()
    for single in item.modifications:
        effective = derive_effective_components(item.components, [single])
        assert any("peanut" in c.allergens for c in effective)
    outcome = resolver.resolve(item, p)
    assert outcome.modifiable is True
    assert len(outcome.modifications) == 2


def test_remaining_allergen_blocks_rescue(make_item, component, profile):
    item = make_item("stir-fry", [
        component("shrimp", ["shellfish"]),
        component("oyster sauce", ["shellfish"], ["oyster_sauce"]),
    ], modifications=[_substitute("shrimp", "tofu", ["shellfish"])])
    outcome = ModificationResolver().resolve(item, profile(avoidAllergens=["shellfish"]))
    assert outcome.modifiable is False
    assert outcome.reasons == ('"oyster sauce" contains intolerable allergen(s): shellfish',)


def test_cross_contact_not_removed_by_modification(make_item, component, profile):
    item = make_item("rolls", [component("wrapper", ["gluten"])],
                     modifications=[_remove("wrapper", ["gluten"])],
                     cross_contact_risk=["gluten"])
    assert ModificationResolver().resolve(item, profile(avoidAllergens=["gluten"])).modifiable is False
    assert ModificationResolver().resolve(
        item, profile(avoidAllergens=["gluten"], crossContactOk=True)
    ).modifiable is True


def test_recheck_honours_tolerated_flags(make_item, component, profile):
    item = make_item("bowl", [
        component("sesame seeds", ["sesame"], ["sesame_seed"]),
        component("sesame dressing", ["sesame"], ["sesame_oil"]),
    ], modifications=[_remove("sesame seeds", ["sesame"])])
    assert ModificationResolver().resolve(
        item, profile(avoidAllergens=["sesame"], tolerateFlags=["sesame_oil"])
    ).modifiable is True
    assert ModificationResolver().resolve(item, profile(avoidAllergens=["sesame"])).modifiable is False


def test_substitute_without_name_leaves_no_note():
    mod = Modification(action=ModificationAction.SUBSTITUTE, target_component="glaze")
    out = apply_modification((Component("glaze", ("gluten",)),), mod)
    assert out == (Component("glaze"),)
    assert out[0].notes is None
