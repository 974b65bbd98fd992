"""
Unit tests for the compliance engine: dietary tags, allergen tolerance, flags, cross-contact.
Run from repo root: python -m pytest backend/tests/test_compliance_engine.py -v
"""
import pytest

from horp.evaluation.compliance_engine import ComplianceEngine, check_dietary


@pytest.fixture(scope="module")
def engine():
    return ComplianceEngine()


def test_vegan_preference_requires_vegan_tag(engine, make_item, component, profile):
    """Item with no allergen issue but no vegan tag fails dietary only."""
    item = make_item("egg-rice", [component("rice")], tags=["vegetarian"])
    result = engine.evaluate(item, profile(dietaryPreferences=["vegan"]))
    assert result.compliant is True
    assert result.dietary_compliant is False
    assert result.reasons == ("Contains dairy, eggs or animal products - not vegan",)
    assert not result.is_safe


def test_vegetarian_reason(make_item, component):
    item = make_item("bao", [component("pork")])
    reasons = []
    assert check_dietary(item, ["vegetarian"], reasons) is False
    assert reasons == ["Contains meat or animal products - not vegetarian"]


def test_dietary_stops_at_first_missing_tag(make_item, component):
    item = make_item("steak", [component("beef")])
    reasons = []
    assert check_dietary(item, ["vegetarian", "vegan"], reasons) is False
    assert len(reasons) == 1


def test_unknown_dietary_preference_ignored(make_item, component):
    item = make_item("fish", [component("cod")])
    reasons = []
    assert check_dietary(item, ["pescatarian"], reasons) is True
    assert reasons == []


def test_dietary_and_allergen_failures_both_reported(engine, make_item, component, profile):
    item = make_item("noodles", [component("wheat noodles", ["gluten"])])
    result = engine.evaluate(item, profile(dietaryPreferences=["vegan"], avoidAllergens=["gluten"]))
    assert result.compliant is False
    assert result.dietary_compliant is False
    assert len(result.reasons) == 2


def test_intolerable_allergen_reason_names_component(engine, make_item, component, profile):
    item = make_item("dressing", [component("sesame dressing", ["sesame"], ["sesame_oil"])])
    result = engine.evaluate(item, profile(avoidAllergens=["sesame"]))
    assert result.compliant is False
    assert result.reasons == ('"sesame dressing" contains intolerable allergen(s): sesame',)


def test_tolerated_flag_on_component_makes_allergen_informational(engine, make_item, component, profile):
    item = make_item("dressing", [component("sesame dressing", ["sesame"], ["sesame_oil"])])
    result = engine.evaluate(item, profile(avoidAllergens=["sesame"], tolerateFlags=["sesame_oil"]))
    assert result.compliant is True
    assert result.reasons == ('"sesame dressing" contains tolerated form: sesame',)


def test_tolerated_flag_must_be_related_to_allergen(engine, make_item, component, profile):
    """soy_sauce is a gluten form, not a sesame form."""
    item = make_item("mix", [component("sauce", ["sesame"], ["soy_sauce"])])
    result = engine.evaluate(item, profile(avoidAllergens=["sesame"], tolerateFlags=["soy_sauce"]))
    assert result.compliant is False


def test_tolerated_flag_must_be_on_same_component(engine, make_item, component, profile):
    item = make_item("bowl", [
        component("sesame seeds", ["sesame"], ["sesame_seed"]),
        component("sesame dressing", ["sesame"], ["sesame_oil"]),
    ])
    result = engine.evaluate(item, profile(avoidAllergens=["sesame"], tolerateFlags=["sesame_oil"]))
    assert result.compliant is False
    assert '"sesame seeds" contains intolerable allergen(s): sesame' in result.reasons
    assert '"sesame dressing" contains tolerated form: sesame' in result.reasons


def test_multiple_allergens_on_one_component_split(engine, make_item, component, profile):
    item = make_item("glaze", [component("soy glaze", ["gluten", "shellfish"], ["soy_sauce"])])
    result = engine.evaluate(
        item, profile(avoidAllergens=["gluten", "shellfish"], tolerateFlags=["soy_sauce"])
    )
    assert result.compliant is False
    assert result.reasons == ('"soy glaze" contains intolerable allergen(s): shellfish',)


def test_avoided_flag_rejects_unconditionally(engine, make_item, component, profile):
    """Flags have no tolerance exemption, even when the same flag is tolerated."""
    item = make_item("bao", [component("pork belly", [], ["pork"])])
    result = engine.evaluate(item, profile(avoidIngredientFlags=["pork"], tolerateFlags=["pork"]))
    assert result.compliant is False
    assert result.reasons == ('"pork belly" contains ingredient flag(s): pork',)


@pytest.mark.parametrize("cross_contact_ok,expected", [(False, False), (True, True)])
def test_cross_contact_gating(engine, make_item, component, profile, cross_contact_ok, expected):
    item = make_item("rolls", [component("cabbage")], cross_contact_risk=["shellfish"])
    result = engine.evaluate(
        item, profile(avoidAllergens=["shellfish"], crossContactOk=cross_contact_ok)
    )
    assert result.compliant is expected
    if not expected:
        assert result.reasons == ("Cross-contact risk: shellfish",)


def test_cross_contact_ignores_allergens_not_avoided(engine, make_item, component, profile):
    item = make_item("rolls", [component("cabbage")], cross_contact_risk=["peanut"])
    result = engine.evaluate(item, profile(avoidAllergens=["shellfish"]))
    assert result.compliant is True


def test_empty_profile_is_permissive(engine, make_item, component, profile):
    item = make_item("anything", [component("shrimp", ["shellfish"], ["oyster_sauce"])],
                     cross_contact_risk=["peanut"])
    result = engine.evaluate(item, profile())
    assert result.is_safe
    assert result.reasons == ()


def test_every_forbidden_allergen_reported(engine, make_item, component, profile):
    item = make_item("combo", [
        component("noodles", ["gluten"]),
        component("shrimp", ["shellfish"]),
        component("peanuts", ["peanut"]),
    ])
    result = engine.evaluate(item, profile(avoidAllergens=["gluten", "shellfish", "peanut"]))
    assert len(result.reasons) == 3
