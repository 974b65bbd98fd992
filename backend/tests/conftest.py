"""
Shared fixtures: in-memory menu items and catalogs built from plain dicts.
"""
import pytest

from horp.catalog.menu_catalog import MenuCatalog
from horp.catalog.menu_schema import MenuItem
from horp.models.diner_profile import DinerProfile


def _component(name, allergens=(), flags=()):
    return {
        "name": name,
        "contains_allergens": list(allergens),
        "contains_ingredient_flags": list(flags),
    }


@pytest.fixture
def component():
    return _component


@pytest.fixture
def make_item():
    """Build a MenuItem from keyword args using the catalog dict format."""
    def _make(item_id="item", components=(), modifications=(), tags=(), cross_contact_risk=(), **extra):
        data = {
            "id": item_id,
            "name": extra.pop("name", item_id.replace("-", " ").title()),
            "category": extra.pop("category", "mains"),
            "components": list(components),
            "modifications": list(modifications),
            "tags": list(tags),
            "cross_contact_risk": list(cross_contact_risk),
        }
        return MenuItem.from_dict(data)
    return _make


@pytest.fixture
def make_catalog():
    def _make(*items):
        return MenuCatalog(items, version="test")
    return _make


@pytest.fixture
def profile():
    """DinerProfile from keyword args in the API's camelCase vocabulary."""
    def _make(**kwargs):
        return DinerProfile.from_dict(kwargs)
    return _make
