from .menu_schema import Component, MenuItem, Modification, ModificationAction, ModificationTrigger
from .menu_catalog import CatalogStore, MenuCatalog

__all__ = [
    "Component",
    "MenuItem",
    "Modification",
    "ModificationAction",
    "ModificationTrigger",
    "CatalogStore",
    "MenuCatalog",
]
