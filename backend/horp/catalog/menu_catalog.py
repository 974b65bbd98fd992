"""
Menu catalog. Loads data/menu.json once into an immutable snapshot.
Lookup by item id; iteration keeps catalog order.
CatalogStore swaps whole snapshots on reload so in-flight evaluations keep the one they started with.
"""
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Optional
import json
import logging
import threading

from .menu_schema import MenuItem
from horp.config import get_menu_path
from horp.errors import CatalogUnavailableError, MalformedCatalogError

logger = logging.getLogger(__name__)


class MenuCatalog:
    """
    Read-only, ordered collection of MenuItem records.
    Accepts either {"menu_version": ..., "items": [...]} or a bare list of items.
    """

    def __init__(self, items: Iterable[MenuItem], version: str = "0"):
        ordered = tuple(items)
        by_id: dict[str, MenuItem] = {}
        for item in ordered:
            if item.id in by_id:
                raise MalformedCatalogError(f"duplicate menu item id {item.id!r}", item.id)
            by_id[item.id] = item
        self._items = ordered
        self._by_id = MappingProxyType(by_id)
        self._version = version

    @classmethod
    def from_data(cls, data: Any) -> "MenuCatalog":
        version = "0"
        if isinstance(data, dict):
            version = str(data.get("menu_version", "0"))
            raw_items = data.get("items", [])
        else:
            raw_items = data
        if not isinstance(raw_items, list):
            raise MalformedCatalogError(
                f"catalog items must be a list, got {type(raw_items).__name__}"
            )
        return cls((MenuItem.from_dict(d) for d in raw_items), version=version)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "MenuCatalog":
        path = path or get_menu_path()
        if not path.exists():
            raise CatalogUnavailableError(path, "file not found")
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogUnavailableError(path, str(e)) from e
        catalog = cls.from_data(data)
        logger.info(
            "CATALOG_LOAD items=%d version=%s path=%s", len(catalog), catalog.version, path
        )
        return catalog

    @property
    def version(self) -> str:
        return self._version

    def get(self, item_id: str) -> Optional[MenuItem]:
        return self._by_id.get(item_id)

    def __iter__(self) -> Iterator[MenuItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


class CatalogStore:
    """Holds the current catalog snapshot. reload() replaces the reference, never the contents."""

    def __init__(self, catalog: MenuCatalog, path: Optional[Path] = None):
        self._catalog = catalog
        self._path = path
        self._lock = threading.Lock()

    @classmethod
    def open(cls, path: Optional[Path] = None) -> "CatalogStore":
        path = path or get_menu_path()
        return cls(MenuCatalog.load(path), path=path)

    def current(self) -> MenuCatalog:
        return self._catalog

    def reload(self) -> MenuCatalog:
        """Load a fresh snapshot and swap it in. On failure the previous snapshot stays active."""
        fresh = MenuCatalog.load(self._path)
        with self._lock:
            previous = self._catalog
            self._catalog = fresh
        logger.info(
            "CATALOG_RELOAD previous_version=%s version=%s items=%d",
            previous.version, fresh.version, len(fresh),
        )
        return fresh
