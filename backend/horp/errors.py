"""
Engine exceptions. Evaluation logic never raises; only catalog loading does.
"""
from pathlib import Path
from typing import Optional


class MalformedCatalogError(ValueError):
    """Catalog document or one of its entries lacks required structure."""

    def __init__(self, message: str, item_id: Optional[str] = None):
        super().__init__(message)
        self.item_id = item_id


class CatalogUnavailableError(RuntimeError):
    """Catalog file missing or unreadable. Fatal at startup."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Menu catalog unavailable at {path}: {reason}")
        self.path = path
        self.reason = reason
