"""
Paths, feature flags, and centralized configuration.
All resolution relative to the repository root unless overridden by env.
"""
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Repo root: backend/horp/config.py -> parent=horp, parent.parent=backend, parent.parent.parent=repo
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_REPO_ROOT = _BACKEND_DIR.parent


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


# --- Data paths ---
def get_menu_path() -> Path:
    override = os.environ.get("HORP_MENU_PATH", "").strip()
    if override:
        return Path(override)
    return _REPO_ROOT / "data" / "menu.json"


def get_tolerances_path() -> Path:
    override = os.environ.get("HORP_TOLERANCES_PATH", "").strip()
    if override:
        return Path(override)
    return _REPO_ROOT / "data" / "tolerances.json"


# --- Report behaviour (lazy read from env) ---
def get_per_allergen_report() -> bool:
    return _env_flag("PER_ALLERGEN_REPORT", "true")


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").upper()


# --- Startup logging ---
def log_config() -> None:
    logger.info(
        "CONFIG: menu=%s menu_exists=%s tolerances=%s tolerances_exists=%s "
        "per_allergen_report=%s log_level=%s",
        get_menu_path(), get_menu_path().exists(),
        get_tolerances_path(), get_tolerances_path().exists(),
        get_per_allergen_report(), get_log_level(),
    )
