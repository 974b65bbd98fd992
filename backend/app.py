"""
HORP Bot FastAPI application.

Endpoints:
    GET  /api/health        Health check
    GET  /api/menu          Catalog version and item count
    POST /api/run           Table profile -> combined + per-allergy safety report
    POST /api/menu/reload   Swap in a freshly loaded catalog snapshot

The catalog is loaded at import; a missing or malformed catalog aborts startup.
"""
from fastapi import Body, FastAPI, Query
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
import logging
from dotenv import load_dotenv
from pathlib import Path

# Load env vars
load_dotenv(Path(__file__).parent / ".env")

from horp.config import get_log_level, get_per_allergen_report, log_config
from horp.catalog.menu_catalog import CatalogStore
from horp.errors import CatalogUnavailableError, MalformedCatalogError
from horp.evaluation.report_builder import ReportBuilder
from horp.models.diner_profile import DinerProfile
from horp.tolerance.tolerance_registry import ToleranceRegistry

# Logger
logging.basicConfig(level=get_log_level())
logger = logging.getLogger(__name__)

log_config()

# Initialize App
app = FastAPI(title="HORP Bot Menu Safety API")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Fatal on failure: never serve evaluations against a missing catalog
catalog_store = CatalogStore.open()
tolerance_registry = ToleranceRegistry.load()


# --- Request Models ---
class TableProfile(BaseModel):
    dietaryPreferences: List[str] = []
    avoidAllergens: List[str] = []
    avoidIngredientFlags: List[str] = []
    tolerateFlags: List[str] = []
    crossContactOk: Optional[bool] = False
    tolerances: Optional[Dict[str, Any]] = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# --- Endpoints ---

@app.get("/api/health")
def health_check():
    return {"status": "ok"}


@app.get("/api/menu")
def menu_info():
    catalog = catalog_store.current()
    return {"menu_version": catalog.version, "items": len(catalog)}


@app.post("/api/run")
def run_report(
    table_profile: Optional[TableProfile] = Body(None),
    per_allergen: Optional[bool] = Query(None),
):
    """Combined pass over all avoided allergens, optional per-allergen passes, tolerance refinement."""
    if table_profile is None:
        return _error(400, "Missing tableProfile in request body")
    try:
        profile = DinerProfile.from_dict(table_profile.model_dump())
        include_per_allergen = get_per_allergen_report() if per_allergen is None else per_allergen
        # One snapshot per request; a concurrent reload does not affect this run
        builder = ReportBuilder(catalog_store.current(), tolerance_registry)
        report = builder.build_report(profile, per_allergen=include_per_allergen)
        logger.info(
            "RUN allergens=%s flags=%s dietary=%s safe=%d modifiable=%d filtered=%d",
            list(profile.avoid_allergens), list(profile.avoid_ingredient_flags),
            list(profile.dietary_preferences), len(report.safe_for_all),
            len(report.can_be_modified_for_all), len(report.filtered_for_all),
        )
        return report.to_dict()
    except Exception as e:
        logger.error("Run failed: %s", e, exc_info=True)
        return _error(500, "Internal server error")


@app.post("/api/menu/reload")
def reload_menu():
    try:
        catalog = catalog_store.reload()
    except (CatalogUnavailableError, MalformedCatalogError) as e:
        logger.error("Catalog reload failed, keeping previous snapshot: %s", e)
        return _error(500, "Catalog reload failed")
    return {"status": "ok", "menu_version": catalog.version, "items": len(catalog)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="0.0.0.0", port=3000, reload=True)
