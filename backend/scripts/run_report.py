#!/usr/bin/env python3
"""
Offline report: validate the menu catalog and run a table profile against it without the API.
Usage: python backend/scripts/run_report.py profile.json [--menu data/menu.json] [--no-per-allergen]
       python backend/scripts/run_report.py --validate-only
"""
import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure backend is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the menu safety report for a table profile")
    parser.add_argument("profile", nargs="?", help="Path to a table profile JSON file")
    parser.add_argument("--menu", type=Path, default=None, help="Menu catalog JSON (default: data/menu.json)")
    parser.add_argument("--tolerances", type=Path, default=None, help="Tolerance relations JSON")
    parser.add_argument("--no-per-allergen", action="store_true", help="Skip per-allergen isolation passes")
    parser.add_argument("--validate-only", action="store_true", help="Only load and validate the catalog")
    args = parser.parse_args(argv)

    from horp.catalog.menu_catalog import MenuCatalog
    from horp.errors import CatalogUnavailableError, MalformedCatalogError
    from horp.evaluation.report_builder import ReportBuilder
    from horp.models.diner_profile import DinerProfile
    from horp.tolerance.tolerance_registry import ToleranceRegistry

    try:
        catalog = MenuCatalog.load(args.menu)
    except (CatalogUnavailableError, MalformedCatalogError) as e:
        logger.error("Catalog invalid: %s", e)
        return 1

    if args.validate_only:
        logger.info("Catalog OK: %d items version=%s", len(catalog), catalog.version)
        return 0
    if not args.profile:
        parser.error("profile is required unless --validate-only is given")

    with open(args.profile, encoding="utf-8") as f:
        profile = DinerProfile.from_dict(json.load(f))

    builder = ReportBuilder(catalog, ToleranceRegistry.load(args.tolerances))
    report = builder.build_report(profile, per_allergen=not args.no_per_allergen)
    print(json.dumps(report.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
