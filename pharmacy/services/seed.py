"""Starter catalog seeding."""

from pathlib import Path

import structlog
import yaml

from pharmacy.models.catalog import CategoryCreate, MedicationCreate
from pharmacy.services.catalog import CatalogService

logger = structlog.get_logger(__name__)

SEED_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "seed_catalog.yaml"


def load_seed_catalog(path: str | Path | None = None) -> tuple[list[CategoryCreate], list[MedicationCreate]]:
    """Read categories and medications from a YAML catalog file."""
    with open(path or SEED_CATALOG_PATH, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    categories = [CategoryCreate(**entry) for entry in data.get("categories", [])]
    medications = [MedicationCreate(**entry) for entry in data.get("medications", [])]
    return categories, medications


async def seed_catalog(db_session, path: str | Path | None = None) -> tuple[int, int]:
    """Load the starter catalog unless categories already exist.

    Returns:
        Tuple of (categories created, medications created)
    """
    catalog = CatalogService(db_session)
    if await catalog.count_categories() > 0:
        logger.info("seed_skipped", reason="catalog already populated")
        return 0, 0

    categories, medications = load_seed_catalog(path)
    for category in categories:
        await catalog.create_category(category)
    for medication in medications:
        await catalog.create_medication(medication)

    logger.info("catalog_seeded", categories=len(categories), medications=len(medications))
    return len(categories), len(medications)
