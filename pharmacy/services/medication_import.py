"""Batch import of medications from a JSON file."""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from pharmacy.models.catalog import MedicationCreate
from pharmacy.services.catalog import CatalogService

logger = structlog.get_logger(__name__)

CATEGORIES = [
    "Heart Health",
    "Diabetes",
    "Mental Health",
    "Pain Relief",
    "Allergies",
    "Antibiotics",
    "Blood Pressure",
    "Cholesterol",
    "Gastrointestinal",
    "Skin Conditions",
    "Thyroid",
    "Respiratory",
    "Hormone Therapy",
    "Neurological",
    "Ophthalmology",
    "Urology",
    "Other",
]
FALLBACK_CATEGORY = "Other"
DISCOUNT_RATE = 0.8
DEFAULT_IMAGE_URL = "/images/medications/default.jpg"

# camelCase keys accepted from exported spreadsheets
FIELD_ALIASES = {
    "genericName": "generic_name",
    "brandName": "brand_name",
    "sideEffects": "side_effects",
    "requiresPrescription": "requires_prescription",
    "inStock": "in_stock",
    "imageUrl": "image_url",
    "discountPrice": "discount_price",
    "retailPrice": "retail_price",
}


def format_price(value: Any) -> float:
    """Parse a price such as ``"$12.99"`` or ``12.99``. Blank values are 0."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)

    cleaned = re.sub(r"[^0-9.]", "", str(value))
    if not cleaned:
        return 0.0
    return float(cleaned)


def calculate_discount_price(price: float) -> float:
    """Default selling price: 80% of the listed price, rounded to cents."""
    return round(price * DISCOUNT_RATE, 2)


def normalize_category(category: str | None) -> str:
    """Map a category to a known one (case-insensitive), else ``Other``."""
    if category:
        for known in CATEGORIES:
            if known.lower() == category.strip().lower():
                return known
    return FALLBACK_CATEGORY


def normalize_entry(raw: dict[str, Any]) -> MedicationCreate:
    """Turn one import record into a medication payload.

    The discounted price becomes the selling ``price`` and the listed price
    is kept as ``retail_price``.

    Raises:
        ValueError: If the record has no name
    """
    entry = {FIELD_ALIASES.get(key, key): value for key, value in raw.items()}

    name = str(entry.get("name") or "").strip()
    if not name:
        raise ValueError("Medication entry is missing a name")

    listed = format_price(entry.get("price"))
    if entry.get("discount_price") in (None, ""):
        discounted = calculate_discount_price(listed)
    else:
        discounted = format_price(entry["discount_price"])

    return MedicationCreate(
        name=name,
        generic_name=entry.get("generic_name") or None,
        brand_name=entry.get("brand_name") or None,
        description=entry.get("description") or None,
        uses=entry.get("uses") or None,
        side_effects=entry.get("side_effects") or None,
        dosage=entry.get("dosage") or None,
        price=discounted,
        retail_price=listed or None,
        requires_prescription=entry.get("requires_prescription", True),
        in_stock=entry.get("in_stock", True),
        category=normalize_category(entry.get("category")),
        image_url=entry.get("image_url") or DEFAULT_IMAGE_URL,
    )


def load_entries(path: str | Path) -> list[dict[str, Any]]:
    """Read a JSON array of medication records.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a JSON array
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("Import file must contain a JSON array of medications")
    return data


@dataclass
class ImportResult:
    """Outcome of an import run."""

    imported: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


class MedicationImporter:
    """Imports medication records, skipping names already in the catalog."""

    def __init__(self, db_session, dry_run: bool = False):
        """Initialize importer.

        Args:
            db_session: Database session for persistence
            dry_run: Validate and report without writing
        """
        self.catalog = CatalogService(db_session)
        self.dry_run = dry_run

    async def run(self, records: list[dict[str, Any]]) -> ImportResult:
        result = ImportResult()
        seen: set[str] = set()

        for raw in records:
            if not isinstance(raw, dict):
                result.failed.append((repr(raw)[:40], "Medication entry must be a JSON object"))
                logger.warning("medication_import_failed", entry=repr(raw)[:40])
                continue

            label = str(raw.get("name") or "<unnamed>")
            try:
                payload = normalize_entry(raw)
            except ValueError as e:
                result.failed.append((label, str(e)))
                logger.warning("medication_import_failed", name=label, error=str(e))
                continue

            key = payload.name.lower()
            if key in seen or await self.catalog.get_medication_by_name(payload.name):
                result.skipped.append(payload.name)
                continue
            seen.add(key)

            if not self.dry_run:
                await self.catalog.create_medication(payload)
            result.imported.append(payload.name)

        logger.info(
            "medication_import_finished",
            imported=len(result.imported),
            skipped=len(result.skipped),
            failed=len(result.failed),
            dry_run=self.dry_run,
        )
        return result
