"""Unit tests for medication import normalization."""

import json
from pathlib import Path

import pytest

from pharmacy.services.medication_import import (
    DEFAULT_IMAGE_URL,
    calculate_discount_price,
    format_price,
    load_entries,
    normalize_category,
    normalize_entry,
)


@pytest.mark.unit
class TestPriceParsing:
    """Unit tests for price helpers."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("$12.99", 12.99),
            ("1,299.50", 1299.50),
            (7, 7.0),
            (3.5, 3.5),
            ("", 0.0),
            (None, 0.0),
            ("free", 0.0),
        ],
    )
    def test_format_price(self, value, expected: float) -> None:
        """Test that prices parse from strings and numbers."""
        assert format_price(value) == expected

    def test_discount_is_eighty_percent(self) -> None:
        """Test that the discounted price is 80% rounded to cents."""
        assert calculate_discount_price(10.0) == 8.0
        assert calculate_discount_price(12.99) == 10.39


@pytest.mark.unit
class TestCategoryNormalization:
    """Unit tests for category mapping."""

    def test_known_category_case_insensitive(self) -> None:
        """Test that known categories match regardless of case."""
        assert normalize_category("heart health") == "Heart Health"
        assert normalize_category("  DIABETES ") == "Diabetes"

    def test_unknown_category_falls_back(self) -> None:
        """Test that unknown or missing categories become Other."""
        assert normalize_category("Vitamins") == "Other"
        assert normalize_category(None) == "Other"
        assert normalize_category("") == "Other"


@pytest.mark.unit
class TestNormalizeEntry:
    """Unit tests for import record normalization."""

    def test_camel_case_fields(self) -> None:
        """Test that spreadsheet-style keys are accepted."""
        payload = normalize_entry(
            {
                "name": "Metformin",
                "genericName": "metformin hydrochloride",
                "requiresPrescription": True,
                "inStock": False,
                "price": "$20.00",
                "category": "diabetes",
            }
        )

        assert payload.name == "Metformin"
        assert payload.generic_name == "metformin hydrochloride"
        assert payload.requires_prescription is True
        assert payload.in_stock is False
        assert payload.category == "Diabetes"

    def test_discounted_price_becomes_selling_price(self) -> None:
        """Test that the listed price is kept as retail and discounted for sale."""
        payload = normalize_entry({"name": "Ibuprofen", "price": "$10.00"})

        assert payload.price == 8.0
        assert payload.retail_price == 10.0

    def test_explicit_discount_price(self) -> None:
        """Test that a supplied discount price overrides the default discount."""
        payload = normalize_entry({"name": "Ibuprofen", "price": "10", "discountPrice": "6.50"})

        assert payload.price == 6.5
        assert payload.retail_price == 10.0

    def test_defaults(self) -> None:
        """Test defaults for image, prescription requirement and stock."""
        payload = normalize_entry({"name": "Cetirizine"})

        assert payload.image_url == DEFAULT_IMAGE_URL
        assert payload.requires_prescription is True
        assert payload.in_stock is True
        assert payload.price == 0.0
        assert payload.retail_price is None
        assert payload.category == "Other"

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_missing_name_rejected(self, name) -> None:
        """Test that records without a name are rejected."""
        with pytest.raises(ValueError, match="missing a name"):
            normalize_entry({"name": name, "price": 5})


@pytest.mark.unit
class TestLoadEntries:
    """Unit tests for reading import files."""

    def test_load_array(self, tmp_path: Path) -> None:
        """Test that a JSON array is returned as-is."""
        path = tmp_path / "meds.json"
        path.write_text(json.dumps([{"name": "A"}, {"name": "B"}]), encoding="utf-8")

        assert load_entries(path) == [{"name": "A"}, {"name": "B"}]

    def test_load_rejects_object(self, tmp_path: Path) -> None:
        """Test that a non-array document is rejected."""
        path = tmp_path / "meds.json"
        path.write_text(json.dumps({"name": "A"}), encoding="utf-8")

        with pytest.raises(ValueError, match="JSON array"):
            load_entries(path)

    def test_load_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_entries(tmp_path / "missing.json")
