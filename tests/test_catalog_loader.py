"""
Tests for the catalog loader.

Run with: pytest tests/test_catalog_loader.py -v
"""

import json
import logging
from pathlib import Path
from unittest.mock import Mock

import pandas as pd
import pytest

from catalog_loader import build_document, load_catalog, read_catalog_frame, seed_catalog


SAMPLE_CATALOG = Path(__file__).resolve().parent.parent / "data" / "sample_catalog.csv"

NOW = "2026-10-18T00:00:00+00:00"


@pytest.fixture
def catalog_csv(tmp_path):
    path = tmp_path / "catalog.csv"
    path.write_text(
        "id,name,description,price,category,sku,inStock,sort_index\n"
        "p1,Camping Tent,4-person tent,119.99,Sports & Outdoors,CT-1,0,5\n"
        ",Headlamp,,24.5,Sports & Outdoors,HL-2,12,\n"
        "p3,No Price,,,Books,BK-3,1,\n",
        encoding="utf-8",
    )
    return str(path)


@pytest.fixture
def engine():
    engine = Mock()
    engine.index_products.return_value = {"successful_items": 2, "failed_items": 0}
    return engine


class TestBuildDocument:
    """Test row normalization."""

    def test_full_row(self):
        row = pd.Series({
            "id": "p1", "name": " Camping Tent ", "description": "tent", "price": 119.99,
            "category": "Sports & Outdoors", "sku": "CT-1", "inStock": 3,
            "attributes": {"color": "green"}, "sort_index": 7,
        })

        document = build_document(row, 1, NOW)

        assert document["id"] == "p1"
        assert document["name"] == "Camping Tent"
        assert document["price"] == 119.99
        assert document["inStock"] == 3.0
        assert json.loads(document["attributes"]) == {"color": "green"}
        assert document["sort_index"] == 7
        assert document["createdAt"] == NOW
        assert document["updatedAt"] == NOW

    def test_defaults(self):
        row = pd.Series({"name": "Headlamp", "price": 24.5, "category": "Outdoors", "sku": "HL-2"})

        document = build_document(row, 4, NOW)

        assert document["id"] == "4"
        assert document["sort_index"] == 4
        assert document["inStock"] == 0.0
        assert document["description"] == ""
        assert document["attributes"] == "{}"

    @pytest.mark.parametrize("missing", ["name", "price", "category", "sku"])
    def test_required_columns(self, missing):
        data = {"name": "Headlamp", "price": 24.5, "category": "Outdoors", "sku": "HL-2"}
        data[missing] = None
        with pytest.raises(ValueError):
            build_document(pd.Series(data), 1, NOW)

    def test_bad_price(self):
        row = pd.Series({"name": "Headlamp", "price": "cheap", "category": "Outdoors", "sku": "HL-2"})
        with pytest.raises(ValueError):
            build_document(row, 1, NOW)


class TestLoadCatalog:
    """Test reading catalog files."""

    def test_rows_loaded_and_skipped(self, catalog_csv, caplog):
        with caplog.at_level(logging.DEBUG, logger="shopbot"):
            documents = load_catalog(catalog_csv)

        assert [d["name"] for d in documents] == ["Camping Tent", "Headlamp"]
        assert documents[0]["id"] == "p1"
        assert documents[0]["sort_index"] == 5
        assert documents[0]["inStock"] == 0.0
        assert documents[1]["id"] == "2"
        assert documents[1]["sort_index"] == 2
        assert any(getattr(r, "event", None) == "catalog_rows_skipped" for r in caplog.records)

    def test_sample_catalog(self):
        documents = load_catalog(str(SAMPLE_CATALOG))

        assert len(documents) == 10
        assert [d["sort_index"] for d in documents] == list(range(1, 11))
        assert any(d["inStock"] == 0.0 for d in documents)
        assert all(json.loads(d["attributes"]) is not None for d in documents)

    def test_unsupported_format(self, tmp_path):
        with pytest.raises(ValueError):
            read_catalog_frame(str(tmp_path / "catalog.json"))


class TestSeedCatalog:
    """Test indexing a catalog."""

    def test_seed(self, catalog_csv, engine):
        summary = seed_catalog(catalog_csv, engine)

        engine.ensure_collection.assert_called_once()
        engine.clear_collection.assert_not_called()
        assert len(engine.index_products.call_args[0][0]) == 2
        assert summary["successful_items"] == 2

    def test_seed_with_clear(self, catalog_csv, engine):
        seed_catalog(catalog_csv, engine, clear=True)

        engine.clear_collection.assert_called_once()
        engine.ensure_collection.assert_not_called()
