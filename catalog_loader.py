"""
Catalog loader for the product search engine.

Reads a product catalog (CSV or Excel) with pandas, normalizes each row
into an engine document and bulk-indexes the documents into the product
collection.

Expected columns: name, price, category, sku. Optional: id, description,
inStock, attributes, createdAt, updatedAt, sort_index. Unknown columns
are ignored.

Run with: python catalog_loader.py data/sample_catalog.csv --clear
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from config.settings import Settings
from core.engine import TypesenseEngine, create_typesense_client
from core.structured_logging import get_logger, setup_logging

# Module-level logger
_logger = get_logger("catalog_loader")


REQUIRED_COLUMNS = ("name", "price", "category", "sku")
EXCEL_SUFFIXES = (".xlsx", ".xls")


def read_catalog_frame(path: str) -> pd.DataFrame:
    """Read a CSV or Excel catalog into a DataFrame."""
    suffix = Path(path).suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix in EXCEL_SUFFIXES:
        return pd.read_excel(path)
    raise ValueError(f"Unsupported catalog format: {path}")


def _value(row: pd.Series, column: str) -> Any:
    """Cell value with NaN mapped to None and numpy scalars unwrapped."""
    val = row.get(column)
    if val is None:
        return None
    if not isinstance(val, (list, dict)) and pd.isna(val):
        return None
    if hasattr(val, 'item'):
        val = val.item()
    return val


def _encode_attributes(value: Any) -> str:
    if value is None:
        return "{}"
    if isinstance(value, str):
        return value.strip() or "{}"
    return json.dumps(value)


def build_document(row: pd.Series, position: int, now: str) -> Dict[str, Any]:
    """
    Normalize one catalog row into an engine document.

    Args:
        row: Catalog row
        position: 1-based row order, used for id and sort_index when missing
        now: ISO-8601 timestamp for missing createdAt/updatedAt

    Raises:
        ValueError: a required column is empty or price is not a number
    """
    for column in REQUIRED_COLUMNS:
        if _value(row, column) is None:
            raise ValueError(f"Missing {column}")

    raw_id = _value(row, "id")
    raw_sort = _value(row, "sort_index")
    in_stock = _value(row, "inStock")

    return {
        "id": str(raw_id if raw_id is not None else position),
        "name": str(_value(row, "name")).strip(),
        "description": str(_value(row, "description") or "").strip(),
        "price": float(_value(row, "price")),
        "category": str(_value(row, "category")).strip(),
        "sku": str(_value(row, "sku")).strip(),
        "inStock": float(in_stock) if in_stock is not None else 0.0,
        "attributes": _encode_attributes(_value(row, "attributes")),
        "createdAt": str(_value(row, "createdAt") or now),
        "updatedAt": str(_value(row, "updatedAt") or now),
        "sort_index": int(raw_sort) if raw_sort is not None else position,
    }


def load_catalog(path: str) -> List[Dict[str, Any]]:
    """
    Load a catalog file into engine documents.

    Rows with a missing required field are skipped and logged.

    Args:
        path: CSV or Excel file

    Returns:
        List of documents in file order
    """
    df = read_catalog_frame(path)
    _logger.info(
        f"Loading catalog from {path}: {len(df)} rows",
        extra={"event": "catalog_read", "products_found": len(df)},
    )

    now = datetime.now(timezone.utc).isoformat()
    documents = []
    skipped = 0
    errors = []

    for position, (idx, row) in enumerate(df.iterrows(), start=1):
        try:
            documents.append(build_document(row, position, now))
        except (ValueError, TypeError) as e:
            skipped += 1
            if len(errors) < 10:
                errors.append(f"Row {idx}: {type(e).__name__}: {str(e)}")

    if skipped:
        _logger.warning(
            f"Skipped {skipped} catalog rows",
            extra={"event": "catalog_rows_skipped", "context": "; ".join(errors[:5])},
        )

    _logger.info(
        f"Loaded {len(documents)} products",
        extra={"event": "catalog_loaded", "results_returned": len(documents)},
    )
    return documents


def seed_catalog(path: str, engine: TypesenseEngine, clear: bool = False) -> Dict[str, Any]:
    """
    Load a catalog and index it.

    Args:
        path: CSV or Excel file
        engine: Engine adapter
        clear: Drop and recreate the collection first

    Returns:
        Import summary from TypesenseEngine.index_products
    """
    if clear:
        engine.clear_collection()
    else:
        engine.ensure_collection()

    documents = load_catalog(path)
    return engine.index_products(documents)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Index a product catalog into Typesense")
    parser.add_argument("path", help="CSV or Excel catalog file")
    parser.add_argument("--clear", action="store_true", help="Drop and recreate the collection first")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    setup_logging(log_dir=settings.log_dir, enable_file=False, enable_error_log=False)

    engine = TypesenseEngine(create_typesense_client(settings), collection=settings.typesense_collection)
    summary = seed_catalog(args.path, engine, clear=args.clear)

    print(f"Indexed {summary['successful_items']} products, {summary['failed_items']} failed")
    if summary.get("error"):
        print(f"Import error: {summary['error']}")
    return 1 if summary["failed_items"] else 0


if __name__ == "__main__":
    sys.exit(main())
