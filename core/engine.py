"""
Typesense adapter for the product collection.

Wraps an injected typesense.Client: collection schema and bootstrap,
document indexing, and the raw search call used by the SearchExecutor.
search() raises the client's errors; the executor decides what to do
with them.
"""

import copy
from typing import Any, Dict, List, Optional

import typesense
from typesense.exceptions import ObjectNotFound, TypesenseClientError

from core.structured_logging import get_logger

# Module-level logger
_logger = get_logger("core.engine")


PRODUCTS_COLLECTION = "products"

# Document ids are strings at the engine; "id" is implicit in the schema
PRODUCT_COLLECTION_SCHEMA: Dict[str, Any] = {
    "name": PRODUCTS_COLLECTION,
    "fields": [
        {"name": "name", "type": "string"},
        {"name": "description", "type": "string"},
        {"name": "price", "type": "float"},
        {"name": "category", "type": "string", "facet": True},
        {"name": "sku", "type": "string"},
        {"name": "inStock", "type": "float", "facet": True},
        {"name": "attributes", "type": "string"},
        {"name": "createdAt", "type": "string"},
        {"name": "updatedAt", "type": "string"},
        {"name": "sort_index", "type": "int32"},
    ],
    "default_sorting_field": "sort_index",
    "enable_nested_fields": True,
}


def collection_schema(collection: str = PRODUCTS_COLLECTION) -> Dict[str, Any]:
    """Product schema under the given collection name."""
    schema = copy.deepcopy(PRODUCT_COLLECTION_SCHEMA)
    schema["name"] = collection
    return schema


def create_typesense_client(settings) -> typesense.Client:
    """
    Build a Typesense client from Settings.

    Args:
        settings: config.settings.Settings

    Returns:
        Configured typesense.Client
    """
    return typesense.Client({
        "nodes": [{
            "host": settings.typesense_host,
            "port": settings.typesense_port,
            "protocol": settings.typesense_protocol,
        }],
        "api_key": settings.typesense_api_key,
        "connection_timeout_seconds": settings.typesense_timeout_seconds,
    })


class TypesenseEngine:
    """
    Product collection operations over a Typesense client.

    Example:
        engine = TypesenseEngine(create_typesense_client(settings))
        engine.ensure_collection()
        raw = engine.search({"q": "headphones", "query_by": "name,description,sku"})
    """

    def __init__(self, client, collection: str = PRODUCTS_COLLECTION):
        self.client = client
        self.collection = collection

    @property
    def documents(self):
        return self.client.collections[self.collection].documents

    def search(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a search against the product collection.

        Fills q="*", page=1 and per_page=10 when missing. Client errors
        propagate to the caller.
        """
        params = dict(params or {})
        if params.get("q") is None:
            params["q"] = "*"
        if not params.get("page"):
            params["page"] = 1
        if params.get("per_page") is None:
            params["per_page"] = 10

        return self.documents.search(params)

    def health(self) -> bool:
        """Check that the engine answers. Never raises."""
        try:
            self.client.collections.retrieve()
            return True
        except Exception as e:
            _logger.error(
                f"Typesense health check failed: {e}",
                extra={"event": "engine_health_failed", "error_message": str(e)},
            )
            return False

    def ensure_collection(self) -> bool:
        """
        Create the product collection if it is missing.

        Returns:
            True when the collection exists (or was created), False otherwise
        """
        try:
            self.client.collections[self.collection].retrieve()
            _logger.info(
                f"Collection {self.collection} already exists",
                extra={"event": "collection_exists"},
            )
            return True
        except ObjectNotFound:
            pass
        except Exception as e:
            _logger.error(
                f"Could not reach Typesense: {e}",
                extra={"event": "collection_check_failed", "error_message": str(e)},
            )
            return False

        try:
            self.client.collections.create(collection_schema(self.collection))
            _logger.info(
                f"Collection {self.collection} created",
                extra={"event": "collection_created"},
            )
            return True
        except TypesenseClientError as e:
            _logger.error(
                f"Could not create collection {self.collection}: {e}",
                extra={"event": "collection_create_failed", "error_message": str(e)},
            )
            return False

    def index_product(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Upsert one document. Raises on failure."""
        try:
            return self.documents.upsert(document)
        except Exception as e:
            _logger.error(
                f"Error indexing product {document.get('id')}: {e}",
                extra={"event": "index_failed", "error_message": str(e)},
            )
            raise

    def index_products(self, documents: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Bulk upsert documents.

        Returns:
            {"successful_items": int, "failed_items": int} plus
            "details" (per-document results) or "error" on a failed import
        """
        if not documents:
            _logger.info("No products to index", extra={"event": "index_skipped"})
            return {"successful_items": 0, "failed_items": 0}

        try:
            results = self.documents.import_(documents, {"action": "upsert"})
        except Exception as e:
            _logger.error(
                f"Error bulk indexing products: {e}",
                extra={"event": "bulk_index_failed", "error_message": str(e)},
            )
            return {
                "successful_items": 0,
                "failed_items": len(documents),
                "error": str(e),
            }

        failed = sum(1 for item in results if not item.get("success"))
        if failed:
            _logger.warning(
                f"{failed} of {len(documents)} products failed to index",
                extra={"event": "bulk_index_partial"},
            )
        else:
            _logger.info(
                f"Indexed {len(documents)} products",
                extra={"event": "bulk_index_complete", "products_found": len(documents)},
            )

        return {
            "successful_items": len(documents) - failed,
            "failed_items": failed,
            "details": results,
        }

    def delete_product(self, product_id) -> Dict[str, Any]:
        """Delete one document by id. Raises on failure."""
        try:
            return self.documents[str(product_id)].delete()
        except Exception as e:
            _logger.error(
                f"Error deleting product {product_id}: {e}",
                extra={"event": "delete_failed", "error_message": str(e)},
            )
            raise

    def clear_collection(self) -> bool:
        """Drop the collection (if present) and recreate it empty."""
        try:
            self.client.collections[self.collection].delete()
            _logger.info(
                f"Collection {self.collection} deleted",
                extra={"event": "collection_deleted"},
            )
        except ObjectNotFound:
            pass
        except Exception as e:
            _logger.error(
                f"Error clearing collection {self.collection}: {e}",
                extra={"event": "collection_clear_failed", "error_message": str(e)},
            )
            return False

        return self.ensure_collection()
