"""
Result aggregation: raw engine response -> SearchResult.
"""

from typing import Any, Dict

from core.context import (
    RawEngineResponse,
    SearchResult,
    Pagination,
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
)
from core.structured_logging import get_logger

# Module-level logger
_logger = get_logger("core.aggregator")


def merge_hit(hit: Dict[str, Any]) -> Dict[str, Any]:
    """Document fields plus the engine relevance score (0 when absent)."""
    document = dict(hit.get("document") or {})
    document["score"] = hit.get("text_match") or 0
    return document


class ResultAggregator:
    """
    Shapes engine hits into the SearchResult callers consume.

    A degraded response (or one without hits) maps to the canonical empty
    result, whose pagination resets to defaults instead of echoing the
    requested limit/offset.
    """

    def aggregate(
        self,
        raw: RawEngineResponse,
        limit: int = DEFAULT_LIMIT,
        offset: int = DEFAULT_OFFSET,
    ) -> SearchResult:
        if raw is None or raw.error or raw.hits is None:
            return SearchResult.empty(error=raw.error if raw is not None else None)

        total = raw.found or 0
        results = [merge_hit(hit) for hit in raw.hits if isinstance(hit, dict)]

        _logger.debug(
            f"Aggregated {len(results)} of {total} results",
            extra={
                "event": "results_aggregated",
                "products_found": total,
                "results_returned": len(results),
            },
        )

        return SearchResult(
            count=total,
            results=results,
            facets=raw.facet_counts if raw.facet_counts else [],
            pagination=Pagination.for_total(
                limit=limit,
                offset=offset,
                total=total,
                current_page=raw.page or 1,
            ),
        )
