"""
Tests for result aggregation.

Run with: pytest tests/test_aggregator.py -v
"""

import pytest

from core.aggregator import ResultAggregator, merge_hit
from core.context import RawEngineResponse, SearchResult


@pytest.fixture
def aggregator():
    return ResultAggregator()


class TestMergeHit:
    """Test merging a hit into a result record."""

    def test_score_from_text_match(self):
        merged = merge_hit({"document": {"id": "1", "name": "Tent"}, "text_match": 578730123365187705})
        assert merged == {"id": "1", "name": "Tent", "score": 578730123365187705}

    def test_score_defaults_to_zero(self):
        assert merge_hit({"document": {"id": "1"}})["score"] == 0

    def test_document_not_mutated(self):
        document = {"id": "1"}
        merge_hit({"document": document, "text_match": 5})
        assert "score" not in document


class TestAggregate:
    """Test shaping raw responses into SearchResult."""

    def test_results_and_pagination(self, aggregator):
        raw = RawEngineResponse(
            found=25,
            hits=[{"document": {"id": str(i)}, "text_match": i} for i in range(10)],
            page=2,
            facet_counts=[{"field_name": "category", "counts": [{"value": "Books", "count": 25}]}],
        )

        result = aggregator.aggregate(raw, limit=10, offset=10)

        assert result.count == 25
        assert [r["id"] for r in result.results] == [str(i) for i in range(10)]
        assert result.facets[0]["field_name"] == "category"
        assert result.pagination.limit == 10
        assert result.pagination.offset == 10
        assert result.pagination.total == 25
        assert result.pagination.current_page == 2
        assert result.pagination.total_pages == 3

    def test_zero_found(self, aggregator):
        result = aggregator.aggregate(RawEngineResponse(found=0, hits=[]), limit=10, offset=0)
        assert result.count == 0
        assert result.pagination.total_pages == 0
        assert result.error is None

    def test_uses_caller_limit(self, aggregator):
        result = aggregator.aggregate(RawEngineResponse(found=12, hits=[]), limit=5, offset=0)
        assert result.pagination.limit == 5
        assert result.pagination.total_pages == 3

    def test_missing_facets_become_empty_list(self, aggregator):
        result = aggregator.aggregate(RawEngineResponse(found=1, hits=[{"document": {"id": "1"}}]))
        assert result.facets == []

    def test_degraded_response(self, aggregator):
        raw = RawEngineResponse.degraded("Connection refused")

        result = aggregator.aggregate(raw, limit=5, offset=40)

        assert result.count == 0
        assert result.results == []
        assert result.error == "Connection refused"
        assert result.pagination.limit == 10
        assert result.pagination.offset == 0
        assert result.pagination.current_page == 1
        assert result.pagination.total_pages == 0

    def test_missing_hits(self, aggregator):
        raw = RawEngineResponse(found=3, hits=None)
        result = aggregator.aggregate(raw)
        assert result.count == 0
        assert result.is_empty


class TestSearchResult:
    """Test SearchResult serialization."""

    def test_to_dict_drops_absent_error(self):
        data = SearchResult.empty().to_dict()
        assert "error" not in data
        assert data["pagination"] == {
            "limit": 10, "offset": 0, "total": 0, "current_page": 1, "total_pages": 0,
        }

    def test_to_dict_keeps_error(self):
        assert SearchResult.empty(error="down").to_dict()["error"] == "down"
