"""
Tests for search history logging.

Run with: pytest tests/test_history.py -v
"""

import json
import logging
from unittest.mock import Mock

import pytest

from core.context import Pagination, SearchResult
from core.history import (
    HISTORY_COLUMNS,
    CSVHistoryStore,
    HistoryEntry,
    SearchHistoryLogger,
    serialize_results,
)


@pytest.fixture
def csv_store(tmp_path):
    return CSVHistoryStore(log_dir=str(tmp_path))


@pytest.fixture
def history(csv_store):
    return SearchHistoryLogger([csv_store])


@pytest.fixture
def failing_store():
    store = Mock()
    store.name = "broken"
    store.write.side_effect = IOError("disk full")
    return store


class TestSerializeResults:
    """Test results encoding and the summary fallback."""

    def test_none(self):
        assert serialize_results("q", None, "2026-10-18T00:00:00+00:00") is None

    def test_search_result(self):
        result = SearchResult(count=1, results=[{"id": "1", "score": 5}], pagination=Pagination(total=1, total_pages=1))
        data = json.loads(serialize_results("q", result, "ts"))
        assert data["count"] == 1
        assert data["results"][0]["id"] == "1"
        assert "error" not in data

    def test_plain_dict(self):
        assert json.loads(serialize_results("q", {"count": 0}, "ts")) == {"count": 0}

    def test_unserializable_stores_summary(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="shopbot"):
            encoded = serialize_results("tents", {"count": 2, "raw": object()}, "2026-10-18T10:00:00+00:00")

        assert json.loads(encoded) == {
            "count": 2,
            "query": "tents",
            "timestamp": "2026-10-18T10:00:00+00:00",
        }
        assert any(getattr(r, "event", None) == "history_serialization_failed" for r in caplog.records)

    def test_circular_search_result_stores_summary(self):
        doc = {"id": "1", "name": "Tent"}
        doc["self"] = doc
        result = SearchResult(count=1, results=[doc])

        encoded = serialize_results("tents", result, "2026-10-18T10:00:00+00:00")

        assert json.loads(encoded) == {
            "count": 1,
            "query": "tents",
            "timestamp": "2026-10-18T10:00:00+00:00",
        }


class TestCSVHistoryStore:
    """Test the CSV store."""

    def test_headers_written(self, csv_store):
        with open(csv_store.csv_path, encoding="utf-8") as f:
            assert f.readline().strip() == ",".join(HISTORY_COLUMNS)

    def test_write_and_read(self, csv_store):
        csv_store.write(HistoryEntry(query="tents, cheap", user_id="u1", results='{"count": 0}', timestamp="ts"))

        rows = csv_store.read_all()
        assert rows == [{"timestamp": "ts", "user_id": "u1", "query": "tents, cheap", "results": '{"count": 0}'}]

    def test_existing_file_not_reset(self, tmp_path):
        CSVHistoryStore(log_dir=str(tmp_path)).write(HistoryEntry(query="a", timestamp="ts"))
        assert len(CSVHistoryStore(log_dir=str(tmp_path)).read_all()) == 1


class TestSearchHistoryLogger:
    """Test fan-out to stores."""

    def test_log_search(self, history, csv_store):
        result = SearchResult(count=3)

        assert history.log_search("cheap tents", user_id="u1", results=result) is True

        row = csv_store.read_all()[0]
        assert row["query"] == "cheap tents"
        assert row["user_id"] == "u1"
        assert json.loads(row["results"])["count"] == 3
        assert row["timestamp"]

    def test_without_user_or_results(self, history, csv_store):
        assert history.log_search("tents") is True
        row = csv_store.read_all()[0]
        assert row["user_id"] == ""
        assert row["results"] == ""

    def test_failing_store_does_not_raise(self, failing_store, caplog):
        history = SearchHistoryLogger([failing_store])

        with caplog.at_level(logging.DEBUG, logger="shopbot"):
            assert history.log_search("tents", user_id="u1") is False

        errors = [r for r in caplog.records if getattr(r, "event", None) == "error"]
        assert errors[0].store == "broken"
        assert errors[0].error_type == "OSError"

    def test_circular_results_do_not_raise(self, history, csv_store):
        doc = {"id": "1", "name": "Tent"}
        doc["self"] = doc

        assert history.log_search("tents", results=SearchResult(count=1, results=[doc])) is True

        assert json.loads(csv_store.read_all()[0]["results"])["count"] == 1

    def test_other_stores_still_written(self, csv_store, failing_store):
        history = SearchHistoryLogger([failing_store, csv_store])

        assert history.log_search("tents") is True
        assert len(csv_store.read_all()) == 1

    def test_same_entry_to_every_store(self):
        first, second = Mock(), Mock()
        SearchHistoryLogger([first, second]).log_search("tents", results={"count": 1})

        entry = first.write.call_args[0][0]
        assert entry is second.write.call_args[0][0]
        assert entry.results == '{"count": 1}'

    def test_no_stores(self):
        assert SearchHistoryLogger().log_search("tents") is False
