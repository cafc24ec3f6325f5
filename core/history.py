"""
Search history logging.

Records (query, user_id, results) for analytics. Best effort: a result
that cannot be serialized is replaced with a summary, and a store that
rejects the write is logged and skipped. Nothing here raises to the
search caller.

Output file (CSV store): logs/search_history.csv
"""

import csv
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

from core.structured_logging import get_logger, log_error

# Module-level logger
_logger = get_logger("core.history")


HISTORY_COLUMNS = [
    'timestamp',
    'user_id',
    'query',
    'results',
]


@dataclass
class HistoryEntry:
    """
    One search-history record.

    Attributes:
        query: Text the user searched for
        user_id: Caller-supplied user identifier
        results: JSON-encoded results (or summary), None when no results given
        timestamp: ISO-8601 UTC timestamp
    """
    query: str
    user_id: Optional[str] = None
    results: Optional[str] = None
    timestamp: str = ""

    def to_row(self) -> List[str]:
        return [
            self.timestamp,
            self.user_id or '',
            self.query or '',
            self.results or '',
        ]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _result_count(results: Any) -> Optional[int]:
    if isinstance(results, dict):
        return results.get("count")
    return getattr(results, "count", None)


def serialize_results(query: str, results: Any, timestamp: str) -> Optional[str]:
    """
    JSON-encode search results for storage.

    Objects with to_dict() (SearchResult) are converted first. If conversion
    or encoding fails (circular references included), a summary
    {count, query, timestamp} is stored instead.
    """
    if results is None:
        return None

    try:
        payload = results.to_dict() if hasattr(results, "to_dict") else results
        return json.dumps(payload)
    except (TypeError, ValueError, RecursionError) as e:
        _logger.warning(
            f"Could not serialize search results for logging: {e}",
            extra={"event": "history_serialization_failed", "query": query},
        )
        return json.dumps({
            "count": _result_count(results),
            "query": query,
            "timestamp": timestamp,
        }, default=str)


class CSVHistoryStore:
    """
    Appends history entries to a CSV file.

    Usage:
        store = CSVHistoryStore(log_dir="logs")
        store.write(HistoryEntry(query="cheap headphones", timestamp=utc_now_iso()))
    """

    name = "csv"

    def __init__(self, log_dir: str = "logs", filename: str = "search_history.csv"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.csv_path = self.log_dir / filename
        self._ensure_headers()

    def _ensure_headers(self):
        """Create CSV with headers if it doesn't exist."""
        if not self.csv_path.exists():
            with open(self.csv_path, 'w', newline='', encoding='utf-8') as f:
                writer = csv.writer(f)
                writer.writerow(HISTORY_COLUMNS)

    def write(self, entry: HistoryEntry) -> None:
        with open(self.csv_path, 'a', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(entry.to_row())

    def read_all(self) -> List[dict]:
        """Read back all entries (for analysis and tests)."""
        if not self.csv_path.exists():
            return []
        with open(self.csv_path, 'r', newline='', encoding='utf-8') as f:
            return list(csv.DictReader(f))


class SearchHistoryLogger:
    """
    Fans a search-history entry out to one or more stores.

    Example:
        history = SearchHistoryLogger([CSVHistoryStore()])
        history.log_search("headphones under $100", user_id="u1", results=result)
    """

    def __init__(self, stores: Optional[List[Any]] = None):
        self.stores = list(stores or [])

    def log_search(
        self,
        query: str,
        user_id: Optional[str] = None,
        results: Any = None,
    ) -> bool:
        """
        Record a search.

        Args:
            query: Search text
            user_id: Optional user identifier
            results: SearchResult, dict or any JSON-serializable value

        Returns:
            True if at least one store accepted the entry
        """
        timestamp = utc_now_iso()
        entry = HistoryEntry(
            query=query,
            user_id=user_id,
            results=serialize_results(query, results, timestamp),
            timestamp=timestamp,
        )

        written = False
        for store in self.stores:
            store_name = getattr(store, "name", type(store).__name__)
            try:
                store.write(entry)
                written = True
            except Exception as e:
                log_error(
                    e,
                    context=f"Error logging search query to {store_name}",
                    user_id=user_id,
                    store=store_name,
                )

        if written:
            _logger.debug(
                "Search history recorded",
                extra={"event": "history_logged", "query": query, "user_id": user_id},
            )
        return written
