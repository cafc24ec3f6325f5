"""Core search logic for the product search assistant."""

from core.context import (
    IntentType,
    Intent,
    SearchOptions,
    CompiledQuery,
    RawEngineResponse,
    Pagination,
    SearchResult,
    AssistantResponse,
)
from core.query_parser import QueryParser
from core.filters import FilterCompiler
from core.search import SearchExecutor, SearchConfig, ProductSearch
from core.aggregator import ResultAggregator
from core.suggestions import SuggestionExtractor
from core.history import SearchHistoryLogger, CSVHistoryStore
from core.intent import IntentClassifier

__all__ = [
    "IntentType",
    "Intent",
    "SearchOptions",
    "CompiledQuery",
    "RawEngineResponse",
    "Pagination",
    "SearchResult",
    "AssistantResponse",
    "QueryParser",
    "FilterCompiler",
    "SearchExecutor",
    "SearchConfig",
    "ProductSearch",
    "ResultAggregator",
    "SuggestionExtractor",
    "SearchHistoryLogger",
    "CSVHistoryStore",
    "IntentClassifier",
]
