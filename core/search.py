"""
Search execution for the product search assistant.

SearchExecutor runs a CompiledQuery against the engine and turns every
failure (connectivity, timeout, malformed filter, schema drift, malformed
response) into a degraded RawEngineResponse. ProductSearch chains
parse -> compile -> execute -> aggregate for callers.

Nothing in this module raises past its public methods: search failure
is returned as data.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from core.aggregator import ResultAggregator
from core.api_retry import RetryConfig, RetryHandler, DEFAULT_ENGINE_RETRY, classify_error
from core.context import CompiledQuery, RawEngineResponse, SearchOptions, SearchResult
from core.filters import FilterCompiler, resolve_limit, resolve_offset
from core.query_parser import QueryParser
from core.structured_logging import get_logger, log_search, Timer

# Module-level logger
_logger = get_logger("core.search")

SCHEMA_DRIFT_MARKER = "Could not find a field named"


@dataclass
class SearchConfig:
    """
    Configuration for search execution.

    Attributes:
        retry: Retry profile for transient engine failures
        log_searches: Emit a search_complete record per engine call
    """
    retry: RetryConfig = field(default_factory=lambda: DEFAULT_ENGINE_RETRY)
    log_searches: bool = True


class SearchError(Exception):
    """Base class for search failures (never raised past SearchExecutor)."""
    pass


class EngineUnavailable(SearchError):
    """Engine could not be reached or rejected the request."""
    pass


class SchemaDrift(EngineUnavailable):
    """A filter/sort field is missing from the engine's document schema."""
    pass


class MalformedResponse(EngineUnavailable):
    """Engine answered with something that is not a search response."""
    pass


def classify_engine_failure(error: Exception) -> EngineUnavailable:
    """Wrap a client exception in the search error taxonomy."""
    if isinstance(error, EngineUnavailable):
        return error
    message = str(error) or type(error).__name__
    if SCHEMA_DRIFT_MARKER in message:
        return SchemaDrift(message)
    return EngineUnavailable(message)


def normalize_response(response: Any) -> RawEngineResponse:
    """
    Validate an engine response and convert it to RawEngineResponse.

    Raises:
        MalformedResponse: If found/hits are missing or of the wrong type
    """
    if not isinstance(response, dict):
        raise MalformedResponse(f"Malformed engine response: {type(response).__name__}")

    hits = response.get("hits")
    if not isinstance(hits, list):
        raise MalformedResponse("Malformed engine response: hits missing")

    found = response.get("found") or 0
    if not isinstance(found, int) or isinstance(found, bool):
        raise MalformedResponse("Malformed engine response: found is not an integer")

    return RawEngineResponse(
        found=found,
        hits=hits,
        page=response.get("page") or 1,
        facet_counts=response.get("facet_counts"),
        search_time_ms=response.get("search_time_ms") or 0,
    )


class SearchExecutor:
    """
    Executes compiled queries against the engine.

    Example:
        executor = SearchExecutor(TypesenseEngine(client))
        raw = executor.execute(FilterCompiler().compile(options))
        if raw.is_degraded:
            print(raw.error)
    """

    def __init__(self, engine, config: Optional[SearchConfig] = None):
        """
        Initialize the executor.

        Args:
            engine: Object with search(params) -> dict (TypesenseEngine)
            config: Search configuration (uses defaults if None)
        """
        self.engine = engine
        self.config = config or SearchConfig()

    def execute(self, compiled: CompiledQuery) -> RawEngineResponse:
        """
        Run a compiled query.

        Returns:
            RawEngineResponse; degraded (found=0, hits=[], page=1, error=...)
            on any failure
        """
        params = compiled.to_params()
        retry = RetryHandler(config=self.config.retry, operation_name="engine_search")

        with Timer() as timer:
            try:
                response = retry.call(lambda: self.engine.search(params))
                raw = normalize_response(response)
            except Exception as e:
                raw = self._degrade(e, params)

        if self.config.log_searches:
            log_search(
                query=compiled.q,
                params=params,
                products_found=raw.found,
                search_time_ms=timer.elapsed_ms,
                error=raw.error,
            )
        return raw

    def _degrade(self, cause: Exception, params: Dict[str, Any]) -> RawEngineResponse:
        error = classify_engine_failure(cause)
        if isinstance(error, SchemaDrift):
            _logger.error(
                f"Field schema mismatch in search: {error}",
                extra={
                    "event": "search_schema_drift",
                    "error_message": str(error),
                    "filter_by": params.get("filter_by"),
                    "sort_by": params.get("sort_by"),
                },
            )
        else:
            _logger.error(
                f"Error searching products: {error}",
                extra={
                    "event": "search_engine_error",
                    "error_type": type(cause).__name__,
                    "error_message": str(error),
                    "context": classify_error(cause).value,
                },
            )
        return RawEngineResponse.degraded(str(error))


class ProductSearch:
    """
    Product search facade: options (or text) in, SearchResult out.

    Example:
        search = ProductSearch(SearchExecutor(engine))
        result = search.search_text("cheapest wireless headphones in stock")
        print(result.count, result.pagination.total_pages)
    """

    def __init__(
        self,
        executor: SearchExecutor,
        compiler: Optional[FilterCompiler] = None,
        parser: Optional[QueryParser] = None,
        aggregator: Optional[ResultAggregator] = None,
    ):
        self.executor = executor
        self.compiler = compiler or FilterCompiler()
        self.parser = parser or QueryParser()
        self.aggregator = aggregator or ResultAggregator()

    def search_products(self, options: Union[SearchOptions, Dict[str, Any], None] = None) -> SearchResult:
        """
        Search with structured options. Never raises.

        Args:
            options: SearchOptions or a plain dict (snake_case or camelCase keys)

        Returns:
            SearchResult; error is set when the search degraded
        """
        try:
            if options is None:
                options = SearchOptions()
            elif isinstance(options, dict):
                options = SearchOptions.from_dict(options)

            compiled = self.compiler.compile(options)
            raw = self.executor.execute(compiled)
            return self.aggregator.aggregate(
                raw,
                limit=resolve_limit(options.limit),
                offset=resolve_offset(options.offset),
            )
        except Exception as e:
            _logger.error(
                f"Unexpected error in product search: {e}",
                extra={"event": "search_failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return SearchResult.empty(error=str(e))

    def search_text(self, text: str, **overrides) -> SearchResult:
        """
        Parse free text and search.

        Args:
            text: User's query
            **overrides: Option fields that take precedence over parsed ones

        Returns:
            SearchResult
        """
        options = self.parser.parse(text)
        for name, value in overrides.items():
            if value is not None and hasattr(options, name):
                setattr(options, name, value)
        return self.search_products(options)
