"""
Core data models for the product search assistant.

Request side (SearchOptions), the compiled engine request (CompiledQuery),
the engine's raw answer (RawEngineResponse) and the normalized result
returned to callers (SearchResult). Plain dataclasses, no I/O.
"""

import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Union


DEFAULT_LIMIT = 10
DEFAULT_OFFSET = 0
DEFAULT_SORT_BY = "sort_index"
DEFAULT_SORT_ORDER = "asc"

SORT_FIELDS = ("price", "name", "created_at", "sort_index")
SORT_ORDERS = ("asc", "desc")

# Fields the engine schema accepts as explicit sort keys
SORTABLE_FIELDS = frozenset({"price", "sort_index", "inStock"})

SEARCH_QUERY_BY = ["name", "description", "sku"]
SUGGESTION_QUERY_BY = ["name", "category"]
FACET_FIELDS = ["category", "inStock"]

# AI collaborator returns camelCase keys
_OPTION_KEY_ALIASES = {
    "minPrice": "min_price",
    "maxPrice": "max_price",
    "inStock": "in_stock",
    "sortBy": "sort_by",
    "sortOrder": "sort_order",
}


class IntentType(Enum):
    """Classified intent of an incoming chat message."""
    PRODUCT_SEARCH = "product_search"
    GENERAL_QUESTION = "general_question"
    GREETING = "greeting"
    UNKNOWN = "unknown"


@dataclass
class Intent:
    """
    User intent with metadata.

    Attributes:
        type: Intent classification
        confidence: Confidence score (0.0-1.0)
        reasoning: Why this intent was selected
    """
    type: IntentType
    confidence: float
    reasoning: str = ""

    def __str__(self) -> str:
        return f"Intent({self.type.value}, confidence={self.confidence:.2f})"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class SearchOptions:
    """
    Structured product search request.

    Every field is optional; None means "not specified". Defaults for
    limit/offset/sort are applied when the options are compiled, so a
    parsed query only carries what the text actually implied.

    Attributes:
        query: Free text (semantic default "")
        category: Single category or ordered list of categories
        min_price: Inclusive lower price bound
        max_price: Inclusive upper price bound
        in_stock: True = quantity > 0, False = quantity == 0
        limit: Page size (default 10)
        offset: Result offset (default 0)
        sort_by: One of price, name, created_at, sort_index
        sort_order: asc or desc
    """
    query: Optional[str] = None
    category: Optional[Union[str, List[str]]] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    in_stock: Optional[bool] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchOptions":
        """
        Build options from a loosely-typed mapping.

        Accepts snake_case and camelCase keys. Values of the wrong type or
        outside the allowed vocabularies are dropped rather than rejected.
        """
        normalized = {}
        for key, value in (data or {}).items():
            normalized[_OPTION_KEY_ALIASES.get(key, key)] = value

        options = cls()

        query = normalized.get("query")
        if isinstance(query, str):
            options.query = query

        category = normalized.get("category")
        if isinstance(category, str) and category.strip():
            options.category = category.strip()
        elif isinstance(category, (list, tuple)):
            values = [c.strip() for c in category if isinstance(c, str) and c.strip()]
            if values:
                options.category = values

        for name in ("min_price", "max_price"):
            value = normalized.get(name)
            if _is_number(value):
                setattr(options, name, float(value))

        in_stock = normalized.get("in_stock")
        if isinstance(in_stock, bool):
            options.in_stock = in_stock

        for name in ("limit", "offset"):
            value = normalized.get(name)
            if _is_number(value) and float(value).is_integer():
                setattr(options, name, int(value))

        sort_by = normalized.get("sort_by")
        if sort_by in SORT_FIELDS:
            options.sort_by = sort_by

        sort_order = normalized.get("sort_order")
        if isinstance(sort_order, str) and sort_order.lower() in SORT_ORDERS:
            options.sort_order = sort_order.lower()

        return options

    def to_dict(self) -> Dict[str, Any]:
        """Return only the fields that are set."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merged_with(self, fallback: "SearchOptions") -> "SearchOptions":
        """Fill unset fields from another options object."""
        merged = SearchOptions(**asdict(self))
        for name, value in asdict(fallback).items():
            if getattr(merged, name) is None and value is not None:
                setattr(merged, name, value)
        return merged


@dataclass
class CompiledQuery:
    """
    Engine request derived from SearchOptions. Never persisted.

    Attributes:
        q: Free-text term
        query_by: Fields searched by the engine
        filter_by: Ordered clauses, combined with logical AND
        sort_by: "<field>:<asc|desc>" or None for engine default ordering
        page: 1-based page number
        per_page: Page size
        facet_by: Fields to compute facet counts for
        prefix: Prefix matching (suggestions)
    """
    q: str
    query_by: List[str]
    filter_by: List[str] = field(default_factory=list)
    sort_by: Optional[str] = None
    page: int = 1
    per_page: int = DEFAULT_LIMIT
    facet_by: List[str] = field(default_factory=list)
    prefix: Optional[bool] = None

    @property
    def filter_expression(self) -> Optional[str]:
        if not self.filter_by:
            return None
        return " && ".join(self.filter_by)

    def to_params(self) -> Dict[str, Any]:
        """Render the engine search parameters."""
        params: Dict[str, Any] = {
            "q": self.q,
            "query_by": ",".join(self.query_by),
            "page": self.page,
            "per_page": self.per_page,
        }
        if self.filter_by:
            params["filter_by"] = self.filter_expression
        if self.sort_by:
            params["sort_by"] = self.sort_by
        if self.facet_by:
            params["facet_by"] = ",".join(self.facet_by)
        if self.prefix is not None:
            params["prefix"] = self.prefix
        return params


@dataclass
class RawEngineResponse:
    """
    Engine answer as returned by the SearchExecutor.

    found/hits/page are always defined. error is set only on degraded
    responses produced in place of an exception.
    """
    found: int = 0
    hits: List[Dict[str, Any]] = field(default_factory=list)
    page: int = 1
    facet_counts: Optional[Any] = None
    search_time_ms: float = 0.0
    error: Optional[str] = None

    @classmethod
    def degraded(cls, error: str) -> "RawEngineResponse":
        return cls(found=0, hits=[], page=1, error=error)

    @property
    def is_degraded(self) -> bool:
        return self.error is not None


@dataclass
class Pagination:
    """Pagination metadata for a SearchResult."""
    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET
    total: int = 0
    current_page: int = 1
    total_pages: int = 0

    @classmethod
    def for_total(cls, limit: int, offset: int, total: int, current_page: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if total else 0
        return cls(
            limit=limit,
            offset=offset,
            total=total,
            current_page=current_page,
            total_pages=total_pages,
        )


@dataclass
class SearchResult:
    """
    Normalized search result returned to every caller.

    Attributes:
        count: Engine-reported total matches
        results: Documents merged with a relevance "score"
        facets: Facet counts, passed through verbatim
        pagination: Pagination metadata
        error: Diagnostic message when the search degraded
    """
    count: int = 0
    results: List[Dict[str, Any]] = field(default_factory=list)
    facets: Any = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)
    error: Optional[str] = None

    @classmethod
    def empty(cls, error: Optional[str] = None) -> "SearchResult":
        """Canonical empty result; pagination resets to defaults."""
        return cls(error=error)

    @property
    def is_empty(self) -> bool:
        return not self.results

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if data["error"] is None:
            del data["error"]
        return data


@dataclass
class AssistantResponse:
    """
    Reply produced for one chat message.

    Attributes:
        text: Message shown to the user
        intent: Intent the message was routed on
        data: SearchResult for product searches
        options: Options the search ran with
        error: Diagnostic message when something degraded
    """
    text: str
    intent: Optional[Intent] = None
    data: Optional[SearchResult] = None
    options: Optional[SearchOptions] = None
    error: Optional[str] = None
