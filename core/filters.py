"""
Filter compilation for the product search assistant.

Compiles SearchOptions into engine request parameters:
- Category equality / "is one of" clauses
- Inclusive price bounds
- Stock quantity clauses
- Sort clause (sortable fields only)
- Pagination and facet requests

Pure and deterministic, no engine access.
"""

from typing import List, Optional, Union

from core.context import (
    CompiledQuery,
    SearchOptions,
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    DEFAULT_SORT_BY,
    DEFAULT_SORT_ORDER,
    SORTABLE_FIELDS,
    SEARCH_QUERY_BY,
    SUGGESTION_QUERY_BY,
    FACET_FIELDS,
)
from core.structured_logging import get_logger

# Module-level logger
_logger = get_logger("core.filters")


def quote_value(value: str) -> str:
    """
    Quote a filter value with backticks so commas and spaces survive.

    Backticks inside the value cannot be escaped and are removed.
    """
    text = str(value)
    if "`" in text:
        _logger.debug(
            f"Removed backticks from filter value {text!r}",
            extra={"event": "filter_value_backticks_removed", "value": text},
        )
        text = text.replace("`", "")
    return "`" + text + "`"


def format_number(value: float) -> str:
    """Render 700.0 as "700" and 19.99 as "19.99"."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def resolve_limit(limit: Optional[int]) -> int:
    if not limit or limit <= 0:
        return DEFAULT_LIMIT
    return int(limit)


def resolve_offset(offset: Optional[int]) -> int:
    if not offset or offset < 0:
        return DEFAULT_OFFSET
    return int(offset)


class FilterCompiler:
    """
    Compiles SearchOptions into a CompiledQuery.

    Example:
        compiler = FilterCompiler()
        compiled = compiler.compile(SearchOptions(category=["Books", "Toys"], offset=25))
        # filter_by=["category:=[`Books`,`Toys`]"], page=3
    """

    def compile(self, options: Union[SearchOptions, dict, None]) -> CompiledQuery:
        """
        Build engine parameters from options.

        Args:
            options: SearchOptions (or a plain dict of options)

        Returns:
            CompiledQuery ready for the SearchExecutor
        """
        if options is None:
            options = SearchOptions()
        elif isinstance(options, dict):
            options = SearchOptions.from_dict(options)

        limit = resolve_limit(options.limit)
        offset = resolve_offset(options.offset)

        compiled = CompiledQuery(
            q=options.query or "",
            query_by=list(SEARCH_QUERY_BY),
            filter_by=self._build_filters(options),
            sort_by=self._build_sort(options),
            page=offset // limit + 1,
            per_page=limit,
            facet_by=list(FACET_FIELDS),
        )

        _logger.debug(
            "Compiled search options",
            extra={
                "event": "filters_compiled",
                "filter_by": compiled.filter_expression,
                "sort_by": compiled.sort_by,
                "page": compiled.page,
                "per_page": compiled.per_page,
            },
        )
        return compiled

    def compile_suggestions(self, partial: str, limit: int = 5) -> CompiledQuery:
        """Build the prefix query used for autocomplete."""
        return CompiledQuery(
            q=partial,
            query_by=list(SUGGESTION_QUERY_BY),
            page=1,
            per_page=resolve_limit(limit),
            prefix=True,
        )

    def _build_filters(self, options: SearchOptions) -> List[str]:
        clauses = []

        category_clause = self._build_category(options.category)
        if category_clause:
            clauses.append(category_clause)

        if options.min_price is not None:
            clauses.append(f"price:>={format_number(options.min_price)}")
        if options.max_price is not None:
            clauses.append(f"price:<={format_number(options.max_price)}")

        if (
            options.min_price is not None
            and options.max_price is not None
            and options.min_price > options.max_price
        ):
            _logger.warning(
                f"Price range is inverted (min {options.min_price} > max {options.max_price}), "
                "search will return no results",
                extra={
                    "event": "inverted_price_range",
                    "min_price": options.min_price,
                    "max_price": options.max_price,
                },
            )

        if options.in_stock is True:
            clauses.append("inStock:>0")
        elif options.in_stock is False:
            clauses.append("inStock:=0")

        return clauses

    def _build_category(self, category: Union[str, List[str], None]) -> Optional[str]:
        if not category:
            return None
        if isinstance(category, (list, tuple)):
            values = ",".join(quote_value(c) for c in category)
            return f"category:=[{values}]"
        return f"category:={quote_value(category)}"

    def _build_sort(self, options: SearchOptions) -> Optional[str]:
        sort_by = options.sort_by or DEFAULT_SORT_BY
        sort_order = options.sort_order or DEFAULT_SORT_ORDER

        if sort_by not in SORTABLE_FIELDS:
            # Requested sort field is not sortable: omit the sort clause and
            # let the engine's default ordering (sort_index asc) apply
            _logger.info(
                f"Sort field '{sort_by}' is not sortable, using engine default ordering",
                extra={"event": "sort_field_not_sortable", "requested_sort": sort_by},
            )
            return None

        return f"{sort_by}:{sort_order}"
