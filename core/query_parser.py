"""
Query parsing for the product search assistant.

Turns free text into SearchOptions:
- Price range and price bounds ("$50 - $100", "under $700")
- Category ("in electronics", "from the category Books")
- Stock ("in stock", "available")
- Sort ("cheapest", "newest", "a to z")

Pure Python, no external dependencies except config modules.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from core.context import SearchOptions
from core.structured_logging import get_logger, timed
from config.patterns import (
    PRICE_RANGE,
    MAX_PRICE,
    MIN_PRICE,
    CATEGORY,
    CATEGORY_STOP,
    IN_STOCK,
    SORT_RULES,
)

# Module-level logger
_logger = get_logger("core.query_parser")


Update = Dict[str, Any]


@dataclass(frozen=True)
class ExtractionRule:
    """
    One independent extraction step.

    Attributes:
        name: Rule name (for logs and tests)
        extract: Callable returning a partial SearchOptions update, or None
        group: Rules sharing a group can short-circuit each other
        exclusive: When this rule fires, later rules in its group are skipped
    """
    name: str
    extract: Callable[[str], Optional[Update]]
    group: Optional[str] = None
    exclusive: bool = False

    def apply(self, text: str) -> Optional[Update]:
        return self.extract(text)


def extract_price_range(text: str) -> Optional[Update]:
    match = PRICE_RANGE.search(text)
    if not match:
        return None
    return {
        "min_price": float(match.group(1)),
        "max_price": float(match.group(2)),
    }


def extract_max_price(text: str) -> Optional[Update]:
    match = MAX_PRICE.search(text)
    if not match:
        return None
    return {"max_price": float(match.group(1))}


def extract_min_price(text: str) -> Optional[Update]:
    match = MIN_PRICE.search(text)
    if not match:
        return None
    return {"min_price": float(match.group(1))}


def _clean_category(captured: str) -> str:
    """Cut at the first keyword owned by another rule, then trim."""
    stop = CATEGORY_STOP.search(captured)
    if stop:
        captured = captured[:stop.start()]
    return captured.strip().strip("\"'").strip()


def extract_category(text: str) -> Optional[Update]:
    """
    Extract a category phrase.

    "in stock" is never a category trigger. Captured words stop at the
    first stock/price/sort keyword, so "laptops in electronics under $500"
    yields "electronics". If a trigger leaves nothing after cutting, the
    scan resumes right after that trigger, so triggers inside the
    discarded capture are still seen.
    """
    pos = 0
    while True:
        match = CATEGORY.search(text, pos)
        if not match:
            return None
        category = _clean_category(match.group(1))
        if category:
            return {"category": category}
        pos = match.start(1)


def extract_in_stock(text: str) -> Optional[Update]:
    if IN_STOCK.search(text):
        return {"in_stock": True}
    return None


def extract_sort(text: str) -> Optional[Update]:
    """First matching sort phrase wins."""
    # Single spaces, so "reverse\talphabetical" is seen as reverse
    text = " ".join(text.split())
    for pattern, (sort_by, sort_order) in SORT_RULES:
        if pattern.search(text):
            return {"sort_by": sort_by, "sort_order": sort_order}
    return None


DEFAULT_RULES: List[ExtractionRule] = [
    ExtractionRule("price_range", extract_price_range, group="price", exclusive=True),
    ExtractionRule("max_price", extract_max_price, group="price"),
    ExtractionRule("min_price", extract_min_price, group="price"),
    ExtractionRule("category", extract_category),
    ExtractionRule("in_stock", extract_in_stock),
    ExtractionRule("sort", extract_sort),
]


class QueryParser:
    """
    Parses free-text product queries into SearchOptions.

    Rules run in order against the same text and each contributes an
    optional partial update. Parsing never fails: a rule that does not
    match leaves its field unset.

    Example:
        parser = QueryParser()
        options = parser.parse("smartphone under $700")
        # SearchOptions(query="smartphone under $700", max_price=700.0)
    """

    def __init__(self, rules: Optional[List[ExtractionRule]] = None):
        self.rules = list(rules) if rules is not None else list(DEFAULT_RULES)

    @timed("query_parse")
    def parse(self, text: str) -> SearchOptions:
        """
        Parse text into SearchOptions.

        Args:
            text: User's query

        Returns:
            SearchOptions with query set to the original text
        """
        text = text or ""
        options = SearchOptions(query=text)
        closed_groups = set()
        fired = []

        for rule in self.rules:
            if rule.group and rule.group in closed_groups:
                continue
            update = rule.apply(text)
            if not update:
                continue
            fired.append(rule.name)
            for key, value in update.items():
                setattr(options, key, value)
            if rule.exclusive and rule.group:
                closed_groups.add(rule.group)

        _logger.debug(
            f"Parsed query: {fired or 'no rules matched'}",
            extra={"event": "query_parsed", "query": text, "options": options.to_dict()},
        )
        return options
