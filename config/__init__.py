"""Configuration for the product search assistant."""

from config.patterns import (
    PRICE_RANGE,
    MAX_PRICE,
    MIN_PRICE,
    CATEGORY,
    IN_STOCK,
    SORT_RULES,
    GREETING_PATTERNS,
    PRODUCT_SEARCH_PATTERNS,
    QUESTION_PATTERNS,
    has_pattern,
)

__all__ = [
    "PRICE_RANGE",
    "MAX_PRICE",
    "MIN_PRICE",
    "CATEGORY",
    "IN_STOCK",
    "SORT_RULES",
    "GREETING_PATTERNS",
    "PRODUCT_SEARCH_PATTERNS",
    "QUESTION_PATTERNS",
    "has_pattern",
]
