"""
Regex patterns for structured data extraction.

Holds the phrase tables the query parser turns into SearchOptions
(price, category, stock, sort) and the keyword lists used by the
rule-based intent fallback.
"""

import re

# === Price Patterns ===

# Currency amount ("$50", "$19.99")
AMOUNT = r'\$(\d+(?:\.\d+)?)'

# "$50 - $100" (wins over the bound phrases below)
PRICE_RANGE_PATTERN = rf'{AMOUNT}\s*-\s*{AMOUNT}'

# "under $700", "less than $20", "below $5"
MAX_PRICE_PATTERN = rf'\b(?:under|less\s+than|below)\s*{AMOUNT}'

# "over $100", "more than $20", "above $5"
MIN_PRICE_PATTERN = rf'\b(?:over|more\s+than|above)\s*{AMOUNT}'


# === Category Patterns ===

# "in electronics", "from the category Books", "category 'Home & Garden'"
# "in stock" is a stock phrase, never a category trigger
CATEGORY_PATTERN = r'\b(?:in(?!\s+stock\b)|category|from)\s+(?:the\s+)?(?:category\s+)?["\']?([a-zA-Z\s&]+)["\']?'

# Words that belong to another rule; category capture stops at the first one
CATEGORY_STOP_KEYWORDS = [
    r'in\s+stock',
    r'available',
    r'under',
    r'less\s+than',
    r'below',
    r'over',
    r'more\s+than',
    r'above',
    r'cheapest',
    r'lowest\s+price',
    r'most\s+expensive',
    r'highest\s+price',
    r'newest',
    r'latest',
    r'recent',
    r'reverse\s+alphabetical',
    r'alphabetical',
    r'a\s+to\s+z',
    r'z\s+to\s+a',
    r'price',
    r'sorted',
    r'sort',
]


# === Stock Patterns ===

IN_STOCK_PATTERNS = [
    r'\bin\s+stock\b',
    r'\bavailable\b',
]


# === Sort Patterns ===
# Ordered, first match wins. Values are (sort_by, sort_order).
# "name" is not engine-sortable, so alphabetical phrases map to sort_index.
# The plain alphabetical rule skips "reverse alphabetical" so the later
# rule can still fire; extract_sort collapses whitespace before matching.

SORT_PATTERNS = [
    (r'\bcheapest\b|\blowest\s+price\b|\bprice\b.*\blow\s+to\s+high\b', ("price", "asc")),
    (r'\bmost\s+expensive\b|\bhighest\s+price\b|\bprice\b.*\bhigh\s+to\s+low\b', ("price", "desc")),
    (r'\bnewest\b|\blatest\b|\brecent\b', ("created_at", "desc")),
    (r'(?<!reverse\s)\balphabetical\b|\ba\s+to\s+z\b', ("sort_index", "asc")),
    (r'\breverse\s+alphabetical\b|\bz\s+to\s+a\b', ("sort_index", "desc")),
]


# === Intent Detection Patterns ===

# Greeting patterns
GREETING_PATTERNS = [
    r'^\s*hello\b',
    r'^\s*hi\b',
    r'^\s*hey\b',
    r'\bgood\s+morning\b',
    r'\bgood\s+afternoon\b',
    r'\bgood\s+evening\b',
]

# Product search signals
PRODUCT_SEARCH_PATTERNS = [
    r'\b(?:find|search|show|looking\s+for|look\s+for|need|want|buy|get)\b',
    r'\b(?:cheapest|most\s+expensive|in\s+stock|available)\b',
    r'\b(?:under|over|below|above|less\s+than|more\s+than)\s*\$\d',
    r'\$\d',
    r'\b(?:products?|items?|deals?)\b',
]

# General question signals
QUESTION_PATTERNS = [
    r'^\s*(?:what|why|how|who|when|where|which|can|could|does|do|is|are)\b',
    r'\?\s*$',
]


# === Compiled Patterns (for performance) ===

PRICE_RANGE = re.compile(PRICE_RANGE_PATTERN)
MAX_PRICE = re.compile(MAX_PRICE_PATTERN, re.IGNORECASE)
MIN_PRICE = re.compile(MIN_PRICE_PATTERN, re.IGNORECASE)
CATEGORY = re.compile(CATEGORY_PATTERN, re.IGNORECASE)
CATEGORY_STOP = re.compile(
    r'\b(?:' + '|'.join(CATEGORY_STOP_KEYWORDS) + r')\b', re.IGNORECASE
)
IN_STOCK = re.compile('|'.join(IN_STOCK_PATTERNS), re.IGNORECASE)
SORT_RULES = [(re.compile(p, re.IGNORECASE), value) for p, value in SORT_PATTERNS]


# === Helper Functions ===

def has_pattern(text: str, patterns: list[str]) -> bool:
    """
    Check if any pattern matches text.

    Args:
        text: Input text
        patterns: List of regex patterns

    Returns:
        True if any pattern matches
    """
    text_lower = text.lower()
    return any(re.search(p, text_lower) for p in patterns)
