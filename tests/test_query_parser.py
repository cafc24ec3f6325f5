"""
Tests for free-text query parsing.

Run with: pytest tests/test_query_parser.py -v
"""

import pytest

from core.query_parser import (
    ExtractionRule,
    QueryParser,
    extract_category,
    extract_in_stock,
)


@pytest.fixture
def parser():
    """Create a query parser instance."""
    return QueryParser()


class TestPriceExtraction:
    """Test price bound extraction."""

    def test_max_price(self, parser):
        result = parser.parse("smartphone under $700")
        assert result.max_price == 700.0
        assert result.min_price is None

    def test_max_price_variants(self, parser):
        assert parser.parse("shoes less than $20").max_price == 20.0
        assert parser.parse("pens below $5").max_price == 5.0

    def test_min_price(self, parser):
        result = parser.parse("bikes over $100")
        assert result.min_price == 100.0
        assert result.max_price is None

    def test_min_price_variants(self, parser):
        assert parser.parse("more than $20").min_price == 20.0
        assert parser.parse("above $5").min_price == 5.0

    def test_decimal_amount(self, parser):
        assert parser.parse("under $19.99").max_price == 19.99

    def test_case_insensitive(self, parser):
        assert parser.parse("UNDER $50").max_price == 50.0

    def test_range(self, parser):
        result = parser.parse("headphones $50 - $100")
        assert result.min_price == 50.0
        assert result.max_price == 100.0

    def test_range_wins_over_bounds(self, parser):
        """Once a range matched, the bound phrases are not consulted."""
        result = parser.parse("$50-$100 but under $20")
        assert result.min_price == 50.0
        assert result.max_price == 100.0

    def test_both_bounds(self, parser):
        result = parser.parse("over $10 and under $30")
        assert result.min_price == 10.0
        assert result.max_price == 30.0

    def test_amount_requires_currency_symbol(self, parser):
        result = parser.parse("phones under 700")
        assert result.max_price is None


class TestCategoryExtraction:
    """Test category extraction and the stop-keyword policy."""

    def test_simple(self, parser):
        assert parser.parse("laptops in electronics").category == "electronics"

    def test_from_the_category(self, parser):
        assert parser.parse("from the category Books").category == "Books"

    def test_quoted(self, parser):
        assert parser.parse("category 'Home & Kitchen'").category == "Home & Kitchen"

    def test_stops_at_price_phrase(self, parser):
        result = parser.parse("laptops in electronics under $500")
        assert result.category == "electronics"
        assert result.max_price == 500.0

    def test_stops_at_stock_phrase(self, parser):
        result = parser.parse("headphones in electronics in stock")
        assert result.category == "electronics"
        assert result.in_stock is True

    def test_stops_at_sort_phrase(self, parser):
        result = parser.parse("show me laptops in electronics sorted by price")
        assert result.category == "electronics"

    def test_in_stock_is_not_a_category(self, parser):
        result = parser.parse("shoes in stock")
        assert result.category is None
        assert result.in_stock is True

    def test_category_after_in_stock(self, parser):
        result = parser.parse("headphones in stock in electronics")
        assert result.category == "electronics"
        assert result.in_stock is True

    def test_in_stock_mid_sentence_with_price(self, parser):
        result = parser.parse("running shoes in stock under $80")
        assert result.category is None
        assert result.max_price == 80.0

    def test_empty_capture_tries_next_trigger(self, parser):
        result = parser.parse("in under $50 from Books")
        assert result.category == "Books"
        assert result.max_price == 50.0

    def test_no_category(self, parser):
        assert parser.parse("wireless headphones").category is None

    def test_trigger_must_be_whole_word(self):
        assert extract_category("cabin lights") is None


class TestStockExtraction:
    """Test stock extraction."""

    def test_in_stock(self, parser):
        assert parser.parse("in stock").in_stock is True

    def test_available(self, parser):
        result = parser.parse("available in electronics")
        assert result.in_stock is True
        assert result.category == "electronics"

    def test_not_mentioned(self, parser):
        assert parser.parse("red shoes").in_stock is None


class TestSortExtraction:
    """Test sort phrase extraction."""

    @pytest.mark.parametrize("text,expected", [
        ("cheapest phones", ("price", "asc")),
        ("lowest price tents", ("price", "asc")),
        ("phones price low to high", ("price", "asc")),
        ("most expensive watch", ("price", "desc")),
        ("highest price", ("price", "desc")),
        ("phones price high to low", ("price", "desc")),
        ("newest arrivals", ("created_at", "desc")),
        ("latest books", ("created_at", "desc")),
        ("alphabetical list", ("sort_index", "asc")),
        ("books a to z", ("sort_index", "asc")),
        ("reverse alphabetical", ("sort_index", "desc")),
        ("books z to a", ("sort_index", "desc")),
        ("reverse  alphabetical", ("sort_index", "desc")),
        ("books reverse\talphabetical", ("sort_index", "desc")),
    ])
    def test_sort_phrases(self, parser, text, expected):
        result = parser.parse(text)
        assert (result.sort_by, result.sort_order) == expected

    def test_first_match_wins(self, parser):
        result = parser.parse("cheapest and newest")
        assert result.sort_by == "price"
        assert result.sort_order == "asc"

    def test_no_sort(self, parser):
        result = parser.parse("red shoes")
        assert result.sort_by is None
        assert result.sort_order is None


class TestQueryParser:
    """Test the parser as a whole."""

    def test_query_keeps_original_text(self, parser):
        text = "cheapest wireless headphones under $150 in stock"
        result = parser.parse(text)
        assert result.query == text
        assert result.max_price == 150.0
        assert result.in_stock is True
        assert result.sort_by == "price"

    def test_empty_text(self, parser):
        result = parser.parse("")
        assert result.query == ""
        assert result.to_dict() == {"query": ""}

    def test_none_text(self, parser):
        assert parser.parse(None).query == ""

    def test_limit_offset_never_set(self, parser):
        result = parser.parse("show 5 products")
        assert result.limit is None
        assert result.offset is None

    def test_custom_rules(self):
        parser = QueryParser(rules=[ExtractionRule("in_stock", extract_in_stock)])
        result = parser.parse("under $5 in stock")
        assert result.in_stock is True
        assert result.max_price is None
