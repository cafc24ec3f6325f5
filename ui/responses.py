"""
Response formatting for the chat UI.

Deterministic text for search results, greetings, general questions and
errors. Used directly when AI formatting is unavailable.
"""

from typing import Any, Dict, List, Optional

from core.context import SearchOptions, SearchResult


class ResponseFormatter:
    """
    Formats assistant responses for display (Markdown).

    Example:
        formatter = ResponseFormatter()
        text = formatter.format_search_response("headphones", result)
    """

    MAX_DESCRIPTION_LENGTH = 120

    def format_search_response(
        self,
        query: str,
        result: SearchResult,
        options: Optional[SearchOptions] = None,
    ) -> str:
        """
        Format a product search response.

        Args:
            query: Original user message
            result: Search result to present
            options: Options the search ran with (echoed as a filter summary)

        Returns:
            Formatted response string
        """
        if result.error:
            return self.format_error("search_failed")

        if result.is_empty:
            return self.format_no_results(query)

        response = self.format_summary(result, query)
        filters = self.format_filter_summary(options) if options else ""
        if filters:
            response += f"\n_{filters}_"
        response += "\n\n"

        start = result.pagination.offset + 1
        for i, product in enumerate(result.results, start):
            response += self._format_single_product(product, i)
            response += "\n"

        if result.pagination.total_pages > 1:
            response += (
                f"\n_Page {result.pagination.current_page} of "
                f"{result.pagination.total_pages}_"
            )

        return response.strip()

    def format_summary(self, result: SearchResult, query: str) -> str:
        if result.count == 1:
            return f"Found 1 product for '{query}':"
        shown = len(result.results)
        if shown < result.count:
            return f"Found {result.count} products for '{query}' (showing {shown}):"
        return f"Found {result.count} products for '{query}':"

    def format_filter_summary(self, options: SearchOptions) -> str:
        """One line describing the filters that were applied."""
        parts = []
        if options.category:
            category = options.category
            if isinstance(category, (list, tuple)):
                category = " or ".join(category)
            parts.append(f"category: {category}")
        if options.min_price is not None and options.max_price is not None:
            parts.append(f"price: {format_price(options.min_price)} - {format_price(options.max_price)}")
        elif options.max_price is not None:
            parts.append(f"under {format_price(options.max_price)}")
        elif options.min_price is not None:
            parts.append(f"over {format_price(options.min_price)}")
        if options.in_stock:
            parts.append("in stock")
        if options.sort_by and options.sort_by != "sort_index":
            parts.append(f"sorted by {options.sort_by.replace('_', ' ')} ({options.sort_order or 'asc'})")
        return ", ".join(parts)

    def _format_single_product(self, product: Dict[str, Any], index: int) -> str:
        name = product.get('name', 'Unknown Product')

        result = f"**{index}. {name}**"
        if product.get('price') is not None:
            result += f" - {format_price(product['price'])}"
        result += "\n"

        if product.get('sku'):
            result += f"   SKU: {product['sku']}\n"
        if product.get('category'):
            result += f"   Category: {product['category']}\n"

        stock = product.get('inStock')
        if stock is not None:
            result += "   In stock\n" if stock > 0 else "   Out of stock\n"

        description = product.get('description')
        if description:
            result += f"   {self.truncate_text(description, self.MAX_DESCRIPTION_LENGTH)}\n"

        return result

    def format_greeting(self) -> str:
        return "Hi! I can help you find products. Try something like \"wireless headphones under $100\"."

    def format_general_response(self, message: str) -> str:
        return (
            "I'm best at finding products. Tell me what you're looking for, "
            "and add a price range, category or \"in stock\" to narrow it down."
        )

    def format_no_results(self, query: str, suggestions: Optional[List[str]] = None) -> str:
        """
        Format a no results response.

        Args:
            query: Original query
            suggestions: Related searches to offer
        """
        response = (
            f"I couldn't find products matching '{query}'. "
            "Try different search terms or remove a filter."
        )
        if suggestions:
            response += "\n\nYou could try:\n"
            for suggestion in suggestions:
                response += f"- {suggestion}\n"
        return response.strip()

    def format_error(self, error_type: str) -> str:
        """
        Format an error response.

        Args:
            error_type: search_failed, processing_failed, ...
        """
        messages = {
            "search_failed": "I had trouble searching for products. Could you try again with a different query?",
            "question_failed": "I'm having trouble processing your question. Could you try asking in a different way?",
            "processing_failed": "I'm having trouble processing your request right now. Please try again later.",
        }
        return messages.get(error_type, messages["processing_failed"])

    def truncate_text(self, text: str, max_length: int = 100) -> str:
        """
        Truncate text to maximum length.

        Example:
            >>> formatter.truncate_text("Very long text...", max_length=10)
            'Very lo...'
        """
        if len(text) <= max_length:
            return text

        return text[:max_length-3] + "..."


def format_price(value: Any) -> str:
    try:
        return f"${float(value):,.2f}"
    except (TypeError, ValueError):
        return str(value)


# Singleton instance
_response_formatter = ResponseFormatter()


def get_response_formatter() -> ResponseFormatter:
    """Get the shared ResponseFormatter instance."""
    return _response_formatter
