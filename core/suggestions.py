"""
Autocomplete suggestions from a prefix search.
"""

from typing import List, Optional

from core.filters import FilterCompiler
from core.structured_logging import get_logger

# Module-level logger
_logger = get_logger("core.suggestions")

MIN_PARTIAL_LENGTH = 2


class SuggestionExtractor:
    """
    Derives deduplicated suggestion strings from a prefix search over
    product names and categories.

    Example:
        extractor = SuggestionExtractor(executor)
        extractor.suggest("hea")
        # ["Wireless Headphones", "Wireless Headphones in Electronics", ...]
    """

    def __init__(self, executor, compiler: Optional[FilterCompiler] = None):
        self.executor = executor
        self.compiler = compiler or FilterCompiler()

    def suggest(self, partial: str, limit: int = 5) -> List[str]:
        """
        Suggest completions for partial text.

        Args:
            partial: Text typed so far
            limit: Maximum number of suggestions (and raw hits requested)

        Returns:
            Ordered, deduplicated suggestions; [] for short input or on failure
        """
        if not partial or len(partial) < MIN_PARTIAL_LENGTH:
            return []

        try:
            raw = self.executor.execute(self.compiler.compile_suggestions(partial, limit))
            if raw.error:
                return []

            needle = partial.lower()
            suggestions: List[str] = []
            seen = set()

            def add(value: str) -> None:
                if value not in seen:
                    seen.add(value)
                    suggestions.append(value)

            for hit in raw.hits:
                document = hit.get("document") if isinstance(hit, dict) else None
                if not document:
                    continue
                name = document.get("name")
                category = document.get("category")
                if name and needle in str(name).lower():
                    add(name)
                if name and category:
                    add(f"{name} in {category}")

            return suggestions[:limit]
        except Exception as e:
            _logger.warning(
                f"Suggestion lookup failed: {e}",
                extra={"event": "suggestions_failed", "query": partial, "error_message": str(e)},
            )
            return []
