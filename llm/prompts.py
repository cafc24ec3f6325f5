"""
System prompts and user-message templates for the AI completion API.
"""

import json
from typing import Any, Dict, List


class SystemPrompts:
    """
    System prompts for LLM interactions.

    Provides prompts for:
    - Query parsing into search options
    - Intent classification
    - Search result formatting
    - General store questions

    Example:
        prompts = SystemPrompts()
        system_prompt = prompts.get_query_parser_prompt()
    """

    def get_query_parser_prompt(self) -> str:
        """
        Get system prompt for turning a query into search options.

        Returns:
            System prompt; the model answers with a JSON object
        """
        return """You are an assistant that extracts structured product search parameters from user queries.
Given a user's search query, respond with a JSON object with these optional fields:
- query: string (the main search text)
- category: string
- minPrice: number
- maxPrice: number
- inStock: boolean
- sortBy: "price" | "name" | "created_at"
- sortOrder: "asc" | "desc"
Only include fields that are present in the user's query."""

    def get_intent_prompt(self) -> str:
        """
        Get system prompt for intent classification.

        Returns:
            System prompt; the model answers with {"intent", "confidence"}
        """
        return """You are a helpful assistant that classifies customer queries about products.
Respond with a JSON object containing:
- intent: One of "product_search", "general_question", "greeting", or "unknown"
- confidence: A number between 0 and 1 indicating your confidence in this classification

Examples:
- "Do you have any red shoes?" -> {"intent": "product_search", "confidence": 0.9}
- "What are your store hours?" -> {"intent": "general_question", "confidence": 0.8}
- "Hello there" -> {"intent": "greeting", "confidence": 0.95}"""

    def get_search_response_prompt(self) -> str:
        return """You are a helpful product search assistant.
Format your responses in a friendly, conversational way.
Highlight key product details and format prices with $ sign.
If no results are found, suggest alternatives or clarifying questions."""

    def get_general_question_prompt(self) -> str:
        return """You are a helpful assistant for a retail store.
You can answer questions about products, store policies, shipping, returns, etc.
If you don't know the answer, acknowledge that and offer to connect the customer with a human."""


def format_search_results_message(
    message: str,
    options: Dict[str, Any],
    count: int,
    results: List[Dict[str, Any]],
) -> str:
    """
    Build the user message that asks the model to present search results.

    Args:
        message: What the user asked
        options: Search options the search ran with
        count: Total matches
        results: Documents on the current page
    """
    return (
        f'I searched for: "{message}"\n'
        f"Search parameters: {json.dumps(options, default=str)}\n"
        f"Results ({count} found): {json.dumps(results, default=str)}\n\n"
        "Please format these results in a helpful way."
    )


# Global instance
_system_prompts = SystemPrompts()


def get_system_prompts() -> SystemPrompts:
    """Get the shared SystemPrompts instance."""
    return _system_prompts
