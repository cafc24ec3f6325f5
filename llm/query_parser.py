"""
AI query parsing with a rule-based fallback.

The completion API is asked for SearchOptions JSON. When it is not
configured, fails, or answers with something that is not a JSON object,
the regex-ladder QueryParser is used instead.
"""

from typing import Optional

from core.api_retry import DEFAULT_OPENAI_RETRY, RetryConfig, with_graceful_degradation
from core.context import SearchOptions
from core.query_parser import QueryParser
from core.structured_logging import get_logger
from llm.client import LLMClient
from llm.prompts import get_system_prompts

# Module-level logger
_logger = get_logger("llm.query_parser")


class AIQueryParser:
    """
    Parses queries with the completion API, falling back to QueryParser.

    Example:
        parser = AIQueryParser(llm_client)
        options = parser.parse("red shoes under $50")
        # SearchOptions(query="red shoes", max_price=50.0, ...)
    """

    def __init__(
        self,
        llm: Optional[LLMClient] = None,
        fallback: Optional[QueryParser] = None,
        retry: Optional[RetryConfig] = None,
    ):
        self.llm = llm
        self.fallback = fallback or QueryParser()
        self.retry = retry or DEFAULT_OPENAI_RETRY
        self.prompts = get_system_prompts()

    def parse(self, text: str, session_id: Optional[str] = None) -> SearchOptions:
        """
        Parse text into SearchOptions. Never raises.

        Args:
            text: User's query
            session_id: Session identifier for logs

        Returns:
            SearchOptions; query defaults to the original text
        """
        if self.llm is None:
            return self.fallback.parse(text)

        return with_graceful_degradation(
            lambda: self._parse_with_llm(text, session_id),
            lambda: self.fallback.parse(text),
            config=self.retry,
            session_id=session_id,
            operation_name="parse_query",
        )

    def _parse_with_llm(self, text: str, session_id: Optional[str]) -> SearchOptions:
        data = self.llm.complete_json(
            self.prompts.get_query_parser_prompt(),
            text,
            temperature=0.2,
            endpoint="parse_query",
            session_id=session_id,
        )
        options = SearchOptions.from_dict(data)
        if not options.query:
            options.query = text

        _logger.debug(
            "AI parsed query",
            extra={"event": "ai_query_parsed", "query": text, "options": options.to_dict()},
        )
        return options
