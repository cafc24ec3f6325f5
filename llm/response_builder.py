"""
Response Builder Module - Conversational Assistant Responses

Asks the completion API to present search results (or answer a general
question) in a friendly, conversational way. Falls back to the
deterministic ResponseFormatter when the API is unavailable, fails or
answers with nothing.
"""

from typing import Optional

from core.api_retry import DEFAULT_OPENAI_RETRY, RetryConfig, with_graceful_degradation
from core.context import Intent, IntentType, SearchOptions, SearchResult
from core.structured_logging import get_logger
from llm.client import LLMClient, LLMResponseError
from llm.prompts import format_search_results_message, get_system_prompts
from ui.responses import ResponseFormatter, get_response_formatter

# Module-level logger
_logger = get_logger("llm.response_builder")


class ResponseBuilder:
    """
    Builds assistant replies.

    Example:
        builder = ResponseBuilder(llm_client)
        text = builder.build_search_response("red shoes", options, result)
    """

    def __init__(
        self,
        llm: Optional[LLMClient] = None,
        formatter: Optional[ResponseFormatter] = None,
        retry: Optional[RetryConfig] = None,
    ):
        self.llm = llm
        self.formatter = formatter or get_response_formatter()
        self.retry = retry or DEFAULT_OPENAI_RETRY
        self.prompts = get_system_prompts()

    def build_search_response(
        self,
        message: str,
        options: SearchOptions,
        result: SearchResult,
        session_id: Optional[str] = None,
    ) -> str:
        """
        Present search results.

        Degraded results are never sent to the model: the user gets the
        standard "trouble searching" text.
        """
        def fallback() -> str:
            return self.formatter.format_search_response(message, result, options)

        if self.llm is None or result.error:
            return fallback()

        user_message = format_search_results_message(
            message, options.to_dict(), result.count, result.results
        )
        return with_graceful_degradation(
            lambda: self._complete(self.prompts.get_search_response_prompt(), user_message,
                                   "format_search_results", session_id),
            fallback,
            config=self.retry,
            session_id=session_id,
            operation_name="format_search_results",
        )

    def build_general_response(
        self,
        message: str,
        intent: Optional[Intent] = None,
        session_id: Optional[str] = None,
    ) -> str:
        """Answer greetings, general questions and unknown messages."""
        def fallback() -> str:
            if intent is not None and intent.type == IntentType.GREETING:
                return self.formatter.format_greeting()
            return self.formatter.format_general_response(message)

        if self.llm is None:
            return fallback()

        return with_graceful_degradation(
            lambda: self._complete(self.prompts.get_general_question_prompt(), message,
                                   "general_question", session_id),
            fallback,
            config=self.retry,
            session_id=session_id,
            operation_name="general_question",
        )

    def _complete(self, system: str, user: str, endpoint: str, session_id: Optional[str]) -> str:
        text = self.llm.complete_text(
            system, user, temperature=0.7, endpoint=endpoint, session_id=session_id
        )
        if not text:
            raise LLMResponseError(f"Empty response from model for {endpoint}")
        return text
