"""
AI intent classification with a rule-based fallback.
"""

from typing import Optional

from core.api_retry import DEFAULT_OPENAI_RETRY, RetryConfig, with_graceful_degradation
from core.context import Intent, IntentType
from core.intent import IntentClassifier
from core.structured_logging import get_logger
from llm.client import LLMClient, LLMResponseError
from llm.prompts import get_system_prompts

# Module-level logger
_logger = get_logger("llm.intent")

_INTENTS = {intent.value: intent for intent in IntentType}


class AIIntentClassifier:
    """
    Classifies chat messages with the completion API.

    Falls back to the rule-based IntentClassifier when the API is not
    configured, fails, or answers with an unknown shape.

    Example:
        classifier = AIIntentClassifier(llm_client)
        intent = classifier.classify("Do you have any red shoes?")
        # Intent(product_search, confidence=0.90)
    """

    def __init__(
        self,
        llm: Optional[LLMClient] = None,
        fallback: Optional[IntentClassifier] = None,
        retry: Optional[RetryConfig] = None,
    ):
        self.llm = llm
        self.fallback = fallback or IntentClassifier()
        self.retry = retry or DEFAULT_OPENAI_RETRY
        self.prompts = get_system_prompts()

    def classify(self, message: str, session_id: Optional[str] = None) -> Intent:
        if self.llm is None:
            return self.fallback.classify(message)

        return with_graceful_degradation(
            lambda: self._classify_with_llm(message, session_id),
            lambda: self.fallback.classify(message),
            config=self.retry,
            session_id=session_id,
            operation_name="classify_intent",
        )

    def _classify_with_llm(self, message: str, session_id: Optional[str]) -> Intent:
        data = self.llm.complete_json(
            self.prompts.get_intent_prompt(),
            message,
            temperature=0.2,
            endpoint="classify_intent",
            session_id=session_id,
        )

        intent_type = _INTENTS.get(str(data.get("intent", "")).lower())
        if intent_type is None:
            raise LLMResponseError(f"Unknown intent from model: {data.get('intent')!r}")

        try:
            confidence = float(data.get("confidence", 0.5))
        except (TypeError, ValueError):
            confidence = 0.5
        confidence = min(max(confidence, 0.0), 1.0)

        return Intent(
            type=intent_type,
            confidence=confidence,
            reasoning="Classified by AI model",
        )
