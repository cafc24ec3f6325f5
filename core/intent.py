"""
Rule-based intent classification.

Used when the AI classifier is not configured or fails. Four intents:
product_search, general_question, greeting, unknown.
"""

from typing import Optional

from core.context import Intent, IntentType
from core.query_parser import QueryParser
from core.structured_logging import get_logger
from config.patterns import (
    GREETING_PATTERNS,
    PRODUCT_SEARCH_PATTERNS,
    QUESTION_PATTERNS,
    has_pattern,
)

# Module-level logger
_logger = get_logger("core.intent")

# Greetings longer than this are treated as carrying a request
MAX_GREETING_WORDS = 4


class IntentClassifier:
    """
    Classifies user intent with simple, reliable rules.

    Priority:
    1. GREETING - short greeting messages
    2. PRODUCT_SEARCH - structured filters parsed, or search keywords
    3. GENERAL_QUESTION - question phrasing
    4. UNKNOWN

    Example:
        classifier = IntentClassifier()
        intent = classifier.classify("cheapest headphones in stock")
        # Returns: Intent(type=PRODUCT_SEARCH, confidence=0.9, ...)
    """

    def __init__(self, parser: Optional[QueryParser] = None):
        self.parser = parser or QueryParser()

    def classify(self, message: str) -> Intent:
        """
        Classify user intent.

        Args:
            message: User's message

        Returns:
            Intent object with type, confidence, and reasoning
        """
        message = (message or "").strip()
        if not message:
            return Intent(type=IntentType.UNKNOWN, confidence=0.0, reasoning="Empty message")

        intent = self._classify(message)
        _logger.debug(
            f"Rule-based intent: {intent}",
            extra={
                "event": "intent_classified",
                "intent": intent.type.value,
                "confidence": intent.confidence,
            },
        )
        return intent

    def _classify(self, message: str) -> Intent:
        word_count = len(message.split())

        if word_count <= MAX_GREETING_WORDS and has_pattern(message, GREETING_PATTERNS):
            return Intent(
                type=IntentType.GREETING,
                confidence=0.95,
                reasoning="User sent a greeting"
            )

        # Category alone is too permissive a signal ("from my order")
        parsed = self.parser.parse(message).to_dict()
        parsed.pop("query", None)
        parsed.pop("category", None)
        if parsed:
            return Intent(
                type=IntentType.PRODUCT_SEARCH,
                confidence=0.9,
                reasoning=f"Parsed search filters: {', '.join(sorted(parsed))}"
            )

        if has_pattern(message, PRODUCT_SEARCH_PATTERNS):
            return Intent(
                type=IntentType.PRODUCT_SEARCH,
                confidence=0.7,
                reasoning="Message contains product search keywords"
            )

        if has_pattern(message, QUESTION_PATTERNS):
            return Intent(
                type=IntentType.GENERAL_QUESTION,
                confidence=0.6,
                reasoning="Message is phrased as a question"
            )

        return Intent(
            type=IntentType.UNKNOWN,
            confidence=0.3,
            reasoning="No intent signals found"
        )
