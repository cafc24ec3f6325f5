"""
Message orchestrator for the product search assistant.

Coordinates the flow: intent classification → handler routing → response
building → conversation and search-history logging.
"""

import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from config.settings import Settings
from core.context import AssistantResponse, IntentType
from core.engine import TypesenseEngine, create_typesense_client
from core.filters import FilterCompiler
from core.gsheets_logger import create_gsheets_store
from core.history import CSVHistoryStore, SearchHistoryLogger
from core.intent import IntentClassifier
from core.query_parser import QueryParser
from core.search import ProductSearch, SearchExecutor
from core.structured_logging import get_logger, log_conversation_turn
from core.suggestions import SuggestionExtractor
from llm.client import LLMClient, create_openai_client
from llm.intent import AIIntentClassifier
from llm.query_parser import AIQueryParser
from llm.response_builder import ResponseBuilder
from ui.responses import ResponseFormatter

from handlers.base import HandlerContext, HandlerResult
from handlers.general import GeneralQuestionHandler
from handlers.search import ProductSearchHandler

# Module-level logger
_logger = get_logger("core.orchestrator")


@dataclass
class AssistantComponents:
    """
    All components needed by the orchestrator.

    Typically created once by the app with from_settings() and shared
    between requests; none of them hold per-request state.
    """
    intent_classifier: Any  # AIIntentClassifier or IntentClassifier
    query_parser: Any       # AIQueryParser or QueryParser
    product_search: Any     # ProductSearch
    suggestions: Any        # SuggestionExtractor
    response_builder: Any   # ResponseBuilder
    history: Any            # SearchHistoryLogger
    formatter: Any          # ResponseFormatter

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        engine: Optional[TypesenseEngine] = None,
        gsheets_credentials: Optional[Dict[str, Any]] = None,
    ) -> "AssistantComponents":
        """
        Wire up every component from Settings.

        Args:
            settings: Runtime settings
            engine: Pre-built engine adapter (tests); built from settings if None
            gsheets_credentials: Service account info for the history sheet

        Returns:
            AssistantComponents
        """
        if engine is None:
            engine = TypesenseEngine(
                create_typesense_client(settings),
                collection=settings.typesense_collection,
            )

        llm = None
        openai_client = create_openai_client(settings)
        if openai_client is not None:
            llm = LLMClient(openai_client, model=settings.llm_model)

        compiler = FilterCompiler()
        parser = QueryParser()
        executor = SearchExecutor(engine)
        formatter = ResponseFormatter()

        stores = [CSVHistoryStore(settings.history_log_dir)]
        gsheets_store = create_gsheets_store(settings.gsheets_spreadsheet_id, gsheets_credentials)
        if gsheets_store is not None:
            stores.append(gsheets_store)

        return cls(
            intent_classifier=AIIntentClassifier(llm, fallback=IntentClassifier(parser)),
            query_parser=AIQueryParser(llm, fallback=parser),
            product_search=ProductSearch(executor, compiler=compiler, parser=parser),
            suggestions=SuggestionExtractor(executor, compiler=compiler),
            response_builder=ResponseBuilder(llm, formatter=formatter),
            history=SearchHistoryLogger(stores),
            formatter=formatter,
        )


# Handler registry - maps intent types to handlers
HANDLERS = {
    IntentType.PRODUCT_SEARCH: ProductSearchHandler(),
    IntentType.GENERAL_QUESTION: GeneralQuestionHandler(),
    IntentType.GREETING: GeneralQuestionHandler(),
    IntentType.UNKNOWN: GeneralQuestionHandler(),
}


def new_session_id() -> str:
    return f"session_{uuid.uuid4().hex[:16]}"


def process_message(
    message: str,
    components: AssistantComponents,
    user_id: Optional[str] = None,
    session_id: Optional[str] = None,
    debug_mode: bool = False,
) -> AssistantResponse:
    """
    Process one chat message and return the assistant's reply.

    Flow:
    1. Classify intent
    2. Route to the handler for that intent
    3. Log the conversation turn
    4. For product searches, record search history

    Args:
        message: User's message
        components: Assistant components
        user_id: Optional user identifier for search history
        session_id: Session identifier for logs
        debug_mode: Prefix the reply with handler debug output

    Returns:
        AssistantResponse; error is set when something degraded
    """
    start_time = time.perf_counter()
    session_id = session_id or new_session_id()

    # Step 1: Classify intent
    intent = components.intent_classifier.classify(message, session_id=session_id)

    # Step 2: Get handler for intent
    handler = HANDLERS.get(intent.type, HANDLERS[IntentType.UNKNOWN])

    # Step 3: Build handler context
    handler_ctx = HandlerContext(
        query=message,
        intent=intent,
        session_id=session_id,
        user_id=user_id,
        debug_mode=debug_mode,
        query_parser=components.query_parser,
        product_search=components.product_search,
        response_builder=components.response_builder,
    )
    handler_ctx.add_debug(f"INTENT: {intent.type.value} (confidence={intent.confidence:.2f})")

    # Step 4: Execute handler
    try:
        result = handler.handle(handler_ctx)
    except Exception as e:
        _logger.error(
            f"Handler {type(handler).__name__} failed: {e}",
            extra={
                "event": "handler_failed",
                "session_id": session_id,
                "intent": intent.type.value,
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        handler_ctx.add_debug(f"ERROR: {type(e).__name__}: {e}")
        result = HandlerResult(
            response=components.formatter.format_error("processing_failed"),
            error=str(e),
        )

    # Step 5: Log conversation turn
    products_found = result.search_result.count if result.search_result else 0
    log_conversation_turn(
        session_id=session_id,
        user_query=message,
        intent=intent.type.value,
        confidence=intent.confidence,
        products_found=products_found,
        response_time_ms=(time.perf_counter() - start_time) * 1000,
        error=result.error,
    )

    # Step 6: Record search history
    if intent.type == IntentType.PRODUCT_SEARCH and result.search_result is not None:
        components.history.log_search(message, user_id=user_id, results=result.search_result)

    text = result.response
    if debug_mode and handler_ctx.debug_lines:
        text = "**DEBUG OUTPUT:**\n```\n" + "\n".join(handler_ctx.debug_lines) + "\n```\n\n---\n\n" + text

    return AssistantResponse(
        text=text,
        intent=intent,
        data=result.search_result,
        options=result.options,
        error=result.error,
    )
