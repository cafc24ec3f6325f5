"""AI collaborator: query parsing, intent classification and replies."""

from llm.client import LLMClient, LLMResponseError, create_openai_client
from llm.intent import AIIntentClassifier
from llm.prompts import SystemPrompts, get_system_prompts
from llm.query_parser import AIQueryParser
from llm.response_builder import ResponseBuilder

__all__ = [
    "LLMClient",
    "LLMResponseError",
    "create_openai_client",
    "AIIntentClassifier",
    "SystemPrompts",
    "get_system_prompts",
    "AIQueryParser",
    "ResponseBuilder",
]
