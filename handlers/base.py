"""
Base handler and context classes for intent handlers.

Provides the common interface and shared context for all handlers.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional
from abc import ABC, abstractmethod

from core.context import Intent, SearchOptions, SearchResult


@dataclass
class HandlerContext:
    """
    Context passed to all intent handlers.

    Contains everything a handler needs to process a message:
    - The message itself
    - Classified intent
    - Session/user identifiers for logging
    - Component references

    This avoids passing dozens of parameters to each handler.
    """
    query: str
    intent: Intent
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    debug_mode: bool = False

    # Component references (set by orchestrator)
    query_parser: Any = None
    product_search: Any = None
    response_builder: Any = None

    # Debug output collector
    debug_lines: List[str] = field(default_factory=list)

    def add_debug(self, message: str) -> None:
        """Add a debug message."""
        if self.debug_mode:
            self.debug_lines.append(message)


@dataclass
class HandlerResult:
    """
    Result returned by intent handlers.

    Attributes:
        response: Text shown to the user
        search_result: SearchResult for product searches
        options: Options the search ran with
        error: Diagnostic message when something degraded
    """
    response: str
    search_result: Optional[SearchResult] = None
    options: Optional[SearchOptions] = None
    error: Optional[str] = None


class BaseHandler(ABC):
    """
    Base class for all intent handlers.

    Each handler processes a specific intent type and returns a HandlerResult.
    Handlers should be stateless - all state is in HandlerContext.
    """

    @abstractmethod
    def handle(self, ctx: HandlerContext) -> HandlerResult:
        """
        Process the intent and return a result.

        Args:
            ctx: Handler context with query, intent, and all components

        Returns:
            HandlerResult with response and search data
        """
        pass
