"""
Tests for session state management module.

Run with: pytest tests/test_state.py -v
"""

import pytest
from datetime import datetime
from ui.state import SessionState, Message
from core.context import AssistantResponse, Intent, IntentType, SearchResult


@pytest.fixture
def state():
    """Create a fresh SessionState instance."""
    return SessionState()


class TestSessionState:
    """Test SessionState class."""

    def test_creation(self, state):
        """Test creating SessionState."""
        assert isinstance(state, SessionState)
        assert state.session_id is not None
        assert isinstance(state.created_at, datetime)
        assert isinstance(state.updated_at, datetime)
        assert state.last_response is None

    def test_custom_session_id(self):
        """Test creating SessionState with custom ID."""
        state = SessionState(session_id="test_123")
        assert state.session_id == "test_123"

    def test_session_id_generation(self, state):
        """Test automatic session ID generation."""
        assert state.session_id.startswith("session_")


class TestMessages:
    """Test message management."""

    def test_add_message(self, state):
        """Test adding a message."""
        message = state.add_message("user", "headphones under $100")

        assert isinstance(message, Message)
        assert message.role == "user"
        assert message.content == "headphones under $100"
        assert message.metadata == {}
        assert state.get_message_count() == 1

    def test_history_limit(self, state):
        for i in range(5):
            state.add_message("user", f"message {i}")

        history = state.get_conversation_history(limit=2)
        assert [m.content for m in history] == ["message 3", "message 4"]

    def test_history_by_role(self, state):
        state.add_message("user", "hi")
        state.add_message("assistant", "hello")
        state.add_message("user", "tents")

        assert [m.content for m in state.get_conversation_history(role="user")] == ["hi", "tents"]


class TestRecordResponse:
    """Test storing assistant replies."""

    def test_search_response(self, state):
        response = AssistantResponse(
            text="Found 1 product",
            intent=Intent(type=IntentType.PRODUCT_SEARCH, confidence=0.9),
            data=SearchResult(count=1),
        )

        message = state.record_response(response)

        assert state.last_response is response
        assert message.role == "assistant"
        assert message.content == "Found 1 product"
        assert message.metadata == {"intent": "product_search"}
        assert state.last_search is response
        assert state.search_count == 1

    def test_error_in_metadata(self, state):
        response = AssistantResponse(
            text="I had trouble searching",
            intent=Intent(type=IntentType.PRODUCT_SEARCH, confidence=0.9),
            error="Connection refused",
        )
        assert state.record_response(response).metadata["error"] == "Connection refused"

    def test_without_intent(self, state):
        assert state.record_response(AssistantResponse(text="ok")).metadata == {}

    def test_last_search_kept_after_greeting(self, state):
        search = AssistantResponse(
            text="Found 1 product",
            intent=Intent(type=IntentType.PRODUCT_SEARCH, confidence=0.9),
            data=SearchResult(count=1),
        )
        greeting = AssistantResponse(text="Hi!", intent=Intent(type=IntentType.GREETING, confidence=0.95))

        state.record_response(search)
        state.record_response(greeting)

        assert state.last_response is greeting
        assert state.last_search is search
        assert state.search_count == 1

    def test_degraded_search_counts(self, state):
        state.record_response(AssistantResponse(text="trouble", data=SearchResult.empty(error="timeout")))
        assert state.last_search.data.error == "timeout"


class TestReset:
    """Test clearing a session."""

    def test_reset(self, state):
        session_id = state.session_id
        state.add_message("user", "tents")
        state.record_response(AssistantResponse(text="ok"))

        state.reset()

        assert state.get_message_count() == 0
        assert state.last_response is None
        assert state.last_search is None
        assert state.search_count == 0
        assert state.session_id == session_id
