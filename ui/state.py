"""
Chat session state.

One SessionState per browser session (kept in st.session_state): the
message list shown in the chat, the last reply, and the last reply that
carried a search result so the sidebar can keep showing its facets and
pagination after a greeting or question.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.context import AssistantResponse


@dataclass
class Message:
    """A chat message; metadata holds intent and error for assistant turns."""
    role: str
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)


class SessionState:
    """
    Messages and search state for one chat session.

    Example:
        state = SessionState()
        state.add_message("user", "headphones under $100")
        state.record_response(process_message("headphones under $100", components))
        state.last_search.data.count
    """

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or f"session_{uuid.uuid4().hex[:16]}"
        self.created_at = datetime.now()
        self.updated_at = self.created_at
        self._messages: List[Message] = []
        self.last_response: Optional[AssistantResponse] = None
        self.last_search: Optional[AssistantResponse] = None
        self.search_count = 0

    def add_message(self, role: str, content: str, metadata: Optional[Dict[str, Any]] = None) -> Message:
        message = Message(role=role, content=content, metadata=metadata or {})
        self._messages.append(message)
        self.updated_at = datetime.now()
        return message

    def record_response(self, response: AssistantResponse) -> Message:
        """
        Add an assistant reply to the chat.

        Replies with a search result (degraded ones included) also become
        last_search.
        """
        self.last_response = response
        if response.data is not None:
            self.last_search = response
            self.search_count += 1

        metadata: Dict[str, Any] = {}
        if response.intent is not None:
            metadata["intent"] = response.intent.type.value
        if response.error:
            metadata["error"] = response.error
        return self.add_message("assistant", response.text, metadata)

    def get_conversation_history(self, limit: Optional[int] = None, role: Optional[str] = None) -> List[Message]:
        """Messages in order, optionally filtered by role and cut to the last `limit`."""
        messages = [m for m in self._messages if role is None or m.role == role]
        if limit:
            messages = messages[-limit:]
        return messages

    def get_message_count(self) -> int:
        return len(self._messages)

    def reset(self) -> None:
        """Start over in the same session."""
        self._messages = []
        self.last_response = None
        self.last_search = None
        self.search_count = 0
        self.updated_at = datetime.now()
