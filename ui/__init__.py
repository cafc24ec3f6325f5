"""
UI layer for the product search assistant.

Provides response formatting and session state.
"""

from ui.responses import (
    ResponseFormatter,
    format_price,
    get_response_formatter
)
from ui.state import (
    SessionState,
    Message,
)

__all__ = [
    'ResponseFormatter',
    'format_price',
    'get_response_formatter',
    'SessionState',
    'Message',
]
