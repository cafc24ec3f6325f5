"""
Intent handlers.

Each handler processes a specific type of user intent.
"""

from handlers.base import BaseHandler, HandlerContext, HandlerResult
from handlers.search import ProductSearchHandler
from handlers.general import GeneralQuestionHandler

__all__ = [
    # Base classes
    'BaseHandler',
    'HandlerContext',
    'HandlerResult',
    # Handlers
    'ProductSearchHandler',
    'GeneralQuestionHandler',
]
