"""
General conversation handler.

Handles greetings, general questions and anything that is not a
product search.
"""

from handlers.base import BaseHandler, HandlerContext, HandlerResult


class GeneralQuestionHandler(BaseHandler):
    """Handle greeting, general_question and unknown intents."""

    def handle(self, ctx: HandlerContext) -> HandlerResult:
        response = ctx.response_builder.build_general_response(
            ctx.query, intent=ctx.intent, session_id=ctx.session_id
        )
        return HandlerResult(response=response)
