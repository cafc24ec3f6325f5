"""
Product search intent handler.
"""

from handlers.base import BaseHandler, HandlerContext, HandlerResult


class ProductSearchHandler(BaseHandler):
    """Handle product search messages: parse, search, present."""

    def handle(self, ctx: HandlerContext) -> HandlerResult:
        options = ctx.query_parser.parse(ctx.query, session_id=ctx.session_id)
        ctx.add_debug(f"OPTIONS: {options.to_dict()}")

        result = ctx.product_search.search_products(options)
        ctx.add_debug(
            f"SEARCH: {result.count} found, {len(result.results)} shown"
            + (f", error: {result.error}" if result.error else "")
        )

        response = ctx.response_builder.build_search_response(
            ctx.query, options, result, session_id=ctx.session_id
        )

        return HandlerResult(
            response=response,
            search_result=result,
            options=options,
            error=result.error,
        )
