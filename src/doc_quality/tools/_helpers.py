"""Access to the doc-quality server state from inside a tool call."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.server.fastmcp import Context

if TYPE_CHECKING:
    from doc_quality.server import AppContext


def get_context(ctx: Context) -> AppContext:
    """Return the settings, fetcher and report cache built by ``app_lifespan``."""
    from doc_quality.server import AppContext

    state = ctx.request_context.lifespan_context
    if isinstance(state, AppContext):
        return state
    raise TypeError(
        "doc-quality tools need the AppContext yielded by app_lifespan; "
        f"found {type(state).__name__}."
    )
