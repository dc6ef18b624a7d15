"""MCP server that scores the documentation quality of GitHub repositories."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from doc_quality.analysis.cache import ReportCache
from doc_quality.config import Settings, load_settings
from doc_quality.fetcher.base import RepositoryFetcherPort
from doc_quality.fetcher.github import GitHubFetcher, build_http_client
from doc_quality.tools.analyze import analyze_repositories, analyze_repository
from doc_quality.tools.compare import compare_repositories
from doc_quality.tools.export import export_reports


@dataclass(frozen=True, slots=True)
class AppContext:
    """Shared state across all tool invocations."""

    settings: Settings
    http_client: httpx.AsyncClient
    fetcher: RepositoryFetcherPort
    cache: ReportCache


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """Manage shared adapter lifecycle — the composition root.

    Settings are loaded here so that a missing token stops the server at
    startup instead of failing on the first request.
    """
    settings = load_settings()
    async with build_http_client(settings) as http_client:
        yield AppContext(
            settings=settings,
            http_client=http_client,
            fetcher=GitHubFetcher.from_settings(http_client, settings),
            cache=ReportCache(ttl_seconds=settings.cache_ttl_seconds),
        )


mcp = FastMCP(
    "doc-quality",
    instructions=(
        "doc-quality scores the documentation of public GitHub repositories on five "
        "dimensions: completeness (key files present), normativeness (Markdown "
        "structure), readability (images and lists), timeliness (days since last "
        "push) and usability (install commands and usage examples).\n\n"
        "- **analyze_repository** — score one repository by URL or owner/repo.\n"
        "- **analyze_repositories** — score several; failures are reported per item.\n"
        "- **compare_repositories** — score two repositories and show per-dimension "
        "deltas (head minus base).\n"
        "- **export_reports** — score repositories and write the reports to a JSON "
        "or CSV file.\n\n"
        "Each dimension carries a details string naming what drove its score. "
        "When presenting results, lead with the total score and the weakest "
        "dimensions, and quote their details as concrete suggestions."
    ),
    lifespan=app_lifespan,
)

# ─── Read-only tools ──────────────────────────────────────────
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(analyze_repository)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(analyze_repositories)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(compare_repositories)

# ─── Tools that write files ───────────────────────────────────
mcp.tool(annotations=ToolAnnotations(destructiveHint=True))(export_reports)
