"""compare_repositories tool -- per-dimension score deltas between two repositories."""

from __future__ import annotations

import asyncio

from mcp.server.fastmcp import Context

from doc_quality.analysis.service import analyze
from doc_quality.errors import DocQualityError
from doc_quality.reporting.compare import compare_reports
from doc_quality.tools._helpers import get_context


async def compare_repositories(
    base: str,
    head: str,
    ctx: Context,
) -> dict[str, object]:
    """Analyze two repositories and report how their scores differ.

    Deltas are computed as head minus base, so a positive delta means the
    head repository scores higher on that dimension.

    Args:
        base: GitHub URL or "owner/repo" of the reference repository.
        head: GitHub URL or "owner/repo" of the repository to compare.

    Returns:
        Dict with: base and head reports, and comparison (totals, total
        delta, and before/after/delta per dimension).
    """
    try:
        app = get_context(ctx)
        base_report, head_report = await asyncio.gather(
            analyze(
                base,
                app.fetcher,
                install_keywords=app.settings.install_keywords,
                cache=app.cache,
            ),
            analyze(
                head,
                app.fetcher,
                install_keywords=app.settings.install_keywords,
                cache=app.cache,
            ),
        )
        comparison = compare_reports(base_report, head_report)
        return {
            "success": True,
            "base": base_report.to_dict(),
            "head": head_report.to_dict(),
            "comparison": comparison.to_dict(),
        }

    except DocQualityError as exc:
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        await ctx.error(f"Unexpected error in compare_repositories: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}
