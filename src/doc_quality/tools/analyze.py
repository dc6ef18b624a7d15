"""analyze_repository / analyze_repositories tools -- score documentation quality."""

from __future__ import annotations

from mcp.server.fastmcp import Context

from doc_quality.analysis.service import analyze_batch, analyze_with_cache_status
from doc_quality.errors import DocQualityError
from doc_quality.tools._helpers import get_context


async def analyze_repository(
    repository: str,
    ctx: Context,
    use_cache: bool = True,
) -> dict[str, object]:
    """Score the documentation quality of a GitHub repository.

    Fetches repository metadata, the root file listing, README and
    CONTRIBUTING, then scores five dimensions: completeness (0.30),
    normativeness (0.20), readability (0.20), timeliness (0.15) and
    usability (0.15).

    Args:
        repository: GitHub URL (e.g. "https://github.com/psf/requests")
            or "owner/repo".
        use_cache: Reuse a recent report for the same repository.

    Returns:
        Dict with success flag and data: {repo, totalScore, dimensions}.
        Each dimension has a score (0-100) and a details string.
    """
    try:
        app = get_context(ctx)
        report, cached = await analyze_with_cache_status(
            repository,
            app.fetcher,
            install_keywords=app.settings.install_keywords,
            cache=app.cache,
            refresh=not use_cache,
        )
        return {"success": True, "data": report.to_dict(), "cached": cached}

    except DocQualityError as exc:
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        await ctx.error(f"Unexpected error in analyze_repository: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}


async def analyze_repositories(
    repositories: list[str],
    ctx: Context,
) -> dict[str, object]:
    """Score several repositories at once.

    Each repository is analyzed independently; failures are reported per
    item and do not stop the rest of the batch.

    Args:
        repositories: GitHub URLs or "owner/repo" identifiers.

    Returns:
        Dict with: succeeded (list of reports), failed (list of
        {repository, error}), and total/succeeded/failed counts.
    """
    try:
        app = get_context(ctx)
        result = await analyze_batch(
            repositories,
            app.fetcher,
            concurrency=app.settings.batch_concurrency,
            install_keywords=app.settings.install_keywords,
            cache=app.cache,
        )
        output = result.to_dict()
        output["success"] = True
        output["total"] = len(repositories)
        output["succeeded_count"] = len(result.succeeded)
        output["failed_count"] = len(result.failed)
        return output

    except DocQualityError as exc:
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        await ctx.error(f"Unexpected error in analyze_repositories: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}
