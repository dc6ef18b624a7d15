"""export_reports tool -- analyze repositories and write the reports to disk."""

from __future__ import annotations

from mcp.server.fastmcp import Context

from doc_quality.analysis.service import analyze_batch
from doc_quality.errors import DocQualityError, ExportError
from doc_quality.reporting.export import EXPORT_FORMATS, write_reports
from doc_quality.tools._helpers import get_context


async def export_reports(
    repositories: list[str],
    output_path: str,
    ctx: Context,
    format: str = "json",
) -> dict[str, object]:
    """Analyze repositories and save their reports as a JSON or CSV file.

    Only successful analyses are written; failures are listed in the result.

    Args:
        repositories: GitHub URLs or "owner/repo" identifiers.
        output_path: Destination file path. Parent directories are created.
        format: "json" (list of report objects) or "csv" (one row per
            repository, score and details columns per dimension).

    Returns:
        Dict with: path written, format, exported count, and failed items.
    """
    try:
        if format.lower() not in EXPORT_FORMATS:
            raise ExportError(
                f"Unknown export format '{format}'. Supported: {', '.join(EXPORT_FORMATS)}."
            )
        app = get_context(ctx)
        result = await analyze_batch(
            repositories,
            app.fetcher,
            concurrency=app.settings.batch_concurrency,
            install_keywords=app.settings.install_keywords,
            cache=app.cache,
        )
        if not result.succeeded:
            return {
                "success": False,
                "error": "No repository could be analyzed; nothing was written.",
                "failed": result.to_dict()["failed"],
            }

        written = write_reports(result.succeeded, output_path, format)
        return {
            "success": True,
            "path": str(written),
            "format": format.lower(),
            "exported": len(result.succeeded),
            "failed": result.to_dict()["failed"],
        }

    except DocQualityError as exc:
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        await ctx.error(f"Unexpected error in export_reports: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}
