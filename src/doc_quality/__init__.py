"""doc-quality: weighted documentation-quality scores for GitHub repositories."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _distribution_version

_LOCAL_VERSION_FALLBACK = "0.0.0+local"


def _resolve_version() -> str:
    """Installed distribution version, or a local marker when running from a checkout."""
    try:
        return _distribution_version("doc-quality")
    except PackageNotFoundError:
        return _LOCAL_VERSION_FALLBACK


__version__ = _resolve_version()


def main() -> None:
    """Serve the doc-quality tools over stdio."""
    from doc_quality.server import mcp

    mcp.run(transport="stdio")
