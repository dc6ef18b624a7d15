"""Serialize quality reports to JSON or CSV files, written atomically."""

from __future__ import annotations

import contextlib
import csv
import io
import json
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from doc_quality.errors import ExportError
from doc_quality.models import Dimension, QualityReport

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv")


def csv_header() -> list[str]:
    header = ["repo", "total_score"]
    for dimension in Dimension:
        header += [f"{dimension.value}_score", f"{dimension.value}_details"]
    return header


def reports_to_csv(reports: Sequence[QualityReport]) -> str:
    """One row per report, one score/details column pair per dimension."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(csv_header())
    for report in reports:
        row: list[object] = [report.repo, report.total_score]
        for dimension in Dimension:
            result = report.dimensions.get(dimension.value)
            row += [result.score, result.details] if result else ["", ""]
        writer.writerow(row)
    return buffer.getvalue()


def reports_to_json(reports: Sequence[QualityReport]) -> str:
    data = [report.to_dict() for report in reports]
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _atomic_write(path: Path, content: str) -> None:
    """Write *content* to disk atomically via tempfile + os.replace."""
    fd = None
    tmp_path: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp", prefix=".doc-quality_")
        os.write(fd, content.encode("utf-8"))
        os.close(fd)
        fd = None
        os.replace(tmp_path, str(path))
        tmp_path = None
    except OSError as exc:
        raise ExportError(f"Failed to write report file {path}: {exc}") from exc
    finally:
        if fd is not None:
            os.close(fd)
        if tmp_path is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)


def write_reports(
    reports: Sequence[QualityReport],
    path: Path | str,
    fmt: str = "json",
) -> Path:
    """Write *reports* to *path* as ``json`` or ``csv``. Returns the resolved path.

    Raises:
        ExportError: Unknown format or the file could not be written.
    """
    fmt = fmt.lower()
    if fmt not in EXPORT_FORMATS:
        raise ExportError(
            f"Unknown export format '{fmt}'. Supported: {', '.join(EXPORT_FORMATS)}."
        )
    target = Path(path).expanduser()
    content = reports_to_json(reports) if fmt == "json" else reports_to_csv(reports)
    _atomic_write(target, content)
    logger.info("Wrote %d report(s) to %s", len(reports), target)
    return target.resolve()
