"""Compare two quality reports dimension by dimension."""

from __future__ import annotations

from doc_quality.models import Dimension, DimensionDelta, QualityReport, ReportComparison


def _delta(before: float, after: float) -> float:
    return round(after - before, 1)


def compare_reports(base: QualityReport, head: QualityReport) -> ReportComparison:
    """Compute ``head - base`` for the total and for every dimension.

    Dimensions missing from a report count as 0. Known dimensions come first
    in their fixed order; any extra names follow alphabetically.
    """
    names = [d.value for d in Dimension]
    extras = sorted((set(base.dimensions) | set(head.dimensions)) - set(names))

    deltas: list[DimensionDelta] = []
    for name in names + extras:
        before = base.dimensions[name].score if name in base.dimensions else 0.0
        after = head.dimensions[name].score if name in head.dimensions else 0.0
        deltas.append(
            DimensionDelta(dimension=name, before=before, after=after, delta=_delta(before, after))
        )

    return ReportComparison(
        base_repo=base.repo,
        head_repo=head.repo,
        base_total=base.total_score,
        head_total=head.total_score,
        total_delta=_delta(base.total_score, head.total_score),
        dimensions=deltas,
    )
