"""Combine the five dimension checks into a weighted quality report."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from doc_quality.models import (
    Dimension,
    DimensionResult,
    QualityReport,
    RepositorySnapshot,
)
from doc_quality.scoring.checks import (
    DEFAULT_INSTALL_KEYWORDS,
    check_completeness,
    check_normativeness,
    check_readability,
    check_timeliness,
    check_usability,
)


@dataclass(frozen=True, slots=True)
class ScoringInput:
    """The shared input shape every check reads from."""

    file_names: Sequence[str]
    readme: str
    pushed_at: datetime | None
    now: datetime
    install_keywords: Sequence[str] = DEFAULT_INSTALL_KEYWORDS


@dataclass(frozen=True, slots=True)
class DimensionSpec:
    dimension: Dimension
    weight: float
    check: Callable[[ScoringInput], DimensionResult]


DIMENSIONS: tuple[DimensionSpec, ...] = (
    DimensionSpec(Dimension.COMPLETENESS, 0.30, lambda i: check_completeness(i.file_names)),
    DimensionSpec(Dimension.NORMATIVENESS, 0.20, lambda i: check_normativeness(i.readme)),
    DimensionSpec(Dimension.READABILITY, 0.20, lambda i: check_readability(i.readme)),
    DimensionSpec(Dimension.TIMELINESS, 0.15, lambda i: check_timeliness(i.pushed_at, i.now)),
    DimensionSpec(
        Dimension.USABILITY, 0.15, lambda i: check_usability(i.readme, i.install_keywords)
    ),
)

WEIGHTS: dict[str, float] = {spec.dimension.value: spec.weight for spec in DIMENSIONS}


def score_repository(
    repo: str,
    file_names: Sequence[str],
    readme: str,
    pushed_at: datetime | None,
    *,
    now: datetime,
    install_keywords: Sequence[str] = DEFAULT_INSTALL_KEYWORDS,
) -> QualityReport:
    """Run every check and aggregate into a QualityReport.

    Total = sum(score * weight) over the fixed dimension table, rounded to
    one decimal place. Never raises for empty or missing inputs.
    """
    inputs = ScoringInput(
        file_names=list(file_names),
        readme=readme or "",
        pushed_at=pushed_at,
        now=now,
        install_keywords=tuple(install_keywords),
    )

    results: dict[str, DimensionResult] = {}
    total = 0.0
    for spec in DIMENSIONS:
        result = spec.check(inputs)
        results[spec.dimension.value] = result
        total += result.score * spec.weight

    return QualityReport(repo=repo, total_score=round(total, 1), dimensions=results)


def score_snapshot(
    snapshot: RepositorySnapshot,
    *,
    now: datetime,
    install_keywords: Sequence[str] = DEFAULT_INSTALL_KEYWORDS,
) -> QualityReport:
    """Score a fetched snapshot. Absent and failed README content scores as empty."""
    return score_repository(
        snapshot.reference.full_name,
        snapshot.file_names,
        snapshot.readme.as_text(),
        snapshot.metadata.pushed_at,
        now=now,
        install_keywords=install_keywords,
    )
