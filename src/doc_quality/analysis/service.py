"""Analyze repositories: validate, fetch, score -- singly or in batches."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from doc_quality.analysis.cache import ReportCache
from doc_quality.errors import DocQualityError
from doc_quality.fetcher.base import RepositoryFetcherPort
from doc_quality.fetcher.reference import parse_repository_reference
from doc_quality.models import BatchFailure, BatchResult, QualityReport
from doc_quality.scoring.checks import DEFAULT_INSTALL_KEYWORDS
from doc_quality.scoring.scorer import score_snapshot

logger = logging.getLogger(__name__)


async def analyze(
    identifier: str,
    fetcher: RepositoryFetcherPort,
    *,
    now: datetime | None = None,
    install_keywords: Sequence[str] = DEFAULT_INSTALL_KEYWORDS,
    cache: ReportCache | None = None,
    refresh: bool = False,
) -> QualityReport:
    """Produce a QualityReport for one repository URL or ``owner/repo``.

    The identifier is validated before any network call. Cached reports are
    returned as-is while fresh unless *refresh* is set; a refreshed report
    still replaces the cached one.

    Raises:
        InputError: Malformed identifier.
        NotFoundError, AuthError, NetworkError: Metadata or listing fetch failed.
    """
    report, _ = await analyze_with_cache_status(
        identifier,
        fetcher,
        now=now,
        install_keywords=install_keywords,
        cache=cache,
        refresh=refresh,
    )
    return report


async def analyze_with_cache_status(
    identifier: str,
    fetcher: RepositoryFetcherPort,
    *,
    now: datetime | None = None,
    install_keywords: Sequence[str] = DEFAULT_INSTALL_KEYWORDS,
    cache: ReportCache | None = None,
    refresh: bool = False,
) -> tuple[QualityReport, bool]:
    """Like analyze, but also report whether the result came from *cache*."""
    reference = parse_repository_reference(identifier)

    if cache is not None and not refresh:
        cached = cache.get(reference.cache_key)
        if cached is not None:
            logger.info("Cache hit for %s", reference.full_name)
            return cached, True

    snapshot = await fetcher.fetch(reference)

    logger.info("[4/4] Scoring documentation quality for %s", reference.full_name)
    report = score_snapshot(
        snapshot,
        now=now or datetime.now(tz=UTC),
        install_keywords=install_keywords,
    )

    if cache is not None:
        cache.set(reference.cache_key, report)
    return report, False


async def analyze_batch(
    identifiers: Sequence[str],
    fetcher: RepositoryFetcherPort,
    *,
    concurrency: int = 5,
    now: datetime | None = None,
    install_keywords: Sequence[str] = DEFAULT_INSTALL_KEYWORDS,
    cache: ReportCache | None = None,
) -> BatchResult:
    """Analyze several repositories concurrently, partitioning successes and failures.

    A failure on one identifier never affects the others. Both lists keep
    the input order.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))
    moment = now or datetime.now(tz=UTC)

    async def _one(identifier: str) -> QualityReport | BatchFailure:
        async with semaphore:
            try:
                return await analyze(
                    identifier,
                    fetcher,
                    now=moment,
                    install_keywords=install_keywords,
                    cache=cache,
                )
            except DocQualityError as exc:
                logger.warning("Analysis failed for %s: %s", identifier, exc)
                return BatchFailure(repository=identifier, error=str(exc))
            except Exception as exc:
                logger.exception("Unexpected error analyzing %s", identifier)
                return BatchFailure(
                    repository=identifier, error=f"Internal error: {type(exc).__name__}"
                )

    outcomes = await asyncio.gather(*(_one(i) for i in identifiers))

    succeeded = [o for o in outcomes if isinstance(o, QualityReport)]
    failed = [o for o in outcomes if isinstance(o, BatchFailure)]
    return BatchResult(succeeded=succeeded, failed=failed)
