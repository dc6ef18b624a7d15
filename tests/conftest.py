"""Shared test fixtures."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

_ENV_VARS = (
    "DOC_QUALITY_CONFIG",
    "DOC_QUALITY_API_BASE",
    "DOC_QUALITY_TIMEOUT",
    "DOC_QUALITY_CACHE_TTL",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's doc-quality overrides out of the tests."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def now() -> datetime:
    """A fixed analysis time so timeliness is deterministic."""
    return datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
