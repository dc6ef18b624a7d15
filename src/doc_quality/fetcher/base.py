"""Port: fetching the documentation snapshot of a repository."""

from __future__ import annotations

from typing import Protocol

from doc_quality.models import RepositoryReference, RepositorySnapshot


class RepositoryFetcherPort(Protocol):
    """Port for retrieving metadata, root listing and key documents."""

    async def fetch(self, reference: RepositoryReference) -> RepositorySnapshot:
        """Fetch a snapshot; per-file failures degrade to empty content."""
        ...
