"""Fetch repository metadata, root listing and key documents from the GitHub API."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
import time
from datetime import UTC, datetime

import httpx

from doc_quality.config import Settings
from doc_quality.errors import (
    AuthError,
    NetworkError,
    NotFoundError,
    TransientFetchError,
)
from doc_quality.models import (
    FetchedContent,
    RepoEntry,
    RepositoryMetadata,
    RepositoryReference,
    RepositorySnapshot,
)

logger = logging.getLogger(__name__)

_README_RE = re.compile(r"^readme", re.IGNORECASE)
_CONTRIBUTING_RE = re.compile(r"^contributing", re.IGNORECASE)


# ─── HTTP client ───────────────────────────────────────────


def github_headers(settings: Settings) -> dict[str, str]:
    return {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {settings.token}",
        "User-Agent": settings.user_agent,
    }


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared client: auth headers, bounded timeout, retrying transport."""
    return httpx.AsyncClient(
        headers=github_headers(settings),
        timeout=httpx.Timeout(
            settings.timeout_seconds, connect=min(settings.timeout_seconds, 10.0)
        ),
        follow_redirects=True,
        limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        transport=httpx.AsyncHTTPTransport(retries=3),
    )


# ─── Response parsing ──────────────────────────────────────


def _parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO 8601 timestamp such as ``2026-02-15T10:00:00Z``.

    Values without an offset are taken as UTC.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def _parse_metadata(data: dict, reference: RepositoryReference) -> RepositoryMetadata:
    pushed_at = _parse_timestamp(data.get("pushed_at"))
    if pushed_at is None:
        logger.warning(
            "No usable pushed_at for %s (got %r)", reference.full_name, data.get("pushed_at")
        )
    return RepositoryMetadata(
        full_name=data.get("full_name") or reference.full_name,
        pushed_at=pushed_at,
        default_branch=data.get("default_branch") or "",
        html_url=data.get("html_url") or "",
    )


def _parse_listing(data: list) -> tuple[RepoEntry, ...]:
    entries = []
    for item in data:
        if not isinstance(item, dict) or not item.get("name"):
            continue
        entries.append(RepoEntry(name=str(item["name"]), url=str(item.get("url") or "")))
    return tuple(entries)


def find_entry(entries: tuple[RepoEntry, ...], pattern: re.Pattern[str]) -> RepoEntry | None:
    """First entry (in listing order) whose name matches *pattern*."""
    for entry in entries:
        if pattern.match(entry.name):
            return entry
    return None


def decode_content(data: object) -> str:
    """Decode a contents-API file payload ``{content, encoding: "base64"}``.

    Raises:
        TransientFetchError: If the payload is not base64 content.
    """
    if not isinstance(data, dict):
        raise TransientFetchError("unexpected file payload")
    content = data.get("content")
    if not content or data.get("encoding") != "base64":
        raise TransientFetchError(f"no base64 content (encoding={data.get('encoding')!r})")
    try:
        raw = base64.b64decode(content)
    except (binascii.Error, ValueError) as exc:
        raise TransientFetchError(f"invalid base64 content: {exc}") from exc
    return raw.decode("utf-8", errors="replace")


# ─── Fetcher ───────────────────────────────────────────────


class GitHubFetcher:
    """Adapter for RepositoryFetcherPort — holds httpx client."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        api_base: str = "https://api.github.com",
        file_timeout: float = 10.0,
    ) -> None:
        self._http = http_client
        self._api_base = api_base.rstrip("/")
        self._file_timeout = file_timeout
        self._rate_limit_reset = 0.0

    @classmethod
    def from_settings(cls, http_client: httpx.AsyncClient, settings: Settings) -> GitHubFetcher:
        return cls(
            http_client,
            api_base=settings.api_base,
            file_timeout=settings.file_timeout_seconds,
        )

    def repo_url(self, reference: RepositoryReference) -> str:
        return f"{self._api_base}/repos/{reference.owner}/{reference.repo}"

    async def fetch(self, reference: RepositoryReference) -> RepositorySnapshot:
        """Fetch metadata, listing and README/CONTRIBUTING content.

        Metadata and listing failures are fatal; the two document downloads
        run concurrently and each degrades to empty content on failure.
        """
        logger.info("[1/4] Connecting to repository %s", reference.full_name)
        metadata = await self.fetch_metadata(reference)

        logger.info("[2/4] Fetching root file listing for %s", reference.full_name)
        entries = await self.fetch_listing(reference)

        logger.info("[3/4] Downloading key documents for %s", reference.full_name)
        readme_entry = find_entry(entries, _README_RE)
        contributing_entry = find_entry(entries, _CONTRIBUTING_RE)
        readme, contributing = await asyncio.gather(
            self._fetch_entry(readme_entry),
            self._fetch_entry(contributing_entry),
        )

        return RepositorySnapshot(
            reference=reference,
            metadata=metadata,
            entries=entries,
            readme=readme,
            contributing=contributing,
        )

    async def fetch_metadata(self, reference: RepositoryReference) -> RepositoryMetadata:
        data = await self._get_json(self.repo_url(reference), reference)
        if not isinstance(data, dict):
            raise NetworkError(f"Unexpected metadata response for {reference.full_name}.")
        return _parse_metadata(data, reference)

    async def fetch_listing(self, reference: RepositoryReference) -> tuple[RepoEntry, ...]:
        data = await self._get_json(f"{self.repo_url(reference)}/contents", reference)
        if not isinstance(data, list):
            raise NetworkError(f"Unexpected contents listing for {reference.full_name}.")
        return _parse_listing(data)

    async def fetch_file_content(self, file_url: str) -> FetchedContent:
        """Download and decode one file. Never raises: failures become FETCH_FAILED."""
        try:
            text = await asyncio.wait_for(self._download(file_url), timeout=self._file_timeout)
        except TimeoutError:
            logger.warning("File download timed out after %ss: %s", self._file_timeout, file_url)
            return FetchedContent.failed()
        except TransientFetchError as exc:
            logger.warning("File download failed: %s (%s)", file_url, exc)
            return FetchedContent.failed()
        return FetchedContent.present(text)

    async def _fetch_entry(self, entry: RepoEntry | None) -> FetchedContent:
        if entry is None:
            return FetchedContent.absent()
        if not entry.url:
            logger.warning("No API URL for %s; treating as unavailable", entry.name)
            return FetchedContent.failed()
        return await self.fetch_file_content(entry.url)

    async def _download(self, file_url: str) -> str:
        try:
            resp = await self._http.get(file_url)
        except httpx.HTTPError as exc:
            raise TransientFetchError(f"{type(exc).__name__}: {exc}") from exc
        if resp.status_code != 200:
            raise TransientFetchError(f"HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise TransientFetchError("response is not JSON") from exc
        return decode_content(data)

    def _note_rate_limit(self, resp: httpx.Response, reference: RepositoryReference) -> None:
        """Warn once per reset window, tracked from ``X-RateLimit-Reset``."""
        already_warned = time.monotonic() < self._rate_limit_reset
        try:
            reset_epoch = int(resp.headers.get("X-RateLimit-Reset", "0"))
        except ValueError:
            reset_epoch = 0
        self._rate_limit_reset = time.monotonic() + max(0, reset_epoch - time.time())

        if already_warned:
            return
        logger.warning(
            "GitHub API rate limit exhausted while fetching %s; resets in %ds.",
            reference.full_name,
            max(0, reset_epoch - int(time.time())),
        )

    async def _get_json(self, url: str, reference: RepositoryReference) -> object:
        """GET *url* and map failures onto the fatal error taxonomy."""
        try:
            resp = await self._http.get(url)
        except httpx.HTTPError as exc:
            logger.error("Request to %s failed: %s", url, exc)
            raise NetworkError(
                f"Network connection failed while fetching {reference.full_name}: "
                f"{type(exc).__name__}"
            ) from exc

        if resp.status_code == 404:
            raise NotFoundError(
                f"Repository {reference.full_name} not found. Check that the link is correct."
            )
        if resp.status_code == 401:
            raise AuthError("GitHub rejected the token. Check the configured GITHUB_TOKEN.")
        if resp.status_code == 403 and resp.headers.get("X-RateLimit-Remaining") == "0":
            self._note_rate_limit(resp, reference)
            raise NetworkError("GitHub API rate limit exhausted. Try again after the limit resets.")
        if resp.status_code >= 400:
            logger.error("GitHub API returned HTTP %s for %s", resp.status_code, url)
            raise NetworkError(
                f"GitHub API returned HTTP {resp.status_code} for {reference.full_name}."
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise NetworkError(f"GitHub API returned invalid JSON for {url}.") from exc

