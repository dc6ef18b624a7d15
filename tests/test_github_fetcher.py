"""Tests for the GitHub fetcher (fetcher/github.py)."""

from __future__ import annotations

import asyncio
import base64
import time
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import httpx
import pytest

from doc_quality.analysis.service import analyze
from doc_quality.config import Settings
from doc_quality.errors import AuthError, NetworkError, NotFoundError, TransientFetchError
from doc_quality.fetcher.github import (
    GitHubFetcher,
    build_http_client,
    decode_content,
    github_headers,
)
from doc_quality.models import ContentStatus, RepositoryReference

REF = RepositoryReference(owner="octo", repo="demo")
API = "https://api.github.com/repos/octo/demo"
README_URL = f"{API}/contents/README.md"
CONTRIB_URL = f"{API}/contents/CONTRIBUTING.md"


# ─── Helpers ─────────────────────────────────────────────────


def _json_response(
    data: object,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    return httpx.Response(status_code, json=data, headers=headers)


def _file_payload(text: str) -> dict[str, str]:
    return {"content": base64.b64encode(text.encode("utf-8")).decode(), "encoding": "base64"}


def _listing(*names: str) -> list[dict[str, str]]:
    return [{"name": n, "url": f"{API}/contents/{n}"} for n in names]


def _client(routes: dict[str, object]) -> AsyncMock:
    """Mock AsyncClient whose GET answers from *routes* (response or exception)."""

    async def _get(url: str, **kwargs: object) -> httpx.Response:
        outcome = routes[url]
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return await outcome()
        return outcome

    client = AsyncMock(spec=httpx.AsyncClient)
    client.get = AsyncMock(side_effect=_get)
    return client


def _happy_routes(**overrides: object) -> dict[str, object]:
    routes: dict[str, object] = {
        API: _json_response({"full_name": "octo/demo", "pushed_at": "2026-02-15T10:00:00Z"}),
        f"{API}/contents": _json_response(_listing("README.md", "LICENSE", "CONTRIBUTING.md")),
        README_URL: _json_response(_file_payload("# Demo\n")),
        CONTRIB_URL: _json_response(_file_payload("Be kind.")),
    }
    routes.update(overrides)
    return routes


# ─── Snapshot assembly ───────────────────────────────────────


class TestFetch:
    async def test_successful_fetch(self) -> None:
        fetcher = GitHubFetcher(_client(_happy_routes()))
        snapshot = await fetcher.fetch(REF)

        assert snapshot.reference == REF
        assert snapshot.metadata.full_name == "octo/demo"
        assert snapshot.metadata.pushed_at == datetime(2026, 2, 15, 10, 0, tzinfo=UTC)
        assert snapshot.file_names == ["README.md", "LICENSE", "CONTRIBUTING.md"]
        assert snapshot.readme.status is ContentStatus.PRESENT
        assert snapshot.readme.text == "# Demo\n"
        assert snapshot.contributing.as_text() == "Be kind."

    async def test_absent_documents_are_not_requested(self) -> None:
        client = _client(_happy_routes(**{f"{API}/contents": _json_response(_listing("LICENSE"))}))
        snapshot = await GitHubFetcher(client).fetch(REF)

        assert snapshot.readme.status is ContentStatus.ABSENT
        assert snapshot.contributing.status is ContentStatus.ABSENT
        requested = [call.args[0] for call in client.get.call_args_list]
        assert README_URL not in requested
        assert CONTRIB_URL not in requested

    async def test_document_lookup_is_case_insensitive_prefix(self) -> None:
        url = f"{API}/contents/readme.rst"
        routes = _happy_routes(
            **{
                f"{API}/contents": _json_response(_listing("docs", "readme.rst")),
                url: _json_response(_file_payload("Plain text readme")),
            }
        )
        snapshot = await GitHubFetcher(_client(routes)).fetch(REF)
        assert snapshot.readme.text == "Plain text readme"

    async def test_first_matching_readme_wins(self) -> None:
        first = f"{API}/contents/README.md"
        second = f"{API}/contents/README.zh.md"
        routes = _happy_routes(
            **{
                f"{API}/contents": _json_response(_listing("README.md", "README.zh.md")),
                second: _json_response(_file_payload("second")),
            }
        )
        client = _client(routes)
        await GitHubFetcher(client).fetch(REF)
        requested = [call.args[0] for call in client.get.call_args_list]
        assert first in requested
        assert second not in requested

    async def test_missing_pushed_at_is_tolerated(self) -> None:
        metadata = _json_response({"full_name": "octo/demo", "pushed_at": None})
        routes = _happy_routes(**{API: metadata})
        snapshot = await GitHubFetcher(_client(routes)).fetch(REF)
        assert snapshot.metadata.pushed_at is None

    async def test_pushed_at_without_offset_is_utc(self) -> None:
        metadata = _json_response({"full_name": "octo/demo", "pushed_at": "2025-01-01T00:00:00"})
        snapshot = await GitHubFetcher(_client(_happy_routes(**{API: metadata}))).fetch(REF)
        assert snapshot.metadata.pushed_at == datetime(2025, 1, 1, tzinfo=UTC)

    async def test_pushed_at_without_offset_scores_end_to_end(self, now) -> None:
        metadata = _json_response({"full_name": "octo/demo", "pushed_at": "2026-02-15T10:00:00"})
        fetcher = GitHubFetcher(_client(_happy_routes(**{API: metadata})))
        report = await analyze("octo/demo", fetcher, now=now)
        assert report.dimensions["timeliness"].score == 100
        assert report.dimensions["timeliness"].details == "Last push 14 days ago"

    async def test_progress_steps_are_numbered(self, now, caplog) -> None:
        fetcher = GitHubFetcher(_client(_happy_routes()))
        with caplog.at_level("INFO", logger="doc_quality"):
            await analyze("octo/demo", fetcher, now=now)
        messages = " ".join(r.getMessage() for r in caplog.records)
        for step in ("[1/4]", "[2/4]", "[3/4]", "[4/4]"):
            assert step in messages

    async def test_custom_api_base(self) -> None:
        base = "https://ghe.example.com/api/v3"
        client = _client({f"{base}/repos/octo/demo": httpx.Response(404)})
        with pytest.raises(NotFoundError):
            await GitHubFetcher(client, api_base=base + "/").fetch(REF)


# ─── Per-file fail-soft downloads ────────────────────────────


class TestFileFailures:
    async def test_transport_error_degrades_one_file(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        routes = _happy_routes(**{README_URL: httpx.ConnectError("connection reset")})
        snapshot = await GitHubFetcher(_client(routes)).fetch(REF)

        assert snapshot.readme.status is ContentStatus.FETCH_FAILED
        assert snapshot.readme.as_text() == ""
        assert snapshot.contributing.as_text() == "Be kind."
        assert any("File download failed" in r.getMessage() for r in caplog.records)

    async def test_both_downloads_fail_without_raising(self) -> None:
        routes = _happy_routes(
            **{
                README_URL: httpx.ReadTimeout("slow"),
                CONTRIB_URL: _json_response({"message": "Server Error"}, 500),
            }
        )
        snapshot = await GitHubFetcher(_client(routes)).fetch(REF)
        assert snapshot.readme.status is ContentStatus.FETCH_FAILED
        assert snapshot.contributing.status is ContentStatus.FETCH_FAILED

    async def test_download_timeout(self) -> None:
        async def _slow() -> httpx.Response:
            await asyncio.sleep(1)
            return _json_response(_file_payload("late"))

        routes = _happy_routes(**{README_URL: _slow})
        snapshot = await GitHubFetcher(_client(routes), file_timeout=0.01).fetch(REF)
        assert snapshot.readme.status is ContentStatus.FETCH_FAILED
        assert snapshot.contributing.status is ContentStatus.PRESENT

    async def test_downloads_run_concurrently(self) -> None:
        started: list[str] = []
        both_started = asyncio.Event()

        def _waiting(name: str, text: str):
            async def _respond() -> httpx.Response:
                started.append(name)
                if len(started) == 2:
                    both_started.set()
                await asyncio.wait_for(both_started.wait(), timeout=1)
                return _json_response(_file_payload(text))

            return _respond

        routes = _happy_routes(
            **{README_URL: _waiting("readme", "R"), CONTRIB_URL: _waiting("contrib", "C")}
        )
        snapshot = await GitHubFetcher(_client(routes)).fetch(REF)
        assert snapshot.readme.text == "R"
        assert snapshot.contributing.text == "C"

    async def test_non_json_file_response(self) -> None:
        routes = _happy_routes(**{README_URL: httpx.Response(200, text="<html>")})
        snapshot = await GitHubFetcher(_client(routes)).fetch(REF)
        assert snapshot.readme.status is ContentStatus.FETCH_FAILED

    async def test_fetch_file_content_directly(self) -> None:
        fetcher = GitHubFetcher(_client({README_URL: _json_response(_file_payload("ok"))}))
        content = await fetcher.fetch_file_content(README_URL)
        assert content.as_text() == "ok"


class TestDecodeContent:
    def test_decodes_wrapped_base64(self) -> None:
        encoded = base64.b64encode("héllo wörld".encode()).decode()
        wrapped = "\n".join(encoded[i : i + 4] for i in range(0, len(encoded), 4))
        assert decode_content({"content": wrapped, "encoding": "base64"}) == "héllo wörld"

    @pytest.mark.parametrize(
        "payload",
        [
            {"content": "", "encoding": "base64"},
            {"content": "abc", "encoding": "none"},
            {"encoding": "base64"},
            {"content": "abc", "encoding": "base64"},
            ["not", "a", "dict"],
        ],
    )
    def test_unusable_payloads_raise(self, payload: object) -> None:
        with pytest.raises(TransientFetchError):
            decode_content(payload)


# ─── Fatal metadata / listing failures ───────────────────────


class TestFatalErrors:
    async def test_repository_not_found(self) -> None:
        client = _client({API: _json_response({"message": "Not Found"}, 404)})
        with pytest.raises(NotFoundError, match="octo/demo"):
            await GitHubFetcher(client).fetch(REF)

    async def test_credentials_rejected(self) -> None:
        client = _client({API: _json_response({"message": "Bad credentials"}, 401)})
        with pytest.raises(AuthError):
            await GitHubFetcher(client).fetch(REF)

    async def test_rate_limited(self) -> None:
        resp = _json_response({"message": "rate limit"}, 403, {"X-RateLimit-Remaining": "0"})
        with pytest.raises(NetworkError, match="rate limit"):
            await GitHubFetcher(_client({API: resp})).fetch(REF)

    async def test_rate_limit_warning_once_per_reset_window(self, caplog) -> None:
        headers = {
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(int(time.time()) + 3600),
        }
        fetcher = GitHubFetcher(_client({API: _json_response({}, 403, headers)}))
        with caplog.at_level("WARNING", logger="doc_quality.fetcher.github"):
            for _ in range(2):
                with pytest.raises(NetworkError, match="rate limit"):
                    await fetcher.fetch(REF)

        warnings = [r for r in caplog.records if "rate limit" in r.getMessage()]
        assert len(warnings) == 1

    async def test_rate_limit_warns_again_after_reset(self, caplog) -> None:
        headers = {
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(int(time.time()) - 10),
        }
        fetcher = GitHubFetcher(_client({API: _json_response({}, 403, headers)}))
        with caplog.at_level("WARNING", logger="doc_quality.fetcher.github"):
            for _ in range(2):
                with pytest.raises(NetworkError):
                    await fetcher.fetch(REF)

        warnings = [r for r in caplog.records if "rate limit" in r.getMessage()]
        assert len(warnings) == 2

    async def test_server_error(self) -> None:
        client = _client({API: _json_response({}, 502)})
        with pytest.raises(NetworkError, match="502"):
            await GitHubFetcher(client).fetch(REF)

    async def test_transport_error_on_metadata(self) -> None:
        client = _client({API: httpx.ConnectError("Connection failed")})
        with pytest.raises(NetworkError):
            await GitHubFetcher(client).fetch(REF)

    async def test_listing_failure_is_fatal(self) -> None:
        routes = _happy_routes(**{f"{API}/contents": httpx.ReadTimeout("timed out")})
        with pytest.raises(NetworkError):
            await GitHubFetcher(_client(routes)).fetch(REF)

    async def test_listing_not_found(self) -> None:
        routes = _happy_routes(**{f"{API}/contents": httpx.Response(404)})
        with pytest.raises(NotFoundError):
            await GitHubFetcher(_client(routes)).fetch(REF)

    async def test_listing_must_be_a_list(self) -> None:
        routes = _happy_routes(**{f"{API}/contents": _json_response({"name": "README.md"})})
        with pytest.raises(NetworkError):
            await GitHubFetcher(_client(routes)).fetch(REF)

    async def test_invalid_json_metadata(self) -> None:
        client = _client({API: httpx.Response(200, text="not json")})
        with pytest.raises(NetworkError):
            await GitHubFetcher(client).fetch(REF)


# ─── HTTP client construction ────────────────────────────────


class TestHttpClient:
    def test_headers_carry_bearer_token(self) -> None:
        headers = github_headers(Settings(token="tkn"))
        assert headers["Authorization"] == "Bearer tkn"
        assert headers["Accept"] == "application/vnd.github+json"
        assert headers["User-Agent"] == "doc-quality"

    async def test_build_http_client(self) -> None:
        async with build_http_client(Settings(token="tkn", timeout_seconds=5.0)) as client:
            assert client.headers["Authorization"] == "Bearer tkn"
            assert client.timeout.read == 5.0
            assert client.timeout.connect == 5.0
            assert client.follow_redirects is True

    def test_from_settings(self) -> None:
        settings = Settings(token="t", api_base="https://example.test/", file_timeout_seconds=3.0)
        fetcher = GitHubFetcher.from_settings(AsyncMock(spec=httpx.AsyncClient), settings)
        assert fetcher.repo_url(REF) == "https://example.test/repos/octo/demo"
