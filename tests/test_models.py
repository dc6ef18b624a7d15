"""Tests for domain models (models.py)."""

from __future__ import annotations

import pytest

from doc_quality.models import (
    ContentStatus,
    DimensionResult,
    FetchedContent,
    QualityReport,
    RepositoryMetadata,
    RepositoryReference,
    RepositorySnapshot,
)


class TestFetchedContent:
    def test_present(self) -> None:
        content = FetchedContent.present("hello")
        assert content.status is ContentStatus.PRESENT
        assert content.as_text() == "hello"

    @pytest.mark.parametrize("content", [FetchedContent.absent(), FetchedContent.failed()])
    def test_unavailable_collapses_to_empty(self, content: FetchedContent) -> None:
        assert content.as_text() == ""

    def test_statuses_stay_distinct(self) -> None:
        assert FetchedContent.absent() != FetchedContent.failed()


class TestSnapshot:
    def test_defaults_to_absent_documents(self) -> None:
        ref = RepositoryReference("octo", "demo")
        snapshot = RepositorySnapshot(reference=ref, metadata=RepositoryMetadata("octo/demo"))
        assert snapshot.readme.status is ContentStatus.ABSENT
        assert snapshot.contributing.status is ContentStatus.ABSENT
        assert snapshot.file_names == []


class TestQualityReport:
    def test_frozen(self) -> None:
        report = QualityReport(repo="a/b", total_score=1.0)
        with pytest.raises(AttributeError):
            report.total_score = 2.0  # type: ignore[misc]

    def test_dimensions_are_read_only(self) -> None:
        report = QualityReport(
            repo="a/b", total_score=1.0, dimensions={"usability": DimensionResult(50, "x")}
        )
        with pytest.raises(TypeError):
            report.dimensions["usability"] = DimensionResult(100, "y")  # type: ignore[index]

    def test_input_mapping_is_copied(self) -> None:
        dims = {"usability": DimensionResult(50, "x")}
        report = QualityReport(repo="a/b", total_score=1.0, dimensions=dims)
        dims["extra"] = DimensionResult(0, "z")
        assert "extra" not in report.dimensions

    def test_to_dict(self) -> None:
        report = QualityReport(
            repo="a/b", total_score=7.5, dimensions={"usability": DimensionResult(50, "x")}
        )
        assert report.to_dict() == {
            "repo": "a/b",
            "totalScore": 7.5,
            "dimensions": {"usability": {"score": 50, "details": "x"}},
        }
