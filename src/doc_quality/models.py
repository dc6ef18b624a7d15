"""Domain models for doc-quality. All frozen dataclasses -- no mutation after creation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from types import MappingProxyType

# ─── Enumerations ─────────────────────────────────────────────


class Dimension(StrEnum):
    COMPLETENESS = "completeness"
    NORMATIVENESS = "normativeness"
    READABILITY = "readability"
    TIMELINESS = "timeliness"
    USABILITY = "usability"


class ContentStatus(StrEnum):
    PRESENT = "present"
    ABSENT = "absent"
    FETCH_FAILED = "fetch_failed"


# ─── Repository Models ────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RepositoryReference:
    """A remote repository, identified by owner and name."""

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def cache_key(self) -> str:
        return self.full_name.lower()


@dataclass(frozen=True, slots=True)
class RepoEntry:
    """A root-level entry of the repository contents listing."""

    name: str
    url: str = ""


@dataclass(frozen=True, slots=True)
class RepositoryMetadata:
    """The subset of repository metadata the scorer consumes."""

    full_name: str
    pushed_at: datetime | None = None
    default_branch: str = ""
    html_url: str = ""


@dataclass(frozen=True, slots=True)
class FetchedContent:
    """Text of one documentation file, tagged with how it was obtained.

    Absent and failed content both collapse to "" at the scoring boundary.
    """

    status: ContentStatus
    text: str = ""

    @classmethod
    def present(cls, text: str) -> FetchedContent:
        return cls(status=ContentStatus.PRESENT, text=text)

    @classmethod
    def absent(cls) -> FetchedContent:
        return cls(status=ContentStatus.ABSENT)

    @classmethod
    def failed(cls) -> FetchedContent:
        return cls(status=ContentStatus.FETCH_FAILED)

    def as_text(self) -> str:
        if self.status is ContentStatus.PRESENT:
            return self.text
        return ""


@dataclass(frozen=True, slots=True)
class RepositorySnapshot:
    """Everything fetched for one analysis, at one point in time."""

    reference: RepositoryReference
    metadata: RepositoryMetadata
    entries: tuple[RepoEntry, ...] = ()
    readme: FetchedContent = field(default_factory=FetchedContent.absent)
    contributing: FetchedContent = field(default_factory=FetchedContent.absent)

    @property
    def file_names(self) -> list[str]:
        return [entry.name for entry in self.entries]


# ─── Report Models ────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class DimensionResult:
    score: float
    details: str

    def to_dict(self) -> dict[str, object]:
        return {"score": self.score, "details": self.details}


@dataclass(frozen=True, slots=True)
class QualityReport:
    """Weighted documentation-quality score for one repository."""

    repo: str
    total_score: float
    dimensions: Mapping[str, DimensionResult] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dimensions", MappingProxyType(dict(self.dimensions)))

    def to_dict(self) -> dict[str, object]:
        return {
            "repo": self.repo,
            "totalScore": self.total_score,
            "dimensions": {name: result.to_dict() for name, result in self.dimensions.items()},
        }


@dataclass(frozen=True, slots=True)
class BatchFailure:
    repository: str
    error: str


@dataclass(frozen=True, slots=True)
class BatchResult:
    succeeded: list[QualityReport] = field(default_factory=list)
    failed: list[BatchFailure] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "succeeded": [report.to_dict() for report in self.succeeded],
            "failed": [{"repository": f.repository, "error": f.error} for f in self.failed],
        }


@dataclass(frozen=True, slots=True)
class DimensionDelta:
    dimension: str
    before: float
    after: float
    delta: float


@dataclass(frozen=True, slots=True)
class ReportComparison:
    """Per-dimension movement from a base report to a head report."""

    base_repo: str
    head_repo: str
    base_total: float
    head_total: float
    total_delta: float
    dimensions: list[DimensionDelta] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "base": self.base_repo,
            "head": self.head_repo,
            "baseTotal": self.base_total,
            "headTotal": self.head_total,
            "totalDelta": self.total_delta,
            "dimensions": {
                d.dimension: {"before": d.before, "after": d.after, "delta": d.delta}
                for d in self.dimensions
            },
        }
