"""The five documentation-quality checks. Pure functions, no I/O."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from doc_quality.models import DimensionResult

DEFAULT_INSTALL_KEYWORDS: tuple[str, ...] = (
    "npm install",
    "pip install",
    "go get",
    "cargo build",
    "yarn add",
)

# (label, filename prefix) -- matched case-insensitively against root entries
KEY_FILES: tuple[tuple[str, str], ...] = (
    ("README", "readme"),
    ("LICENSE", "license"),
    ("CONTRIBUTING", "contributing"),
    ("CODE_OF_CONDUCT", "code_of_conduct"),
)

_NO_CONTENT = "No content detected or download failed"

_H1_RE = re.compile(r"^#\s", re.MULTILINE)
_H2_RE = re.compile(r"^##\s", re.MULTILINE)
_CODE_BLOCK_RE = re.compile(r"```.*?```", re.DOTALL)
_MD_IMAGE_RE = re.compile(r"!\[.*?\]\(.*?\)")
_HTML_IMAGE_RE = re.compile(r"<img", re.IGNORECASE)
_LIST_RE = re.compile(r"^(\*|-|\d+\.)\s", re.MULTILINE)
_USAGE_RE = re.compile(r"usage|example|demo", re.IGNORECASE)


def has_prefix(file_names: Iterable[str], prefix: str) -> bool:
    """True if any name starts with *prefix*, ignoring case."""
    prefix = prefix.lower()
    return any(name.lower().startswith(prefix) for name in file_names)


def check_completeness(file_names: Sequence[str]) -> DimensionResult:
    """Score the presence of README, LICENSE, CONTRIBUTING and CODE_OF_CONDUCT."""
    missing = [label for label, prefix in KEY_FILES if not has_prefix(file_names, prefix)]
    found = len(KEY_FILES) - len(missing)
    score = found / len(KEY_FILES) * 100
    if missing:
        details = f"Missing files: {', '.join(missing)}"
    else:
        details = "All key files present"
    return DimensionResult(score=score, details=details)


def check_normativeness(content: str) -> DimensionResult:
    """Score Markdown structure: headings and fenced code blocks.

    Base 60, +10 for a level-1 heading, +10 for a level-2 heading,
    +20 for a fenced code block, capped at 100.
    """
    if not content:
        return DimensionResult(score=0, details=_NO_CONTENT)

    has_code_block = bool(_CODE_BLOCK_RE.search(content))
    score = 60
    if _H1_RE.search(content):
        score += 10
    if _H2_RE.search(content):
        score += 10
    if has_code_block:
        score += 20

    if has_code_block:
        details = "Well-formed Markdown"
    else:
        details = "Missing code blocks or unclear heading hierarchy"
    return DimensionResult(score=min(100, score), details=details)


def check_readability(content: str) -> DimensionResult:
    """Score visual aids: base 50, +30 for an image, +20 for a list."""
    if not content:
        return DimensionResult(score=0, details=_NO_CONTENT)

    has_images = bool(_MD_IMAGE_RE.search(content) or _HTML_IMAGE_RE.search(content))
    score = 50
    if has_images:
        score += 30
    if _LIST_RE.search(content):
        score += 20

    details = "Rich with visuals" if has_images else "Recommend adding images or diagrams"
    return DimensionResult(score=min(100, score), details=details)


def timeliness_score(days: int) -> int:
    """Step function of days since the last push."""
    if days > 365:
        return 40
    if days > 180:
        return 60
    if days > 90:
        return 80
    return 100


def _as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken as UTC so they compare with aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def check_timeliness(pushed_at: datetime | None, now: datetime) -> DimensionResult:
    """Score recency of the last push relative to *now*, in whole days."""
    if pushed_at is None:
        return DimensionResult(score=40, details="Last push time unknown")
    days = (_as_utc(now) - _as_utc(pushed_at)).days
    return DimensionResult(score=timeliness_score(days), details=f"Last push {days} days ago")


def _install_pattern(keywords: Iterable[str]) -> re.Pattern[str] | None:
    alternatives = [re.escape(k) for k in keywords if k]
    if not alternatives:
        return None
    return re.compile("|".join(alternatives), re.IGNORECASE)


def check_usability(
    content: str,
    install_keywords: Sequence[str] = DEFAULT_INSTALL_KEYWORDS,
) -> DimensionResult:
    """Score getting-started material: base 50, +30 install command, +20 usage words."""
    if not content:
        return DimensionResult(score=0, details=_NO_CONTENT)

    pattern = _install_pattern(install_keywords)
    has_install = bool(pattern and pattern.search(content))
    score = 50
    if has_install:
        score += 30
    if _USAGE_RE.search(content):
        score += 20

    if has_install:
        details = "Includes install/run commands"
    else:
        details = "Missing explicit install or run instructions"
    return DimensionResult(score=min(100, score), details=details)
