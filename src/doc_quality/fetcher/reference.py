"""Parse repository identifiers into RepositoryReference values."""

from __future__ import annotations

import re

from doc_quality.errors import InputError
from doc_quality.models import RepositoryReference

_URL_RE = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/([^/\s]+)/([^/\s]+?)(?:\.git)?(?:[/?#].*)?$",
    re.IGNORECASE,
)
_SHORT_RE = re.compile(r"^([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+?)(?:\.git)?$")
_HOST_NAMES = frozenset({"github.com", "www.github.com"})


def parse_repository_reference(identifier: str) -> RepositoryReference:
    """Extract (owner, repo) from a GitHub URL or an ``owner/repo`` string.

    Handles:
    - https://github.com/owner/repo
    - https://github.com/owner/repo.git
    - https://github.com/owner/repo/tree/main/docs
    - github.com/owner/repo
    - owner/repo

    Raises:
        InputError: If the identifier matches none of the shapes above.
    """
    text = (identifier or "").strip()
    m = _URL_RE.match(text) or _SHORT_RE.match(text)
    if not m:
        raise InputError(
            f"Invalid repository identifier {identifier!r}. "
            "Expected https://github.com/<owner>/<repo> or <owner>/<repo>."
        )
    owner, repo = m.group(1), m.group(2)
    if owner.lower() in _HOST_NAMES or repo in (".", ".."):
        raise InputError(f"Invalid repository identifier {identifier!r}.")
    return RepositoryReference(owner=owner, repo=repo)
