"""Exception hierarchy for doc-quality.

All exceptions inherit from DocQualityError (single catch point).
Messages are written for the person running the analysis -- clear and actionable.
"""

from __future__ import annotations


class DocQualityError(Exception):
    """Base exception for all doc-quality errors."""


class ConfigError(DocQualityError):
    """Settings could not be loaded (missing token, bad config file)."""


class InputError(DocQualityError):
    """Repository identifier does not look like owner/repo."""


class NotFoundError(DocQualityError):
    """The hosting API reports no such repository."""


class AuthError(DocQualityError):
    """The hosting API rejected the configured credentials."""


class NetworkError(DocQualityError):
    """Metadata or file listing could not be fetched."""


class TransientFetchError(DocQualityError):
    """A single file download failed. Never escapes the fetcher."""


class ExportError(DocQualityError):
    """A report file could not be written."""
