"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer.
Inner layers raise these; the outermost error-handler translates them.
"""

from __future__ import annotations

from enum import Enum


class LocViewerError(Exception):
    """Base exception for the entire application."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidRepositoryUrlReason(str, Enum):
    """Why a repository URL could not be turned into a RepositoryRef."""

    CANNOT_BE_BASE = "cannot be base"
    CANNOT_FIND_OWNER = "cannot find owner"
    CANNOT_FIND_REPO = "cannot find repo"


class InvalidRepositoryUrlError(LocViewerError):
    """The supplied URL does not point to a repository on the expected host."""

    def __init__(self, reason: InvalidRepositoryUrlReason, url: str = "") -> None:
        self.reason = reason
        self.url = url
        detail = f" ({url!r})" if url else ""
        super().__init__(f"Invalid repository URL{detail}: {reason.value}")


class ConfigurationError(LocViewerError):
    """Pipeline options are inconsistent (e.g. a non-positive concurrency)."""


# ── Remote API errors ───────────────────────────────────────────────────────


class RemoteApiError(LocViewerError):
    """Transport failure or unexpected response from the hosting API."""


class RepositoryNotFoundError(RemoteApiError):
    """The repository (or ref) does not exist or is not accessible (404)."""


class RepositoryAccessDeniedError(RemoteApiError):
    """Access to the repository was denied (403)."""


class GitHubRateLimitError(RemoteApiError):
    """GitHub API rate limit exceeded (429 / 403 with rate-limit header)."""


class EmptyRepositoryError(RemoteApiError):
    """The repository has no commits yet (409 on git endpoints)."""


class TreeTruncatedError(LocViewerError):
    """The tree listing is incomplete and could not be backfilled."""


# ── Per-file errors ─────────────────────────────────────────────────────────


class FileContentError(LocViewerError):
    """A single file could not be turned into text."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class FetchError(FileContentError):
    """Transport-level failure while retrieving one file."""


class DecodeError(FileContentError):
    """The file payload could not be decoded (invalid base64, unknown encoding)."""


class PipelineTimeoutError(LocViewerError):
    """The statistics run did not finish within the configured timeout."""


# ── Internal invariants ─────────────────────────────────────────────────────


class UnreachableError(RuntimeError):
    """A condition that indicates a defect in this code base.

    Not a :class:`LocViewerError`: callers must never be able to handle it
    as an ordinary user-facing failure.
    """
