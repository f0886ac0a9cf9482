"""Domain exception hierarchy.

Inner layers raise these.  The sync orchestrator turns them into terminal
progress messages; the HTTP error-handler maps them to status codes.
"""

from __future__ import annotations


class LocaleSyncError(Exception):
    """Base exception for the entire application."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidGitHubUrlError(LocaleSyncError):
    """The supplied URL or owner/repo pair is not a valid GitHub repository."""


class InvalidLocaleError(LocaleSyncError, ValueError):
    """The locale tag cannot be mapped to a resource filename."""


# ── GitHub API errors ───────────────────────────────────────────────────────


class RepositoryNotFoundError(LocaleSyncError):
    """The repository does not exist or is not accessible (404)."""


class RepositoryAccessDeniedError(LocaleSyncError):
    """Access to the repository was denied (403)."""


class GitHubRateLimitError(LocaleSyncError):
    """GitHub API rate limit exceeded (429 / 403 with rate-limit header)."""


class RemoteQueryError(LocaleSyncError):
    """The remote search failed or returned a response we cannot parse."""


class DownloadError(LocaleSyncError):
    """A single resource file could not be downloaded."""


# ── Local cache / sync state ────────────────────────────────────────────────


class LocalRepositoryNotFoundError(LocaleSyncError):
    """The repository has no locally cached resource files."""


class SyncInProgressError(LocaleSyncError):
    """A synchronization for the same repository is already running."""


class SyncCancelledError(LocaleSyncError):
    """The synchronization was cancelled through its cancellation token."""
