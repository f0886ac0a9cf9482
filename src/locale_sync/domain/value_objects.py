"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from locale_sync.domain.exceptions import InvalidGitHubUrlError

_NAME_RE = re.compile(r"[A-Za-z0-9\-_.]+")

_GITHUB_URL_RE = re.compile(
    r"^https?://github\.com/(?P<owner>[A-Za-z0-9\-_.]+)/(?P<repo>[A-Za-z0-9\-_.]+?)(?:\.git)?/?$"
)

GITHUB_REPO_URL = "https://github.com/{owner}/{repo}"


def _check_name(kind: str, value: str) -> None:
    if not _NAME_RE.fullmatch(value) or value in (".", ".."):
        raise InvalidGitHubUrlError(f"Invalid GitHub {kind} name: '{value}'.")


@dataclass(frozen=True, slots=True)
class RepositoryIdentity:
    """Immutable owner/repo key of a cached repository.

    Names are restricted to the characters GitHub accepts, which also keeps
    ``directory()`` from ever escaping the cache root.
    """

    owner: str
    repo: str

    def __post_init__(self) -> None:
        _check_name("owner", self.owner)
        _check_name("repository", self.repo)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def url(self) -> str:
        return GITHUB_REPO_URL.format(owner=self.owner, repo=self.repo)

    def directory(self, cache_root: Path) -> Path:
        """Return ``<cache_root>/<owner>/<repo>``."""
        return cache_root / self.owner / self.repo

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True, slots=True)
class GitHubUrl:
    """Validated GitHub repository URL.

    Extracts *owner* and *repo* from a URL like
    ``https://github.com/octocat/Hello-World``.  Rejects anything that does
    not match the expected pattern.
    """

    owner: str
    repo: str
    raw: str

    @classmethod
    def from_string(cls, url: str) -> GitHubUrl:
        """Parse and validate a raw URL string."""
        url = url.strip()
        match = _GITHUB_URL_RE.match(url)
        if not match:
            raise InvalidGitHubUrlError(
                f"Invalid GitHub URL: '{url}'. "
                "Expected format: https://github.com/<owner>/<repo>"
            )
        return cls(owner=match["owner"], repo=match["repo"], raw=url)

    def identity(self) -> RepositoryIdentity:
        return RepositoryIdentity(owner=self.owner, repo=self.repo)
