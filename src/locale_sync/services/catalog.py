"""Enumerate every repository held in the local cache."""

from __future__ import annotations

from pathlib import Path

from locale_sync.domain.exceptions import InvalidGitHubUrlError
from locale_sync.domain.value_objects import RepositoryIdentity


def _subdirectories(path: Path) -> list[str]:
    if not path.is_dir():
        return []
    return sorted(entry.name for entry in path.iterdir() if entry.is_dir())


class RepositoryCatalog:
    """Read-only view of ``<cache_root>/<owner>/<repo>``.

    Listings are sorted so callers get the same order on every platform.
    """

    def __init__(self, cache_root: Path) -> None:
        self.cache_root = cache_root

    def list_owners(self) -> list[str]:
        return _subdirectories(self.cache_root)

    def list_repositories(self, owner: str) -> list[str]:
        return _subdirectories(self.cache_root / owner)

    def list_identities(self) -> list[RepositoryIdentity]:
        identities: list[RepositoryIdentity] = []
        for owner in self.list_owners():
            for repo in self.list_repositories(owner):
                try:
                    identities.append(RepositoryIdentity(owner=owner, repo=repo))
                except InvalidGitHubUrlError:
                    continue
        return identities

    def list_repository_urls(self) -> list[str]:
        """``https://github.com/<owner>/<repo>`` for every cached repository."""
        return [identity.url for identity in self.list_identities()]
