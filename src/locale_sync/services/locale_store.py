"""Mapping between (repository, locale) pairs and files in the local cache."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from locale_sync.domain.locales import locale_filename
from locale_sync.domain.ports.resource_files import ResourceFile, ResourceFileFactory
from locale_sync.domain.value_objects import RepositoryIdentity

logger = logging.getLogger(__name__)


class LocaleFileStore:
    """Filesystem side of the cache rooted at ``cache_root``.

    Layout::

        <cache_root>/<owner>/<repo>/strings.xml
        <cache_root>/<owner>/<repo>/strings-<locale>.xml
    """

    def __init__(self, cache_root: Path, resources: ResourceFileFactory) -> None:
        self.cache_root = cache_root
        self._resources = resources

    def repo_dir(self, identity: RepositoryIdentity) -> Path:
        return identity.directory(self.cache_root)

    def resolve_path(self, identity: RepositoryIdentity, locale: str) -> Path:
        """Return the cache path for *locale*.  No I/O."""
        return self.repo_dir(identity) / locale_filename(locale)

    def exists(self, identity: RepositoryIdentity, locale: str) -> bool:
        return self.resolve_path(identity, locale).is_file()

    def open_resources(
        self, identity: RepositoryIdentity, locale: str
    ) -> ResourceFile | None:
        return self._resources.open(self.resolve_path(identity, locale))

    def is_modified(
        self, identity: RepositoryIdentity, locale: str, known: Iterable[str]
    ) -> bool:
        """Whether *locale* carries local edits.

        Locales outside *known* are never modified.  Missing or unreadable
        files count as unmodified.
        """
        if locale not in known:
            return False
        path = self.resolve_path(identity, locale)
        if not path.is_file():
            return False
        try:
            handle = self._resources.open(path)
            return handle is not None and handle.was_modified()
        except OSError:
            logger.debug("Treating unreadable %s as unmodified", path, exc_info=True)
            return False

    def any_modified(self, identity: RepositoryIdentity, locales: Iterable[str]) -> bool:
        known = set(locales)
        return any(self.is_modified(identity, locale, known) for locale in known)

    def delete_all(self, identity: RepositoryIdentity) -> None:
        """Remove the repository directory, and its owner directory if now empty.

        Not transactional: if a file cannot be removed the ``OSError``
        propagates and the directory stays behind partially emptied.
        """
        root = self.repo_dir(identity)
        if root.is_dir():
            for child in list(root.iterdir()):
                child.unlink()
            logger.info("Deleted cached repository %s", identity)
        self.prune_empty(identity)

    def prune_empty(self, identity: RepositoryIdentity) -> None:
        """Remove the repository directory and then the owner directory while empty."""
        root = self.repo_dir(identity)
        for directory in (root, root.parent):
            if directory.is_dir():
                if any(directory.iterdir()):
                    return
                directory.rmdir()
