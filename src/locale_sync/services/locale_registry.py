"""In-memory set of the locales cached on disk for one repository."""

from __future__ import annotations

import logging

from locale_sync.domain.locales import LOCAL_PATTERN
from locale_sync.domain.value_objects import RepositoryIdentity
from locale_sync.services.locale_store import LocaleFileStore

logger = logging.getLogger(__name__)


class LocaleRegistry:
    """Locales present in the repository directory.

    Rebuilt from disk on construction and after every download batch.
    Between reloads it only changes through :meth:`create` and :meth:`remove`.
    """

    def __init__(self, store: LocaleFileStore, identity: RepositoryIdentity) -> None:
        self._store = store
        self._identity = identity
        self._locales: set[str] = set()
        self.reload()

    def reload(self) -> None:
        self._locales.clear()
        root = self._store.repo_dir(self._identity)
        if not root.is_dir():
            return
        for entry in root.iterdir():
            if not entry.is_file():
                continue
            locale = LOCAL_PATTERN.extract(entry.name)
            if locale is not None:
                self._locales.add(locale)

    def list(self) -> list[str]:
        """Sorted snapshot of the cached locales."""
        return sorted(self._locales)

    def create(self, locale: str) -> bool:
        """Create an empty resource file for *locale*; existing files are kept."""
        if self._store.exists(self._identity, locale):
            self._locales.add(locale)
            return True

        handle = self._store.open_resources(self._identity, locale)
        if handle is None or not handle.save():
            logger.warning("Could not create locale %s in %s", locale, self._identity)
            self._store.prune_empty(self._identity)
            return False

        self._locales.add(locale)
        return True

    def remove(self, locale: str) -> None:
        if self._store.exists(self._identity, locale):
            handle = self._store.open_resources(self._identity, locale)
            if handle is not None:
                handle.delete()
            else:
                # Unparsable files still have to leave the cache.
                self._store.resolve_path(self._identity, locale).unlink()
        self._locales.discard(locale)

    def is_empty(self) -> bool:
        return not self._locales

    def __contains__(self, locale: object) -> bool:
        return locale in self._locales

    def __len__(self) -> int:
        return len(self._locales)
