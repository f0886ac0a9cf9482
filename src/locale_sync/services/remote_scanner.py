"""Remote scan — find ``strings.xml`` files and decide which ones to download."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from locale_sync.domain.entities import RemoteResource
from locale_sync.domain.exceptions import RemoteQueryError
from locale_sync.domain.locales import REMOTE_PATTERN
from locale_sync.domain.ports.remote_search import RemoteSearch
from locale_sync.domain.value_objects import RepositoryIdentity
from locale_sync.services.locale_store import LocaleFileStore
from locale_sync.services.progress import CancellationToken

logger = logging.getLogger(__name__)

CONTENT_MARKER = "resources"
FILENAME_MARKER = "strings.xml"

_PARSE_ERROR = "Error parsing the repository search response."


def _remote_paths(response: Any) -> list[str]:
    """Pull every ``item.path`` out of a search response, all-or-nothing."""
    if not isinstance(response, dict):
        raise RemoteQueryError(_PARSE_ERROR)
    items = response.get("items")
    if not isinstance(items, list):
        raise RemoteQueryError(_PARSE_ERROR)

    paths: list[str] = []
    for item in items:
        path = item.get("path") if isinstance(item, dict) else None
        if not isinstance(path, str):
            raise RemoteQueryError(_PARSE_ERROR)
        paths.append(path)
    return paths


class RemoteScanner:
    """Turns a remote search into the ordered list of resources to download.

    Every matching remote path is kept in remote order, duplicates of a
    locale included, so the last one downloaded ends up in the cache.  A
    locale with local edits is skipped unless *overwrite* is set.
    """

    def __init__(self, search: RemoteSearch, store: LocaleFileStore) -> None:
        self._search = search
        self._store = store

    async def scan(
        self,
        identity: RepositoryIdentity,
        known_locales: Iterable[str],
        *,
        overwrite: bool,
        cancel_token: CancellationToken | None = None,
    ) -> list[RemoteResource]:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        response = await self._search.find_files(
            identity.owner, identity.repo, CONTENT_MARKER, FILENAME_MARKER
        )

        matched: list[RemoteResource] = []
        for path in _remote_paths(response):
            locale = REMOTE_PATTERN.extract(path)
            if locale is None:
                logger.debug("Ignoring non-resource path %s", path)
                continue
            matched.append(RemoteResource(remote_path=path, locale=locale))

        if overwrite or not matched:
            return matched

        # Parsing the cached files is blocking I/O.
        modified = await asyncio.to_thread(
            self._modified_locales, identity, set(known_locales)
        )
        selected: list[RemoteResource] = []
        for resource in matched:
            if resource.locale in modified:
                logger.info(
                    "Keeping locally modified locale %s of %s", resource.locale, identity
                )
            else:
                selected.append(resource)
        return selected

    def _modified_locales(self, identity: RepositoryIdentity, known: set[str]) -> set[str]:
        return {
            locale for locale in known if self._store.is_modified(identity, locale, known)
        }
