"""FastAPI dependency injection wiring."""

from __future__ import annotations

from functools import lru_cache, partial
from typing import Callable

import httpx

from locale_sync.domain.value_objects import RepositoryIdentity
from locale_sync.infrastructure.android_resources import AndroidResourceFiles
from locale_sync.infrastructure.config import Settings, get_settings
from locale_sync.infrastructure.github_rest_adapter import GitHubRestAdapter, raw_file_url
from locale_sync.interface.jobs import SyncJobs
from locale_sync.services.catalog import RepositoryCatalog
from locale_sync.services.repository import LocalRepository

RepositoryFactory = Callable[[RepositoryIdentity], LocalRepository]

_http_client: httpx.AsyncClient | None = None
_sync_jobs: SyncJobs | None = None


async def startup() -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    global _http_client, _sync_jobs  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout), follow_redirects=True
    )
    _sync_jobs = SyncJobs()


async def shutdown() -> None:
    """Release shared resources."""
    global _http_client, _sync_jobs  # noqa: PLW0603

    if _sync_jobs:
        await _sync_jobs.shutdown()
        _sync_jobs = None
    if _http_client:
        await _http_client.aclose()
        _http_client = None


@lru_cache(maxsize=1)
def _settings() -> Settings:
    return get_settings()


def get_catalog() -> RepositoryCatalog:
    return RepositoryCatalog(_settings().cache_root)


def get_sync_jobs() -> SyncJobs:
    assert _sync_jobs is not None, "startup() was not called"
    return _sync_jobs


def get_repository_factory() -> RepositoryFactory:
    """Return a callable building a :class:`LocalRepository` for an identity."""
    settings = _settings()

    assert _http_client is not None, "startup() was not called"

    token = settings.github_token.get_secret_value() if settings.github_token else None
    github_adapter = GitHubRestAdapter(client=_http_client, token=token)

    def _build(identity: RepositoryIdentity) -> LocalRepository:
        return LocalRepository(
            identity=identity,
            cache_root=settings.cache_root,
            resources=AndroidResourceFiles(),
            search=github_adapter,
            fetcher=github_adapter,
            raw_url=partial(raw_file_url, branch=settings.raw_branch),
            progress_interval_ms=settings.progress_interval_ms,
        )

    return _build
