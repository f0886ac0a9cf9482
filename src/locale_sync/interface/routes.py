"""API routes — thin controllers over the local cache and the sync jobs."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from locale_sync.domain.exceptions import LocalRepositoryNotFoundError
from locale_sync.domain.locales import validate_locale
from locale_sync.domain.value_objects import GitHubUrl, RepositoryIdentity
from locale_sync.interface.dependencies import (
    RepositoryFactory,
    get_catalog,
    get_repository_factory,
    get_sync_jobs,
)
from locale_sync.interface.error_handlers import error_response
from locale_sync.interface.jobs import SyncJob, SyncJobs
from locale_sync.interface.schemas import (
    LocaleInfo,
    LocalesResponse,
    ProgressEvent,
    RepositoriesResponse,
    SyncRequest,
    SyncStatusResponse,
)
from locale_sync.services.catalog import RepositoryCatalog
from locale_sync.services.repository import LocalRepository

router = APIRouter()


def _status(job: SyncJob) -> SyncStatusResponse:
    report = job.report
    return SyncStatusResponse(
        repository=job.identity.full_name,
        overwrite=job.overwrite,
        running=job.running,
        state=report.state.value if report else None,
        success=job.success,
        message=job.message,
        progress=[ProgressEvent(title=t, detail=d) for t, d in job.updates],
        downloaded=report.downloaded if report else [],
        failed=report.failed if report else [],
    )


def _cached(
    owner: str, repo: str, factory: RepositoryFactory
) -> LocalRepository:
    repository = factory(RepositoryIdentity(owner=owner, repo=repo))
    if repository.is_empty():
        raise LocalRepositoryNotFoundError(
            f"Repository {repository} has no cached resource files."
        )
    return repository


# ── Repositories ────────────────────────────────────────────────────────────


@router.get("/repositories", response_model=RepositoriesResponse)
async def list_repositories(
    catalog: RepositoryCatalog = Depends(get_catalog),
) -> RepositoriesResponse:
    """List the GitHub URLs of every cached repository."""
    return RepositoriesResponse(repositories=catalog.list_repository_urls())


@router.delete("/repositories/{owner}/{repo}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_repository(
    owner: str,
    repo: str,
    factory: RepositoryFactory = Depends(get_repository_factory),
) -> Response:
    _cached(owner, repo, factory).delete()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Sync ────────────────────────────────────────────────────────────────────


@router.post(
    "/sync",
    response_model=SyncStatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        409: {"description": "A sync of this repository is already running"},
        422: {"description": "Invalid GitHub URL"},
    },
)
async def start_sync(
    body: SyncRequest,
    factory: RepositoryFactory = Depends(get_repository_factory),
    jobs: SyncJobs = Depends(get_sync_jobs),
) -> SyncStatusResponse:
    """Start downloading a repository's string resources in the background."""
    identity = GitHubUrl.from_string(body.github_url).identity()
    job = jobs.start(factory(identity), overwrite=body.overwrite)
    return _status(job)


@router.get(
    "/repositories/{owner}/{repo}/sync",
    response_model=SyncStatusResponse,
    responses={404: {"description": "No sync was started for this repository"}},
)
async def sync_status(
    owner: str,
    repo: str,
    jobs: SyncJobs = Depends(get_sync_jobs),
) -> SyncStatusResponse:
    identity = RepositoryIdentity(owner=owner, repo=repo)
    job = jobs.get(identity)
    if job is None:
        raise LocalRepositoryNotFoundError(f"No synchronization of {identity} was started.")
    return _status(job)


@router.delete("/repositories/{owner}/{repo}/sync", response_model=SyncStatusResponse)
async def cancel_sync(
    owner: str,
    repo: str,
    jobs: SyncJobs = Depends(get_sync_jobs),
) -> SyncStatusResponse:
    identity = RepositoryIdentity(owner=owner, repo=repo)
    job = jobs.cancel(identity)
    if job is None:
        raise LocalRepositoryNotFoundError(f"No synchronization of {identity} was started.")
    return _status(job)


# ── Locales ─────────────────────────────────────────────────────────────────


@router.get("/repositories/{owner}/{repo}/locales", response_model=LocalesResponse)
async def list_locales(
    owner: str,
    repo: str,
    factory: RepositoryFactory = Depends(get_repository_factory),
) -> LocalesResponse:
    repository = _cached(owner, repo, factory)
    return LocalesResponse(
        repository=str(repository),
        locales=[
            LocaleInfo(locale=locale, modified=repository.has_modified_locale(locale))
            for locale in repository.list_locales()
        ],
        any_modified=repository.any_modified(),
    )


@router.put(
    "/repositories/{owner}/{repo}/locales/{locale}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={500: {"description": "The resource file could not be saved"}},
)
async def create_locale(
    owner: str,
    repo: str,
    locale: str,
    factory: RepositoryFactory = Depends(get_repository_factory),
) -> Response:
    repository = factory(RepositoryIdentity(owner=owner, repo=repo))
    if not repository.create_locale(validate_locale(locale)):
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, f"Could not create locale {locale}."
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/repositories/{owner}/{repo}/locales/{locale}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_locale(
    owner: str,
    repo: str,
    locale: str,
    factory: RepositoryFactory = Depends(get_repository_factory),
) -> Response:
    repository = _cached(owner, repo, factory)
    repository.delete_locale(validate_locale(locale))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
