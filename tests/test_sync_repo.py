import asyncio

import httpx
import pytest

from locale_sync.domain.entities import RemoteResource, SyncState
from locale_sync.domain.exceptions import DownloadError, GitHubRateLimitError, RemoteQueryError
from locale_sync.domain.value_objects import RepositoryIdentity
from locale_sync.infrastructure.github_rest_adapter import GitHubRestAdapter
from locale_sync.services.catalog import RepositoryCatalog
from locale_sync.services.progress import CancellationToken
from locale_sync.services.sync_repo import (
    NO_STRINGS_FOUND,
    SCANNING_TITLE,
    SYNC_CANCELLED,
    UNEXPECTED_ERROR,
)

from conftest import MODIFIED_XML, STRINGS_XML, FakeFetcher, FakeSearch, RecordingCallback, write_locale

HELLO_WORLD = ["res/values/strings.xml", "res/values-es/strings.xml"]


@pytest.mark.asyncio
async def test_end_to_end_hello_world(make_repository, cache_root):
    fetcher = FakeFetcher()
    repository = make_repository(FakeSearch(HELLO_WORLD), fetcher)
    callback = RecordingCallback()

    report = await repository.sync(callback, overwrite=False)

    assert report.state is SyncState.DONE
    assert report.resources == [
        RemoteResource("res/values/strings.xml", "default"),
        RemoteResource("res/values-es/strings.xml", "es"),
    ]
    assert callback.updates == [
        (SCANNING_TITLE, "Looking for strings.xml files in the repository"),
        ("Downloading strings.xml (1/2)", "Downloading locale default"),
        ("Downloading strings.xml (2/2)", "Downloading locale es"),
    ]
    assert callback.finished == [(None, True)]
    assert [url for url, _ in fetcher.calls] == [
        "https://raw.example/octocat/Hello-World/res/values/strings.xml",
        "https://raw.example/octocat/Hello-World/res/values-es/strings.xml",
    ]
    repo_dir = cache_root / "octocat" / "Hello-World"
    assert (repo_dir / "strings.xml").read_bytes() == STRINGS_XML
    assert (repo_dir / "strings-es.xml").is_file()
    assert repository.list_locales() == ["default", "es"]
    assert not repository.is_empty()


@pytest.mark.asyncio
async def test_empty_scan_reports_no_strings_and_downloads_nothing(make_repository):
    fetcher = FakeFetcher()
    repository = make_repository(FakeSearch(["README.md"]), fetcher)
    callback = RecordingCallback()

    report = await repository.sync(callback)

    assert report.state is SyncState.EMPTY
    assert callback.finished == [(NO_STRINGS_FOUND, False)]
    assert fetcher.calls == []
    assert repository.is_empty()


@pytest.mark.asyncio
async def test_local_edits_are_not_overwritten(make_repository, identity, cache_root):
    repo_dir = identity.directory(cache_root)
    repo_dir.mkdir(parents=True)
    write_locale(repo_dir, "es", MODIFIED_XML)
    fetcher = FakeFetcher()
    repository = make_repository(FakeSearch(HELLO_WORLD), fetcher)

    report = await repository.sync(RecordingCallback(), overwrite=False)

    assert [r.locale for r in report.resources] == ["default"]
    assert (repo_dir / "strings-es.xml").read_bytes() == MODIFIED_XML
    assert repository.has_modified_locale("es")
    assert repository.any_modified()

    await repository.sync(RecordingCallback(), overwrite=True)

    assert (repo_dir / "strings-es.xml").read_bytes() == STRINGS_XML
    assert not repository.any_modified()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        RemoteQueryError("Error parsing the repository search response."),
        GitHubRateLimitError("GitHub API rate limit exceeded (HTTP 429)."),
    ],
)
async def test_query_errors_become_a_failed_terminal_callback(make_repository, error):
    callback = RecordingCallback()
    repository = make_repository(FakeSearch(error=error))

    report = await repository.sync(callback)

    assert report.state is SyncState.FAILED
    assert callback.updates == [
        (SCANNING_TITLE, "Looking for strings.xml files in the repository")
    ]
    assert callback.finished == [(str(error), False)]


@pytest.mark.asyncio
async def test_unexpected_error_still_finishes_once(make_repository):
    callback = RecordingCallback()
    repository = make_repository(FakeSearch(error=RuntimeError("boom")))

    report = await repository.sync(callback)

    assert report.state is SyncState.FAILED
    assert callback.finished == [(UNEXPECTED_ERROR, False)]


@pytest.mark.asyncio
async def test_failed_download_is_skipped_and_reported(make_repository):
    search = FakeSearch(HELLO_WORLD + ["res/values-fr/strings.xml"])
    fetcher = FakeFetcher(fail=["values-es/strings.xml"])
    repository = make_repository(search, fetcher)
    callback = RecordingCallback()

    report = await repository.sync(callback)

    assert report.state is SyncState.PARTIAL
    assert report.downloaded == ["default", "fr"]
    assert report.failed == ["es"]
    assert len(fetcher.calls) == 3
    assert callback.finished == [("Downloaded 2 of 3 locales; failed: es.", False)]
    assert repository.list_locales() == ["default", "fr"]


@pytest.mark.asyncio
async def test_failed_first_download_leaves_no_cache_directories(make_repository, cache_root):
    def handler(request):
        if request.url.path == "/search/code":
            items = [{"path": path} for path in HELLO_WORLD]
            return httpx.Response(200, json={"total_count": len(items), "items": items})
        return httpx.Response(404)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        adapter = GitHubRestAdapter(client=client)
        repository = make_repository(adapter, adapter)
        report = await repository.sync(RecordingCallback())

    assert report.state is SyncState.PARTIAL
    assert report.failed == ["default", "es"]
    assert repository.list_locales() == []
    assert list(cache_root.iterdir()) == []
    assert RepositoryCatalog(cache_root).list_repository_urls() == []


class InterruptedFetcher(FakeFetcher):
    """Creates the destination directory, then fails mid-transfer."""

    async def fetch(self, url, destination, on_chunk=None):
        self.calls.append((url, destination))
        destination.parent.mkdir(parents=True, exist_ok=True)
        raise DownloadError(f"connection reset while fetching {url}")


@pytest.mark.asyncio
async def test_interrupted_downloads_do_not_leave_empty_directories(make_repository, cache_root):
    repository = make_repository(FakeSearch(HELLO_WORLD), InterruptedFetcher())

    report = await repository.sync(RecordingCallback())

    assert report.state is SyncState.PARTIAL
    assert not (cache_root / "octocat").exists()


@pytest.mark.asyncio
async def test_duplicate_locale_paths_are_all_downloaded_last_one_wins(make_repository, cache_root):
    lib_xml = STRINGS_XML.replace(b"Hello", b"Library")
    paths = ["app/src/main/res/values-es/strings.xml", "lib/res/values-es/strings.xml"]
    fetcher = FakeFetcher(
        on_fetch=lambda url: setattr(fetcher, "content", lib_xml if "/lib/" in url else STRINGS_XML)
    )
    repository = make_repository(FakeSearch(paths), fetcher)

    report = await repository.sync(RecordingCallback())

    assert report.state is SyncState.DONE
    assert [r.remote_path for r in report.resources] == paths
    assert [url.split("Hello-World/")[1] for url, _ in fetcher.calls] == paths
    assert (cache_root / "octocat" / "Hello-World" / "strings-es.xml").read_bytes() == lib_xml
    assert repository.list_locales() == ["es"]


@pytest.mark.asyncio
async def test_cancellation_between_downloads(make_repository):
    token = CancellationToken()
    fetcher = FakeFetcher(on_fetch=lambda url: token.cancel())
    repository = make_repository(FakeSearch(HELLO_WORLD), fetcher)
    callback = RecordingCallback()

    report = await repository.sync(callback, cancel_token=token)

    assert report.state is SyncState.CANCELLED
    assert len(fetcher.calls) == 1
    assert callback.finished == [(SYNC_CANCELLED, False)]
    # Files already downloaded are picked up by the reload.
    assert repository.list_locales() == ["default"]


@pytest.mark.asyncio
async def test_byte_progress_is_throttled(make_repository):
    fetcher = FakeFetcher(chunks=[(100, 400), (200, 400), (300, 400), (400, 400)])
    repository = make_repository(
        FakeSearch(["res/values/strings.xml"]), fetcher, progress_interval_ms=60_000
    )
    callback = RecordingCallback()

    await repository.sync(callback)

    # The per-item event opens the interval, so no byte-level update gets through.
    assert [title for title, _ in callback.updates] == [
        SCANNING_TITLE,
        "Downloading strings.xml (1/1)",
    ]
    assert callback.finished == [(None, True)]


@pytest.mark.asyncio
async def test_byte_progress_passes_with_zero_interval(make_repository):
    fetcher = FakeFetcher(chunks=[(200, 400), (400, 400)])
    repository = make_repository(
        FakeSearch(["res/values-es/strings.xml"]), fetcher, progress_interval_ms=0
    )
    callback = RecordingCallback()

    await repository.sync(callback)

    assert [detail for _, detail in callback.updates[2:]] == [
        "Downloading locale es (50%)",
        "Downloading locale es (100%)",
    ]


@pytest.mark.asyncio
async def test_callbacks_go_through_dispatch(make_repository):
    dispatched = []

    def dispatch(fn, *args):
        dispatched.append(fn.__name__)
        fn(*args)

    callback = RecordingCallback()
    repository = make_repository(FakeSearch(HELLO_WORLD), dispatch=dispatch)

    await repository.sync(callback)

    assert dispatched == ["on_progress_update"] * 3 + ["on_progress_finished"]
    assert callback.finished == [(None, True)]


@pytest.mark.asyncio
async def test_start_sync_runs_in_background(make_repository):
    release = asyncio.Event()

    class SlowSearch(FakeSearch):
        async def find_files(self, *args):
            await release.wait()
            return await super().find_files(*args)

    callback = RecordingCallback()
    repository = make_repository(SlowSearch(HELLO_WORLD))

    task = repository.start_sync(callback)
    await asyncio.sleep(0)
    assert callback.finished == []

    release.set()
    report = await task

    assert report.success
    assert callback.finished == [(None, True)]


@pytest.mark.asyncio
async def test_cancelled_task_still_finishes_once(make_repository):
    class HangingSearch(FakeSearch):
        async def find_files(self, *args):
            await asyncio.Event().wait()

    callback = RecordingCallback()
    task = make_repository(HangingSearch()).start_sync(callback)
    await asyncio.sleep(0)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert callback.finished == [(SYNC_CANCELLED, False)]


def test_delete_removes_owner_only_when_last_repository(make_repository, cache_root):
    first = make_repository()
    sibling = make_repository(ident=RepositoryIdentity(owner="octocat", repo="Spoon-Knife"))
    assert first.create_locale("default")
    assert sibling.create_locale("es")

    first.delete()
    assert first.is_empty()
    assert not (cache_root / "octocat" / "Hello-World").exists()
    assert (cache_root / "octocat").is_dir()

    sibling.delete()
    assert not (cache_root / "octocat").exists()


def test_locale_management(make_repository):
    repository = make_repository()

    assert repository.create_locale("es")
    assert repository.create_locale("es")
    assert repository.has_locale("es")
    assert not repository.has_modified_locale("es")
    assert repository.load_resources("es") is not None

    repository.delete_locale("es")
    assert not repository.has_locale("es")
    assert repository.list_locales() == []
    assert str(repository) == "octocat/Hello-World"
