import pytest

from locale_sync.domain.exceptions import DownloadError
from locale_sync.domain.value_objects import RepositoryIdentity
from locale_sync.infrastructure.android_resources import AndroidResourceFiles
from locale_sync.services.locale_registry import LocaleRegistry
from locale_sync.services.locale_store import LocaleFileStore
from locale_sync.services.repository import LocalRepository

STRINGS_XML = (
    b'<?xml version="1.0" encoding="utf-8"?>\n'
    b'<resources>\n'
    b'    <string name="app_name">Hello</string>\n'
    b'</resources>\n'
)

MODIFIED_XML = (
    b'<?xml version="1.0" encoding="utf-8"?>\n'
    b'<resources>\n'
    b'    <string name="app_name" modified="true">Hola</string>\n'
    b'</resources>\n'
)


def fake_raw_url(identity, path):
    return f"https://raw.example/{identity.owner}/{identity.repo}/{path}"


class FakeSearch:
    """RemoteSearch returning a canned response (or raising)."""

    def __init__(self, paths=(), response=None, error=None):
        self.response = response if response is not None else {
            "items": [{"path": p} for p in paths]
        }
        self.error = error
        self.calls = []

    async def find_files(self, owner, repo, content_marker, filename):
        self.calls.append((owner, repo, content_marker, filename))
        if self.error is not None:
            raise self.error
        return self.response


class FakeFetcher:
    """FileFetcher writing fixed XML; ``fail`` lists URL suffixes that error."""

    def __init__(self, content=STRINGS_XML, fail=(), chunks=None, on_fetch=None):
        self.content = content
        self.fail = tuple(fail)
        self.chunks = chunks or []
        self.on_fetch = on_fetch
        self.calls = []

    async def fetch(self, url, destination, on_chunk=None):
        self.calls.append((url, destination))
        if self.on_fetch is not None:
            self.on_fetch(url)
        if any(url.endswith(suffix) for suffix in self.fail):
            raise DownloadError(f"HTTP 500 for {url}")
        for done, total in self.chunks:
            if on_chunk is not None:
                on_chunk(done, total)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(self.content)


class RecordingCallback:
    def __init__(self):
        self.updates = []
        self.finished = []

    def on_progress_update(self, title, detail):
        self.updates.append((title, detail))

    def on_progress_finished(self, message, success):
        self.finished.append((message, success))


@pytest.fixture
def identity():
    return RepositoryIdentity(owner="octocat", repo="Hello-World")


@pytest.fixture
def cache_root(tmp_path):
    root = tmp_path / "repos"
    root.mkdir()
    return root


@pytest.fixture
def store(cache_root):
    return LocaleFileStore(cache_root, AndroidResourceFiles())


@pytest.fixture
def repo_dir(store, identity):
    path = store.repo_dir(identity)
    path.mkdir(parents=True)
    return path


@pytest.fixture
def registry_for(store):
    def _build(identity):
        return LocaleRegistry(store, identity)

    return _build


@pytest.fixture
def make_repository(cache_root, identity):
    def _build(search=None, fetcher=None, ident=None, **kwargs):
        return LocalRepository(
            identity=ident or identity,
            cache_root=cache_root,
            resources=AndroidResourceFiles(),
            search=search or FakeSearch(),
            fetcher=fetcher or FakeFetcher(),
            raw_url=fake_raw_url,
            **kwargs,
        )

    return _build


def write_locale(repo_dir, locale, content):
    name = "strings.xml" if locale == "default" else f"strings-{locale}.xml"
    path = repo_dir / name
    path.write_bytes(content)
    return path
