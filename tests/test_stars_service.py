from __future__ import annotations

import asyncio

import pytest

from gitmarks.application.pagination import PaginationEngine
from gitmarks.application.stars_service import StarsApplicationService
from gitmarks.domain.entities import Snapshot
from gitmarks.domain.errors import ErrorKind, IdentityNotFound
from gitmarks.infrastructure.file_storage import JsonFileSnapshotStore
from fakes import FakePageFetcher, GatedPageFetcher, RecordingStore, make_row, raw_page

KEY = "_gitmarks_.octocat"


def build(pages, store=None):
    fetcher = FakePageFetcher(pages)
    store = store if store is not None else RecordingStore()
    service = StarsApplicationService(PaginationEngine(fetcher, store), store)
    return service, fetcher, store


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_missing_identity_never_touches_network_or_cache(raw):
    service, fetcher, store = build([raw_page(0, 3)])

    view = asyncio.run(service.open(raw))

    assert view.error_kind == ErrorKind.MISSING_IDENTITY
    assert view.identity is None
    assert view.rows == ()
    assert fetcher.calls == []
    assert store.reads == [] and store.writes == [] and store.clears == []


def test_missing_identity_from_location():
    service, fetcher, _ = build([])

    view = asyncio.run(service.open_location("https://gitmarks.example/"))

    assert view.error_kind == ErrorKind.MISSING_IDENTITY
    assert fetcher.calls == []


def test_cache_hit_serves_rows_without_network():
    store = RecordingStore()
    cached = Snapshot(rows=tuple(make_row(i) for i in range(5)))
    store.write(KEY, cached)
    store.writes.clear()
    service, fetcher, _ = build([raw_page(0, 100)], store=store)

    view = asyncio.run(service.open("octocat"))

    assert fetcher.calls == []
    assert view.cached is True
    assert view.rows == cached.rows
    assert store.writes == []


def test_cache_miss_fetches_and_writes_once():
    service, fetcher, store = build([raw_page(0, 100), raw_page(100, 37)])

    view = asyncio.run(service.open("octocat"))

    assert view.ok
    assert view.cached is False
    assert len(view.rows) == 137
    assert view.requests == 2
    assert view.cache_written is True
    assert [key for key, _ in store.writes] == [KEY]
    assert len(store.writes[0][1].rows) == 137


def test_second_open_is_served_from_cache():
    service, fetcher, _ = build([raw_page(0, 4)])

    first = asyncio.run(service.open("octocat"))
    second = asyncio.run(service.open("octocat"))

    assert len(fetcher.calls) == 1
    assert first.cached is False
    assert second.cached is True
    assert second.rows == first.rows


def test_malformed_cache_entry_is_a_miss():
    store = RecordingStore()
    store.put_raw(KEY, "{definitely not json")
    service, fetcher, _ = build([raw_page(0, 2)], store=store)

    view = asyncio.run(service.open("octocat"))

    assert view.cached is False
    assert len(view.rows) == 2
    assert len(fetcher.calls) == 1
    assert len(store.writes) == 1


def test_not_found_surfaces_error_and_skips_cache():
    service, _, store = build([IdentityNotFound("ghost-user")])

    view = asyncio.run(service.open("ghost-user"))

    assert view.error_kind == ErrorKind.IDENTITY_NOT_FOUND
    assert view.error_message == 'User "ghost-user" not found.'
    assert view.rows == ()
    assert store.writes == []


def test_cache_write_failure_is_not_a_blocking_error():
    service, _, store = build([raw_page(0, 3)], store=RecordingStore(fail_writes=True))

    view = asyncio.run(service.open("octocat"))

    assert view.ok
    assert len(view.rows) == 3
    assert view.cache_written is False
    assert view.cache_error == "quota exceeded"


def test_reload_clears_cache_and_fetches_again():
    store = RecordingStore()
    store.write(KEY, Snapshot(rows=(make_row(99),)))
    store.writes.clear()
    service, fetcher, _ = build([raw_page(0, 2)], store=store)

    view = asyncio.run(service.reload("octocat"))

    assert store.clears == [KEY]
    assert store.reads == []
    assert len(fetcher.calls) == 1
    assert view.cached is False
    assert [r.repo for r in view.rows] == ["repo-0", "repo-1"]
    assert store.read(KEY).rows == view.rows


def test_reload_location_uses_first_path_segment():
    service, fetcher, store = build([raw_page(0, 1)])

    asyncio.run(service.reload_location("/octocat/anything"))

    assert store.clears == [KEY]
    assert fetcher.calls == [("octocat", 1)]


def test_reload_supersedes_running_session():
    async def scenario():
        store = RecordingStore()
        fetcher = GatedPageFetcher([raw_page(0, 3)])
        service = StarsApplicationService(PaginationEngine(fetcher, store), store)

        first = asyncio.create_task(service.open("octocat"))
        await fetcher.started.wait()
        reloaded = await service.reload("octocat")
        fetcher.release.set()
        return await first, reloaded, store

    first, reloaded, store = asyncio.run(scenario())

    assert first.superseded is True
    assert first.rows == ()
    assert reloaded.ok and len(reloaded.rows) == 3
    assert len(store.writes) == 1


def test_reload_continues_when_cache_clear_fails():
    service, fetcher, store = build([raw_page(0, 2)], store=RecordingStore(fail_clears=True))

    view = asyncio.run(service.reload("octocat"))

    assert view.ok
    assert len(view.rows) == 2
    assert len(fetcher.calls) == 1
    assert view.cache_written is True
    assert store.read(KEY).rows == view.rows


def test_reload_with_unusable_cache_directory_returns_a_view(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    store = JsonFileSnapshotStore(blocker / "cache")
    fetcher = FakePageFetcher([raw_page(0, 2)])
    service = StarsApplicationService(PaginationEngine(fetcher, store), store)

    view = asyncio.run(service.reload("octocat"))

    assert view.ok
    assert len(view.rows) == 2
    assert view.cache_written is False
    assert view.cache_error is not None
