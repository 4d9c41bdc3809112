import asyncio

from domain.catalog.cache import ReferenceCache
from domain.schemas import ReferenceEntity

GOOGLE = ReferenceEntity(id="pubGoogle01", code="GOOG")


def _fetcher(entities: dict, calls: list):
    async def fetch(ref_id: str):
        calls.append(ref_id)
        return entities.get(ref_id)

    return fetch


def test_miss_without_loop_is_queued_until_drain() -> None:
    calls: list[str] = []
    cache = ReferenceCache(_fetcher({"pubGoogle01": GOOGLE}, calls))
    seen = []
    cache.subscribe("pubGoogle01", lambda ref_id, entity: seen.append((ref_id, entity)))

    assert cache.get("pubGoogle01") is None
    assert cache.get("pubGoogle01") is None
    assert cache.is_pending("pubGoogle01")

    assert asyncio.run(cache.drain()) == 1
    assert cache.get("pubGoogle01") == GOOGLE
    assert not cache.has_pending
    assert calls == ["pubGoogle01"]
    assert seen == [("pubGoogle01", GOOGLE)]


def test_miss_inside_running_loop_schedules_task() -> None:
    cache = ReferenceCache(_fetcher({"pubGoogle01": GOOGLE}, []))

    async def scenario():
        first = cache.get("pubGoogle01")
        pending = cache.is_pending("pubGoogle01")
        await cache.drain()
        return first, pending, cache.get("pubGoogle01")

    assert asyncio.run(scenario()) == (None, True, GOOGLE)


def test_absent_id_is_marked_missing_and_not_refetched() -> None:
    calls: list[str] = []
    cache = ReferenceCache(_fetcher({}, calls))

    cache.get("unknown01")
    asyncio.run(cache.drain())

    assert cache.is_missing("unknown01")
    assert cache.get("unknown01") is None
    assert asyncio.run(cache.drain()) == 0
    assert calls == ["unknown01"]


def test_failed_fetch_is_marked_missing() -> None:
    async def broken(ref_id: str):
        raise ConnectionError("store unavailable")

    cache = ReferenceCache(broken)
    cache.get("pubGoogle01")
    asyncio.run(cache.drain())

    assert cache.is_missing("pubGoogle01")
    assert not cache.has_pending


def test_unsubscribe_stops_notifications() -> None:
    cache = ReferenceCache(_fetcher({"pubGoogle01": GOOGLE}, []))
    seen = []
    unsubscribe = cache.subscribe("pubGoogle01", lambda ref_id, entity: seen.append(entity))
    unsubscribe()

    cache.get("pubGoogle01")
    asyncio.run(cache.drain())

    assert seen == []


def test_put_many_notifies_listeners_once_and_is_idempotent() -> None:
    cache = ReferenceCache()
    events = []
    remove = cache.add_listener(events.append)

    assert cache.put_many([GOOGLE]) == 1
    assert cache.put_many([GOOGLE]) == 0
    assert events == [None]
    assert cache.revision == 1

    remove()
    cache.put_many([ReferenceEntity(id="other01")])
    assert events == [None]


def test_late_empty_fetch_does_not_erase_bulk_loaded_entity() -> None:
    cache = ReferenceCache(_fetcher({}, []))
    cache.put_many([GOOGLE])

    asyncio.run(cache.fetch("pubGoogle01"))

    assert cache.peek("pubGoogle01") == GOOGLE
    assert not cache.is_missing("pubGoogle01")


def test_clear_resets_state() -> None:
    cache = ReferenceCache(_fetcher({}, []))
    cache.put_many([GOOGLE])
    cache.get("queued01")
    before = cache.revision

    cache.clear()

    assert cache.peek("pubGoogle01") is None
    assert not cache.has_pending
    assert cache.revision == before + 1
