import asyncio

import pytest

from artdesk.errors import TransportError
from artdesk.services.pager import ObserverPager, RemoteSearchPager, SlicePager


def _records(n):
    return [{"unique_id": f"item:{i}"} for i in range(n)]


class TestSlicePager:
    def test_has_more_is_exact(self):
        pager = SlicePager(_records(24), items_per_page=12)
        assert pager.has_more
        pager.next_page()
        assert not pager.has_more
        assert len(pager.visible) == 24

    def test_next_page_returns_only_new_items(self):
        pager = SlicePager(_records(30), items_per_page=12)
        first = pager.visible
        second = pager.next_page()
        third = pager.next_page()
        assert [len(first), len(second), len(third)] == [12, 12, 6]
        keys = [r["unique_id"] for r in first + second + third]
        assert len(keys) == len(set(keys)) == 30
        assert pager.next_page() == []

    def test_reset_returns_to_first_page(self):
        pager = SlicePager(_records(30), items_per_page=10)
        pager.next_page()
        pager.reset(_records(5))
        assert pager.current_page == 1
        assert not pager.has_more
        assert pager.window.total_pages == 1

    def test_previous_page_stops_at_one(self):
        pager = SlicePager(_records(30), items_per_page=10)
        pager.next_page()
        pager.previous_page()
        pager.previous_page()
        assert pager.current_page == 1

    def test_page_items_clamps(self):
        pager = SlicePager(_records(25), items_per_page=10)
        assert [r["unique_id"] for r in pager.page_items(3)] == ["item:20", "item:21", "item:22", "item:23", "item:24"]
        assert pager.page_items(99) == pager.page_items(3)

    def test_empty_list(self):
        pager = SlicePager([], items_per_page=10)
        assert not pager.has_more
        assert pager.visible == []
        assert pager.window.total_pages == 0

    def test_rejects_zero_page_size(self):
        with pytest.raises(ValueError):
            SlicePager(_records(3), items_per_page=0)


class TestObserverPager:
    async def test_in_memory_pages_until_exhausted(self):
        pager = ObserverPager(_records(25), items_per_page=10)
        await pager.start()
        assert len(pager.items) == 10 and pager.has_more
        assert await pager.on_intersect()
        assert await pager.on_intersect()
        assert len(pager.items) == 25
        assert not pager.has_more
        assert not await pager.on_intersect()

    async def test_exact_multiple_has_no_phantom_page(self):
        pager = ObserverPager(_records(20), items_per_page=10)
        await pager.start()
        await pager.on_intersect()
        assert not pager.has_more

    async def test_concurrent_intersections_load_once(self):
        calls = []
        release = asyncio.Event()

        async def loader(page):
            calls.append(page)
            await release.wait()
            return [{"unique_id": f"p{page}:{i}"} for i in range(10)]

        pager = ObserverPager(loader=loader, items_per_page=10)
        pager.has_more = True
        first = asyncio.ensure_future(pager.on_intersect())
        await asyncio.sleep(0)
        assert pager.is_fetching
        assert not await pager.on_intersect()
        release.set()
        assert await first
        assert calls == [1]
        assert not pager.is_fetching

    async def test_remote_loader_dedupes_and_stops_on_short_page(self):
        pages = {
            1: [{"unique_id": "a"}, {"unique_id": "b"}],
            2: [{"unique_id": "b"}, {"unique_id": "c"}],
            3: [{"unique_id": "d"}],
        }

        async def loader(page):
            return pages.get(page, [])

        pager = ObserverPager(loader=loader, items_per_page=2)
        await pager.start()
        await pager.on_intersect()
        await pager.on_intersect()
        assert [r["unique_id"] for r in pager.items] == ["a", "b", "c", "d"]
        assert not pager.has_more

    async def test_loader_failure_clears_fetching_flag(self):
        async def loader(page):
            raise TransportError("down")

        pager = ObserverPager(loader=loader, items_per_page=5)
        with pytest.raises(TransportError):
            await pager.start()
        assert not pager.is_fetching

    async def test_start_with_new_items_resets(self):
        pager = ObserverPager(_records(30), items_per_page=10)
        await pager.start()
        await pager.on_intersect()
        await pager.start(_records(3))
        assert len(pager.items) == 3
        assert pager.current_page == 1
        assert not pager.has_more

    async def test_restart_discards_page_loaded_for_old_list(self):
        gate = asyncio.Event()

        async def loader(page):
            if page == 2:
                await gate.wait()
            return [{"unique_id": f"p{page}-{i}"} for i in range(2)]

        pager = ObserverPager(loader=loader, items_per_page=2)
        await pager.start()
        in_flight = asyncio.ensure_future(pager.on_intersect())
        await asyncio.sleep(0)
        assert pager.is_fetching

        assert await pager.start()
        gate.set()
        assert not await in_flight
        assert not pager.is_fetching
        assert pager.current_page == 1

        assert await pager.on_intersect()
        assert [r["unique_id"] for r in pager.items] == ["p1-0", "p1-1", "p2-0", "p2-1"]

    def test_needs_a_source(self):
        with pytest.raises(ValueError):
            ObserverPager()


def _hits(prefix, n):
    return [{"objectID": f"{prefix}{i}", "title": f"{prefix} {i}"} for i in range(n)]


class TestRemoteSearchPager:
    async def test_search_tags_hits_and_paginates(self, notifier):
        payloads = []

        async def search(payload):
            payloads.append(payload)
            return {"hits": _hits(f"p{payload['page']}-", 20 if payload["page"] == 0 else 5)}

        pager = RemoteSearchPager(search, notifier=notifier)
        assert await pager.search("monet", category="Painting")
        assert len(pager.hits) == 20 and pager.has_more
        assert pager.hits[0]["unique_id"] == "saatchi:p0-0:0"
        assert pager.hits[0]["is_external"] is True

        assert await pager.load_more()
        assert len(pager.hits) == 25
        assert not pager.has_more
        assert pager.hits[20]["unique_id"] == "saatchi:p1-0:20"

        assert payloads[0]["query"] == "monet"
        assert payloads[0]["hitsPerPage"] == 20
        assert payloads[0]["filters"] == '(has_prints:"true") AND (category:"Painting")'
        assert [p["page"] for p in payloads] == [0, 1]

    async def test_stale_response_is_dropped(self, notifier):
        gates = {"slow": asyncio.Event(), "fast": asyncio.Event()}

        async def search(payload):
            await gates[payload["query"]].wait()
            return {"hits": _hits(payload["query"], 3)}

        pager = RemoteSearchPager(search, notifier=notifier)
        slow = asyncio.ensure_future(pager.search("slow"))
        await asyncio.sleep(0)
        fast = asyncio.ensure_future(pager.search("fast"))
        await asyncio.sleep(0)

        gates["fast"].set()
        assert await fast
        gates["slow"].set()
        assert not await slow

        assert {h["objectID"] for h in pager.hits} == {"fast0", "fast1", "fast2"}
        assert pager.query == "fast"
        assert not pager.loading

    async def test_failure_notifies_and_clears(self, notifier):
        async def search(payload):
            raise TransportError("offline")

        pager = RemoteSearchPager(search, notifier=notifier)
        pager.hits = [{"objectID": "old"}]
        assert not await pager.search("x")
        assert pager.hits == []
        assert not pager.has_more
        assert notifier.errors == ["Failed to fetch search results"]

    async def test_debounce_keeps_only_last_keystroke(self, notifier):
        queries = []

        async def search(payload):
            queries.append(payload["query"])
            return {"hits": []}

        pager = RemoteSearchPager(search, debounce=0.01, notifier=notifier)
        results = await asyncio.gather(
            pager.search_debounced("m"),
            pager.search_debounced("mo"),
            pager.search_debounced("mon"),
        )
        assert results == [False, False, True]
        assert queries == ["mon"]

    async def test_all_facet_is_ignored(self, notifier):
        pager = RemoteSearchPager(lambda payload: None, notifier=notifier)
        pager.facets = {"medium": "all", "style": "Abstract"}
        assert pager.build_payload("", 0)["filters"] == '(has_prints:"true") AND (style:"Abstract")'

    def test_facet_quotes_are_escaped(self, notifier):
        pager = RemoteSearchPager(lambda payload: None, notifier=notifier)
        pager.facets = {"size": '12" x 16"'}
        filters = pager.build_payload("", 0)["filters"]
        assert filters == '(has_prints:"true") AND (size:"12\\" x 16\\"")'

