"""
Incremental pagers.

`SlicePager` backs the Next/Previous style lists, `ObserverPager` the
infinite-scroll ones (its `on_intersect` is what the scroll sentinel calls),
and `RemoteSearchPager` pages through the hosted search index.
"""
import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from artdesk import config
from artdesk.errors import ArtdeskError
from artdesk.models.listing import PaginationWindow
from artdesk.services.notifications import Notifier
from artdesk.utils.logger import get_logger

logger = get_logger(__name__)

PageLoader = Callable[[int], Awaitable[List[Any]]]
SearchFunction = Callable[[dict], Awaitable[dict]]


def item_key(item: Any) -> Any:
    if isinstance(item, dict):
        return item.get("unique_id") or item.get("objectID") or id(item)
    return getattr(item, "unique_id", None) or id(item)


class SlicePager:
    def __init__(self, items: Sequence[Any] = (), items_per_page: int = None):
        items_per_page = items_per_page or config.ITEMS_PER_PAGE
        if items_per_page < 1:
            raise ValueError("items_per_page must be at least 1")
        self.items_per_page = items_per_page
        self.reset(items)

    def reset(self, items: Sequence[Any]) -> None:
        """Call whenever the filtered list changes."""
        self.items = list(items)
        self.current_page = 1

    @property
    def has_more(self) -> bool:
        return self.current_page * self.items_per_page < len(self.items)

    @property
    def visible(self) -> List[Any]:
        return self.items[: self.current_page * self.items_per_page]

    @property
    def window(self) -> PaginationWindow:
        return PaginationWindow.for_count(len(self.items), self.items_per_page, self.current_page)

    def next_page(self) -> List[Any]:
        """Grow the window by one page and return only the newly revealed items."""
        if not self.has_more:
            return []
        start = self.current_page * self.items_per_page
        self.current_page += 1
        return self.items[start:start + self.items_per_page]

    def previous_page(self) -> List[Any]:
        if self.current_page > 1:
            self.current_page -= 1
        return self.visible

    def page_items(self, page: int) -> List[Any]:
        window = PaginationWindow.for_count(len(self.items), self.items_per_page, page)
        start = (window.current_page - 1) * self.items_per_page
        return self.items[start:start + self.items_per_page]


class ObserverPager:
    """
    Scroll-driven pager. Only one load may be in flight: `is_fetching` is
    checked and set before the first await and cleared in `finally`.

    Over an in-memory list `has_more` is exact. Over a remote `loader` a
    short page (fewer than `items_per_page`) is taken as the last one.
    """

    def __init__(self, items: Sequence[Any] = None, items_per_page: int = None,
                 loader: Optional[PageLoader] = None):
        self.items_per_page = items_per_page or config.ITEMS_PER_PAGE
        if self.items_per_page < 1:
            raise ValueError("items_per_page must be at least 1")
        if loader is None and items is None:
            raise ValueError("ObserverPager needs either items or a loader")
        self._source: Optional[List[Any]] = None if loader is not None else list(items)
        self.loader = loader or self._slice_loader
        self._generation = 0
        self._clear()

    def _clear(self) -> None:
        self.items: List[Any] = []
        self._seen = set()
        self.current_page = 0
        self.has_more = True
        self.is_fetching = False

    async def _slice_loader(self, page: int) -> List[Any]:
        start = (page - 1) * self.items_per_page
        return self._source[start:start + self.items_per_page]

    async def start(self, items: Sequence[Any] = None) -> bool:
        """(Re)load the first page, e.g. after the filters changed."""
        if items is not None:
            self._source = list(items)
        # loads still in flight belong to the old list
        self._generation += 1
        self._clear()
        return await self._load(1)

    async def on_intersect(self) -> bool:
        if not self.has_more or self.is_fetching:
            return False
        return await self._load(self.current_page + 1)

    async def _load(self, page: int) -> bool:
        generation = self._generation
        self.is_fetching = True
        try:
            batch = await self.loader(page)
            if generation != self._generation:
                logger.debug("Dropping page %d loaded before a restart", page)
                return False
            if not batch:
                self.has_more = False
                return False

            for item in batch:
                key = item_key(item)
                if key in self._seen:
                    continue
                self._seen.add(key)
                self.items.append(item)
            self.current_page = page

            if self._source is not None:
                self.has_more = page * self.items_per_page < len(self._source)
            else:
                self.has_more = len(batch) >= self.items_per_page
            return True
        finally:
            if generation == self._generation:
                self.is_fetching = False


class RemoteSearchPager:
    """
    Pages through the search index 20 hits at a time.

    Each request is stamped with a sequence number; a response that comes
    back after a newer search was issued is dropped instead of overwriting
    fresher results.
    """

    BASE_PAYLOAD = {
        "analytics": True,
        "analyticsTags": ["web"],
        "clickAnalytics": True,
        "enablePersonalization": False,
        "facetingAfterDistinct": True,
        "facets": "*",
        "filters": '(has_prints:"true")',
    }

    def __init__(self, search: SearchFunction, hits_per_page: int = 20, debounce: float = 0.5,
                 notifier: Notifier = None, source: str = "saatchi"):
        self.search_fn = search
        self.hits_per_page = hits_per_page
        self.debounce = debounce
        self.notifier = notifier or Notifier()
        self.source = source

        self.query = ""
        self.facets: Dict[str, str] = {}
        self.hits: List[dict] = []
        self.page = -1
        self.has_more = True
        self.loading = False
        self._seq = 0
        self._debounce_token = 0

    def build_payload(self, query: str, page: int) -> dict:
        payload = dict(self.BASE_PAYLOAD)
        filters = payload["filters"]
        for facet, value in self.facets.items():
            if value and value != "all":
                escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
                filters += f' AND ({facet}:"{escaped}")'
        payload.update(filters=filters, hitsPerPage=self.hits_per_page, page=page, query=query)
        return payload

    def _tag(self, hits: List[dict], offset: int) -> List[dict]:
        tagged = []
        for position, hit in enumerate(hits, start=offset):
            tagged.append({
                **hit,
                "unique_id": f"{self.source}:{hit.get('objectID', 'anon')}:{position}",
                "is_external": True,
                "source": self.source,
            })
        return tagged

    async def _fetch(self, seq: int, page: int) -> Optional[List[dict]]:
        try:
            response = await self.search_fn(self.build_payload(self.query, page))
        except ArtdeskError as e:
            if seq != self._seq:
                return None
            logger.error("Error fetching search page %d: %s", page, e)
            self.notifier.error("Failed to fetch search results")
            self.hits = []
            self.has_more = False
            return None

        if seq != self._seq:
            logger.debug("Dropping stale search response (seq %d, latest %d)", seq, self._seq)
            return None
        hits = response.get("hits") if isinstance(response, dict) else None
        return hits if isinstance(hits, list) else []

    async def search(self, query: str, **facets) -> bool:
        """Start a fresh search from page 0. Returns False if the result was stale or failed."""
        self._seq += 1
        seq = self._seq
        self.query = query
        self.facets = {k: v for k, v in facets.items() if v}
        self.loading = True
        try:
            hits = await self._fetch(seq, 0)
        finally:
            if seq == self._seq:
                self.loading = False
        if hits is None:
            return False

        self.hits = self._tag(hits, 0)
        self.page = 0
        self.has_more = len(hits) == self.hits_per_page
        return True

    async def load_more(self) -> bool:
        if not self.has_more or self.loading:
            return False
        seq = self._seq
        page = self.page + 1
        self.loading = True
        try:
            hits = await self._fetch(seq, page)
        finally:
            if seq == self._seq:
                self.loading = False
        if hits is None:
            return False

        self.hits.extend(self._tag(hits, len(self.hits)))
        self.page = page
        self.has_more = len(hits) == self.hits_per_page
        return True

    async def search_debounced(self, query: str, **facets) -> bool:
        """Wait out the debounce interval; give up if another keystroke arrived meanwhile."""
        self._debounce_token += 1
        token = self._debounce_token
        await asyncio.sleep(self.debounce)
        if token != self._debounce_token:
            return False
        return await self.search(query, **facets)
