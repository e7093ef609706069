from typing import Optional

from fastapi import APIRouter, Depends, Query
import httpx

from artdesk.models.listing import ListingPage, ListingType, PaginationWindow
from artdesk.services.aggregator import aggregate_listings
from artdesk.services.filters import category_options, filter_items
from artdesk.services.pager import SlicePager
from artdesk.utils.categories import ALL_CATEGORIES, ALL_ITEMS
from artdesk.utils.http import get_async_client
from artdesk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/listings", tags=["Listings"])


def _descriptors(kind: Optional[ListingType]):
    if kind is None:
        return ALL_CATEGORIES
    return [d for d in ALL_CATEGORIES if d.kind == kind]


@router.get("", response_model=ListingPage)
async def browse_listings(
    search: str = "",
    category: str = ALL_ITEMS,
    kind: Optional[ListingType] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    client: httpx.AsyncClient = Depends(get_async_client),
):
    """
    Combined galleries / museums / shows listing, filtered and cut to one page.
    Categories that fail upstream are simply absent from the result.
    """
    items = await aggregate_listings(_descriptors(kind), client=client)
    filtered = filter_items(items, search, category)

    pager = SlicePager(filtered, items_per_page=limit)
    window = PaginationWindow.for_count(len(filtered), pager.items_per_page, page)
    pager.current_page = window.current_page

    logger.info("Listings page %d/%d (%d of %d items match)",
                window.current_page, window.total_pages, len(filtered), len(items))
    return ListingPage(
        items=pager.page_items(window.current_page),
        window=window,
        has_more=pager.has_more,
        categories=category_options(items),
    )


@router.get("/categories")
async def list_categories(kind: Optional[ListingType] = None):
    return {
        "categories": [
            {"name": d.name, "slug": d.slug, "kind": d.kind.value}
            for d in _descriptors(kind)
        ]
    }
