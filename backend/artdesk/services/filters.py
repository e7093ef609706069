from typing import Iterable, Iterator, List, Optional

from artdesk.models.listing import FilterState, ListingItem
from artdesk.utils.categories import ALL_SENTINELS


def _candidate_fields(item: ListingItem) -> Iterator[Optional[str]]:
    # order matters only for short-circuiting, not for the result
    yield item.name
    yield item.title
    yield item.artist_names
    yield item.partner_name
    yield item.sale_message
    for location in item.locations:
        yield location.city
        yield location.country


def matches_search(item: ListingItem, search_query: str) -> bool:
    needle = (search_query or "").lower()
    if not needle:
        return True
    return any(field and needle in field.lower() for field in _candidate_fields(item))


def matches_category(item: ListingItem, selected_category: str) -> bool:
    if selected_category in ALL_SENTINELS or selected_category is None:
        return True
    return item.category == selected_category


def filter_items(items: Iterable[ListingItem], search_query: str = "",
                 selected_category: str = "All Items") -> List[ListingItem]:
    """
    Category filter then case-insensitive substring search.

    Pure and stable: the output keeps the input's relative order and
    depends on nothing but the three arguments.
    """
    return [
        item for item in items
        if matches_category(item, selected_category) and matches_search(item, search_query)
    ]


def apply_filter_state(items: Iterable[ListingItem], state: FilterState) -> List[ListingItem]:
    return filter_items(items, state.search_query, state.selected_category)


def category_options(items: Iterable[ListingItem]) -> List[str]:
    return sorted({item.category for item in items if item.category})
