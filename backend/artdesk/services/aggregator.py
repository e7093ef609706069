"""
Aggregation fetcher for the combined galleries / museums / shows listing.

One GET per category descriptor is issued concurrently. Each response is
normalized into `ListingItem`s; a category that fails for any reason is
logged and contributes nothing, so one broken endpoint never empties the
whole listing. Results are merged in descriptor order, which makes the
output independent of which request finishes first.
"""
import asyncio
from typing import Any, Iterable, List, Optional

import httpx
from pydantic import ValidationError

from artdesk import config
from artdesk.models.listing import (
    PLACEHOLDER_IMAGE,
    CategoryDescriptor,
    ListingItem,
    ListingType,
    Location,
)
from artdesk.utils.categories import ALL_CATEGORIES
from artdesk.utils.logger import get_logger

logger = get_logger(__name__)

RESPONSE_KEYS = {
    ListingType.gallery: "galleries",
    ListingType.museum: "museums",
    ListingType.show: "shows",
}


def native_id(raw: dict) -> str:
    for key in ("_id", "id", "internalID", "slug"):
        value = raw.get(key)
        if value not in (None, ""):
            return str(value)
    return "anon"


def make_unique_id(slug: str, source_id: str, position: int) -> str:
    # position keeps keys unique when two endpoints reuse the same native id
    return f"{slug}:{source_id}:{position}"


def _image_url(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    if isinstance(value, dict):
        for key in ("url", "src"):
            if value.get(key):
                return value[key]
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value if v)
    return str(value)


def _partner_name(raw: dict) -> Optional[str]:
    partner = raw.get("partner")
    if isinstance(partner, dict) and partner.get("name"):
        return partner["name"]
    return None


def _locations(raw: dict) -> List[Location]:
    locations = raw.get("locations")
    if isinstance(locations, list) and locations:
        return [
            Location(city=_text(loc.get("city")), country=_text(loc.get("country")))
            for loc in locations
            if isinstance(loc, dict)
        ]
    partner = _partner_name(raw)
    return [Location(city=partner)] if partner else []


def normalize(raw: dict, descriptor: CategoryDescriptor, position: int) -> ListingItem:
    source_id = native_id(raw)
    image = _image_url(raw.get("image"))
    if image is None and descriptor.kind == ListingType.show:
        image = _image_url(raw.get("coverImage"))

    return ListingItem(
        unique_id=make_unique_id(descriptor.slug, source_id, position),
        id=None if source_id == "anon" else source_id,
        name=_text(raw.get("name") or raw.get("title")) or "",
        title=_text(raw.get("title")),
        image=image or PLACEHOLDER_IMAGE,
        category=descriptor.name,
        type=descriptor.kind,
        slug=_text(raw.get("slug")),
        locations=_locations(raw),
        artist_names=_text(raw.get("artistNames")),
        sale_message=_text(raw.get("saleMessage")),
        partner_name=_partner_name(raw),
        raw=raw,
    )


async def fetch_category(client: httpx.AsyncClient, descriptor: CategoryDescriptor,
                         base_url: str = None, page_size: int = None) -> List[ListingItem]:
    base_url = (base_url or config.LISTINGS_BASE_URL).rstrip("/")
    page_size = page_size or config.CATEGORY_PAGE_SIZE
    url = f"{base_url}{descriptor.endpoint}"

    try:
        response = await client.get(url, params={"limit": page_size})
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        logger.error("Error fetching %s: upstream returned %s", descriptor.name, e.response.status_code)
        return []
    except httpx.RequestError as e:
        logger.error("Error fetching %s: %s", descriptor.name, e)
        return []
    except ValueError as e:
        logger.error("Error fetching %s: unreadable payload: %s", descriptor.name, e)
        return []

    records = data.get(RESPONSE_KEYS[descriptor.kind]) if isinstance(data, dict) else None
    if not isinstance(records, list):
        logger.info("No %s returned for %s", RESPONSE_KEYS[descriptor.kind], descriptor.name)
        return []

    items: List[ListingItem] = []
    for position, record in enumerate(records):
        if not isinstance(record, dict):
            continue
        try:
            items.append(normalize(record, descriptor, position))
        except ValidationError as e:
            # one bad record is skipped, the rest of the category still shows
            logger.warning("Skipping %s record %d (%s): %d invalid fields",
                           descriptor.name, position, native_id(record), e.error_count())
    return items


async def aggregate_listings(descriptors: Iterable[CategoryDescriptor] = None,
                             client: httpx.AsyncClient = None,
                             base_url: str = None,
                             page_size: int = None) -> List[ListingItem]:
    """
    Fetch every category concurrently and return one flat list.

    No caching and no retries: each call is a full fresh fetch.
    """
    descriptors = list(descriptors if descriptors is not None else ALL_CATEGORIES)
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=config.REQUEST_TIMEOUT)

    try:
        results = await asyncio.gather(
            *(fetch_category(client, d, base_url=base_url, page_size=page_size) for d in descriptors)
        )
    finally:
        if owns_client:
            await client.aclose()

    combined: List[ListingItem] = []
    for items in results:
        combined.extend(items)

    logger.info("Aggregated %d items from %d categories", len(combined), len(descriptors))
    return combined
