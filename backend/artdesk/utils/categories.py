from typing import Dict, List, Optional

from artdesk.models.listing import CategoryDescriptor, ListingType

ALL_ITEMS = "All Items"

# Sentinels that switch category filtering off
ALL_SENTINELS = (ALL_ITEMS, "all", "")


def _descriptors(kind: ListingType, entries) -> List[CategoryDescriptor]:
    return [
        CategoryDescriptor(name=name, endpoint=endpoint, slug=endpoint.rsplit("/", 1)[-1], kind=kind)
        for name, endpoint in entries
    ]


GALLERY_CATEGORIES = _descriptors(ListingType.gallery, [
    ("All Galleries", "/api/galleries"),
    ("Graffiti & Street Art", "/api/graffiti-street-art"),
    ("Photography", "/api/photography-galleries"),
    ("Modern", "/api/modern"),
    ("Middle Eastern Art", "/api/middle-eastern-art"),
    ("Emerging Art", "/api/emerging-art"),
    ("Drawings", "/api/drawings"),
    ("South Asian Art", "/api/south-asian-southeast-asian-art"),
    ("Eastern European Art", "/api/eastern-european-art"),
    ("Pop Art", "/api/pop-art"),
    ("Ancient Art", "/api/ancient-art-antiquities"),
    ("Indian Art", "/api/indian-art"),
    ("Ceramics", "/api/ceramics"),
    ("Old Masters", "/api/old-masters"),
    ("New Media", "/api/new-media-video"),
    ("Contemporary Design", "/api/contemporary-design"),
    ("Outdoor Art", "/api/outdoor-art"),
    ("Historical Art", "/api/historical-art"),
    ("Modern & Contemporary Art", "/api/modern-contemporary-art"),
])

MUSEUM_CATEGORIES = _descriptors(ListingType.museum, [
    ("Museums", "/api/museums"),
    ("University Museums", "/api/university-museums"),
    ("Nonprofit Organizations", "/api/nonprofit-organizations"),
    ("Artist Estates", "/api/artist-estates"),
    ("Private Collections", "/api/private-collections"),
])

SHOW_CATEGORIES = _descriptors(ListingType.show, [
    ("Shows", "/api/shows"),
])

ALL_CATEGORIES = GALLERY_CATEGORIES + MUSEUM_CATEGORIES + SHOW_CATEGORIES

_BY_NAME: Dict[str, CategoryDescriptor] = {c.name: c for c in ALL_CATEGORIES}


def category_names() -> List[str]:
    return [ALL_ITEMS] + [c.name for c in ALL_CATEGORIES]


def find_category(name: str) -> Optional[CategoryDescriptor]:
    return _BY_NAME.get(name)
