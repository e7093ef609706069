import math
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

PLACEHOLDER_IMAGE = "/placeholder-gallery.jpg"


class ListingType(str, Enum):
    gallery = "gallery"
    museum = "museum"
    show = "show"


class CategoryDescriptor(BaseModel):
    name: str
    endpoint: str
    slug: str
    kind: ListingType


class Location(BaseModel):
    city: Optional[str] = None
    country: Optional[str] = None


class ListingItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    unique_id: str = Field(alias="uniqueId")
    id: Optional[str] = None
    name: str = ""
    title: Optional[str] = None
    image: str = PLACEHOLDER_IMAGE
    category: str
    type: ListingType
    slug: Optional[str] = None
    locations: List[Location] = []
    artist_names: Optional[str] = None
    sale_message: Optional[str] = None
    partner_name: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict, exclude=True)


class FilterState(BaseModel):
    search_query: str = ""
    selected_category: str = "All Items"


class PaginationWindow(BaseModel):
    current_page: int = 1
    items_per_page: int
    total_pages: int = 0
    total_items: Optional[int] = None

    @classmethod
    def for_count(cls, count: int, items_per_page: int, current_page: int = 1):
        total_pages = math.ceil(count / items_per_page) if items_per_page > 0 else 0
        current_page = min(max(1, current_page), max(1, total_pages))
        return cls(
            current_page=current_page,
            items_per_page=items_per_page,
            total_pages=total_pages,
            total_items=count,
        )


class ListingPage(BaseModel):
    items: List[ListingItem]
    window: PaginationWindow
    has_more: bool
    categories: List[str] = []
