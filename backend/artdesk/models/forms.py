from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

SPONSOR_PLACEMENTS = ("homepage", "collect", "museums", "artists", "galleries", "price-index")


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _number(value: Any) -> Optional[float]:
    if _blank(value):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class ValidationResult(BaseModel):
    valid: bool
    missing_fields: List[str] = []
    errors: List[str] = []


class Draft(BaseModel):
    """
    Mutable local copy of an entity in a create/edit form.

    Field names are snake_case in Python and camelCase on the wire, so
    `missing_fields` and payloads use the backend's names.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        validate_assignment=True,
        extra="ignore",
    )

    REQUIRED: ClassVar[Tuple[str, ...]] = ()

    @classmethod
    def from_entity(cls, entity: Dict[str, Any]) -> "Draft":
        return cls.model_validate(cls.present_fields(entity))

    @staticmethod
    def present_fields(entity: Dict[str, Any]) -> Dict[str, Any]:
        # null from the backend means "not set"; let the field default apply
        return {key: value for key, value in entity.items() if value is not None}

    def missing_fields(self) -> List[str]:
        values = self.model_dump(by_alias=True)
        return [name for name in self.REQUIRED if _blank(values.get(name))]

    def field_errors(self) -> List[str]:
        return []

    def validate_draft(self) -> ValidationResult:
        missing = self.missing_fields()
        errors = self.field_errors() if not missing else []
        return ValidationResult(valid=not missing and not errors, missing_fields=missing, errors=errors)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})


class SponsorBannerDraft(Draft):
    title: str = ""
    description: str = ""
    image: str = ""
    link: str = ""
    sponsor_name: str = ""
    sponsor_website: str = ""
    placement: str = ""
    position: str = "middle"
    start_date: str = ""
    end_date: str = ""
    contact_email: str = ""
    contact_phone: str = ""
    budget: str = ""

    REQUIRED = (
        "title", "description", "image", "link", "sponsorName", "sponsorWebsite",
        "placement", "startDate", "endDate", "contactEmail", "budget",
    )

    @classmethod
    def from_entity(cls, entity):
        data = cls.present_fields(entity)
        for key in ("startDate", "endDate"):
            if isinstance(data.get(key), str):
                data[key] = data[key].split("T")[0]
        return cls.model_validate(data)

    def field_errors(self):
        errors = []
        if self.placement not in SPONSOR_PLACEMENTS:
            errors.append("Please select a valid placement")
        if _number(self.budget) is None:
            errors.append("Budget must be a number")
        return errors

    def to_payload(self):
        payload = super().to_payload()
        payload["budget"] = _number(self.budget)
        return payload


class PriceType(str, Enum):
    money = "Money"
    price_range = "PriceRange"


class PricingRuleDraft(Draft):
    artwork_id: str = ""
    artwork_slug: str = ""
    original_price: str = ""
    original_price_type: PriceType = PriceType.money
    original_min_price: str = ""
    original_max_price: str = ""
    adjustment_percentage: str = ""
    adjustment_reason: str = ""
    artwork_title: str = ""
    artist_name: str = ""
    category: str = ""

    REQUIRED = (
        "artworkId", "artworkSlug", "originalPrice", "originalPriceType",
        "artworkTitle", "artistName", "adjustmentPercentage",
    )

    def field_errors(self):
        errors = []
        if _number(self.adjustment_percentage) is None:
            errors.append("Adjustment percentage must be a number")
        if self.original_price_type == PriceType.price_range and (
            _number(self.original_min_price) is None or _number(self.original_max_price) is None
        ):
            errors.append("Min and max prices are required for price range")
        return errors

    def to_payload(self):
        payload = super().to_payload()
        for key in ("originalPrice", "originalMinPrice", "originalMaxPrice", "adjustmentPercentage"):
            payload[key] = _number(payload[key])
        return payload


class GalleryDraft(Draft):
    id: Optional[str] = None
    name: str = ""
    category: str = ""
    image: str = ""
    slug: str = ""
    description: str = ""

    REQUIRED = ("name", "category")

    @classmethod
    def from_entity(cls, entity):
        data = cls.present_fields(entity)
        data.setdefault("id", data.get("_id") or data.get("internalID"))
        return cls.model_validate(data)


class UserRole(str, Enum):
    admin = "ADMIN"
    sponsor = "SPONSOR"
    gallery = "GALLERY"
    museum = "MUSEUM"
    auction = "AUCTION"
    fair = "FAIR"
    user = "USER"


class UserDraft(Draft):
    id: Optional[str] = None
    name: str = ""
    email: str = ""
    role: UserRole = UserRole.user

    REQUIRED = ("name", "email")

    def field_errors(self):
        return [] if "@" in self.email else ["Please enter a valid email address"]


class SoldStatus(str, Enum):
    available = "available"
    reserved = "reserved"
    sold = "sold"


SOLD_DETAIL_FIELDS = ("soldPrice", "soldTo", "soldNotes")


class ArtworkDraft(Draft):
    id: Optional[str] = None
    title: str = ""
    artist_names: str = ""
    image: str = ""
    slug: str = ""
    sold_status: SoldStatus = SoldStatus.available
    sold_price: str = ""
    sold_to: str = ""
    sold_notes: str = ""

    REQUIRED = ("id", "title")

    @classmethod
    def from_entity(cls, entity):
        data = cls.present_fields(entity)
        data.setdefault("id", data.get("artsyId") or data.get("_id") or data.get("objectID"))
        if "image" not in data and data.get("imageUrl"):
            data["image"] = data["imageUrl"]
        return cls.model_validate(data)

    def field_errors(self):
        if self.sold_status != SoldStatus.available and not _blank(self.sold_price) and _number(self.sold_price) is None:
            return ["Sold price must be a number"]
        return []

    def to_payload(self):
        updates = super().to_payload()
        if self.sold_status == SoldStatus.available:
            # sale details mean nothing once the work is back on the market
            for key in SOLD_DETAIL_FIELDS:
                updates.pop(key, None)
        else:
            updates["soldPrice"] = _number(self.sold_price)
        if self.slug:
            updates["href"] = f"/artwork/{self.slug}"
        return updates


class NewsletterDraft(Draft):
    subject: str = ""
    message: str = ""

    REQUIRED = ("subject", "message")


class InquiryDraft(Draft):
    """Admin reply to a buyer inquiry. The original inquiry fields travel back unchanged."""

    name: str = ""
    item_name: str = ""
    email: str = ""
    phone: str = ""
    message: str = ""
    response: str = ""
    status: str = "pending"

    REQUIRED = ("response",)

    def to_payload(self):
        payload = super().to_payload()
        payload["response"] = self.response.strip()
        payload["status"] = "responded"
        return payload
