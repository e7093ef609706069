"""
Form/modal CRUD controller shared by every admin screen.

A `Resource` describes one entity type (endpoints, draft model, how to
build request bodies); `CrudController` drives the draft lifecycle against
it: open -> validate -> submit, and confirm -> delete. The local list is
only touched after the server has accepted the change.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type, Union

from artdesk import config
from artdesk.auth.session import Session
from artdesk.errors import ArtdeskError, EnvelopeError, HTTPStatusError, ValidationError
from artdesk.models.forms import (
    ArtworkDraft,
    Draft,
    GalleryDraft,
    InquiryDraft,
    NewsletterDraft,
    PricingRuleDraft,
    SponsorBannerDraft,
    UserDraft,
    ValidationResult,
)
from artdesk.models.listing import PaginationWindow
from artdesk.services.notifications import Notifier, deny_all
from artdesk.utils.http import BackendClient, extract_page, server_message, unwrap
from artdesk.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Endpoint:
    method: str
    path: str

    def format(self, entity_id: Any = None) -> str:
        return self.path.format(id=entity_id)


@dataclass
class Resource:
    label: str
    draft: Type[Draft] = Draft
    listing: Optional[Endpoint] = None
    create: Optional[Endpoint] = None
    update: Optional[Endpoint] = None
    delete: Optional[Endpoint] = None
    actions: Dict[str, Endpoint] = field(default_factory=dict)
    id_fields: tuple = ("_id", "id")
    list_key: Optional[str] = None
    search_param: str = "search"
    on_listings_host: bool = False
    create_body: Optional[Callable[[Draft], dict]] = None
    update_body: Optional[Callable[[Draft, Any], dict]] = None
    delete_body: Optional[Callable[[dict, Any], dict]] = None
    action_bodies: Dict[str, Callable[[Any], dict]] = field(default_factory=dict)
    # past tense for success messages when "<verb>d" reads wrong
    verbs: Dict[str, str] = field(default_factory=dict)

    def past_tense(self, action: str) -> str:
        if action in self.verbs:
            return self.verbs[action]
        return f"{action}d" if action.endswith("e") else f"{action}ed"

    def id_of(self, entity: Dict[str, Any]) -> Optional[str]:
        for key in self.id_fields:
            if entity.get(key) not in (None, ""):
                return str(entity[key])
        return None


SPONSOR_BANNERS = Resource(
    label="banner",
    draft=SponsorBannerDraft,
    listing=Endpoint("GET", "/sponsor-banner/all"),
    create=Endpoint("POST", "/sponsor-banner/create"),
    update=Endpoint("PUT", "/sponsor-banner/{id}"),
    delete=Endpoint("DELETE", "/sponsor-banner/{id}"),
    actions={"toggle": Endpoint("PATCH", "/sponsor-banner/{id}/toggle")},
)

PRICING_RULES = Resource(
    label="pricing",
    draft=PricingRuleDraft,
    listing=Endpoint("GET", "/artwork-pricing/all"),
    create=Endpoint("POST", "/artwork-pricing/create-or-update"),
    update=Endpoint("POST", "/artwork-pricing/create-or-update"),
    delete=Endpoint("DELETE", "/artwork-pricing/delete/{id}"),
    actions={"reset": Endpoint("PUT", "/artwork-pricing/reset/{id}")},
    search_param="searchQuery",
    verbs={"reset": "reset"},
)

GALLERIES = Resource(
    label="gallery",
    draft=GalleryDraft,
    create=Endpoint("POST", "/api/galleries/create"),
    update=Endpoint("PUT", "/api/galleries/update"),
    delete=Endpoint("DELETE", "/api/galleries/delete"),
    id_fields=("id", "_id", "internalID"),
    on_listings_host=True,
    create_body=lambda draft: {"itemData": draft.to_payload(), "category": draft.category},
    update_body=lambda draft, entity_id: {
        "id": entity_id,
        "category": draft.category,
        "updates": draft.to_payload(),
    },
    delete_body=lambda entity, entity_id: {"id": entity_id, "category": entity.get("category")},
)

USERS = Resource(
    label="user",
    draft=UserDraft,
    listing=Endpoint("GET", "/users/all"),
    delete=Endpoint("DELETE", "/users/{id}"),
)

ARTWORKS = Resource(
    label="artwork",
    draft=ArtworkDraft,
    listing=Endpoint("GET", "/artworks/external-sold"),
    update=Endpoint("PUT", "/artworks/update"),
    id_fields=("artsyId", "_id", "id"),
    list_key="artworks",
    update_body=lambda draft, entity_id: {
        "id": entity_id,
        "category": "Artwork",
        "updates": draft.to_payload(),
    },
)

AUCTIONS = Resource(
    label="auction",
    listing=Endpoint("GET", "/auction/all"),
    delete=Endpoint("POST", "/auction/delete"),
    list_key="formattedAuctions",
    delete_body=lambda entity, entity_id: {"auctionId": entity_id},
    actions={
        "delete_catalog": Endpoint("POST", "/auction/deleteAllByCategory"),
        "delete_everything": Endpoint("POST", "/auction/deleteAllAuctionsAndCatalogs"),
    },
    action_bodies={"delete_catalog": lambda category_id: {"categoryId": category_id}},
    verbs={"delete_catalog": "catalog deleted", "delete_everything": "catalogs deleted"},
)

NEWSLETTER = Resource(
    label="newsletter",
    draft=NewsletterDraft,
    listing=Endpoint("GET", "/newsletter/admin/subscriptions"),
    create=Endpoint("POST", "/newsletter/admin/send"),
    delete=Endpoint("DELETE", "/newsletter/admin/subscription/{id}"),
    actions={"stats": Endpoint("GET", "/newsletter/admin/stats")},
    verbs={"create": "sent"},
)

OFFERS = Resource(
    label="offer",
    listing=Endpoint("GET", "/offer"),
    list_key="offers",
    actions={
        "accept": Endpoint("PATCH", "/offer/{id}/accept"),
        "reject": Endpoint("PATCH", "/offer/{id}/reject"),
    },
    action_bodies={"accept": lambda entity_id: {}, "reject": lambda entity_id: {}},
)

INQUIRIES = Resource(
    label="inquiry",
    draft=InquiryDraft,
    listing=Endpoint("GET", "/inquiry"),
    update=Endpoint("PUT", "/inquiry/{id}"),
    verbs={"update": "answered"},
)


def auction_catalogs(auctions: List[dict]) -> List[dict]:
    """Group auctions by their category into catalog summaries, in first-seen order."""
    catalogs: Dict[str, dict] = {}
    for auction in auctions:
        category = auction.get("category") if isinstance(auction.get("category"), dict) else {}
        catalog_id = category.get("_id") or "uncategorized"
        catalog = catalogs.setdefault(catalog_id, {
            "id": catalog_id,
            "name": category.get("name") or "Uncategorized",
            "auctions": [],
            "total_lots": 0,
            "active_lots": 0,
            "total_value": 0,
            "total_bidders": 0,
        })
        catalog["auctions"].append(auction)
        catalog["total_lots"] += 1
        catalog["total_value"] += auction.get("currentBid") or auction.get("startingBid") or 0
        catalog["total_bidders"] += len(auction.get("participants") or [])
        if auction.get("status") == "ACTIVE":
            catalog["active_lots"] += 1
    return list(catalogs.values())


def client_for(resource: Resource, session: Session = None, **kwargs) -> BackendClient:
    base_url = config.LISTINGS_BASE_URL if resource.on_listings_host else config.API_URL
    return BackendClient(session=session, base_url=base_url, **kwargs)


def failure_message(error: ArtdeskError, fallback: str) -> str:
    """The server's own message when it sent one, otherwise `fallback`."""
    if isinstance(error, (HTTPStatusError, EnvelopeError)):
        return server_message(error.body) or fallback
    return fallback


class CrudController:
    def __init__(self, resource: Resource, client: BackendClient,
                 notifier: Notifier = None, confirm: Callable[[str], bool] = None,
                 items: List[dict] = None):
        self.resource = resource
        self.client = client
        self.notifier = notifier or Notifier()
        self.confirm = confirm or deny_all
        self.items: List[dict] = list(items or [])
        self.draft: Optional[Draft] = None
        self.editing_id: Optional[str] = None
        self.window: Optional[PaginationWindow] = None

    # -- listing ---------------------------------------------------------

    def refresh(self, page: int = 1, limit: int = 10, search: str = None, **params) -> PaginationWindow:
        if self.resource.listing is None:
            raise ArtdeskError(f"Listing {self.resource.label}s is not supported")
        query = {"page": page, "limit": limit}
        if search:
            query[self.resource.search_param] = search
        query.update({k: v for k, v in params.items() if v is not None})

        body = self.client.request(self.resource.listing.method, self.resource.listing.format(), params=query)
        items, pagination = extract_page(body, self.resource.list_key)
        self.items = items
        total_pages = pagination.get("totalPages") or 1
        self.window = PaginationWindow(
            current_page=pagination.get("currentPage") or page,
            items_per_page=limit,
            total_pages=total_pages,
            total_items=pagination.get("totalItems"),
        )
        return self.window

    def find(self, entity_id: str) -> Optional[dict]:
        for item in self.items:
            if self.resource.id_of(item) == entity_id:
                return item
        return None

    # -- draft lifecycle ---------------------------------------------------

    def open(self, existing: Dict[str, Any] = None) -> Draft:
        if existing is None:
            self.draft = self.resource.draft()
            self.editing_id = None
        else:
            self.draft = self.resource.draft.from_entity(existing)
            self.editing_id = self.resource.id_of(existing)
        return self.draft

    def cancel(self) -> None:
        self.draft = None
        self.editing_id = None

    def validate(self, draft: Draft = None) -> ValidationResult:
        draft = draft or self.draft
        if draft is None:
            return ValidationResult(valid=False, errors=["Nothing to submit"])
        return draft.validate_draft()

    def submit(self, draft: Draft = None) -> bool:
        """
        Validate, then create or update. Returns True when the server
        accepted the draft. A validation failure never reaches the network.
        """
        draft = draft or self.draft
        result = self.validate(draft)
        if not result.valid:
            error = ValidationError(result.missing_fields, result.errors)
            logger.info("Blocked %s submit: %s", self.resource.label, error.message)
            self.notifier.error(error.message)
            return False

        creating = self.editing_id is None
        action = "create" if creating else "update"
        endpoint = self.resource.create if creating else self.resource.update
        if endpoint is None:
            self.notifier.error(f"Cannot {action} {self.resource.label}")
            return False

        if creating:
            body = self.resource.create_body(draft) if self.resource.create_body else draft.to_payload()
        else:
            body = (
                self.resource.update_body(draft, self.editing_id)
                if self.resource.update_body else draft.to_payload()
            )

        try:
            response = self.client.request(endpoint.method, endpoint.format(self.editing_id), json=body)
        except ArtdeskError as e:
            logger.error("Error on %s %s: %s", action, self.resource.label, e)
            self.notifier.error(failure_message(e, f"Failed to {action} {self.resource.label}"))
            return False

        self._apply_saved(response, draft)
        self.notifier.success(f"{self.resource.label.capitalize()} {self.resource.past_tense(action)} successfully")
        self.cancel()
        return True

    def _apply_saved(self, response: Any, draft: Draft) -> None:
        saved = unwrap(response)
        if not isinstance(saved, dict) or self.resource.id_of(saved) is None:
            if self.editing_id is None:
                # server did not echo the new entity; reload so the list shows it
                self._reload()
                return
            existing = self.find(self.editing_id) or {}
            saved = {**existing, **draft.to_payload()}

        saved_id = self.resource.id_of(saved) or self.editing_id
        for index, item in enumerate(self.items):
            if self.resource.id_of(item) == saved_id:
                self.items[index] = saved
                return
        self.items.append(saved)

    def _reload(self) -> None:
        if self.resource.listing is None:
            return
        window = self.window
        try:
            self.refresh(page=window.current_page if window else 1,
                         limit=window.items_per_page if window else 10)
        except ArtdeskError as e:
            logger.warning("Reload after save failed for %s: %s", self.resource.label, e)

    # -- destructive actions ---------------------------------------------

    def delete(self, entity: Union[str, Dict[str, Any]], extra_body: Dict[str, Any] = None) -> bool:
        if self.resource.delete is None:
            self.notifier.error(f"Cannot delete {self.resource.label}")
            return False

        if isinstance(entity, dict):
            entity_id = self.resource.id_of(entity)
        else:
            entity_id = entity
            entity = self.find(entity_id) or {"id": entity_id}

        if not self.confirm(f"Are you sure you want to delete this {self.resource.label}?"):
            return False

        body = self.resource.delete_body(entity, entity_id) if self.resource.delete_body else None
        if extra_body:
            body = {**(body or {}), **extra_body}
        try:
            self.client.request(self.resource.delete.method, self.resource.delete.format(entity_id), json=body)
        except ArtdeskError as e:
            logger.error("Error deleting %s %s: %s", self.resource.label, entity_id, e)
            self.notifier.error(failure_message(e, f"Failed to delete {self.resource.label}"))
            return False

        self.items = [item for item in self.items if self.resource.id_of(item) != entity_id]
        self.notifier.success(f"{self.resource.label.capitalize()} deleted successfully")
        return True

    def _action(self, action: str) -> Endpoint:
        endpoint = self.resource.actions.get(action)
        if endpoint is None:
            raise KeyError(f"{self.resource.label} has no '{action}' action")
        return endpoint

    def perform(self, action: str, entity_id: str = None, confirm_message: str = None) -> bool:
        """Run one of the resource's extra actions (toggle, accept, delete_catalog...) and reload."""
        endpoint = self._action(action)
        if confirm_message and not self.confirm(confirm_message):
            return False

        make_body = self.resource.action_bodies.get(action)
        body = make_body(entity_id) if make_body else None
        label = action.replace("_", " ")
        try:
            self.client.request(endpoint.method, endpoint.format(entity_id), json=body)
        except ArtdeskError as e:
            logger.error("Error on %s %s %s: %s", action, self.resource.label, entity_id, e)
            self.notifier.error(failure_message(e, f"Failed to {label} {self.resource.label}"))
            return False

        self.notifier.success(f"{self.resource.label.capitalize()} {self.resource.past_tense(action)} successfully")
        self._reload()
        return True

    def fetch(self, action: str, entity_id: str = None, **params) -> Any:
        """Read-only action such as newsletter stats; returns the unwrapped payload."""
        endpoint = self._action(action)
        body = self.client.request(endpoint.method, endpoint.format(entity_id), params=params or None)
        return unwrap(body)
