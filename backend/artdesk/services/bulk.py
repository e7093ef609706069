from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel

from artdesk.errors import ArtdeskError
from artdesk.models.forms import SoldStatus
from artdesk.services.crud import ARTWORKS, failure_message
from artdesk.services.notifications import Notifier
from artdesk.utils.http import BackendClient
from artdesk.utils.logger import get_logger

logger = get_logger(__name__)

MAX_WORKERS = 8


class BulkResult(BaseModel):
    id: str
    ok: bool
    error: Optional[str] = None


class BulkReport(BaseModel):
    results: List[BulkResult] = []

    @property
    def succeeded(self) -> List[BulkResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[BulkResult]:
        return [r for r in self.results if not r.ok]

    def summary(self, verb: str = "updated") -> str:
        return f"{len(self.succeeded)} of {len(self.results)} artworks {verb}"


def available_update(artwork: Dict[str, Any]) -> Dict[str, Any]:
    """Request body that puts one artwork back on the market."""
    artwork_id = ARTWORKS.id_of(artwork)
    slug = artwork.get("slug") or ""
    updates = {
        "soldStatus": SoldStatus.available.value,
        "slug": slug,
        "title": artwork.get("title") or "",
        "artistNames": artwork.get("artistNames") or artwork.get("artist_names") or "",
        "imageUrl": artwork.get("imageUrl") or artwork.get("image") or "",
        "href": f"/artwork/{slug}" if slug else "",
    }
    return {"id": artwork_id, "category": "Artwork", "updates": updates}


def _mark_one(client: BackendClient, artwork: Dict[str, Any]) -> BulkResult:
    body = available_update(artwork)
    artwork_id = body["id"] or ""
    if not artwork_id:
        return BulkResult(id="", ok=False, error="Artwork has no id")
    try:
        client.request(ARTWORKS.update.method, ARTWORKS.update.format(artwork_id), json=body)
    except ArtdeskError as e:
        logger.warning("Could not mark artwork %s as available: %s", artwork_id, e)
        return BulkResult(id=artwork_id, ok=False, error=failure_message(e, "Failed to update artwork"))
    return BulkResult(id=artwork_id, ok=True)


def bulk_mark_as_available(client: BackendClient, artworks: Sequence[Dict[str, Any]],
                           notifier: Notifier = None, max_workers: int = MAX_WORKERS) -> BulkReport:
    """
    Issue one update per artwork in parallel and report each outcome.

    Partial failure is allowed: artworks that were updated stay updated and
    the report lists the ones that were not, in input order.
    """
    notifier = notifier or Notifier()
    artworks = list(artworks)
    if not artworks:
        return BulkReport()

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(artworks)))) as pool:
        results = list(pool.map(lambda artwork: _mark_one(client, artwork), artworks))

    report = BulkReport(results=results)
    logger.info("Bulk mark-as-available: %s", report.summary())
    if report.failed:
        notifier.error(f"{report.summary('marked as available')}; failed: "
                       + ", ".join(r.id or "?" for r in report.failed))
    else:
        notifier.success(report.summary("marked as available"))
    return report
