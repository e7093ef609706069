import httpx
import requests
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from artdesk import config
from artdesk.auth.session import Session
from artdesk.errors import EnvelopeError, HTTPStatusError, TransportError
from artdesk.utils.logger import get_logger

logger = get_logger(__name__)


def server_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def unwrap(body: Any) -> Any:
    """Strip the `{success|status, data|items}` envelope."""
    if isinstance(body, dict):
        for key in ("data", "items"):
            if key in body:
                return body[key]
    return body


def extract_page(body: Any, list_key: str = None) -> Tuple[List[dict], Dict[str, Any]]:
    """
    Pull the item list and pagination info out of a list response.

    Understands both shapes the backend uses:
        {"data": {"items": [...], "totalPages": 3}}
        {"items": {"items": [...], "pagination": {"currentPage": 1, "totalPages": 3, "totalItems": 25}}}
    """
    payload = unwrap(body)
    pagination: Dict[str, Any] = {}
    items: List[dict] = []

    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        keys = (list_key,) if list_key else ("items", "artworks", "subscriptions", "results")
        for key in keys:
            if isinstance(payload.get(key), list):
                items = payload[key]
                break
        if isinstance(payload.get("pagination"), dict):
            pagination.update(payload["pagination"])
        if "totalPages" in payload:
            pagination.setdefault("totalPages", payload["totalPages"])

    if isinstance(body, dict) and isinstance(body.get("pagination"), dict):
        for key, value in body["pagination"].items():
            pagination.setdefault(key, value)

    return items, pagination


class BackendClient:
    """
    Thin wrapper over a requests session for the marketplace REST API.

    Every call checks the HTTP status *and* the body's `success`/`status`
    flag, and raises from `artdesk.errors` instead of returning a half-parsed
    body. Requests always carry a timeout.
    """

    def __init__(self, session: Session = None, base_url: str = None,
                 timeout: float = None, http: requests.Session = None):
        self.session = session
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.http = http or requests.Session()

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.session is not None:
            headers.update(self.session.auth_headers())
        return headers

    def request(self, method: str, path: str, params: dict = None, json: Any = None) -> Any:
        url = self.url(path)
        try:
            response = self.http.request(
                method,
                url,
                params=params,
                json=json,
                headers=self.headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise TransportError(f"Failed to connect to {url}: {e}")

        try:
            body = response.json()
        except ValueError:
            body = {"message": response.text} if response.text else None

        if response.status_code >= 400:
            message = server_message(body) or f"{method} {path} returned {response.status_code}"
            logger.warning("%s %s -> %s: %s", method, url, response.status_code, message)
            raise HTTPStatusError(response.status_code, message, body)

        if isinstance(body, dict):
            flag = body.get("success", body.get("status"))
            if flag is False:
                message = server_message(body) or f"{method} {path} was rejected"
                logger.warning("%s %s rejected: %s", method, url, message)
                raise EnvelopeError(message, body)

        return body

    def get(self, path: str, params: dict = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str, json: Any = None) -> Any:
        return self.request("DELETE", path, json=json)


async def get_async_client() -> AsyncIterator[httpx.AsyncClient]:
    """FastAPI dependency: one upstream client per request, closed afterwards."""
    async with httpx.AsyncClient(timeout=config.REQUEST_TIMEOUT) as client:
        yield client
