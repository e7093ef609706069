import httpx

from artdesk import config
from artdesk.errors import HTTPStatusError, TransportError
from artdesk.utils.logger import get_logger

logger = get_logger(__name__)


class AlgoliaProxyClient:
    """Posts search payloads to the /api/algolia forwarding endpoint."""

    def __init__(self, client: httpx.AsyncClient = None, base_url: str = None):
        self.client = client or httpx.AsyncClient(timeout=config.REQUEST_TIMEOUT)
        self.url = f"{(base_url or config.LISTINGS_BASE_URL).rstrip('/')}/api/algolia"

    async def query(self, payload: dict) -> dict:
        try:
            response = await self.client.post(self.url, json=payload)
        except httpx.RequestError as e:
            raise TransportError(f"Search request failed: {e}")

        if response.status_code != 200:
            raise HTTPStatusError(response.status_code, f"HTTP error! status: {response.status_code}", response.text)
        return response.json()

    async def aclose(self):
        await self.client.aclose()
