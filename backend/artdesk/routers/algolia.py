from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
import httpx

from artdesk import config
from artdesk.utils.http import get_async_client
from artdesk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Search"])


@router.post("/algolia")
async def algolia_search(request: Request, client: httpx.AsyncClient = Depends(get_async_client)):
    """
    Forward a search payload to the hosted index with the server-held
    credentials. The upstream status and body come back unchanged.
    """
    if not config.ALGOLIA_APP_ID or not config.ALGOLIA_API_KEY:
        logger.error("Algolia credentials are not configured")
        return JSONResponse(status_code=500, content={"error": "Search is not configured"})

    body = await request.body()
    try:
        upstream = await client.post(
            config.algolia_query_url(),
            content=body,
            headers={
                "Content-Type": "application/json",
                "x-algolia-application-id": config.ALGOLIA_APP_ID,
                "x-algolia-api-key": config.ALGOLIA_API_KEY,
            },
        )
    except httpx.RequestError as e:
        logger.error("Algolia proxy error: %s", e)
        return JSONResponse(status_code=500, content={"error": str(e) or "Search request failed"})

    if upstream.status_code >= 400:
        logger.warning("Algolia responded %s", upstream.status_code)
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/json"),
    )
