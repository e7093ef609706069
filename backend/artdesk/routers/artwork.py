from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import httpx

from artdesk import config
from artdesk.utils.http import get_async_client
from artdesk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Artwork"])


class GraphQLRequest(BaseModel):
    query: str
    variables: Optional[Dict[str, Any]] = None


@router.post("/artwork")
async def artwork_query(data: GraphQLRequest, client: httpx.AsyncClient = Depends(get_async_client)):
    try:
        upstream = await client.post(
            config.ARTSY_GRAPHQL_URL,
            json={"query": data.query, "variables": data.variables},
        )
        return upstream.json()
    except (httpx.RequestError, ValueError) as e:
        logger.error("Error in artwork query: %s", e)
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})
