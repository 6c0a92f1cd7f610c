import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from artmarket.core.context import ServiceContext, get_context
from artmarket.schemas.search import SearchQueryRequest
from artmarket.services.search_proxy import run_query

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/query")
async def search_query(body: SearchQueryRequest, ctx: ServiceContext = Depends(get_context)):
    """
    Run a query against an index and return the engine's {body, statusCode} unchanged.

    The HTTP status of this endpoint is 200 even when the engine answered 4xx/5xx; the
    engine's status is in statusCode.
    """
    result = await run_query(ctx.search, body)
    return JSONResponse(content=result.model_dump(by_alias=True))
