"""
Search proxy - runs a client-supplied query against a named index.

The body shape is validated (SearchQueryRequest); the query itself is forwarded
verbatim and the engine's response is returned unmodified.
"""

import logging

from artmarket.schemas.search import SearchQueryRequest, SearchQueryResponse
from artmarket.services.integrations.search_client import SearchClient

logger = logging.getLogger(__name__)


async def run_query(search: SearchClient, request: SearchQueryRequest) -> SearchQueryResponse:
    result = await search.search(request.collection, request.query)
    logger.info(f"Search proxy query on {request.collection} returned HTTP {result.status_code}")
    return SearchQueryResponse(body=result.body, status_code=result.status_code)
