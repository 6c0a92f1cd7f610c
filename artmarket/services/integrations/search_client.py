"""
Search engine client - Elasticsearch/OpenSearch compatible REST API over httpx.

index() is an upsert keyed by document id; delete() treats an already missing entry as
success so both stay safe under redelivery. search() returns the engine's response
verbatim, including error responses.
"""

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from artmarket.core.errors import SearchServiceError
from artmarket.services.integrations.http_client import create_httpx_client

logger = logging.getLogger(__name__)


@dataclass
class SearchResponse:
    body: Any
    status_code: int


def _doc_path(index_name: str, document_id: str) -> str:
    return f"/{quote(index_name, safe='')}/_doc/{quote(document_id, safe='')}"


def _json_or_text(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class SearchClient:
    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        api_key: str | None = None,
        dry_run: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"ApiKey {api_key}"
        auth = (username, password) if username and password and not api_key else None
        self.dry_run = dry_run
        self._client = create_httpx_client(
            base_url=base_url.rstrip("/"), headers=headers, auth=auth, transport=transport
        )

    async def index(self, index_name: str, document_id: str, body: dict) -> dict:
        """
        Create or replace the document stored under document_id.

        Raises:
            SearchServiceError: On transport failure or a non-2xx response
        """
        if self.dry_run:
            logger.info(f"[DRY-RUN] Would index {index_name}/{document_id}")
            return {"result": "dry_run", "_id": document_id}
        response = await self._send("PUT", _doc_path(index_name, document_id), json=body)
        if response.is_error:
            raise SearchServiceError(
                f"Indexing {index_name}/{document_id} failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    async def delete(self, index_name: str, document_id: str) -> dict:
        """
        Remove the document stored under document_id; a missing document is not an error.

        Raises:
            SearchServiceError: On transport failure or a non-2xx, non-404 response
        """
        if self.dry_run:
            logger.info(f"[DRY-RUN] Would delete {index_name}/{document_id}")
            return {"result": "dry_run", "_id": document_id}
        response = await self._send("DELETE", _doc_path(index_name, document_id))
        if response.status_code == 404:
            logger.info(f"Index entry {index_name}/{document_id} already absent")
            return {"result": "not_found", "_id": document_id}
        if response.is_error:
            raise SearchServiceError(
                f"Deleting {index_name}/{document_id} failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    async def search(self, index_name: str, query_body: dict) -> SearchResponse:
        """
        Run query_body against index_name.

        Returns:
            SearchResponse with the engine's body and status code, unmodified

        Raises:
            SearchServiceError: Only when the engine cannot be reached
        """
        response = await self._send("POST", f"/{quote(index_name, safe='')}/_search", json=query_body)
        return SearchResponse(body=_json_or_text(response), status_code=response.status_code)

    async def _send(self, method: str, path: str, json: dict | None = None) -> httpx.Response:
        try:
            return await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.error(f"Search engine request {method} {path} failed: {e}")
            raise SearchServiceError(f"Search engine unreachable: {type(e).__name__}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
