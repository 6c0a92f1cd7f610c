"""
Search proxy request/response schemas.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Index names: lowercase, no leading "-", "_" or "."
INDEX_NAME_PATTERN = r"^[a-z0-9][a-z0-9._-]{0,254}$"


class SearchQueryRequest(BaseModel):
    """Query forwarded verbatim to the named index."""

    model_config = ConfigDict(extra="forbid")

    collection: str = Field(..., pattern=INDEX_NAME_PATTERN)
    query: dict[str, Any]


class SearchQueryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    body: Any
    status_code: int = Field(..., alias="statusCode")
