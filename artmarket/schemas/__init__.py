"""
Pydantic schemas for trigger events, document snapshots and the search proxy.
"""

from artmarket.schemas.documents import (
    ArtworkDocument,
    ExhibitionDocument,
    MessageDocument,
    OrderDocument,
    parse_document,
)
from artmarket.schemas.events import DocumentEvent, TriggerResponse
from artmarket.schemas.search import SearchQueryRequest, SearchQueryResponse

__all__ = [
    "ArtworkDocument",
    "ExhibitionDocument",
    "MessageDocument",
    "OrderDocument",
    "parse_document",
    "DocumentEvent",
    "TriggerResponse",
    "SearchQueryRequest",
    "SearchQueryResponse",
]
