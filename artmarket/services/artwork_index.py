"""
Artwork index sync - mirrors artwork writes/deletes into the search index and the
owner's users_artworks aggregate.

Index writes are upserts keyed by artwork id, deletes tolerate missing entries, and the
aggregate is recomputed from scratch, so every handler here can be re-run safely.
"""

import logging

from sqlalchemy.orm import Session

from artmarket.constants.event_types import EVENT_SEARCH_SYNC_FAILURE
from artmarket.core.context import ServiceContext
from artmarket.core.errors import InvalidDocumentError, SearchServiceError
from artmarket.db.models import Artwork
from artmarket.schemas.documents import ArtworkDocument, parse_document
from artmarket.schemas.events import TriggerResponse
from artmarket.services.system_event_service import error
from artmarket.services.users_artworks import recompute_user_artworks

logger = logging.getLogger(__name__)


def map_artwork(artwork_id: str, doc: ArtworkDocument) -> dict:
    """
    Search index projection of an artwork (flat fields, nested values passed through).
    """
    return {
        "id": artwork_id,
        "key": doc.key,
        "category": doc.category,
        "title": doc.title,
        "userName": doc.user_name,
        "userId": doc.user_id,
        "description": doc.description,
        "dimensions": doc.dimensions.model_dump() if doc.dimensions else None,
        "edition": doc.edition,
        "images": doc.images,
        "orientation": doc.orientation,
        "status": doc.status.value,
        "styles": doc.styles,
        "keywords": doc.keywords,
        "materials": doc.materials,
        "year": doc.year,
        "price": doc.price,
        "frame": doc.frame,
        "commerce": doc.commerce,
        "venue": doc.venue,
    }


def artwork_document_from_row(artwork: Artwork) -> ArtworkDocument:
    """Snapshot of a stored artwork, for in-process mutations that must be re-synced."""
    return ArtworkDocument(
        id=artwork.id,
        key=artwork.key,
        category=artwork.category,
        title=artwork.title,
        user_name=artwork.user_name,
        user_id=artwork.user_id,
        description=artwork.description,
        dimensions=artwork.dimensions,
        edition=artwork.edition,
        images=artwork.images,
        orientation=artwork.orientation,
        status=artwork.status,
        keywords=artwork.keywords,
        materials=artwork.materials,
        styles=artwork.styles,
        year=artwork.year,
        price=artwork.price,
        frame=artwork.frame,
        commerce=artwork.commerce,
        venue=artwork.venue,
    )


async def _index_and_aggregate(
    db: Session, ctx: ServiceContext, artwork_id: str, doc: ArtworkDocument
) -> None:
    if ctx.settings.feature_search_sync_enabled:
        try:
            await ctx.search.index(ctx.settings.search_artworks_index, artwork_id, map_artwork(artwork_id, doc))
        except SearchServiceError as e:
            error(db, EVENT_SEARCH_SYNC_FAILURE, reference_id=artwork_id, payload={"operation": "index"}, exc=e)
            raise
        logger.info(f"Indexed artwork {artwork_id}")
    else:
        logger.debug(f"Search sync disabled (feature flag) - not indexing artwork {artwork_id}")

    if doc.user_id:
        recompute_user_artworks(
            db, doc.user_id, include_full_text=ctx.settings.keywords_include_full_text
        )


async def handle_artwork_written(
    db: Session, ctx: ServiceContext, artwork_id: str, snapshot: dict | None
) -> TriggerResponse:
    """
    Artwork created or updated: upsert its index entry and refresh the owner aggregate.

    Incomplete or malformed snapshots (no title/category) are skipped without error.
    """
    try:
        doc = parse_document(ArtworkDocument, snapshot, id=artwork_id)
    except InvalidDocumentError as e:
        logger.info(f"Skipping artwork {artwork_id}: {e}")
        return TriggerResponse(processed=False, reason="invalid_document")

    if not doc.is_complete:
        logger.info(f"Skipping artwork {artwork_id}: missing title or category")
        return TriggerResponse(processed=False, reason="incomplete_document")

    await _index_and_aggregate(db, ctx, artwork_id, doc)
    return TriggerResponse(processed=True)


async def handle_artwork_deleted(
    db: Session, ctx: ServiceContext, artwork_id: str, before: dict | None
) -> TriggerResponse:
    """
    Artwork deleted: remove its index entry and recompute the owner aggregate from the
    remaining artworks.
    """
    if ctx.settings.feature_search_sync_enabled:
        try:
            await ctx.search.delete(ctx.settings.search_artworks_index, artwork_id)
        except SearchServiceError as e:
            error(db, EVENT_SEARCH_SYNC_FAILURE, reference_id=artwork_id, payload={"operation": "delete"}, exc=e)
            raise
        logger.info(f"Removed artwork {artwork_id} from index")

    user_id = (before or {}).get("userId")
    if not user_id:
        stored = db.get(Artwork, artwork_id)
        user_id = stored.user_id if stored else None

    if user_id:
        recompute_user_artworks(
            db,
            user_id,
            exclude_artwork_id=artwork_id,
            include_full_text=ctx.settings.keywords_include_full_text,
        )
    else:
        logger.info(f"Owner of deleted artwork {artwork_id} unknown - aggregate not refreshed")

    return TriggerResponse(processed=True)


async def sync_artwork(db: Session, ctx: ServiceContext, artwork: Artwork) -> None:
    """Re-sync a stored artwork after this process mutated it (status/venue changes)."""
    doc = artwork_document_from_row(artwork)
    await _index_and_aggregate(db, ctx, artwork.id, doc)
