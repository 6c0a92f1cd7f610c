"""
Per-user artwork aggregate (users_artworks).

Recomputed from the user's stored artworks whenever one of them is written or deleted,
so the result never depends on the order of earlier events.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from artmarket.db.models import Artwork, UserArtworks
from artmarket.services.keywords import generate_keywords

logger = logging.getLogger(__name__)


def _distinct(values) -> list:
    return sorted({v for v in values if v not in (None, "")}, key=str)


def build_filters(artworks: list[Artwork]) -> dict[str, list]:
    """Facet values present across the artworks."""
    return {
        "categories": _distinct(a.category for a in artworks),
        "styles": _distinct(s for a in artworks for s in (a.styles or []) if isinstance(s, str)),
        "materials": _distinct(m for a in artworks for m in (a.materials or [])),
        "orientations": _distinct(a.orientation for a in artworks),
        "years": _distinct(a.year for a in artworks),
    }


def build_keywords(artworks: list[Artwork], user_name: str | None, include_full: bool = False) -> list[str]:
    keywords: set[str] = set(generate_keywords(user_name, include_full=include_full))
    for artwork in artworks:
        keywords.update(k.lower() for k in (artwork.keywords or []) if k)
        keywords.update(generate_keywords(artwork.title, include_full=include_full))
    return sorted(keywords)


def recompute_user_artworks(
    db: Session,
    user_id: str,
    exclude_artwork_id: str | None = None,
    include_full_text: bool = False,
) -> UserArtworks | None:
    """
    Rebuild the aggregate for user_id from the artworks currently stored for them.

    Args:
        db: Database session
        user_id: Owner whose aggregate is rebuilt
        exclude_artwork_id: Artwork to leave out (being deleted but possibly still stored)
        include_full_text: Also index whole titles and names, not just their prefixes

    Returns:
        The upserted aggregate, or None if the user has no artworks left (row removed)
    """
    stmt = select(Artwork).where(Artwork.user_id == user_id).order_by(Artwork.id)
    if exclude_artwork_id:
        stmt = stmt.where(Artwork.id != exclude_artwork_id)
    artworks = list(db.execute(stmt).scalars().all())

    aggregate = db.get(UserArtworks, user_id)
    if not artworks:
        if aggregate is not None:
            db.delete(aggregate)
            db.commit()
            logger.info(f"Removed users_artworks for {user_id} (no artworks left)")
        return None

    if aggregate is None:
        aggregate = UserArtworks(user_id=user_id)
        db.add(aggregate)

    prices = [a.price for a in artworks if a.price is not None]
    user_name = next((a.user_name for a in artworks if a.user_name), None)

    aggregate.user_name = user_name
    aggregate.artwork_count = len(artworks)
    aggregate.min_price = min(prices) if prices else None
    aggregate.max_price = max(prices) if prices else None
    aggregate.has_frame = any(a.frame for a in artworks)
    aggregate.filters = build_filters(artworks)
    aggregate.keywords = build_keywords(artworks, user_name, include_full=include_full_text)
    aggregate.artwork_ids = [a.id for a in artworks]
    db.commit()
    db.refresh(aggregate)

    logger.info(f"Recomputed users_artworks for {user_id}: {len(artworks)} artworks")
    return aggregate
