"""
Sale pipeline - a new order marks its artworks Sold and notifies each seller.
"""

import logging

from sqlalchemy.orm import Session

from artmarket.constants.notifications import PURCHASE_PUSH_TEXT, ROUTE_ORDERS
from artmarket.constants.statuses import (
    ORDER_STATUS_PAID,
    ArtworkStatus,
    NotificationCategory,
    NotificationType,
)
from artmarket.core.context import ServiceContext
from artmarket.core.errors import InvalidDocumentError
from artmarket.db.models import Artwork, Order, User
from artmarket.schemas.documents import OrderDocument, parse_document
from artmarket.schemas.events import TriggerResponse
from artmarket.services.artwork_index import sync_artwork
from artmarket.services.integrations.push_client import build_push_message
from artmarket.services.notifications import NotificationRecord, send_notification

logger = logging.getLogger(__name__)


def first_image_url(images: list | None) -> str | None:
    """Images are stored as URLs or {"url": ...} objects."""
    for image in images or []:
        if isinstance(image, str) and image:
            return image
        if isinstance(image, dict) and image.get("url"):
            return image["url"]
    return None


def _store_order(db: Session, order_id: str, buyer_id: str, doc: OrderDocument) -> Order:
    order = db.get(Order, order_id)
    if order is None:
        order = Order(
            id=order_id,
            user_id=buyer_id,
            artwork_ids=list(doc.artworks),
            status=doc.status,
            total=doc.total,
        )
        db.add(order)
        db.commit()
    return order


async def handle_order_created(
    db: Session,
    ctx: ServiceContext,
    buyer_id: str,
    order_id: str,
    snapshot: dict | None,
    event_id: str | None = None,
) -> TriggerResponse:
    try:
        doc = parse_document(OrderDocument, snapshot, id=order_id)
    except InvalidDocumentError as e:
        logger.info(f"Skipping order {order_id}: {e}")
        return TriggerResponse(processed=False, reason="invalid_document")
    if not doc.artworks:
        logger.info(f"Skipping order {order_id}: no artworks")
        return TriggerResponse(processed=False, reason="incomplete_document")

    _store_order(db, order_id, buyer_id, doc)

    buyer = db.get(User, buyer_id)
    buyer_name = (buyer.display_name if buyer else None) or doc.buyer_name or ""

    for artwork_id in doc.artworks:
        artwork = db.get(Artwork, artwork_id) if artwork_id else None
        if artwork is None:
            logger.info(f"Artwork {artwork_id} of order {order_id} not found - skipping")
            continue

        artwork.status = ArtworkStatus.SOLD.value
        db.commit()
        await sync_artwork(db, ctx, artwork)

        if artwork.user_id == buyer_id:
            continue
        title, body = PURCHASE_PUSH_TEXT
        fmt = {"sender": buyer_name or "Someone", "title": artwork.title or "your artwork"}
        await send_notification(
            db,
            ctx,
            user_id=artwork.user_id,
            category=NotificationCategory.PURCHASES,
            push_message=build_push_message(title, body.format(**fmt), route_name=ROUTE_ORDERS),
            record=NotificationRecord(
                type=NotificationType.PURCHASE,
                sender_name=buyer_name,
                status=doc.status or ORDER_STATUS_PAID,
                image=first_image_url(artwork.images),
                reference_id=order_id,
            ),
            event_id=event_id or order_id,
            dedupe_key=artwork.id,
        )

    logger.info(f"Order {order_id} by {buyer_id} processed ({len(doc.artworks)} artwork(s))")
    return TriggerResponse(processed=True)
