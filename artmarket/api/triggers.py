"""
Trigger endpoints - one per document-store event the dispatcher delivers.

Each delivery is checked against processed_events first; a redelivered event_id is
acknowledged without side effects. Handler failures propagate so the dispatcher retries.
"""

import logging
from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from artmarket.constants.event_types import (
    TRIGGER_ARTWORK_CREATED,
    TRIGGER_ARTWORK_DELETED,
    TRIGGER_ARTWORK_UPDATED,
    TRIGGER_CHAT_MESSAGE_CREATED,
    TRIGGER_EXHIBITION_CREATED,
    TRIGGER_EXHIBITION_UPDATED,
    TRIGGER_ORDER_CREATED,
)
from artmarket.core.context import ServiceContext, get_context
from artmarket.db.deps import get_db
from artmarket.schemas.events import DocumentEvent, TriggerResponse
from artmarket.services.artwork_index import handle_artwork_deleted, handle_artwork_written
from artmarket.services.chat_events import handle_chat_message_created
from artmarket.services.exhibition_workflow import (
    handle_exhibition_created,
    handle_exhibition_updated,
)
from artmarket.services.orders import handle_order_created
from artmarket.services.processed_events import is_processed, mark_processed

logger = logging.getLogger(__name__)

router = APIRouter()


async def _run_once(
    db: Session,
    trigger: str,
    event: DocumentEvent,
    handler: Callable[[], Awaitable[TriggerResponse]],
) -> TriggerResponse:
    if is_processed(db, trigger, event.event_id):
        logger.info(f"Duplicate delivery {trigger}/{event.event_id} - already processed")
        return TriggerResponse(processed=False, duplicate=True)

    result = await handler()
    mark_processed(db, trigger, event.event_id)
    return result


@router.post("/artworks/{artwork_id}/created", response_model=TriggerResponse)
async def artwork_created(
    artwork_id: str,
    event: DocumentEvent,
    db: Session = Depends(get_db),
    ctx: ServiceContext = Depends(get_context),
):
    return await _run_once(
        db, TRIGGER_ARTWORK_CREATED, event, lambda: handle_artwork_written(db, ctx, artwork_id, event.after)
    )


@router.post("/artworks/{artwork_id}/updated", response_model=TriggerResponse)
async def artwork_updated(
    artwork_id: str,
    event: DocumentEvent,
    db: Session = Depends(get_db),
    ctx: ServiceContext = Depends(get_context),
):
    return await _run_once(
        db, TRIGGER_ARTWORK_UPDATED, event, lambda: handle_artwork_written(db, ctx, artwork_id, event.after)
    )


@router.post("/artworks/{artwork_id}/deleted", response_model=TriggerResponse)
async def artwork_deleted(
    artwork_id: str,
    event: DocumentEvent,
    db: Session = Depends(get_db),
    ctx: ServiceContext = Depends(get_context),
):
    return await _run_once(
        db, TRIGGER_ARTWORK_DELETED, event, lambda: handle_artwork_deleted(db, ctx, artwork_id, event.before)
    )


@router.post("/exhibitions/{exhibition_id}/created", response_model=TriggerResponse)
async def exhibition_created(
    exhibition_id: str,
    event: DocumentEvent,
    db: Session = Depends(get_db),
    ctx: ServiceContext = Depends(get_context),
):
    return await _run_once(
        db,
        TRIGGER_EXHIBITION_CREATED,
        event,
        lambda: handle_exhibition_created(db, ctx, exhibition_id, event.after, event_id=event.event_id),
    )


@router.post("/exhibitions/{exhibition_id}/updated", response_model=TriggerResponse)
async def exhibition_updated(
    exhibition_id: str,
    event: DocumentEvent,
    db: Session = Depends(get_db),
    ctx: ServiceContext = Depends(get_context),
):
    return await _run_once(
        db,
        TRIGGER_EXHIBITION_UPDATED,
        event,
        lambda: handle_exhibition_updated(
            db, ctx, exhibition_id, event.before, event.after, event_id=event.event_id
        ),
    )


@router.post(
    "/chat-rooms/{chat_room_id}/messages/{message_id}/created", response_model=TriggerResponse
)
async def chat_message_created(
    chat_room_id: str,
    message_id: str,
    event: DocumentEvent,
    db: Session = Depends(get_db),
    ctx: ServiceContext = Depends(get_context),
):
    return await _run_once(
        db,
        TRIGGER_CHAT_MESSAGE_CREATED,
        event,
        lambda: handle_chat_message_created(
            db, ctx, chat_room_id, message_id, event.after, event_id=event.event_id
        ),
    )


@router.post("/orders/{user_id}/{order_id}/created", response_model=TriggerResponse)
async def order_created(
    user_id: str,
    order_id: str,
    event: DocumentEvent,
    db: Session = Depends(get_db),
    ctx: ServiceContext = Depends(get_context),
):
    return await _run_once(
        db,
        TRIGGER_ORDER_CREATED,
        event,
        lambda: handle_order_created(db, ctx, user_id, order_id, event.after, event_id=event.event_id),
    )
