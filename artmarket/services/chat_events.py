"""
Chat message notifications - a member's free-text message notifies the other members.

Action messages are skipped; the exhibition workflow notifies for those itself.
"""

import logging

from sqlalchemy.orm import Session

from artmarket.constants.notifications import (
    CHAT_MESSAGE_PREVIEW_LENGTH,
    CHAT_MESSAGE_PUSH_TITLE,
    ROUTE_CHAT,
)
from artmarket.constants.statuses import MessageType, NotificationCategory, NotificationType
from artmarket.core.context import ServiceContext
from artmarket.core.errors import InvalidDocumentError
from artmarket.db.models import User
from artmarket.schemas.documents import MessageDocument, parse_document
from artmarket.schemas.events import TriggerResponse
from artmarket.services.chat_store import get_chat_room, mark_room_unseen
from artmarket.services.integrations.push_client import build_push_message
from artmarket.services.notifications import NotificationRecord, send_notification

logger = logging.getLogger(__name__)


def message_preview(text: str | None) -> str:
    text = (text or "").strip()
    if len(text) <= CHAT_MESSAGE_PREVIEW_LENGTH:
        return text
    return text[: CHAT_MESSAGE_PREVIEW_LENGTH - 1].rstrip() + "…"


async def handle_chat_message_created(
    db: Session,
    ctx: ServiceContext,
    chat_room_id: str,
    message_id: str,
    snapshot: dict | None,
    event_id: str | None = None,
) -> TriggerResponse:
    try:
        doc = parse_document(MessageDocument, snapshot, id=message_id)
    except InvalidDocumentError as e:
        logger.info(f"Skipping message {message_id}: {e}")
        return TriggerResponse(processed=False, reason="invalid_document")

    if doc.type is MessageType.ACTION:
        return TriggerResponse(processed=False, reason="action_message")
    if not doc.sender_id:
        logger.info(f"Skipping message {message_id}: no sender")
        return TriggerResponse(processed=False, reason="incomplete_document")

    room = get_chat_room(db, chat_room_id)
    if room is None:
        logger.info(f"Chat room {chat_room_id} not found - nothing to do")
        return TriggerResponse(processed=False, reason="chat_room_missing")

    mark_room_unseen(db, room)

    sender = db.get(User, doc.sender_id)
    sender_name = (sender.display_name if sender else None) or ""
    preview = message_preview(doc.text)
    title = CHAT_MESSAGE_PUSH_TITLE.format(sender=sender_name or "Someone")

    for member_id in room.members:
        if member_id == doc.sender_id:
            continue
        await send_notification(
            db,
            ctx,
            user_id=member_id,
            category=NotificationCategory.MESSAGES,
            push_message=build_push_message(title, preview, route_name=ROUTE_CHAT),
            record=NotificationRecord(
                type=NotificationType.MESSAGE,
                sender_name=sender_name,
                image=sender.avatar_url if sender else None,
                message=preview,
                reference_id=chat_room_id,
            ),
            event_id=event_id or message_id,
        )

    return TriggerResponse(processed=True)
