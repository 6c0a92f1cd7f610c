"""
Chat message store - per-exhibition chat rooms and their append-only message threads.

Messages are never removed, but the payload of an action message is patched in place as
the exhibition progresses. Patches are applied message by message (no transaction across
the result set).
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from artmarket.constants.message_status import MessageStatus, PayloadStatus
from artmarket.constants.statuses import MessageType
from artmarket.db.models import ChatMessage, ChatRoom
from artmarket.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

MESSAGE_ID_NAMESPACE = uuid.UUID("c3f1d7a0-8e42-4d0b-b6a5-7f2e9d4c1a38")


def mint_message_id(chat_room_id: str, event_id: str | None, purpose: str) -> str:
    """
    New message id. With an event id the id is derived from (room, event, purpose), so a
    redelivered event appends the same id and append() becomes a no-op.
    """
    if not event_id:
        return str(uuid.uuid4())
    return str(uuid.uuid5(MESSAGE_ID_NAMESPACE, f"{chat_room_id}:{event_id}:{purpose}"))


def get_chat_room(db: Session, chat_room_id: str | None) -> ChatRoom | None:
    if not chat_room_id:
        return None
    return db.get(ChatRoom, chat_room_id)


def get_chat_room_for_exhibition(db: Session, exhibition_id: str) -> ChatRoom | None:
    stmt = select(ChatRoom).where(ChatRoom.exhibition_id == exhibition_id)
    return db.execute(stmt).scalar_one_or_none()


def create_chat_room(
    db: Session, exhibition_id: str, members: list[str], creator_id: str
) -> tuple[ChatRoom, bool]:
    """
    Create the exhibition's chat room, or return the one that already exists.

    Returns:
        (chat_room, created)
    """
    existing = get_chat_room_for_exhibition(db, exhibition_id)
    if existing is not None:
        return existing, False

    room = ChatRoom(
        id=str(uuid.uuid4()),
        exhibition_id=exhibition_id,
        members=list(members),
        creator_id=creator_id,
        seen=False,
    )
    db.add(room)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent delivery created it first
        db.rollback()
        return get_chat_room_for_exhibition(db, exhibition_id), False
    db.refresh(room)
    logger.info(f"Created chat room {room.id} for exhibition {exhibition_id}")
    return room, True


def build_action_message(
    chat_room_id: str,
    message_id: str,
    sender_id: str,
    status: PayloadStatus,
    exhibition_details: dict,
    created_at: datetime | None = None,
) -> ChatMessage:
    payload = {**status.as_payload(), "exhibition": exhibition_details}
    return ChatMessage(
        id=message_id,
        chat_room_id=chat_room_id,
        type=MessageType.ACTION.value,
        sender_id=sender_id,
        created_at=created_at or utcnow(),
        read=False,
        text=None,
        payload=payload,
        sender_status=status.sender.value,
        receiver_status=status.receiver.value,
    )


def append(db: Session, message: ChatMessage) -> ChatMessage:
    """Append a message; if its id is already stored, the stored message is returned unchanged."""
    existing = db.get(ChatMessage, message.id)
    if existing is not None:
        logger.info(f"Message {message.id} already in chat room {existing.chat_room_id}")
        return existing
    db.add(message)
    db.commit()
    db.refresh(message)
    logger.info(f"Appended {message.type} message {message.id} to chat room {message.chat_room_id}")
    return message


def query_by_payload_status(
    db: Session,
    chat_room_id: str,
    sender_status: MessageStatus | None = None,
    receiver_status: MessageStatus | None = None,
) -> list[ChatMessage]:
    """All messages of the room whose payload matches the given statuses (unordered snapshot)."""
    stmt = select(ChatMessage).where(ChatMessage.chat_room_id == chat_room_id)
    if sender_status is not None:
        stmt = stmt.where(ChatMessage.sender_status == sender_status.value)
    if receiver_status is not None:
        stmt = stmt.where(ChatMessage.receiver_status == receiver_status.value)
    return list(db.execute(stmt).scalars().all())


def patch_payload(db: Session, message_id: str, partial_payload: dict) -> ChatMessage | None:
    """
    Shallow-merge partial_payload into the message's payload.

    Returns:
        The patched message, or None if it no longer exists
    """
    message = db.get(ChatMessage, message_id)
    if message is None:
        return None
    # Reassign so the JSON column is flagged dirty
    message.payload = {**(message.payload or {}), **partial_payload}
    message.sender_status = message.payload.get("senderStatus")
    message.receiver_status = message.payload.get("receiverStatus")
    db.commit()
    return message


def rewrite_status(
    db: Session,
    chat_room_id: str,
    new_status: PayloadStatus,
    sender_status: MessageStatus | None = None,
    receiver_status: MessageStatus | None = None,
) -> int:
    """
    Patch every message matching the filter to new_status.

    Returns:
        Number of messages patched
    """
    matches = query_by_payload_status(db, chat_room_id, sender_status, receiver_status)
    patched = 0
    for message in matches:
        if patch_payload(db, message.id, new_status.as_payload()) is not None:
            patched += 1
    if patched:
        logger.info(
            f"Rewrote {patched} message(s) in chat room {chat_room_id} to "
            f"({new_status.sender.value}, {new_status.receiver.value})"
        )
    return patched


def mark_room_unseen(db: Session, chat_room: ChatRoom) -> None:
    if chat_room.seen:
        chat_room.seen = False
        db.commit()
