"""
Exhibition workflow engine.

Reacts to the status written on an exhibition document: on creation it opens the chat
room and posts the request message; on every status change it patches earlier action
messages, appends the next one, applies artwork side effects and notifies the other
party. Which of those happen for each status is declared in TRANSITIONS.

Transitions are not validated - clients are trusted to write legal next states. The
steps of one transition are not wrapped in a transaction: a failure part-way leaves the
earlier writes in place and redelivery re-runs the whole handler. Appends use stable ids
and rewrites/notification records are idempotent.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.orm import Session

from artmarket.constants.event_types import (
    EVENT_DOCUMENT_INCOMPLETE,
    EVENT_WORKFLOW_CHAT_ROOM_MISSING,
    EVENT_WORKFLOW_EDITOR_MISSING,
)
from artmarket.constants.message_status import (
    REQUEST_PENDING,
    REVIEW_PENDING,
    MessageStatus,
    PayloadStatus,
)
from artmarket.constants.notifications import EXHIBITION_PUSH_TEXTS, ROUTE_CHAT, ROUTE_EXHIBITIONS
from artmarket.constants.statuses import (
    ArtworkStatus,
    ExhibitionStatus,
    NotificationCategory,
    NotificationType,
)
from artmarket.core.context import ServiceContext
from artmarket.core.errors import InvalidDocumentError
from artmarket.db.models import Artwork, ChatRoom, Exhibition, Notification, User
from artmarket.schemas.documents import ExhibitionDocument, parse_document
from artmarket.schemas.events import TriggerResponse
from artmarket.services import chat_store
from artmarket.services.artwork_index import sync_artwork
from artmarket.services.integrations.push_client import build_push_message
from artmarket.services.notifications import NotificationRecord, send_notification
from artmarket.services.system_event_service import info, warn
from artmarket.utils.datetime_utils import iso_or_none, utcnow

logger = logging.getLogger(__name__)


class Actor(str, Enum):
    """Who the appended message is sent by."""

    CREATOR = "creator"
    EDITOR = "editor"  # exhibition.editedBy


class Recipient(str, Enum):
    """Who is notified of the transition."""

    COUNTERPART = "counterpart"  # The member who did not create the exhibition
    CREATOR = "creator"
    NON_EDITOR = "non_editor"  # The member who is not editedBy


@dataclass(frozen=True)
class TransitionPlan:
    # Rewrite messages matching (match_sender, match_receiver) to rewrite_to
    rewrite_to: PayloadStatus | None = None
    match_sender: MessageStatus | None = None
    match_receiver: MessageStatus | None = None
    # Message appended after the rewrite
    append: PayloadStatus | None = None
    sender: Actor = Actor.EDITOR
    stamp_with_edit_time: bool = False
    notify: Recipient | None = None
    opens_artworks: bool = False

    @property
    def requires_editor(self) -> bool:
        return (self.append is not None and self.sender is Actor.EDITOR) or self.notify is Recipient.NON_EDITOR


def _rewrite(match: PayloadStatus, to: MessageStatus) -> dict:
    return {"match_sender": match.sender, "match_receiver": match.receiver, "rewrite_to": PayloadStatus.both(to)}


TRANSITIONS: dict[ExhibitionStatus, TransitionPlan] = {
    # Creation is handled by handle_exhibition_created; a later write of REQUESTED does nothing
    ExhibitionStatus.REQUESTED: TransitionPlan(),
    ExhibitionStatus.ACCEPTED: TransitionPlan(
        **_rewrite(REQUEST_PENDING, MessageStatus.REQUEST_ACCEPTED),
        append=PayloadStatus.both(MessageStatus.WAITING_DETAILS),
        sender=Actor.CREATOR,
        notify=Recipient.COUNTERPART,
    ),
    ExhibitionStatus.CANCELED: TransitionPlan(
        **_rewrite(REQUEST_PENDING, MessageStatus.REQUEST_CANCELED),
        notify=Recipient.CREATOR,
    ),
    ExhibitionStatus.DECLINED: TransitionPlan(
        **_rewrite(REQUEST_PENDING, MessageStatus.REQUEST_DECLINED),
        notify=Recipient.COUNTERPART,
    ),
    ExhibitionStatus.REVIEW: TransitionPlan(
        append=REVIEW_PENDING,
        stamp_with_edit_time=True,
        notify=Recipient.NON_EDITOR,
    ),
    ExhibitionStatus.DETAILS_ACCEPTED: TransitionPlan(
        match_receiver=MessageStatus.CHECK_DETAILS,
        rewrite_to=PayloadStatus.both(MessageStatus.DETAILS_ACCEPTED),
        append=PayloadStatus.both(MessageStatus.WAITING_OPENING),
        notify=Recipient.NON_EDITOR,
    ),
    ExhibitionStatus.DETAILS_CHANGED: TransitionPlan(
        match_receiver=MessageStatus.CHECK_DETAILS,
        rewrite_to=PayloadStatus.both(MessageStatus.DETAILS_CHANGED),
        append=REVIEW_PENDING,
        stamp_with_edit_time=True,
        notify=Recipient.NON_EDITOR,
    ),
    ExhibitionStatus.OPEN: TransitionPlan(
        **_rewrite(PayloadStatus.both(MessageStatus.WAITING_OPENING), MessageStatus.OPEN),
        append=PayloadStatus.both(MessageStatus.VIEW_EXHIBITION),
        notify=Recipient.NON_EDITOR,
        opens_artworks=True,
    ),
    ExhibitionStatus.CLOSED: TransitionPlan(
        **_rewrite(PayloadStatus.both(MessageStatus.OPEN), MessageStatus.CLOSED),
        append=PayloadStatus.both(MessageStatus.CLOSED),
        notify=Recipient.NON_EDITOR,
    ),
}

_unplanned = set(ExhibitionStatus) - set(TRANSITIONS)
if _unplanned:
    raise RuntimeError(f"No transition plan for: {sorted(s.value for s in _unplanned)}")


def exhibition_details(exhibition_id: str, doc: ExhibitionDocument) -> dict:
    """Snapshot embedded in action message payloads."""
    return {
        "id": exhibition_id,
        "title": doc.title,
        "status": doc.status.value,
        "creatorId": doc.creator_id,
        "members": list(doc.members),
        "startDate": iso_or_none(doc.start_date),
        "endDate": iso_or_none(doc.end_date),
        "venue": doc.venue,
        "artist": doc.artist,
        "artworks": list(doc.artworks),
    }


def resolve_recipient(doc: ExhibitionDocument, recipient: Recipient) -> str | None:
    if recipient is Recipient.CREATOR:
        return doc.creator_id
    if recipient is Recipient.COUNTERPART:
        return doc.counterpart_of(doc.creator_id)
    return doc.counterpart_of(doc.edited_by)


def _snapshot_for(doc: ExhibitionDocument, user_id: str | None) -> dict:
    for snapshot in (doc.venue, doc.artist):
        if snapshot and user_id and snapshot.get("id") == user_id:
            return snapshot
    return {}


def _sender_identity(db: Session, doc: ExhibitionDocument, recipient_id: str) -> tuple[str, str | None]:
    """Display name and image of the member on the other side of recipient_id."""
    sender_id = doc.counterpart_of(recipient_id)
    user = db.get(User, sender_id) if sender_id else None
    snapshot = _snapshot_for(doc, sender_id)
    name = (user.display_name if user else None) or snapshot.get("name") or ""
    image = (user.avatar_url if user else None) or snapshot.get("image")
    return name, image


async def notify_member(
    db: Session,
    ctx: ServiceContext,
    exhibition_id: str,
    doc: ExhibitionDocument,
    recipient_id: str,
    event_id: str | None = None,
) -> Notification | None:
    """Push + record for recipient_id about doc.status."""
    status = doc.status
    sender_name, image = _sender_identity(db, doc, recipient_id)
    title, body = EXHIBITION_PUSH_TEXTS[status]
    fmt = {"sender": sender_name or "Someone", "title": doc.title or "your exhibition"}
    requested = status is ExhibitionStatus.REQUESTED

    return await send_notification(
        db,
        ctx,
        user_id=recipient_id,
        category=NotificationCategory.EXHIBITIONS,
        push_message=build_push_message(
            title.format(**fmt),
            body.format(**fmt),
            route_name=ROUTE_EXHIBITIONS if requested else ROUTE_CHAT,
        ),
        record=NotificationRecord(
            type=NotificationType.REQUEST_EXHIBITION if requested else NotificationType.MESSAGE,
            sender_name=sender_name,
            status=status.value,
            image=image,
            reference_id=exhibition_id,
        ),
        event_id=event_id,
    )


def _parse(db: Session, exhibition_id: str, snapshot: dict | None) -> ExhibitionDocument | None:
    try:
        doc = parse_document(ExhibitionDocument, snapshot, id=exhibition_id)
    except InvalidDocumentError as e:
        logger.info(f"Skipping exhibition {exhibition_id}: {e}")
        info(db, EVENT_DOCUMENT_INCOMPLETE, reference_id=exhibition_id, payload={"errors": e.errors[:5]})
        return None
    if not doc.is_complete:
        logger.info(f"Skipping exhibition {exhibition_id}: needs a creator and exactly two members")
        return None
    return doc


def _attach_chat_room(db: Session, exhibition_id: str, chat_room_id: str) -> None:
    exhibition = db.get(Exhibition, exhibition_id)
    if exhibition is None:
        logger.info(f"Exhibition {exhibition_id} not stored - chat room id not written back")
        return
    if exhibition.chat_room_id != chat_room_id:
        exhibition.chat_room_id = chat_room_id
        db.commit()


async def handle_exhibition_created(
    db: Session,
    ctx: ServiceContext,
    exhibition_id: str,
    snapshot: dict | None,
    event_id: str | None = None,
) -> TriggerResponse:
    """
    New exhibition request: create the chat room, post the request message, write the
    chat room id back onto the exhibition and notify the counterpart.
    """
    doc = _parse(db, exhibition_id, snapshot)
    if doc is None:
        return TriggerResponse(processed=False, reason="incomplete_document")
    if doc.status is not ExhibitionStatus.REQUESTED:
        logger.info(f"Exhibition {exhibition_id} created with status {doc.status.value} - nothing to do")
        return TriggerResponse(processed=False, reason="not_requested")

    room, _ = chat_store.create_chat_room(db, exhibition_id, doc.members, doc.creator_id)

    # One request message per room, whatever the delivery
    message_id = chat_store.mint_message_id(room.id, exhibition_id, MessageStatus.REQUESTED.value)
    chat_store.append(
        db,
        chat_store.build_action_message(
            room.id,
            message_id,
            sender_id=doc.creator_id,
            status=REQUEST_PENDING,
            exhibition_details=exhibition_details(exhibition_id, doc),
            created_at=doc.created_at or utcnow(),
        ),
    )
    _attach_chat_room(db, exhibition_id, room.id)

    counterpart = doc.counterpart_of(doc.creator_id)
    if counterpart:
        await notify_member(db, ctx, exhibition_id, doc, counterpart, event_id=event_id)

    logger.info(f"Exhibition {exhibition_id} requested - chat room {room.id}")
    return TriggerResponse(processed=True)


async def _open_artworks(db: Session, ctx: ServiceContext, doc: ExhibitionDocument) -> int:
    opened = 0
    for artwork_id in doc.artworks:
        artwork = db.get(Artwork, artwork_id) if artwork_id else None
        if artwork is None:
            logger.info(f"Artwork {artwork_id} of exhibition {doc.id} not found - skipping")
            continue
        artwork.status = ArtworkStatus.EXHIBITED.value
        artwork.venue = doc.venue
        db.commit()
        await sync_artwork(db, ctx, artwork)
        opened += 1
    return opened


def _find_chat_room(db: Session, exhibition_id: str, doc: ExhibitionDocument) -> ChatRoom | None:
    return chat_store.get_chat_room(db, doc.chat_room_id) or chat_store.get_chat_room_for_exhibition(
        db, exhibition_id
    )


async def apply_transition(
    db: Session,
    ctx: ServiceContext,
    exhibition_id: str,
    doc: ExhibitionDocument,
    event_id: str | None = None,
) -> TriggerResponse:
    """
    Run the plan for doc.status: rewrite, artwork side effects, append, notify (in that order).
    """
    plan = TRANSITIONS[doc.status]
    room = _find_chat_room(db, exhibition_id, doc)

    if room is None and (plan.rewrite_to or plan.append):
        logger.warning(f"Exhibition {exhibition_id} has no chat room - messages not updated")
        warn(db, EVENT_WORKFLOW_CHAT_ROOM_MISSING, reference_id=exhibition_id, payload={"status": doc.status.value})

    if plan.rewrite_to and room is not None:
        chat_store.rewrite_status(
            db,
            room.id,
            plan.rewrite_to,
            sender_status=plan.match_sender,
            receiver_status=plan.match_receiver,
        )

    if plan.opens_artworks:
        opened = await _open_artworks(db, ctx, doc)
        logger.info(f"Exhibition {exhibition_id} opened {opened} artwork(s)")

    if plan.requires_editor and not doc.edited_by:
        logger.info(f"Exhibition {exhibition_id} set to {doc.status.value} without editedBy - no message or notification")
        info(db, EVENT_WORKFLOW_EDITOR_MISSING, reference_id=exhibition_id, payload={"status": doc.status.value})
        return TriggerResponse(processed=True, reason="editor_missing")

    if plan.append and room is not None:
        sender_id = doc.creator_id if plan.sender is Actor.CREATOR else doc.edited_by
        created_at = (doc.last_edited_at if plan.stamp_with_edit_time else None) or utcnow()
        chat_store.append(
            db,
            chat_store.build_action_message(
                room.id,
                chat_store.mint_message_id(room.id, event_id, doc.status.value),
                sender_id=sender_id,
                status=plan.append,
                exhibition_details=exhibition_details(exhibition_id, doc),
                created_at=created_at,
            ),
        )

    if plan.notify is not None:
        recipient_id = resolve_recipient(doc, plan.notify)
        if recipient_id:
            await notify_member(db, ctx, exhibition_id, doc, recipient_id, event_id=event_id)
        else:
            logger.info(f"No {plan.notify.value} to notify for exhibition {exhibition_id}")

    logger.info(f"Exhibition {exhibition_id} transition to {doc.status.value} applied")
    return TriggerResponse(processed=True)


def _same_transition(before: dict, after: dict, doc: ExhibitionDocument) -> bool:
    if before.get("status") != doc.status.value:
        return False
    return all(before.get(key) == after.get(key) for key in ("editedBy", "lastEditedAt"))


async def handle_exhibition_updated(
    db: Session,
    ctx: ServiceContext,
    exhibition_id: str,
    before: dict | None,
    after: dict | None,
    event_id: str | None = None,
) -> TriggerResponse:
    """
    Exhibition written: apply the transition for its new status.

    A write that keeps status, editedBy and lastEditedAt is a plain edit and is ignored.
    The same status written again by another editor or at a new edit time (a second
    DETAILS_CHANGED round) is a new transition.
    """
    doc = _parse(db, exhibition_id, after)
    if doc is None:
        return TriggerResponse(processed=False, reason="incomplete_document")

    if before and _same_transition(before, after, doc):
        logger.debug(f"Exhibition {exhibition_id} updated without a new transition")
        return TriggerResponse(processed=False, reason="status_unchanged")

    return await apply_transition(db, ctx, exhibition_id, doc, event_id=event_id)
