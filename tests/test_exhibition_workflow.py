"""
Exhibition workflow: creation, every status transition, guards and redelivery.
"""

from datetime import datetime

import pytest
from sqlalchemy import select

from artmarket.constants.event_types import (
    EVENT_WORKFLOW_CHAT_ROOM_MISSING,
    EVENT_WORKFLOW_EDITOR_MISSING,
)
from artmarket.constants.message_status import MessageStatus, PayloadStatus
from artmarket.constants.statuses import ExhibitionStatus, NotificationType
from artmarket.db.models import Artwork, ChatMessage, Exhibition, Notification, SystemEvent
from artmarket.services import chat_store
from artmarket.services.exhibition_workflow import (
    TRANSITIONS,
    handle_exhibition_created,
    handle_exhibition_updated,
)
from tests.helpers.factories import (
    COUNTERPART_ID,
    CREATOR_ID,
    EXHIBITION_ID,
    exhibition_snapshot,
    make_artwork,
    make_members,
)


def _messages(db) -> list[ChatMessage]:
    return list(db.execute(select(ChatMessage).order_by(ChatMessage.created_at)).scalars().all())


def _pairs(db) -> list[tuple[str, str]]:
    return sorted((m.payload["senderStatus"], m.payload["receiverStatus"]) for m in _messages(db))


def _notifications(db, user_id: str) -> list[Notification]:
    return list(db.execute(select(Notification).where(Notification.user_id == user_id)).scalars().all())


def _seed_message(db, room_id: str, message_id: str, status: PayloadStatus, sender_id: str = CREATOR_ID):
    chat_store.append(
        db,
        chat_store.build_action_message(room_id, message_id, sender_id, status, exhibition_details={"id": EXHIBITION_ID}),
    )


def _room(db):
    room, _ = chat_store.create_chat_room(db, EXHIBITION_ID, [CREATOR_ID, COUNTERPART_ID], CREATOR_ID)
    return room


def test_every_exhibition_status_has_a_transition_plan():
    assert set(TRANSITIONS) == set(ExhibitionStatus)


def test_transition_plans_only_use_allowed_pairs():
    from artmarket.constants.message_status import ALLOWED_PAYLOAD_STATUSES

    for plan in TRANSITIONS.values():
        for pair in (plan.rewrite_to, plan.append):
            assert pair is None or pair in ALLOWED_PAYLOAD_STATUSES


# ---- Creation ----


@pytest.mark.asyncio
async def test_created_requested_opens_room_and_notifies_counterpart(db, ctx, push):
    make_members(db)
    db.add(Exhibition(id=EXHIBITION_ID, status="REQUESTED", creator_id=CREATOR_ID, members=[CREATOR_ID, COUNTERPART_ID]))
    db.commit()

    result = await handle_exhibition_created(db, ctx, EXHIBITION_ID, exhibition_snapshot())

    assert result.processed is True
    room = chat_store.get_chat_room_for_exhibition(db, EXHIBITION_ID)
    assert room is not None
    assert room.members == [CREATOR_ID, COUNTERPART_ID]
    assert room.creator_id == CREATOR_ID

    messages = _messages(db)
    assert len(messages) == 1
    assert messages[0].type == "action"
    assert messages[0].sender_id == CREATOR_ID
    assert messages[0].payload["senderStatus"] == "requested"
    assert messages[0].payload["receiverStatus"] == "request_waiting_approve"
    assert messages[0].payload["exhibition"]["id"] == EXHIBITION_ID
    assert messages[0].created_at.replace(tzinfo=None) == datetime(2026, 3, 1, 10, 0, 0)

    # Chat room id written back onto the exhibition
    db.refresh(db.get(Exhibition, EXHIBITION_ID))
    assert db.get(Exhibition, EXHIBITION_ID).chat_room_id == room.id

    records = _notifications(db, COUNTERPART_ID)
    assert len(records) == 1
    assert records[0].type == NotificationType.REQUEST_EXHIBITION.value
    assert records[0].status == "REQUESTED"
    assert records[0].sender_name == "Ada Artist"
    assert records[0].reference_id == EXHIBITION_ID
    assert records[0].seen is False
    assert _notifications(db, CREATOR_ID) == []

    sent = push.sent_to("token-b")
    assert len(sent) == 1
    assert sent[0]["data"] == {"routeName": "/exhibitions"}


@pytest.mark.asyncio
async def test_created_twice_appends_one_request_message(db, ctx):
    make_members(db)

    await handle_exhibition_created(db, ctx, EXHIBITION_ID, exhibition_snapshot(), event_id="evt-1")
    await handle_exhibition_created(db, ctx, EXHIBITION_ID, exhibition_snapshot(), event_id="evt-1")

    assert len(_messages(db)) == 1
    assert len(_notifications(db, COUNTERPART_ID)) == 1


@pytest.mark.asyncio
async def test_created_with_other_status_is_skipped(db, ctx, push):
    make_members(db)

    result = await handle_exhibition_created(db, ctx, EXHIBITION_ID, exhibition_snapshot("ACCEPTED"))

    assert result.processed is False
    assert result.reason == "not_requested"
    assert chat_store.get_chat_room_for_exhibition(db, EXHIBITION_ID) is None
    assert push.sent == []


@pytest.mark.asyncio
async def test_created_with_one_member_is_skipped(db, ctx):
    make_members(db)

    result = await handle_exhibition_created(
        db, ctx, EXHIBITION_ID, exhibition_snapshot(members=[CREATOR_ID])
    )

    assert result.processed is False
    assert result.reason == "incomplete_document"
    assert _messages(db) == []


@pytest.mark.asyncio
async def test_created_with_unknown_status_is_skipped_and_logged(db, ctx):
    result = await handle_exhibition_created(db, ctx, EXHIBITION_ID, exhibition_snapshot("PENDING"))

    assert result.processed is False
    events = db.execute(select(SystemEvent)).scalars().all()
    assert len(events) == 1
    assert events[0].reference_id == EXHIBITION_ID


# ---- Transitions ----


@pytest.mark.asyncio
async def test_accepted_rewrites_request_and_asks_for_details(db, ctx, push):
    make_members(db)
    await handle_exhibition_created(db, ctx, EXHIBITION_ID, exhibition_snapshot())

    result = await handle_exhibition_updated(
        db,
        ctx,
        EXHIBITION_ID,
        exhibition_snapshot(),
        exhibition_snapshot("ACCEPTED", editedBy=COUNTERPART_ID),
        event_id="evt-accepted",
    )

    assert result.processed is True
    assert _pairs(db) == [
        ("request_accepted", "request_accepted"),
        ("waiting_details", "waiting_details"),
    ]
    appended = [m for m in _messages(db) if m.payload["senderStatus"] == "waiting_details"][0]
    assert appended.sender_id == CREATOR_ID
    # Mirror columns follow the payload
    rewritten = [m for m in _messages(db) if m.payload["senderStatus"] == "request_accepted"][0]
    assert rewritten.sender_status == "request_accepted"
    assert rewritten.receiver_status == "request_accepted"

    records = _notifications(db, COUNTERPART_ID)
    assert {r.type for r in records} == {"RequestExhibition", "Message"}
    message_record = [r for r in records if r.type == "Message"][0]
    assert message_record.status == "ACCEPTED"
    assert push.sent_to("token-b")[-1]["data"] == {"routeName": "/chat"}


@pytest.mark.asyncio
async def test_canceled_notifies_creator(db, ctx):
    make_members(db)
    await handle_exhibition_created(db, ctx, EXHIBITION_ID, exhibition_snapshot())

    await handle_exhibition_updated(
        db, ctx, EXHIBITION_ID, exhibition_snapshot(), exhibition_snapshot("CANCELED")
    )

    assert _pairs(db) == [("request_canceled", "request_canceled")]
    records = _notifications(db, CREATOR_ID)
    assert len(records) == 1
    assert records[0].status == "CANCELED"
    assert records[0].sender_name == "Blue Gallery"


@pytest.mark.asyncio
async def test_declined_notifies_counterpart_without_appending(db, ctx):
    make_members(db)
    await handle_exhibition_created(db, ctx, EXHIBITION_ID, exhibition_snapshot())

    await handle_exhibition_updated(
        db, ctx, EXHIBITION_ID, exhibition_snapshot(), exhibition_snapshot("DECLINED")
    )

    assert _pairs(db) == [("request_declined", "request_declined")]
    assert [r.status for r in _notifications(db, COUNTERPART_ID) if r.type == "Message"] == ["DECLINED"]


@pytest.mark.asyncio
async def test_review_appends_at_last_edit_time_and_notifies_non_editor(db, ctx):
    make_members(db)
    room = _room(db)

    await handle_exhibition_updated(
        db,
        ctx,
        EXHIBITION_ID,
        exhibition_snapshot("ACCEPTED"),
        exhibition_snapshot("REVIEW", editedBy=CREATOR_ID, lastEditedAt="2026-03-05T08:30:00Z"),
    )

    messages = _messages(db)
    assert len(messages) == 1
    assert messages[0].chat_room_id == room.id
    assert messages[0].sender_id == CREATOR_ID
    assert (messages[0].payload["senderStatus"], messages[0].payload["receiverStatus"]) == (
        "waiting_review",
        "check_details",
    )
    assert messages[0].created_at.replace(tzinfo=None) == datetime(2026, 3, 5, 8, 30, 0)
    assert len(_notifications(db, COUNTERPART_ID)) == 1
    assert _notifications(db, CREATOR_ID) == []


@pytest.mark.asyncio
async def test_details_accepted_rewrites_check_details_and_waits_for_opening(db, ctx):
    make_members(db)
    room = _room(db)
    _seed_message(db, room.id, "m-review", PayloadStatus(MessageStatus.WAITING_REVIEW, MessageStatus.CHECK_DETAILS))

    await handle_exhibition_updated(
        db,
        ctx,
        EXHIBITION_ID,
        exhibition_snapshot("REVIEW"),
        exhibition_snapshot("DETAILS_ACCEPTED", editedBy=COUNTERPART_ID),
    )

    assert _pairs(db) == [
        ("details_accepted", "details_accepted"),
        ("waiting_opening", "waiting_opening"),
    ]
    assert len(_notifications(db, CREATOR_ID)) == 1


@pytest.mark.asyncio
async def test_details_accepted_without_editor_skips_append_and_notification(db, ctx, push):
    make_members(db)
    room = _room(db)
    _seed_message(db, room.id, "m-review", PayloadStatus(MessageStatus.WAITING_REVIEW, MessageStatus.CHECK_DETAILS))

    result = await handle_exhibition_updated(
        db, ctx, EXHIBITION_ID, exhibition_snapshot("REVIEW"), exhibition_snapshot("DETAILS_ACCEPTED")
    )

    assert result.reason == "editor_missing"
    # The rewrite still runs, nothing is appended
    assert _pairs(db) == [("details_accepted", "details_accepted")]
    assert db.execute(select(Notification)).scalars().all() == []
    assert push.sent == []
    event = db.execute(select(SystemEvent)).scalar_one()
    assert event.event_type == EVENT_WORKFLOW_EDITOR_MISSING


@pytest.mark.asyncio
async def test_details_changed_goes_back_to_review(db, ctx):
    make_members(db)
    room = _room(db)
    _seed_message(db, room.id, "m-review", PayloadStatus(MessageStatus.WAITING_REVIEW, MessageStatus.CHECK_DETAILS))

    await handle_exhibition_updated(
        db,
        ctx,
        EXHIBITION_ID,
        exhibition_snapshot("REVIEW"),
        exhibition_snapshot("DETAILS_CHANGED", editedBy=COUNTERPART_ID, lastEditedAt="2026-03-06T09:00:00Z"),
        event_id="evt-changed",
    )

    assert _pairs(db) == [
        ("details_changed", "details_changed"),
        ("waiting_review", "check_details"),
    ]
    appended = db.get(ChatMessage, chat_store.mint_message_id(room.id, "evt-changed", "DETAILS_CHANGED"))
    assert appended.sender_id == COUNTERPART_ID
    assert appended.created_at.replace(tzinfo=None) == datetime(2026, 3, 6, 9, 0, 0)


@pytest.mark.asyncio
async def test_open_exhibits_artworks_and_syncs_them(db, ctx, search):
    make_members(db)
    make_artwork(db, "art-1")
    make_artwork(db, "art-2", price=300.0)
    room = _room(db)
    _seed_message(db, room.id, "m-waiting", PayloadStatus.both(MessageStatus.WAITING_OPENING))
    venue = {"id": COUNTERPART_ID, "name": "Blue Gallery", "address": "1 Main St"}

    await handle_exhibition_updated(
        db,
        ctx,
        EXHIBITION_ID,
        exhibition_snapshot("DETAILS_ACCEPTED"),
        exhibition_snapshot("OPEN", editedBy=COUNTERPART_ID, venue=venue, artworks=["art-1", {"id": "art-2"}, "missing"]),
    )

    for artwork_id in ("art-1", "art-2"):
        artwork = db.get(Artwork, artwork_id)
        assert artwork.status == "Exhibited"
        assert artwork.venue == venue
        indexed = search.get(ctx.settings.search_artworks_index, artwork_id)
        assert indexed["status"] == "Exhibited"
        assert indexed["venue"] == venue

    assert _pairs(db) == [("open", "open"), ("view_exhibition", "view_exhibition")]
    assert len(_notifications(db, CREATOR_ID)) == 1


@pytest.mark.asyncio
async def test_closed_writes_canonical_closed_value(db, ctx):
    make_members(db)
    room = _room(db)
    _seed_message(db, room.id, "m-open", PayloadStatus.both(MessageStatus.OPEN))

    await handle_exhibition_updated(
        db, ctx, EXHIBITION_ID, exhibition_snapshot("OPEN"), exhibition_snapshot("CLOSED", editedBy=CREATOR_ID)
    )

    assert _pairs(db) == [("closed", "closed"), ("closed", "closed")]
    assert len(_notifications(db, COUNTERPART_ID)) == 1


@pytest.mark.asyncio
async def test_status_unchanged_is_ignored(db, ctx, push):
    make_members(db)
    _room(db)

    result = await handle_exhibition_updated(
        db, ctx, EXHIBITION_ID, exhibition_snapshot("ACCEPTED"), exhibition_snapshot("ACCEPTED", title="Renamed")
    )

    assert result.processed is False
    assert result.reason == "status_unchanged"
    assert _messages(db) == []
    assert push.sent == []


@pytest.mark.asyncio
async def test_back_to_back_details_changed_by_different_editors(db, ctx):
    make_members(db)
    room = _room(db)
    review = exhibition_snapshot("REVIEW", editedBy=CREATOR_ID, lastEditedAt="2026-03-05T08:30:00Z")
    changed_by_counterpart = exhibition_snapshot(
        "DETAILS_CHANGED", editedBy=COUNTERPART_ID, lastEditedAt="2026-03-06T09:00:00Z"
    )
    changed_by_creator = exhibition_snapshot("DETAILS_CHANGED", editedBy=CREATOR_ID, lastEditedAt="2026-03-07T11:00:00Z")

    await handle_exhibition_updated(db, ctx, EXHIBITION_ID, exhibition_snapshot("ACCEPTED"), review, event_id="evt-review")
    await handle_exhibition_updated(db, ctx, EXHIBITION_ID, review, changed_by_counterpart, event_id="evt-changed-1")
    result = await handle_exhibition_updated(
        db, ctx, EXHIBITION_ID, changed_by_counterpart, changed_by_creator, event_id="evt-changed-2"
    )

    assert result.processed is True
    assert _pairs(db) == [
        ("details_changed", "details_changed"),
        ("details_changed", "details_changed"),
        ("waiting_review", "check_details"),
    ]
    pending = db.get(ChatMessage, chat_store.mint_message_id(room.id, "evt-changed-2", "DETAILS_CHANGED"))
    assert pending.sender_id == CREATOR_ID
    assert pending.payload["receiverStatus"] == "check_details"
    assert pending.created_at.replace(tzinfo=None) == datetime(2026, 3, 7, 11, 0, 0)
    # Review by the creator and the second round both notify the venue
    assert len(_notifications(db, COUNTERPART_ID)) == 2
    assert len(_notifications(db, CREATOR_ID)) == 1


@pytest.mark.asyncio
async def test_same_status_editor_and_edit_time_is_ignored(db, ctx, push):
    make_members(db)
    _room(db)
    changed = exhibition_snapshot("DETAILS_CHANGED", editedBy=COUNTERPART_ID, lastEditedAt="2026-03-06T09:00:00Z")

    result = await handle_exhibition_updated(
        db, ctx, EXHIBITION_ID, changed, dict(changed, title="Renamed"), event_id="evt-rename"
    )

    assert result.reason == "status_unchanged"
    assert _messages(db) == []
    assert push.sent == []


@pytest.mark.asyncio
async def test_editor_outside_members_skips_notification(db, ctx):
    make_members(db)
    _room(db)

    await handle_exhibition_updated(
        db, ctx, EXHIBITION_ID, exhibition_snapshot("ACCEPTED"), exhibition_snapshot("REVIEW", editedBy="stranger")
    )

    assert db.execute(select(Notification)).scalars().all() == []


@pytest.mark.asyncio
async def test_missing_chat_room_still_notifies(db, ctx):
    make_members(db)

    result = await handle_exhibition_updated(
        db, ctx, EXHIBITION_ID, exhibition_snapshot(), exhibition_snapshot("ACCEPTED")
    )

    assert result.processed is True
    assert _messages(db) == []
    assert len(_notifications(db, COUNTERPART_ID)) == 1
    event = db.execute(select(SystemEvent)).scalar_one()
    assert event.event_type == EVENT_WORKFLOW_CHAT_ROOM_MISSING


@pytest.mark.asyncio
async def test_redelivered_transition_appends_once(db, ctx):
    make_members(db)
    await handle_exhibition_created(db, ctx, EXHIBITION_ID, exhibition_snapshot(), event_id="evt-created")

    for _ in range(2):
        await handle_exhibition_updated(
            db,
            ctx,
            EXHIBITION_ID,
            exhibition_snapshot(),
            exhibition_snapshot("ACCEPTED"),
            event_id="evt-accepted",
        )

    assert _pairs(db) == [
        ("request_accepted", "request_accepted"),
        ("waiting_details", "waiting_details"),
    ]
    assert len([r for r in _notifications(db, COUNTERPART_ID) if r.type == "Message"]) == 1


@pytest.mark.asyncio
async def test_request_to_accepted_end_to_end(db, ctx, push):
    """A creates, B is asked; once accepted, A asks for details and B is told."""
    make_members(db)

    await handle_exhibition_created(db, ctx, EXHIBITION_ID, exhibition_snapshot(), event_id="e1")
    request_records = _notifications(db, COUNTERPART_ID)
    assert [(r.type, r.status) for r in request_records] == [("RequestExhibition", "REQUESTED")]

    await handle_exhibition_updated(
        db, ctx, EXHIBITION_ID, exhibition_snapshot(), exhibition_snapshot("ACCEPTED", editedBy=COUNTERPART_ID), event_id="e2"
    )

    messages = _messages(db)
    assert len(messages) == 2
    first = [m for m in messages if m.payload["senderStatus"] == "request_accepted"]
    assert len(first) == 1 and first[0].payload["receiverStatus"] == "request_accepted"
    appended = [m for m in messages if m.payload["senderStatus"] == "waiting_details"]
    assert len(appended) == 1 and appended[0].sender_id == CREATOR_ID

    b_types = sorted(r.type for r in _notifications(db, COUNTERPART_ID))
    assert b_types == ["Message", "RequestExhibition"]
    assert len(push.sent_to("token-b")) == 2
    assert push.sent_to("token-a") == []
