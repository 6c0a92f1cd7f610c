"""
Notification dispatcher - push delivery plus the durable notification record.

The record is the source of truth for in-app notification lists and is always written
(seen=False). Push is a best-effort nudge: it is attempted only when the recipient has a
token and opted into the category, and a delivery failure is logged, never raised.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.orm import Session

from artmarket.constants.event_types import EVENT_PUSH_DELIVERY_FAILURE
from artmarket.constants.statuses import NotificationCategory, NotificationType
from artmarket.core.context import ServiceContext
from artmarket.core.errors import PushDeliveryError
from artmarket.db.helpers import commit_and_refresh
from artmarket.db.models import Notification, User
from artmarket.services.system_event_service import warn

logger = logging.getLogger(__name__)

NOTIFICATION_ID_NAMESPACE = uuid.UUID("5b0e6a52-2f3c-4b8e-9a57-0c1c6f0f4d21")


@dataclass
class NotificationRecord:
    type: NotificationType
    sender_name: str = ""
    status: str | None = None
    image: str | None = None
    message: str | None = None
    reference_id: str | None = None


def notification_id(
    user_id: str, record: NotificationRecord, event_id: str | None, dedupe_key: str = ""
) -> str:
    """Stable id per (event, recipient, type, dedupe_key) so redelivery finds the existing record."""
    if not event_id:
        return str(uuid.uuid4())
    name = f"{event_id}:{user_id}:{record.type.value}:{dedupe_key}"
    return str(uuid.uuid5(NOTIFICATION_ID_NAMESPACE, name))


def is_opted_in(user: User, category: NotificationCategory) -> bool:
    flags = {
        NotificationCategory.EXHIBITIONS: user.notify_exhibitions,
        NotificationCategory.MESSAGES: user.notify_messages,
        NotificationCategory.PURCHASES: user.notify_purchases,
    }
    # Unset flags count as opted in
    return flags[category] is not False


async def _deliver(db: Session, ctx: ServiceContext, user: User, category: NotificationCategory, push_message: dict) -> bool:
    if not ctx.settings.feature_notifications_enabled:
        logger.debug(f"Notifications feature disabled (feature flag) - no push for user {user.id}")
        return False
    if not user.push_token:
        logger.debug(f"User {user.id} has no push token - skipping push")
        return False
    if not is_opted_in(user, category):
        logger.debug(f"User {user.id} opted out of {category.value} notifications - skipping push")
        return False

    try:
        await ctx.push.send_to_device(user.push_token, push_message)
    except PushDeliveryError as e:
        logger.warning(f"Push to user {user.id} failed: {e}")
        warn(
            db=db,
            event_type=EVENT_PUSH_DELIVERY_FAILURE,
            reference_id=user.id,
            payload={"category": category.value},
            exc=e,
        )
        return False
    return True


async def send_notification(
    db: Session,
    ctx: ServiceContext,
    user_id: str,
    category: NotificationCategory,
    push_message: dict,
    record: NotificationRecord,
    event_id: str | None = None,
    dedupe_key: str = "",
) -> Notification | None:
    """
    Push to user_id (best effort) and persist the notification record.

    Args:
        db: Database session
        ctx: Service context (push client and feature flags)
        user_id: Recipient
        category: Opt-in category checked before pushing
        push_message: {notification: {title, body}, data?: {routeName}}
        record: Fields of the durable notification
        event_id: Triggering event id, makes the record id deterministic
        dedupe_key: Distinguishes several records of one type for one recipient and event

    Returns:
        The stored Notification, or None if the recipient does not exist
    """
    user = db.get(User, user_id)
    if user is None:
        logger.info(f"Notification recipient {user_id} not found - nothing to do")
        return None

    nid = notification_id(user_id, record, event_id, dedupe_key)
    existing = db.get(Notification, nid)
    if existing is not None:
        logger.info(f"Notification {nid} already recorded for user {user_id} - skipping")
        return existing

    delivered = await _deliver(db, ctx, user, category, push_message)

    notification = Notification(
        id=nid,
        user_id=user_id,
        sender_name=record.sender_name or "",
        type=record.type.value,
        status=record.status,
        image=record.image,
        message=record.message,
        reference_id=record.reference_id,
        seen=False,
    )
    db.add(notification)
    commit_and_refresh(db, notification)

    logger.info(
        f"Recorded {record.type.value} notification {nid} for user {user_id} (pushed: {delivered})"
    )
    return notification
