"""
Redelivery dedupe for trigger events.

The dispatcher delivers at least once. A trigger carrying an event_id is recorded here
after it was handled; a later delivery with the same (trigger, event_id) is skipped.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from artmarket.db.models import ProcessedEvent

logger = logging.getLogger(__name__)


def is_processed(db: Session, trigger: str, event_id: str | None) -> bool:
    if not event_id:
        return False
    stmt = select(ProcessedEvent.id).where(
        ProcessedEvent.trigger == trigger, ProcessedEvent.event_id == event_id
    )
    return db.execute(stmt).first() is not None


def mark_processed(db: Session, trigger: str, event_id: str | None) -> bool:
    """
    Record that an event was handled.

    Returns:
        True if recorded, False if there was no event_id or a concurrent delivery recorded it first
    """
    if not event_id:
        return False
    db.add(ProcessedEvent(trigger=trigger, event_id=event_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Event {trigger}/{event_id} already recorded by a concurrent delivery")
        return False
    return True
