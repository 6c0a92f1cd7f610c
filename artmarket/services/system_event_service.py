"""
System event logging service.

Persists structured records of skipped inputs and swallowed failures (e.g. push delivery)
so they can be audited after the handler has acknowledged the event. All SystemEvent
creation goes through log_event (or info/warn/error) to keep the payload shape stable.
"""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete
from sqlalchemy.orm import Session

from artmarket.db.models import ProcessedEvent, SystemEvent
from artmarket.middleware.correlation_id import get_correlation_id

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 90


def log_event(
    db: Session,
    level: str,
    event_type: str,
    reference_id: str | None = None,
    payload: dict | None = None,
    exc: BaseException | None = None,
) -> SystemEvent:
    """
    Log a system event to the database.

    Args:
        db: Database session
        level: Event level (INFO, WARN, ERROR)
        event_type: Type of event (see constants.event_types)
        reference_id: Optional id of the document the event is about
        payload: Optional additional event data. Copied, never mutated.
        exc: Optional exception; its type and message are added to the payload

    Returns:
        Created SystemEvent object
    """
    normalized: dict = dict(payload) if payload else {}
    if exc is not None:
        normalized["error"] = {
            "type": type(exc).__name__,
            "message": str(exc)[:500],
        }
    correlation_id = get_correlation_id()
    if correlation_id is not None:
        normalized["correlation_id"] = correlation_id

    event = SystemEvent(
        level=level.upper(),
        event_type=event_type,
        reference_id=reference_id,
        payload=normalized or None,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def info(db: Session, event_type: str, reference_id: str | None = None, payload: dict | None = None) -> SystemEvent:
    return log_event(db, "INFO", event_type, reference_id=reference_id, payload=payload)


def warn(
    db: Session,
    event_type: str,
    reference_id: str | None = None,
    payload: dict | None = None,
    exc: BaseException | None = None,
) -> SystemEvent:
    return log_event(db, "WARN", event_type, reference_id=reference_id, payload=payload, exc=exc)


def error(
    db: Session,
    event_type: str,
    reference_id: str | None = None,
    payload: dict | None = None,
    exc: BaseException | None = None,
) -> SystemEvent:
    return log_event(db, "ERROR", event_type, reference_id=reference_id, payload=payload, exc=exc)


def cleanup_old_events(
    db: Session,
    *,
    retention_days: int = DEFAULT_RETENTION_DAYS,
    cutoff: datetime | None = None,
) -> dict[str, int]:
    """
    Delete SystemEvents and ProcessedEvent markers older than retention_days
    (or before cutoff if provided).

    Returns:
        {"system_events": deleted, "processed_events": deleted}
    """
    if cutoff is None:
        cutoff = datetime.now(UTC) - timedelta(days=retention_days)
    if cutoff.tzinfo is None:
        cutoff = cutoff.replace(tzinfo=UTC)
    events = db.execute(delete(SystemEvent).where(SystemEvent.created_at < cutoff)).rowcount
    markers = db.execute(delete(ProcessedEvent).where(ProcessedEvent.processed_at < cutoff)).rowcount
    db.commit()
    logger.info(
        f"Retention: deleted {events} system events and {markers} processed markers "
        f"older than {cutoff.isoformat()}"
    )
    return {"system_events": events, "processed_events": markers}
