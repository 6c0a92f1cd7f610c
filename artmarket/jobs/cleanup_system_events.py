"""
Scheduled job for SystemEvent and ProcessedEvent retention cleanup.

Deletes records older than retention_days (default SYSTEM_EVENT_RETENTION_DAYS).
Run via: python -m artmarket.jobs.cleanup_system_events [--retention-days 90]
"""

import logging
import sys

from artmarket.core.config import settings
from artmarket.db import session as db_session
from artmarket.services.system_event_service import cleanup_old_events

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for retention cleanup."""
    import argparse

    parser = argparse.ArgumentParser(description="Clean up old SystemEvents and processed-event markers")
    parser.add_argument(
        "--retention-days",
        type=int,
        default=settings.system_event_retention_days,
        help=f"Delete records older than this many days (default: {settings.system_event_retention_days})",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    db = db_session.SessionLocal()
    try:
        deleted = cleanup_old_events(db, retention_days=args.retention_days)
        logger.info(f"Retention cleanup completed: {deleted}")
    except Exception as e:
        logger.error(f"Retention cleanup failed: {e}", exc_info=True)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
