#!/usr/bin/env python
# backend/app/commands/booking_events.py
"""
Booking event management commands.

Delivery runs as a one-shot command (cron, container job) instead of a
background thread inside the API process.

Usage:
    python -m app.commands.booking_events init-db     # Create tables and constraints
    python -m app.commands.booking_events dispatch    # Deliver one batch of pending events
    python -m app.commands.booking_events status      # Count outbox rows per status
"""

import argparse
import logging
from pathlib import Path
import sys
from typing import Dict, Optional

# Add project root to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.core.config import settings
from app.database import SessionLocal, init_db
from app.events.dispatcher import EventDispatcher
from app.repositories.event_outbox_repository import EventOutboxRepository

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def dispatch(limit: Optional[int] = None) -> int:
    """Deliver one batch of due outbox events."""
    db = SessionLocal()
    try:
        return EventDispatcher(db).dispatch_pending(limit=limit)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def outbox_status() -> Dict[str, int]:
    db = SessionLocal()
    try:
        return EventOutboxRepository(db).count_by_status()
    finally:
        db.close()


def main() -> None:
    """Main entry point for booking event commands."""
    parser = argparse.ArgumentParser(
        description="Booking event management commands",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("init-db", help="Create tables and constraints")

    dispatch_parser = subparsers.add_parser("dispatch", help="Deliver pending events")
    dispatch_parser.add_argument(
        "--limit",
        type=int,
        default=settings.event_dispatch_batch_size,
        help="Maximum events to deliver (default: EVENT_DISPATCH_BATCH_SIZE)",
    )

    subparsers.add_parser("status", help="Count outbox rows per status")

    args = parser.parse_args()

    if args.command == "init-db":
        init_db()
        print("Database schema is up to date")

    elif args.command == "dispatch":
        delivered = dispatch(args.limit)
        print(f"Delivered {delivered} event(s)")

    elif args.command == "status":
        counts = outbox_status()
        print("Outbox Status")
        print("=" * 30)
        if not counts:
            print("No events recorded.")
        for status, count in sorted(counts.items()):
            print(f"  {status:<8} {count}")

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
