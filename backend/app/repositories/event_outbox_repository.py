# backend/app/repositories/event_outbox_repository.py
"""
Event Outbox Repository

Booking events are queued in the same database as bookings and delivered
later by the dispatcher. Each row carries an idempotency key so publishing
the same event twice queues it once.
"""

from datetime import datetime, timedelta
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from ..core.timezone_utils import utc_now
from ..models.event_outbox import EventOutbox, EventOutboxStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

# Stored error text is truncated to this many characters
MAX_ERROR_LENGTH = 1000


class EventOutboxRepository(BaseRepository[EventOutbox]):
    """Data access for queued booking events."""

    def __init__(self, db: Session):
        super().__init__(db, EventOutbox)

    def get_by_idempotency_key(self, idempotency_key: str) -> Optional[EventOutbox]:
        return self.db.query(EventOutbox).filter(EventOutbox.idempotency_key == idempotency_key).first()

    def enqueue(
        self,
        event_type: str,
        aggregate_id: str,
        payload: Optional[Dict[str, Any]] = None,
        idempotency_key: Optional[str] = None,
    ) -> EventOutbox:
        """
        Queue an event in the caller's transaction.

        Returns the existing row unchanged when the idempotency key is already
        queued, otherwise a new PENDING row due immediately.
        """
        now = utc_now()
        key = idempotency_key or f"{event_type}:{aggregate_id}:{int(now.timestamp())}"

        existing = self.get_by_idempotency_key(key)
        if existing is not None:
            self.logger.debug("Event %s already queued", key)
            return existing

        row = EventOutbox(
            event_type=event_type,
            aggregate_id=aggregate_id,
            payload=payload or {},
            idempotency_key=key,
            status=EventOutboxStatus.PENDING.value,
            attempt_count=0,
            next_attempt_at=now,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def fetch_pending(self, limit: int = 100, now: Optional[datetime] = None) -> List[EventOutbox]:
        """Due PENDING rows, oldest first. Locked rows are skipped on PostgreSQL."""
        query = (
            self.db.query(EventOutbox)
            .filter(
                EventOutbox.status == EventOutboxStatus.PENDING.value,
                EventOutbox.next_attempt_at <= (now or utc_now()),
            )
            .order_by(EventOutbox.next_attempt_at.asc(), EventOutbox.id.asc())
            .limit(limit)
        )
        if self.dialect_name == "postgresql":
            query = query.with_for_update(skip_locked=True)
        return self._execute_query(query)

    def count_by_status(self) -> Dict[str, int]:
        rows = (
            self.db.query(EventOutbox.status, func.count(EventOutbox.id))
            .group_by(EventOutbox.status)
            .all()
        )
        return {status: count for status, count in rows}

    def _set(self, event_id: str, values: Dict[str, Any]) -> None:
        self.db.execute(update(EventOutbox).where(EventOutbox.id == event_id).values(**values))
        self.db.flush()

    def mark_sent(self, event_id: str, attempt_count: int) -> None:
        now = utc_now()
        self._set(
            event_id,
            {
                "status": EventOutboxStatus.SENT.value,
                "attempt_count": attempt_count,
                "last_error": None,
                "updated_at": now,
            },
        )

    def mark_failed(
        self,
        event_id: str,
        *,
        attempt_count: int,
        backoff_seconds: int,
        error: Optional[str] = None,
        terminal: bool = False,
    ) -> None:
        """
        Record a failed delivery.

        Non-terminal failures go back to PENDING, due after ``backoff_seconds``;
        terminal ones are parked as FAILED.
        """
        now = utc_now()
        values: Dict[str, Any] = {
            "attempt_count": attempt_count,
            "last_error": error[:MAX_ERROR_LENGTH] if error else None,
            "updated_at": now,
        }
        if terminal:
            values["status"] = EventOutboxStatus.FAILED.value
        else:
            values["status"] = EventOutboxStatus.PENDING.value
            values["next_attempt_at"] = now + timedelta(seconds=max(backoff_seconds, 1))
        self._set(event_id, values)
