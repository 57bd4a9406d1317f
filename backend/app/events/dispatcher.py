"""
Outbox dispatcher.

Delivers pending outbox rows to the handlers registered for their event type,
marking each row SENT, or re-queueing it with exponential backoff until
``event_max_attempts`` is reached and it is marked FAILED.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.events.handlers import EventHandler, default_handlers
from app.models.event_outbox import EventOutbox
from app.monitoring.prometheus_metrics import prometheus_metrics
from app.repositories.event_outbox_repository import EventOutboxRepository

logger = logging.getLogger(__name__)

BASE_BACKOFF_SECONDS = 30


class EventDispatcher:
    """Routes outbox events to in-process subscribers."""

    def __init__(
        self,
        db: Session,
        handlers: Optional[Dict[str, List[EventHandler]]] = None,
        max_attempts: Optional[int] = None,
    ):
        self.db = db
        self.outbox_repo = EventOutboxRepository(db)
        self.handlers = handlers if handlers is not None else default_handlers()
        self.max_attempts = max_attempts or settings.event_max_attempts

    def register(self, event_type: str, handler: EventHandler) -> None:
        self.handlers.setdefault(event_type, []).append(handler)

    def dispatch_pending(self, limit: Optional[int] = None) -> int:
        """
        Deliver one batch of due events.

        Returns:
            Number of events delivered successfully
        """
        rows = self.outbox_repo.fetch_pending(limit=limit or settings.event_dispatch_batch_size)
        delivered = 0
        for row in rows:
            if self._deliver(row):
                delivered += 1
            self.db.commit()
        if rows:
            logger.info("Dispatched %d/%d outbox events", delivered, len(rows))
        return delivered

    def _deliver(self, row: EventOutbox) -> bool:
        attempt = (row.attempt_count or 0) + 1
        handlers = self.handlers.get(row.event_type, [])
        if not handlers:
            logger.debug("No handler for event type: %s", row.event_type)

        try:
            for handler in handlers:
                handler(dict(row.payload or {}))
        except Exception as exc:  # handler failures must not stop the batch
            terminal = attempt >= self.max_attempts
            self.outbox_repo.mark_failed(
                row.id,
                attempt_count=attempt,
                backoff_seconds=BASE_BACKOFF_SECONDS * (2 ** (attempt - 1)),
                error=str(exc),
                terminal=terminal,
            )
            prometheus_metrics.record_outbox_event(row.event_type, "failed" if terminal else "retry")
            logger.warning(
                "Delivery of %s %s failed (attempt %d/%d): %s",
                row.event_type,
                row.id,
                attempt,
                self.max_attempts,
                exc,
            )
            return False

        self.outbox_repo.mark_sent(row.id, attempt_count=attempt)
        prometheus_metrics.record_outbox_event(row.event_type, "sent")
        return True
