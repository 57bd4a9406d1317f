"""Event publisher - writes domain events to the outbox for background delivery."""
from datetime import datetime
import logging
from typing import Any, Dict, Protocol

from sqlalchemy.exc import SQLAlchemyError

from app.repositories.event_outbox_repository import EventOutboxRepository

logger = logging.getLogger(__name__)


class Event(Protocol):
    """Protocol for event types."""

    booking_id: str

    def to_dict(self) -> Dict[str, Any]:
        ...

    def idempotency_key(self) -> str:
        ...


class EventPublisher:
    """Publishes booking events to the outbox for async processing."""

    def __init__(self, outbox_repository: EventOutboxRepository):
        self.outbox_repo = outbox_repository

    def publish(self, event: Event) -> None:
        """
        Queue an event inside the caller's transaction.

        Events are delivered by the dispatcher, which routes them to the
        handlers registered for their type.
        """
        event_type = type(event).__name__
        payload = event.to_dict()

        # Convert datetime objects to ISO strings for JSON serialization
        for key, value in payload.items():
            if isinstance(value, datetime):
                payload[key] = value.isoformat()

        self.outbox_repo.enqueue(
            event_type=event_type,
            aggregate_id=event.booking_id,
            payload=payload,
            idempotency_key=event.idempotency_key(),
        )

    def publish_detached(self, event: Event) -> bool:
        """
        Queue and commit an event in its own transaction.

        Used after the booking itself is committed: a failure here is logged
        and reported as False, never raised to the caller.
        """
        db = self.outbox_repo.db
        try:
            self.publish(event)
            db.commit()
            return True
        except (SQLAlchemyError, RuntimeError) as exc:
            db.rollback()
            logger.warning(
                "Failed to publish %s for booking %s: %s",
                type(event).__name__,
                event.booking_id,
                exc,
            )
            return False
