"""Tests for the booking event management command."""

from datetime import datetime, timedelta, timezone
import sys

import pytest
from sqlalchemy.orm import sessionmaker

from app.commands import booking_events
from app.events import BookingCancelled, EventPublisher
from app.repositories.event_outbox_repository import EventOutboxRepository


@pytest.fixture
def command_sessions(monkeypatch, test_engine):
    factory = sessionmaker(bind=test_engine, autoflush=False, expire_on_commit=False)
    monkeypatch.setattr(booking_events, "SessionLocal", factory)
    return factory


def queue_cancellation(factory, booking_id: str) -> None:
    session = factory()
    try:
        EventPublisher(EventOutboxRepository(session)).publish_detached(
            BookingCancelled(
                booking_id=booking_id,
                workspace_id="01WORKSPACE",
                cancelled_at=datetime.now(timezone.utc) - timedelta(minutes=1),
            )
        )
    finally:
        session.close()


class TestBookingEventsCommand:
    def test_dispatch_delivers_pending_events(self, command_sessions):
        queue_cancellation(command_sessions, "01A")
        queue_cancellation(command_sessions, "01B")

        assert booking_events.dispatch(limit=10) == 2
        assert booking_events.outbox_status() == {"SENT": 2}

    def test_status_command_prints_counts(self, command_sessions, monkeypatch, capsys):
        queue_cancellation(command_sessions, "01A")
        monkeypatch.setattr(sys, "argv", ["booking_events", "status"])

        booking_events.main()

        out = capsys.readouterr().out
        assert "Outbox Status" in out
        assert "PENDING" in out

    def test_unknown_command_exits_with_help(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["booking_events"])

        with pytest.raises(SystemExit):
            booking_events.main()
