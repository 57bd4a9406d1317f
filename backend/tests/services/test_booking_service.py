"""Tests for staff booking queries."""

from datetime import timedelta

import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.models.booking import BookingStatus
from app.services.booking_service import BookingService
from tests.utils.booking_builders import at
from tests.utils.factories import make_booking, make_booking_type


@pytest.fixture
def week_of_bookings(db, consultation, test_contact, monday):
    next_monday = monday + timedelta(days=7)
    return {
        "early": make_booking(db, consultation, test_contact, monday, "09:00"),
        "pending": make_booking(
            db, consultation, test_contact, monday, "10:00", BookingStatus.PENDING
        ),
        "cancelled": make_booking(
            db, consultation, test_contact, monday, "10:30", BookingStatus.CANCELLED
        ),
        "next_week": make_booking(db, consultation, test_contact, next_monday, "09:00"),
    }


class TestListBookings:
    def test_lists_newest_start_first(self, db, test_workspace, week_of_bookings):
        bookings = BookingService(db).list_bookings(test_workspace.id)

        starts = [b.start_time for b in bookings]
        assert starts == sorted(starts, reverse=True)
        assert bookings[0].id == week_of_bookings["next_week"].id

    def test_filters_by_status(self, db, test_workspace, week_of_bookings):
        bookings = BookingService(db).list_bookings(test_workspace.id, status="pending")

        assert [b.id for b in bookings] == [week_of_bookings["pending"].id]

    def test_date_range_is_inclusive_local_days(self, db, test_workspace, week_of_bookings, monday):
        bookings = BookingService(db).list_bookings(
            test_workspace.id, start_date=monday, end_date=monday
        )

        assert {b.id for b in bookings} == {
            week_of_bookings["early"].id,
            week_of_bookings["pending"].id,
            week_of_bookings["cancelled"].id,
        }

    def test_filters_by_booking_type(
        self, db, test_workspace, test_contact, week_of_bookings, monday
    ):
        other_type = make_booking_type(db, test_workspace, name="Follow-up")
        other = make_booking(db, other_type, test_contact, monday, "09:00")

        bookings = BookingService(db).list_bookings(test_workspace.id, booking_type_id=other_type.id)

        assert [b.id for b in bookings] == [other.id]

    def test_inverted_range_is_rejected(self, db, test_workspace, monday):
        with pytest.raises(ValidationException):
            BookingService(db).list_bookings(
                test_workspace.id, start_date=monday, end_date=monday - timedelta(days=1)
            )

    def test_unknown_status_is_rejected(self, db, test_workspace):
        with pytest.raises(ValidationException):
            BookingService(db).list_bookings(test_workspace.id, status="LOST")

    def test_other_workspaces_are_invisible(self, db, other_workspace, week_of_bookings):
        assert BookingService(db).list_bookings(other_workspace.id) == []


class TestUpcomingAndToday:
    def test_upcoming_returns_open_bookings_soonest_first(
        self, db, test_workspace, week_of_bookings, monday
    ):
        now = at(monday, "08:00")

        bookings = BookingService(db).get_upcoming_bookings(test_workspace.id, now=now)

        # Cancelled is closed; next week starts after the 7 day window
        assert [b.id for b in bookings] == [
            week_of_bookings["early"].id,
            week_of_bookings["pending"].id,
        ]

    def test_upcoming_window_excludes_far_future(
        self, db, test_workspace, consultation, test_contact, monday
    ):
        far = make_booking(db, consultation, test_contact, monday + timedelta(days=21), "09:00")

        bookings = BookingService(db).get_upcoming_bookings(
            test_workspace.id, now=at(monday, "08:00")
        )

        assert far.id not in [b.id for b in bookings]

    def test_today_includes_every_status(self, db, test_workspace, week_of_bookings, monday):
        bookings = BookingService(db).get_today_bookings(test_workspace.id, now=at(monday, "12:00"))

        assert [b.id for b in bookings] == [
            week_of_bookings["early"].id,
            week_of_bookings["pending"].id,
            week_of_bookings["cancelled"].id,
        ]


class TestGetBooking:
    def test_returns_booking_with_relations(self, db, test_workspace, week_of_bookings):
        booking = BookingService(db).get_booking(test_workspace.id, week_of_bookings["early"].id)

        assert booking.booking_type.name == "Consultation"
        assert booking.contact.email == "ada@example.com"

    def test_foreign_booking_is_not_found(self, db, other_workspace, week_of_bookings):
        with pytest.raises(NotFoundException):
            BookingService(db).get_booking(other_workspace.id, week_of_bookings["early"].id)
