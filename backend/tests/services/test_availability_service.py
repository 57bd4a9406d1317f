"""Tests for slot listing and bookable dates."""

from datetime import timedelta

import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.models.booking import BookingStatus
from app.services.availability_service import AvailabilityService
from app.services.booking_lifecycle import BookingLifecycleService
from tests.utils.booking_builders import at, hhmm_pairs
from tests.utils.factories import make_booking, make_booking_type, make_workspace


class TestAvailableSlots:
    """Generation plus conflict filtering against stored bookings."""

    def test_empty_day_lists_every_generated_slot(self, db, test_workspace, consultation, monday):
        service = AvailabilityService(db)

        slots = service.get_available_slots(test_workspace.id, consultation.id, monday)

        assert hhmm_pairs(slots) == [
            ("09:00", "09:30"),
            ("09:30", "10:00"),
            ("10:00", "10:30"),
            ("10:30", "11:00"),
        ]

    def test_confirmed_booking_is_excluded(
        self, db, test_workspace, consultation, test_contact, monday
    ):
        make_booking(db, consultation, test_contact, monday, "09:30")
        service = AvailabilityService(db)

        slots = service.get_available_slots(test_workspace.id, consultation.id, monday)

        assert hhmm_pairs(slots) == [("09:00", "09:30"), ("10:00", "10:30"), ("10:30", "11:00")]

    def test_no_show_releases_the_slot(
        self, db, test_workspace, consultation, test_contact, monday
    ):
        booking = make_booking(db, consultation, test_contact, monday, "10:00")
        service = AvailabilityService(db)
        assert ("10:00", "10:30") not in hhmm_pairs(
            service.get_available_slots(test_workspace.id, consultation.id, monday)
        )

        BookingLifecycleService(db).transition(
            test_workspace.id, booking.id, BookingStatus.NO_SHOW
        )

        slots = service.get_available_slots(test_workspace.id, consultation.id, monday)
        assert ("10:00", "10:30") in hhmm_pairs(slots)
        assert len(slots) == 4

    def test_bookings_of_other_types_do_not_block(
        self, db, test_workspace, consultation, test_contact, monday
    ):
        other_type = make_booking_type(db, test_workspace, name="Follow-up")
        make_booking(db, other_type, test_contact, monday, "09:00")
        service = AvailabilityService(db)

        slots = service.get_available_slots(test_workspace.id, consultation.id, monday)

        assert len(slots) == 4

    def test_day_without_rules_is_empty(self, db, test_workspace, consultation, monday):
        service = AvailabilityService(db)

        assert service.get_available_slots(test_workspace.id, consultation.id, monday + timedelta(days=2)) == []

    def test_now_cutoff_hides_started_slots(self, db, test_workspace, consultation, monday):
        service = AvailabilityService(db)

        slots = service.get_available_slots(
            test_workspace.id, consultation.id, monday, now=at(monday, "10:00")
        )

        assert hhmm_pairs(slots) == [("10:30", "11:00")]

    def test_workspace_timezone_is_applied(self, db, test_contact, monday):
        workspace = make_workspace(db, "tokyo-clinic", timezone="Asia/Tokyo")
        booking_type = make_booking_type(db, workspace)
        service = AvailabilityService(db)

        slots = service.get_available_slots(workspace.id, booking_type.id, monday)

        assert slots[0].start == at(monday, "09:00", "Asia/Tokyo")
        assert hhmm_pairs(slots, "Asia/Tokyo")[0] == ("09:00", "09:30")

    def test_unknown_workspace_is_not_found(self, db, consultation, monday):
        with pytest.raises(NotFoundException):
            AvailabilityService(db).get_available_slots("missing", consultation.id, monday)

    def test_inactive_booking_type_is_rejected(self, db, test_workspace, monday):
        inactive = make_booking_type(db, test_workspace, is_active=False)

        with pytest.raises(ValidationException):
            AvailabilityService(db).get_available_slots(test_workspace.id, inactive.id, monday)

    def test_booking_type_of_another_workspace_is_rejected(
        self, db, other_workspace, consultation, monday
    ):
        with pytest.raises(ValidationException):
            AvailabilityService(db).get_available_slots(other_workspace.id, consultation.id, monday)


class TestAvailableDates:
    def test_lists_dates_whose_weekday_has_rules(self, db, test_workspace, consultation, monday):
        service = AvailabilityService(db)

        dates = service.get_available_dates(
            test_workspace.id, consultation.id, from_date=monday, days_ahead=15
        )

        assert [d["date"] for d in dates] == [
            monday,
            monday + timedelta(days=7),
            monday + timedelta(days=14),
        ]
        assert all(d["day_of_week"] == 1 for d in dates)

    def test_fully_booked_date_is_still_listed(
        self, db, test_workspace, consultation, test_contact, monday
    ):
        for start in ("09:00", "09:30", "10:00", "10:30"):
            make_booking(db, consultation, test_contact, monday, start)
        service = AvailabilityService(db)

        dates = service.get_available_dates(
            test_workspace.id, consultation.id, from_date=monday, days_ahead=1
        )

        assert [d["date"] for d in dates] == [monday]
        assert service.get_available_slots(test_workspace.id, consultation.id, monday) == []

    def test_defaults_to_configured_horizon(self, db, test_workspace, consultation, monday):
        dates = AvailabilityService(db).get_available_dates(
            test_workspace.id, consultation.id, from_date=monday
        )

        # 30 day horizon starting on a Monday covers five Mondays
        assert len(dates) == 5
