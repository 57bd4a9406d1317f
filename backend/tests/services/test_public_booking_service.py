"""Tests for the public booking gateway and contact resolution."""

import pytest

from app.core.exceptions import NotFoundException, SlotConflictException, ValidationException
from app.models.booking import Booking, BookingStatus
from app.models.contact import Contact
from app.schemas.booking import StaffBookingCreate
from app.schemas.public_booking import PublicBookingCreate
from app.services.public_booking_service import (
    PUBLIC_BOOKING_SOURCE,
    PUBLIC_BOOKING_TAG,
    STAFF_BOOKING_SOURCE,
    PublicBookingService,
)
from tests.utils.booking_builders import at
from tests.utils.factories import make_booking, make_booking_type, make_contact


def booking_request(booking_type_id: str, start, **contact) -> PublicBookingCreate:
    values = {"email": "visitor@example.com", "first_name": "Grace", "last_name": "Hopper"}
    values.update(contact)
    return PublicBookingCreate(booking_type_id=booking_type_id, start_time=start, **values)


class TestFindOrCreateContact:
    """Contact precedence rules for repeat visitors."""

    def test_creates_contact_with_lowercased_email(self, db, test_workspace):
        service = PublicBookingService(db)

        contact = service.find_or_create_contact(
            test_workspace.id, email="  Visitor@Example.COM ", first_name="Grace"
        )

        assert contact.email == "visitor@example.com"
        assert contact.first_name == "Grace"
        assert contact.custom_fields["source"] == PUBLIC_BOOKING_SOURCE

    def test_reuses_contact_with_same_email(self, db, test_workspace, test_contact):
        service = PublicBookingService(db)

        contact = service.find_or_create_contact(test_workspace.id, email="ADA@example.com")

        assert contact.id == test_contact.id
        assert db.query(Contact).count() == 1

    def test_non_empty_incoming_values_replace_stored_ones(self, db, test_workspace, test_contact):
        service = PublicBookingService(db)

        contact = service.find_or_create_contact(
            test_workspace.id,
            email="ada@example.com",
            first_name="Augusta",
            last_name="",
            phone="+15550199",
        )

        assert contact.first_name == "Augusta"
        assert contact.last_name == "Lovelace"
        assert contact.phone == "+15550199"

    def test_phone_only_visitors_always_get_new_contacts(self, db, test_workspace):
        service = PublicBookingService(db)

        first = service.find_or_create_contact(test_workspace.id, phone="+15550123")
        second = service.find_or_create_contact(test_workspace.id, phone="+15550123")

        assert first.id != second.id
        assert first.email is None

    def test_email_in_another_workspace_is_not_shared(self, db, test_workspace, other_workspace):
        foreign = make_contact(db, other_workspace, email="ada@example.com")

        contact = PublicBookingService(db).find_or_create_contact(
            test_workspace.id, email="ada@example.com"
        )

        assert contact.id != foreign.id
        assert contact.workspace_id == test_workspace.id

    def test_requires_email_or_phone(self, db, test_workspace):
        with pytest.raises(ValidationException):
            PublicBookingService(db).find_or_create_contact(test_workspace.id, first_name="Anon")


class TestSubmit:
    def test_submit_returns_confirmation(self, db, test_workspace, consultation, monday):
        service = PublicBookingService(db)

        confirmation = service.submit(
            test_workspace.id, booking_request(consultation.id, at(monday, "10:00"))
        )

        assert len(confirmation.reference_code) == 8
        assert confirmation.status == BookingStatus.PENDING.value
        assert confirmation.start_time == at(monday, "10:00")
        assert confirmation.end_time == at(monday, "10:30")
        assert confirmation.booking_type.name == "Consultation"
        assert confirmation.booking_type.duration == 30
        assert confirmation.contact.name == "Grace Hopper"
        assert confirmation.contact.email == "visitor@example.com"

    def test_submit_stores_customer_info_and_tags_contact(
        self, db, test_workspace, consultation, monday
    ):
        PublicBookingService(db).submit(
            test_workspace.id,
            booking_request(consultation.id, at(monday, "10:00"), phone="+15550111"),
        )

        booking = db.query(Booking).one()
        assert booking.booking_metadata["source"] == PUBLIC_BOOKING_SOURCE
        assert booking.booking_metadata["customer_info"]["phone"] == "+15550111"
        contact = db.query(Contact).one()
        assert PUBLIC_BOOKING_TAG in contact.tags
        assert contact.custom_fields["booking_count"] == 1

    def test_repeat_visitor_keeps_one_contact(self, db, test_workspace, consultation, monday):
        service = PublicBookingService(db)

        service.submit(test_workspace.id, booking_request(consultation.id, at(monday, "09:00")))
        service.submit(test_workspace.id, booking_request(consultation.id, at(monday, "09:30")))

        contact = db.query(Contact).one()
        assert contact.custom_fields["booking_count"] == 2
        assert contact.tags.count(PUBLIC_BOOKING_TAG) == 1

    def test_taken_slot_raises_conflict(self, db, test_workspace, consultation, monday):
        service = PublicBookingService(db)
        service.submit(test_workspace.id, booking_request(consultation.id, at(monday, "10:00")))

        with pytest.raises(SlotConflictException):
            service.submit(
                test_workspace.id,
                booking_request(consultation.id, at(monday, "10:00"), email="late@example.com"),
            )

        assert db.query(Booking).count() == 1

    def test_inactive_type_is_rejected_before_creating_a_contact(
        self, db, test_workspace, monday
    ):
        retired = make_booking_type(db, test_workspace, is_active=False)

        with pytest.raises(ValidationException):
            PublicBookingService(db).submit(
                test_workspace.id, booking_request(retired.id, at(monday, "10:00"))
            )

        assert db.query(Contact).count() == 0

    def test_unknown_workspace_is_not_found(self, db, consultation, monday):
        with pytest.raises(NotFoundException):
            PublicBookingService(db).submit(
                "missing", booking_request(consultation.id, at(monday, "10:00"))
            )


class TestGetByReference:
    def test_lookup_is_case_insensitive(self, db, test_workspace, consultation, monday):
        service = PublicBookingService(db)
        confirmation = service.submit(
            test_workspace.id, booking_request(consultation.id, at(monday, "10:00"))
        )

        found = service.get_by_reference(test_workspace.id, confirmation.reference_code.lower())

        assert found.reference_code == confirmation.reference_code

    def test_reference_is_scoped_to_workspace(
        self, db, test_workspace, other_workspace, consultation, monday
    ):
        service = PublicBookingService(db)
        confirmation = service.submit(
            test_workspace.id, booking_request(consultation.id, at(monday, "10:00"))
        )

        with pytest.raises(NotFoundException):
            service.get_by_reference(other_workspace.id, confirmation.reference_code)


class TestCreateStaffBooking:
    def test_books_for_existing_contact(self, db, test_workspace, consultation, test_contact, monday):
        booking = PublicBookingService(db).create_staff_booking(
            test_workspace.id,
            StaffBookingCreate(
                booking_type_id=consultation.id,
                start_time=at(monday, "09:30"),
                contact_id=test_contact.id,
                notes="Walk-in follow-up",
            ),
            created_by="staff-1",
        )

        assert booking.contact_id == test_contact.id
        assert booking.status == BookingStatus.PENDING.value
        assert booking.notes == "Walk-in follow-up"
        assert booking.booking_metadata == {"source": STAFF_BOOKING_SOURCE, "created_by": "staff-1"}
        assert db.query(Contact).count() == 1

    def test_creates_contact_from_details(self, db, test_workspace, consultation, monday):
        booking = PublicBookingService(db).create_staff_booking(
            test_workspace.id,
            StaffBookingCreate(
                booking_type_id=consultation.id,
                start_time=at(monday, "09:30"),
                first_name="Grace",
                last_name="Hopper",
                phone="+15550199",
            ),
            created_by="staff-1",
        )

        contact = db.query(Contact).filter_by(id=booking.contact_id).one()
        assert contact.phone == "+15550199"
        assert contact.email is None
        assert contact.custom_fields == {"source": STAFF_BOOKING_SOURCE}

    def test_taken_slot_raises_conflict(
        self, db, test_workspace, consultation, test_contact, monday
    ):
        make_booking(db, consultation, test_contact, monday, "09:30")

        with pytest.raises(SlotConflictException):
            PublicBookingService(db).create_staff_booking(
                test_workspace.id,
                StaffBookingCreate(
                    booking_type_id=consultation.id,
                    start_time=at(monday, "09:30"),
                    contact_id=test_contact.id,
                ),
                created_by="staff-1",
            )

        assert db.query(Booking).count() == 1

    def test_contact_of_another_workspace_is_rejected(
        self, db, test_workspace, other_workspace, consultation, monday
    ):
        outsider = make_contact(db, other_workspace, email="outsider@example.com")

        with pytest.raises(ValidationException):
            PublicBookingService(db).create_staff_booking(
                test_workspace.id,
                StaffBookingCreate(
                    booking_type_id=consultation.id,
                    start_time=at(monday, "09:30"),
                    contact_id=outsider.id,
                ),
                created_by="staff-1",
            )

    def test_request_needs_a_contact(self, consultation, monday):
        with pytest.raises(ValueError):
            StaffBookingCreate(booking_type_id=consultation.id, start_time=at(monday, "09:30"))
