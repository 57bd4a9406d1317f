"""
Route tests for the public booking page API.

No authentication: the workspace id in the path scopes every call.
"""

from datetime import timedelta

from app.models.booking import BookingStatus
from app.models.contact import Contact
from tests.utils.booking_builders import at, iso_z
from tests.utils.factories import make_booking, make_booking_type

BASE = "/api/bookings/public"


def booking_payload(booking_type_id: str, start, **overrides) -> dict:
    payload = {
        "bookingTypeId": booking_type_id,
        "startTime": iso_z(start),
        "firstName": "Grace",
        "lastName": "Hopper",
        "email": "grace@example.com",
    }
    payload.update(overrides)
    return payload


class TestPublicBookingTypes:
    def test_lists_active_types_without_rules(self, client, db, test_workspace, consultation):
        make_booking_type(db, test_workspace, name="Retired", is_active=False)

        response = client.get(f"{BASE}/{test_workspace.id}/types")

        assert response.status_code == 200
        data = response.json()
        assert [bt["name"] for bt in data] == ["Consultation"]
        assert data[0]["duration"] == 30
        assert "availabilityRules" not in data[0]

    def test_unknown_workspace_returns_404(self, client):
        response = client.get(f"{BASE}/missing/types")

        assert response.status_code == 404


class TestPublicAvailability:
    def test_lists_four_free_slots(self, client, test_workspace, consultation, monday):
        response = client.get(
            f"{BASE}/{test_workspace.id}/availability",
            params={"bookingTypeId": consultation.id, "date": monday.isoformat()},
        )

        assert response.status_code == 200
        assert response.json() == [
            {"startTime": iso_z(at(monday, start)), "endTime": iso_z(at(monday, end)), "duration": 30}
            for start, end in [
                ("09:00", "09:30"),
                ("09:30", "10:00"),
                ("10:00", "10:30"),
                ("10:30", "11:00"),
            ]
        ]

    def test_confirmed_booking_hides_its_slot(
        self, client, db, test_workspace, consultation, test_contact, monday
    ):
        make_booking(db, consultation, test_contact, monday, "09:30")

        response = client.get(
            f"{BASE}/{test_workspace.id}/availability",
            params={"bookingTypeId": consultation.id, "date": monday.isoformat()},
        )

        starts = [slot["startTime"] for slot in response.json()]
        assert starts == [iso_z(at(monday, t)) for t in ("09:00", "10:00", "10:30")]

    def test_missing_booking_type_param_is_400(self, client, test_workspace, monday):
        response = client.get(
            f"{BASE}/{test_workspace.id}/availability", params={"date": monday.isoformat()}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    def test_malformed_date_is_400(self, client, test_workspace, consultation):
        response = client.get(
            f"{BASE}/{test_workspace.id}/availability",
            params={"bookingTypeId": consultation.id, "date": "next monday"},
        )

        assert response.status_code == 400

    def test_inactive_booking_type_is_400(self, client, db, test_workspace, monday):
        retired = make_booking_type(db, test_workspace, is_active=False)

        response = client.get(
            f"{BASE}/{test_workspace.id}/availability",
            params={"bookingTypeId": retired.id, "date": monday.isoformat()},
        )

        assert response.status_code == 400

    def test_available_dates(self, client, test_workspace, consultation, monday):
        response = client.get(
            f"{BASE}/{test_workspace.id}/available-dates",
            params={"bookingTypeId": consultation.id, "fromDate": monday.isoformat()},
        )

        assert response.status_code == 200
        data = response.json()
        assert data[0] == {"date": monday.isoformat(), "dayOfWeek": 1}
        assert data[1]["date"] == (monday + timedelta(days=7)).isoformat()


class TestCreatePublicBooking:
    def test_books_a_slot(self, client, db, test_workspace, consultation, monday):
        response = client.post(
            f"{BASE}/{test_workspace.id}", json=booking_payload(consultation.id, at(monday, "10:00"))
        )

        assert response.status_code == 201
        data = response.json()
        assert len(data["referenceCode"]) == 8
        assert data["status"] == BookingStatus.PENDING.value
        assert data["startTime"] == iso_z(at(monday, "10:00"))
        assert data["endTime"] == iso_z(at(monday, "10:30"))
        assert data["bookingType"] == {"name": "Consultation", "duration": 30, "location": "Room 101"}
        assert data["contact"] == {"name": "Grace Hopper", "email": "grace@example.com"}
        assert "id" not in data

    def test_second_request_for_same_slot_is_409(self, client, test_workspace, consultation, monday):
        first = client.post(
            f"{BASE}/{test_workspace.id}", json=booking_payload(consultation.id, at(monday, "10:00"))
        )
        second = client.post(
            f"{BASE}/{test_workspace.id}",
            json=booking_payload(consultation.id, at(monday, "10:00"), email="late@example.com"),
        )

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["code"] == "SLOT_CONFLICT"

    def test_slot_disappears_from_availability_after_booking(
        self, client, test_workspace, consultation, monday
    ):
        client.post(
            f"{BASE}/{test_workspace.id}", json=booking_payload(consultation.id, at(monday, "10:00"))
        )

        response = client.get(
            f"{BASE}/{test_workspace.id}/availability",
            params={"bookingTypeId": consultation.id, "date": monday.isoformat()},
        )

        assert iso_z(at(monday, "10:00")) not in [s["startTime"] for s in response.json()]

    def test_start_off_the_grid_is_400(self, client, test_workspace, consultation, monday):
        response = client.post(
            f"{BASE}/{test_workspace.id}", json=booking_payload(consultation.id, at(monday, "10:10"))
        )

        assert response.status_code == 400

    def test_missing_email_and_phone_is_400(self, client, db, test_workspace, consultation, monday):
        response = client.post(
            f"{BASE}/{test_workspace.id}",
            json=booking_payload(consultation.id, at(monday, "10:00"), email=""),
        )

        assert response.status_code == 400
        assert db.query(Contact).count() == 0

    def test_invalid_email_is_400(self, client, test_workspace, consultation, monday):
        response = client.post(
            f"{BASE}/{test_workspace.id}",
            json=booking_payload(consultation.id, at(monday, "10:00"), email="not-an-email"),
        )

        assert response.status_code == 400

    def test_unexpected_fields_are_rejected(self, client, test_workspace, consultation, monday):
        response = client.post(
            f"{BASE}/{test_workspace.id}",
            json=booking_payload(consultation.id, at(monday, "10:00"), status="CONFIRMED"),
        )

        assert response.status_code == 400

    def test_unknown_workspace_is_404(self, client, consultation, monday):
        response = client.post(
            f"{BASE}/missing", json=booking_payload(consultation.id, at(monday, "10:00"))
        )

        assert response.status_code == 404


class TestReferenceLookup:
    def test_finds_booking_by_reference(self, client, test_workspace, consultation, monday):
        created = client.post(
            f"{BASE}/{test_workspace.id}", json=booking_payload(consultation.id, at(monday, "10:00"))
        ).json()

        response = client.get(f"{BASE}/{test_workspace.id}/reference/{created['referenceCode']}")

        assert response.status_code == 200
        assert response.json()["startTime"] == created["startTime"]

    def test_unknown_reference_is_404(self, client, test_workspace):
        response = client.get(f"{BASE}/{test_workspace.id}/reference/ZZZZZZZZ")

        assert response.status_code == 404
        assert response.json()["detail"] == "Booking not found"
