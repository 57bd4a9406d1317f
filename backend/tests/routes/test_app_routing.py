"""The application mounts every booking router under /api/bookings."""

from fastapi.routing import APIRoute

from app.main import API_PREFIX, app


def registered(method: str) -> set:
    return {
        route.path
        for route in app.routes
        if isinstance(route, APIRoute) and method in route.methods
    }


class TestAppRouting:
    def test_collection_routes_are_mounted_on_the_prefix(self):
        assert API_PREFIX == "/api/bookings"
        assert "/api/bookings" in registered("GET")
        assert "/api/bookings" in registered("POST")
        assert "/api/bookings/types" in registered("GET")
        assert "/api/bookings/types" in registered("POST")
        assert "/api/bookings/public/{workspace_id}" in registered("POST")
        assert "/api/bookings/{booking_id}/status" in registered("PATCH")

    def test_static_paths_resolve_before_booking_id(self):
        paths = [route.path for route in app.routes if isinstance(route, APIRoute)]

        assert paths.index("/api/bookings/types") < paths.index("/api/bookings/{booking_id}")
        assert paths.index("/api/bookings/upcoming") < paths.index("/api/bookings/{booking_id}")

    def test_list_bookings_answers(self, client, staff_headers):
        response = client.get("/api/bookings", headers=staff_headers)

        assert response.status_code == 200
        assert response.json() == []
