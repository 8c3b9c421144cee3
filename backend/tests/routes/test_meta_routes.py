"""
Tests for the dashboard endpoint and the service health check.
"""

from tourify.core.enums import BookingStatus


def test_dashboard_for_tourist(client, tourist, listing, tour_date, make_booking, auth_headers_tourist):
    make_booking(tourist, listing, tour_date, status=BookingStatus.CONFIRMED)
    response = client.get("/api/v1/meta/dashboard", headers=auth_headers_tourist)
    assert response.status_code == 200
    assert response.json() == {
        "role": "TOURIST",
        "total_bookings": 1,
        "completed_trips": 0,
        "upcoming_trips": 1,
        "total_spend": 0.0,
    }


def test_dashboard_for_guide(client, listing, auth_headers_guide):
    body = client.get("/api/v1/meta/dashboard", headers=auth_headers_guide).json()
    assert body["role"] == "GUIDE"
    assert body["total_listings"] == 1


def test_dashboard_for_admin(client, tourist, auth_headers_admin):
    body = client.get("/api/v1/meta/dashboard", headers=auth_headers_admin).json()
    assert body["role"] == "ADMIN"
    assert body["total_users"] == 2
    assert body["total_revenue"] == 0.0


def test_dashboard_requires_login(client):
    assert client.get("/api/v1/meta/dashboard").status_code == 401


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "tourify-api"
    assert body["timestamp"].endswith("Z")
