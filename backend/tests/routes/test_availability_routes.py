"""
Tests for the availability endpoints.
"""

from datetime import timedelta


def test_guide_publishes_availability(client, guide, tour_date, auth_headers_guide):
    response = client.post(
        "/api/v1/availability",
        json={"date": tour_date.isoformat(), "start_time": "09:00", "end_time": "13:00"},
        headers=auth_headers_guide,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["guide_id"] == guide.id
    assert body["start_time"] == "09:00:00"


def test_overlap_conflict(client, tour_date, auth_headers_guide):
    client.post(
        "/api/v1/availability", json={"date": tour_date.isoformat()}, headers=auth_headers_guide
    )
    response = client.post(
        "/api/v1/availability",
        json={"date": tour_date.isoformat(), "start_time": "10:00", "end_time": "11:00"},
        headers=auth_headers_guide,
    )
    assert response.status_code == 409
    body = response.json()
    assert body["detail"] == "Overlapping availability slot exists!"
    assert body["errors"]["date"] == tour_date.isoformat()


def test_tourist_cannot_publish(client, tour_date, auth_headers_tourist):
    response = client.post(
        "/api/v1/availability", json={"date": tour_date.isoformat()}, headers=auth_headers_tourist
    )
    assert response.status_code == 403


def test_public_listing_by_guide_and_date(client, guide, other_guide, tour_date, make_slot):
    make_slot(guide, tour_date)
    make_slot(guide, tour_date + timedelta(days=1))
    make_slot(other_guide, tour_date)

    body = client.get(
        "/api/v1/availability", params={"guide_id": guide.id, "date": tour_date.isoformat()}
    ).json()
    assert body["total"] == 1
    assert body["items"][0]["date"] == tour_date.isoformat()


def test_update_and_delete_slot(client, guide, tour_date, make_slot, auth_headers_guide):
    slot = make_slot(guide, tour_date)
    updated = client.patch(
        f"/api/v1/availability/{slot.id}", json={"is_available": False}, headers=auth_headers_guide
    )
    assert updated.status_code == 200
    assert updated.json()["is_available"] is False

    deleted = client.delete(f"/api/v1/availability/{slot.id}", headers=auth_headers_guide)
    assert deleted.json()["message"] == "Availability slot deleted successfully!"


def test_other_guide_cannot_delete(client, guide, other_guide, tour_date, make_slot, auth_headers):
    slot = make_slot(guide, tour_date)
    response = client.delete(f"/api/v1/availability/{slot.id}", headers=auth_headers(other_guide))
    assert response.status_code == 403
