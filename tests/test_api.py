"""HTTP API tests."""

import json

from .conftest import ADMIN_HEADERS

BOOKING = {
    "name": "Omar",
    "phone": "0100 123-4567",
    "date": "2025-01-05",
    "time": "14:00",
    "duration": 60,
}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"database": True, "redis": None}


def test_public_config(client):
    response = client.get("/api/config")

    assert response.status_code == 200
    data = response.json()
    assert data["court_name"] == "Test court"
    assert data["allowed_durations"] == [30, 60, 90, 120]


def test_day_slots(client):
    response = client.get("/api/slots/2025-01-05")

    assert response.status_code == 200
    data = response.json()
    assert data["available"] is True
    assert data["slots"][0] == "08:00"
    assert len(data["all_slots"]) == 28


def test_book_and_see_slots_taken(client):
    response = client.post("/api/book", json=BOOKING)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    booking = body["booking"]
    assert booking["status"] == "pending"
    assert booking["phone"] == "01001234567"
    assert booking["total_price"] == 100
    assert booking["end_time"] == "15:00"
    assert booking["payment_info"] == {"instapay": "court@instapay"}
    assert len(booking["booking_number"]) == 8

    slots = client.get("/api/slots/2025-01-05").json()
    assert slots["booked_slots"] == ["14:00", "14:30"]


def test_book_taken_slot_returns_conflict(client):
    client.post("/api/book", json=BOOKING)

    response = client.post("/api/book", json={**BOOKING, "name": "Karim", "phone": "01111111111"})

    assert response.status_code == 409
    assert response.json()["success"] is False
    assert response.json()["code"] == "slot_booked"


def test_book_missing_name(client):
    response = client.post("/api/book", json={**BOOKING, "name": ""})

    assert response.status_code == 400
    assert response.json()["code"] == "missing_data"


def test_book_zero_duration(client):
    response = client.post("/api/book", json={**BOOKING, "duration": 0})

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_duration"
    assert client.get("/api/slots/2025-01-05").json()["booked_slots"] == []


def test_check_booking(client):
    number = client.post("/api/book", json=BOOKING).json()["booking"]["booking_number"]

    found = client.post("/api/check-booking", json={"booking_number": number, "name": "omar"})
    missing = client.post("/api/check-booking", json={"booking_number": number, "name": "Karim"})

    assert found.status_code == 200
    assert found.json()["bookings"][0]["booking_number"] == number
    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"


def test_admin_requires_token(client):
    assert client.get("/api/admin/bookings").status_code == 401
    assert client.get("/api/admin/bookings", headers={"X-Admin-Token": "wrong"}).status_code == 401


def test_admin_confirm_booking(client):
    number = client.post("/api/book", json=BOOKING).json()["booking"]["booking_number"]

    response = client.post(
        "/api/admin/confirm-booking",
        json={"booking_number": number, "action": "confirm"},
        headers=ADMIN_HEADERS,
    )
    again = client.post(
        "/api/admin/confirm-booking",
        json={"booking_number": number, "action": "decline"},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "confirmed"
    assert again.status_code == 409
    assert again.json()["code"] == "invalid_transition"


def test_admin_lists_rows_and_stats(client):
    client.post("/api/book", json=BOOKING)

    rows = client.get("/api/admin/bookings", params={"date": "2025-01-05"}, headers=ADMIN_HEADERS)
    stats = client.get("/api/admin/stats", headers=ADMIN_HEADERS)

    assert rows.status_code == 200
    assert [r["time"] for r in rows.json()] == ["14:00", "14:30"]
    assert stats.json()["pending"] == 2
    assert stats.json()["total_revenue"] == 0


def test_admin_delete_group(client):
    number = client.post("/api/book", json=BOOKING).json()["booking"]["booking_number"]

    response = client.delete(f"/api/admin/booking-group/{number}", headers=ADMIN_HEADERS)
    missing = client.get(f"/api/admin/bookings/{number}", headers=ADMIN_HEADERS)

    assert response.json()["deleted"] == 2
    assert missing.status_code == 404


def test_admin_config_update(client, config_store):
    response = client.put(
        "/api/admin/config", json={"price_per_hour": 120}, headers=ADMIN_HEADERS
    )

    assert response.status_code == 200
    assert client.get("/api/config").json()["price_per_hour"] == 120
    override = json.loads(config_store.override_path.read_text(encoding="utf-8"))
    assert override == {"price_per_hour": 120}


def test_admin_invalid_config_keeps_active_one(client, config_store):
    response = client.put(
        "/api/admin/config", json={"slot_duration_minutes": 45}, headers=ADMIN_HEADERS
    )

    assert response.status_code == 422
    assert response.json()["code"] == "configuration_error"
    assert config_store.current().slot_duration_minutes == 30
    assert not config_store.override_path.exists()


def test_admin_slots_invalidate_without_cache(client):
    response = client.post(
        "/api/admin/slots/invalidate",
        json={"date_start": "2025-01-05", "date_end": "2025-01-06"},
        headers=ADMIN_HEADERS,
    )

    assert response.json() == {"deleted_keys": 0, "dates": ["2025-01-05", "2025-01-06"]}


def test_check_booking_by_formatted_phone(client):
    number = client.post("/api/book", json=BOOKING).json()["booking"]["booking_number"]

    response = client.post(
        "/api/check-booking", json={"booking_number": "0100-123 4567", "name": "Omar"}
    )

    assert response.status_code == 200
    assert response.json()["bookings"][0]["booking_number"] == number
