from uuid import uuid4

import pytest

from backend.app.core import redis_client as redis_module


pytestmark = pytest.mark.asyncio


def booking_payload(room_type="Double", checkin="2024-07-01", checkout="2024-07-05", user_id="user-1"):
    return {
        "roomType": room_type,
        "checkinDate": checkin,
        "checkoutDate": checkout,
        "user": {
            "id": user_id,
            "name": "Test Guest",
            "email": "guest@example.com",
            "contactNumber": "+15550000",
        },
    }


async def test_health_endpoints(client, redis, monkeypatch):
    monkeypatch.setattr(redis_module, "redis_client", redis)

    health = await client.get("/api/v1/healthz")
    readiness = await client.get("/api/v1/readiness")

    assert health.status_code == 200
    assert health.json() == {"ok": True}
    assert readiness.status_code == 200
    assert readiness.json() == {"ready": True}


async def test_readiness_without_redis(client, monkeypatch):
    monkeypatch.setattr(redis_module, "redis_client", None)

    response = await client.get("/api/v1/readiness")

    assert response.status_code == 503


async def test_rooms_inventory(client):
    response = await client.get("/api/v1/rooms")

    assert response.status_code == 200, response.text
    rooms = response.json()
    assert len(rooms) == 8
    assert rooms[0] == {
        "number": 101,
        "type": {"id": 1, "name": "Single", "guestCapacity": 1, "price": "80.00"},
    }


async def test_available_room_types(client):
    response = await client.get(
        "/api/v1/reservations/roomTypes",
        params={"checkinDate": "2024-07-01", "checkoutDate": "2024-07-03", "guestCapacity": 2},
    )

    assert response.status_code == 200, response.text
    assert [rt["name"] for rt in response.json()] == ["Double", "Family", "Suite"]


async def test_available_room_types_rejects_bad_input(client):
    inverted = await client.get(
        "/api/v1/reservations/roomTypes",
        params={"checkinDate": "2024-07-03", "checkoutDate": "2024-07-01", "guestCapacity": 2},
    )
    zero = await client.get(
        "/api/v1/reservations/roomTypes",
        params={"checkinDate": "2024-07-01", "checkoutDate": "2024-07-03", "guestCapacity": 0},
    )
    missing = await client.get("/api/v1/reservations/roomTypes", params={"checkinDate": "2024-07-01"})

    assert inverted.status_code == 400
    assert inverted.json()["detail"]["code"] == "invalid_range"
    assert zero.status_code == 400
    assert zero.json()["detail"]["code"] == "invalid_capacity"
    assert missing.status_code == 422


async def test_available_rooms(client):
    response = await client.get(
        "/api/v1/reservations/rooms",
        params={"checkinDate": "2024-07-01", "checkoutDate": "2024-07-03", "roomType": "Single"},
    )

    assert response.status_code == 200, response.text
    assert [r["number"] for r in response.json()] == [101, 102, 103, 104]


async def test_reservation_round_trip(client):
    created = await client.post("/api/v1/reservations", json=booking_payload())
    assert created.status_code == 201, created.text
    body = created.json()
    assert body["room"] == 201
    assert body["checkinDate"] == "2024-07-01"
    assert body["checkoutDate"] == "2024-07-05"
    assert body["user"]["contactNumber"] == "+15550000"
    assert body["status"] == "active"
    reservation_id = body["id"]

    fetched = await client.get(f"/api/v1/reservations/{reservation_id}")
    assert fetched.status_code == 200
    assert fetched.json() == body

    listed = await client.get("/api/v1/reservations/users/user-1")
    assert [r["id"] for r in listed.json()] == [reservation_id]

    moved = await client.put(
        f"/api/v1/reservations/{reservation_id}",
        json={"checkinDate": "2024-07-02", "checkoutDate": "2024-07-06"},
    )
    assert moved.status_code == 200, moved.text
    assert moved.json()["checkinDate"] == "2024-07-02"
    assert moved.json()["room"] == 201

    cancelled = await client.delete(f"/api/v1/reservations/{reservation_id}")
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"


async def test_booking_errors(client):
    unknown = await client.post("/api/v1/reservations", json=booking_payload(room_type="Penthouse"))
    inverted = await client.post(
        "/api/v1/reservations", json=booking_payload(checkin="2024-07-05", checkout="2024-07-01")
    )
    first = await client.post("/api/v1/reservations", json=booking_payload(room_type="Suite"))
    taken = await client.post("/api/v1/reservations", json=booking_payload(room_type="Suite", user_id="user-2"))

    assert unknown.status_code == 404
    assert unknown.json()["detail"]["code"] == "unknown_room_type"
    assert inverted.status_code == 400
    assert first.status_code == 201
    assert taken.status_code == 404
    assert taken.json()["detail"]["code"] == "no_room_available"


async def test_busy_room_maps_to_conflict(client, redis):
    await redis.set("room-lock:401", "someone-else")

    response = await client.post("/api/v1/reservations", json=booking_payload(room_type="Suite"))

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "busy"


async def test_reschedule_and_cancel_unknown(client):
    missing = uuid4()

    moved = await client.put(
        f"/api/v1/reservations/{missing}",
        json={"checkinDate": "2024-07-02", "checkoutDate": "2024-07-06"},
    )
    cancelled = await client.delete(f"/api/v1/reservations/{missing}")
    malformed = await client.get("/api/v1/reservations/not-a-uuid")

    assert moved.status_code == 404
    assert cancelled.status_code == 404
    assert malformed.status_code == 422


async def test_reschedule_onto_taken_dates(client):
    first = (await client.post("/api/v1/reservations", json=booking_payload(room_type="Suite"))).json()
    await client.post(
        "/api/v1/reservations",
        json=booking_payload(room_type="Suite", checkin="2024-07-10", checkout="2024-07-12", user_id="user-2"),
    )

    response = await client.put(
        f"/api/v1/reservations/{first['id']}",
        json={"checkinDate": "2024-07-04", "checkoutDate": "2024-07-11"},
    )

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "no_room_available"


async def test_cors_headers_for_browser_clients(client):
    simple = await client.get("/api/v1/rooms", headers={"Origin": "https://frontdesk.example.com"})
    preflight = await client.options(
        "/api/v1/reservations",
        headers={
            "Origin": "https://frontdesk.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )

    assert simple.status_code == 200
    assert simple.headers["access-control-allow-origin"] == "*"
    assert preflight.status_code == 200
    assert "POST" in preflight.headers["access-control-allow-methods"]
