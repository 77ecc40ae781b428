"""
Tests for the Event Service endpoints.
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from .factories import event_payload


async def create_event(client: AsyncClient, **overrides) -> dict:
    response = await client.post("/events", json=event_payload(**overrides))
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_event(event_http: AsyncClient):
    response = await event_http.post("/events", json=event_payload(capacity=5))

    assert response.status_code == 201
    data = response.json()
    assert data["id"] == 1
    assert data["capacity"] == 5
    assert data["availableSeats"] == 5
    assert data["status"] == "DRAFT"
    assert data["category"] == "CONCERT"


@pytest.mark.asyncio
async def test_create_event_accepts_snake_case(event_http: AsyncClient):
    payload = event_payload()
    payload["start_date"] = payload.pop("startDate")
    payload["end_date"] = payload.pop("endDate")
    payload["base_price"] = payload.pop("basePrice")

    response = await event_http.post("/events", json=payload)

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_create_event_validation(event_http: AsyncClient):
    response = await event_http.post("/events", json=event_payload(capacity=0))

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == 400
    assert "capacity" in body["errors"]


@pytest.mark.asyncio
async def test_create_event_ending_before_start(event_http: AsyncClient):
    payload = event_payload(startDate="2030-01-01T10:00:00Z", endDate="2030-01-01T09:00:00Z")

    response = await event_http.post("/events", json=payload)

    assert response.status_code == 400
    assert response.json()["status"] == 400


@pytest.mark.asyncio
async def test_create_event_with_naive_and_aware_dates(event_http: AsyncClient):
    ends_early = event_payload(startDate="2030-01-01T10:00:00", endDate="2030-01-01T09:00:00Z")
    ends_later = event_payload(startDate="2030-01-01T10:00:00", endDate="2030-01-01T12:00:00Z")

    refused = await event_http.post("/events", json=ends_early)
    assert refused.status_code == 400
    assert refused.json()["status"] == 400

    assert (await event_http.post("/events", json=ends_later)).status_code == 201


@pytest.mark.asyncio
async def test_get_event(event_http: AsyncClient):
    created = await create_event(event_http)

    response = await event_http.get(f"/events/{created['id']}")

    assert response.status_code == 200
    assert response.json()["name"] == "Jazz Night"
    assert response.json()["availableSeats"] == 5


@pytest.mark.asyncio
async def test_get_unknown_event(event_http: AsyncClient):
    response = await event_http.get("/events/999")

    assert response.status_code == 404
    body = response.json()
    assert body["error"]["error_code"] == "NOT_FOUND"
    assert "error_id" in body


@pytest.mark.asyncio
async def test_list_and_filter_events(event_http: AsyncClient):
    first = await create_event(event_http, category="CONCERT")
    await create_event(event_http, name="Derby", category="SPORT")
    await event_http.patch(f"/events/{first['id']}/publish")

    assert len((await event_http.get("/events")).json()) == 2
    published = (await event_http.get("/events", params={"status": "PUBLISHED"})).json()
    assert [e["id"] for e in published] == [first["id"]]
    sport = (await event_http.get("/events", params={"category": "SPORT"})).json()
    assert [e["name"] for e in sport] == ["Derby"]


@pytest.mark.asyncio
async def test_list_events_by_category_path(event_http: AsyncClient):
    await create_event(event_http, category="CONCERT")
    await create_event(event_http, name="Derby", category="SPORT")

    response = await event_http.get("/events/category/SPORT")

    assert response.status_code == 200
    assert [e["name"] for e in response.json()] == ["Derby"]
    assert (await event_http.get("/events/category/OPERA")).status_code == 400


@pytest.mark.asyncio
async def test_available_events_are_published_with_seats(event_http: AsyncClient):
    published = await create_event(event_http, capacity=2)
    await create_event(event_http, name="Draft show")
    await event_http.patch(f"/events/{published['id']}/publish")
    sold_out = await create_event(event_http, name="Sold out", capacity=1)
    await event_http.patch(f"/events/{sold_out['id']}/publish")
    await event_http.post(f"/events/{sold_out['id']}/reserve", params={"numberOfSeats": 1})

    available = (await event_http.get("/events/available")).json()

    assert [e["id"] for e in available] == [published["id"]]


@pytest.mark.asyncio
async def test_search_events(event_http: AsyncClient):
    await create_event(event_http, name="Jazz Night")
    await create_event(event_http, name="Rock Gala", description="Loud guitars")

    results = (await event_http.get("/events/search", params={"keyword": "GUITAR"})).json()

    assert [e["name"] for e in results] == ["Rock Gala"]


@pytest.mark.asyncio
async def test_update_event(event_http: AsyncClient):
    created = await create_event(event_http)

    response = await event_http.put(f"/events/{created['id']}", json={"name": "Late Jazz Night"})

    assert response.status_code == 200
    assert response.json()["name"] == "Late Jazz Night"
    assert response.json()["capacity"] == created["capacity"]


@pytest.mark.asyncio
async def test_update_event_with_end_before_start(event_http: AsyncClient):
    created = await create_event(event_http)
    too_early = datetime.now(timezone.utc) + timedelta(days=1)

    response = await event_http.put(f"/events/{created['id']}", json={"endDate": too_early.isoformat()})

    assert response.status_code == 400
    assert response.json()["error"]["error_code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_publish_and_cancel_transitions(event_http: AsyncClient):
    created = await create_event(event_http)

    published = await event_http.patch(f"/events/{created['id']}/publish")
    assert published.status_code == 200
    assert published.json()["status"] == "PUBLISHED"

    again = await event_http.patch(f"/events/{created['id']}/publish")
    assert again.status_code == 409

    cancelled = await event_http.patch(f"/events/{created['id']}/cancel")
    assert cancelled.json()["status"] == "CANCELLED"
    assert (await event_http.patch(f"/events/{created['id']}/cancel")).status_code == 409


@pytest.mark.asyncio
async def test_delete_event(event_http: AsyncClient):
    created = await create_event(event_http)

    response = await event_http.delete(f"/events/{created['id']}")

    assert response.status_code == 204
    assert (await event_http.get(f"/events/{created['id']}")).status_code == 404
    assert (await event_http.delete(f"/events/{created['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_reserve_and_release_seats(event_http: AsyncClient):
    created = await create_event(event_http, capacity=5)
    event_id = created["id"]

    reserved = await event_http.post(f"/events/{event_id}/reserve", params={"numberOfSeats": 2, "reference": "r-1"})
    assert reserved.status_code == 200
    assert reserved.json() is True
    assert (await event_http.get(f"/events/{event_id}")).json()["availableSeats"] == 3

    released = await event_http.post(f"/events/{event_id}/release", params={"numberOfSeats": 2, "reference": "r-1"})
    assert released.status_code == 200
    assert released.content == b""
    assert (await event_http.get(f"/events/{event_id}")).json()["availableSeats"] == 5


@pytest.mark.asyncio
async def test_reserve_too_many_seats(event_http: AsyncClient):
    created = await create_event(event_http, capacity=1)

    response = await event_http.post(f"/events/{created['id']}/reserve", params={"numberOfSeats": 2})

    assert response.status_code == 200
    assert response.json() is False
    assert (await event_http.get(f"/events/{created['id']}")).json()["availableSeats"] == 1


@pytest.mark.asyncio
async def test_reserve_requires_positive_seat_count(event_http: AsyncClient):
    created = await create_event(event_http)

    response = await event_http.post(f"/events/{created['id']}/reserve", params={"numberOfSeats": 0})

    assert response.status_code == 400
    assert "numberOfSeats" in response.json()["errors"]


@pytest.mark.asyncio
async def test_reserve_and_release_unknown_event(event_http: AsyncClient):
    assert (await event_http.post("/events/999/reserve", params={"numberOfSeats": 1})).status_code == 404
    assert (await event_http.post("/events/999/release", params={"numberOfSeats": 1})).status_code == 404


@pytest.mark.asyncio
async def test_release_with_unknown_reference(event_http: AsyncClient):
    created = await create_event(event_http)

    response = await event_http.post(
        f"/events/{created['id']}/release", params={"numberOfSeats": 1, "reference": "missing"}
    )

    assert response.status_code == 409
    assert response.json()["error"]["error_code"] == "RESERVATION_MISMATCH"


@pytest.mark.asyncio
async def test_health(event_http: AsyncClient):
    response = await event_http.get("/events/health")

    assert response.status_code == 200
    assert response.text == "Event Service is running"
    assert response.headers["content-type"].startswith("text/plain")


@pytest.mark.asyncio
async def test_request_id_is_echoed(event_http: AsyncClient):
    response = await event_http.get("/events", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
