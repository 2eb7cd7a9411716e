import os

os.environ.setdefault("USE_MOCK_DATA", "true")
os.environ.setdefault("PRICE_DEBOUNCE_SECONDS", "0")

from fastapi.testclient import TestClient  # noqa: E402

from tourdesk.app.config import get_settings  # noqa: E402
from tourdesk.app.main import app  # noqa: E402

import pytest  # noqa: E402


@pytest.fixture()
def client():
    get_settings.cache_clear()
    with TestClient(app) as c:
        yield c


def _hotel_row(**overrides):
    return {
        "start_date": "2024-01-01",
        "no_of_nights": 2,
        "hotel_id": 1,
        "location_id": 1,
        "meal_plan_id": 1,
        "room_type_id": 1,
        **overrides,
    }


def test_health_endpoint(client):
    response = client.get("/api/system/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["use_mock_data"] is True
    assert data["fence_stale_responses"] is True
    assert "hotel-prices" in data["resources"]


def test_login_me_and_logout(client):
    assert client.get("/api/auth/me").status_code == 401

    bad = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "x"})
    assert bad.status_code == 422
    assert "email" in bad.json()["detail"]["errors"]

    login = client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": "secret"}
    )
    assert login.status_code == 200
    assert login.json()["status"] == "AUTHENTICATED"

    me = client.get("/api/auth/me")
    assert me.json()["user"]["email"] == "admin@example.com"

    logout = client.post("/api/auth/logout")
    assert logout.json()["status"] == "UN_AUTHENTICATED"


def test_resource_listing_and_detail(client):
    response = client.get("/api/resources/hotels", params={"q": "mayfair"})
    assert response.status_code == 200
    body = response.json()
    assert [hotel["name"] for hotel in body["data"]] == ["Mayfair Spa Resort"]
    assert body["meta"]["total"] == 1
    assert body["meta"]["has_next"] is False

    detail = client.get("/api/resources/trips/1")
    assert detail.status_code == 200
    assert detail.json()["data"]["trip_id"] == "WEB-001"

    assert client.get("/api/resources/trips/99").status_code == 404
    assert client.get("/api/resources/unknown").status_code == 404
    assert client.get("/api/resources/meal-plans/1").status_code == 405


def test_listing_passes_filters_and_drops_blanks(client):
    response = client.get("/api/resources/hotel-prices?hotel_id=2&location_id=&page=1")
    assert response.status_code == 200
    body = response.json()
    assert [price["id"] for price in body["data"]] == [3]
    assert body["meta"]["current_page"] == 1

    entries = client.get("/api/system/activity", params={"action": "hotel-prices."}).json()
    assert entries[-1]["payload"] == {"hotel_id": "2", "page": 1}


def test_resource_create_and_validation(client):
    created = client.post(
        "/api/resources/cab-types", json={"name": "Tempo Traveller", "capacity": 12}
    )
    assert created.status_code == 200
    assert created.json()["data"]["capacity"] == 12

    invalid = client.post("/api/resources/cab-types", json={"capacity": 4})
    assert invalid.status_code == 422
    assert "name" in invalid.json()["detail"]["errors"]


def test_calculate_hotel_prices(client):
    response = client.post(
        "/api/prices/hotels",
        json={"rows": [_hotel_row(), _hotel_row(given_price=9000, edited_given_price=True)]},
    )
    assert response.status_code == 200
    body = response.json()
    assert [row["calculated_price"] for row in body["rows"]] == [10000, 10000]
    assert body["total"] == 19000
    assert len(body["items"]) == 2


def test_calculate_with_incomplete_row(client):
    response = client.post("/api/prices/cabs", json={"rows": [{"no_of_days": 2}]})
    assert response.status_code == 422
    errors = response.json()["detail"]["errors"]
    assert "cabs.0.start_date" in errors
    assert "cabs.0.cab_type_id" in errors


def test_add_and_list_hotel_prices(client):
    response = client.post(
        "/api/hotels/2/prices",
        json={
            "prices": [
                {
                    "intervals": [{"start_date": "2024-01-01", "end_date": "2024-01-03"}],
                    "base_price": 1000,
                    "location_ids": [2],
                    "meal_plan_ids": [1],
                    "room_type_ids": [2],
                }
            ]
        },
    )
    assert response.status_code == 200
    created = response.json()["data"][0]
    assert created["start_date"] == "2024-01-01 00:00:00"
    assert created["end_date"] == "2024-01-03 23:59:59"

    listing = client.get("/api/hotels/2/prices")
    assert created["id"] in [price["id"] for price in listing.json()["data"]]


def test_add_cab_prices(client):
    response = client.post(
        "/api/cab-prices",
        json={
            "prices": [
                {
                    "start_date": "2024-01-01",
                    "end_date": "2024-12-31",
                    "cab_type_id": 1,
                    "transport_service_id": 2,
                    "price": 1800,
                }
            ]
        },
    )
    assert response.status_code == 200
    assert response.json()["data"][0]["end_date"] == "2024-12-31 23:59:59"


def test_create_quote(client):
    response = client.post(
        "/api/trips/1/quotes",
        json={"hotels": [_hotel_row(given_price=9500, edited_given_price=True)], "comments": "Deal"},
    )
    assert response.status_code == 200
    quote = response.json()["data"]
    assert quote["total_price"] == 9500
    assert quote["hotels"][0]["calculated_price"] == 10000

    empty = client.post("/api/trips/1/quotes", json={"hotels": [], "cabs": []})
    assert empty.status_code == 422


def test_notifications_push_and_read(client):
    client.get("/api/resources/notifications")
    pushed = client.post(
        "/api/notifications/push",
        json={"id": 50, "type": "TripCreated", "data": "{\"trip_id\": 1}"},
    )
    assert pushed.status_code == 200
    assert pushed.json()["ids"][0] == 50
    assert pushed.json()["unread_count"] == 2

    read = client.post("/api/notifications/read", json={"ids": [50, 1, 999]})
    assert read.status_code == 200
    assert sorted(read.json()["read"]) == [1, 50]
    assert read.json()["unread_count"] == 0

    invalid = client.post("/api/notifications/push", json={"type": "NoId"})
    assert invalid.status_code == 422


def test_activity_log(client):
    client.get("/api/resources/hotels")
    entries = client.get("/api/system/activity", params={"limit": 1}).json()
    assert entries[-1]["action"] == "hotels.list"
    client.post("/api/resources/cab-types", json={"capacity": 4})
    errors = client.get("/api/system/activity", params={"errors_only": True}).json()
    assert [entry["action"] for entry in errors] == ["cab-types.create"]
    assert client.delete("/api/system/activity").json() == {"status": "cleared"}
    assert client.get("/api/system/activity").json() == []
