# Property API tests: public browsing, admin-only management and the unavailable-dates view.
from __future__ import annotations

from typing import Tuple

from fastapi.testclient import TestClient


def signup(client: TestClient, email: str, username: str) -> Tuple[str, dict]:
    r = client.post("/auth/signup", json={"username": username, "email": email, "password": "changeme123"})
    assert r.status_code == 201, r.text
    data = r.json()
    return data["access_token"], data["user"]


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


PROPERTY = {
    "name": "  Creekside Tiny Home ",
    "description": "A cosy tiny home by the creek",
    "price": 180.5,
    "availability": ["2024-09-01", "2024-09-02"],
    "images": ["https://res.cloudinary.com/demo/image/upload/creek.jpg"],
    "location": {"city": "Bathurst", "state": "NSW"},
}


def test_admin_creates_and_public_reads_property(client: TestClient):
    admin_token, _ = signup(client, "admin@example.com", "admin")
    r = client.post("/api/v1/properties", headers=auth_headers(admin_token), json=PROPERTY)
    assert r.status_code == 201, r.text
    prop = r.json()
    assert prop["name"] == "Creekside Tiny Home"
    assert prop["location"] == {"city": "Bathurst", "state": "NSW"}
    assert prop["availability"] == ["2024-09-01", "2024-09-02"]
    assert prop["age_restriction"] == 18

    r2 = client.get(f"/api/v1/properties/{prop['id']}")
    assert r2.status_code == 200
    assert r2.json()["price"] == 180.5

    r3 = client.get("/api/v1/properties")
    assert r3.status_code == 200
    assert [p["id"] for p in r3.json()] == [prop["id"]]


def test_regular_users_cannot_manage_properties(client: TestClient):
    guest_token, _ = signup(client, "guest@example.com", "guest")
    assert client.post("/api/v1/properties", json=PROPERTY).status_code == 401
    assert client.post("/api/v1/properties", headers=auth_headers(guest_token), json=PROPERTY).status_code == 403


def test_property_validation(client: TestClient):
    admin_token, _ = signup(client, "admin@example.com", "admin")
    bad = dict(PROPERTY, name="ab", price=-1)
    r = client.post("/api/v1/properties", headers=auth_headers(admin_token), json=bad)
    assert r.status_code == 400
    fields = {tuple(e["loc"])[-1] for e in r.json()["errors"]}
    assert {"name", "price"} <= fields


def test_update_and_delete_property(client: TestClient):
    admin_token, _ = signup(client, "admin@example.com", "admin")
    prop = client.post("/api/v1/properties", headers=auth_headers(admin_token), json=PROPERTY).json()

    r = client.put(
        f"/api/v1/properties/{prop['id']}",
        headers=auth_headers(admin_token),
        json={"price": 200, "location": {"city": "Orange", "state": "NSW"}},
    )
    assert r.status_code == 200, r.text
    updated = r.json()
    assert updated["price"] == 200
    assert updated["location"]["city"] == "Orange"
    assert updated["name"] == "Creekside Tiny Home"

    assert client.delete(f"/api/v1/properties/{prop['id']}", headers=auth_headers(admin_token)).status_code == 204
    assert client.get(f"/api/v1/properties/{prop['id']}").status_code == 404
    assert client.put("/api/v1/properties/999", headers=auth_headers(admin_token), json={"price": 1}).status_code == 404


def test_unavailable_dates_endpoint(client: TestClient):
    admin_token, _ = signup(client, "admin@example.com", "admin")
    guest_token, _ = signup(client, "guest@example.com", "guest")
    prop = client.post("/api/v1/properties", headers=auth_headers(admin_token), json=PROPERTY).json()

    r = client.post(
        "/api/v1/bookings",
        headers=auth_headers(guest_token),
        json={"property_id": prop["id"], "start_date": "2024-09-01", "end_date": "2024-09-05"},
    )
    assert r.status_code == 201, r.text

    r2 = client.get(f"/api/v1/properties/{prop['id']}/unavailable-dates")
    assert r2.status_code == 200
    assert r2.json() == {
        "property_id": prop["id"],
        "dates": ["2024-09-01", "2024-09-02", "2024-09-03", "2024-09-04", "2024-09-05"],
    }
    # Reading twice without writes gives the same answer
    assert client.get(f"/api/v1/properties/{prop['id']}/unavailable-dates").json() == r2.json()

    assert client.get("/api/v1/properties/999/unavailable-dates").status_code == 404


def test_property_with_bookings_cannot_be_deleted(client: TestClient):
    admin_token, _ = signup(client, "admin@example.com", "admin")
    guest_token, _ = signup(client, "guest@example.com", "guest")
    prop = client.post("/api/v1/properties", headers=auth_headers(admin_token), json=PROPERTY).json()
    r = client.post(
        "/api/v1/bookings",
        headers=auth_headers(guest_token),
        json={"property_id": prop["id"], "start_date": "2024-09-01", "end_date": "2024-09-05"},
    )
    assert r.status_code == 201, r.text

    r2 = client.delete(f"/api/v1/properties/{prop['id']}", headers=auth_headers(admin_token))
    assert r2.status_code == 400
    assert r2.json()["detail"] == "Property still has bookings"
    assert client.get(f"/api/v1/properties/{prop['id']}").status_code == 200

    # A new listing starts with a clean calendar
    fresh = client.post("/api/v1/properties", headers=auth_headers(admin_token), json=PROPERTY).json()
    r3 = client.get(f"/api/v1/properties/{fresh['id']}/unavailable-dates")
    assert r3.json()["dates"] == []
