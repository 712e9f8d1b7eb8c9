# Sample-data loader tests.
from __future__ import annotations

from datetime import date

from fastapi.testclient import TestClient

from yallambee import booking_rules, models
from yallambee.seed import seed


def test_seed_loads_sample_data(db):
    counts = seed(db)
    assert counts == {"users": 3, "properties": 3, "bookings": 3}

    admin = db.query(models.User).filter(models.User.email == "admin@example.com").one()
    assert admin.is_admin is True
    statuses = sorted(b.status for b in db.query(models.Booking).all())
    assert statuses == ["Cancelled", "Confirmed", "Pending"]

    first = db.query(models.Property).filter(models.Property.name == "Off-Grid Getaway").one()
    assert booking_rules.unavailable_dates(db, first.id) == [date(2024, 9, 1), date(2024, 9, 2)]


def test_seed_replaces_previous_data(db):
    seed(db)
    seed(db)
    assert db.query(models.User).count() == 3
    assert db.query(models.Booking).count() == 3


def test_seeded_admin_can_log_in(db, client: TestClient):
    seed(db)
    r = client.post("/auth/login", json={"email": "admin@example.com", "password": "admin123"})
    assert r.status_code == 200, r.text
    assert r.json()["user"]["is_admin"] is True
