# Sample data for local development: three accounts (one admin), three listings and three bookings.
# Run with `python -m yallambee.seed`; existing users, properties and bookings are replaced.
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List

from sqlalchemy.orm import Session

from . import booking_rules, models
from .db import Base, SessionLocal, engine
from .routes.auth import hash_password

logger = logging.getLogger("yallambee.seed")

USERS: List[Dict] = [
    {
        "username": "johndoe",
        "email": "john.doe@example.com",
        "first_name": "John",
        "last_name": "Doe",
        "phone": "1234567890",
        "dob": date(1996, 5, 15),
        "password": "password",
    },
    {
        "username": "janesmith",
        "email": "jane.smith@example.com",
        "first_name": "Jane",
        "last_name": "Smith",
        "phone": "9876543210",
        "dob": date(1985, 10, 25),
        "password": "password",
    },
    {
        "username": "Admin",
        "email": "admin@example.com",
        "first_name": "Admin",
        "last_name": "User",
        "phone": "1234567890",
        "dob": date(1996, 5, 15),
        "password": "admin123",
        "is_admin": True,
    },
]

PROPERTIES: List[Dict] = [
    {
        "name": "Off-Grid Getaway",
        "description": "Peaceful off-grid tiny home set alongside the Bolong River and amongst the rolling hills of Golspie.",
        "price": 250.0,
        "city": "Yallambee",
        "state": "NSW",
    },
    {
        "name": "House Upon the Sand",
        "description": "1920s cabin with a front-row seat to the grandeur of the Hood Canal.",
        "price": 350.0,
        "city": "Golspie",
        "state": "NSW",
    },
    {
        "name": "Up Among the Treetops",
        "description": "Located in the heart of the forest, the perfect spot for a one-of-a-kind-getaway.",
        "price": 300.0,
        "city": "Crookwell",
        "state": "NSW",
    },
]

BOOKINGS: List[Dict] = [
    {"start_date": date(2024, 9, 1), "end_date": date(2024, 9, 2), "status": "Confirmed"},
    {"start_date": date(2024, 10, 1), "end_date": date(2024, 10, 3), "status": "Pending"},
    {"start_date": date(2024, 11, 15), "end_date": date(2024, 11, 20), "status": "Cancelled"},
]


def seed(db: Session) -> Dict[str, int]:
    """
    Replace all users, properties and bookings with the sample data.

    Bookings are spread across users and properties in turn and go through
    booking_rules.create_booking, so they obey the same date and overlap rules
    as API requests.
    """
    db.query(models.Booking).delete()
    db.query(models.Property).delete()
    db.query(models.User).delete()
    db.commit()
    logger.info("seed.cleared")

    users = []
    for data in USERS:
        fields = {k: v for k, v in data.items() if k != "password"}
        user = models.User(password_hash=hash_password(data["password"]), **fields)
        db.add(user)
        users.append(user)

    properties = []
    for data in PROPERTIES:
        prop = models.Property(
            availability=["2024-09-01", "2024-09-02"],
            images=[],
            age_restriction=18,
            **data,
        )
        db.add(prop)
        properties.append(prop)
    db.commit()
    logger.info("seed.added users=%s properties=%s", len(users), len(properties))

    for i, data in enumerate(BOOKINGS):
        booking_rules.create_booking(
            db,
            users[i % len(users)].id,
            properties[i % len(properties)].id,
            data["start_date"],
            data["end_date"],
            status=data["status"],
        )
    logger.info("seed.added bookings=%s", len(BOOKINGS))

    return {"users": len(users), "properties": len(properties), "bookings": len(BOOKINGS)}


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
    # Tables may not exist yet when migrations have not been run
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        counts = seed(db)
    finally:
        db.close()
    print(f"Seed complete: {counts['users']} users, {counts['properties']} properties, {counts['bookings']} bookings")


if __name__ == "__main__":
    main()
