# SQLAlchemy ORM models for users, property listings and bookings.
# Booking rules live in booking_rules.py; models only describe storage.
from sqlalchemy import Column, Integer, String, Text, ForeignKey, Date, DateTime, Index, JSON, Float, Boolean, func
from sqlalchemy.orm import declarative_mixin

from .db import Base

# Allowed booking states, in lifecycle order
BOOKING_STATUSES = ("Pending", "Confirmed", "Cancelled")


@declarative_mixin
class TimestampMixin:
    """Common UTC-aware timestamps automatically managed by the database.

    - created_at: set on insert
    - updated_at: set on insert and updated on each modification
    """
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class User(Base, TimestampMixin):
    """Guest or administrator account."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(50), nullable=False)
    email = Column(String(100), nullable=False, unique=True, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    dob = Column(Date, nullable=True)
    password_hash = Column(String(255), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)


class Property(Base):
    """Bookable tiny home listing.

    'availability' is informational only and is not checked against bookings.
    """
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    # ISO date strings
    availability = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    age_restriction = Column(Integer, nullable=False, default=18)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Booking(Base, TimestampMixin):
    """Stay reservation for a property.

    Status values: Pending (default) -> Confirmed | Cancelled.
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="Pending")

    # Overlap queries filter by property and date bounds
    __table_args__ = (
        Index("ix_bookings_property_start", "property_id", "start_date"),
        Index("ix_bookings_property_end", "property_id", "end_date"),
    )
