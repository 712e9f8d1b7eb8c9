# Booking validation and conflict detection.
# Framework-free: raises errors.BookingError subclasses; routers translate them to HTTP responses.
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .config import cancelled_bookings_block
from .db import is_sqlite
from .errors import BookingError, BusyError, ConflictError, InvalidRangeError, NotFoundError, UnexpectedError, ValidationError
from .locks import property_guard

logger = logging.getLogger("yallambee.bookings")

MIN_STAY = timedelta(days=1)

# Fields a caller may change on an existing booking; user_id is fixed at creation
EDITABLE_FIELDS = ("property_id", "start_date", "end_date", "status")
# Touching any of these requires re-running the date and conflict checks
SCHEDULE_FIELDS = ("property_id", "start_date", "end_date")


def validate_date_range(start_date: date, end_date: date) -> None:
    """Raise InvalidRangeError unless the stay lasts at least one full day."""
    if end_date - start_date < MIN_STAY:
        raise InvalidRangeError()


def _blocking_bookings(db: Session, property_id: int):
    q = db.query(models.Booking).filter(models.Booking.property_id == property_id)
    if not cancelled_bookings_block():
        q = q.filter(models.Booking.status != "Cancelled")
    return q


def check_conflict(
    db: Session,
    property_id: int,
    start_date: date,
    end_date: date,
    exclude_booking_id: Optional[int] = None,
) -> None:
    """
    Raise ConflictError if another booking of the property overlaps [start_date, end_date].

    Overlap: existing.start_date < end_date AND existing.end_date > start_date,
    so a stay ending on the day another begins does not conflict.
    """
    q = _blocking_bookings(db, property_id).filter(
        models.Booking.start_date < end_date,
        models.Booking.end_date > start_date,
    )
    if exclude_booking_id is not None:
        q = q.filter(models.Booking.id != exclude_booking_id)
    clash = q.with_entities(models.Booking.id).first()
    if clash is not None:
        logger.info(
            "booking.conflict property_id=%s start=%s end=%s existing_id=%s",
            property_id, start_date, end_date, clash[0],
        )
        raise ConflictError()


def _ensure_property(db: Session, property_id: int) -> models.Property:
    prop = db.get(models.Property, property_id)
    if prop is None:
        raise NotFoundError("Property not found")
    return prop


def _lock_property_row(db: Session, property_id: int) -> None:
    # Row lock on the property for server databases; SQLite relies on the process-level guard
    if not is_sqlite():
        db.query(models.Property).filter(models.Property.id == property_id).with_for_update().first()


def run_checks(checks: Sequence[Callable[[], None]]) -> None:
    """Run booking checks in order; the first one to raise stops the pipeline."""
    for check in checks:
        check()


def _commit_under_guard(db: Session, property_id: int, checks: Sequence[Callable[[], None]], write: Callable[[], models.Booking]) -> models.Booking:
    with property_guard(property_id) as locked:
        if not locked:
            raise BusyError()
        try:
            _lock_property_row(db, property_id)
            run_checks(checks)
            obj = write()
            db.commit()
            db.refresh(obj)
            return obj
        except BookingError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("booking.write_failed property_id=%s", property_id)
            raise UnexpectedError("Failed to save booking") from exc


def create_booking(
    db: Session,
    owner_user_id: int,
    property_id: int,
    start_date: date,
    end_date: date,
    status: Optional[str] = None,
) -> models.Booking:
    """
    Validate and persist a new booking.

    Checks, in order: date range, property existence, overlap. The overlap
    check and the insert run under the property's write guard, so concurrent
    requests for the same property cannot both pass the check.
    """
    validate_date_range(start_date, end_date)

    def _insert() -> models.Booking:
        obj = models.Booking(
            user_id=owner_user_id,
            property_id=property_id,
            start_date=start_date,
            end_date=end_date,
            status=status or "Pending",
        )
        db.add(obj)
        return obj

    obj = _commit_under_guard(
        db,
        property_id,
        [
            lambda: _ensure_property(db, property_id),
            lambda: check_conflict(db, property_id, start_date, end_date),
        ],
        _insert,
    )
    logger.info("booking.created id=%s property_id=%s user_id=%s", obj.id, obj.property_id, obj.user_id)
    return obj


def update_booking(db: Session, booking_id: int, patch: Mapping[str, Any]) -> models.Booking:
    """
    Apply a partial update to a booking.

    `patch` may hold any of property_id, start_date, end_date and status. When
    the schedule changes, or a non-blocking cancelled booking becomes active
    again, the merged values are re-checked with the booking itself excluded
    from the overlap check.
    """
    unknown = set(patch) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
    if "status" in patch and patch["status"] not in models.BOOKING_STATUSES:
        raise ValidationError("Invalid booking status")

    obj = db.get(models.Booking, booking_id)
    if obj is None:
        raise NotFoundError("Booking not found")

    merged: Dict[str, Any] = {field: getattr(obj, field) for field in EDITABLE_FIELDS}
    merged.update(patch)

    def _apply() -> models.Booking:
        for field, value in patch.items():
            setattr(obj, field, value)
        db.add(obj)
        return obj

    schedule_changed = any(field in patch for field in SCHEDULE_FIELDS)
    # A cancelled booking that stopped blocking must win its dates back before going live
    reactivated = (
        obj.status == "Cancelled"
        and merged["status"] != "Cancelled"
        and not cancelled_bookings_block()
    )

    checks: List[Callable[[], None]] = []
    if schedule_changed:
        validate_date_range(merged["start_date"], merged["end_date"])
        if merged["property_id"] != obj.property_id:
            checks.append(lambda: _ensure_property(db, merged["property_id"]))
    if schedule_changed or reactivated:
        checks.append(
            lambda: check_conflict(
                db,
                merged["property_id"],
                merged["start_date"],
                merged["end_date"],
                exclude_booking_id=obj.id,
            )
        )

    obj = _commit_under_guard(db, merged["property_id"], checks, _apply)
    logger.info("booking.updated id=%s fields=%s", obj.id, ",".join(sorted(patch)))
    return obj


def delete_booking(db: Session, booking_id: int) -> None:
    obj = db.get(models.Booking, booking_id)
    if obj is None:
        raise NotFoundError("Booking not found")
    try:
        db.delete(obj)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("booking.delete_failed id=%s", booking_id)
        raise UnexpectedError("Failed to delete booking") from exc
    logger.info("booking.deleted id=%s", booking_id)


def unavailable_dates(db: Session, property_id: int) -> List[date]:
    """
    Every calendar day covered by the property's bookings.

    Each booking contributes start_date through end_date inclusive, in booking
    order (start_date, id). Days shared by adjacent bookings appear once per
    booking; the list is not de-duplicated.
    """
    bookings = (
        _blocking_bookings(db, property_id)
        .order_by(models.Booking.start_date.asc(), models.Booking.id.asc())
        .all()
    )
    days: List[date] = []
    for b in bookings:
        day = b.start_date
        while day <= b.end_date:
            days.append(day)
            day += timedelta(days=1)
    return days
