# Booking endpoints: create, read, replace, patch, delete and list bookings.
# Date and overlap rules live in booking_rules; this layer handles gates, HTTP errors and emails.
from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from ..db import get_db
from .. import booking_rules, models, notifications, schemas
from ..errors import BookingError, BusyError, ConflictError, InvalidRangeError, NotFoundError, ValidationError
from .auth import ensure_self_or_admin, get_current_user, require_admin

router = APIRouter()
logger = logging.getLogger("yallambee.bookings")

_STATUS_BY_ERROR = (
    (InvalidRangeError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (BusyError, status.HTTP_429_TOO_MANY_REQUESTS),
)


def _to_http(exc: BookingError) -> HTTPException:
    for kind, code in _STATUS_BY_ERROR:
        if isinstance(exc, kind):
            if kind is BusyError:
                return HTTPException(status_code=code, detail={"error": "busy", "retry_after": 1})
            return HTTPException(status_code=code, detail=exc.message)
    # Internal details are logged by booking_rules; the client gets a generic message
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unexpected error, please try again later")


def _get_booking_for(db: Session, booking_id: int, user: models.User) -> models.Booking:
    obj = db.get(models.Booking, booking_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    ensure_self_or_admin(user, obj.user_id)
    return obj


def _notify(background_tasks: BackgroundTasks, db: Session, booking: models.Booking, template: str) -> None:
    # Emails go to the booking owner, who may differ from the caller when an admin edits
    owner = db.get(models.User, booking.user_id)
    if owner is None:
        logger.warning("booking.notify_skipped id=%s (owner missing)", booking.id)
        return
    background_tasks.add_task(
        notifications.send_template, owner.email, template, notifications.booking_context(owner, booking)
    )


def _apply_update(
    db: Session,
    background_tasks: BackgroundTasks,
    obj: models.Booking,
    patch: Dict[str, Any],
) -> models.Booking:
    was_confirmed = obj.status == "Confirmed"
    try:
        updated = booking_rules.update_booking(db, obj.id, patch)
    except BookingError as exc:
        raise _to_http(exc) from exc

    template = "booking_updated"
    if updated.status == "Confirmed" and not was_confirmed:
        template = "booking_confirmation"
    _notify(background_tasks, db, updated, template)
    return updated


@router.get("/bookings", response_model=List[schemas.BookingRead])
def list_bookings(db: Session = Depends(get_db), _: models.User = Depends(require_admin)) -> List[models.Booking]:
    return db.query(models.Booking).order_by(models.Booking.start_date.asc(), models.Booking.id.asc()).all()


@router.get("/bookings/me", response_model=List[schemas.BookingRead])
def list_my_bookings(db: Session = Depends(get_db), user: models.User = Depends(get_current_user)) -> List[models.Booking]:
    return (
        db.query(models.Booking)
        .filter(models.Booking.user_id == user.id)
        .order_by(models.Booking.start_date.desc(), models.Booking.id.desc())
        .all()
    )


@router.get("/bookings/{booking_id}", response_model=schemas.BookingRead)
def get_booking(booking_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_current_user)) -> models.Booking:
    return _get_booking_for(db, booking_id, user)


@router.post("/bookings", response_model=schemas.BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: schemas.BookingCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> models.Booking:
    """
    Book a property for the authenticated user.

    400 when the stay is shorter than a day or overlaps an existing booking,
    404 when the property does not exist. The owner is emailed in the background.
    """
    try:
        obj = booking_rules.create_booking(
            db,
            owner_user_id=user.id,
            property_id=payload.property_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            status=payload.status,
        )
    except BookingError as exc:
        raise _to_http(exc) from exc

    _notify(background_tasks, db, obj, "booking_received")
    return obj


@router.put("/bookings/{booking_id}", response_model=schemas.BookingRead)
def replace_booking(
    booking_id: int,
    payload: schemas.BookingReplace,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> models.Booking:
    obj = _get_booking_for(db, booking_id, user)
    return _apply_update(db, background_tasks, obj, payload.model_dump())


@router.patch("/bookings/{booking_id}", response_model=schemas.BookingRead)
def patch_booking(
    booking_id: int,
    payload: schemas.BookingPatch,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> models.Booking:
    obj = _get_booking_for(db, booking_id, user)
    return _apply_update(db, background_tasks, obj, payload.model_dump(exclude_unset=True, exclude_none=True))


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(booking_id: int, db: Session = Depends(get_db), _: models.User = Depends(require_admin)) -> Response:
    try:
        booking_rules.delete_booking(db, booking_id)
    except BookingError as exc:
        raise _to_http(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
