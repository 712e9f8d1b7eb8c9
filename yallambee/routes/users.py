# User account endpoints.
# Admins manage every account; regular users can read and edit only their own.
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import get_db
from .. import models, schemas
from .auth import ensure_self_or_admin, get_current_user, hash_password, require_admin

router = APIRouter()


def _get_user_or_404(db: Session, user_id: int) -> models.User:
    obj = db.get(models.User, user_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return obj


@router.get("/users", response_model=List[schemas.UserRead])
def list_users(db: Session = Depends(get_db), _: models.User = Depends(require_admin)) -> List[models.User]:
    return db.query(models.User).order_by(models.User.id.asc()).all()


@router.get("/users/{user_id}", response_model=schemas.UserRead)
def get_user(user_id: int, db: Session = Depends(get_db), user: models.User = Depends(get_current_user)) -> models.User:
    ensure_self_or_admin(user, user_id)
    return _get_user_or_404(db, user_id)


@router.put("/users/{user_id}", response_model=schemas.UserRead)
def update_user(
    user_id: int,
    payload: schemas.UserUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> models.User:
    """
    Update profile fields of an account.

    Only provided fields change. A new password is re-hashed; 'is_admin' may
    only be changed by an admin.
    """
    ensure_self_or_admin(user, user_id)
    obj = _get_user_or_404(db, user_id)

    changes = payload.model_dump(exclude_unset=True)
    if "is_admin" in changes and not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can change admin rights")
    if changes.get("email") and changes["email"] != obj.email:
        taken = db.query(models.User.id).filter(models.User.email == changes["email"]).first()
        if taken:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is already registered")

    password = changes.pop("password", None)
    if password:
        obj.password_hash = hash_password(password)
    for field, value in changes.items():
        if value is None and field in ("username", "email", "is_admin"):
            continue
        setattr(obj, field, value)

    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, db: Session = Depends(get_db), _: models.User = Depends(require_admin)) -> Response:
    obj = _get_user_or_404(db, user_id)
    try:
        db.delete(obj)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User still has bookings")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users/{user_id}/bookings", response_model=List[schemas.BookingRead])
def list_user_bookings(
    user_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> List[models.Booking]:
    ensure_self_or_admin(user, user_id)
    items = (
        db.query(models.Booking)
        .filter(models.Booking.user_id == user_id)
        .order_by(models.Booking.start_date.asc(), models.Booking.id.asc())
        .all()
    )
    if not items:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No bookings found for this user")
    return items
