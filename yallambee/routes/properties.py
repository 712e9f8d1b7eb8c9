# Property listing endpoints.
# Anyone can browse listings and their booked dates; only admins manage listings.
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import get_db
from .. import booking_rules, models, schemas
from .auth import require_admin

router = APIRouter()


def _get_property_or_404(db: Session, property_id: int) -> models.Property:
    obj = db.get(models.Property, property_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    return obj


def _columns(data: Dict[str, Any]) -> Dict[str, Any]:
    # Flatten the nested location and store dates as ISO strings in the JSON column
    values = dict(data)
    location = values.pop("location", None)
    if location is not None:
        values["city"] = location["city"]
        values["state"] = location["state"]
    if values.get("availability") is not None:
        values["availability"] = [d.isoformat() for d in values["availability"]]
    return values


@router.get("/properties", response_model=List[schemas.PropertyRead])
def list_properties(db: Session = Depends(get_db)) -> List[schemas.PropertyRead]:
    items = db.query(models.Property).order_by(models.Property.id.desc()).all()
    return [schemas.PropertyRead.from_model(p) for p in items]


@router.get("/properties/{property_id}", response_model=schemas.PropertyRead)
def get_property(property_id: int, db: Session = Depends(get_db)) -> schemas.PropertyRead:
    return schemas.PropertyRead.from_model(_get_property_or_404(db, property_id))


@router.post("/properties", response_model=schemas.PropertyRead, status_code=status.HTTP_201_CREATED)
def create_property(
    payload: schemas.PropertyCreate,
    db: Session = Depends(get_db),
    _: models.User = Depends(require_admin),
) -> schemas.PropertyRead:
    obj = models.Property(**_columns(payload.model_dump()))
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return schemas.PropertyRead.from_model(obj)


@router.put("/properties/{property_id}", response_model=schemas.PropertyRead)
def update_property(
    property_id: int,
    payload: schemas.PropertyUpdate,
    db: Session = Depends(get_db),
    _: models.User = Depends(require_admin),
) -> schemas.PropertyRead:
    """Update the provided fields of a listing; omitted fields keep their values."""
    obj = _get_property_or_404(db, property_id)
    for field, value in _columns(payload.model_dump(exclude_unset=True, exclude_none=True)).items():
        setattr(obj, field, value)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return schemas.PropertyRead.from_model(obj)


@router.delete("/properties/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(
    property_id: int,
    db: Session = Depends(get_db),
    _: models.User = Depends(require_admin),
) -> Response:
    obj = _get_property_or_404(db, property_id)
    try:
        db.delete(obj)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Property still has bookings")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/properties/{property_id}/unavailable-dates", response_model=schemas.UnavailableDatesResponse)
def get_unavailable_dates(property_id: int, db: Session = Depends(get_db)) -> schemas.UnavailableDatesResponse:
    """Every day covered by the property's bookings, start and end days included."""
    _get_property_or_404(db, property_id)
    return schemas.UnavailableDatesResponse(
        property_id=property_id,
        dates=booking_rules.unavailable_dates(db, property_id),
    )
