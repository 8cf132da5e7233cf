from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import require_admin
from ..database import get_db

router = APIRouter(prefix="/api/affordable-destinations", tags=["Affordable Destinations"])

display_order = (models.AffordableDestination.display_order, models.AffordableDestination.id)


@router.get("", response_model=List[schemas.DestinationResponse])
def list_active_destinations(db: Session = Depends(get_db)):
    Destination = models.AffordableDestination
    return db.query(Destination).filter(Destination.active.is_(True)).order_by(*display_order).all()


@router.get("/all", response_model=List[schemas.DestinationResponse])
def list_all_destinations(db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    return db.query(models.AffordableDestination).order_by(*display_order).all()


@router.post("", response_model=schemas.DestinationResponse)
def create_destination(
    destination: schemas.DestinationIn,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    if not destination.country or not destination.city:
        raise HTTPException(status_code=400, detail="Country and city are required")

    return crud.destinations.insert(
        db,
        country=destination.country,
        city=destination.city,
        price=destination.price,
        display_order=destination.display_order or 0,
        active=True if destination.active is None else destination.active,
    )


@router.put("/{destination_id}")
def update_destination(
    destination_id: int,
    destination: schemas.DestinationIn,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    row = crud.destinations.get(db, destination_id)
    if not row:
        raise HTTPException(status_code=404, detail="Destination not found")
    crud.destinations.update(db, row, **destination.model_dump(exclude_unset=True))
    return {"ok": True}


@router.delete("/{destination_id}")
def delete_destination(
    destination_id: int,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    crud.destinations.remove(db, destination_id)
    return {"ok": True}
