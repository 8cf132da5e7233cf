from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import require_admin
from ..database import get_db

router = APIRouter(prefix="/api/crazy-deals", tags=["Crazy Deals"])


@router.get("", response_model=List[schemas.CrazyDealResponse])
def list_active_deals(db: Session = Depends(get_db)):
    """Active, unexpired deals ending soonest first"""
    Deal = models.CrazyDeal
    return (
        db.query(Deal)
        .filter(Deal.active.is_(True), Deal.end_date > datetime.utcnow())
        .order_by(Deal.end_date)
        .all()
    )


@router.get("/all", response_model=List[schemas.CrazyDealResponse])
def list_all_deals(db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    return crud.crazy_deals.all(db, order_by=models.CrazyDeal.created_at.desc())


@router.post("", response_model=schemas.CrazyDealResponse)
def create_deal(deal: schemas.CrazyDealIn, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    if not deal.title or deal.end_date is None:
        raise HTTPException(status_code=400, detail="Title and end date are required")

    return crud.crazy_deals.insert(
        db,
        title=deal.title,
        subtitle=deal.subtitle or None,
        discount_percent=deal.discount_percent or None,
        end_date=deal.end_date,
        active=True if deal.active is None else deal.active,
    )


@router.put("/{deal_id}")
def update_deal(
    deal_id: int,
    deal: schemas.CrazyDealIn,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    row = crud.crazy_deals.get(db, deal_id)
    if not row:
        raise HTTPException(status_code=404, detail="Deal not found")
    crud.crazy_deals.update(db, row, **deal.model_dump(exclude_unset=True))
    return {"ok": True}


@router.delete("/{deal_id}")
def delete_deal(deal_id: int, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    crud.crazy_deals.remove(db, deal_id)
    return {"ok": True}
