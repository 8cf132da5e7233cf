from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import require_admin
from ..database import get_db

router = APIRouter(prefix="/api/calendar-deals", tags=["Calendar Deals"])


@router.get("", response_model=List[schemas.CalendarDealResponse])
def list_calendar_deals(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    """Active deals, optionally within a date range"""
    Deal = models.CalendarDeal
    query = db.query(Deal).filter(Deal.active.is_(True))
    if start_date:
        query = query.filter(Deal.deal_date >= start_date)
    if end_date:
        query = query.filter(Deal.deal_date <= end_date)
    return crud.rows_or_empty(db, query.order_by(Deal.deal_date), "calendar_deals")


@router.get("/all", response_model=List[schemas.CalendarDealResponse])
def list_all_calendar_deals(db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    query = db.query(models.CalendarDeal).order_by(models.CalendarDeal.deal_date)
    return crud.rows_or_empty(db, query, "calendar_deals")


@router.post("", response_model=schemas.CalendarDealResponse)
def save_calendar_deal(
    deal: schemas.CalendarDealIn,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """Create the deal for a day, or replace the one already there"""
    if deal.deal_date is None or not deal.deal_type:
        raise HTTPException(status_code=400, detail="Deal date and type are required")

    if deal.deal_type not in models.CALENDAR_DEAL_TYPES:
        raise HTTPException(status_code=400, detail="Invalid deal type")

    values = dict(
        deal_type=deal.deal_type,
        title=deal.title or None,
        description=deal.description or None,
        discount_percent=deal.discount_percent or None,
        active=True if deal.active is None else deal.active,
    )

    existing = db.query(models.CalendarDeal).filter(models.CalendarDeal.deal_date == deal.deal_date).first()
    if existing:
        return crud.calendar_deals.update(db, existing, **values)
    return crud.calendar_deals.insert(db, deal_date=deal.deal_date, **values)


@router.delete("/{deal_id}")
def delete_calendar_deal(deal_id: int, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    crud.calendar_deals.remove(db, deal_id)
    return {"success": True}
