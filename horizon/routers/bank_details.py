from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import require_admin
from ..database import get_db

router = APIRouter(prefix="/api/bank-details", tags=["Bank Details"])

REQUIRED_FIELDS = ("bank_name", "account_name", "account_number")


@router.get("", response_model=List[schemas.BankDetailResponse])
def list_active(db: Session = Depends(get_db)):
    """Public payment instructions"""
    query = (
        db.query(models.BankDetail)
        .filter(models.BankDetail.active.is_(True))
        .order_by(models.BankDetail.id)
    )
    return crud.rows_or_empty(db, query, "bank_details")


@router.post("", response_model=schemas.BankDetailResponse)
def create_bank_detail(
    body: schemas.BankDetailIn,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    if not all(getattr(body, field) for field in REQUIRED_FIELDS):
        raise HTTPException(
            status_code=400, detail="Bank name, account name, and account number are required"
        )

    values = body.model_dump()
    values["currency"] = body.currency or "USD"
    values["active"] = True if body.active is None else body.active
    return crud.bank_details.insert(db, **values)


@router.put("/{detail_id}", response_model=schemas.BankDetailResponse)
def update_bank_detail(
    detail_id: int,
    body: schemas.BankDetailIn,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    row = crud.bank_details.get(db, detail_id)
    if not row:
        raise HTTPException(status_code=404, detail="Bank detail not found")

    changes = body.model_dump(exclude_unset=True)
    # Required columns and currency can't be blanked
    for field in REQUIRED_FIELDS + ("currency", "active"):
        if field in changes and not changes[field] and changes[field] is not False:
            del changes[field]
    return crud.bank_details.update(db, row, **changes)
