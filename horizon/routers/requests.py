import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import caller_id, get_optional_claims, is_admin_caller, require_admin, require_auth
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/requests", tags=["Requests"])


def load_request(db: Session, request_id: int) -> models.ServiceRequest:
    rows = crud.rows_or_empty(
        db, db.query(models.ServiceRequest).filter(models.ServiceRequest.id == request_id), "requests"
    )
    if not rows:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Request not found")
    return rows[0]


@router.get("", response_model=List[schemas.RequestResponse])
def list_requests(
    user_id: Optional[int] = Query(None, alias="userId"),
    request_type: Optional[str] = Query(None, alias="requestType"),
    request_status: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    claims: Optional[dict] = Depends(get_optional_claims),
    is_admin: bool = Depends(is_admin_caller),
):
    """Admins see every request, users only their own, anonymous callers nothing"""
    if not is_admin:
        if claims is None:
            return []
        if user_id is not None and user_id != claims["id"]:
            return []
        user_id = claims["id"]

    query = crud.requests_query(db, user_id=user_id, request_type=request_type, status=request_status)
    return crud.rows_or_empty(db, query, "requests")


@router.get("/{request_id}", response_model=schemas.RequestResponse)
def get_request(
    request_id: int,
    db: Session = Depends(get_db),
    claims: Optional[dict] = Depends(get_optional_claims),
    is_admin: bool = Depends(is_admin_caller),
):
    if not is_admin and claims is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    row = load_request(db, request_id)
    if not is_admin and row.user_id != claims["id"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return row


@router.post("", response_model=schemas.RequestResponse)
def create_request(
    body: schemas.RequestIn,
    db: Session = Depends(get_db),
    claims: Optional[dict] = Depends(get_optional_claims),
):
    if not body.request_type or not body.title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request type and title are required")

    user_id = caller_id(claims, body.user_id)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User ID required")

    return crud.requests.insert(
        db,
        user_id=user_id,
        request_type=body.request_type,
        title=body.title,
        description=body.description or None,
        status="pending",
        request_data=body.request_data or {},
    )


@router.put("/{request_id}", response_model=schemas.RequestResponse)
def update_request(
    request_id: int,
    body: schemas.RequestUpdate,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """Status, notes and payment fields in one go"""
    if body.status and body.status not in models.REQUEST_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")
    if body.payment_status is not None and body.payment_status not in models.PAYMENT_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payment status")

    row = load_request(db, request_id)
    changes = body.model_dump(exclude_unset=True)
    if not changes.get("status"):
        changes.pop("status", None)
    if "payment_status" in changes and changes["payment_status"] is None:
        del changes["payment_status"]

    confirming = (
        changes.get("payment_status") == "payment_confirmed"
        and row.payment_status != "payment_confirmed"
    )
    if confirming:
        changes["payment_confirmed_at"] = datetime.utcnow()
        changes["payment_confirmed_by"] = admin.get("id")
        logger.info("Request %s payment confirmed by %s", request_id, admin.get("id") or "admin key")

    return crud.requests.update(db, row, **changes)


@router.post("/{request_id}/payment-received", response_model=schemas.RequestResponse)
def mark_payment_received(
    request_id: int,
    db: Session = Depends(get_db),
    claims: dict = Depends(require_auth),
):
    """The owner reports that they have paid"""
    row = load_request(db, request_id)
    if row.user_id != claims["id"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return crud.requests.update(db, row, payment_status="payment_received")
