import math
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import require_auth
from ..database import get_db

router = APIRouter(prefix="/api/form-drafts", tags=["Form Drafts"])


def calculate_form_progress(form_data) -> int:
    """Share of fields that are filled in, as a whole percentage"""
    if not isinstance(form_data, dict) or not form_data:
        return 0
    filled = sum(1 for value in form_data.values() if value is not None and value != "")
    # Round half up
    return int(math.floor(filled * 100 / len(form_data) + 0.5))


def is_admin(claims: dict) -> bool:
    return claims.get("role") == "admin"


def load_draft(db: Session, draft_id: int, claims: dict) -> models.FormDraft:
    draft = crud.form_drafts.get(db, draft_id)
    if not draft:
        raise HTTPException(status_code=404, detail="Form draft not found")
    if not is_admin(claims) and draft.user_id != claims["id"]:
        raise HTTPException(status_code=403, detail="Access denied")
    return draft


@router.get("", response_model=List[schemas.FormDraftResponse])
def list_drafts(
    user_id: Optional[int] = Query(None, alias="userId"),
    form_type: Optional[str] = Query(None, alias="formType"),
    draft_status: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    claims: dict = Depends(require_auth),
):
    """Most recently saved first"""
    Draft = models.FormDraft
    if not is_admin(claims):
        if user_id is not None and user_id != claims["id"]:
            return []
        user_id = claims["id"]

    query = db.query(Draft)
    if user_id is not None:
        query = query.filter(Draft.user_id == user_id)
    if form_type:
        query = query.filter(Draft.form_type == form_type)
    if draft_status:
        query = query.filter(Draft.status == draft_status)
    return query.order_by(Draft.last_saved_at.desc(), Draft.id.desc()).all()


@router.get("/{draft_id}", response_model=schemas.FormDraftResponse)
def get_draft(draft_id: int, db: Session = Depends(get_db), claims: dict = Depends(require_auth)):
    return load_draft(db, draft_id, claims)


@router.post("", response_model=schemas.FormDraftResponse)
def save_draft(body: schemas.FormDraftIn, db: Session = Depends(get_db), claims: dict = Depends(require_auth)):
    """Create the caller's draft for a form type, or overwrite the open one"""
    if not body.form_type or body.form_data is None:
        raise HTTPException(status_code=400, detail="Form type and data are required")

    owner_id = claims["id"]
    if is_admin(claims) and body.user_id is not None:
        owner_id = body.user_id

    progress = body.progress_percent
    if progress is None:
        progress = calculate_form_progress(body.form_data)

    Draft = models.FormDraft
    existing = (
        db.query(Draft)
        .filter(Draft.user_id == owner_id, Draft.form_type == body.form_type, Draft.status == "draft")
        .order_by(Draft.id.desc())
        .first()
    )
    values = dict(form_data=body.form_data, progress_percent=progress, last_saved_at=datetime.utcnow())
    if existing:
        return crud.form_drafts.update(db, existing, **values)
    return crud.form_drafts.insert(db, user_id=owner_id, form_type=body.form_type, status="draft", **values)


@router.put("/{draft_id}", response_model=schemas.FormDraftResponse)
def update_draft(
    draft_id: int,
    body: schemas.FormDraftUpdate,
    db: Session = Depends(get_db),
    claims: dict = Depends(require_auth),
):
    if body.status and body.status not in models.FORM_DRAFT_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    draft = load_draft(db, draft_id, claims)
    form_data = body.form_data if body.form_data is not None else draft.form_data
    progress = body.progress_percent
    if progress is None:
        progress = calculate_form_progress(form_data)

    return crud.form_drafts.update(
        db,
        draft,
        form_data=form_data,
        progress_percent=progress,
        status=body.status or draft.status,
        last_saved_at=datetime.utcnow(),
    )


@router.delete("/{draft_id}")
def delete_draft(draft_id: int, db: Session = Depends(get_db), claims: dict = Depends(require_auth)):
    load_draft(db, draft_id, claims)
    crud.form_drafts.remove(db, draft_id)
    return {"success": True}
