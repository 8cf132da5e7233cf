import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import caller_id, get_optional_claims, require_admin
from ..database import get_db, is_missing_table

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/testimonials", tags=["Testimonials"])

MIN_TEXT_LENGTH = 20

newest_first = (models.Testimonial.created_at.desc(), models.Testimonial.id.desc())


@router.get("", response_model=List[schemas.TestimonialResponse])
def list_approved(db: Session = Depends(get_db)):
    query = (
        db.query(models.Testimonial)
        .filter(models.Testimonial.status == "approved")
        .order_by(*newest_first)
    )
    return crud.rows_or_empty(db, query, "testimonials")


@router.post("")
def submit_testimonial(
    body: schemas.TestimonialIn,
    db: Session = Depends(get_db),
    claims: Optional[dict] = Depends(get_optional_claims),
):
    """Stored as pending until an admin approves it"""
    if not body.name or not body.text:
        raise HTTPException(status_code=400, detail="Name and testimonial text are required")
    if len(body.text) < MIN_TEXT_LENGTH:
        raise HTTPException(
            status_code=400, detail=f"Testimonial text must be at least {MIN_TEXT_LENGTH} characters"
        )

    try:
        row = crud.testimonials.insert(
            db,
            user_id=caller_id(claims, body.user_id),
            name=body.name.strip(),
            email=(body.email or "").strip() or None,
            location=(body.location or "").strip() or None,
            text=body.text.strip(),
            rating=body.rating or 5,
            status="pending",
        )
    except SQLAlchemyError as e:
        db.rollback()
        if is_missing_table(e):
            logger.warning("Testimonials table does not exist, submission rejected")
            raise HTTPException(
                status_code=500, detail="Testimonials feature not available. Please contact support."
            )
        raise

    return {"success": True, "testimonial": schemas.TestimonialResponse.model_validate(row)}


@router.get("/all", response_model=List[schemas.TestimonialResponse])
def list_all(
    testimonial_status: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    query = db.query(models.Testimonial)
    if testimonial_status:
        query = query.filter(models.Testimonial.status == testimonial_status)
    return crud.rows_or_empty(db, query.order_by(*newest_first), "testimonials")


@router.put("/{testimonial_id}", response_model=schemas.TestimonialResponse)
def moderate_testimonial(
    testimonial_id: int,
    body: schemas.TestimonialUpdate,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    if body.status and body.status not in models.TESTIMONIAL_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    row = crud.testimonials.get(db, testimonial_id)
    if not row:
        raise HTTPException(status_code=404, detail="Testimonial not found")

    changes = {"status": body.status or row.status}
    if "admin_notes" in body.model_fields_set:
        changes["admin_notes"] = body.admin_notes
    return crud.testimonials.update(db, row, **changes)


@router.delete("/{testimonial_id}")
def delete_testimonial(testimonial_id: int, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    crud.testimonials.remove(db, testimonial_id)
    return {"success": True}
