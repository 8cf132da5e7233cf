from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import require_admin
from ..database import get_db

router = APIRouter(prefix="/api/posts", tags=["Posts"])


@router.get("", response_model=List[schemas.PostResponse])
def list_posts(db: Session = Depends(get_db)):
    """Newest first"""
    return crud.posts.all(db, order_by=models.Post.id.desc())


@router.post("")
def create_post(post: schemas.PostIn, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    row = crud.posts.insert(db, **post.model_dump())
    return {"id": row.id}


@router.put("/{post_id}")
def update_post(
    post_id: int,
    post: schemas.PostIn,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    row = crud.posts.get(db, post_id)
    if not row:
        raise HTTPException(status_code=404, detail="Post not found")
    crud.posts.update(db, row, **post.model_dump(exclude_unset=True))
    return {"ok": True}


@router.delete("/{post_id}")
def delete_post(post_id: int, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    crud.posts.remove(db, post_id)
    return {"ok": True}
