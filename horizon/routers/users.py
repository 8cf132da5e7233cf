from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import require_admin
from ..database import get_db

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=List[schemas.UserResponse])
def list_users(db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    """All accounts, password hashes excluded"""
    return crud.users.all(db, order_by=models.User.id)
