import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import require_auth
from ..config import Settings, get_settings
from ..database import get_db
from ..security import authenticate_user, create_access_token, get_password_hash

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def split_name(data: schemas.UserCreate):
    """(first, last, full) preferring firstName/lastName over name"""
    parts = (data.name or "").split(" ")
    first_name = data.first_name or (parts[0] if data.name else "")
    last_name = data.last_name or (" ".join(parts[1:]) if data.name else "")
    full_name = data.name or f"{first_name} {last_name}".strip()
    return first_name or None, last_name or None, full_name


@router.post("/register", response_model=schemas.AuthResponse)
def register(
    user_data: schemas.UserCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Register a customer account"""
    if not user_data.email or not user_data.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email and password are required")

    if not user_data.first_name and not user_data.last_name and not user_data.name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="First name and last name are required"
        )

    if user_data.age_range and user_data.age_range not in models.AGE_RANGES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid age range")

    if user_data.gender and user_data.gender not in models.GENDERS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid gender")

    if db.query(models.User).filter(models.User.email == user_data.email).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

    first_name, last_name, full_name = split_name(user_data)
    user = crud.users.insert(
        db,
        email=user_data.email,
        password_hash=get_password_hash(user_data.password),
        name=full_name,
        first_name=first_name,
        last_name=last_name,
        phone=user_data.phone or None,
        gender=user_data.gender or None,
        age_range=user_data.age_range or None,
        role="user",
    )
    logger.info("Registered user %s", user.id)

    return {"user": user, "token": create_access_token(user, settings)}


@router.post("/login", response_model=schemas.AuthResponse)
def login(
    credentials: schemas.UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not credentials.email or not credentials.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email and password are required")

    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return {"user": user, "token": create_access_token(user, settings)}


@router.get("/me", response_model=schemas.MeResponse)
def me(claims: dict = Depends(require_auth), db: Session = Depends(get_db)):
    """Current user from the token"""
    user = crud.users.get(db, claims["id"])
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"user": user}
