from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import require_admin
from ..database import get_db

router = APIRouter(prefix="/api/packages", tags=["Packages"])


def package_images(images: Optional[List[str]], img: Optional[str]) -> List[str]:
    """Image list from the request, falling back to the legacy single img"""
    if images:
        return [i for i in images if i and i.strip()]
    if img and img.strip():
        return [img]
    return []


def to_response(row: models.Package) -> schemas.PackageResponse:
    images = list(row.images or [])
    if not images and row.img:
        images = [row.img]
    return schemas.PackageResponse(
        id=row.id,
        code=row.code,
        title=row.title,
        nights=row.nights,
        price=row.price,
        trip_details=row.trip_details,
        img=images[0] if images else row.img,
        images=images,
        created_at=row.created_at,
    )


@router.get("", response_model=List[schemas.PackageResponse])
def list_packages(db: Session = Depends(get_db)):
    return [to_response(row) for row in crud.packages.all(db, order_by=models.Package.id)]


@router.post("")
def create_package(
    package: schemas.PackageIn,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    images = package_images(package.images, package.img)
    if not images:
        raise HTTPException(status_code=400, detail="At least 1 image is required")

    row = crud.packages.insert(
        db,
        code=package.code,
        title=package.title,
        nights=package.nights,
        price=package.price,
        trip_details=package.trip_details,
        img=images[0],
        images=images,
    )
    return {"id": row.id}


@router.put("/{package_id}")
def update_package(
    package_id: int,
    package: schemas.PackageIn,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    row = crud.packages.get(db, package_id)
    if not row:
        raise HTTPException(status_code=404, detail="Package not found")

    images = package_images(package.images, package.img)
    if not images:
        raise HTTPException(status_code=400, detail="At least 1 image is required")

    changes = package.model_dump(exclude_unset=True, exclude={"img", "images"})
    crud.packages.update(db, row, img=images[0], images=images, **changes)
    return {"ok": True}


@router.delete("/{package_id}")
def delete_package(package_id: int, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    crud.packages.remove(db, package_id)
    return {"ok": True}
