"""
Sample content and the default admin account.

    python -m horizon.seed
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from . import crud, models
from .config import Settings
from .database import build_engine, build_session_factory
from .security import get_password_hash

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@bt2.com"
# Change after first login
DEFAULT_ADMIN_PASSWORD = "admin123"

SAMPLE_PACKAGES = [
    {"code": "BT2-GRE-01", "title": "Greek Islands Escape", "nights": 7, "price": "$1,099", "img": "/assets/santorini.jpg"},
    {"code": "BT2-LON-02", "title": "London City Break", "nights": 4, "price": "$899", "img": "/assets/london.jpg"},
    {"code": "BT2-CRB-03", "title": "Caribbean Getaway", "nights": 5, "price": "$1,299", "img": "/assets/caribbean.jpg"},
]

SAMPLE_DESTINATIONS = [
    {"country": "Jamaica", "city": "Montego Bay", "price": "$399"},
    {"country": "Mexico", "city": "Cancun", "price": "$349"},
    {"country": "Dominican Republic", "city": "Punta Cana", "price": "$329"},
    {"country": "Costa Rica", "city": "San José", "price": "$419"},
    {"country": "Colombia", "city": "Cartagena", "price": "$299"},
]


def seed(db: Session) -> dict:
    """Insert sample rows; packages by code, the admin, deals and destinations only once"""
    created = {"posts": 0, "packages": 0, "admin": False, "crazy_deals": 0, "destinations": 0}

    if not db.query(models.Post).filter(models.Post.slug == "welcome").first():
        crud.posts.insert(db, title="Welcome to BT2", slug="welcome", content="This is sample post content.")
        created["posts"] += 1

    for package in SAMPLE_PACKAGES:
        if db.query(models.Package).filter(models.Package.code == package["code"]).first():
            continue
        row = crud.packages.insert(db, images=[package["img"]], **package)
        logger.info("Created package %s - %s", row.id, row.title)
        created["packages"] += 1

    if not db.query(models.User).filter(models.User.email == DEFAULT_ADMIN_EMAIL).first():
        crud.users.insert(
            db,
            email=DEFAULT_ADMIN_EMAIL,
            password_hash=get_password_hash(DEFAULT_ADMIN_PASSWORD),
            name="Admin User",
            role="admin",
        )
        logger.warning(
            "Created default admin %s with password %s, change it after first login",
            DEFAULT_ADMIN_EMAIL,
            DEFAULT_ADMIN_PASSWORD,
        )
        created["admin"] = True
    else:
        logger.info("Admin user already exists: %s", DEFAULT_ADMIN_EMAIL)

    if db.query(models.CrazyDeal).count() == 0:
        crud.crazy_deals.insert(
            db,
            title="Santorini",
            subtitle="Limited seats • Book now",
            discount_percent=40,
            end_date=datetime.utcnow() + timedelta(hours=48),
            active=True,
        )
        created["crazy_deals"] += 1

    if db.query(models.AffordableDestination).count() == 0:
        for order, destination in enumerate(SAMPLE_DESTINATIONS, start=1):
            crud.destinations.insert(db, display_order=order, active=True, **destination)
            created["destinations"] += 1

    return created


def main():
    settings = Settings()
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    engine = build_engine(settings.DATABASE_URL)
    models.Base.metadata.create_all(bind=engine)
    db = build_session_factory(engine)()
    try:
        created = seed(db)
    finally:
        db.close()
    logger.info("Seed complete: %s", created)


if __name__ == "__main__":
    main()
