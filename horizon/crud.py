"""
Table accessors and the queries that need more than a primary key lookup
"""
import logging
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy import case, func, or_, update
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Query, Session

from . import models
from .database import Base, is_missing_table

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class TableAccessor(Generic[ModelType]):
    """list/get/insert/update/remove for one table"""

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def all(self, db: Session, *criteria, order_by=None) -> List[ModelType]:
        query = db.query(self.model)
        if criteria:
            query = query.filter(*criteria)
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()

    def get(self, db: Session, row_id: int) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.id == row_id).first()

    def insert(self, db: Session, **values) -> ModelType:
        row = self.model(**values)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    def update(self, db: Session, row: ModelType, **values) -> ModelType:
        for field, value in values.items():
            setattr(row, field, value)
        db.commit()
        db.refresh(row)
        return row

    def remove(self, db: Session, row_id: int) -> bool:
        deleted = db.query(self.model).filter(self.model.id == row_id).delete()
        db.commit()
        return deleted > 0


users = TableAccessor(models.User)
posts = TableAccessor(models.Post)
packages = TableAccessor(models.Package)
crazy_deals = TableAccessor(models.CrazyDeal)
destinations = TableAccessor(models.AffordableDestination)
calendar_deals = TableAccessor(models.CalendarDeal)
requests = TableAccessor(models.ServiceRequest)
form_drafts = TableAccessor(models.FormDraft)
chat_messages = TableAccessor(models.ChatMessage)
travel_trips = TableAccessor(models.TravelTrip)
trip_participants = TableAccessor(models.TripParticipant)
testimonials = TableAccessor(models.Testimonial)
bank_details = TableAccessor(models.BankDetail)


def rows_or_empty(db: Session, query: Query, table: str) -> list:
    """Run a read query; a table that was never migrated reads as empty"""
    try:
        return query.all()
    except (OperationalError, ProgrammingError) as exc:
        if not is_missing_table(exc):
            raise
        db.rollback()
        logger.warning("Table %s does not exist yet, returning no rows", table)
        return []


# Requests
def requests_query(
    db: Session,
    user_id: Optional[int] = None,
    request_type: Optional[str] = None,
    status: Optional[str] = None,
) -> Query:
    query = db.query(models.ServiceRequest)
    if user_id is not None:
        query = query.filter(models.ServiceRequest.user_id == user_id)
    if request_type:
        query = query.filter(models.ServiceRequest.request_type == request_type)
    if status:
        query = query.filter(models.ServiceRequest.status == status)
    return query.order_by(models.ServiceRequest.created_at.desc(), models.ServiceRequest.id.desc())


# Chat
def session_belongs_to(session_id: str, user_id: int) -> bool:
    """user_<id> or user_<id>_<suffix>, never user_<id><more digits>"""
    owner = f"user_{user_id}"
    return session_id == owner or session_id.startswith(owner + "_")


def chat_messages_query(
    db: Session,
    session_id: Optional[str],
    is_admin: bool,
    user_id: Optional[int] = None,
) -> Optional[Query]:
    """Messages the caller may read, oldest first; None when nothing is visible"""
    Message = models.ChatMessage
    query = db.query(Message)

    if session_id is None:
        if not is_admin:
            return None
    else:
        query = query.filter(Message.session_id == session_id)
        if not is_admin:
            if user_id is None:
                query = query.filter(Message.is_admin.is_(False))
            elif not session_belongs_to(session_id, user_id):
                query = query.filter(or_(Message.user_id == user_id, Message.is_admin.is_(False)))

    return query.order_by(Message.created_at, Message.id)


def mark_session_read(db: Session, session_id: str) -> int:
    """Stamp read_at on unread admin replies of a session"""
    Message = models.ChatMessage
    updated = (
        db.query(Message)
        .filter(
            Message.session_id == session_id,
            Message.is_admin.is_(True),
            Message.read_at.is_(None),
        )
        .update({Message.read_at: func.now()}, synchronize_session=False)
    )
    db.commit()
    return updated


# Travel trips
def trips_query(
    db: Session,
    status: Optional[str] = None,
    destination: Optional[str] = None,
    country: Optional[str] = None,
) -> Query:
    Trip = models.TravelTrip
    query = db.query(Trip)
    if status:
        query = query.filter(Trip.status == status)
    if destination:
        query = query.filter(func.lower(Trip.destination).contains(destination.lower()))
    if country:
        query = query.filter(func.lower(Trip.country).contains(country.lower()))
    return query.order_by(Trip.start_date, Trip.id)


def user_trips_query(db: Session, user_id: int) -> Query:
    joined = db.query(models.TripParticipant.trip_id).filter(models.TripParticipant.user_id == user_id)
    return (
        db.query(models.TravelTrip)
        .filter(models.TravelTrip.id.in_(joined))
        .order_by(models.TravelTrip.start_date, models.TravelTrip.id)
    )


def find_participant(
    db: Session,
    trip_id: int,
    user_id: Optional[int] = None,
    guest_email: Optional[str] = None,
) -> Optional[models.TripParticipant]:
    """Participant matching the user id or the guest email, case-insensitive"""
    Participant = models.TripParticipant
    matches = []
    if user_id is not None:
        matches.append(Participant.user_id == user_id)
    if guest_email:
        matches.append(func.lower(Participant.guest_email) == guest_email.lower())
    if not matches:
        return None
    return db.query(Participant).filter(Participant.trip_id == trip_id, or_(*matches)).first()


def claim_trip_seat(db: Session, trip_id: int) -> bool:
    """
    Take one seat with a single conditional UPDATE.

    Does not commit; the caller commits together with the participant row.
    False means the trip was closed or full when the statement ran.
    """
    Trip = models.TravelTrip
    seats_after = Trip.current_participants + 1
    result = db.execute(
        update(Trip)
        .where(
            Trip.id == trip_id,
            Trip.status == "open",
            Trip.current_participants < Trip.max_participants,
        )
        .values(
            current_participants=seats_after,
            status=case((seats_after >= Trip.max_participants, "full"), else_="open"),
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def release_trip_seat(db: Session, trip_id: int) -> None:
    """Give a seat back, clamped at zero; a full trip reopens below capacity. Does not commit."""
    Trip = models.TravelTrip
    db.execute(
        update(Trip)
        .where(Trip.id == trip_id)
        .values(
            current_participants=case(
                (Trip.current_participants > 0, Trip.current_participants - 1), else_=0
            ),
            status=case(
                (
                    (Trip.status == "full") & (Trip.current_participants - 1 < Trip.max_participants),
                    "open",
                ),
                else_=Trip.status,
            ),
        )
        .execution_options(synchronize_session=False)
    )


def recount_trip(db: Session, trip: models.TravelTrip) -> models.TravelTrip:
    """Rebuild counter and status from participant rows"""
    count = (
        db.query(func.count(models.TripParticipant.id))
        .filter(models.TripParticipant.trip_id == trip.id)
        .scalar()
    )
    trip.current_participants = count
    trip.status = "full" if count >= trip.max_participants else "open"
    db.commit()
    db.refresh(trip)
    return trip
