"""
Travel buddy group trips: listing, admin management, join and leave
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..advisory import Submission
from ..auth import caller_id, get_optional_claims, require_admin
from ..database import get_db
from ..email_service import Mailer, get_mailer
from ..telegram_service import TelegramNotifier, get_notifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/travel-trips", tags=["Travel Buddy"])

# Not nullable, so a null in an update leaves them unchanged
REQUIRED_TRIP_FIELDS = (
    "title",
    "destination",
    "country",
    "start_date",
    "end_date",
    "max_participants",
    "current_participants",
    "status",
)


def load_trip(db: Session, trip_id: int) -> models.TravelTrip:
    trip = crud.travel_trips.get(db, trip_id)
    if not trip:
        raise HTTPException(status_code=404, detail="Trip not found")
    return trip


@router.get("", response_model=List[schemas.TripResponse])
def list_trips(
    trip_status: Optional[str] = Query(None, alias="status"),
    destination: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Upcoming first"""
    query = crud.trips_query(db, status=trip_status, destination=destination, country=country)
    return crud.rows_or_empty(db, query, "travel_trips")


@router.get("/user/{user_id}", response_model=List[schemas.TripResponse])
def list_user_trips(user_id: int, db: Session = Depends(get_db)):
    """Trips the user has joined"""
    return crud.rows_or_empty(db, crud.user_trips_query(db, user_id), "travel_trips")


@router.get("/{trip_id}", response_model=schemas.TripDetailResponse)
def get_trip(trip_id: int, db: Session = Depends(get_db)):
    return load_trip(db, trip_id)


@router.post("", response_model=schemas.TripResponse)
def create_trip(trip: schemas.TripIn, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    if not trip.title or not trip.destination or not trip.country or not trip.start_date or not trip.end_date:
        raise HTTPException(status_code=400, detail="Missing required fields")

    images = [i for i in (trip.images or []) if i]
    if not images and trip.image_url:
        images = [trip.image_url]
    if not images:
        raise HTTPException(status_code=400, detail="At least 1 image is required")

    values = trip.model_dump(exclude={"images", "image_url", "max_participants", "itinerary", "included"})
    return crud.travel_trips.insert(
        db,
        max_participants=trip.max_participants or 10,
        images=images,
        image_url=images[0],
        itinerary=trip.itinerary or [],
        included=trip.included or [],
        status="open",
        current_participants=0,
        **values,
    )


@router.put("/{trip_id}", response_model=schemas.TripResponse)
def update_trip(
    trip_id: int,
    body: schemas.TripUpdate,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    if body.status and body.status not in models.TRIP_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    trip = load_trip(db, trip_id)
    changes = body.model_dump(exclude_unset=True)
    for field in REQUIRED_TRIP_FIELDS:
        if field in changes and changes[field] is None:
            del changes[field]

    if "status" not in changes and ("max_participants" in changes or "current_participants" in changes):
        count = changes.get("current_participants", trip.current_participants)
        capacity = changes.get("max_participants", trip.max_participants)
        changes["status"] = "full" if count >= capacity else "open"

    # images and the legacy image_url stay in step
    if "images" in changes:
        images = [i for i in (changes["images"] or []) if i]
        changes["images"] = images
        changes["image_url"] = images[0] if images else None
    elif changes.get("image_url"):
        changes["images"] = [changes["image_url"]]

    return crud.travel_trips.update(db, trip, **changes)


@router.delete("/{trip_id}")
def delete_trip(trip_id: int, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    trip = crud.travel_trips.get(db, trip_id)
    if trip:
        # ORM delete so participant rows go with it
        db.delete(trip)
        db.commit()
    return {"success": True}


@router.post("/{trip_id}/join", response_model=schemas.JoinTripResponse)
async def join_trip(
    trip_id: int,
    body: schemas.JoinTripIn,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    claims: Optional[dict] = Depends(get_optional_claims),
    mailer: Mailer = Depends(get_mailer),
    notifier: TelegramNotifier = Depends(get_notifier),
):
    trip = load_trip(db, trip_id)
    user_id = caller_id(claims, body.user_id)

    if trip.status != "open":
        raise HTTPException(status_code=400, detail="Trip is not open for registration")
    if trip.current_participants >= trip.max_participants:
        raise HTTPException(status_code=400, detail="Trip is full")
    if user_id is None and not body.guest_email:
        raise HTTPException(status_code=400, detail="Email is required to join as a guest")
    if crud.find_participant(db, trip.id, user_id, body.guest_email):
        raise HTTPException(status_code=400, detail="You have already joined this trip")

    # Seat and participant row commit together
    if not crud.claim_trip_seat(db, trip.id):
        db.rollback()
        db.refresh(trip)
        detail = "Trip is full" if trip.status == "full" else "Trip is not open for registration"
        raise HTTPException(status_code=400, detail=detail)

    participant = models.TripParticipant(
        trip_id=trip.id,
        user_id=user_id,
        guest_name=body.guest_name or None,
        guest_email=body.guest_email or None,
        guest_phone=body.guest_phone or None,
        status="pending",
        notes=body.notes or None,
    )
    db.add(participant)
    db.commit()
    db.refresh(participant)
    db.refresh(trip)
    logger.info("Trip %s: participant %s joined (%s/%s)", trip.id, participant.id,
                trip.current_participants, trip.max_participants)

    contact_name = body.guest_name
    contact_email = body.guest_email
    if user_id is not None and not (contact_name and contact_email):
        user = crud.users.get(db, user_id)
        if user:
            contact_name = contact_name or user.name
            contact_email = contact_email or user.email

    title = f"Travel Buddy Request: {trip.title}"
    submission = Submission("Travel buddy join")
    await submission.send_email(
        mailer.send_travel_buddy_notification(
            trip_title=trip.title,
            destination=trip.destination,
            country=trip.country,
            start_date=trip.start_date,
            end_date=trip.end_date,
            guest_name=contact_name,
            guest_email=contact_email,
            guest_phone=body.guest_phone,
            notes=body.notes,
        )
    )
    submission.record_request(
        db,
        user_id=user_id,
        request_type="travel_buddy",
        title=title,
        description=f"Request to join trip to {trip.destination}, {trip.country}",
        request_data={
            "tripId": trip.id,
            "tripTitle": trip.title,
            "destination": trip.destination,
            "country": trip.country,
            "startDate": trip.start_date.isoformat(),
            "endDate": trip.end_date.isoformat(),
            "guestName": body.guest_name,
            "guestEmail": body.guest_email,
            "guestPhone": body.guest_phone,
            "notes": body.notes,
        },
    )
    submission.alert_admins(
        background_tasks,
        notifier,
        request_type="travel_buddy",
        title=title,
        contact_name=contact_name,
        contact_phone=body.guest_phone,
        contact_email=contact_email,
    )

    return schemas.JoinTripResponse(
        success=True,
        participant=schemas.ParticipantResponse.model_validate(participant),
        requestId=submission.request_id,
        emailSent=submission.email_sent,
        followUps=submission.follow_ups,
    )


@router.post("/{trip_id}/leave")
def leave_trip(
    trip_id: int,
    body: schemas.LeaveTripIn,
    db: Session = Depends(get_db),
    claims: Optional[dict] = Depends(get_optional_claims),
):
    trip = load_trip(db, trip_id)
    user_id = caller_id(claims, body.user_id)
    if claims and claims.get("id") is not None:
        # signed in: only the caller's own registration
        participant = crud.find_participant(db, trip.id, user_id=user_id)
    else:
        participant = crud.find_participant(db, trip.id, user_id, body.guest_email)
    if not participant:
        raise HTTPException(status_code=404, detail="You are not registered for this trip")

    participant_id = participant.id
    db.delete(participant)
    crud.release_trip_seat(db, trip_id)
    db.commit()
    logger.info("Trip %s: participant %s left", trip_id, participant_id)
    return {"success": True}


@router.post("/{trip_id}/reconcile", response_model=schemas.TripResponse)
def reconcile_trip(trip_id: int, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    """Recount participants and reset status"""
    trip = load_trip(db, trip_id)
    return crud.recount_trip(db, trip)
