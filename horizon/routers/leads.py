"""
Public lead and travel-period submissions
"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import schemas
from ..advisory import Submission
from ..auth import caller_id, get_optional_claims
from ..database import get_db
from ..email_service import Mailer, get_mailer
from ..telegram_service import TelegramNotifier, get_notifier

router = APIRouter(prefix="/api", tags=["Leads"])


def lead_request_type(package_code: Optional[str], service: Optional[str]) -> str:
    if package_code:
        return "package"
    service_lower = (service or "").lower()
    if "passport" in service_lower:
        return "passport"
    if "visa" in service_lower:
        return "visa"
    return "booking"


def lead_title(package_code: Optional[str], service: Optional[str]) -> str:
    if package_code:
        return f"Package Request: {package_code}"
    return service or "Booking Inquiry"


@router.post("/leads", response_model=schemas.SubmissionResponse)
async def submit_lead(
    lead: schemas.LeadIn,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    claims: Optional[dict] = Depends(get_optional_claims),
    mailer: Mailer = Depends(get_mailer),
    notifier: TelegramNotifier = Depends(get_notifier),
):
    """Booking inquiry: email the agency, track it as a request, alert admins"""
    if not lead.name or not lead.phone:
        raise HTTPException(status_code=400, detail="Name and phone number are required")

    request_type = lead_request_type(lead.package_code, lead.service)
    title = lead_title(lead.package_code, lead.service)

    submission = Submission("Lead")
    await submission.send_email(
        mailer.send_lead_notification(
            name=lead.name,
            phone=lead.phone,
            email=lead.email,
            service=lead.service,
            notes=lead.notes,
            package_code=lead.package_code,
        )
    )
    submission.record_request(
        db,
        user_id=caller_id(claims, lead.user_id),
        request_type=request_type,
        title=title,
        description=lead.notes or None,
        request_data={
            "name": lead.name,
            "phone": lead.phone,
            "email": lead.email,
            "service": lead.service,
            "packageCode": lead.package_code,
        },
    )
    submission.alert_admins(
        background_tasks,
        notifier,
        request_type=request_type,
        title=title,
        contact_name=lead.name,
        contact_phone=lead.phone,
        contact_email=lead.email,
    )
    return submission.response("Thank you! We will contact you soon.")


@router.post("/travel-periods", response_model=schemas.SubmissionResponse)
async def submit_travel_period(
    period: schemas.TravelPeriodIn,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    claims: Optional[dict] = Depends(get_optional_claims),
    mailer: Mailer = Depends(get_mailer),
    notifier: TelegramNotifier = Depends(get_notifier),
):
    """Travel window picked on the deals calendar"""
    trip_type = period.trip_type or "return"

    if period.start_date is None:
        raise HTTPException(status_code=400, detail="Start date is required")
    if trip_type == "return" and period.end_date is None:
        raise HTTPException(status_code=400, detail="End date is required for return trips")
    if not period.departure_airport or not period.arrival_airport:
        raise HTTPException(status_code=400, detail="Departure and arrival airports are required")

    start_date = period.start_date
    end_date = start_date if trip_type == "one-way" else period.end_date
    if end_date is not None and end_date < start_date:
        raise HTTPException(status_code=400, detail="End date cannot be before start date")

    if end_date is not None:
        period_text = f"{start_date.isoformat()} to {end_date.isoformat()}"
    else:
        period_text = f"from {start_date.isoformat()}"
    title = f"Travel Plan: {period.departure_airport} → {period.arrival_airport}"

    submission = Submission("Travel period")
    await submission.send_email(
        mailer.send_travel_period_notification(
            start_date=start_date,
            end_date=end_date,
            departure_airport=period.departure_airport,
            arrival_airport=period.arrival_airport,
            trip_type=trip_type,
        )
    )
    submission.record_request(
        db,
        user_id=caller_id(claims, period.user_id),
        request_type="travel_plan",
        title=title,
        description=f"Travel period: {period_text}",
        request_data={
            "startDate": start_date.isoformat(),
            "endDate": end_date.isoformat() if end_date is not None else None,
            "tripType": trip_type,
            "departureAirport": period.departure_airport,
            "arrivalAirport": period.arrival_airport,
        },
    )
    submission.alert_admins(background_tasks, notifier, request_type="travel_plan", title=title)
    return submission.response("Travel period submitted successfully! We will contact you with the best deals.")
