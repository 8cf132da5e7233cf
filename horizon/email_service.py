"""
Transactional email to the agency inbox
"""
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from fastapi import Request
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from .config import Settings

logger = logging.getLogger(__name__)

TEMPLATE_FOLDER = Path(__file__).parent / "templates"


class EmailNotConfigured(RuntimeError):
    pass


def build_connection_config(settings: Settings) -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USERNAME,
        MAIL_PASSWORD=settings.MAIL_PASSWORD,
        MAIL_FROM=settings.MAIL_FROM,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_SERVER,
        MAIL_FROM_NAME=settings.MAIL_FROM_NAME,
        MAIL_STARTTLS=settings.MAIL_STARTTLS,
        MAIL_SSL_TLS=settings.MAIL_SSL_TLS,
        USE_CREDENTIALS=bool(settings.MAIL_USERNAME),
        VALIDATE_CERTS=True,
        SUPPRESS_SEND=int(settings.MAIL_SUPPRESS_SEND),
        TIMEOUT=settings.MAIL_TIMEOUT,
        TEMPLATE_FOLDER=TEMPLATE_FOLDER,
    )


def trip_days(start: date, end: date) -> int:
    return max((end - start).days, 0)


class Mailer:
    """Notification emails for leads, travel periods and travel-buddy joins"""

    def __init__(self, settings: Settings):
        self.recipient = settings.notification_recipient
        self.fm: Optional[FastMail] = None

        if settings.mail_configured:
            self.fm = FastMail(build_connection_config(settings))
        else:
            logger.warning("Email not configured. Set MAIL_USERNAME and MAIL_PASSWORD in .env")

    @property
    def configured(self) -> bool:
        return self.fm is not None

    async def _send(self, subject: str, template_name: str, body: dict) -> None:
        if self.fm is None:
            raise EmailNotConfigured("Email not configured")

        message = MessageSchema(
            subject=subject,
            recipients=[self.recipient],
            template_body=body,
            subtype=MessageType.html,
        )
        await self.fm.send_message(message, template_name=template_name)
        logger.info("Email sent: %s", subject)

    async def send_lead_notification(
        self,
        name: str,
        phone: str,
        email: Optional[str] = None,
        service: Optional[str] = None,
        notes: Optional[str] = None,
        package_code: Optional[str] = None,
    ) -> None:
        subject = "New Booking Inquiry"
        if package_code:
            subject += f" - {package_code}"

        await self._send(
            subject,
            "lead.html",
            {
                "name": name,
                "phone": phone,
                "dial": "".join(c for c in phone if c.isdigit() or c == "+"),
                "email": email,
                "service": service or "Not specified",
                "notes": notes,
                "package_code": package_code,
            },
        )

    async def send_travel_period_notification(
        self,
        start_date: date,
        end_date: Optional[date],
        departure_airport: str,
        arrival_airport: str,
        trip_type: str = "return",
    ) -> None:
        await self._send(
            f"New Travel Period Request - {departure_airport} to {arrival_airport}",
            "travel_period.html",
            {
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat() if end_date is not None else None,
                "days": trip_days(start_date, end_date) if end_date is not None else None,
                "trip_type": trip_type,
                "departure_airport": departure_airport,
                "arrival_airport": arrival_airport,
            },
        )

    async def send_travel_buddy_notification(
        self,
        trip_title: str,
        destination: str,
        country: str,
        start_date: date,
        end_date: date,
        guest_name: Optional[str] = None,
        guest_email: Optional[str] = None,
        guest_phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        await self._send(
            f"New Travel Buddy Join Request - {destination}, {country}",
            "travel_buddy.html",
            {
                "trip_title": trip_title,
                "destination": destination,
                "country": country,
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
                "guest_name": guest_name or "Guest",
                "guest_email": guest_email or "N/A",
                "guest_phone": guest_phone or "N/A",
                "notes": notes,
            },
        )


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer
