"""
Database models for the BT2 Horizon travel agency
"""
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base

USER_ROLES = ("user", "admin")
GENDERS = ("male", "female", "other", "prefer_not_to_say")
AGE_RANGES = ("12-18", "19-29", "30-39", "40-49", "50-59", "60-69", "70-79")

REQUEST_STATUSES = ("pending", "in_progress", "on_hold", "completed")
PAYMENT_STATUSES = ("none", "awaiting_payment", "payment_received", "payment_confirmed")

CALENDAR_DEAL_TYPES = ("flight", "hotel", "package", "visa")
FORM_DRAFT_STATUSES = ("draft", "submitted")
TRIP_STATUSES = ("open", "full")
TESTIMONIAL_STATUSES = ("pending", "approved", "rejected")


class User(Base):
    """Registered customer or admin"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(200))
    first_name = Column(String(100))
    last_name = Column(String(100))
    phone = Column(String(50))
    gender = Column(String(30))
    age_range = Column(String(10))
    # user | admin, only changed outside the API
    role = Column(String(20), nullable=False, default="user")
    created_at = Column(DateTime, server_default=func.now())


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255))
    slug = Column(String(255), index=True)
    content = Column(Text)
    created_at = Column(DateTime, server_default=func.now())


class Package(Base):
    """Holiday package; img mirrors images[0] for older clients"""
    __tablename__ = "packages"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50))
    title = Column(String(255))
    nights = Column(Integer)
    price = Column(String(50))
    trip_details = Column(Text)
    img = Column(String(500))
    images = Column(JSON, default=list)
    created_at = Column(DateTime, server_default=func.now())


class CrazyDeal(Base):
    __tablename__ = "crazy_deals"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    subtitle = Column(String(255))
    discount_percent = Column(Integer)
    end_date = Column(DateTime, nullable=False, index=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())


class AffordableDestination(Base):
    __tablename__ = "affordable_destinations"

    id = Column(Integer, primary_key=True, index=True)
    country = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)
    price = Column(String(50))
    display_order = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())


class CalendarDeal(Base):
    """One highlighted deal per calendar day"""
    __tablename__ = "calendar_deals"

    id = Column(Integer, primary_key=True, index=True)
    deal_date = Column(Date, nullable=False, unique=True, index=True)
    deal_type = Column(String(20), nullable=False)
    title = Column(String(255))
    description = Column(Text)
    discount_percent = Column(Integer)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())


class ServiceRequest(Base):
    """Trackable record of a lead, travel plan or travel-buddy join"""
    __tablename__ = "requests"

    id = Column(Integer, primary_key=True, index=True)
    # Null for guest submissions
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    request_type = Column(String(50), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    status = Column(String(20), nullable=False, default="pending", index=True)
    # none -> awaiting_payment -> payment_received -> payment_confirmed
    payment_status = Column(String(30), nullable=False, default="none")
    payment_info = Column(JSON)
    payment_confirmed_at = Column(DateTime)
    payment_confirmed_by = Column(Integer)
    request_data = Column(JSON, default=dict)
    admin_notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())


class FormDraft(Base):
    __tablename__ = "form_drafts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    form_type = Column(String(50), nullable=False)
    form_data = Column(JSON, default=dict)
    progress_percent = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="draft")
    last_saved_at = Column(DateTime, server_default=func.now())
    created_at = Column(DateTime, server_default=func.now())


class ChatMessage(Base):
    """Live chat line; session_id scopes who may read it"""
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(100), nullable=False, index=True)
    user_id = Column(Integer, nullable=True)
    sender_name = Column(String(100), nullable=False, default="Anonymous")
    sender_email = Column(String(255))
    is_admin = Column(Boolean, nullable=False, default=False)
    message = Column(Text, nullable=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class TravelTrip(Base):
    """Group trip open to travel buddies"""
    __tablename__ = "travel_trips"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    destination = Column(String(255), nullable=False)
    country = Column(String(100), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    max_participants = Column(Integer, nullable=False, default=10)
    current_participants = Column(Integer, nullable=False, default=0)
    price_per_person = Column(Float)
    image_url = Column(String(500))
    images = Column(JSON, default=list)
    itinerary = Column(JSON, default=list)
    included = Column(JSON, default=list)
    requirements = Column(Text)
    # open | full
    status = Column(String(20), nullable=False, default="open")
    created_at = Column(DateTime, server_default=func.now())

    participants = relationship(
        "TripParticipant", back_populates="trip", cascade="all, delete-orphan"
    )


class TripParticipant(Base):
    __tablename__ = "trip_participants"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("travel_trips.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, nullable=True, index=True)
    guest_name = Column(String(100))
    guest_email = Column(String(255))
    guest_phone = Column(String(50))
    status = Column(String(20), nullable=False, default="pending")
    notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    trip = relationship("TravelTrip", back_populates="participants")


class Testimonial(Base):
    __tablename__ = "testimonials"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255))
    location = Column(String(100))
    text = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False, default=5)
    # Requires admin approval before it is public
    status = Column(String(20), nullable=False, default="pending")
    admin_notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())


class BankDetail(Base):
    __tablename__ = "bank_details"

    id = Column(Integer, primary_key=True, index=True)
    bank_name = Column(String(255), nullable=False)
    account_name = Column(String(255), nullable=False)
    account_number = Column(String(100), nullable=False)
    routing_number = Column(String(100))
    swift_code = Column(String(50))
    branch_name = Column(String(255))
    branch_address = Column(String(500))
    currency = Column(String(10), nullable=False, default="USD")
    instructions = Column(Text)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
