from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class CamelModel(BaseModel):
    """Request body that accepts the frontend's camelCase keys"""

    class Config:
        populate_by_name = True


def _price_to_str(v):
    if v is None or isinstance(v, str):
        return v
    return str(v)


# Users / auth
class UserCreate(CamelModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    name: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    age_range: Optional[str] = None


class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    age_range: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    user: UserResponse
    token: str


class MeResponse(BaseModel):
    user: UserResponse


# Posts
class PostIn(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    content: Optional[str] = None


class PostResponse(PostIn):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Packages
class PackageIn(BaseModel):
    code: Optional[str] = None
    title: Optional[str] = None
    nights: Optional[int] = None
    price: Optional[str] = None
    img: Optional[str] = None
    images: Optional[List[str]] = None
    trip_details: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v):
        return _price_to_str(v)


class PackageResponse(BaseModel):
    id: int
    code: Optional[str] = None
    title: Optional[str] = None
    nights: Optional[int] = None
    price: Optional[str] = None
    img: Optional[str] = None
    images: List[str] = []
    trip_details: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Deals / destinations
class CrazyDealIn(BaseModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    discount_percent: Optional[int] = None
    end_date: Optional[datetime] = None
    active: Optional[bool] = None

    @field_validator("end_date")
    @classmethod
    def naive_utc(cls, v):
        # Stored as naive UTC
        if v is not None and v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class CrazyDealResponse(BaseModel):
    id: int
    title: str
    subtitle: Optional[str] = None
    discount_percent: Optional[int] = None
    end_date: datetime
    active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DestinationIn(BaseModel):
    country: Optional[str] = None
    city: Optional[str] = None
    price: Optional[str] = None
    display_order: Optional[int] = None
    active: Optional[bool] = None

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v):
        return _price_to_str(v)


class DestinationResponse(BaseModel):
    id: int
    country: str
    city: str
    price: Optional[str] = None
    display_order: int
    active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CalendarDealIn(BaseModel):
    deal_date: Optional[date] = None
    deal_type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    discount_percent: Optional[int] = None
    active: Optional[bool] = None


class CalendarDealResponse(BaseModel):
    id: int
    deal_date: date
    deal_type: str
    title: Optional[str] = None
    description: Optional[str] = None
    discount_percent: Optional[int] = None
    active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Leads / requests
class LeadIn(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    service: Optional[str] = None
    notes: Optional[str] = None
    package_code: Optional[str] = Field(None, alias="packageCode")
    user_id: Optional[int] = Field(None, alias="userId")


class TravelPeriodIn(CamelModel):
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    departure_airport: Optional[str] = Field(None, alias="departureAirport")
    arrival_airport: Optional[str] = Field(None, alias="arrivalAirport")
    trip_type: Optional[str] = Field(None, alias="tripType")
    user_id: Optional[int] = Field(None, alias="userId")


class FollowUpResult(BaseModel):
    action: str
    ok: bool
    error: Optional[str] = None


class SubmissionResponse(BaseModel):
    success: bool = True
    message: str
    emailSent: bool
    requestId: Optional[int] = None
    followUps: List[FollowUpResult] = []


class RequestIn(CamelModel):
    request_type: Optional[str] = Field(None, alias="requestType")
    title: Optional[str] = None
    description: Optional[str] = None
    request_data: Optional[Dict[str, Any]] = Field(None, alias="requestData")
    user_id: Optional[int] = Field(None, alias="userId")


class RequestUpdate(CamelModel):
    status: Optional[str] = None
    admin_notes: Optional[str] = Field(None, alias="adminNotes")
    payment_status: Optional[str] = Field(None, alias="paymentStatus")
    payment_info: Optional[Any] = Field(None, alias="paymentInfo")


class RequestResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    request_type: str
    title: str
    description: Optional[str] = None
    status: str
    payment_status: str
    payment_info: Optional[Any] = None
    payment_confirmed_at: Optional[datetime] = None
    payment_confirmed_by: Optional[int] = None
    request_data: Optional[Dict[str, Any]] = None
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Form drafts
class FormDraftIn(CamelModel):
    user_id: Optional[int] = Field(None, alias="userId")
    form_type: Optional[str] = Field(None, alias="formType")
    form_data: Optional[Dict[str, Any]] = Field(None, alias="formData")
    progress_percent: Optional[int] = Field(None, alias="progressPercent", ge=0, le=100)


class FormDraftUpdate(CamelModel):
    form_data: Optional[Dict[str, Any]] = Field(None, alias="formData")
    progress_percent: Optional[int] = Field(None, alias="progressPercent", ge=0, le=100)
    status: Optional[str] = None


class FormDraftResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    form_type: str
    form_data: Optional[Dict[str, Any]] = None
    progress_percent: int
    status: str
    last_saved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Chat
class ChatMessageIn(CamelModel):
    session_id: Optional[str] = Field(None, alias="sessionId")
    sender_name: Optional[str] = Field(None, alias="senderName")
    sender_email: Optional[str] = Field(None, alias="senderEmail")
    message: Optional[str] = None
    user_id: Optional[int] = Field(None, alias="userId")


class AdminReplyIn(CamelModel):
    session_id: Optional[str] = Field(None, alias="sessionId")
    message: Optional[str] = None


class MarkReadIn(CamelModel):
    session_id: Optional[str] = Field(None, alias="sessionId")


class ChatMessageResponse(BaseModel):
    id: int
    session_id: str
    user_id: Optional[int] = None
    sender_name: str
    sender_email: Optional[str] = None
    is_admin: bool
    message: str
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChatPostResponse(BaseModel):
    success: bool = True
    message: ChatMessageResponse


# Travel buddy
class TripIn(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    destination: Optional[str] = None
    country: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    max_participants: Optional[int] = Field(None, ge=1)
    price_per_person: Optional[float] = None
    image_url: Optional[str] = None
    images: Optional[List[str]] = None
    itinerary: Optional[List[Any]] = None
    included: Optional[List[Any]] = None
    requirements: Optional[str] = None


class TripUpdate(TripIn):
    status: Optional[str] = None
    current_participants: Optional[int] = Field(None, ge=0)


class JoinTripIn(CamelModel):
    user_id: Optional[int] = Field(None, alias="userId")
    guest_name: Optional[str] = Field(None, alias="guestName")
    guest_email: Optional[str] = Field(None, alias="guestEmail")
    guest_phone: Optional[str] = Field(None, alias="guestPhone")
    notes: Optional[str] = None


class LeaveTripIn(CamelModel):
    user_id: Optional[int] = Field(None, alias="userId")
    guest_email: Optional[str] = Field(None, alias="guestEmail")


class ParticipantResponse(BaseModel):
    id: int
    trip_id: int
    user_id: Optional[int] = None
    guest_name: Optional[str] = None
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TripResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    destination: str
    country: str
    start_date: date
    end_date: date
    max_participants: int
    current_participants: int
    price_per_person: Optional[float] = None
    image_url: Optional[str] = None
    images: Optional[List[str]] = None
    itinerary: Optional[List[Any]] = None
    included: Optional[List[Any]] = None
    requirements: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TripDetailResponse(TripResponse):
    participants: List[ParticipantResponse] = []


class JoinTripResponse(BaseModel):
    success: bool = True
    participant: ParticipantResponse
    requestId: Optional[int] = None
    emailSent: bool
    followUps: List[FollowUpResult] = []


# Testimonials
class TestimonialIn(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    location: Optional[str] = None
    text: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    user_id: Optional[int] = Field(None, alias="userId")


class TestimonialUpdate(CamelModel):
    status: Optional[str] = None
    admin_notes: Optional[str] = Field(None, alias="adminNotes")


class TestimonialResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    name: str
    email: Optional[str] = None
    location: Optional[str] = None
    text: str
    rating: int
    status: str
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Bank details
class BankDetailIn(BaseModel):
    bank_name: Optional[str] = None
    account_name: Optional[str] = None
    account_number: Optional[str] = None
    routing_number: Optional[str] = None
    swift_code: Optional[str] = None
    branch_name: Optional[str] = None
    branch_address: Optional[str] = None
    currency: Optional[str] = None
    instructions: Optional[str] = None
    active: Optional[bool] = None


class BankDetailResponse(BaseModel):
    id: int
    bank_name: str
    account_name: str
    account_number: str
    routing_number: Optional[str] = None
    swift_code: Optional[str] = None
    branch_name: Optional[str] = None
    branch_address: Optional[str] = None
    currency: str
    instructions: Optional[str] = None
    active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Storage
class UploadResponse(BaseModel):
    url: str
    path: str
    fileName: str


class StoredImage(BaseModel):
    name: str
    url: str
    size: int = 0
    updated: Optional[datetime] = None


class ImageDeleteIn(BaseModel):
    bucket: Optional[str] = None
    path: Optional[str] = None
