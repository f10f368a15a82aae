# backend/consular/schemas/bookings.py

from datetime import date as date_type
from typing import Literal, Optional
from pydantic import BaseModel, Field


class UserDetailsPatch(BaseModel):
    """Profile fields a citizen may fill in while booking."""
    gender: Optional[Literal["male", "female", "other"]] = None
    phone_no: Optional[str] = None
    date_of_birth: Optional[date_type] = None
    nationality: Optional[str] = None
    passport_no: Optional[str] = None
    passport_expiry: Optional[date_type] = None


class BookingCreate(BaseModel):
    service_id: int
    center_id: int
    date: date_type
    slot_id: int

    user_details: Optional[UserDetailsPatch] = None


# ── Confirmation snapshot ────────────────────────────────────────────


class ConfirmationSlot(BaseModel):
    id: int
    start_time: str  # "HH:MM"
    end_time: str
    duration_minutes: int


class ConfirmationService(BaseModel):
    id: int
    title: str
    category: str
    processing_time: Optional[str] = None
    fees: dict = {}
    required_documents: list = []


class ConfirmationCounter(BaseModel):
    id: int
    name: str


class ConfirmationCenter(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    city: str
    state: Optional[str] = None
    country: str
    phone: Optional[str] = None
    email: Optional[str] = None


class ConfirmationUser(BaseModel):
    first_name: str
    last_name: Optional[str] = None
    email: str
    phone_no: Optional[str] = None
    passport_no: Optional[str] = None


class BookingConfirmation(BaseModel):
    booking_id: int
    booked_date: date_type
    appointment_id: int
    appointment_status: str
    user_id: int

    slot: ConfirmationSlot
    service: ConfirmationService
    counter: ConfirmationCounter
    center: ConfirmationCenter
    user: ConfirmationUser


class BookingCreated(BaseModel):
    booking_id: int
    appointment_id: int
    counter_id: int
    confirmation: BookingConfirmation

    model_config = {"from_attributes": True}


class CancellationRead(BaseModel):
    booking_id: int
    appointment_id: int
    appointment_status: str
    hours_until_appointment: float

    model_config = {"from_attributes": True}


# ── Wizard lookups ───────────────────────────────────────────────────


class ServiceRead(BaseModel):
    id: int
    category: str
    title: str
    description: Optional[str] = None
    fees: str
    required_documents: str
    processing_time: Optional[str] = None

    model_config = {"from_attributes": True}


class CenterRead(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    city: str
    state: Optional[str] = None
    country: str
    postal_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    operating_hours: str = "{}"

    counter_count: int = Field(description="Active counters at the center")


class BookingSettingsRead(BaseModel):
    """Public part of the capacity settings."""
    advance_booking_days: int
    cancellation_hours: int
    slot_duration_minutes: int

    model_config = {"from_attributes": True}


# ── Availability ─────────────────────────────────────────────────────


class SlotAvailabilityRead(BaseModel):
    date: date_type
    slot_id: int
    start_time: str  # "HH:MM"
    end_time: str
    booked_count: int
    available_count: int
    total_capacity: int
    is_available: bool


class DateAvailabilityRead(BaseModel):
    date: date_type
    day_of_week: str
    has_availability: bool

    model_config = {"from_attributes": True}


class AvailableSlotsResponse(BaseModel):
    center_id: int
    service_id: int
    date: date_type
    slots: list[SlotAvailabilityRead]


class AvailableDatesResponse(BaseModel):
    center_id: int
    service_id: int
    advance_booking_days: int
    dates: list[DateAvailabilityRead]
