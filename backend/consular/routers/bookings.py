# backend/consular/routers/bookings.py
"""
Citizen booking API.

Wizard order:
GET  /booking/services              - active services
GET  /booking/centers/{service_id}  - centers offering the service
GET  /booking/available-dates       - bookable dates for center + service
GET  /booking/available-slots       - slots with remaining capacity for a date
POST /booking/                      - book (allocator, transactional)

Availability numbers are advisory: POST /booking/ re-checks capacity
under lock and answers 409 when the last unit is gone.
"""

from datetime import date, datetime, timedelta
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import get_current_user_id, get_notifier
from ..schemas.bookings import (
    AvailableDatesResponse,
    AvailableSlotsResponse,
    BookingConfirmation,
    BookingCreate,
    BookingCreated,
    BookingSettingsRead,
    CancellationRead,
    CenterRead,
    DateAvailabilityRead,
    ServiceRead,
    SlotAvailabilityRead,
)
from ..services.appointments import list_active_services, list_centers_for_service
from ..services.booking import (
    BookingRequest,
    create_booking,
    get_booking,
    get_booking_confirmation,
    list_user_bookings,
)
from ..services.cancellation import cancel_booking
from ..services.errors import Forbidden, ValidationError
from ..services.events import Notifier
from ..services.slots import (
    SlotAvailability,
    compute_availability,
    get_available_dates,
    get_slots_for_date,
    load_capacity_settings,
)


router = APIRouter(prefix="/booking", tags=["booking"])


def _slot_read(entry: SlotAvailability) -> SlotAvailabilityRead:
    return SlotAvailabilityRead(
        date=entry.date,
        slot_id=entry.slot_id,
        start_time=entry.start_time.strftime("%H:%M"),
        end_time=entry.end_time.strftime("%H:%M"),
        booked_count=entry.booked_count,
        available_count=entry.available_count,
        total_capacity=entry.total_capacity,
        is_available=entry.is_available,
    )


# ── Wizard lookups ───────────────────────────────────────────────────


@router.get("/services", response_model=list[ServiceRead])
def list_services(db: Session = Depends(get_db)):
    return list_active_services(db)


@router.get("/centers/{service_id}", response_model=list[CenterRead])
def list_centers(service_id: int, db: Session = Depends(get_db)):
    return list_centers_for_service(db, service_id)


@router.get("/settings", response_model=BookingSettingsRead)
def get_booking_settings(db: Session = Depends(get_db)):
    return load_capacity_settings(db)


# ── Availability ─────────────────────────────────────────────────────


@router.get("/available-dates", response_model=AvailableDatesResponse)
def available_dates(
    center_id: int,
    service_id: int,
    db: Session = Depends(get_db),
):
    """Dates from tomorrow to the end of the booking window, closed days excluded."""
    settings = load_capacity_settings(db)
    dates = get_available_dates(db, center_id, service_id, settings=settings)

    return AvailableDatesResponse(
        center_id=center_id,
        service_id=service_id,
        advance_booking_days=settings.advance_booking_days,
        dates=[DateAvailabilityRead.model_validate(d) for d in dates],
    )


@router.get("/available-slots", response_model=AvailableSlotsResponse)
def available_slots(
    center_id: int,
    service_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Slots for one day, with remaining capacity per slot."""
    settings = load_capacity_settings(db)

    today = date.today()
    max_date = today + timedelta(days=settings.advance_booking_days)

    if target_date <= today:
        raise ValidationError("Date must be in the future")
    if target_date > max_date:
        raise ValidationError(
            f"Date cannot be more than {settings.advance_booking_days} days ahead"
        )

    slots = get_slots_for_date(db, center_id, service_id, target_date, settings)

    return AvailableSlotsResponse(
        center_id=center_id,
        service_id=service_id,
        date=target_date,
        slots=[_slot_read(s) for s in slots],
    )


@router.get("/availability", response_model=list[SlotAvailabilityRead])
def availability(
    center_id: int,
    service_id: int,
    date_from: date,
    date_to: date,
    db: Session = Depends(get_db),
):
    """Raw availability over a date range (every active slot, every day)."""
    return [
        _slot_read(s)
        for s in compute_availability(db, center_id, service_id, date_from, date_to)
    ]


# ── Bookings ─────────────────────────────────────────────────────────


@router.post("/", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
def book_appointment(
    data: BookingCreate,
    user_id: int = Depends(get_current_user_id),
    notifier: Notifier | None = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    request = BookingRequest(
        user_id=user_id,
        service_id=data.service_id,
        center_id=data.center_id,
        booked_date=data.date,
        slot_id=data.slot_id,
        user_details=data.user_details.model_dump(exclude_none=True) if data.user_details else {},
    )
    return create_booking(db, request, now=datetime.now(), notifier=notifier)


@router.get("/my", response_model=list[BookingConfirmation])
def my_bookings(
    appointment_status: str | None = Query(None, alias="status"),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return list_user_bookings(db, user_id, status=appointment_status)


@router.get("/{booking_id}/confirmation", response_model=BookingConfirmation)
def booking_confirmation(
    booking_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    booking = get_booking(db, booking_id)
    if booking.appointment.booked_by != user_id:
        raise Forbidden()
    return get_booking_confirmation(db, booking_id)


@router.post("/{booking_id}/cancel", response_model=CancellationRead)
def cancel(
    booking_id: int,
    user_id: int = Depends(get_current_user_id),
    notifier: Notifier | None = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    return cancel_booking(db, booking_id, user_id, notifier=notifier)
