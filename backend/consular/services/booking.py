# backend/consular/services/booking.py
"""
Booking allocator.

create_booking runs as one transaction:
1. Validate date window and referenced records
2. Apply the optional profile patch (savepoint, best effort)
3. Lock qualified counters and pick one with spare capacity
4. Insert appointment (scheduled) + paired booking row
5. Commit

Only after the commit are the confirmation event and the audit record
emitted. Neither can undo or fail the booking.

Concurrency: the capacity count happens after the qualified counter rows
are locked (SELECT ... FOR UPDATE), so two allocators for the same slot
run one after the other. SQLite has no row locks; there the
allocator opens its transaction through begin_write() (BEGIN IMMEDIATE,
see database.py), which gives the same ordering for the whole database.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import begin_write
from ..models import (
    Appointments as DBAppointment,
    Bookings as DBBooking,
    Services as DBService,
    TimeSlots as DBTimeSlot,
    Users as DBUser,
    VerificationCenters as DBCenter,
)
from .audit import log_admin_action
from .errors import BookingError, Conflict, NoCapacity, NotFound, PersistenceError, ValidationError
from .events import Notifier, notify_booking_confirmed
from .slots.assignment import assign_counter
from .slots.availability import closed_weekdays
from .slots.config import CapacitySettings, load_capacity_settings

logger = logging.getLogger(__name__)

# Profile fields a citizen may update together with a booking
USER_DETAIL_FIELDS = (
    "gender",
    "phone_no",
    "date_of_birth",
    "nationality",
    "passport_no",
    "passport_expiry",
)


@dataclass(frozen=True)
class BookingRequest:
    user_id: int
    service_id: int
    center_id: int
    booked_date: date
    slot_id: int
    user_details: dict = field(default_factory=dict)


@dataclass
class BookingResult:
    booking_id: int
    appointment_id: int
    counter_id: int
    confirmation: dict


def create_booking(
    db: Session,
    request: BookingRequest,
    now: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
    settings: Optional[CapacitySettings] = None,
) -> BookingResult:
    """
    Book one unit of capacity for (center, service, date, slot).

    Raises:
        ValidationError: date outside the window, inactive/missing records
        NoCapacity: every qualified counter is full, or none exists
        Conflict: a constraint rejected the insert
        PersistenceError: any other database failure
    """
    now = now or datetime.now()

    try:
        begin_write(db)
        settings = settings or load_capacity_settings(db)

        # Step 1: Validate
        user = _validate_request(db, request, now.date(), settings)

        # Step 2: Profile patch (never fails the booking)
        if request.user_details:
            _apply_user_details(db, user, request.user_details)

        # Step 3: Counter assignment under lock
        counter_id = assign_counter(
            db,
            request.center_id,
            request.service_id,
            request.booked_date,
            request.slot_id,
            settings,
            lock=True,
        )
        if counter_id is None:
            raise NoCapacity()

        # Step 4: Appointment + booking
        appointment = DBAppointment(
            booked_by=request.user_id,
            booked_for_service=request.service_id,
            at_counter=counter_id,
            appointment_date=request.booked_date,
            slot_id=request.slot_id,
            appointment_status="scheduled",
        )
        db.add(appointment)
        db.flush()

        booking = DBBooking(
            booked_date=request.booked_date,
            booked_slot=request.slot_id,
            appointment_id=appointment.id,
        )
        db.add(booking)
        db.flush()

        confirmation = build_confirmation(booking)

        # Step 5: Commit
        db.commit()

    except BookingError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Booking rejected by constraint: user_id={request.user_id}, {e.orig}")
        raise Conflict("Booking conflicts with an existing record") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Booking transaction failed: user_id={request.user_id}")
        raise PersistenceError() from e

    logger.info(
        f"Booking created: booking_id={confirmation['booking_id']}, "
        f"appointment_id={confirmation['appointment_id']}, counter_id={counter_id}, "
        f"date={request.booked_date}, slot_id={request.slot_id}"
    )

    notify_booking_confirmed(
        recipient_email=confirmation["user"]["email"],
        appointment_id=confirmation["appointment_id"],
        booked_date=confirmation["booked_date"],
        slot=f"{confirmation['slot']['start_time']}-{confirmation['slot']['end_time']}",
        service_title=confirmation["service"]["title"],
        center_name=confirmation["center"]["name"],
        notifier=notifier,
    )
    log_admin_action(
        db,
        actor_id=request.user_id,
        actor_type="user",
        action="BOOKING_CREATED",
        details={
            "appointment_id": confirmation["appointment_id"],
            "service_id": request.service_id,
            "center_id": request.center_id,
            "date": request.booked_date.isoformat(),
            "slot_id": request.slot_id,
        },
        resource_type="booking",
        resource_id=confirmation["booking_id"],
    )

    return BookingResult(
        booking_id=confirmation["booking_id"],
        appointment_id=confirmation["appointment_id"],
        counter_id=counter_id,
        confirmation=confirmation,
    )


# ── Read helpers ─────────────────────────────────────────────────────────


def get_booking(db: Session, booking_id: int) -> DBBooking:
    booking = db.get(DBBooking, booking_id)
    if not booking:
        raise NotFound("Booking not found")
    return booking


def get_booking_confirmation(db: Session, booking_id: int) -> dict:
    return build_confirmation(get_booking(db, booking_id))


def build_confirmation(booking: DBBooking) -> dict:
    """Confirmation snapshot: booking, slot, service, counter, center, user."""
    appointment = booking.appointment
    slot = booking.slot
    service = appointment.service
    counter = appointment.counter
    center = counter.center
    user = appointment.user

    return {
        "booking_id": booking.id,
        "booked_date": booking.booked_date.isoformat(),
        "appointment_id": appointment.id,
        "appointment_status": appointment.appointment_status,
        "user_id": user.id,
        "slot": {
            "id": slot.id,
            "start_time": slot.start_time.strftime("%H:%M"),
            "end_time": slot.end_time.strftime("%H:%M"),
            "duration_minutes": slot.duration_minutes,
        },
        "service": {
            "id": service.id,
            "title": service.title,
            "category": service.category,
            "processing_time": service.processing_time,
            "fees": _load_json(service.fees, {}),
            "required_documents": _load_json(service.required_documents, []),
        },
        "counter": {
            "id": counter.id,
            "name": counter.counter_name,
        },
        "center": {
            "id": center.id,
            "name": center.name,
            "address": center.address,
            "city": center.city,
            "state": center.state,
            "country": center.country,
            "phone": center.phone,
            "email": center.email,
        },
        "user": {
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
            "phone_no": user.phone_no,
            "passport_no": user.passport_no,
        },
    }


def list_user_bookings(
    db: Session,
    user_id: int,
    status: Optional[str] = None,
) -> list[dict]:
    """Bookings of one citizen, newest appointment first."""
    q = (
        db.query(DBBooking)
        .join(DBAppointment, DBBooking.appointment_id == DBAppointment.id)
        .join(DBTimeSlot, DBBooking.booked_slot == DBTimeSlot.id)
        .filter(DBAppointment.booked_by == user_id)
    )
    if status:
        q = q.filter(DBAppointment.appointment_status == status)

    bookings = q.order_by(DBBooking.booked_date.desc(), DBTimeSlot.start_time.desc()).all()
    return [build_confirmation(b) for b in bookings]


# ── Validation ───────────────────────────────────────────────────────────


def _validate_request(
    db: Session,
    request: BookingRequest,
    today: date,
    settings: CapacitySettings,
) -> DBUser:
    """Check window and references. Returns the booking user."""
    max_date = today + timedelta(days=settings.advance_booking_days)

    if request.booked_date <= today:
        raise ValidationError("Selected date must be in the future")
    if request.booked_date > max_date:
        raise ValidationError(
            f"Selected date exceeds the maximum booking window of {settings.advance_booking_days} days"
        )

    user = db.get(DBUser, request.user_id)
    if not user or not user.is_active:
        raise ValidationError("User not found or inactive")

    service = db.get(DBService, request.service_id)
    if not service or not service.is_active:
        raise ValidationError("Service not found or inactive")

    center = db.get(DBCenter, request.center_id)
    if not center or not center.is_active:
        raise ValidationError("Verification center not found or inactive")

    slot = db.get(DBTimeSlot, request.slot_id)
    if not slot or not slot.is_active:
        raise ValidationError("Time slot not found or inactive")

    if request.booked_date.weekday() in closed_weekdays(center):
        raise ValidationError(
            f"The center does not operate on {request.booked_date.strftime('%A')}"
        )

    return user


def _apply_user_details(db: Session, user: DBUser, details: dict) -> None:
    """
    Merge profile fields inside a savepoint.

    Failure rolls back only the savepoint; the booking carries on.
    """
    changes = {
        k: v for k, v in details.items()
        if k in USER_DETAIL_FIELDS and v is not None
    }
    if not changes:
        return

    try:
        with db.begin_nested():
            for name, value in changes.items():
                setattr(user, name, value)
            user.updated_at = func.now()
    except (SQLAlchemyError, ValueError, TypeError) as e:
        logger.warning(f"Profile update skipped for user_id={user.id}: {e}")
        return

    logger.info(f"Profile updated with booking: user_id={user.id}, fields={sorted(changes)}")


def _load_json(value: Optional[str], default):
    if not value:
        return default
    try:
        return json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return default
