# backend/consular/services/cancellation.py
"""
Cancellation and appointment status transitions.

✓ cancel_booking: citizen path (ownership + lead time enforced)
✓ cancel_appointment: same, addressed by appointment id
✓ update_appointment_status: admin path (no ownership, no lead time)

Cancelling is a single-row update of appointment_status. Capacity is
released implicitly: availability and assignment only count `scheduled`.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import begin_write
from ..models import (
    APPOINTMENT_STATUSES,
    Appointments as DBAppointment,
    Bookings as DBBooking,
    Counters as DBCounter,
)
from .audit import log_admin_action
from .errors import (
    AlreadyCancelled,
    BookingError,
    Forbidden,
    NoCapacity,
    NotFound,
    PersistenceError,
    TooLateToCancel,
    ValidationError,
)
from .events import Notifier, notify_booking_cancelled
from .slots.assignment import count_scheduled_at_counter
from .slots.config import load_capacity_settings

logger = logging.getLogger(__name__)


@dataclass
class CancellationResult:
    booking_id: int
    appointment_id: int
    appointment_status: str
    hours_until_appointment: float


def hours_until(appointment: DBAppointment, now: datetime) -> float:
    """Hours from `now` to the appointment start (negative once it has passed)."""
    starts_at = datetime.combine(appointment.appointment_date, appointment.slot.start_time)
    return (starts_at - now).total_seconds() / 3600


def cancel_booking(
    db: Session,
    booking_id: int,
    requesting_user_id: int,
    now: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
) -> CancellationResult:
    """
    Cancel a citizen's own booking.

    Raises:
        NotFound: no such booking
        Forbidden: booking belongs to another user
        AlreadyCancelled: appointment is already cancelled
        TooLateToCancel: less than cancellation_hours before the start
    """
    now = now or datetime.now()

    try:
        begin_write(db)

        booking = db.get(DBBooking, booking_id)
        if not booking:
            raise NotFound("Booking not found")

        appointment = booking.appointment
        if appointment.booked_by != requesting_user_id:
            raise Forbidden("You can only cancel your own bookings")

        if appointment.appointment_status == "cancelled":
            raise AlreadyCancelled()

        settings = load_capacity_settings(db)
        remaining = hours_until(appointment, now)
        if remaining < settings.cancellation_hours:
            raise TooLateToCancel(
                f"Cancellations must be made at least {settings.cancellation_hours} hours "
                f"before the appointment"
            )

        slot_time = appointment.slot.start_time.strftime("%H:%M")
        booked_date = appointment.appointment_date.isoformat()

        appointment.appointment_status = "cancelled"
        appointment.updated_at = func.now()
        db.commit()
    except BookingError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Cancellation failed: booking_id={booking_id}")
        raise PersistenceError() from e

    logger.info(
        f"Booking cancelled: booking_id={booking_id}, appointment_id={appointment.id}, "
        f"user_id={requesting_user_id}, hours_before={remaining:.1f}"
    )

    notify_booking_cancelled(
        appointment_id=appointment.id,
        booked_date=booked_date,
        slot_time=slot_time,
        notifier=notifier,
    )
    log_admin_action(
        db,
        actor_id=requesting_user_id,
        actor_type="user",
        action="BOOKING_CANCELLED",
        details={
            "appointment_id": appointment.id,
            "date": booked_date,
            "time": slot_time,
        },
        resource_type="booking",
        resource_id=booking_id,
    )

    return CancellationResult(
        booking_id=booking_id,
        appointment_id=appointment.id,
        appointment_status="cancelled",
        hours_until_appointment=round(remaining, 2),
    )


def cancel_appointment(
    db: Session,
    appointment_id: int,
    requesting_user_id: int,
    now: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
) -> CancellationResult:
    appointment = db.get(DBAppointment, appointment_id)
    if not appointment or not appointment.booking:
        raise NotFound("Appointment not found")

    return cancel_booking(
        db,
        appointment.booking.id,
        requesting_user_id,
        now=now,
        notifier=notifier,
    )


# ── Admin transitions ────────────────────────────────────────────────────


def update_appointment_status(
    db: Session,
    appointment_id: int,
    status: str,
    actor_id: int,
    notifier: Optional[Notifier] = None,
) -> DBAppointment:
    """
    Set any status from the admin panel.

    Ownership and lead time are not checked. Moving an appointment back to
    `scheduled` needs a free unit at its counter, checked under lock.
    Cancelling sends the same booking_cancelled notification as the
    citizen path.
    """
    if status not in APPOINTMENT_STATUSES:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(APPOINTMENT_STATUSES)}"
        )

    try:
        begin_write(db)

        appointment = db.get(DBAppointment, appointment_id)
        if not appointment:
            raise NotFound("Appointment not found")

        old_status = appointment.appointment_status
        if old_status == status:
            db.commit()
            return appointment

        if status == "scheduled":
            _ensure_counter_capacity(db, appointment)

        appointment.appointment_status = status
        appointment.updated_at = func.now()
        db.commit()
    except BookingError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Status update failed: appointment_id={appointment_id}")
        raise PersistenceError() from e

    db.refresh(appointment)
    logger.info(
        f"Appointment status updated: id={appointment_id}, {old_status} → {status}, "
        f"admin_id={actor_id}"
    )

    if status == "cancelled":
        notify_booking_cancelled(
            appointment_id=appointment.id,
            booked_date=appointment.appointment_date.isoformat(),
            slot_time=appointment.slot.start_time.strftime("%H:%M"),
            notifier=notifier,
        )

    log_admin_action(
        db,
        actor_id=actor_id,
        action="APPOINTMENT_STATUS_UPDATE",
        details={
            "appointment_id": appointment_id,
            "old_status": old_status,
            "new_status": status,
        },
        resource_type="appointment",
        resource_id=appointment_id,
    )

    return appointment


def _ensure_counter_capacity(db: Session, appointment: DBAppointment) -> None:
    settings = load_capacity_settings(db)

    # Lock the counter row so a concurrent allocator waits for this check
    db.query(DBCounter).filter(DBCounter.id == appointment.at_counter).with_for_update().one()

    booked = count_scheduled_at_counter(
        db,
        appointment.at_counter,
        appointment.appointment_date,
        appointment.slot_id,
    )
    if booked >= settings.max_appointments_per_slot:
        raise NoCapacity("The counter has no free capacity left for this slot")
