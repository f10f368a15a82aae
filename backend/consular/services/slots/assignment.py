# backend/consular/services/slots/assignment.py
"""
Counter assignment for a new booking.

Scans qualified counters in ascending id order and returns the first one
with fewer than max_appointments_per_slot scheduled appointments at the
exact (date, slot). Lowest id wins ties, so load is not balanced across
counters; this matches the behaviour clients already see.
"""

from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Appointments as DBAppointment
from .config import CapacitySettings
from .counters import get_qualified_counters, lock_qualified_counters


def assign_counter(
    db: Session,
    center_id: int,
    service_id: int,
    target_date: date,
    slot_id: int,
    settings: CapacitySettings,
    lock: bool = True,
) -> int | None:
    """
    Pick a counter with spare capacity.

    With lock=True the qualified counter rows are locked first, so the
    counts below cannot change until the caller's transaction ends.

    Returns:
        counter id, or None when every qualified counter is full
        (or no counter handles the service).
    """
    if lock:
        counters = lock_qualified_counters(db, center_id, service_id)
    else:
        counters = get_qualified_counters(db, center_id, service_id)

    for counter in counters:
        booked = count_scheduled_at_counter(db, counter.id, target_date, slot_id)
        if booked < settings.max_appointments_per_slot:
            return counter.id

    return None


def count_scheduled_at_counter(
    db: Session,
    counter_id: int,
    target_date: date,
    slot_id: int,
) -> int:
    return (
        db.query(func.count(DBAppointment.id))
        .filter(
            DBAppointment.at_counter == counter_id,
            DBAppointment.appointment_date == target_date,
            DBAppointment.slot_id == slot_id,
            DBAppointment.appointment_status == "scheduled",
        )
        .scalar()
        or 0
    )
