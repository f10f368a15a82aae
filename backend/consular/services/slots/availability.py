# backend/consular/services/slots/availability.py
"""
Slot availability for a (center, service) over a date range.

Read path only: no locks, no writes. Numbers are advisory; the booking
allocator re-checks capacity inside its own transaction.

Capacity per slot:
    total_capacity = max_appointments_per_slot × |qualified counters|
Booked count:
    scheduled appointments at the qualified counters for (date, slot)
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, time, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...config import settings as app_settings
from ...models import Appointments as DBAppointment, VerificationCenters as DBCenter
from ..errors import NotFound, ValidationError
from .config import CapacitySettings, load_capacity_settings
from .counters import get_qualified_counter_ids
from .grid import list_time_slots

logger = logging.getLogger(__name__)

MAX_RANGE_DAYS = 366
DAY_NAMES = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


@dataclass(frozen=True)
class SlotAvailability:
    date: date
    slot_id: int
    start_time: time
    end_time: time
    booked_count: int
    available_count: int
    total_capacity: int
    is_available: bool


@dataclass(frozen=True)
class DateAvailability:
    date: date
    day_of_week: str
    has_availability: bool


def compute_availability(
    db: Session,
    center_id: int,
    service_id: int,
    date_from: date,
    date_to: date,
    settings: CapacitySettings | None = None,
) -> list[SlotAvailability]:
    """
    Availability of every active slot for every date in [date_from, date_to].

    No qualified counters is a valid answer: every slot comes back with
    available_count = 0. No active slots gives an empty list.
    """
    if date_to < date_from:
        raise ValidationError("date_to must not be before date_from")
    if (date_to - date_from).days >= MAX_RANGE_DAYS:
        raise ValidationError(f"Date range cannot exceed {MAX_RANGE_DAYS} days")

    settings = settings or load_capacity_settings(db)

    # Step 1: Grid
    slots = list_time_slots(db, active_only=True)
    if not slots:
        return []

    # Step 2: Qualified counters and per-slot capacity
    counter_ids = get_qualified_counter_ids(db, center_id, service_id)
    total_capacity = settings.max_appointments_per_slot * len(counter_ids)

    # Step 3: Committed bookings grouped by (date, slot)
    booked = _count_scheduled(db, counter_ids, date_from, date_to) if counter_ids else {}

    # Step 4: Combine
    result: list[SlotAvailability] = []
    for day in date_range(date_from, date_to):
        for slot in slots:
            booked_count = booked.get((day, slot.id), 0)
            available = max(0, total_capacity - booked_count)
            result.append(SlotAvailability(
                date=day,
                slot_id=slot.id,
                start_time=slot.start_time,
                end_time=slot.end_time,
                booked_count=booked_count,
                available_count=available,
                total_capacity=total_capacity,
                is_available=available > 0,
            ))

    return result


def get_slots_for_date(
    db: Session,
    center_id: int,
    service_id: int,
    target_date: date,
    settings: CapacitySettings | None = None,
) -> list[SlotAvailability]:
    return compute_availability(db, center_id, service_id, target_date, target_date, settings)


def get_available_dates(
    db: Session,
    center_id: int,
    service_id: int,
    today: date | None = None,
    settings: CapacitySettings | None = None,
    non_operating_weekdays: Iterable[int] | None = None,
) -> list[DateAvailability]:
    """
    Bookable dates: tomorrow .. today + advance_booking_days.

    Non-operating days are skipped entirely (not listed as unavailable).
    """
    settings = settings or load_capacity_settings(db)
    today = today or date.today()

    center = db.get(DBCenter, center_id)
    if not center or not center.is_active:
        raise NotFound("Verification center not found")

    closed = closed_weekdays(center, non_operating_weekdays)
    start = today + timedelta(days=1)
    end = today + timedelta(days=settings.advance_booking_days)

    open_days = {
        entry.date
        for entry in compute_availability(db, center_id, service_id, start, end, settings)
        if entry.is_available
    }

    return [
        DateAvailability(
            date=day,
            day_of_week=day.strftime("%A"),
            has_availability=day in open_days,
        )
        for day in date_range(start, end)
        if day.weekday() not in closed
    ]


def closed_weekdays(
    center: DBCenter,
    non_operating_weekdays: Iterable[int] | None = None,
) -> set[int]:
    """
    Weekdays (0 = Monday) on which the center takes no bookings.

    Global non-operating weekdays (Sunday by default) plus any day the
    center's operating_hours marks as closed:
        {"sun": null} or {"sat": {"closed": true}}
    """
    if non_operating_weekdays is None:
        non_operating_weekdays = app_settings.non_operating_weekdays
    closed = set(non_operating_weekdays)

    try:
        hours = json.loads(center.operating_hours) if center.operating_hours else {}
    except json.JSONDecodeError:
        logger.warning(f"Invalid operating_hours for center {center.id}, ignoring")
        hours = {}

    if not isinstance(hours, dict):
        return closed

    for weekday, day_name in enumerate(DAY_NAMES):
        if day_name not in hours:
            continue
        day_data = hours[day_name]
        if day_data is None or day_data is False:
            closed.add(weekday)
        elif isinstance(day_data, dict) and day_data.get("closed"):
            closed.add(weekday)

    return closed


def date_range(date_start: date, date_end: date) -> list[date]:
    """All dates in [date_start, date_end]."""
    days = []
    current = date_start
    while current <= date_end:
        days.append(current)
        current += timedelta(days=1)
    return days


# ── Database helpers ─────────────────────────────────────────────────────


def _count_scheduled(
    db: Session,
    counter_ids: list[int],
    date_from: date,
    date_to: date,
) -> dict[tuple[date, int], int]:
    """Scheduled appointments per (date, slot) at the given counters."""
    rows = (
        db.query(
            DBAppointment.appointment_date,
            DBAppointment.slot_id,
            func.count(DBAppointment.id),
        )
        .filter(
            DBAppointment.at_counter.in_(counter_ids),
            DBAppointment.appointment_date >= date_from,
            DBAppointment.appointment_date <= date_to,
            DBAppointment.appointment_status == "scheduled",
        )
        .group_by(DBAppointment.appointment_date, DBAppointment.slot_id)
        .all()
    )
    return {(day, slot_id): count for day, slot_id, count in rows}
