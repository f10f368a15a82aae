# backend/consular/services/slots/grid.py
"""
Daily time slot grid.

The grid is a date-independent catalog of [start_time, end_time) intervals
that recur every day. Rules enforced here:
✓ no two active slots overlap
✓ a slot referenced by any appointment is never hard-deleted
"""

import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...database import begin_write
from ...models import Appointments as DBAppointment, TimeSlots as DBTimeSlot
from ..errors import Conflict, NotFound, ValidationError

logger = logging.getLogger(__name__)

MAX_SLOT_MINUTES = 240


def duration_minutes(start: time, end: time) -> int:
    """Length of [start, end) in whole minutes."""
    delta = datetime.combine(date.min, end) - datetime.combine(date.min, start)
    return int(delta.total_seconds() // 60)


def _check_bounds(start: time, end: time) -> None:
    if end <= start:
        raise ValidationError("End time must be after start time")


# ── Read ─────────────────────────────────────────────────────────────


def list_time_slots(
    db: Session,
    active_only: bool = False,
    limit: int | None = None,
    offset: int = 0,
) -> list[DBTimeSlot]:
    q = db.query(DBTimeSlot)
    if active_only:
        q = q.filter(DBTimeSlot.is_active == 1)
    q = q.order_by(DBTimeSlot.start_time.asc(), DBTimeSlot.id.asc()).offset(offset)
    if limit is not None:
        q = q.limit(limit)
    return q.all()


def count_time_slots(db: Session) -> int:
    return db.query(func.count(DBTimeSlot.id)).scalar() or 0


def get_time_slot(db: Session, slot_id: int) -> DBTimeSlot:
    slot = db.get(DBTimeSlot, slot_id)
    if not slot:
        raise NotFound("Time slot not found")
    return slot


def has_conflict(
    db: Session,
    start: time,
    end: time,
    exclude_slot_id: int | None = None,
) -> bool:
    """True if [start, end) overlaps any active slot."""
    q = db.query(DBTimeSlot.id).filter(
        DBTimeSlot.is_active == 1,
        DBTimeSlot.start_time < end,
        DBTimeSlot.end_time > start,
    )
    if exclude_slot_id is not None:
        q = q.filter(DBTimeSlot.id != exclude_slot_id)
    return q.first() is not None


# ── Write ────────────────────────────────────────────────────────────


def create_time_slot(
    db: Session,
    start_time: time,
    end_time: time,
    duration: int | None = None,
    is_active: bool = True,
) -> DBTimeSlot:
    _check_bounds(start_time, end_time)

    begin_write(db)

    if is_active and has_conflict(db, start_time, end_time):
        raise Conflict("Time slot conflicts with existing slot")

    slot = DBTimeSlot(
        start_time=start_time,
        end_time=end_time,
        duration_minutes=duration or duration_minutes(start_time, end_time),
        is_active=1 if is_active else 0,
    )
    db.add(slot)
    db.commit()
    db.refresh(slot)

    logger.info(f"Time slot created: id={slot.id}, {start_time}-{end_time}")
    return slot


def update_time_slot(db: Session, slot_id: int, changes: dict) -> DBTimeSlot:
    """
    Apply a partial update.

    Allowed keys: start_time, end_time, duration_minutes, is_active.
    Duration is recomputed when times change and no duration is given.
    """
    begin_write(db)
    slot = get_time_slot(db, slot_id)

    start = changes.get("start_time") or slot.start_time
    end = changes.get("end_time") or slot.end_time
    active = changes["is_active"] if changes.get("is_active") is not None else bool(slot.is_active)

    _check_bounds(start, end)

    if active and has_conflict(db, start, end, exclude_slot_id=slot.id):
        raise Conflict("Time conflict with another slot")

    times_changed = "start_time" in changes or "end_time" in changes
    slot.start_time = start
    slot.end_time = end
    slot.is_active = 1 if active else 0
    if changes.get("duration_minutes"):
        slot.duration_minutes = changes["duration_minutes"]
    elif times_changed:
        slot.duration_minutes = duration_minutes(start, end)
    slot.updated_at = func.now()

    db.commit()
    db.refresh(slot)
    return slot


def set_time_slot_active(db: Session, slot_id: int, is_active: bool) -> DBTimeSlot:
    begin_write(db)
    slot = get_time_slot(db, slot_id)

    if is_active and not slot.is_active:
        if has_conflict(db, slot.start_time, slot.end_time, exclude_slot_id=slot.id):
            raise Conflict("Time conflict with another slot")

    slot.is_active = 1 if is_active else 0
    slot.updated_at = func.now()
    db.commit()
    db.refresh(slot)
    return slot


def bulk_set_time_slots_active(db: Session, slot_ids: list[int], is_active: bool) -> int:
    """Toggle many slots in one transaction. All or nothing."""
    if not slot_ids:
        raise ValidationError("slot_ids must not be empty")

    try:
        begin_write(db)
        for slot_id in slot_ids:
            slot = get_time_slot(db, slot_id)
            if is_active and not slot.is_active:
                if has_conflict(db, slot.start_time, slot.end_time, exclude_slot_id=slot.id):
                    raise Conflict(f"Time slot {slot_id} conflicts with another slot")
            slot.is_active = 1 if is_active else 0
            slot.updated_at = func.now()
            # Later slots in the batch must see this one as active
            db.flush()
        db.commit()
    except Exception:
        db.rollback()
        raise

    return len(slot_ids)


def delete_time_slot(db: Session, slot_id: int) -> None:
    begin_write(db)
    slot = get_time_slot(db, slot_id)

    referenced = (
        db.query(func.count(DBAppointment.id))
        .filter(DBAppointment.slot_id == slot_id)
        .scalar()
    )
    if referenced:
        raise Conflict("Cannot delete time slot with existing appointments. Deactivate it instead.")

    db.delete(slot)
    db.commit()
    logger.info(f"Time slot deleted: id={slot_id}")


def bulk_create_time_slots(
    db: Session,
    start: time,
    end: time,
    duration: int,
) -> list[DBTimeSlot]:
    """
    Generate back-to-back slots of `duration` minutes inside [start, end).

    Slots that already exist, or that would overlap an active slot,
    are skipped. A trailing remainder shorter than `duration` is dropped.
    """
    if duration <= 0 or duration > MAX_SLOT_MINUTES:
        raise ValidationError(f"Duration must be 1-{MAX_SLOT_MINUTES} minutes")
    _check_bounds(start, end)

    begin_write(db)
    created: list[DBTimeSlot] = []
    cursor = datetime.combine(date.min, start)
    limit = datetime.combine(date.min, end)
    step = timedelta(minutes=duration)

    while cursor + step <= limit:
        slot_start = cursor.time()
        slot_end = (cursor + step).time()
        cursor += step

        exists = (
            db.query(DBTimeSlot.id)
            .filter(DBTimeSlot.start_time == slot_start, DBTimeSlot.end_time == slot_end)
            .first()
        )
        if exists or has_conflict(db, slot_start, slot_end):
            continue

        slot = DBTimeSlot(
            start_time=slot_start,
            end_time=slot_end,
            duration_minutes=duration,
            is_active=1,
        )
        db.add(slot)
        db.flush()
        created.append(slot)

    db.commit()
    for slot in created:
        db.refresh(slot)

    logger.info(f"Bulk created {len(created)} time slots ({start}-{end}, {duration} min)")
    return created
