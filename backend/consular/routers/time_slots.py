# backend/consular/routers/time_slots.py
# Admin: daily slot grid + capacity settings.
# DELETE is blocked once a slot has appointments (deactivate instead).
# Every mutation is written to admin_logs.

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import get_current_admin_id
from ..schemas.time_slots import (
    BulkCreateRequest,
    BulkCreateResponse,
    BulkToggleRequest,
    BulkToggleResponse,
    CapacitySettingsRead,
    CapacitySettingsUpdate,
    TimeSlotCreate,
    TimeSlotListResponse,
    TimeSlotRead,
    TimeSlotToggle,
    TimeSlotUpdate,
)
from ..services.audit import log_admin_action
from ..services.slots import CapacitySettings, load_capacity_settings, save_capacity_settings
from ..services.slots.grid import (
    bulk_create_time_slots,
    bulk_set_time_slots_active,
    count_time_slots,
    create_time_slot,
    delete_time_slot,
    get_time_slot,
    list_time_slots,
    set_time_slot_active,
    update_time_slot,
)

router = APIRouter(prefix="/admin/time-slots", tags=["admin: time slots"])


# ── Capacity settings ────────────────────────────────────────────────


@router.get("/settings", response_model=CapacitySettingsRead)
def get_settings(
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    return load_capacity_settings(db)


@router.put("/settings", response_model=CapacitySettingsRead)
def update_settings(
    data: CapacitySettingsUpdate,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    current = load_capacity_settings(db).to_dict()
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    settings = save_capacity_settings(db, CapacitySettings(**{**current, **changes}))

    log_admin_action(
        db,
        actor_id=admin_id,
        action="APPOINTMENT_SETTINGS_UPDATE",
        details={"old": current, "new": settings.to_dict()},
        resource_type="system_config",
    )
    return settings


# ── Grid ─────────────────────────────────────────────────────────────


@router.get("/", response_model=TimeSlotListResponse)
def list_slots(
    active_only: bool = False,
    limit: int = 100,
    offset: int = 0,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    limit = min(max(limit, 1), 500)
    return TimeSlotListResponse(
        items=list_time_slots(db, active_only=active_only, limit=limit, offset=offset),
        total=count_time_slots(db),
        limit=limit,
        offset=offset,
    )


@router.post("/", response_model=TimeSlotRead, status_code=status.HTTP_201_CREATED)
def create_slot(
    data: TimeSlotCreate,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    slot = create_time_slot(
        db,
        data.start_time,
        data.end_time,
        duration=data.duration_minutes,
        is_active=data.is_active,
    )
    log_admin_action(
        db,
        actor_id=admin_id,
        action="TIME_SLOT_CREATE",
        details={"start_time": data.start_time, "end_time": data.end_time},
        resource_type="time_slot",
        resource_id=slot.id,
    )
    return slot


@router.post("/bulk-toggle", response_model=BulkToggleResponse)
def bulk_toggle(
    data: BulkToggleRequest,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    updated = bulk_set_time_slots_active(db, data.slot_ids, data.is_active)
    log_admin_action(
        db,
        actor_id=admin_id,
        action="TIME_SLOT_BULK_TOGGLE",
        details={"slot_ids": data.slot_ids, "is_active": data.is_active},
        resource_type="time_slot",
    )
    return BulkToggleResponse(updated=updated, is_active=data.is_active)


@router.post("/bulk-create", response_model=BulkCreateResponse, status_code=status.HTTP_201_CREATED)
def bulk_create(
    data: BulkCreateRequest,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    created = bulk_create_time_slots(db, data.start_time, data.end_time, data.duration_minutes)
    log_admin_action(
        db,
        actor_id=admin_id,
        action="TIME_SLOT_BULK_CREATE",
        details={
            "start_time": data.start_time,
            "end_time": data.end_time,
            "duration_minutes": data.duration_minutes,
            "created": len(created),
        },
        resource_type="time_slot",
    )
    return BulkCreateResponse(
        created_count=len(created),
        slots=[TimeSlotRead.model_validate(s) for s in created],
    )


@router.get("/{id}", response_model=TimeSlotRead)
def get_slot(
    id: int,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    return get_time_slot(db, id)


@router.patch("/{id}", response_model=TimeSlotRead)
def update_slot(
    id: int,
    data: TimeSlotUpdate,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    changes = data.model_dump(exclude_unset=True)
    slot = update_time_slot(db, id, changes)
    log_admin_action(
        db,
        actor_id=admin_id,
        action="TIME_SLOT_UPDATE",
        details=changes,
        resource_type="time_slot",
        resource_id=id,
    )
    return slot


@router.post("/{id}/toggle", response_model=TimeSlotRead)
def toggle_slot(
    id: int,
    data: TimeSlotToggle,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    slot = set_time_slot_active(db, id, data.is_active)
    log_admin_action(
        db,
        actor_id=admin_id,
        action="TIME_SLOT_TOGGLE",
        details={"is_active": data.is_active},
        resource_type="time_slot",
        resource_id=id,
    )
    return slot


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_slot(
    id: int,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    delete_time_slot(db, id)
    log_admin_action(
        db,
        actor_id=admin_id,
        action="TIME_SLOT_DELETE",
        resource_type="time_slot",
        resource_id=id,
    )
