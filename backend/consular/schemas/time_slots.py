# backend/consular/schemas/time_slots.py
"""
Pydantic schemas for the admin time slot grid and capacity settings.
"""

from datetime import datetime, time
from typing import Optional
from pydantic import BaseModel, Field


class TimeSlotCreate(BaseModel):
    start_time: time
    end_time: time
    duration_minutes: Optional[int] = Field(default=None, ge=1, le=240)
    is_active: bool = True


class TimeSlotUpdate(BaseModel):
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    duration_minutes: Optional[int] = Field(default=None, ge=1, le=240)
    is_active: Optional[bool] = None


class TimeSlotRead(BaseModel):
    id: int
    start_time: time
    end_time: time
    duration_minutes: int
    is_active: bool

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TimeSlotListResponse(BaseModel):
    items: list[TimeSlotRead]
    total: int
    limit: int
    offset: int


class TimeSlotToggle(BaseModel):
    is_active: bool


class BulkToggleRequest(BaseModel):
    slot_ids: list[int] = Field(min_length=1)
    is_active: bool


class BulkToggleResponse(BaseModel):
    updated: int
    is_active: bool


class BulkCreateRequest(BaseModel):
    """Generate back-to-back slots inside [start_time, end_time)."""
    start_time: time
    end_time: time
    duration_minutes: int = Field(ge=1, le=240)


class BulkCreateResponse(BaseModel):
    created_count: int
    slots: list[TimeSlotRead]


class CapacitySettingsRead(BaseModel):
    slot_duration_minutes: int
    max_appointments_per_slot: int
    advance_booking_days: int
    cancellation_hours: int

    model_config = {"from_attributes": True}


class CapacitySettingsUpdate(BaseModel):
    """Partial update. Omitted fields keep their current value."""
    slot_duration_minutes: Optional[int] = Field(default=None, ge=1, le=240)
    max_appointments_per_slot: Optional[int] = Field(default=None, ge=1)
    advance_booking_days: Optional[int] = Field(default=None, ge=1, le=365)
    cancellation_hours: Optional[int] = Field(default=None, ge=0)
