# backend/consular/schemas/appointments.py

from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel


AppointmentStatus = Literal["scheduled", "completed", "cancelled", "no-show"]


class AppointmentRead(BaseModel):
    id: int
    booked_by: int
    booked_for_service: int
    at_counter: int
    appointment_date: date
    slot_id: int
    appointment_status: str

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AppointmentListResponse(BaseModel):
    items: list[AppointmentRead]
    total: int
    limit: int
    offset: int


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentStats(BaseModel):
    total: int
    scheduled: int
    completed: int
    cancelled: int
    no_show: int
    unique_users: int
    unique_services: int
