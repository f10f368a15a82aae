# backend/consular/routers/admin_appointments.py
"""
Admin appointment management.

GET   /admin/appointments              - filtered list
GET   /admin/appointments/stats        - totals per status
PATCH /admin/appointments/{id}/status  - manual status change (audited)
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import get_current_admin_id, get_notifier
from ..schemas.appointments import (
    AppointmentListResponse,
    AppointmentRead,
    AppointmentStats,
    AppointmentStatusUpdate,
)
from ..services.appointments import AppointmentFilters, appointment_stats, list_appointments
from ..services.cancellation import update_appointment_status
from ..services.events import Notifier

router = APIRouter(prefix="/admin/appointments", tags=["admin: appointments"])


@router.get("/", response_model=AppointmentListResponse)
def list_all(
    appointment_status: Optional[str] = Query(None, alias="status"),
    center_id: Optional[int] = None,
    service_id: Optional[int] = None,
    counter_id: Optional[int] = None,
    user_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: int = 50,
    offset: int = 0,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    filters = AppointmentFilters(
        status=appointment_status,
        center_id=center_id,
        service_id=service_id,
        counter_id=counter_id,
        user_id=user_id,
        date_from=date_from,
        date_to=date_to,
    )
    items, total = list_appointments(db, filters, limit=limit, offset=offset)
    return AppointmentListResponse(
        items=[AppointmentRead.model_validate(a) for a in items],
        total=total,
        limit=min(limit, 200),
        offset=offset,
    )


@router.get("/stats", response_model=AppointmentStats)
def stats(
    center_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    return appointment_stats(db, center_id=center_id, date_from=date_from, date_to=date_to)


@router.patch("/{id}/status", response_model=AppointmentRead)
def set_status(
    id: int,
    data: AppointmentStatusUpdate,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
    notifier: Notifier | None = Depends(get_notifier),
):
    return update_appointment_status(db, id, data.status, admin_id, notifier=notifier)
