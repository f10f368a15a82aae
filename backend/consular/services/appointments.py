# backend/consular/services/appointments.py
"""
Appointment queries for the admin panel and the booking wizard.

Filters are a fixed set of typed predicates turned into SQLAlchemy
expressions; nothing is concatenated into SQL.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from ..models import (
    Appointments as DBAppointment,
    Counters as DBCounter,
    Services as DBService,
    VerificationCenters as DBCenter,
    t_center_services,
)


@dataclass
class AppointmentFilters:
    status: Optional[str] = None
    center_id: Optional[int] = None
    service_id: Optional[int] = None
    counter_id: Optional[int] = None
    user_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def apply(self, q: Query) -> Query:
        if self.status:
            q = q.filter(DBAppointment.appointment_status == self.status)
        if self.center_id:
            q = q.join(DBCounter, DBAppointment.at_counter == DBCounter.id).filter(
                DBCounter.center_id == self.center_id
            )
        if self.service_id:
            q = q.filter(DBAppointment.booked_for_service == self.service_id)
        if self.counter_id:
            q = q.filter(DBAppointment.at_counter == self.counter_id)
        if self.user_id:
            q = q.filter(DBAppointment.booked_by == self.user_id)
        if self.date_from:
            q = q.filter(DBAppointment.appointment_date >= self.date_from)
        if self.date_to:
            q = q.filter(DBAppointment.appointment_date <= self.date_to)
        return q


def list_appointments(
    db: Session,
    filters: Optional[AppointmentFilters] = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[DBAppointment], int]:
    """Filtered page of appointments plus the total match count."""
    filters = filters or AppointmentFilters()
    q = filters.apply(db.query(DBAppointment))

    total = q.count()
    items = (
        q.order_by(DBAppointment.appointment_date.desc(), DBAppointment.id.desc())
        .offset(offset)
        .limit(min(limit, 200))
        .all()
    )
    return items, total


def appointment_stats(
    db: Session,
    center_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> dict:
    """Totals per status plus unique users and services."""
    filters = AppointmentFilters(center_id=center_id, date_from=date_from, date_to=date_to)

    rows = (
        filters.apply(db.query(DBAppointment.appointment_status, func.count(DBAppointment.id)))
        .group_by(DBAppointment.appointment_status)
        .all()
    )
    by_status = {status: count for status, count in rows}

    unique_users, unique_services = filters.apply(
        db.query(
            func.count(func.distinct(DBAppointment.booked_by)),
            func.count(func.distinct(DBAppointment.booked_for_service)),
        )
    ).one()

    return {
        "total": sum(by_status.values()),
        "scheduled": by_status.get("scheduled", 0),
        "completed": by_status.get("completed", 0),
        "cancelled": by_status.get("cancelled", 0),
        "no_show": by_status.get("no-show", 0),
        "unique_users": unique_users or 0,
        "unique_services": unique_services or 0,
    }


def list_active_services(db: Session) -> list[DBService]:
    return (
        db.query(DBService)
        .filter(DBService.is_active == 1)
        .order_by(DBService.display_order.asc(), DBService.title.asc())
        .all()
    )


def list_centers_for_service(db: Session, service_id: int) -> list[dict]:
    """Active centers offering the service, each with its active counter count."""
    counter_count = (
        db.query(func.count(DBCounter.id))
        .filter(DBCounter.center_id == DBCenter.id, DBCounter.is_active == 1)
        .correlate(DBCenter)
        .scalar_subquery()
    )

    rows = (
        db.query(DBCenter, counter_count.label("counter_count"))
        .join(t_center_services, DBCenter.id == t_center_services.c.center_id)
        .filter(
            t_center_services.c.service_id == service_id,
            DBCenter.is_active == 1,
        )
        .order_by(DBCenter.display_order.asc(), DBCenter.name.asc())
        .all()
    )

    return [
        {
            "id": center.id,
            "name": center.name,
            "address": center.address,
            "city": center.city,
            "state": center.state,
            "country": center.country,
            "postal_code": center.postal_code,
            "phone": center.phone,
            "email": center.email,
            "latitude": center.latitude,
            "longitude": center.longitude,
            "operating_hours": center.operating_hours,
            "counter_count": count or 0,
        }
        for center, count in rows
    ]
