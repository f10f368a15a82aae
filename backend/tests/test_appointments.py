"""Tests for appointment queries and wizard lookups."""

from datetime import timedelta

from consular.models import Appointments, Counters, Services, VerificationCenters
from consular.services.appointments import (
    AppointmentFilters,
    appointment_stats,
    list_active_services,
    list_appointments,
    list_centers_for_service,
)

from conftest import WEDNESDAY


def _seed(db, world):
    rows = [
        (world.user_id, 0, 0, WEDNESDAY, "scheduled"),
        (world.other_user_id, 1, 0, WEDNESDAY, "scheduled"),
        (world.user_id, 0, 1, WEDNESDAY, "completed"),
        (world.user_id, 0, 0, WEDNESDAY + timedelta(days=1), "cancelled"),
        (world.other_user_id, 1, 1, WEDNESDAY + timedelta(days=2), "no-show"),
    ]
    db.add_all([
        Appointments(
            booked_by=user_id,
            booked_for_service=world.service_id,
            at_counter=world.counter_ids[counter],
            appointment_date=day,
            slot_id=world.slot_ids[slot],
            appointment_status=status,
        )
        for user_id, counter, slot, day, status in rows
    ])
    db.commit()


class TestListAppointments:
    def test_no_filters(self, db, world):
        _seed(db, world)
        items, total = list_appointments(db)
        assert total == 5
        assert items[0].appointment_date == WEDNESDAY + timedelta(days=2)

    def test_status_and_user(self, db, world):
        _seed(db, world)
        items, total = list_appointments(db, AppointmentFilters(status="scheduled", user_id=world.user_id))
        assert total == 1
        assert items[0].at_counter == world.counter_ids[0]

    def test_center_and_date_range(self, db, world):
        _seed(db, world)
        filters = AppointmentFilters(
            center_id=world.center_id,
            date_from=WEDNESDAY,
            date_to=WEDNESDAY + timedelta(days=1),
        )
        _, total = list_appointments(db, filters)
        assert total == 4

    def test_counter_filter_and_paging(self, db, world):
        _seed(db, world)
        items, total = list_appointments(
            db, AppointmentFilters(counter_id=world.counter_ids[0]), limit=2, offset=0,
        )
        assert total == 3
        assert len(items) == 2

    def test_other_center_matches_nothing(self, db, world):
        _seed(db, world)
        _, total = list_appointments(db, AppointmentFilters(center_id=world.center_id + 100))
        assert total == 0


def test_stats(db, world):
    _seed(db, world)
    stats = appointment_stats(db)

    assert stats == {
        "total": 5,
        "scheduled": 2,
        "completed": 1,
        "cancelled": 1,
        "no_show": 1,
        "unique_users": 2,
        "unique_services": 1,
    }


def test_stats_by_date(db, world):
    _seed(db, world)
    stats = appointment_stats(db, center_id=world.center_id, date_from=WEDNESDAY, date_to=WEDNESDAY)
    assert stats["total"] == 3
    assert stats["scheduled"] == 2


def test_active_services(db, world):
    db.get(Services, world.uncovered_service_id).is_active = 0
    db.commit()

    assert [s.id for s in list_active_services(db)] == [world.service_id]


def test_centers_for_service(db, world):
    db.get(Counters, world.counter_ids[1]).is_active = 0
    closed = VerificationCenters(name="Closed Office", city="Capital", country="Country", is_active=0)
    closed.services.append(db.get(Services, world.service_id))
    db.add(closed)
    db.commit()

    centers = list_centers_for_service(db, world.service_id)

    assert len(centers) == 1
    assert centers[0]["id"] == world.center_id
    assert centers[0]["counter_count"] == 1
