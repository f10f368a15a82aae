"""HTTP surface: citizen booking flow and admin endpoints."""

from datetime import date, timedelta

import pytest

from conftest import admin_headers, bookable_date, user_headers


def _payload(world, day=None, slot_index=0, **extra):
    return {
        "service_id": world.service_id,
        "center_id": world.center_id,
        "date": (day or bookable_date()).isoformat(),
        "slot_id": world.slot_ids[slot_index],
        **extra,
    }


# =============================================================================
# Auth
# =============================================================================

class TestIdentityHeaders:
    def test_booking_without_user_header(self, client, world):
        r = client.post("/booking/", json=_payload(world))
        assert r.status_code == 401

    def test_malformed_user_header(self, client, world):
        r = client.post("/booking/", json=_payload(world), headers={"X-User-ID": "abc"})
        assert r.status_code == 401

    def test_admin_endpoint_without_admin_header(self, client, world):
        r = client.get("/admin/time-slots/", headers=user_headers(world.user_id))
        assert r.status_code == 401


# =============================================================================
# Citizen wizard
# =============================================================================

class TestWizard:
    def test_services_and_centers(self, client, world):
        services = client.get("/booking/services").json()
        assert {s["id"] for s in services} == {world.service_id, world.uncovered_service_id}

        centers = client.get(f"/booking/centers/{world.service_id}").json()
        assert centers[0]["id"] == world.center_id
        assert centers[0]["counter_count"] == 2

    def test_public_settings(self, client, world):
        body = client.get("/booking/settings").json()
        assert body == {"advance_booking_days": 7, "cancellation_hours": 24, "slot_duration_minutes": 45}

    def test_available_dates(self, client, world):
        r = client.get("/booking/available-dates", params={
            "center_id": world.center_id, "service_id": world.service_id,
        })
        assert r.status_code == 200

        days = [date.fromisoformat(d["date"]) for d in r.json()["dates"]]
        assert days[0] in (date.today() + timedelta(days=1), date.today() + timedelta(days=2))
        assert days[-1] <= date.today() + timedelta(days=7)
        assert all(d.weekday() != 6 for d in days)

    def test_available_slots(self, client, world):
        r = client.get("/booking/available-slots", params={
            "center_id": world.center_id,
            "service_id": world.service_id,
            "date": bookable_date().isoformat(),
        })
        assert r.status_code == 200

        slots = r.json()["slots"]
        assert [s["start_time"] for s in slots] == ["09:00", "09:45"]
        assert all(s["available_count"] == 2 for s in slots)

    def test_available_slots_for_today_rejected(self, client, world):
        r = client.get("/booking/available-slots", params={
            "center_id": world.center_id,
            "service_id": world.service_id,
            "date": date.today().isoformat(),
        })
        assert r.status_code == 400
        assert r.json()["code"] == "validation_error"

    def test_availability_range(self, client, world):
        start = bookable_date()
        r = client.get("/booking/availability", params={
            "center_id": world.center_id,
            "service_id": world.uncovered_service_id,
            "date_from": start.isoformat(),
            "date_to": (start + timedelta(days=1)).isoformat(),
        })
        assert r.status_code == 200
        assert len(r.json()) == 4
        assert all(s["available_count"] == 0 for s in r.json())


# =============================================================================
# Booking lifecycle
# =============================================================================

class TestBookingFlow:
    def test_book_confirm_list_cancel(self, client, world, notifier):
        headers = user_headers(world.user_id)

        r = client.post("/booking/", json=_payload(world, user_details={"phone_no": "+1555"}), headers=headers)
        assert r.status_code == 201
        created = r.json()
        assert created["counter_id"] == world.counter_ids[0]
        assert created["confirmation"]["slot"]["start_time"] == "09:00"
        assert notifier.of_type("booking_confirmed")

        r = client.get(f"/booking/{created['booking_id']}/confirmation", headers=headers)
        assert r.status_code == 200
        assert r.json()["user"]["phone_no"] == "+1555"

        r = client.get("/booking/my", headers=headers)
        assert [b["booking_id"] for b in r.json()] == [created["booking_id"]]

        r = client.post(f"/booking/{created['booking_id']}/cancel", headers=headers)
        assert r.status_code == 200
        assert r.json()["appointment_status"] == "cancelled"

        r = client.post(f"/booking/{created['booking_id']}/cancel", headers=headers)
        assert r.status_code == 409
        assert r.json()["code"] == "already_cancelled"

    def test_no_capacity_is_409(self, client, world):
        for user_id in (world.user_id, world.other_user_id):
            r = client.post("/booking/", json=_payload(world), headers=user_headers(user_id))
            assert r.status_code == 201

        r = client.post("/booking/", json=_payload(world), headers=user_headers(world.user_id))
        assert r.status_code == 409
        assert r.json() == {
            "detail": "No available counter found for the selected date and time",
            "code": "no_capacity",
        }

    def test_confirmation_of_other_user(self, client, world):
        created = client.post("/booking/", json=_payload(world), headers=user_headers(world.user_id)).json()

        r = client.get(f"/booking/{created['booking_id']}/confirmation", headers=user_headers(world.other_user_id))
        assert r.status_code == 403

    def test_cancel_by_appointment(self, client, world):
        created = client.post("/booking/", json=_payload(world), headers=user_headers(world.user_id)).json()

        r = client.post(f"/appointments/{created['appointment_id']}/cancel", headers=user_headers(world.other_user_id))
        assert r.status_code == 403

        r = client.post(f"/appointments/{created['appointment_id']}/cancel", headers=user_headers(world.user_id))
        assert r.status_code == 200

    def test_invalid_body(self, client, world):
        r = client.post("/booking/", json={"service_id": world.service_id}, headers=user_headers(world.user_id))
        assert r.status_code == 422


# =============================================================================
# Admin
# =============================================================================

class TestAdminTimeSlots:
    def test_crud(self, client, world):
        headers = admin_headers()

        r = client.post("/admin/time-slots/", json={"start_time": "11:00", "end_time": "11:45"}, headers=headers)
        assert r.status_code == 201
        slot = r.json()
        assert slot["duration_minutes"] == 45

        r = client.post("/admin/time-slots/", json={"start_time": "11:30", "end_time": "12:00"}, headers=headers)
        assert r.status_code == 409

        r = client.patch(f"/admin/time-slots/{slot['id']}", json={"end_time": "12:00"}, headers=headers)
        assert r.status_code == 200
        assert r.json()["duration_minutes"] == 60

        r = client.post(f"/admin/time-slots/{slot['id']}/toggle", json={"is_active": False}, headers=headers)
        assert r.json()["is_active"] is False

        r = client.delete(f"/admin/time-slots/{slot['id']}", headers=headers)
        assert r.status_code == 204

        listing = client.get("/admin/time-slots/", headers=headers).json()
        assert listing["total"] == 2

    def test_delete_booked_slot_blocked(self, client, world):
        client.post("/booking/", json=_payload(world), headers=user_headers(world.user_id))

        r = client.delete(f"/admin/time-slots/{world.slot_ids[0]}", headers=admin_headers())
        assert r.status_code == 409

    def test_bulk_create_and_toggle(self, client, world):
        headers = admin_headers()

        r = client.post("/admin/time-slots/bulk-create", json={
            "start_time": "13:00", "end_time": "15:00", "duration_minutes": 30,
        }, headers=headers)
        assert r.status_code == 201
        created = r.json()
        assert created["created_count"] == 4

        ids = [s["id"] for s in created["slots"]]
        r = client.post("/admin/time-slots/bulk-toggle", json={"slot_ids": ids, "is_active": False}, headers=headers)
        assert r.json() == {"updated": 4, "is_active": False}

    def test_settings(self, client, world):
        headers = admin_headers()

        r = client.put("/admin/time-slots/settings", json={"max_appointments_per_slot": 2}, headers=headers)
        assert r.status_code == 200
        assert r.json()["max_appointments_per_slot"] == 2
        assert r.json()["advance_booking_days"] == 7

        r = client.get("/admin/time-slots/settings", headers=headers)
        assert r.json()["max_appointments_per_slot"] == 2

        r = client.put("/admin/time-slots/settings", json={"max_appointments_per_slot": 0}, headers=headers)
        assert r.status_code == 422


class TestAdminAppointments:
    def test_list_stats_and_status(self, client, world):
        created = client.post("/booking/", json=_payload(world), headers=user_headers(world.user_id)).json()
        headers = admin_headers(5)

        listing = client.get("/admin/appointments/", params={"status": "scheduled"}, headers=headers).json()
        assert listing["total"] == 1

        r = client.patch(
            f"/admin/appointments/{created['appointment_id']}/status",
            json={"status": "completed"},
            headers=headers,
        )
        assert r.status_code == 200
        assert r.json()["appointment_status"] == "completed"

        stats = client.get("/admin/appointments/stats", headers=headers).json()
        assert stats["completed"] == 1
        assert stats["scheduled"] == 0

    def test_admin_cancel_notifies(self, client, world, notifier):
        created = client.post("/booking/", json=_payload(world), headers=user_headers(world.user_id)).json()

        r = client.patch(
            f"/admin/appointments/{created['appointment_id']}/status",
            json={"status": "cancelled"},
            headers=admin_headers(),
        )
        assert r.status_code == 200

        [event] = notifier.of_type("booking_cancelled")
        assert event["appointment_id"] == created["appointment_id"]
        assert event["time"] == "09:00"

    @pytest.mark.parametrize("status", ["postponed", ""])
    def test_unknown_status(self, client, world, status):
        r = client.patch("/admin/appointments/1/status", json={"status": status}, headers=admin_headers())
        assert r.status_code == 422


class TestAdminAudit:
    def test_booking_and_admin_actions_recorded(self, client, world):
        client.post("/booking/", json=_payload(world), headers=user_headers(world.user_id))
        client.post("/admin/time-slots/", json={"start_time": "12:00", "end_time": "12:45"}, headers=admin_headers(3))

        logs = client.get("/admin/audit/", headers=admin_headers()).json()
        actions = {entry["action"] for entry in logs}
        assert {"BOOKING_CREATED", "TIME_SLOT_CREATE"} <= actions

        only_admin = client.get("/admin/audit/", params={"actor_id": 3}, headers=admin_headers()).json()
        assert [e["action"] for e in only_admin] == ["TIME_SLOT_CREATE"]


def test_health_reports_components(client):
    body = client.get("/health").json()
    assert set(body) == {"database", "redis"}


def test_request_id_echoed(client):
    assert client.get("/health", headers={"X-Request-ID": "req-42"}).headers["X-Request-ID"] == "req-42"
    assert len(client.get("/health").headers["X-Request-ID"]) == 32
