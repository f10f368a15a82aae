"""Tests for the notification collaborator."""

import json
from datetime import date

from redis.exceptions import ConnectionError as RedisConnectionError

from consular.services import events


def test_emit_event_pushes_to_p2p_queue(monkeypatch):
    pushed = []
    monkeypatch.setattr(events.redis_client, "rpush", lambda key, value: pushed.append((key, value)))

    events.emit_event("booking_cancelled", {"appointment_id": 3})

    [(key, raw)] = pushed
    body = json.loads(raw)
    assert key == "events:p2p"
    assert body["type"] == "booking_cancelled"
    assert body["appointment_id"] == 3
    assert "ts" in body


def test_emit_event_survives_redis_outage(monkeypatch):
    def down(key, value):
        raise RedisConnectionError("refused")

    monkeypatch.setattr(events.redis_client, "rpush", down)

    events.emit_event("booking_confirmed", {"appointment_id": 1})


def test_publish_uses_given_notifier():
    received = []
    events.notify_booking_cancelled(5, "2026-03-04", "09:00", notifier=lambda t, p: received.append((t, p)))

    assert received == [("booking_cancelled", {"appointment_id": 5, "date": "2026-03-04", "time": "09:00"})]


def test_publish_swallows_notifier_errors():
    def broken(event_type, payload):
        raise RuntimeError("smtp down")

    events.publish("booking_confirmed", {}, notifier=broken)


def test_emit_event_to_named_queue(monkeypatch):
    pushed = []
    monkeypatch.setattr(events.redis_client, "rpush", lambda key, value: pushed.append((key, value)))

    events.emit_event("booking_confirmed", {"date": date(2026, 3, 4)}, queue="events:digest")

    [(key, raw)] = pushed
    assert key == "events:digest"
    assert json.loads(raw)["date"] == "2026-03-04"
