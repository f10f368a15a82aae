"""
backend/consular/services/events.py

Booking notifications.

Confirmations and cancellations are handed to a Notifier callable. The
default one serializes the event and appends it to the Redis list the
notification worker consumes (`events:p2p`). Delivery is best effort:
failures are logged and never reach the booking or cancellation result.
"""

import json
import logging
import time
from collections.abc import Callable

from redis.exceptions import RedisError

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

Notifier = Callable[[str, dict], None]

P2P_QUEUE = "events:p2p"


def _envelope(event_type: str, payload: dict) -> str:
    return json.dumps(
        {"type": event_type, "ts": int(time.time()), **payload},
        default=str,
    )


def emit_event(event_type: str, payload: dict, queue: str = P2P_QUEUE) -> None:
    """Append the event to a Redis list; the notification worker pops it."""
    try:
        depth = redis_client.rpush(queue, _envelope(event_type, payload))
    except RedisError as e:
        logger.error(f"Dropped {event_type} event, Redis unavailable: {e}")
        return
    logger.debug(f"Queued {event_type} on {queue} (depth={depth})")


def publish(event_type: str, payload: dict, notifier: Notifier | None = None) -> None:
    """Send an event through `notifier` (Redis by default), swallowing failures."""
    notifier = notifier or emit_event
    try:
        notifier(event_type, payload)
    except Exception:
        logger.exception(f"Notifier failed for {event_type}")


def notify_booking_confirmed(
    recipient_email: str,
    appointment_id: int,
    booked_date: str,
    slot: str,
    service_title: str,
    center_name: str,
    notifier: Notifier | None = None,
) -> None:
    publish("booking_confirmed", {
        "recipient_email": recipient_email,
        "appointment_id": appointment_id,
        "date": booked_date,
        "slot": slot,
        "service_title": service_title,
        "center_name": center_name,
    }, notifier)


def notify_booking_cancelled(
    appointment_id: int,
    booked_date: str,
    slot_time: str,
    notifier: Notifier | None = None,
) -> None:
    publish("booking_cancelled", {
        "appointment_id": appointment_id,
        "date": booked_date,
        "time": slot_time,
    }, notifier)
