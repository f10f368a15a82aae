# backend/consular/services/slots/config.py
"""
Capacity configuration for slot allocation.

Stored as one JSON row in system_config (key "appointment_settings").
Loaded once per request and passed down explicitly, so a single booking
decision never sees two different versions of the settings.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...database import begin_write
from ...models import SystemConfig as DBSystemConfig
from ..errors import ValidationError

logger = logging.getLogger(__name__)

SETTINGS_KEY = "appointment_settings"


@dataclass(frozen=True)
class CapacitySettings:
    """
    Process-wide booking settings.

    Attributes:
        slot_duration_minutes: Default duration used when generating the grid
        max_appointments_per_slot: Bookings one counter takes per slot
        advance_booking_days: How many days ahead bookings are accepted
        cancellation_hours: Minimum lead time for a citizen cancellation
    """
    slot_duration_minutes: int = 45
    max_appointments_per_slot: int = 1
    advance_booking_days: int = 7
    cancellation_hours: int = 24

    def __post_init__(self):
        """Validate configuration."""
        for name in ("slot_duration_minutes", "max_appointments_per_slot", "advance_booking_days"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValidationError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.cancellation_hours, int) or self.cancellation_hours < 0:
            raise ValidationError(
                f"cancellation_hours must be a non-negative integer, got {self.cancellation_hours!r}"
            )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "CapacitySettings":
        """Build settings from a stored blob, falling back to defaults per key."""
        known = {f.name for f in fields(cls)}
        values = {}
        for name, raw in data.items():
            if name not in known or raw is None:
                continue
            try:
                value = int(raw)
                cls(**{name: value})
            except (TypeError, ValueError, ValidationError):
                logger.warning(f"Ignoring stored {SETTINGS_KEY}.{name}={raw!r}, using default")
                continue
            values[name] = value
        return cls(**values)


def load_capacity_settings(db: Session) -> CapacitySettings:
    """Read current settings. Missing row = defaults."""
    row = (
        db.query(DBSystemConfig)
        .filter(DBSystemConfig.config_key == SETTINGS_KEY)
        .first()
    )
    if not row:
        return CapacitySettings()

    try:
        data = json.loads(row.config_value) if row.config_value else {}
    except json.JSONDecodeError:
        logger.error(f"Corrupt {SETTINGS_KEY} value, using defaults")
        data = {}

    if not isinstance(data, dict):
        return CapacitySettings()

    return CapacitySettings.from_dict(data)


def save_capacity_settings(db: Session, settings: CapacitySettings) -> CapacitySettings:
    """Upsert the settings row (last write wins)."""
    begin_write(db)
    value = json.dumps(settings.to_dict())

    row = (
        db.query(DBSystemConfig)
        .filter(DBSystemConfig.config_key == SETTINGS_KEY)
        .first()
    )
    if row:
        row.config_value = value
        row.updated_at = func.now()
    else:
        db.add(DBSystemConfig(config_key=SETTINGS_KEY, config_value=value, is_public=1))

    db.commit()
    logger.info(f"Capacity settings updated: {value}")
    return settings
