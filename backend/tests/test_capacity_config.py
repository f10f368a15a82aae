"""Tests for capacity settings stored in system_config."""

import json

import pytest

from consular.models import SystemConfig
from consular.services.errors import ValidationError
from consular.services.slots.config import (
    SETTINGS_KEY,
    CapacitySettings,
    load_capacity_settings,
    save_capacity_settings,
)


def test_defaults_when_row_missing(db):
    settings = load_capacity_settings(db)

    assert settings == CapacitySettings()
    assert settings.slot_duration_minutes == 45
    assert settings.max_appointments_per_slot == 1
    assert settings.advance_booking_days == 7
    assert settings.cancellation_hours == 24


def test_save_then_load(db):
    save_capacity_settings(db, CapacitySettings(max_appointments_per_slot=3, advance_booking_days=14))

    loaded = load_capacity_settings(db)
    assert loaded.max_appointments_per_slot == 3
    assert loaded.advance_booking_days == 14


def test_save_overwrites_existing_row(db):
    save_capacity_settings(db, CapacitySettings(max_appointments_per_slot=2))
    save_capacity_settings(db, CapacitySettings(max_appointments_per_slot=5))

    rows = db.query(SystemConfig).filter(SystemConfig.config_key == SETTINGS_KEY).all()
    assert len(rows) == 1
    assert json.loads(rows[0].config_value)["max_appointments_per_slot"] == 5


def test_missing_keys_fall_back_per_key(db):
    db.add(SystemConfig(config_key=SETTINGS_KEY, config_value='{"cancellation_hours": 48, "unknown": 1}'))
    db.commit()

    settings = load_capacity_settings(db)
    assert settings.cancellation_hours == 48
    assert settings.max_appointments_per_slot == 1


def test_corrupt_row_gives_defaults(db):
    db.add(SystemConfig(config_key=SETTINGS_KEY, config_value="not json"))
    db.commit()

    assert load_capacity_settings(db) == CapacitySettings()


def test_unusable_values_fall_back_per_key(db, caplog):
    stored = {
        "max_appointments_per_slot": "two",
        "advance_booking_days": [14],
        "slot_duration_minutes": 0,
        "cancellation_hours": "12",
    }
    db.add(SystemConfig(config_key=SETTINGS_KEY, config_value=json.dumps(stored)))
    db.commit()

    settings = load_capacity_settings(db)

    assert settings == CapacitySettings(cancellation_hours=12)
    assert "max_appointments_per_slot" in caplog.text


@pytest.mark.parametrize("kwargs", [
    {"slot_duration_minutes": 0},
    {"max_appointments_per_slot": 0},
    {"advance_booking_days": -1},
    {"cancellation_hours": -1},
])
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValidationError):
        CapacitySettings(**kwargs)


def test_zero_cancellation_hours_allowed():
    assert CapacitySettings(cancellation_hours=0).cancellation_hours == 0
