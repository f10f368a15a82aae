# backend/consular/services/slots/__init__.py
"""
Slot capacity module.

Level 1: Daily time slot grid (date independent)
Level 2: Availability per (center, service, date), derived from scheduled appointments
Level 3: Counter assignment for new bookings (lock, then count)
"""

from .config import CapacitySettings, load_capacity_settings, save_capacity_settings
from .availability import (
    DateAvailability,
    SlotAvailability,
    compute_availability,
    get_available_dates,
    get_slots_for_date,
)
from .assignment import assign_counter

__all__ = [
    "CapacitySettings",
    "load_capacity_settings",
    "save_capacity_settings",
    "DateAvailability",
    "SlotAvailability",
    "compute_availability",
    "get_available_dates",
    "get_slots_for_date",
    "assign_counter",
]
