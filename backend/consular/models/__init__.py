from .tables import (
    APPOINTMENT_STATUSES,
    AdminLogs,
    Appointments,
    Base,
    Bookings,
    Counters,
    Services,
    SystemConfig,
    TimeSlots,
    Users,
    VerificationCenters,
    metadata,
    t_center_services,
    t_counter_services,
)

__all__ = [
    "APPOINTMENT_STATUSES",
    "AdminLogs",
    "Appointments",
    "Base",
    "Bookings",
    "Counters",
    "Services",
    "SystemConfig",
    "TimeSlots",
    "Users",
    "VerificationCenters",
    "metadata",
    "t_center_services",
    "t_counter_services",
]
