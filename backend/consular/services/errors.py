# backend/consular/services/errors.py
"""
Business errors raised by the booking services.

Routers never catch these one by one: the handler registered in main.py
turns any BookingError into a JSON response with its status code.
"""


class BookingError(Exception):
    status_code = 400
    code = "booking_error"
    default_message = "Booking request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request"


class Unauthorized(BookingError):
    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required"


class Forbidden(BookingError):
    status_code = 403
    code = "forbidden"
    default_message = "Not allowed to access this booking"


class NotFound(BookingError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class NoCapacity(BookingError):
    status_code = 409
    code = "no_capacity"
    default_message = "No available counter found for the selected date and time"


class Conflict(BookingError):
    status_code = 409
    code = "conflict"
    default_message = "Request conflicts with existing data"


class AlreadyCancelled(BookingError):
    status_code = 409
    code = "already_cancelled"
    default_message = "Booking is already cancelled"


class TooLateToCancel(BookingError):
    status_code = 409
    code = "too_late_to_cancel"
    default_message = "Booking can no longer be cancelled"


class PersistenceError(BookingError):
    """Database failure. The message never carries driver details."""
    status_code = 500
    code = "persistence_error"
    default_message = "Failed to save booking"
