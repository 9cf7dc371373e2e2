"""
Booking-related exceptions.

Every error carries a machine-readable ``code`` and a customer-facing
``message``; the HTTP layer maps ``status_code`` onto the response.
"""


class BookingError(Exception):
    """Base exception for booking flow errors."""

    status_code = 400
    code = "booking_error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class BookingValidationError(BookingError):
    """Bad or missing input, or a business rule the request breaks."""

    code = "validation_error"


class ConflictError(BookingError):
    """The request collides with the current state of the booking table."""

    status_code = 409
    code = "conflict"


class SlotConflictError(ConflictError):
    """A slot in the requested run is already held by another booking."""

    code = "slot_booked"

    def __init__(self, message: str, slot_date: str | None = None, slot_time: str | None = None):
        super().__init__(message)
        self.slot_date = slot_date
        self.slot_time = slot_time


class InvalidStatusTransition(ConflictError):
    code = "invalid_transition"


class BookingNotFound(BookingError):
    status_code = 404
    code = "not_found"


class ConfigurationError(BookingError):
    """Site configuration is malformed or produces no usable grid."""

    status_code = 422
    code = "configuration_error"


class StorageError(BookingError):
    """Persistence collaborator failed; details stay in the logs."""

    status_code = 503
    code = "storage_error"

    def __init__(self, message: str = "Booking storage is temporarily unavailable"):
        super().__init__(message)
