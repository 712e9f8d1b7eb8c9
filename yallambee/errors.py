# Domain errors raised by the booking rules and translated to HTTP responses by the routers.
from __future__ import annotations


class BookingError(Exception):
    """Base class for booking workflow failures."""

    default_message = "Booking operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRangeError(BookingError):
    default_message = "End date for booking must be at least one day after the start date."


class ConflictError(BookingError):
    default_message = "The property is already booked for the selected dates."


class NotFoundError(BookingError):
    default_message = "Not found"


class ValidationError(BookingError):
    default_message = "Invalid booking data"


class BusyError(BookingError):
    """Another process currently holds the property's booking lock."""

    default_message = "Property is busy, please retry"


class UnexpectedError(BookingError):
    default_message = "Unexpected error"
