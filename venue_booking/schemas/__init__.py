from venue_booking.schemas.booking import (
    BookingItemSummary,
    BookingResult,
    BookingSummary,
    CreateBookingCommand,
)
from venue_booking.schemas.event import EventAvailability, SeatAvailability, SectionAvailability

__all__ = [
    "CreateBookingCommand", "BookingResult", "BookingSummary", "BookingItemSummary",
    "EventAvailability", "SectionAvailability", "SeatAvailability",
]
