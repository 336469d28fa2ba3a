from venue_booking.domain.booking import Booking, BookingItem, BookingKind, PaymentStatus
from venue_booking.domain.errors import (
    BookingDomainError,
    InvalidStatusTransitionError,
    InvariantViolation,
)
from venue_booking.domain.event import (
    Event,
    EventKind,
    OpenAdmission,
    SeatRegistry,
    SectionQuota,
)
from venue_booking.domain.inventory import AllocationMode, SectionInventory
from venue_booking.domain.results import ValidationResult
from venue_booking.domain.seating import EventSeat, SeatStatus
from venue_booking.domain.user import User
from venue_booking.domain.venue import Venue, VenueSeat, VenueSection

__all__ = [
    "AllocationMode",
    "Booking",
    "BookingDomainError",
    "BookingItem",
    "BookingKind",
    "Event",
    "EventKind",
    "EventSeat",
    "InvalidStatusTransitionError",
    "InvariantViolation",
    "OpenAdmission",
    "PaymentStatus",
    "SeatRegistry",
    "SeatStatus",
    "SectionInventory",
    "SectionQuota",
    "User",
    "ValidationResult",
    "Venue",
    "VenueSeat",
    "VenueSection",
]
