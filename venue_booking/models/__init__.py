"""
ORM tables. Importing this package registers every table on Base.metadata.
"""

from venue_booking.models.booking import BookingItemModel, BookingModel
from venue_booking.models.event import EventModel, EventSeatModel, EventSectionInventoryModel
from venue_booking.models.user import UserModel
from venue_booking.models.venue import VenueModel, VenueSeatModel, VenueSectionModel

__all__ = [
    "BookingItemModel",
    "BookingModel",
    "EventModel",
    "EventSeatModel",
    "EventSectionInventoryModel",
    "UserModel",
    "VenueModel",
    "VenueSeatModel",
    "VenueSectionModel",
]
