"""
Service interfaces for dependency inversion.
Allows swapping persistence and payment implementations without changing
booking logic.
"""

from .payment import PaymentGateway, PaymentRequest, PaymentResult
from .repositories import (
    BookingRepository,
    EventRepository,
    UnitOfWork,
    UserRepository,
    VenueRepository,
)

__all__ = [
    'BookingRepository',
    'EventRepository',
    'PaymentGateway',
    'PaymentRequest',
    'PaymentResult',
    'UnitOfWork',
    'UserRepository',
    'VenueRepository',
]
