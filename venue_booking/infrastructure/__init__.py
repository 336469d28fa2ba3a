"""
Infrastructure layer - persistence implementations of the service contracts.
Keeps business logic clean from implementation details.
"""

from .repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyEventRepository,
    SqlAlchemyUserRepository,
    SqlAlchemyVenueRepository,
)
from .unit_of_work import SqlAlchemyUnitOfWork, sqlalchemy_uow_factory

__all__ = [
    'SqlAlchemyBookingRepository',
    'SqlAlchemyEventRepository',
    'SqlAlchemyUnitOfWork',
    'SqlAlchemyUserRepository',
    'SqlAlchemyVenueRepository',
    'sqlalchemy_uow_factory',
]
