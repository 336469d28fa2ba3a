"""
Persistence boundary interfaces.
Repositories return domain objects; swapping storage never touches services.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from venue_booking.domain import Booking, Event, User, Venue


class UserRepository(ABC):

    @abstractmethod
    async def get_by_id(self, user_id: int) -> User | None:
        """Return the user with their existing bookings, or None."""


class VenueRepository(ABC):

    @abstractmethod
    async def get_by_id(self, venue_id: int) -> Venue | None:
        """Return the venue with its sections and seats, or None."""


class EventRepository(ABC):

    @abstractmethod
    async def get_by_id_with_details(self, event_id: int) -> Event | None:
        """Return the event with its ledger entries or seat cells loaded."""

    @abstractmethod
    async def add(self, event: Event) -> Event:
        """Store a new event with its ledger entries or seat cells."""

    @abstractmethod
    async def update(self, event: Event) -> Event | None:
        """
        Persist a mutated event aggregate.

        Must refuse the write when the stored aggregate changed since
        `event` was loaded (compare `event.version`).

        Returns:
            The stored event with its new version, or None when the
            write was refused.
        """

    @abstractmethod
    async def list_by_venue(self, venue_id: int) -> list[Event]:
        """Return all events at a venue, ordered by start time."""

    @abstractmethod
    async def list_starting_between(self, start: datetime, end: datetime) -> list[Event]:
        """Return events starting within [start, end), ordered by start time."""


class BookingRepository(ABC):

    @abstractmethod
    async def add(self, booking: Booking) -> Booking | None:
        """
        Store a new booking and its items.

        Returns:
            The booking with identities assigned, or None if the write
            could not complete. Never raises for write failures.
        """

    @abstractmethod
    async def get_by_id(self, booking_id: int) -> Booking | None:
        ...

    @abstractmethod
    async def list_by_user(self, user_id: int) -> list[Booking]:
        """Return a user's bookings, newest first."""

    @abstractmethod
    async def list_by_event(self, event_id: int) -> list[Booking]:
        """Return an event's bookings, newest first."""


class UnitOfWork(ABC):
    """
    One transaction spanning all repositories for a single operation.

    Usage:
        async with uow:
            ...
            await uow.commit()

    Leaving the block without commit() rolls everything back.
    """

    users: UserRepository
    venues: VenueRepository
    events: EventRepository
    bookings: BookingRepository

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...
