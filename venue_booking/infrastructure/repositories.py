"""
SQLAlchemy implementations of the repository contracts.

Every repository works on the AsyncSession owned by the surrounding unit of
work and never commits on its own.
"""

from dataclasses import replace
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from venue_booking.core.logging import get_logger
from venue_booking.domain import Booking, Event, EventKind, User, Venue
from venue_booking.infrastructure import mappers
from venue_booking.models import (
    BookingModel,
    EventModel,
    EventSeatModel,
    EventSectionInventoryModel,
    UserModel,
    VenueModel,
    VenueSectionModel,
)
from venue_booking.services.interfaces.repositories import (
    BookingRepository,
    EventRepository,
    UserRepository,
    VenueRepository,
)

logger = get_logger(__name__)


def _event_query():
    return (
        select(EventModel)
        .options(
            selectinload(EventModel.section_inventories),
            selectinload(EventModel.seats),
        )
        .execution_options(populate_existing=True)
    )


def _booking_query():
    # Refresh rows this session may have just inserted without their joins
    return select(BookingModel).execution_options(populate_existing=True)


class SqlAlchemyUserRepository(UserRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> User | None:
        user = await self.session.get(UserModel, user_id)
        if user is None:
            return None

        result = await self.session.execute(
            _booking_query().where(BookingModel.user_id == user_id).order_by(BookingModel.id)
        )
        return mappers.user_to_domain(user, list(result.scalars().all()))


class SqlAlchemyVenueRepository(VenueRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, venue_id: int) -> Venue | None:
        result = await self.session.execute(
            select(VenueModel)
            .options(selectinload(VenueModel.sections).selectinload(VenueSectionModel.seats))
            .where(VenueModel.id == venue_id)
            .execution_options(populate_existing=True)
        )
        venue = result.scalar_one_or_none()
        return mappers.venue_to_domain(venue) if venue is not None else None


class SqlAlchemyEventRepository(EventRepository):
    """
    Event aggregate persistence with optimistic locking.

    update() writes the events row first, guarded by the version loaded with
    the aggregate:

        UPDATE events SET ..., version = version + 1
        WHERE id = :event_id AND version = :loaded_version

    Zero rows affected means another transaction committed a change to this
    event since it was loaded; nothing else is written and None is returned.
    Ledger and seat rows are only touched after the guard succeeds, so the
    events row acts as the lock for the whole aggregate.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id_with_details(self, event_id: int) -> Event | None:
        result = await self.session.execute(_event_query().where(EventModel.id == event_id))
        event = result.scalar_one_or_none()
        return mappers.event_to_domain(event) if event is not None else None

    async def add(self, event: Event) -> Event:
        model = mappers.event_to_model(event)
        self.session.add(model)
        await self.session.flush()
        logger.info("event_created", event_id=model.id, event_type=model.event_type)

        # Reload so joined section/seat details are populated on the new rows
        result = await self.session.execute(_event_query().where(EventModel.id == model.id))
        return mappers.event_to_domain(result.scalar_one())

    async def update(self, event: Event) -> Event | None:
        result = await self.session.execute(
            update(EventModel)
            .where(EventModel.id == event.id, EventModel.version == event.version)
            .values(version=EventModel.version + 1, **mappers.event_column_values(event))
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            logger.info(
                "event_update_rejected",
                event_id=event.id,
                loaded_version=event.version,
                reason="version_conflict",
            )
            return None

        if event.kind is EventKind.SECTION:
            await self._write_inventories(event)
        elif event.kind is EventKind.SEAT:
            await self._write_seats(event)

        stored = event.clone()
        stored.version = event.version + 1
        return stored

    async def _write_inventories(self, event: Event) -> None:
        current = await self.session.execute(
            select(EventSectionInventoryModel.id, EventSectionInventoryModel.booked)
            .where(EventSectionInventoryModel.event_id == event.id)
        )
        stored = dict(current.all())
        changes = [
            {"id": inventory.id, "booked": inventory.booked}
            for inventory in event.section_quota.inventories
            if inventory.id in stored and stored[inventory.id] != inventory.booked
        ]
        if changes:
            # Bulk UPDATE by primary key
            await self.session.execute(update(EventSectionInventoryModel), changes)

    async def _write_seats(self, event: Event) -> None:
        current = await self.session.execute(
            select(EventSeatModel.id, EventSeatModel.status)
            .where(EventSeatModel.event_id == event.id)
        )
        stored = dict(current.all())
        changes = [
            {"id": seat.id, "status": seat.status.value}
            for seat in event.seat_registry.seats
            if seat.id in stored and stored[seat.id] != seat.status.value
        ]
        if changes:
            await self.session.execute(update(EventSeatModel), changes)

    async def list_by_venue(self, venue_id: int) -> list[Event]:
        result = await self.session.execute(
            _event_query()
            .where(EventModel.venue_id == venue_id)
            .order_by(EventModel.starts_at.asc(), EventModel.id.asc())
        )
        return [mappers.event_to_domain(e) for e in result.scalars().all()]

    async def list_starting_between(self, start: datetime, end: datetime) -> list[Event]:
        # Uses the ix_events_starts_at index
        result = await self.session.execute(
            _event_query()
            .where(
                EventModel.starts_at >= mappers.as_utc(start),
                EventModel.starts_at < mappers.as_utc(end),
            )
            .order_by(EventModel.starts_at.asc(), EventModel.id.asc())
        )
        return [mappers.event_to_domain(e) for e in result.scalars().all()]


class SqlAlchemyBookingRepository(BookingRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, booking: Booking) -> Booking | None:
        model = mappers.booking_to_model(booking)
        self.session.add(model)
        try:
            await self.session.flush()
        except SQLAlchemyError as exc:
            logger.error(
                "booking_insert_failed",
                user_id=booking.user_id,
                event_id=booking.event_id,
                error=str(exc),
            )
            return None

        return replace(
            booking,
            id=model.id,
            items=[replace(item, id=row.id) for item, row in zip(booking.items, model.items)],
        )

    async def get_by_id(self, booking_id: int) -> Booking | None:
        result = await self.session.execute(_booking_query().where(BookingModel.id == booking_id))
        booking = result.scalar_one_or_none()
        return mappers.booking_to_domain(booking) if booking is not None else None

    async def list_by_user(self, user_id: int) -> list[Booking]:
        return await self._list(BookingModel.user_id == user_id)

    async def list_by_event(self, event_id: int) -> list[Booking]:
        return await self._list(BookingModel.event_id == event_id)

    async def _list(self, criterion) -> list[Booking]:
        result = await self.session.execute(
            _booking_query()
            .where(criterion)
            .order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
        )
        return [mappers.booking_to_domain(b) for b in result.scalars().all()]
