"""
Event availability read side.

Maps event aggregates of any allocation shape onto one EventAvailability
model: totals, per-section ledger breakdown or per-seat status breakdown,
and the venue name/address.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

from venue_booking.core.logging import get_logger
from venue_booking.domain import Event, EventKind, SeatStatus, Venue
from venue_booking.schemas.event import EventAvailability, SeatAvailability, SectionAvailability
from venue_booking.services.interfaces.repositories import UnitOfWork
from venue_booking.services.validators import utc_now

logger = get_logger(__name__)

UNKNOWN_VENUE = "Unknown Venue"


def _percentage(available: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(available / total * 100, 2)


class EventQueryService:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]):
        self._uow_factory = uow_factory

    async def get_event_availability(self, event_id: int) -> EventAvailability | None:
        if event_id <= 0:
            raise ValueError("Event ID must be greater than zero")

        async with self._uow_factory() as uow:
            event = await uow.events.get_by_id_with_details(event_id)
            if event is None:
                return None
            venue = await uow.venues.get_by_id(event.venue_id)

        return to_availability(event, venue)

    async def get_upcoming_events(
        self,
        now: datetime | None = None,
        horizon_days: int = 365,
    ) -> list[EventAvailability]:
        """Events starting from now up to `horizon_days` ahead, soonest first."""
        now = now or utc_now()
        async with self._uow_factory() as uow:
            events = await uow.events.list_starting_between(now, now + timedelta(days=horizon_days))
            venues = await self._venues_for(uow, events)

        logger.debug("upcoming_events_listed", count=len(events), horizon_days=horizon_days)
        return [to_availability(e, venues.get(e.venue_id)) for e in events]

    async def get_upcoming_events_by_venue(
        self,
        venue_id: int,
        now: datetime | None = None,
    ) -> list[EventAvailability]:
        if venue_id <= 0:
            raise ValueError("Venue ID must be greater than zero")

        now = now or utc_now()
        async with self._uow_factory() as uow:
            events = await uow.events.list_by_venue(venue_id)
            venue = await uow.venues.get_by_id(venue_id)

        upcoming = sorted((e for e in events if e.starts_at > now), key=lambda e: e.starts_at)
        return [to_availability(e, venue) for e in upcoming]

    @staticmethod
    async def _venues_for(uow: UnitOfWork, events: list[Event]) -> dict[int, Venue]:
        venues = {}
        for venue_id in {e.venue_id for e in events}:
            venue = await uow.venues.get_by_id(venue_id)
            if venue is not None:
                venues[venue_id] = venue
        return venues


def to_availability(event: Event, venue: Venue | None) -> EventAvailability:
    sections = []
    seats = []
    price = None

    if event.kind is EventKind.OPEN:
        price = event.open_admission.price

    elif event.kind is EventKind.SECTION:
        sections = [
            SectionAvailability(
                section_id=inventory.section_id,
                section_name=inventory.section_name or f"Section {inventory.section_id}",
                capacity=inventory.capacity,
                booked=inventory.booked,
                available=inventory.remaining,
                price=inventory.price,
                allocation_mode=inventory.allocation_mode.value,
                is_available=inventory.remaining > 0,
                availability_percentage=_percentage(inventory.remaining, inventory.capacity),
            )
            for inventory in event.section_quota.inventories
        ]
        # Cheapest section is the "from" price
        if sections:
            price = min(s.price for s in sections)

    else:
        registry = event.seat_registry
        seats = [
            SeatAvailability(
                venue_seat_id=seat.venue_seat_id,
                section_id=seat.section_id,
                row=seat.row,
                seat_number=seat.number,
                seat_label=seat.label or f"{seat.row}{seat.number}",
                status=seat.status.value,
                is_available=seat.status is SeatStatus.AVAILABLE,
            )
            for seat in registry.seats
        ]
        price = registry.seat_price

    available = max(event.available_capacity, 0)
    return EventAvailability(
        id=event.id,
        name=event.name,
        starts_at=event.starts_at,
        ends_at=event.ends_at,
        venue_id=event.venue_id,
        venue_name=venue.name if venue is not None else UNKNOWN_VENUE,
        venue_address=venue.address if venue is not None else "",
        event_type=event.kind.value,
        estimated_attendance=event.estimated_attendance,
        total_capacity=event.total_capacity,
        reserved_count=event.total_reserved,
        available_capacity=available,
        price=price,
        is_available=available > 0,
        availability_percentage=_percentage(available, event.total_capacity),
        sections=sections,
        seats=seats,
    )
