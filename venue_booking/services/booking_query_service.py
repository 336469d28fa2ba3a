"""
Booking read side: booking summaries with user, event and venue names.
"""

from collections.abc import Callable

from venue_booking.domain import Booking, Event, User, Venue
from venue_booking.schemas.booking import BookingItemSummary, BookingSummary
from venue_booking.services.interfaces.repositories import UnitOfWork

UNKNOWN_VENUE = "Unknown Venue"


class BookingQueryService:

    def __init__(self, uow_factory: Callable[[], UnitOfWork]):
        self._uow_factory = uow_factory

    async def get_booking(self, booking_id: int) -> BookingSummary | None:
        if booking_id <= 0:
            raise ValueError("Booking ID must be greater than zero")

        async with self._uow_factory() as uow:
            booking = await uow.bookings.get_by_id(booking_id)
            if booking is None:
                return None
            user = await uow.users.get_by_id(booking.user_id)
            event = await uow.events.get_by_id_with_details(booking.event_id)
            venue = await uow.venues.get_by_id(event.venue_id) if event is not None else None

        return to_summary(booking, user, event, venue)

    async def get_bookings_for_user(self, user_id: int) -> list[BookingSummary]:
        """A user's bookings, newest first."""
        if user_id <= 0:
            raise ValueError("User ID must be greater than zero")

        async with self._uow_factory() as uow:
            bookings = await uow.bookings.list_by_user(user_id)
            if not bookings:
                return []
            user = await uow.users.get_by_id(user_id)

            events: dict[int, Event | None] = {}
            venues: dict[int, Venue | None] = {}
            for event_id in {b.event_id for b in bookings}:
                event = await uow.events.get_by_id_with_details(event_id)
                events[event_id] = event
                if event is not None and event.venue_id not in venues:
                    venues[event.venue_id] = await uow.venues.get_by_id(event.venue_id)

        summaries = []
        for booking in bookings:
            event = events.get(booking.event_id)
            venue = venues.get(event.venue_id) if event is not None else None
            summaries.append(to_summary(booking, user, event, venue))
        return summaries

    async def get_bookings_for_venue(self, venue_id: int) -> list[BookingSummary]:
        """Bookings for every event at a venue, grouped by event start time."""
        if venue_id <= 0:
            raise ValueError("Venue ID must be greater than zero")

        async with self._uow_factory() as uow:
            events = await uow.events.list_by_venue(venue_id)
            if not events:
                return []
            venue = await uow.venues.get_by_id(venue_id)

            pairs: list[tuple[Booking, Event]] = []
            for event in events:
                for booking in await uow.bookings.list_by_event(event.id):
                    pairs.append((booking, event))

            users: dict[int, User | None] = {}
            for user_id in {b.user_id for b, _ in pairs}:
                users[user_id] = await uow.users.get_by_id(user_id)

        return [to_summary(b, users.get(b.user_id), e, venue) for b, e in pairs]


def to_summary(
    booking: Booking,
    user: User | None,
    event: Event | None,
    venue: Venue | None,
) -> BookingSummary:
    return BookingSummary(
        id=booking.id,
        user_id=booking.user_id,
        user_name=user.name if user is not None else "",
        user_email=user.email if user is not None else "",
        event_id=booking.event_id,
        event_name=event.name if event is not None else "",
        event_starts_at=event.starts_at if event is not None else None,
        venue_id=event.venue_id if event is not None else None,
        venue_name=venue.name if venue is not None else UNKNOWN_VENUE,
        booking_type=booking.kind.value,
        payment_status=booking.payment_status.value,
        total_amount=booking.total_amount,
        created_at=booking.created_at,
        items=[BookingItemSummary.model_validate(item) for item in booking.items],
    )
