"""Users as seen by the booking engine."""

from dataclasses import dataclass

from venue_booking.domain.booking import Booking, PaymentStatus


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    phone: str | None = None
    bookings: tuple[Booking, ...] = ()

    def tickets_held_for(self, event_id: int) -> int:
        """Tickets across this user's non-refunded bookings for an event."""
        return sum(
            booking.ticket_count
            for booking in self.bookings
            if booking.event_id == event_id
            and booking.payment_status is not PaymentStatus.REFUNDED
        )
