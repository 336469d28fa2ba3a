"""Seat status registry: one status cell per (event, physical seat).

    Available -> Reserved
    Available -> Locked -> Available
                 Locked -> Reserved

There is no Reserved -> Available edge here; cancellation is handled elsewhere.
"""

from enum import Enum

from venue_booking.domain.errors import InvalidStatusTransitionError


class SeatStatus(str, Enum):
    AVAILABLE = "Available"
    RESERVED = "Reserved"
    LOCKED = "Locked"


class EventSeat:
    """Status cell for one physical seat at one event."""

    _ALLOWED_TRANSITIONS: dict[SeatStatus, set[SeatStatus]] = {
        SeatStatus.AVAILABLE: {SeatStatus.RESERVED, SeatStatus.LOCKED},
        SeatStatus.LOCKED: {SeatStatus.AVAILABLE, SeatStatus.RESERVED},
        SeatStatus.RESERVED: set(),
    }

    def __init__(
        self,
        venue_seat_id: int,
        status: SeatStatus = SeatStatus.AVAILABLE,
        section_id: int | None = None,
        row: str = "",
        number: str = "",
        label: str | None = None,
        id: int | None = None,
        event_id: int | None = None,
    ) -> None:
        self.id = id
        self.event_id = event_id
        self.venue_seat_id = venue_seat_id
        self.section_id = section_id
        self.row = row
        self.number = number
        self.label = label
        self._status = SeatStatus(status)

    def __repr__(self) -> str:
        return f"<EventSeat(venue_seat={self.venue_seat_id}, status={self._status.value})>"

    @property
    def status(self) -> SeatStatus:
        return self._status

    def is_available(self) -> bool:
        return self._status is SeatStatus.AVAILABLE

    def reserve(self) -> None:
        # Only Available seats may be reserved directly; a Locked seat is
        # reserved via reserve_locked() by the holder of the lock.
        self._require(SeatStatus.AVAILABLE, SeatStatus.RESERVED)
        self._status = SeatStatus.RESERVED

    def reserve_locked(self) -> None:
        self._require(SeatStatus.LOCKED, SeatStatus.RESERVED)
        self._status = SeatStatus.RESERVED

    def lock(self) -> None:
        self._require(SeatStatus.AVAILABLE, SeatStatus.LOCKED)
        self._status = SeatStatus.LOCKED

    def release(self) -> None:
        self._require(SeatStatus.LOCKED, SeatStatus.AVAILABLE)
        self._status = SeatStatus.AVAILABLE

    def _require(self, expected: SeatStatus, target: SeatStatus) -> None:
        if self._status is not expected or target not in self._ALLOWED_TRANSITIONS[self._status]:
            raise InvalidStatusTransitionError(
                subject="seat status",
                from_state=self._status.value,
                to_state=target.value,
            )
