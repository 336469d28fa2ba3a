"""Physical venue layout: Venue -> Section -> Seat.

The hierarchy is immutable once built. Capacities are always derived by
counting seats; nothing is stored redundantly.
"""

from dataclasses import dataclass

from venue_booking.domain.errors import InvariantViolation


@dataclass(frozen=True)
class VenueSeat:
    """A physical seat. (section_id, row, number) is unique."""

    id: int
    section_id: int
    row: str
    number: str
    label: str | None = None

    @property
    def display_label(self) -> str:
        return self.label or f"{self.row}{self.number}"


@dataclass(frozen=True)
class VenueSection:
    """A physical section within a venue (e.g. Orchestra, Balcony)."""

    id: int
    venue_id: int
    name: str
    seats: tuple[VenueSeat, ...] = ()

    def __post_init__(self) -> None:
        positions = set()
        for seat in self.seats:
            if seat.section_id != self.id:
                raise InvariantViolation(
                    f"Seat {seat.id} belongs to section {seat.section_id}, not {self.id}"
                )
            position = (seat.row, seat.number)
            if position in positions:
                raise InvariantViolation(
                    f"Duplicate seat position row={seat.row} number={seat.number} "
                    f"in section {self.id}"
                )
            positions.add(position)

    @property
    def capacity(self) -> int:
        return len(self.seats)

    def get_seat(self, seat_id: int) -> VenueSeat | None:
        return next((s for s in self.seats if s.id == seat_id), None)


@dataclass(frozen=True)
class Venue:
    """A venue and the sections it owns."""

    id: int
    name: str
    address: str
    sections: tuple[VenueSection, ...] = ()

    @property
    def capacity(self) -> int:
        return sum(section.capacity for section in self.sections)

    def get_section(self, section_id: int) -> VenueSection | None:
        return next((s for s in self.sections if s.id == section_id), None)

    def get_seat(self, seat_id: int) -> VenueSeat | None:
        for section in self.sections:
            seat = section.get_seat(seat_id)
            if seat is not None:
                return seat
        return None
