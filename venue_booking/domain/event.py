"""Event capacity model.

An event carries exactly one allocation shape:

- OpenAdmission: a capacity number and a reserved counter.
- SectionQuota: one SectionInventory ledger entry per participating section.
- SeatRegistry: one EventSeat status cell per participating physical seat.

The capacity contract (total/reserved/available/sold-out/validate) is
implemented once on Event by switching on the allocation kind, so callers
never need to know which shape they hold.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from venue_booking.domain.errors import InvariantViolation
from venue_booking.domain.inventory import SectionInventory
from venue_booking.domain.results import ValidationResult
from venue_booking.domain.seating import EventSeat, SeatStatus


class EventKind(str, Enum):
    OPEN = "GeneralAdmission"
    SECTION = "SectionBased"
    SEAT = "ReservedSeating"


class OpenAdmission:
    """Quantity-only admission with a private reserved counter."""

    def __init__(
        self,
        capacity: int,
        reserved: int = 0,
        price: Decimal | None = None,
        capacity_override: int | None = None,
    ) -> None:
        if capacity < 0:
            raise InvariantViolation("Capacity cannot be negative")
        self.capacity = capacity
        self.price = price
        self.capacity_override = capacity_override
        if not 0 <= reserved <= self.total_capacity:
            raise InvariantViolation(
                f"Reserved count {reserved} outside 0..{self.total_capacity}"
            )
        self._reserved = reserved

    def __repr__(self) -> str:
        return f"<OpenAdmission(reserved={self._reserved}/{self.total_capacity})>"

    @property
    def total_capacity(self) -> int:
        if self.capacity_override is not None:
            return self.capacity_override
        return self.capacity

    @property
    def reserved(self) -> int:
        return self._reserved

    def reserve(self, quantity: int) -> None:
        if quantity <= 0:
            raise InvariantViolation("Quantity must be positive")
        if self._reserved + quantity > self.total_capacity:
            raise InvariantViolation(
                f"Cannot reserve {quantity} tickets. "
                f"Only {self.total_capacity - self._reserved} remain."
            )
        self._reserved += quantity

    def release(self, quantity: int) -> None:
        if quantity <= 0:
            raise InvariantViolation("Quantity must be positive")
        if self._reserved < quantity:
            raise InvariantViolation(
                f"Cannot release {quantity} tickets. Only {self._reserved} are reserved."
            )
        self._reserved -= quantity


@dataclass
class SectionQuota:
    """Inventory partitioned by physical section, each with its own price."""

    inventories: list[SectionInventory] = field(default_factory=list)
    capacity_override: int | None = None

    def get_section(self, section_id: int) -> SectionInventory | None:
        return next((i for i in self.inventories if i.section_id == section_id), None)

    def validate_section_reservation(self, section_id: int, quantity: int) -> ValidationResult:
        section = self.get_section(section_id)
        if section is None:
            return ValidationResult.failure(f"Section with ID {section_id} not found.")
        return section.validate_reservation(quantity)

    def reserve_in_section(self, section_id: int, quantity: int) -> SectionInventory:
        validation = self.validate_section_reservation(section_id, quantity)
        if not validation.is_valid:
            raise InvariantViolation(validation.error_message)
        section = self.get_section(section_id)
        section.reserve_seats(quantity)
        return section

    def release_from_section(self, section_id: int, quantity: int) -> None:
        section = self.get_section(section_id)
        if section is None:
            raise InvariantViolation(f"Section with ID {section_id} not found.")
        section.release_seats(quantity)

    def available_sections(self) -> list[SectionInventory]:
        return [i for i in self.inventories if not i.is_sold_out]

    def sold_out_sections(self) -> list[SectionInventory]:
        return [i for i in self.inventories if i.is_sold_out]


@dataclass
class SeatRegistry:
    """Individually numbered seats, one status cell each."""

    seats: list[EventSeat] = field(default_factory=list)
    seat_price: Decimal | None = None

    def get_seat(self, venue_seat_id: int) -> EventSeat | None:
        return next((s for s in self.seats if s.venue_seat_id == venue_seat_id), None)

    def validate_seat_reservation(self, venue_seat_id: int) -> ValidationResult:
        seat = self.get_seat(venue_seat_id)
        if seat is None:
            return ValidationResult.failure(f"Seat with ID {venue_seat_id} not found.")
        if not seat.is_available():
            return ValidationResult.failure(
                f"Seat not available. Current status: {seat.status.value}"
            )
        return ValidationResult.success()

    def reserve_seat(self, venue_seat_id: int) -> EventSeat:
        validation = self.validate_seat_reservation(venue_seat_id)
        if not validation.is_valid:
            raise InvariantViolation(validation.error_message)
        seat = self.get_seat(venue_seat_id)
        seat.reserve()
        return seat

    def lock_seat(self, venue_seat_id: int) -> EventSeat:
        seat = self._require_seat(venue_seat_id)
        seat.lock()
        return seat

    def release_seat(self, venue_seat_id: int) -> EventSeat:
        seat = self._require_seat(venue_seat_id)
        seat.release()
        return seat

    def available_seats(self) -> list[EventSeat]:
        return self._with_status(SeatStatus.AVAILABLE)

    def reserved_seats(self) -> list[EventSeat]:
        return self._with_status(SeatStatus.RESERVED)

    def locked_seats(self) -> list[EventSeat]:
        return self._with_status(SeatStatus.LOCKED)

    def seats_in_section(self, section_id: int) -> list[EventSeat]:
        return [s for s in self.seats if s.section_id == section_id]

    def _with_status(self, status: SeatStatus) -> list[EventSeat]:
        return [s for s in self.seats if s.status is status]

    def _require_seat(self, venue_seat_id: int) -> EventSeat:
        seat = self.get_seat(venue_seat_id)
        if seat is None:
            raise InvariantViolation(f"Seat with ID {venue_seat_id} not found.")
        return seat


Allocation = OpenAdmission | SectionQuota | SeatRegistry


@dataclass
class Event:
    """An event at a venue with exactly one allocation shape."""

    id: int | None
    venue_id: int
    name: str
    starts_at: datetime
    allocation: Allocation
    ends_at: datetime | None = None
    estimated_attendance: int = 0
    version: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.allocation, (OpenAdmission, SectionQuota, SeatRegistry)):
            raise InvariantViolation(
                f"Unsupported allocation type: {type(self.allocation).__name__}"
            )
        # Times are compared against an aware UTC clock
        for name in ("starts_at", "ends_at"):
            value = getattr(self, name)
            if value is not None and value.tzinfo is None:
                raise InvariantViolation(f"Event {name} must be timezone-aware")
        if self.ends_at is not None and self.ends_at <= self.starts_at:
            raise InvariantViolation("Event must end after it starts")

    def overlaps(self, other: "Event") -> bool:
        """True when both events have an end time and their intervals intersect."""
        if self.ends_at is None or other.ends_at is None:
            return False
        return self.starts_at < other.ends_at and other.starts_at < self.ends_at

    @property
    def kind(self) -> EventKind:
        if isinstance(self.allocation, OpenAdmission):
            return EventKind.OPEN
        if isinstance(self.allocation, SectionQuota):
            return EventKind.SECTION
        return EventKind.SEAT

    @property
    def total_capacity(self) -> int:
        allocation = self.allocation
        if self.kind is EventKind.OPEN:
            return allocation.total_capacity
        if self.kind is EventKind.SECTION:
            if allocation.capacity_override is not None:
                return allocation.capacity_override
            return sum(i.capacity for i in allocation.inventories)
        return len(allocation.seats)

    @property
    def total_reserved(self) -> int:
        allocation = self.allocation
        if self.kind is EventKind.OPEN:
            return allocation.reserved
        if self.kind is EventKind.SECTION:
            return sum(i.booked for i in allocation.inventories)
        return len(allocation.reserved_seats())

    @property
    def available_capacity(self) -> int:
        return self.total_capacity - self.total_reserved

    @property
    def is_sold_out(self) -> bool:
        return self.available_capacity <= 0

    def validate_capacity(self, quantity: int) -> ValidationResult:
        """Pure check of a requested quantity against the whole event."""
        if quantity <= 0:
            return ValidationResult.failure("Quantity must be positive.")

        if self.is_sold_out:
            return ValidationResult.failure(f"Event '{self.name}' is sold out.")

        if self.available_capacity < quantity:
            return ValidationResult.failure(
                f"Insufficient capacity. Requested: {quantity}, "
                f"Available: {self.available_capacity}"
            )

        return ValidationResult.success()

    @property
    def open_admission(self) -> OpenAdmission:
        return self._require(EventKind.OPEN)

    @property
    def section_quota(self) -> SectionQuota:
        return self._require(EventKind.SECTION)

    @property
    def seat_registry(self) -> SeatRegistry:
        return self._require(EventKind.SEAT)

    def reserve_tickets(self, quantity: int) -> None:
        """Open-capacity reservation. Raises when validate_capacity fails."""
        admission = self.open_admission
        validation = self.validate_capacity(quantity)
        if not validation.is_valid:
            raise InvariantViolation(validation.error_message)
        admission.reserve(quantity)

    def clone(self) -> "Event":
        """Independent deep copy used for speculative reservations."""
        return copy.deepcopy(self)

    def _require(self, kind: EventKind):
        if self.kind is not kind:
            raise InvariantViolation(
                f"Event '{self.name}' is {self.kind.value}, not {kind.value}"
            )
        return self.allocation
