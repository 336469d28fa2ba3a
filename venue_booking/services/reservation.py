"""
Reservation strategies, one per allocation shape, and the dispatcher that
picks between them.

Strategies never touch the aggregate they are given. They reserve against a
clone and hand back the proposed state in a Reservation; the caller decides
whether that state is ever persisted. Validation and mutation happen as one
step: a failed check returns an outcome and nothing is mutated.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from venue_booking.domain import BookingItem, BookingKind, Event, EventKind, ValidationResult

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class ReservationRequest:
    quantity: int = 1
    section_id: int | None = None
    seat_id: int | None = None
    customer_id: int | None = None


@dataclass(frozen=True)
class Reservation:
    """Proposed event state after a successful speculative reservation."""

    event: Event
    kind: BookingKind
    quantity: int
    unit_price: Decimal
    section_inventory_id: int | None = None
    event_seat_id: int | None = None
    label: str | None = None

    @property
    def total_amount(self) -> Decimal:
        return (self.unit_price * self.quantity).quantize(Decimal("0.01"))

    def booking_item(self) -> BookingItem:
        if self.kind is BookingKind.SEAT:
            return BookingItem(
                quantity=self.quantity,
                event_seat_id=self.event_seat_id,
                seat_label=self.label,
            )
        if self.kind is BookingKind.SECTION:
            return BookingItem(
                quantity=self.quantity,
                section_inventory_id=self.section_inventory_id,
                section_name=self.label,
            )
        return BookingItem(quantity=self.quantity)


@dataclass(frozen=True)
class ReservationOutcome:
    is_successful: bool
    message: str = ""
    reservation: Reservation | None = None

    @classmethod
    def reserved(cls, reservation: Reservation) -> "ReservationOutcome":
        return cls(is_successful=True, reservation=reservation)

    @classmethod
    def rejected(cls, result: ValidationResult) -> "ReservationOutcome":
        return cls(is_successful=False, message=result.error_message)


class ReservationStrategy(ABC):
    """Validates and applies a reservation for one allocation shape."""

    kind: EventKind

    @abstractmethod
    def validate(self, event: Event, request: ReservationRequest) -> ValidationResult:
        """Pure check; never mutates `event`."""

    @abstractmethod
    def reserve(self, event: Event, request: ReservationRequest) -> ReservationOutcome:
        """Reserve against a clone of `event` and return the proposed state."""


class OpenAdmissionStrategy(ReservationStrategy):
    """Quantity-only admission; no section or seat selector needed."""

    kind = EventKind.OPEN

    def validate(self, event, request):
        return event.validate_capacity(request.quantity)

    def reserve(self, event, request):
        validation = self.validate(event, request)
        if not validation.is_valid:
            return ReservationOutcome.rejected(validation)

        proposed = event.clone()
        proposed.reserve_tickets(request.quantity)
        price = proposed.open_admission.price
        return ReservationOutcome.reserved(Reservation(
            event=proposed,
            kind=BookingKind.OPEN,
            quantity=request.quantity,
            unit_price=price if price is not None else ZERO,
        ))


class SectionQuotaStrategy(ReservationStrategy):
    """Customer picks a section, not a seat; the section ledger is charged."""

    kind = EventKind.SECTION

    def validate(self, event, request):
        if request.section_id is None:
            return ValidationResult.failure("Section ID is required for section-based events.")

        # Event-wide override can be tighter than the sum of the sections.
        capacity = event.validate_capacity(request.quantity)
        if not capacity.is_valid:
            return capacity

        return event.section_quota.validate_section_reservation(request.section_id, request.quantity)

    def reserve(self, event, request):
        validation = self.validate(event, request)
        if not validation.is_valid:
            return ReservationOutcome.rejected(validation)

        proposed = event.clone()
        section = proposed.section_quota.reserve_in_section(request.section_id, request.quantity)
        return ReservationOutcome.reserved(Reservation(
            event=proposed,
            kind=BookingKind.SECTION,
            quantity=request.quantity,
            unit_price=section.price if section.price is not None else ZERO,
            section_inventory_id=section.id,
            label=section.section_name or None,
        ))


class SeatRegistryStrategy(ReservationStrategy):
    """Customer picks one specific seat."""

    kind = EventKind.SEAT

    def validate(self, event, request):
        if request.seat_id is None:
            return ValidationResult.failure("Seat ID is required for reserved seating events.")

        if request.quantity != 1:
            return ValidationResult.failure("Seat bookings reserve exactly one seat.")

        return event.seat_registry.validate_seat_reservation(request.seat_id)

    def reserve(self, event, request):
        validation = self.validate(event, request)
        if not validation.is_valid:
            return ReservationOutcome.rejected(validation)

        proposed = event.clone()
        registry = proposed.seat_registry
        seat = registry.reserve_seat(request.seat_id)
        price = registry.seat_price
        return ReservationOutcome.reserved(Reservation(
            event=proposed,
            kind=BookingKind.SEAT,
            quantity=1,
            unit_price=price if price is not None else ZERO,
            event_seat_id=seat.id,
            label=seat.label or f"{seat.row}{seat.number}" or None,
        ))


class ReservationDispatcher:
    """Routes a request to the strategy matching the event's allocation kind."""

    def __init__(self, strategies: list[ReservationStrategy] | None = None):
        if strategies is None:
            strategies = [OpenAdmissionStrategy(), SectionQuotaStrategy(), SeatRegistryStrategy()]
        self._strategies = {strategy.kind: strategy for strategy in strategies}

    def strategy_for(self, event: Event) -> ReservationStrategy | None:
        return self._strategies.get(event.kind)

    def validate(self, event: Event, request: ReservationRequest) -> ValidationResult:
        strategy = self.strategy_for(event)
        if strategy is None:
            return ValidationResult.failure(f"Unsupported event type: {event.kind.value}")
        return strategy.validate(event, request)

    def reserve(self, event: Event, request: ReservationRequest) -> ReservationOutcome:
        strategy = self.strategy_for(event)
        if strategy is None:
            return ReservationOutcome.rejected(
                ValidationResult.failure(f"Unsupported event type: {event.kind.value}")
            )
        return strategy.reserve(event, request)
