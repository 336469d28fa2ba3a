"""Bookings and their items."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from venue_booking.domain.errors import InvalidStatusTransitionError, InvariantViolation


class BookingKind(str, Enum):
    OPEN = "GA"
    SECTION = "Section"
    SEAT = "Seat"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    REFUNDED = "Refunded"
    FAILED = "Failed"


_ALLOWED_TRANSITIONS: dict[PaymentStatus, set[PaymentStatus]] = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: set(),
    PaymentStatus.REFUNDED: set(),
}


@dataclass(frozen=True)
class BookingItem:
    """
    One line of a booking.

    References at most one of a seat cell or a ledger entry; open-capacity
    items reference neither and carry only a quantity.
    """

    quantity: int
    event_seat_id: int | None = None
    section_inventory_id: int | None = None
    id: int | None = None
    seat_label: str | None = None
    section_name: str | None = None

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise InvariantViolation("Booking item quantity must be positive")
        if self.event_seat_id is not None and self.section_inventory_id is not None:
            raise InvariantViolation(
                "Booking item cannot reference both a seat and a section inventory"
            )

    @property
    def kind(self) -> BookingKind:
        if self.event_seat_id is not None:
            return BookingKind.SEAT
        if self.section_inventory_id is not None:
            return BookingKind.SECTION
        return BookingKind.OPEN


@dataclass
class Booking:
    user_id: int
    event_id: int
    kind: BookingKind
    total_amount: Decimal
    items: list[BookingItem] = field(default_factory=list)
    payment_status: PaymentStatus = PaymentStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int | None = None

    def __post_init__(self) -> None:
        for item in self.items:
            self._check_item(item)

    @property
    def ticket_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def add_item(self, item: BookingItem) -> None:
        self._check_item(item)
        self.items.append(item)

    def mark_paid(self) -> None:
        self._transition(PaymentStatus.PAID)

    def mark_failed(self) -> None:
        self._transition(PaymentStatus.FAILED)

    def mark_refunded(self) -> None:
        self._transition(PaymentStatus.REFUNDED)

    def _transition(self, to_status: PaymentStatus) -> None:
        if to_status not in _ALLOWED_TRANSITIONS[self.payment_status]:
            raise InvalidStatusTransitionError(
                subject="payment status",
                from_state=self.payment_status.value,
                to_state=to_status.value,
            )
        self.payment_status = to_status

    def _check_item(self, item: BookingItem) -> None:
        if item.kind is not self.kind:
            raise InvariantViolation(
                f"{self.kind.value} booking cannot hold a {item.kind.value} item"
            )
