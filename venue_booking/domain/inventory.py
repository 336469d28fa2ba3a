"""Section inventory ledger: per-(event, section) capacity vs. booked count.

Invariant at all times: 0 <= booked <= capacity. The booked counter has no
public setter; it only moves through reserve_seats/release_seats.
"""

from decimal import Decimal
from enum import Enum

from venue_booking.domain.errors import InvariantViolation
from venue_booking.domain.results import ValidationResult


class AllocationMode(str, Enum):
    GENERAL_ADMISSION = "GeneralAdmission"  # first-come, first-served
    RESERVED = "Reserved"  # specific seat assignment
    BEST_AVAILABLE = "BestAvailable"  # system picks seats


class SectionInventory:
    """Ledger entry for one section of one event."""

    def __init__(
        self,
        section_id: int,
        capacity: int,
        price: Decimal = Decimal("0.00"),
        allocation_mode: AllocationMode = AllocationMode.GENERAL_ADMISSION,
        booked: int = 0,
        section_name: str = "",
        id: int | None = None,
        event_id: int | None = None,
    ) -> None:
        if capacity < 0:
            raise InvariantViolation("Section capacity cannot be negative")
        if not 0 <= booked <= capacity:
            raise InvariantViolation(
                f"Booked count {booked} outside 0..{capacity} for section {section_id}"
            )
        self.id = id
        self.event_id = event_id
        self.section_id = section_id
        self.capacity = capacity
        self.price = price
        self.allocation_mode = allocation_mode
        self.section_name = section_name
        self._booked = booked

    def __repr__(self) -> str:
        return (
            f"<SectionInventory(section={self.section_id}, "
            f"booked={self._booked}/{self.capacity}, price={self.price})>"
        )

    @property
    def booked(self) -> int:
        return self._booked

    @property
    def label(self) -> str:
        return self.section_name or f"#{self.section_id}"

    @property
    def remaining(self) -> int:
        return self.capacity - self._booked

    @property
    def is_sold_out(self) -> bool:
        return self.remaining <= 0

    def validate_reservation(self, quantity: int) -> ValidationResult:
        if quantity <= 0:
            return ValidationResult.failure("Quantity must be positive.")

        if self.is_sold_out:
            return ValidationResult.failure(f"Section '{self.label}' is sold out.")

        if self.remaining < quantity:
            return ValidationResult.failure(
                f"Insufficient capacity in section '{self.label}'. "
                f"Requested: {quantity}, Available: {self.remaining}"
            )

        return ValidationResult.success()

    def reserve_seats(self, quantity: int) -> None:
        """Book quantity places. Raises if validate_reservation would fail."""
        validation = self.validate_reservation(quantity)
        if not validation.is_valid:
            raise InvariantViolation(validation.error_message)
        self._booked += quantity

    def release_seats(self, quantity: int) -> None:
        if quantity <= 0:
            raise InvariantViolation("Quantity must be positive")
        if self._booked < quantity:
            raise InvariantViolation(
                f"Cannot release {quantity} seats from section '{self.label}'. "
                f"Only {self._booked} are booked."
            )
        self._booked -= quantity
