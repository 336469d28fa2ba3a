"""
Booking validation pipeline.

Each check answers one business question about (user, event, request) and
returns a ValidationResult. The pipeline runs checks in registration order
and stops at the first failure, so the same failing conditions always
surface the same message. New rules are added by registering another check;
the pipeline never inspects which check it is running.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from venue_booking.core.config import get_settings
from venue_booking.core.logging import get_logger
from venue_booking.domain import Event, User, ValidationResult
from venue_booking.services.reservation import ReservationRequest

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookingValidator(ABC):
    """A single independent business-rule check."""

    @abstractmethod
    def validate(self, user: User, event: Event, request: ReservationRequest) -> ValidationResult:
        ...


class UserInformationValidator(BookingValidator):
    """The user must have contact details for the booking confirmation."""

    def validate(self, user, event, request):
        if user is None:
            return ValidationResult.failure("User information is required.")

        if not (user.email or "").strip():
            return ValidationResult.failure("User email is required for booking confirmation.")

        if not (user.name or "").strip():
            return ValidationResult.failure("User name is required.")

        return ValidationResult.success()


class BookingQuantityValidator(BookingValidator):
    """Quantity per booking must stay within configured limits."""

    def __init__(self, min_quantity: int | None = None, max_quantity: int | None = None):
        settings = get_settings()
        self.min_quantity = min_quantity if min_quantity is not None else settings.MIN_TICKETS_PER_BOOKING
        self.max_quantity = max_quantity if max_quantity is not None else settings.MAX_TICKETS_PER_BOOKING

    def validate(self, user, event, request):
        if request.quantity < self.min_quantity:
            return ValidationResult.failure(f"Minimum booking quantity is {self.min_quantity}.")

        if request.quantity > self.max_quantity:
            return ValidationResult.failure(
                f"Maximum booking quantity is {self.max_quantity} tickets per transaction."
            )

        return ValidationResult.success()


class EventAvailabilityValidator(BookingValidator):
    """The event must not have started and must not be sold out."""

    def __init__(self, clock: Clock = utc_now):
        self._clock = clock

    def validate(self, user, event, request):
        if event.starts_at <= self._clock():
            return ValidationResult.failure(
                "Cannot book tickets for an event that has already started."
            )

        if event.is_sold_out:
            return ValidationResult.failure(f"Event '{event.name}' is sold out.")

        return ValidationResult.success()


class UserBookingLimitValidator(BookingValidator):
    """Caps the tickets one user may hold for one event."""

    def __init__(self, max_tickets: int | None = None):
        self.max_tickets = max_tickets if max_tickets is not None else get_settings().MAX_TICKETS_PER_USER

    def validate(self, user, event, request):
        already_held = user.tickets_held_for(event.id)

        if already_held + request.quantity > self.max_tickets:
            return ValidationResult.failure(
                f"Booking limit exceeded. Maximum {self.max_tickets} tickets per person. "
                f"You already have {already_held} ticket(s)."
            )

        return ValidationResult.success()


class ValidationPipeline:
    """Ordered composite of checks, short-circuiting on first failure."""

    def __init__(self, validators: Iterable[BookingValidator] = ()):
        self._validators = list(validators)

    @property
    def validators(self) -> tuple[BookingValidator, ...]:
        return tuple(self._validators)

    def register(self, validator: BookingValidator) -> "ValidationPipeline":
        """Append a check; it runs after every check registered before it."""
        self._validators.append(validator)
        return self

    def validate(self, user: User, event: Event, request: ReservationRequest) -> ValidationResult:
        for validator in self._validators:
            result = validator.validate(user, event, request)
            if not result.is_valid:
                logger.info(
                    "booking_validation_failed",
                    validator=type(validator).__name__,
                    reason=result.error_message,
                )
                return result
        return ValidationResult.success()


def default_pipeline(clock: Clock = utc_now) -> ValidationPipeline:
    return ValidationPipeline([
        UserInformationValidator(),
        BookingQuantityValidator(),
        EventAvailabilityValidator(clock=clock),
        UserBookingLimitValidator(),
    ])


def validate_identifiers(user_id: int, event_id: int) -> ValidationResult:
    """Command-level check, run before anything is loaded."""
    if user_id <= 0:
        return ValidationResult.failure("Valid User ID is required")
    if event_id <= 0:
        return ValidationResult.failure("Valid Event ID is required")
    return ValidationResult.success()
