"""
Event scheduling at a venue.

Before a new event is stored, scheduling checks run against the venue and
the events already on its calendar:

- estimated attendance must fit the venue's seat count
- the event must not overlap another event at the venue

Checks run in registration order and the first failure is raised as
EventSchedulingError with the check's message.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence

from venue_booking.core.logging import get_logger
from venue_booking.domain import Event, ValidationResult, Venue
from venue_booking.services.interfaces.repositories import UnitOfWork

logger = get_logger(__name__)


class EventSchedulingError(Exception):
    """Raised when an event cannot be placed on a venue's calendar."""


class SchedulingCheck(ABC):

    @abstractmethod
    def validate(self, venue: Venue, event: Event, scheduled: Sequence[Event]) -> ValidationResult:
        ...


class VenueCapacityCheck(SchedulingCheck):

    def validate(self, venue, event, scheduled):
        if event.estimated_attendance > venue.capacity:
            return ValidationResult.failure("The event exceeds the venue's maximum capacity.")
        return ValidationResult.success()


class TimeConflictCheck(SchedulingCheck):
    """Events without an end time never conflict."""

    def validate(self, venue, event, scheduled):
        if any(event.overlaps(other) for other in scheduled if other.id != event.id):
            return ValidationResult.failure(
                "The event conflicts with existing scheduled events at the venue."
            )
        return ValidationResult.success()


def default_checks() -> list[SchedulingCheck]:
    return [TimeConflictCheck(), VenueCapacityCheck()]


class EventSchedulingService:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        checks: Iterable[SchedulingCheck] | None = None,
    ):
        self._uow_factory = uow_factory
        self._checks = list(checks) if checks is not None else default_checks()

    async def schedule_event(self, event: Event) -> Event:
        """
        Validate and store a new event.

        Returns:
            The stored event with its identity assigned.

        Raises:
            EventSchedulingError: venue missing or a check failed.
        """
        async with self._uow_factory() as uow:
            venue = await uow.venues.get_by_id(event.venue_id)
            if venue is None:
                raise EventSchedulingError("Venue not found")

            scheduled = await uow.events.list_by_venue(venue.id)
            for check in self._checks:
                result = check.validate(venue, event, scheduled)
                if not result.is_valid:
                    logger.info(
                        "event_scheduling_rejected",
                        venue_id=venue.id,
                        check=type(check).__name__,
                        reason=result.error_message,
                    )
                    raise EventSchedulingError(result.error_message)

            stored = await uow.events.add(event)
            await uow.commit()

        logger.info(
            "event_scheduled",
            event_id=stored.id,
            venue_id=stored.venue_id,
            event_type=stored.kind.value,
        )
        return stored
