"""
Booking orchestration: load -> validate -> reserve -> pay -> persist.

CONCURRENCY STRATEGY: Speculative reservation + optimistic version check
========================================================================

Problem:
  Two attempts load the same event, both see 1 seat left, both reserve it
  in memory, both pay, both persist. Result: Overbooking.

Solution:
  1. Load user/event/venue in a short read-only unit of work.
  2. Validate and reserve against a *clone* of the event. The loaded
     aggregate is never mutated; the clone is the proposed new state.
  3. Charge the payment gateway. On decline the proposed state is dropped;
     nothing was written, so there is nothing to undo.
  4. In a fresh unit of work, insert the booking and write the proposed
     event state with
       UPDATE events SET ..., version = version + 1
       WHERE id = :event_id AND version = :loaded_version
     If no row matches, another attempt committed first. The event is
     reloaded inside the same transaction and the same request is reserved
     again against the fresh state, up to MAX_RETRY_ATTEMPTS times. Only
     when the fresh state can no longer satisfy the request is the booking
     insert rolled back and the attempt failed.

  Steps 1-3 may be cancelled freely by the caller. Step 4 runs under
  asyncio.shield so a cancelled caller cannot leave a half-written booking.

Every failure is reported through BookingResult with its own message; only
invariant violations (caller bugs) are raised.
"""

import asyncio
from collections.abc import Callable

import structlog

from venue_booking.core.logging import get_logger
from venue_booking.core.metrics import (
    booking_latency,
    record_booking_attempt,
    record_conflict,
    record_payment,
)
from venue_booking.domain import Booking, Event, User
from venue_booking.schemas.booking import BookingResult, CreateBookingCommand
from venue_booking.services.interfaces.payment import PaymentGateway, PaymentRequest
from venue_booking.services.interfaces.repositories import UnitOfWork
from venue_booking.services.reservation import (
    Reservation,
    ReservationDispatcher,
    ReservationRequest,
)
from venue_booking.services.strategy_factory import get_payment_gateway
from venue_booking.services.validators import (
    ValidationPipeline,
    default_pipeline,
    validate_identifiers,
)

logger = get_logger(__name__)

SUCCESS_MESSAGE = "Booking created successfully and payment processed"
MAX_RETRY_ATTEMPTS = 3


class BookingService:
    """Application service for the create-booking use case."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        payment_gateway: PaymentGateway | None = None,
        pipeline: ValidationPipeline | None = None,
        dispatcher: ReservationDispatcher | None = None,
    ):
        self._uow_factory = uow_factory
        self._payment_gateway = payment_gateway if payment_gateway is not None else get_payment_gateway()
        self._pipeline = pipeline if pipeline is not None else default_pipeline()
        self._dispatcher = dispatcher if dispatcher is not None else ReservationDispatcher()

    async def execute(self, command: CreateBookingCommand) -> BookingResult:
        return await self.create_booking(
            user_id=command.user_id,
            event_id=command.event_id,
            quantity=command.quantity,
            section_id=command.section_id,
            seat_id=command.seat_id,
        )

    async def create_booking(
        self,
        user_id: int,
        event_id: int,
        quantity: int = 1,
        section_id: int | None = None,
        seat_id: int | None = None,
    ) -> BookingResult:
        request = ReservationRequest(
            quantity=quantity,
            section_id=section_id,
            seat_id=seat_id,
            customer_id=user_id,
        )
        with booking_latency.time(), structlog.contextvars.bound_contextvars(
            user_id=user_id, event_id=event_id
        ):
            return await self._attempt(user_id, event_id, request)

    async def _attempt(self, user_id: int, event_id: int, request: ReservationRequest) -> BookingResult:
        identifiers = validate_identifiers(user_id, event_id)
        if not identifiers.is_valid:
            return self._fail("rejected", identifiers.error_message)

        # Step 1: Load
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_id(user_id)
            if user is None:
                return self._fail("not_found", "User not found")

            event = await uow.events.get_by_id_with_details(event_id)
            if event is None:
                return self._fail("not_found", "Event not found")

            venue = await uow.venues.get_by_id(event.venue_id)
            if venue is None:
                return self._fail("not_found", "Venue not found")

        # Step 2: Validate business rules
        validation = self._pipeline.validate(user, event, request)
        if not validation.is_valid:
            return self._fail("rejected", validation.error_message)

        # Step 3: Speculative reservation against a clone of the event
        outcome = self._dispatcher.reserve(event, request)
        if not outcome.is_successful:
            return self._fail("rejected", outcome.message)
        reservation = outcome.reservation

        # Step 4: Build the booking for what was just reserved
        booking = Booking(
            user_id=user.id,
            event_id=event.id,
            kind=reservation.kind,
            total_amount=reservation.total_amount,
            items=[reservation.booking_item()],
        )

        # Step 5: Charge before anything is written
        payment = await self._payment_gateway.process_payment(
            self._payment_request(user, event, booking)
        )
        record_payment(payment.is_successful)
        if not payment.is_successful:
            booking.mark_failed()
            logger.warning("payment_declined", reason=payment.error_message)
            return self._fail("payment_failed", f"Payment failed: {payment.error_message}")
        booking.mark_paid()

        # Steps 6-7: Persist; past this point the caller cannot cancel
        return await asyncio.shield(
            self._persist(booking, reservation, request, payment.transaction_id)
        )

    async def _persist(
        self,
        booking: Booking,
        reservation: Reservation,
        request: ReservationRequest,
        transaction_id: str,
    ) -> BookingResult:
        async with self._uow_factory() as uow:
            saved = await uow.bookings.add(booking)
            if saved is None or saved.id is None:
                await uow.rollback()
                logger.error("booking_persist_failed", transaction_id=transaction_id)
                return self._fail(
                    "persist_failed",
                    f"Failed to create booking. Payment reference: {transaction_id}",
                )

            updated = None
            for attempt in range(1, MAX_RETRY_ATTEMPTS + 1):
                updated = await uow.events.update(reservation.event)
                if updated is not None:
                    break

                # Another attempt committed against this event first
                record_conflict()
                if attempt == MAX_RETRY_ATTEMPTS:
                    break
                logger.info(
                    "booking_retry",
                    attempt=attempt,
                    loaded_version=reservation.event.version,
                    reason="version_conflict",
                )
                current = await uow.events.get_by_id_with_details(booking.event_id)
                if current is None:
                    break
                outcome = self._dispatcher.reserve(current, request)
                if not outcome.is_successful:
                    logger.warning("booking_revalidation_failed", reason=outcome.message)
                    break
                reservation = outcome.reservation

            if updated is None:
                await uow.rollback()
                logger.error(
                    "event_update_conflict",
                    loaded_version=reservation.event.version,
                    transaction_id=transaction_id,
                )
                return self._fail(
                    "conflict",
                    f"Failed to update event after booking. Payment reference: {transaction_id}",
                )

            await uow.commit()

        record_booking_attempt("success")
        logger.info(
            "booking_created",
            booking_id=saved.id,
            booking_type=saved.kind.value,
            quantity=reservation.quantity,
            total_amount=str(saved.total_amount),
            event_version=updated.version,
        )
        return BookingResult.success(saved.id, saved.total_amount, SUCCESS_MESSAGE)

    @staticmethod
    def _payment_request(user: User, event: Event, booking: Booking) -> PaymentRequest:
        return PaymentRequest(
            user_id=user.id,
            amount=booking.total_amount,
            description=f"Booking for {event.name} on {event.starts_at:%Y-%m-%d}",
        )

    @staticmethod
    def _fail(status: str, message: str) -> BookingResult:
        record_booking_attempt(status)
        logger.info("booking_rejected", status=status, reason=message)
        return BookingResult.failure(message)


async def create_booking(
    uow_factory: Callable[[], UnitOfWork],
    payment_gateway: PaymentGateway,
    user_id: int,
    event_id: int,
    quantity: int = 1,
    section_id: int | None = None,
    seat_id: int | None = None,
) -> BookingResult:
    """One-shot helper using the default pipeline and dispatcher."""
    service = BookingService(uow_factory, payment_gateway)
    return await service.create_booking(user_id, event_id, quantity, section_id, seat_id)
