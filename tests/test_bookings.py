"""
Tests for the booking orchestrator including concurrency scenarios.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from conftest import RecordingPaymentGateway
from venue_booking.domain import PaymentStatus, SeatStatus
from venue_booking.infrastructure import SqlAlchemyUnitOfWork
from venue_booking.infrastructure.repositories import SqlAlchemyBookingRepository
from venue_booking.models import BookingModel, EventModel
from venue_booking.schemas.booking import CreateBookingCommand
from venue_booking.services.booking_service import SUCCESS_MESSAGE, BookingService, create_booking


async def count_bookings(db_session, event_id: int) -> int:
    result = await db_session.execute(
        select(func.count()).select_from(BookingModel).where(BookingModel.event_id == event_id)
    )
    return result.scalar()


@pytest.mark.asyncio
async def test_book_open_event(booking_service, uow_factory, payment_gateway, test_user, open_event):
    """Successful booking is paid, persisted and increments the reserved counter."""
    result = await booking_service.create_booking(test_user.id, open_event.id, quantity=2)

    assert result.is_successful, result.message
    assert result.message == SUCCESS_MESSAGE
    assert result.total_amount == Decimal("100.00")
    assert result.errors == []

    async with uow_factory() as uow:
        booking = await uow.bookings.get_by_id(result.booking_id)
        event = await uow.events.get_by_id_with_details(open_event.id)

    assert booking.payment_status is PaymentStatus.PAID
    assert booking.ticket_count == 2
    assert event.total_reserved == 2
    assert event.available_capacity == 8
    assert event.version == 2

    request = payment_gateway.requests[0]
    assert request.user_id == test_user.id
    assert request.amount == Decimal("100.00")
    assert request.description == f"Booking for Test Concert on {open_event.starts_at:%Y-%m-%d}"


@pytest.mark.asyncio
async def test_payment_failure_persists_nothing(uow_factory, db_session, test_user, open_event):
    """Declined payment leaves no booking and an unchanged counter on read-back."""
    service = BookingService(uow_factory, RecordingPaymentGateway(approve=False))

    result = await service.create_booking(test_user.id, open_event.id, quantity=2)

    assert not result.is_successful
    assert result.message == "Payment failed: Card declined"
    assert result.errors == ["Payment failed: Card declined"]
    assert result.booking_id is None

    async with uow_factory() as uow:
        event = await uow.events.get_by_id_with_details(open_event.id)
    assert event.total_reserved == 0
    assert event.version == 1
    assert await count_bookings(db_session, open_event.id) == 0


@pytest.mark.asyncio
async def test_payment_failure_does_not_leak_into_next_attempt(uow_factory, test_user, open_event):
    gateway = RecordingPaymentGateway(approve=False)
    service = BookingService(uow_factory, gateway)

    await service.create_booking(test_user.id, open_event.id, quantity=2)
    gateway.approve = True
    result = await service.create_booking(test_user.id, open_event.id, quantity=1)

    assert result.is_successful
    async with uow_factory() as uow:
        event = await uow.events.get_by_id_with_details(open_event.id)
    assert event.total_reserved == 1


@pytest.mark.asyncio
async def test_unknown_user(booking_service, payment_gateway, open_event):
    result = await booking_service.create_booking(99999, open_event.id)

    assert result.message == "User not found"
    assert payment_gateway.requests == []


@pytest.mark.asyncio
async def test_unknown_event(booking_service, payment_gateway, test_user):
    result = await booking_service.create_booking(test_user.id, 99999)

    assert result.message == "Event not found"
    assert payment_gateway.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "user_id, event_id, message",
    [
        (0, 1, "Valid User ID is required"),
        (-3, 1, "Valid User ID is required"),
        (1, 0, "Valid Event ID is required"),
    ],
)
async def test_invalid_identifiers_rejected_before_loading(booking_service, payment_gateway, user_id, event_id, message):
    result = await booking_service.create_booking(user_id, event_id)

    assert result.message == message
    assert payment_gateway.requests == []


@pytest.mark.asyncio
async def test_unknown_venue(booking_service, db_session, test_user, open_event):
    orphan = EventModel(
        venue_id=424242,
        name="Nowhere Gig",
        starts_at=open_event.starts_at,
        event_type="GeneralAdmission",
        capacity=10,
        reserved_count=0,
        price=Decimal("10.00"),
        version=1,
    )
    db_session.add(orphan)
    await db_session.commit()

    result = await booking_service.create_booking(test_user.id, orphan.id)

    assert result.message == "Venue not found"


@pytest.mark.asyncio
async def test_book_section(booking_service, uow_factory, test_user, section_event, floor):
    """Section 500 @ 100.00, book 4 -> total 400.00, booked 4, remaining 496."""
    result = await booking_service.create_booking(
        test_user.id, section_event.id, quantity=4, section_id=floor.id
    )

    assert result.is_successful, result.message
    assert result.total_amount == Decimal("400.00")

    async with uow_factory() as uow:
        event = await uow.events.get_by_id_with_details(section_event.id)
        booking = await uow.bookings.get_by_id(result.booking_id)

    section = event.section_quota.get_section(floor.id)
    assert section.booked == 4
    assert section.remaining == 496
    assert booking.items[0].section_inventory_id == section.id
    assert booking.items[0].section_name == "Floor"


@pytest.mark.asyncio
async def test_section_event_requires_section(booking_service, payment_gateway, db_session, test_user, section_event):
    result = await booking_service.create_booking(test_user.id, section_event.id, quantity=2)

    assert result.message == "Section ID is required for section-based events."
    assert payment_gateway.requests == []
    assert await count_bookings(db_session, section_event.id) == 0


@pytest.mark.asyncio
async def test_book_seat_then_seat_taken(booking_service, uow_factory, test_user, second_user, seat_event, floor):
    seat = floor.seats[0]

    first = await booking_service.create_booking(test_user.id, seat_event.id, seat_id=seat.id)
    second = await booking_service.create_booking(second_user.id, seat_event.id, seat_id=seat.id)

    assert first.is_successful, first.message
    assert first.total_amount == Decimal("75.00")
    assert second.message == "Seat not available. Current status: Reserved"

    async with uow_factory() as uow:
        event = await uow.events.get_by_id_with_details(seat_event.id)
    assert event.seat_registry.get_seat(seat.id).status is SeatStatus.RESERVED
    assert event.total_reserved == 1


@pytest.mark.asyncio
async def test_validation_message_surfaced_verbatim(booking_service, test_user, open_event):
    result = await booking_service.create_booking(test_user.id, open_event.id, quantity=11)

    assert result.message == "Maximum booking quantity is 10 tickets per transaction."


@pytest.mark.asyncio
async def test_per_user_limit_counts_earlier_bookings(booking_service, test_user, open_event):
    first = await booking_service.create_booking(test_user.id, open_event.id, quantity=3)
    second = await booking_service.create_booking(test_user.id, open_event.id, quantity=2)

    assert first.is_successful
    assert second.message == (
        "Booking limit exceeded. Maximum 4 tickets per person. You already have 3 ticket(s)."
    )


@pytest.mark.asyncio
async def test_started_event_rejected(booking_service, test_user, started_event):
    result = await booking_service.create_booking(test_user.id, started_event.id)

    assert result.message == "Cannot book tickets for an event that has already started."


@pytest.mark.asyncio
async def test_execute_command(booking_service, test_user, section_event, balcony):
    command = CreateBookingCommand(
        user_id=test_user.id, event_id=section_event.id, quantity=2, section_id=balcony.id
    )

    result = await booking_service.execute(command)

    assert result.is_successful
    assert result.total_amount == Decimal("80.00")


@pytest.mark.asyncio
async def test_module_level_helper(uow_factory, test_user, open_event):
    result = await create_booking(uow_factory, RecordingPaymentGateway(), test_user.id, open_event.id)

    assert result.is_successful


class RejectingBookingRepository(SqlAlchemyBookingRepository):
    async def add(self, booking):
        return None


class RejectingUnitOfWork(SqlAlchemyUnitOfWork):
    async def __aenter__(self):
        await super().__aenter__()
        self.bookings = RejectingBookingRepository(self.session)
        return self


@pytest.mark.asyncio
async def test_persist_failure_skips_event_update(session_factory, uow_factory, test_user, open_event):
    service = BookingService(lambda: RejectingUnitOfWork(session_factory), RecordingPaymentGateway())

    result = await service.create_booking(test_user.id, open_event.id, quantity=2)

    assert result.message == "Failed to create booking. Payment reference: TXN-TEST-1"
    async with uow_factory() as uow:
        event = await uow.events.get_by_id_with_details(open_event.id)
    assert event.total_reserved == 0
    assert event.version == 1


class InterleavingPaymentGateway(RecordingPaymentGateway):
    """Runs a competing booking while the first charge is in flight."""

    def __init__(self, competitor):
        super().__init__()
        self.competitor = competitor

    async def process_payment(self, request):
        if self.competitor is not None:
            competitor, self.competitor = self.competitor, None
            await competitor()
        return await super().process_payment(request)


@pytest.mark.asyncio
async def test_version_conflict_retries_against_fresh_state(uow_factory, db_session, test_user, second_user, open_event):
    """A rival commit during payment forces a reload; spare capacity means both succeed."""
    rival = BookingService(uow_factory, RecordingPaymentGateway())
    rival_results = []

    async def competitor():
        rival_results.append(await rival.create_booking(second_user.id, open_event.id, quantity=1))

    service = BookingService(uow_factory, InterleavingPaymentGateway(competitor))

    result = await service.create_booking(test_user.id, open_event.id, quantity=2)

    assert rival_results[0].is_successful
    assert result.is_successful, result.message

    async with uow_factory() as uow:
        event = await uow.events.get_by_id_with_details(open_event.id)
    assert event.total_reserved == 3
    assert event.version == 3
    assert await count_bookings(db_session, open_event.id) == 2


@pytest.mark.asyncio
async def test_version_conflict_fails_when_fresh_state_is_short(uow_factory, db_session, test_user, second_user, venue):
    """Rival takes one of two places during payment; re-reserving two must fail."""
    duo = EventModel(
        venue_id=venue.id,
        name="Duo Set",
        starts_at=datetime.now(timezone.utc) + timedelta(days=10),
        event_type="GeneralAdmission",
        capacity=2,
        reserved_count=0,
        price=Decimal("25.00"),
        version=1,
    )
    db_session.add(duo)
    await db_session.commit()

    rival = BookingService(uow_factory, RecordingPaymentGateway())

    async def competitor():
        await rival.create_booking(second_user.id, duo.id, quantity=1)

    service = BookingService(uow_factory, InterleavingPaymentGateway(competitor))

    result = await service.create_booking(test_user.id, duo.id, quantity=2)

    assert result.message == "Failed to update event after booking. Payment reference: TXN-TEST-1"
    async with uow_factory() as uow:
        event = await uow.events.get_by_id_with_details(duo.id)
    assert event.total_reserved == 1
    assert event.version == 2
    assert await count_bookings(db_session, duo.id) == 1


@pytest.mark.asyncio
async def test_concurrent_bookings_with_spare_capacity_all_succeed(uow_factory, test_user, second_user, open_event):
    gateway = RecordingPaymentGateway()
    service = BookingService(uow_factory, gateway)

    results = await asyncio.gather(
        service.create_booking(test_user.id, open_event.id),
        service.create_booking(second_user.id, open_event.id),
    )

    assert all(r.is_successful for r in results), [r.message for r in results]
    assert len(gateway.requests) == 2
    async with uow_factory() as uow:
        event = await uow.events.get_by_id_with_details(open_event.id)
    assert event.total_reserved == 2


@pytest.mark.asyncio
async def test_concurrent_bookings_in_different_sections_succeed(
    uow_factory, test_user, second_user, section_event, floor, balcony
):
    service = BookingService(uow_factory, RecordingPaymentGateway())

    results = await asyncio.gather(
        service.create_booking(test_user.id, section_event.id, section_id=floor.id),
        service.create_booking(second_user.id, section_event.id, section_id=balcony.id),
    )

    assert all(r.is_successful for r in results), [r.message for r in results]
    async with uow_factory() as uow:
        event = await uow.events.get_by_id_with_details(section_event.id)
    assert event.section_quota.get_section(floor.id).booked == 1
    assert event.section_quota.get_section(balcony.id).booked == 1


@pytest.mark.asyncio
async def test_concurrent_bookings_for_different_seats_succeed(
    uow_factory, test_user, second_user, seat_event, floor
):
    first_seat, second_seat = floor.seats
    service = BookingService(uow_factory, RecordingPaymentGateway())

    results = await asyncio.gather(
        service.create_booking(test_user.id, seat_event.id, seat_id=first_seat.id),
        service.create_booking(second_user.id, seat_event.id, seat_id=second_seat.id),
    )

    assert all(r.is_successful for r in results), [r.message for r in results]
    async with uow_factory() as uow:
        event = await uow.events.get_by_id_with_details(seat_event.id)
    assert event.total_reserved == 2


@pytest.mark.asyncio
async def test_concurrent_bookings_for_same_seat_one_wins(
    uow_factory, db_session, test_user, second_user, seat_event, floor
):
    seat = floor.seats[0]
    service = BookingService(uow_factory, RecordingPaymentGateway())

    results = await asyncio.gather(
        service.create_booking(test_user.id, seat_event.id, seat_id=seat.id),
        service.create_booking(second_user.id, seat_event.id, seat_id=seat.id),
    )

    assert sum(r.is_successful for r in results) == 1
    assert await count_bookings(db_session, seat_event.id) == 1


@pytest.mark.asyncio
async def test_concurrent_attempts_for_last_place(uow_factory, db_session, test_user, second_user, venue):
    """Two simultaneous attempts for the one remaining place: exactly one wins."""
    last_place = EventModel(
        venue_id=venue.id,
        name="Intimate Set",
        starts_at=datetime.now(timezone.utc) + timedelta(days=10),
        event_type="GeneralAdmission",
        capacity=1,
        reserved_count=0,
        price=Decimal("30.00"),
        version=1,
    )
    db_session.add(last_place)
    await db_session.commit()

    service = BookingService(uow_factory, RecordingPaymentGateway())

    results = await asyncio.gather(
        service.create_booking(test_user.id, last_place.id),
        service.create_booking(second_user.id, last_place.id),
    )

    assert sum(r.is_successful for r in results) == 1
    async with uow_factory() as uow:
        event = await uow.events.get_by_id_with_details(last_place.id)
    assert event.total_reserved == 1
    assert await count_bookings(db_session, last_place.id) == 1


class BlockingPaymentGateway(RecordingPaymentGateway):
    def __init__(self):
        super().__init__()
        self.entered = asyncio.Event()

    async def process_payment(self, request):
        self.entered.set()
        await asyncio.sleep(30)
        return await super().process_payment(request)


@pytest.mark.asyncio
async def test_cancellation_during_payment_persists_nothing(uow_factory, db_session, test_user, open_event):
    gateway = BlockingPaymentGateway()
    service = BookingService(uow_factory, gateway)

    task = asyncio.create_task(service.create_booking(test_user.id, open_event.id, quantity=2))
    await gateway.entered.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    async with uow_factory() as uow:
        event = await uow.events.get_by_id_with_details(open_event.id)
    assert event.total_reserved == 0
    assert await count_bookings(db_session, open_event.id) == 0
