"""
Pytest fixtures for the test database, seeded venue/users/events and
payment gateway doubles.

Each test gets a fresh SQLite file (via aiosqlite) with all tables created
from Base.metadata, so every unit of work opens its own real connection
and transaction.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine

from venue_booking.db.base import Base
from venue_booking.db.session import create_session_factory
from venue_booking.infrastructure import sqlalchemy_uow_factory
from venue_booking.models import (
    EventModel,
    EventSeatModel,
    EventSectionInventoryModel,
    UserModel,
    VenueModel,
    VenueSeatModel,
    VenueSectionModel,
)
from venue_booking.services.booking_service import BookingService
from venue_booking.services.interfaces.payment import PaymentGateway, PaymentRequest, PaymentResult
from venue_booking.services.validators import default_pipeline


class RecordingPaymentGateway(PaymentGateway):
    """Approves (or declines) every charge and remembers what it was asked."""

    def __init__(self, approve: bool = True, decline_message: str = "Card declined"):
        self.approve = approve
        self.decline_message = decline_message
        self.requests: list[PaymentRequest] = []

    async def process_payment(self, request: PaymentRequest) -> PaymentResult:
        self.requests.append(request)
        # Yield like a real network call would
        await asyncio.sleep(0)
        if not self.approve:
            return PaymentResult.failure(self.decline_message)
        return PaymentResult.success(f"TXN-TEST-{len(self.requests)}")


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create tables, yield engine, then drop tables for isolation."""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine):
    return create_session_factory(engine)


@pytest.fixture
def uow_factory(session_factory):
    return sqlalchemy_uow_factory(session_factory)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def payment_gateway() -> RecordingPaymentGateway:
    return RecordingPaymentGateway()


@pytest.fixture
def booking_service(uow_factory, payment_gateway) -> BookingService:
    return BookingService(uow_factory, payment_gateway, pipeline=default_pipeline())


def _future(days: int) -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=days)


@pytest_asyncio.fixture
async def venue(db_session: AsyncSession) -> VenueModel:
    """Test Arena: Floor (A1, A2) and Balcony (B1, B2)."""
    venue = VenueModel(name="Test Arena", address="1 Main Street")
    venue.sections = [
        VenueSectionModel(
            name="Floor",
            seats=[
                VenueSeatModel(row="A", number="1"),
                VenueSeatModel(row="A", number="2"),
            ],
        ),
        VenueSectionModel(
            name="Balcony",
            seats=[
                VenueSeatModel(row="B", number="1", label="Box 1"),
                VenueSeatModel(row="B", number="2"),
            ],
        ),
    ]
    db_session.add(venue)
    await db_session.commit()
    return venue


@pytest.fixture
def floor(venue: VenueModel) -> VenueSectionModel:
    return venue.sections[0]


@pytest.fixture
def balcony(venue: VenueModel) -> VenueSectionModel:
    return venue.sections[1]


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> UserModel:
    user = UserModel(name="Test User", email="test@example.com")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def second_user(db_session: AsyncSession) -> UserModel:
    user = UserModel(name="Second User", email="second@example.com")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def open_event(db_session: AsyncSession, venue: VenueModel) -> EventModel:
    """Open-capacity event: 10 places at 50.00."""
    event = EventModel(
        venue_id=venue.id,
        name="Test Concert",
        starts_at=_future(30),
        event_type="GeneralAdmission",
        capacity=10,
        reserved_count=0,
        price=Decimal("50.00"),
        version=1,
    )
    db_session.add(event)
    await db_session.commit()
    return event


@pytest_asyncio.fixture
async def section_event(db_session: AsyncSession, venue: VenueModel, floor, balcony) -> EventModel:
    """Section event: Floor 500 @ 100.00, Balcony 2 @ 40.00."""
    event = EventModel(
        venue_id=venue.id,
        name="Test Festival",
        starts_at=_future(40),
        event_type="SectionBased",
        version=1,
    )
    event.section_inventories = [
        EventSectionInventoryModel(
            venue_section_id=floor.id, capacity=500, booked=0, price=Decimal("100.00")
        ),
        EventSectionInventoryModel(
            venue_section_id=balcony.id, capacity=2, booked=0, price=Decimal("40.00")
        ),
    ]
    db_session.add(event)
    await db_session.commit()
    return event


@pytest_asyncio.fixture
async def seat_event(db_session: AsyncSession, venue: VenueModel, floor, balcony) -> EventModel:
    """Reserved-seating event over every seat in the venue at 75.00 each."""
    event = EventModel(
        venue_id=venue.id,
        name="Test Play",
        starts_at=_future(50),
        event_type="ReservedSeating",
        seat_price=Decimal("75.00"),
        version=1,
    )
    event.seats = [
        EventSeatModel(venue_seat_id=seat.id, status="Available")
        for section in (floor, balcony)
        for seat in section.seats
    ]
    db_session.add(event)
    await db_session.commit()
    return event


@pytest_asyncio.fixture
async def started_event(db_session: AsyncSession, venue: VenueModel) -> EventModel:
    """Open-capacity event that began an hour ago."""
    event = EventModel(
        venue_id=venue.id,
        name="Already Running",
        starts_at=datetime.now(timezone.utc) - timedelta(hours=1),
        event_type="GeneralAdmission",
        capacity=100,
        reserved_count=0,
        price=Decimal("20.00"),
        version=1,
    )
    db_session.add(event)
    await db_session.commit()
    return event
