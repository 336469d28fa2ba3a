"""
Venue Booking Engine - composition root.

Wires settings, logging, the database engine, the payment gateway and the
application services together for a host process:

    async with lifespan() as engine:
        result = await engine.bookings.create_booking(user_id=1, event_id=7, quantity=2)

No transport is provided here; a host (web app, worker, CLI) owns that.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from venue_booking.core.config import get_settings
from venue_booking.core.logging import get_logger, setup_logging
from venue_booking.db.base import Base
from venue_booking.db.session import get_engine, get_session_factory
from venue_booking.infrastructure import sqlalchemy_uow_factory
from venue_booking.services.booking_query_service import BookingQueryService
from venue_booking.services.booking_service import BookingService
from venue_booking.services.event_query_service import EventQueryService
from venue_booking.services.scheduling import EventSchedulingService
from venue_booking.services.strategy_factory import get_payment_gateway

import venue_booking.models  # noqa: F401  registers tables on Base.metadata


@dataclass
class BookingEngine:
    bookings: BookingService
    events: EventQueryService
    booking_queries: BookingQueryService
    scheduling: EventSchedulingService


@asynccontextmanager
async def lifespan(create_tables: bool = False) -> AsyncIterator[BookingEngine]:
    """Application lifecycle: startup and shutdown hooks."""
    settings = get_settings()
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        payment_gateway=settings.PAYMENT_GATEWAY,
    )

    engine = get_engine()
    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_ready")

    uow_factory = sqlalchemy_uow_factory(get_session_factory())
    try:
        yield BookingEngine(
            bookings=BookingService(uow_factory, get_payment_gateway()),
            events=EventQueryService(uow_factory),
            booking_queries=BookingQueryService(uow_factory),
            scheduling=EventSchedulingService(uow_factory),
        )
    finally:
        await engine.dispose()
        logger.info("application_shutdown")


def health_check() -> dict:
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }
