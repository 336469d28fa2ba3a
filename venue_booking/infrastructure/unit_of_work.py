"""
SQLAlchemy unit of work: one AsyncSession, one transaction, four repositories.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from venue_booking.infrastructure.repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyEventRepository,
    SqlAlchemyUserRepository,
    SqlAlchemyVenueRepository,
)
from venue_booking.services.interfaces.repositories import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """
    Usage:
        uow_factory = lambda: SqlAlchemyUnitOfWork(session_factory)
        async with uow_factory() as uow:
            ...
            await uow.commit()

    A unit of work is single-use; open a new one for every operation.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        if self.session is not None:
            raise RuntimeError("Unit of work already used; create a new one per operation")
        self.session = self._session_factory()
        self.users = SqlAlchemyUserRepository(self.session)
        self.venues = SqlAlchemyVenueRepository(self.session)
        self.events = SqlAlchemyEventRepository(self.session)
        self.bookings = SqlAlchemyBookingRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            await self.session.close()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


def sqlalchemy_uow_factory(session_factory: async_sessionmaker[AsyncSession]):
    """Return a zero-argument factory suitable for BookingService and the query services."""

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory)

    return factory
