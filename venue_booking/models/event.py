"""
Event tables with per-shape inventory.

Key design decisions:
- Single `events` table with an `event_type` discriminator; open-capacity
  columns are simply unused by the other two shapes
- `reserved_count` is a denormalized counter for open-capacity events
  (avoids summing booking items on every availability check)
- Section-based events keep one `event_section_inventories` row per section,
  reserved-seating events one `event_seats` row per physical seat
- `version` column enables optimistic locking for concurrent booking; every
  inventory write for an event goes through the events row first
- CHECK constraints are the final safety net against overbooking
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from venue_booking.db.base import Base, TimestampMixin


class EventModel(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    starts_at = Column(DateTime(timezone=True), nullable=False)
    ends_at = Column(DateTime(timezone=True), nullable=True)
    estimated_attendance = Column(Integer, nullable=False, default=0)
    event_type = Column(String(30), nullable=False)

    # Open-capacity shape
    capacity = Column(Integer, nullable=True)
    reserved_count = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=True)

    # Event-wide cap that wins over the summed section capacities
    capacity_override = Column(Integer, nullable=True)
    # Flat price for reserved-seating events
    seat_price = Column(Numeric(10, 2), nullable=True)

    # Optimistic locking version counter
    version = Column(Integer, nullable=False, default=1)

    venue = relationship("VenueModel", back_populates="events")
    section_inventories = relationship(
        "EventSectionInventoryModel",
        back_populates="event",
        order_by="EventSectionInventoryModel.id",
    )
    seats = relationship(
        "EventSeatModel",
        back_populates="event",
        order_by="EventSeatModel.id",
    )
    bookings = relationship("BookingModel", back_populates="event")

    __table_args__ = (
        CheckConstraint(
            "event_type IN ('GeneralAdmission', 'SectionBased', 'ReservedSeating')",
            name="check_event_type",
        ),
        CheckConstraint("reserved_count >= 0", name="check_reserved_count_non_negative"),
        CheckConstraint("capacity IS NULL OR capacity >= 0", name="check_capacity_non_negative"),
        # Index on start time for range queries (upcoming events)
        Index("ix_events_starts_at", "starts_at"),
        Index("ix_events_venue_starts_at", "venue_id", "starts_at"),
    )

    def __repr__(self) -> str:
        return f"<EventModel(id={self.id}, name={self.name}, type={self.event_type}, v={self.version})>"


class EventSectionInventoryModel(Base):
    __tablename__ = "event_section_inventories"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    venue_section_id = Column(Integer, ForeignKey("venue_sections.id"), nullable=False)
    capacity = Column(Integer, nullable=False)
    booked = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    allocation_mode = Column(String(30), nullable=False, default="GeneralAdmission")

    event = relationship("EventModel", back_populates="section_inventories")
    venue_section = relationship("VenueSectionModel", lazy="joined")

    __table_args__ = (
        UniqueConstraint("event_id", "venue_section_id", name="uq_event_section_inventory"),
        CheckConstraint("booked >= 0", name="check_section_booked_non_negative"),
        CheckConstraint("booked <= capacity", name="check_section_booked_lte_capacity"),
        CheckConstraint(
            "allocation_mode IN ('GeneralAdmission', 'Reserved', 'BestAvailable')",
            name="check_section_allocation_mode",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<EventSectionInventoryModel(event={self.event_id}, "
            f"section={self.venue_section_id}, booked={self.booked}/{self.capacity})>"
        )


class EventSeatModel(Base):
    __tablename__ = "event_seats"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    venue_seat_id = Column(Integer, ForeignKey("venue_seats.id"), nullable=False)
    status = Column(String(20), nullable=False, default="Available")

    event = relationship("EventModel", back_populates="seats")
    venue_seat = relationship("VenueSeatModel", lazy="joined")

    __table_args__ = (
        # A physical seat appears once per event
        UniqueConstraint("event_id", "venue_seat_id", name="uq_event_seat"),
        CheckConstraint(
            "status IN ('Available', 'Reserved', 'Locked')",
            name="check_event_seat_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<EventSeatModel(event={self.event_id}, seat={self.venue_seat_id}, status={self.status})>"
