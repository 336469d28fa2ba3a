"""
Physical venue layout: venues -> venue_sections -> venue_seats.

Key design decisions:
- Section capacity is never stored; it is the count of its seat rows
- Unique constraint on (section_id, row, number) so a seat position exists once
"""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from venue_booking.db.base import Base, TimestampMixin


class VenueModel(Base, TimestampMixin):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=False, default="")

    sections = relationship(
        "VenueSectionModel",
        back_populates="venue",
        lazy="selectin",
        order_by="VenueSectionModel.id",
    )
    events = relationship("EventModel", back_populates="venue")

    def __repr__(self) -> str:
        return f"<VenueModel(id={self.id}, name={self.name})>"


class VenueSectionModel(Base):
    __tablename__ = "venue_sections"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)

    venue = relationship("VenueModel", back_populates="sections")
    seats = relationship(
        "VenueSeatModel",
        back_populates="section",
        order_by="VenueSeatModel.id",
    )

    def __repr__(self) -> str:
        return f"<VenueSectionModel(id={self.id}, name={self.name})>"


class VenueSeatModel(Base):
    __tablename__ = "venue_seats"

    id = Column(Integer, primary_key=True, index=True)
    section_id = Column(Integer, ForeignKey("venue_sections.id"), nullable=False, index=True)
    row = Column(String(10), nullable=False)
    number = Column(String(10), nullable=False)
    label = Column(String(50), nullable=True)

    section = relationship("VenueSectionModel", back_populates="seats")

    __table_args__ = (
        UniqueConstraint("section_id", "row", "number", name="uq_venue_seat_position"),
    )

    def __repr__(self) -> str:
        return f"<VenueSeatModel(id={self.id}, row={self.row}, number={self.number})>"
