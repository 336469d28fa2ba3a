"""
Booking and booking item models.

Key design decisions:
- Bookings are never deleted; payment_status records Paid/Refunded/Failed
- An item references at most one of an event seat or a section inventory row;
  open-capacity items reference neither
- total_amount stored as Numeric(10, 2), never float
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from venue_booking.db.base import Base, TimestampMixin


class BookingModel(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    booking_type = Column(String(20), nullable=False)
    payment_status = Column(String(20), nullable=False, default="Pending")
    total_amount = Column(Numeric(10, 2), nullable=False)

    user = relationship("UserModel", back_populates="bookings")
    event = relationship("EventModel", back_populates="bookings")
    items = relationship(
        "BookingItemModel",
        back_populates="booking",
        lazy="selectin",
        order_by="BookingItemModel.id",
    )

    __table_args__ = (
        CheckConstraint("booking_type IN ('GA', 'Section', 'Seat')", name="check_booking_type"),
        CheckConstraint(
            "payment_status IN ('Pending', 'Paid', 'Refunded', 'Failed')",
            name="check_booking_payment_status",
        ),
        CheckConstraint("total_amount >= 0", name="check_booking_total_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<BookingModel(id={self.id}, user={self.user_id}, event={self.event_id}, status={self.payment_status})>"


class BookingItemModel(Base):
    __tablename__ = "booking_items"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    event_seat_id = Column(Integer, ForeignKey("event_seats.id"), nullable=True)
    event_section_inventory_id = Column(
        Integer, ForeignKey("event_section_inventories.id"), nullable=True
    )
    quantity = Column(Integer, nullable=False, default=1)

    booking = relationship("BookingModel", back_populates="items")
    event_seat = relationship("EventSeatModel", lazy="selectin")
    section_inventory = relationship("EventSectionInventoryModel", lazy="selectin")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_booking_item_quantity_positive"),
        CheckConstraint(
            "event_seat_id IS NULL OR event_section_inventory_id IS NULL",
            name="check_booking_item_single_reference",
        ),
    )

    def __repr__(self) -> str:
        return f"<BookingItemModel(id={self.id}, booking={self.booking_id}, quantity={self.quantity})>"
