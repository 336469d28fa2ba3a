"""
User model: the contact details a booking confirmation is sent to.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from venue_booking.db.base import Base, TimestampMixin


class UserModel(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=True)

    bookings = relationship("BookingModel", back_populates="user")

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email})>"
