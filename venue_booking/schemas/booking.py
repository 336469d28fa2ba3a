"""
Pydantic schemas for the booking command and its read models.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class CreateBookingCommand(BaseModel):
    """Input for the create-booking use case.

    Quantity is deliberately unconstrained here: out-of-range quantities are
    business outcomes reported through BookingResult, not parse errors.
    """

    user_id: int
    event_id: int
    quantity: int = 1
    section_id: Optional[int] = None
    seat_id: Optional[int] = None


class BookingResult(BaseModel):
    is_successful: bool
    booking_id: Optional[int] = None
    total_amount: Optional[Decimal] = None
    message: str = ""
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def success(cls, booking_id: int, total_amount: Decimal, message: str) -> "BookingResult":
        return cls(
            is_successful=True,
            booking_id=booking_id,
            total_amount=total_amount,
            message=message,
        )

    @classmethod
    def failure(cls, error: str) -> "BookingResult":
        return cls(is_successful=False, message=error, errors=[error])


class BookingItemSummary(BaseModel):
    id: Optional[int]
    quantity: int
    event_seat_id: Optional[int] = None
    section_inventory_id: Optional[int] = None
    seat_label: Optional[str] = None
    section_name: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingSummary(BaseModel):
    id: int
    user_id: int
    user_name: str = ""
    user_email: str = ""
    event_id: int
    event_name: str = ""
    event_starts_at: Optional[datetime] = None
    venue_id: Optional[int] = None
    venue_name: str = "Unknown Venue"
    booking_type: str
    payment_status: str
    total_amount: Decimal
    created_at: datetime
    items: list[BookingItemSummary] = Field(default_factory=list)
