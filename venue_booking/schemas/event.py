"""
Pydantic schemas for event availability read models.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class SectionAvailability(BaseModel):
    section_id: int
    section_name: str = ""
    capacity: int
    booked: int
    available: int
    price: Decimal
    allocation_mode: str
    is_available: bool
    availability_percentage: float


class SeatAvailability(BaseModel):
    venue_seat_id: int
    section_id: Optional[int] = None
    row: str = ""
    seat_number: str = ""
    seat_label: str = ""
    status: str
    is_available: bool


class EventAvailability(BaseModel):
    id: int
    name: str
    starts_at: datetime
    ends_at: Optional[datetime] = None
    venue_id: int
    venue_name: str = "Unknown Venue"
    venue_address: str = ""
    event_type: str
    estimated_attendance: int = 0

    total_capacity: int
    reserved_count: int
    available_capacity: int
    price: Optional[Decimal] = None
    is_available: bool
    availability_percentage: float

    sections: list[SectionAvailability] = Field(default_factory=list)
    seats: list[SeatAvailability] = Field(default_factory=list)
