"""
ORM row <-> domain object mapping.

Rows never leave the infrastructure package; repositories hand out domain
objects only. SQLite drops timezone info, so every datetime read back is
normalised to aware UTC and every datetime written is converted to UTC first.
"""

from datetime import datetime, timezone
from decimal import Decimal

from venue_booking.domain import (
    AllocationMode,
    Booking,
    BookingItem,
    BookingKind,
    Event,
    EventKind,
    EventSeat,
    OpenAdmission,
    PaymentStatus,
    SeatRegistry,
    SeatStatus,
    SectionInventory,
    SectionQuota,
    User,
    Venue,
    VenueSeat,
    VenueSection,
)
from venue_booking.models import (
    BookingItemModel,
    BookingModel,
    EventModel,
    EventSeatModel,
    EventSectionInventoryModel,
    UserModel,
    VenueModel,
)


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _money(value) -> Decimal | None:
    if value is None:
        return None
    return Decimal(value).quantize(Decimal("0.01"))


# --- Venue ---

def venue_to_domain(model: VenueModel) -> Venue:
    sections = tuple(
        VenueSection(
            id=section.id,
            venue_id=section.venue_id,
            name=section.name,
            seats=tuple(
                VenueSeat(
                    id=seat.id,
                    section_id=seat.section_id,
                    row=seat.row,
                    number=seat.number,
                    label=seat.label,
                )
                for seat in section.seats
            ),
        )
        for section in model.sections
    )
    return Venue(id=model.id, name=model.name, address=model.address or "", sections=sections)


# --- User ---

def user_to_domain(model: UserModel, bookings: list[BookingModel]) -> User:
    return User(
        id=model.id,
        name=model.name,
        email=model.email,
        phone=model.phone,
        bookings=tuple(booking_to_domain(b) for b in bookings),
    )


# --- Event ---

def _inventory_to_domain(model: EventSectionInventoryModel) -> SectionInventory:
    section = model.venue_section
    return SectionInventory(
        id=model.id,
        event_id=model.event_id,
        section_id=model.venue_section_id,
        capacity=model.capacity,
        price=_money(model.price),
        allocation_mode=AllocationMode(model.allocation_mode),
        booked=model.booked,
        section_name=section.name if section is not None else "",
    )


def _seat_to_domain(model: EventSeatModel) -> EventSeat:
    venue_seat = model.venue_seat
    return EventSeat(
        id=model.id,
        event_id=model.event_id,
        venue_seat_id=model.venue_seat_id,
        status=SeatStatus(model.status),
        section_id=venue_seat.section_id if venue_seat is not None else None,
        row=venue_seat.row if venue_seat is not None else "",
        number=venue_seat.number if venue_seat is not None else "",
        label=venue_seat.label if venue_seat is not None else None,
    )


def event_to_domain(model: EventModel) -> Event:
    kind = EventKind(model.event_type)
    if kind is EventKind.OPEN:
        allocation = OpenAdmission(
            capacity=model.capacity or 0,
            reserved=model.reserved_count or 0,
            price=_money(model.price),
            capacity_override=model.capacity_override,
        )
    elif kind is EventKind.SECTION:
        allocation = SectionQuota(
            inventories=[_inventory_to_domain(i) for i in model.section_inventories],
            capacity_override=model.capacity_override,
        )
    else:
        allocation = SeatRegistry(
            seats=[_seat_to_domain(s) for s in model.seats],
            seat_price=_money(model.seat_price),
        )

    return Event(
        id=model.id,
        venue_id=model.venue_id,
        name=model.name,
        starts_at=as_utc(model.starts_at),
        ends_at=as_utc(model.ends_at),
        estimated_attendance=model.estimated_attendance or 0,
        allocation=allocation,
        version=model.version,
    )


def event_to_model(event: Event) -> EventModel:
    """Build new rows for an event that has not been stored yet."""
    model = EventModel(
        venue_id=event.venue_id,
        name=event.name,
        starts_at=as_utc(event.starts_at),
        ends_at=as_utc(event.ends_at),
        estimated_attendance=event.estimated_attendance,
        event_type=event.kind.value,
        reserved_count=0,
        version=event.version,
    )
    allocation = event.allocation
    if event.kind is EventKind.OPEN:
        model.capacity = allocation.capacity
        model.reserved_count = allocation.reserved
        model.price = allocation.price
        model.capacity_override = allocation.capacity_override
    elif event.kind is EventKind.SECTION:
        model.capacity_override = allocation.capacity_override
        model.section_inventories = [
            EventSectionInventoryModel(
                venue_section_id=inventory.section_id,
                capacity=inventory.capacity,
                booked=inventory.booked,
                price=inventory.price,
                allocation_mode=inventory.allocation_mode.value,
            )
            for inventory in allocation.inventories
        ]
    else:
        model.seat_price = allocation.seat_price
        model.seats = [
            EventSeatModel(venue_seat_id=seat.venue_seat_id, status=seat.status.value)
            for seat in allocation.seats
        ]
    return model


def event_column_values(event: Event) -> dict:
    """Columns on the events row that a stored event may change."""
    allocation = event.allocation
    if event.kind is EventKind.OPEN:
        return {
            "capacity": allocation.capacity,
            "reserved_count": allocation.reserved,
            "price": allocation.price,
            "capacity_override": allocation.capacity_override,
        }
    if event.kind is EventKind.SECTION:
        return {"capacity_override": allocation.capacity_override}
    return {"seat_price": allocation.seat_price}


# --- Booking ---

def _item_to_domain(model: BookingItemModel) -> BookingItem:
    seat_label = None
    if model.event_seat is not None and model.event_seat.venue_seat is not None:
        venue_seat = model.event_seat.venue_seat
        seat_label = venue_seat.label or f"{venue_seat.row}{venue_seat.number}"

    section_name = None
    if model.section_inventory is not None and model.section_inventory.venue_section is not None:
        section_name = model.section_inventory.venue_section.name

    return BookingItem(
        id=model.id,
        quantity=model.quantity,
        event_seat_id=model.event_seat_id,
        section_inventory_id=model.event_section_inventory_id,
        seat_label=seat_label,
        section_name=section_name,
    )


def booking_to_domain(model: BookingModel) -> Booking:
    return Booking(
        id=model.id,
        user_id=model.user_id,
        event_id=model.event_id,
        kind=BookingKind(model.booking_type),
        total_amount=_money(model.total_amount),
        items=[_item_to_domain(item) for item in model.items],
        payment_status=PaymentStatus(model.payment_status),
        created_at=as_utc(model.created_at),
    )


def booking_to_model(booking: Booking) -> BookingModel:
    return BookingModel(
        user_id=booking.user_id,
        event_id=booking.event_id,
        booking_type=booking.kind.value,
        payment_status=booking.payment_status.value,
        total_amount=booking.total_amount,
        created_at=as_utc(booking.created_at),
        items=[
            BookingItemModel(
                quantity=item.quantity,
                event_seat_id=item.event_seat_id,
                event_section_inventory_id=item.section_inventory_id,
            )
            for item in booking.items
        ],
    )
