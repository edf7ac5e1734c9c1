"""
Check-in and check-out

Room status and the booking table must agree: a room is occupied exactly when
it has a checked_in booking. The partial unique index on bookings is the
backstop for concurrent check-ins.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hotelcore.core import clock, exceptions
from hotelcore.models.booking import Booking, BOOKING_CHECKED_IN, BOOKING_CHECKED_OUT
from hotelcore.models.order import Order, PAYMENT_PENDING
from hotelcore.models.room import Room, ROOM_AVAILABLE, ROOM_OCCUPIED
from hotelcore.notifications import templates
from hotelcore.services.guests import find_or_create_guest
from hotelcore.services.rooms import (
    booking_snapshot, get_active_booking, get_hotel, get_room_by_number, room_snapshot,
)

logger = logging.getLogger(__name__)


@dataclass
class CheckOutResult:
    booking: Booking
    room_number: str
    pending_orders: List[Order] = field(default_factory=list)

    @property
    def pending_orders_count(self) -> int:
        return len(self.pending_orders)

    @property
    def pending_orders_total(self) -> Decimal:
        return sum((o.total_amount for o in self.pending_orders), Decimal("0.00"))


def pending_orders_for_booking(db: Session, room_id: int, booking_id: int) -> List[Order]:
    """Unpaid orders charged to the room during this stay"""
    return Order.live(db).filter(
        Order.room_id == room_id,
        Order.booking_id == booking_id,
        Order.payment_status == PAYMENT_PENDING,
    ).order_by(Order.created_at.asc(), Order.id.asc()).all()


def _mark_room(db: Session, room: Room, status: str):
    # The booking row is already committed; a failure here is logged, not raised
    try:
        room.status = status
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to set room %s status to %s", room.room_number, status)


def check_in(db: Session, hotel_id: int, room_number: str, guest_name: str,
             check_in_date: date, check_out_date: date,
             guest_email: Optional[str] = None, guest_phone: Optional[str] = None,
             special_requests: Optional[str] = None, created_by: Optional[int] = None,
             dispatcher=None) -> Booking:
    if not room_number or not guest_name or not check_in_date or not check_out_date:
        raise exceptions.ValidationFailed(
            "Missing required fields: room_number, guest_name, check_in_date, check_out_date"
        )

    hotel = get_hotel(db, hotel_id)
    today = clock.hotel_today(hotel.timezone)
    if check_in_date < today:
        raise exceptions.CheckInDateInPast(today=today.isoformat())
    if check_out_date <= check_in_date:
        raise exceptions.InvalidStayDates()

    room = get_room_by_number(db, hotel_id, room_number)
    if not room:
        raise exceptions.RoomNotFound(f"Room {room_number} not found")

    if room.status == ROOM_OCCUPIED:
        active = get_active_booking(db, room.id)
        if active:
            raise exceptions.RoomOccupied(
                room=room_snapshot(room),
                existing_booking=booking_snapshot(active),
            )
        # Room is marked occupied but nothing is checked in; the new booking repairs it
        logger.warning("Room %s marked occupied with no active booking, proceeding with check-in", room_number)
    elif room.status != ROOM_AVAILABLE:
        raise exceptions.RoomUnavailable(room.status, room=room_snapshot(room))

    guest = find_or_create_guest(db, hotel_id, guest_name, guest_email, guest_phone, check_in_date)
    booking = Booking(
        hotel_id=hotel_id,
        room_id=room.id,
        guest_id=guest.id,
        guest_name=guest_name,
        guest_email=guest_email,
        guest_phone=guest_phone,
        check_in_date=check_in_date,
        check_out_date=check_out_date,
        status=BOOKING_CHECKED_IN,
        total_amount=Decimal("0.00"),
        payment_status="pending",
        special_requests=special_requests,
        created_by=created_by,
    )
    db.add(booking)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against another check-in for the same room
        db.rollback()
        active = get_active_booking(db, room.id)
        if active is None:
            logger.exception("Check-in insert for room %s failed with no competing booking", room_number)
            raise
        logger.warning("Concurrent check-in rejected for room %s", room_number)
        raise exceptions.RoomOccupied(
            room=room_snapshot(room),
            existing_booking=booking_snapshot(active),
        )
    db.refresh(booking)

    _mark_room(db, room, ROOM_OCCUPIED)
    logger.info("Checked in %s to room %s (booking %s)", guest_name, room_number, booking.id)

    if dispatcher is not None:
        dispatcher.enqueue(templates.check_in_confirmation(hotel.title, booking, room.room_number))
    return booking


def check_out(db: Session, hotel_id: int, room_number: str) -> CheckOutResult:
    if not room_number:
        raise exceptions.ValidationFailed("room_number is required")

    room = get_room_by_number(db, hotel_id, room_number)
    if not room:
        raise exceptions.RoomNotFound(f"Room {room_number} not found")

    booking = get_active_booking(db, room.id)
    if not booking:
        if room.status != ROOM_OCCUPIED:
            raise exceptions.NothingToCheckOut(room=room_snapshot(room))
        # Occupied with nothing checked in: free the room, then report the drift
        room.status = ROOM_AVAILABLE
        db.commit()
        logger.warning("Room %s was occupied without an active booking; reset to available", room_number)
        raise exceptions.InconsistentState(room=room_snapshot(room))

    pending = pending_orders_for_booking(db, room.id, booking.id)

    booking.status = BOOKING_CHECKED_OUT
    db.commit()
    db.refresh(booking)

    _mark_room(db, room, ROOM_AVAILABLE)
    logger.info(
        "Checked out booking %s from room %s with %d pending orders",
        booking.id, room_number, len(pending),
    )
    return CheckOutResult(booking=booking, room_number=room.room_number, pending_orders=pending)


def check_out_info(db: Session, hotel_id: int, room_number: str) -> CheckOutResult:
    """Read-only preview of a check-out"""
    room = get_room_by_number(db, hotel_id, room_number)
    if not room:
        raise exceptions.RoomNotFound(f"Room {room_number} not found")
    booking = get_active_booking(db, room.id)
    if not booking:
        raise exceptions.NoActiveBooking(room=room_snapshot(room))
    pending = pending_orders_for_booking(db, room.id, booking.id)
    return CheckOutResult(booking=booking, room_number=room.room_number, pending_orders=pending)


def list_bookings(db: Session, hotel_id: int, status: Optional[str] = None, limit: int = 100) -> List[Booking]:
    query = Booking.live(db).filter(Booking.hotel_id == hotel_id)
    if status:
        query = query.filter(Booking.status == status)
    return query.order_by(Booking.created_at.desc(), Booking.id.desc()).limit(limit).all()
