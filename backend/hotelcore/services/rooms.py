"""
Room lookups and room administration
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from hotelcore.core import exceptions
from hotelcore.models.booking import Booking, BOOKING_CHECKED_IN
from hotelcore.models.hotel import Hotel
from hotelcore.models.room import Room, ROOM_STATUSES, ROOM_OCCUPIED

logger = logging.getLogger(__name__)

# occupied is only reachable through check-in
MANUAL_ROOM_STATUSES = tuple(s for s in ROOM_STATUSES if s != ROOM_OCCUPIED)


def hotel_timezone(db: Session, hotel_id: int) -> Optional[str]:
    """The hotel's IANA zone name; None lets the clock fall back to the default"""
    hotel = Hotel.live(db).filter(Hotel.id == hotel_id).first()
    return hotel.timezone if hotel else None


def get_hotel(db: Session, hotel_id: int) -> Hotel:
    hotel = Hotel.live(db).filter(Hotel.id == hotel_id).first()
    if not hotel:
        raise exceptions.HotelNotFound()
    return hotel


def get_room_by_number(db: Session, hotel_id: int, room_number: str) -> Optional[Room]:
    return Room.live(db).filter(
        Room.hotel_id == hotel_id,
        Room.room_number == room_number,
    ).first()


def get_active_booking(db: Session, room_id: int) -> Optional[Booking]:
    """Checked-in booking for the room, regardless of its check-out date"""
    return Booking.live(db).filter(
        Booking.room_id == room_id,
        Booking.status == BOOKING_CHECKED_IN,
    ).order_by(Booking.check_out_date.asc(), Booking.id.asc()).first()


def room_snapshot(room: Optional[Room]) -> Optional[dict]:
    if room is None:
        return None
    return {"id": room.id, "room_number": room.room_number, "status": room.status}


def booking_snapshot(booking: Optional[Booking]) -> Optional[dict]:
    if booking is None:
        return None
    return {
        "id": booking.id,
        "guest_name": booking.guest_name,
        "check_in_date": booking.check_in_date.isoformat(),
        "check_out_date": booking.check_out_date.isoformat(),
    }


def list_rooms(db: Session, hotel_id: int, status: Optional[str] = None) -> List[Room]:
    query = Room.live(db).filter(Room.hotel_id == hotel_id)
    if status:
        query = query.filter(Room.status == status)
    return query.order_by(Room.room_number).all()


def create_room(db: Session, hotel_id: int, room_number: str, status: str = "available") -> Room:
    get_hotel(db, hotel_id)
    room_number = room_number.strip()
    if not room_number:
        raise exceptions.ValidationFailed("room_number is required")
    if status not in MANUAL_ROOM_STATUSES:
        raise exceptions.ValidationFailed(f"Room status must be one of: {', '.join(MANUAL_ROOM_STATUSES)}")
    if get_room_by_number(db, hotel_id, room_number):
        raise exceptions.RoomAlreadyExists(room_number=room_number)

    room = Room(hotel_id=hotel_id, room_number=room_number, status=status)
    db.add(room)
    db.commit()
    db.refresh(room)
    logger.info("Created room %s for hotel %s", room_number, hotel_id)
    return room


def set_room_status(db: Session, room_id: int, status: str) -> Room:
    """Manual status change by staff (cleaning, maintenance, back to available)"""
    room = Room.live(db).filter(Room.id == room_id).first()
    if not room:
        raise exceptions.RoomNotFound()
    if status not in MANUAL_ROOM_STATUSES:
        raise exceptions.ValidationFailed(
            f"Room status must be one of: {', '.join(MANUAL_ROOM_STATUSES)}. Use check-in to occupy a room."
        )
    active = get_active_booking(db, room.id)
    if active:
        raise exceptions.RoomOccupied(
            "Room has an active booking; check the guest out first",
            existing_booking=booking_snapshot(active),
        )

    room.status = status
    db.commit()
    db.refresh(room)
    logger.info("Room %s status set to %s", room.room_number, status)
    return room


def delete_room(db: Session, room_id: int) -> Room:
    room = Room.live(db).filter(Room.id == room_id).first()
    if not room:
        raise exceptions.RoomNotFound()
    active = get_active_booking(db, room.id)
    if active:
        raise exceptions.RoomOccupied(
            "Room has an active booking and cannot be deleted",
            existing_booking=booking_snapshot(active),
        )
    room.soft_delete()
    db.commit()
    return room
