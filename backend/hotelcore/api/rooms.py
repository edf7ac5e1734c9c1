"""
Room administration API
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hotelcore.api.auth import get_current_user, require_admin
from hotelcore.db.database import get_db
from hotelcore.models.user import User
from hotelcore.schemas.room import RoomCreate, RoomResponse, RoomStatusUpdate
from hotelcore.services import rooms as room_service

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


@router.get("", response_model=List[RoomResponse])
def get_rooms(
    hotel_id: int = Query(..., description="Hotel"),
    status: Optional[str] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return room_service.list_rooms(db, hotel_id, status)


@router.post("", response_model=RoomResponse)
def create_room(
    room: RoomCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    return room_service.create_room(db, room.hotel_id, room.room_number, room.status)


@router.put("/{room_id}/status", response_model=RoomResponse)
def update_room_status(
    room_id: int,
    request: RoomStatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Housekeeping status change; occupied is only set by check-in"""
    return room_service.set_room_status(db, room_id, request.status)


@router.delete("/{room_id}")
def delete_room(
    room_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    room = room_service.delete_room(db, room_id)
    return {"message": f"Room {room.room_number} deleted"}
