"""
Room model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from hotelcore.core import clock
from hotelcore.db.database import Base
from hotelcore.db.soft_delete import SoftDeleteMixin

ROOM_AVAILABLE = "available"
ROOM_OCCUPIED = "occupied"
ROOM_CLEANING = "cleaning"
ROOM_MAINTENANCE = "maintenance"

ROOM_STATUSES = (ROOM_AVAILABLE, ROOM_OCCUPIED, ROOM_CLEANING, ROOM_MAINTENANCE)


class Room(SoftDeleteMixin, Base):
    """Rooms"""
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True, comment="Hotel ID")
    room_number = Column(String(20), nullable=False, comment="Room number as printed on the door")
    status = Column(String(20), default=ROOM_AVAILABLE, nullable=False,
                    comment="available, occupied, cleaning, maintenance")
    created_at = Column(DateTime(timezone=True), default=clock.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=clock.utcnow, onupdate=clock.utcnow, nullable=False)

    hotel = relationship("Hotel", back_populates="rooms")
    bookings = relationship("Booking", back_populates="room")

    __table_args__ = (
        Index("idx_rooms_hotel_number", "hotel_id", "room_number"),
    )
