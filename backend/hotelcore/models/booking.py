"""
Booking model
"""
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, ForeignKey, Index, Text, text
from sqlalchemy.orm import relationship

from hotelcore.core import clock
from hotelcore.db.database import Base
from hotelcore.db.soft_delete import SoftDeleteMixin

BOOKING_CHECKED_IN = "checked_in"
BOOKING_CHECKED_OUT = "checked_out"


class Booking(SoftDeleteMixin, Base):
    """Stays. A booking is active while its status is checked_in."""
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    guest_id = Column(Integer, ForeignKey("guests.id"), nullable=True, index=True)
    guest_name = Column(String(200), nullable=False)
    guest_email = Column(String(255), nullable=True)
    guest_phone = Column(String(32), nullable=True)
    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)
    status = Column(String(20), default=BOOKING_CHECKED_IN, nullable=False, comment="checked_in, checked_out")
    total_amount = Column(Numeric(10, 2), default=0, nullable=False, comment="Room charges, settled outside this service")
    payment_status = Column(String(20), default="pending", nullable=False)
    special_requests = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True, comment="Staff user who checked the guest in")
    created_at = Column(DateTime(timezone=True), default=clock.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=clock.utcnow, onupdate=clock.utcnow, nullable=False)

    room = relationship("Room", back_populates="bookings")
    orders = relationship("Order", back_populates="booking")

    __table_args__ = (
        Index("idx_bookings_room_status", "room_id", "status"),
        # At most one active booking per room
        Index(
            "uq_bookings_active_room",
            "room_id",
            unique=True,
            sqlite_where=text("status = 'checked_in' AND is_deleted = 0"),
            postgresql_where=text("status = 'checked_in' AND is_deleted = false"),
        ),
    )
