"""
Guest model
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Index

from hotelcore.core import clock
from hotelcore.db.database import Base
from hotelcore.db.soft_delete import SoftDeleteMixin


class Guest(SoftDeleteMixin, Base):
    """Guest profiles, one per person per hotel"""
    __tablename__ = "guests"

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)
    total_visits = Column(Integer, default=0, nullable=False)
    first_visit_date = Column(Date, nullable=True)
    last_visit_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=clock.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=clock.utcnow, onupdate=clock.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_guests_hotel_email", "hotel_id", "email"),
        Index("idx_guests_hotel_phone", "hotel_id", "phone"),
    )
