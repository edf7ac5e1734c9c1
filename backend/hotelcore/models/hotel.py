"""
Hotel model
"""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from hotelcore.core import clock
from hotelcore.db.database import Base
from hotelcore.db.soft_delete import SoftDeleteMixin


class Hotel(SoftDeleteMixin, Base):
    """Hotels"""
    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, comment="Display name")
    timezone = Column(String(64), nullable=True, comment="IANA timezone, e.g. America/Chicago")
    address = Column(String(500), nullable=True)
    phone = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=clock.utcnow, nullable=False)

    rooms = relationship("Room", back_populates="hotel")
