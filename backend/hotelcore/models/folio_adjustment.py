"""
Folio adjustment model
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Index, Text

from hotelcore.core import clock
from hotelcore.db.database import Base
from hotelcore.db.soft_delete import SoftDeleteMixin


class FolioAdjustment(SoftDeleteMixin, Base):
    """Settlement figures supplied by the point of sale, append-only"""
    __tablename__ = "folio_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    subtotal_amount = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), nullable=False)
    final_amount = Column(Numeric(10, 2), nullable=False)
    pos_receipt_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    replaces_id = Column(Integer, ForeignKey("folio_adjustments.id"), nullable=True,
                         comment="Adjustment superseded by this correction")
    adjusted_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    adjusted_at = Column(DateTime(timezone=True), default=clock.utcnow, nullable=False, index=True)

    __table_args__ = (
        Index("idx_folio_adjustments_booking", "booking_id", "adjusted_at"),
    )
