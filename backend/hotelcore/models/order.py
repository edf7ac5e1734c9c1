"""
Guest order models
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import relationship

from hotelcore.core import clock
from hotelcore.db.database import Base
from hotelcore.db.soft_delete import SoftDeleteMixin

ORDER_PENDING = "pending"
ORDER_PREPARING = "preparing"
ORDER_READY = "ready"
ORDER_DELIVERED = "delivered"
ORDER_CANCELLED = "cancelled"

ORDER_STATUSES = (ORDER_PENDING, ORDER_PREPARING, ORDER_READY, ORDER_DELIVERED, ORDER_CANCELLED)

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"


class Order(SoftDeleteMixin, Base):
    """Orders placed from a room, always tied to one booking"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(32), nullable=False, unique=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    room_number = Column(String(20), nullable=False)
    order_type = Column(String(40), default="room_service_order", nullable=False)
    guest_name = Column(String(200), nullable=True)
    guest_phone = Column(String(32), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), default=0, nullable=False)
    tax_amount = Column(Numeric(10, 2), default=0, nullable=False, comment="Tax is supplied at settlement")
    total_amount = Column(Numeric(10, 2), nullable=False)
    payment_status = Column(String(20), default=PAYMENT_PENDING, nullable=False, comment="pending, paid")
    payment_method = Column(String(30), default="room_charge", nullable=False)
    status = Column(String(20), default=ORDER_PENDING, nullable=False,
                    comment="pending, preparing, ready, delivered, cancelled")
    special_instructions = Column(Text, nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=clock.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=clock.utcnow, onupdate=clock.utcnow, nullable=False)

    booking = relationship("Booking", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.id")

    __table_args__ = (
        Index("idx_orders_duplicate_lookup", "hotel_id", "booking_id", "room_number", "guest_phone", "created_at"),
    )


class OrderItem(Base):
    """Order lines"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id = Column(String(64), nullable=False, comment="Product or menu item identifier")
    name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    service_type = Column(String(40), nullable=True)
    service_id = Column(String(64), nullable=True)
    department = Column(String(20), default="kitchen", nullable=False, comment="kitchen, bar")
    status = Column(String(20), default=ORDER_PENDING, nullable=False)

    order = relationship("Order", back_populates="items")
