"""
Promotion models
"""
from sqlalchemy import Column, Integer, String, Numeric, Boolean, Date, Time, DateTime, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship

from hotelcore.core import clock
from hotelcore.db.database import Base
from hotelcore.db.soft_delete import SoftDeleteMixin

DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_FIXED_AMOUNT = "fixed_amount"


class Promotion(SoftDeleteMixin, Base):
    """Promotions"""
    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    show_always = Column(Boolean, default=False, nullable=False, comment="Ignore the date/day/time window")
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    days_of_week = Column(JSON, nullable=True, comment="0=Sunday .. 6=Saturday; empty means every day")
    discount_type = Column(String(20), default=DISCOUNT_PERCENTAGE, nullable=False, comment="percentage, fixed_amount")
    discount_value = Column(Numeric(10, 2), nullable=False)
    max_discount_amount = Column(Numeric(10, 2), nullable=True)
    min_order_amount = Column(Numeric(10, 2), default=0, nullable=False)
    applies_to_all_products = Column(Boolean, default=False, nullable=False)
    applies_to_service_types = Column(JSON, nullable=True, comment="Service types in scope")
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=clock.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=clock.utcnow, onupdate=clock.utcnow, nullable=False)

    item_discounts = relationship("PromotionItemDiscount", back_populates="promotion")
    product_discounts = relationship("PromotionProductDiscount", back_populates="promotion")


class PromotionItemDiscount(SoftDeleteMixin, Base):
    """Item-level overrides keyed by (promotion, service, item name)"""
    __tablename__ = "promotion_item_discounts"

    id = Column(Integer, primary_key=True, index=True)
    promotion_id = Column(Integer, ForeignKey("promotions.id"), nullable=False, index=True)
    service_id = Column(String(64), nullable=False)
    item_name = Column(String(200), nullable=False, comment="Lower-cased, trimmed")
    discount_type = Column(String(20), nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=False)
    max_discount_amount = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), default=clock.utcnow, nullable=False)

    promotion = relationship("Promotion", back_populates="item_discounts")

    __table_args__ = (
        Index("idx_promotion_item_lookup", "promotion_id", "service_id", "item_name"),
    )


class PromotionProductDiscount(SoftDeleteMixin, Base):
    """Product-level overrides of a promotion, keyed by (promotion, product id)"""
    __tablename__ = "promotion_product_discounts"

    id = Column(Integer, primary_key=True, index=True)
    promotion_id = Column(Integer, ForeignKey("promotions.id"), nullable=False, index=True)
    product_id = Column(String(64), nullable=False)
    discount_type = Column(String(20), nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=False)
    max_discount_amount = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), default=clock.utcnow, nullable=False)

    promotion = relationship("Promotion", back_populates="product_discounts")

    __table_args__ = (
        Index("idx_promotion_product_lookup", "promotion_id", "product_id"),
    )
