"""
Database models
"""
from hotelcore.models.hotel import Hotel
from hotelcore.models.room import Room
from hotelcore.models.guest import Guest
from hotelcore.models.booking import Booking
from hotelcore.models.order import Order, OrderItem
from hotelcore.models.promotion import Promotion, PromotionItemDiscount, PromotionProductDiscount
from hotelcore.models.folio_adjustment import FolioAdjustment
from hotelcore.models.user import User
from hotelcore.models.operation_log import OperationLog

__all__ = [
    "Hotel",
    "Room",
    "Guest",
    "Booking",
    "Order",
    "OrderItem",
    "Promotion",
    "PromotionItemDiscount",
    "PromotionProductDiscount",
    "FolioAdjustment",
    "User",
    "OperationLog",
]
