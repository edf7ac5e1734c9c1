"""
Guest order schemas
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_serializer

from hotelcore.schemas.common import format_datetime_local


class OrderItemIn(BaseModel):
    """A cart line as submitted by the guest site"""
    id: Union[int, str] = Field(..., description="Menu item identifier")
    name: str = Field(..., description="Item name", min_length=1)
    quantity: int = Field(1, description="Quantity", ge=1)
    price: Decimal = Field(..., description="Unit price", ge=0)
    service_type: Optional[str] = Field(None, description="restaurant, bar, room_service")
    service_id: Optional[Union[int, str]] = Field(None, description="Hotel service the item belongs to")
    category: Optional[str] = None


class OrderCreate(BaseModel):
    hotel_id: int = Field(..., description="Hotel")
    room_number: str = Field(..., description="Room number", min_length=1)
    guest_phone: Optional[str] = Field(None, description="Must match the phone on the booking")
    guest_name: Optional[str] = None
    items: List[OrderItemIn] = Field(..., description="Cart lines", min_length=1)
    total: Decimal = Field(..., description="Amount charged to the room", ge=0)
    subtotal: Optional[Decimal] = Field(None, description="Before discounts, defaults to total", ge=0)
    discount_amount: Optional[Decimal] = Field(None, description="Defaults to 0", ge=0)
    order_type: Optional[str] = None
    special_instructions: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., description="preparing, ready, delivered, cancelled")


class OrderItemResponse(BaseModel):
    id: int
    menu_item_id: str
    name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    service_type: Optional[str] = None
    service_id: Optional[str] = None
    department: str
    status: str

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    order_number: str
    hotel_id: int
    room_id: int
    booking_id: int
    room_number: str
    order_type: str
    guest_name: Optional[str] = None
    guest_phone: str
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    payment_status: str
    payment_method: str
    status: str
    special_instructions: Optional[str] = None
    items: List[OrderItemResponse] = []
    paid_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('paid_at', 'delivered_at', 'created_at')
    def serialize_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return format_datetime_local(dt)


class OrderSubmitResponse(BaseModel):
    success: bool = True
    duplicate: bool = False
    message: str
    order: OrderResponse


class RoomValidationResponse(BaseModel):
    """Result of the guest-site room check"""
    valid: bool
    code: Optional[str] = None
    message: Optional[str] = None
    room_number: Optional[str] = None
    guest_name: Optional[str] = None
    check_out_date: Optional[str] = None
