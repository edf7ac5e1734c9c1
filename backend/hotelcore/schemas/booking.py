"""
Booking, check-in and check-out schemas
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_serializer

from hotelcore.schemas.common import format_datetime_local
from hotelcore.schemas.order import OrderResponse


class CheckInRequest(BaseModel):
    hotel_id: int = Field(..., description="Hotel")
    room_number: str = Field(..., description="Room number", min_length=1)
    guest_name: str = Field(..., description="Guest name", min_length=1, max_length=200)
    guest_email: Optional[EmailStr] = Field(None, description="Guest email")
    guest_phone: Optional[str] = Field(None, description="Guest phone, used to verify room orders")
    check_in_date: date = Field(..., description="Arrival date, hotel-local")
    check_out_date: date = Field(..., description="Departure date, hotel-local")
    special_requests: Optional[str] = None


class CheckOutRequest(BaseModel):
    hotel_id: int = Field(..., description="Hotel")
    room_number: str = Field(..., description="Room number", min_length=1)


class BookingResponse(BaseModel):
    id: int
    hotel_id: int
    room_id: int
    guest_id: Optional[int] = None
    guest_name: str
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    check_in_date: date
    check_out_date: date
    status: str
    total_amount: Decimal
    payment_status: str
    special_requests: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return format_datetime_local(dt)


class PendingOrdersSummary(BaseModel):
    count: int
    total: Decimal
    orders: List[OrderResponse] = []


class CheckOutResponse(BaseModel):
    success: bool = True
    message: str
    room_number: str
    booking: BookingResponse
    pending_orders: PendingOrdersSummary
