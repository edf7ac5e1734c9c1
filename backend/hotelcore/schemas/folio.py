"""
Folio schemas
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer

from hotelcore.schemas.common import format_datetime_local
from hotelcore.schemas.order import OrderResponse


class SettlementAmounts(BaseModel):
    """Figures from the point of sale"""
    subtotal_amount: Optional[Decimal] = Field(None, description="Required")
    tax_amount: Optional[Decimal] = Field(None, description="Required, must be >= 0")
    final_amount: Optional[Decimal] = Field(None, description="Required")
    pos_receipt_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class MarkPaidRequest(SettlementAmounts):
    booking_id: int


class AdjustmentResponse(BaseModel):
    id: int
    booking_id: int
    subtotal_amount: Decimal
    tax_amount: Decimal
    final_amount: Decimal
    pos_receipt_number: Optional[str] = None
    notes: Optional[str] = None
    replaces_id: Optional[int] = None
    adjusted_by: Optional[int] = None
    adjusted_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('adjusted_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)


class FolioBooking(BaseModel):
    id: int
    guest_name: str
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    room_number: Optional[str] = None
    check_in_date: date
    check_out_date: date


class FolioResponse(BaseModel):
    booking_id: int
    booking: FolioBooking
    orders: List[OrderResponse] = []
    total_amount: Decimal
    payment_status: str
    adjustment: Optional[AdjustmentResponse] = None


class MarkPaidResponse(BaseModel):
    success: bool = True
    message: str
    orders_marked: int
    adjustment: Optional[AdjustmentResponse] = None
