"""
Promotion and pricing schemas
"""
from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_serializer

from hotelcore.schemas.common import format_datetime_local


class PromotionBase(BaseModel):
    title: str = Field(..., description="Title", max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    is_active: bool = True
    show_always: bool = Field(False, description="Ignore the date, day and time window")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    days_of_week: Optional[List[int]] = Field(None, description="0=Sunday .. 6=Saturday")
    discount_type: str = Field("percentage", description="percentage, fixed_amount")
    discount_value: Decimal = Field(..., ge=0)
    max_discount_amount: Optional[Decimal] = Field(None, ge=0)
    min_order_amount: Decimal = Field(Decimal("0"), ge=0)
    applies_to_all_products: bool = False
    applies_to_service_types: Optional[List[str]] = None


class PromotionCreate(PromotionBase):
    hotel_id: int = Field(..., description="Hotel")


class PromotionUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    is_active: Optional[bool] = None
    show_always: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    days_of_week: Optional[List[int]] = None
    discount_type: Optional[str] = None
    discount_value: Optional[Decimal] = Field(None, ge=0)
    max_discount_amount: Optional[Decimal] = Field(None, ge=0)
    min_order_amount: Optional[Decimal] = Field(None, ge=0)
    applies_to_all_products: Optional[bool] = None
    applies_to_service_types: Optional[List[str]] = None


class ItemDiscountCreate(BaseModel):
    service_id: Union[int, str] = Field(..., description="Hotel service the item belongs to")
    item_name: str = Field(..., min_length=1, max_length=200)
    discount_type: str = Field("percentage", description="percentage, fixed_amount")
    discount_value: Decimal = Field(..., ge=0)
    max_discount_amount: Optional[Decimal] = Field(None, ge=0)


class ItemDiscountResponse(BaseModel):
    id: int
    promotion_id: int
    service_id: str
    item_name: str
    discount_type: str
    discount_value: Decimal
    max_discount_amount: Optional[Decimal] = None

    class Config:
        from_attributes = True


class ProductDiscountCreate(BaseModel):
    product_id: Union[int, str] = Field(..., description="Product the override applies to")
    discount_type: str = Field("percentage", description="percentage, fixed_amount")
    discount_value: Decimal = Field(..., ge=0)
    max_discount_amount: Optional[Decimal] = Field(None, ge=0)


class ProductDiscountResponse(BaseModel):
    id: int
    promotion_id: int
    product_id: str
    discount_type: str
    discount_value: Decimal
    max_discount_amount: Optional[Decimal] = None

    class Config:
        from_attributes = True


class PromotionResponse(PromotionBase):
    id: int
    hotel_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return format_datetime_local(dt)


class DiscountItemIn(BaseModel):
    """A cart line to be priced"""
    product_id: Union[int, str]
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    service_type: Optional[str] = None
    service_id: Optional[Union[int, str]] = None
    menu_item_name: Optional[str] = None


class CalculateDiscountRequest(BaseModel):
    hotel_id: int
    items: List[DiscountItemIn] = Field(..., min_length=1)


class DiscountLineResponse(BaseModel):
    product_id: str
    quantity: int
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    total_discount: Decimal
    promotion_id: Optional[int] = None
    discount_type: Optional[str] = None

    class Config:
        from_attributes = True


class CartSummary(BaseModel):
    total_original: Decimal
    total_discount: Decimal
    total_after_discount: Decimal


class MinimumOrderRequirement(BaseModel):
    promotion_id: Optional[int] = None
    min_order_amount: Optional[Decimal] = None
    service_type: Optional[str] = None
    message: str


class CalculateDiscountResponse(BaseModel):
    items: List[DiscountLineResponse]
    summary: CartSummary
    min_order_requirement: Optional[MinimumOrderRequirement] = None
