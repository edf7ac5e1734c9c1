"""
Promotion administration API
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hotelcore.api.auth import require_admin
from hotelcore.db.database import get_db
from hotelcore.models.user import User
from hotelcore.schemas.promotion import (
    ItemDiscountCreate, ItemDiscountResponse, ProductDiscountCreate, ProductDiscountResponse,
    PromotionCreate, PromotionResponse, PromotionUpdate,
)
from hotelcore.services import promotions as promotion_service

router = APIRouter(prefix="/api/promotions", tags=["promotions"])


@router.get("", response_model=List[PromotionResponse])
def get_promotions(
    hotel_id: int = Query(...),
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    return promotion_service.list_promotions(db, hotel_id)


@router.post("", response_model=PromotionResponse)
def create_promotion(
    request: PromotionCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    fields = request.model_dump(exclude={"hotel_id"})
    return promotion_service.create_promotion(db, request.hotel_id, created_by=user.id, **fields)


@router.put("/{promotion_id}", response_model=PromotionResponse)
def update_promotion(
    promotion_id: int,
    request: PromotionUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    return promotion_service.update_promotion(db, promotion_id, **request.model_dump(exclude_unset=True))


@router.delete("/{promotion_id}")
def delete_promotion(
    promotion_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    promotion_service.delete_promotion(db, promotion_id)
    return {"message": "Promotion deleted"}


@router.get("/{promotion_id}/item-discounts", response_model=List[ItemDiscountResponse])
def get_item_discounts(
    promotion_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    promotion = promotion_service.get_promotion(db, promotion_id)
    return [d for d in promotion.item_discounts if not d.is_deleted]


@router.post("/{promotion_id}/item-discounts", response_model=ItemDiscountResponse)
def add_item_discount(
    promotion_id: int,
    request: ItemDiscountCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    return promotion_service.add_item_discount(
        db,
        promotion_id,
        service_id=request.service_id,
        item_name=request.item_name,
        discount_type=request.discount_type,
        discount_value=request.discount_value,
        max_discount_amount=request.max_discount_amount,
    )


@router.delete("/item-discounts/{item_discount_id}")
def remove_item_discount(
    item_discount_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    promotion_service.remove_item_discount(db, item_discount_id)
    return {"message": "Item discount removed"}


@router.get("/{promotion_id}/product-discounts", response_model=List[ProductDiscountResponse])
def get_product_discounts(
    promotion_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    promotion = promotion_service.get_promotion(db, promotion_id)
    return [d for d in promotion.product_discounts if not d.is_deleted]


@router.post("/{promotion_id}/product-discounts", response_model=ProductDiscountResponse)
def add_product_discount(
    promotion_id: int,
    request: ProductDiscountCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    return promotion_service.add_product_discount(
        db,
        promotion_id,
        product_id=request.product_id,
        discount_type=request.discount_type,
        discount_value=request.discount_value,
        max_discount_amount=request.max_discount_amount,
    )


@router.delete("/product-discounts/{product_discount_id}")
def remove_product_discount(
    product_discount_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    promotion_service.remove_product_discount(db, product_discount_id)
    return {"message": "Product discount removed"}
