"""
Guest-site API: room validation, ordering and promotions (no staff login)
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hotelcore.core import clock
from hotelcore.core.exceptions import CoreError
from hotelcore.db.database import get_db
from hotelcore.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from hotelcore.schemas.order import (
    OrderCreate, OrderResponse, OrderSubmitResponse, RoomValidationResponse,
)
from hotelcore.schemas.promotion import (
    CalculateDiscountRequest, CalculateDiscountResponse, CartSummary, DiscountLineResponse,
    MinimumOrderRequirement, PromotionResponse,
)
from hotelcore.services import orders as order_service
from hotelcore.services import promotions as promotion_service
from hotelcore.services.rooms import hotel_timezone

router = APIRouter(prefix="/api/guest", tags=["guest"])


@router.post("/orders", response_model=OrderSubmitResponse)
def submit_order(
    request: OrderCreate,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    order, duplicate = order_service.submit_order(
        db,
        hotel_id=request.hotel_id,
        room_number=request.room_number.strip(),
        guest_phone=request.guest_phone,
        items=request.items,
        total=request.total,
        subtotal=request.subtotal,
        discount_amount=request.discount_amount,
        guest_name=request.guest_name,
        order_type=request.order_type,
        special_instructions=request.special_instructions,
        dispatcher=dispatcher,
    )
    message = "Order already received" if duplicate else "Order placed successfully"
    return OrderSubmitResponse(duplicate=duplicate, message=message, order=OrderResponse.model_validate(order))


@router.get("/orders", response_model=List[OrderResponse])
def get_room_orders(
    hotel_id: int = Query(...),
    room_number: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
):
    return order_service.list_guest_orders(db, hotel_id, room_number.strip())


@router.get("/validate-room", response_model=RoomValidationResponse)
def validate_room(
    hotel_id: int = Query(...),
    room_number: str = Query(..., min_length=1),
    guest_phone: str = Query(None),
    db: Session = Depends(get_db),
):
    """Runs the order admission checks without placing an order"""
    try:
        room, booking = order_service.validate_order_request(db, hotel_id, room_number.strip(), guest_phone)
    except CoreError as e:
        return RoomValidationResponse(valid=False, code=e.code, message=e.message, room_number=room_number)
    return RoomValidationResponse(
        valid=True,
        room_number=room.room_number,
        guest_name=booking.guest_name,
        check_out_date=booking.check_out_date.isoformat(),
    )


@router.post("/promotions/calculate-discount", response_model=CalculateDiscountResponse)
def calculate_discount(request: CalculateDiscountRequest, db: Session = Depends(get_db)):
    pricing = promotion_service.calculate_cart(db, request.hotel_id, request.items)

    requirement = None
    blocking = pricing.min_order_requirement
    if blocking:
        scope = f" for {blocking.service_type}" if blocking.service_type else ""
        requirement = MinimumOrderRequirement(
            promotion_id=blocking.promotion_id,
            min_order_amount=blocking.min_order_amount,
            service_type=blocking.service_type,
            message=f"Minimum order of ${blocking.min_order_amount:.2f}{scope} required for this promotion",
        )
    return CalculateDiscountResponse(
        items=[DiscountLineResponse.model_validate(line) for line in pricing.items],
        summary=CartSummary(
            total_original=pricing.total_original,
            total_discount=pricing.total_discount,
            total_after_discount=pricing.total_after_discount,
        ),
        min_order_requirement=requirement,
    )


@router.get("/promotions/active", response_model=List[PromotionResponse])
def get_active_promotions(hotel_id: int = Query(...), db: Session = Depends(get_db)):
    now_local = clock.hotel_now(hotel_timezone(db, hotel_id))
    return promotion_service.active_promotions(db, hotel_id, now_local)
