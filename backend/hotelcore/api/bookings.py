"""
Check-in and check-out API
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hotelcore.api.auth import get_current_user
from hotelcore.db.database import get_db
from hotelcore.models.user import User
from hotelcore.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from hotelcore.schemas.booking import (
    BookingResponse, CheckInRequest, CheckOutRequest, CheckOutResponse, PendingOrdersSummary,
)
from hotelcore.schemas.order import OrderResponse
from hotelcore.services import bookings as booking_service

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


def _check_out_response(result: booking_service.CheckOutResult, message: str) -> CheckOutResponse:
    return CheckOutResponse(
        message=message,
        room_number=result.room_number,
        booking=BookingResponse.model_validate(result.booking),
        pending_orders=PendingOrdersSummary(
            count=result.pending_orders_count,
            total=result.pending_orders_total,
            orders=[OrderResponse.model_validate(o) for o in result.pending_orders],
        ),
    )


@router.post("/check-in", response_model=BookingResponse)
def check_in(
    request: CheckInRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return booking_service.check_in(
        db,
        hotel_id=request.hotel_id,
        room_number=request.room_number.strip(),
        guest_name=request.guest_name.strip(),
        check_in_date=request.check_in_date,
        check_out_date=request.check_out_date,
        guest_email=request.guest_email,
        guest_phone=request.guest_phone,
        special_requests=request.special_requests,
        created_by=user.id,
        dispatcher=dispatcher,
    )


@router.post("/check-out", response_model=CheckOutResponse)
def check_out(
    request: CheckOutRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = booking_service.check_out(db, request.hotel_id, request.room_number.strip())
    return _check_out_response(result, f"Room {result.room_number} checked out")


@router.get("/check-out-info", response_model=CheckOutResponse)
def check_out_info(
    hotel_id: int = Query(...),
    room_number: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = booking_service.check_out_info(db, hotel_id, room_number.strip())
    return _check_out_response(result, f"Room {result.room_number} is ready for check-out")
