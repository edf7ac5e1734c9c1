"""
Folio settlement API
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hotelcore.api.auth import get_current_user, require_super_admin
from hotelcore.db.database import get_db
from hotelcore.models.user import User
from hotelcore.schemas.folio import (
    AdjustmentResponse, FolioBooking, FolioResponse, MarkPaidRequest, MarkPaidResponse, SettlementAmounts,
)
from hotelcore.schemas.order import OrderResponse
from hotelcore.services import folios as folio_service

router = APIRouter(prefix="/api/folios", tags=["folios"])


def _folio_response(folio: folio_service.Folio) -> FolioResponse:
    booking = folio.booking
    return FolioResponse(
        booking_id=folio.booking_id,
        booking=FolioBooking(
            id=booking.id,
            guest_name=booking.guest_name,
            guest_email=booking.guest_email,
            guest_phone=booking.guest_phone,
            room_number=folio.room_number or "N/A",
            check_in_date=booking.check_in_date,
            check_out_date=booking.check_out_date,
        ),
        orders=[OrderResponse.model_validate(o) for o in folio.orders],
        total_amount=folio.total_amount,
        payment_status=folio.payment_status,
        adjustment=AdjustmentResponse.model_validate(folio.adjustment) if folio.adjustment else None,
    )


@router.get("", response_model=List[FolioResponse])
def get_folios(
    hotel_id: int = Query(...),
    payment_status: Optional[str] = Query(None, description="pending or paid"),
    guest_name: Optional[str] = Query(None),
    room_number: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    folios = folio_service.list_folios(db, hotel_id, payment_status, guest_name, room_number, limit)
    return [_folio_response(f) for f in folios]


@router.post("/mark-paid", response_model=MarkPaidResponse)
def mark_paid(
    request: MarkPaidRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = folio_service.mark_folio_paid(
        db,
        request.booking_id,
        subtotal_amount=request.subtotal_amount,
        tax_amount=request.tax_amount,
        final_amount=request.final_amount,
        pos_receipt_number=request.pos_receipt_number,
        notes=request.notes,
        adjusted_by=user.id,
    )
    if result.orders_marked == 0:
        message = "No orders to mark as paid"
    else:
        message = "Folio marked as paid successfully"
    return MarkPaidResponse(
        message=message,
        orders_marked=result.orders_marked,
        adjustment=AdjustmentResponse.model_validate(result.adjustment) if result.adjustment else None,
    )


@router.get("/{booking_id}", response_model=FolioResponse)
def get_folio(
    booking_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return _folio_response(folio_service.get_folio(db, booking_id))


@router.patch("/{booking_id}/adjustment", response_model=AdjustmentResponse)
def correct_adjustment(
    booking_id: int,
    request: SettlementAmounts,
    db: Session = Depends(get_db),
    user: User = Depends(require_super_admin),
):
    return folio_service.correct_adjustment(
        db,
        booking_id,
        subtotal_amount=request.subtotal_amount,
        tax_amount=request.tax_amount,
        final_amount=request.final_amount,
        pos_receipt_number=request.pos_receipt_number,
        notes=request.notes,
        adjusted_by=user.id,
    )
