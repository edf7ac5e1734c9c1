"""
Folio settlement

A folio is derived, never stored: the orders of one booking plus the latest
adjustment recorded when the point of sale settled it.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hotelcore.core import clock, exceptions
from hotelcore.models.booking import Booking, BOOKING_CHECKED_OUT
from hotelcore.models.folio_adjustment import FolioAdjustment
from hotelcore.models.order import Order, PAYMENT_PAID, PAYMENT_PENDING
from hotelcore.models.room import Room

logger = logging.getLogger(__name__)


@dataclass
class Folio:
    booking: Booking
    room_number: Optional[str]
    orders: List[Order] = field(default_factory=list)
    adjustment: Optional[FolioAdjustment] = None

    @property
    def booking_id(self) -> int:
        return self.booking.id

    @property
    def total_amount(self) -> Decimal:
        return sum((o.total_amount for o in self.orders), Decimal("0.00"))

    @property
    def payment_status(self) -> str:
        if self.orders and all(o.payment_status == PAYMENT_PAID for o in self.orders):
            return PAYMENT_PAID
        return PAYMENT_PENDING


@dataclass
class SettlementResult:
    orders_marked: int
    adjustment: Optional[FolioAdjustment] = None


def current_adjustment(db: Session, booking_id: int) -> Optional[FolioAdjustment]:
    return FolioAdjustment.live(db).filter(
        FolioAdjustment.booking_id == booking_id,
    ).order_by(FolioAdjustment.adjusted_at.desc(), FolioAdjustment.id.desc()).first()


def get_folio(db: Session, booking_id: int) -> Folio:
    booking = Booking.live(db).filter(Booking.id == booking_id).first()
    if not booking:
        raise exceptions.FolioNotFound()
    orders = Order.live(db).filter(Order.booking_id == booking_id).order_by(
        Order.created_at.asc(), Order.id.asc()
    ).all()
    room = db.query(Room).filter(Room.id == booking.room_id).first()
    return Folio(
        booking=booking,
        room_number=room.room_number if room else None,
        orders=orders,
        adjustment=current_adjustment(db, booking_id),
    )


def _validate_amounts(subtotal_amount, tax_amount, final_amount):
    if tax_amount is None or tax_amount < 0:
        raise exceptions.ValidationFailed("tax_amount is required and must be >= 0")
    if subtotal_amount is None or final_amount is None:
        raise exceptions.ValidationFailed("subtotal_amount and final_amount are required")


def mark_folio_paid(db: Session, booking_id: int, subtotal_amount, tax_amount, final_amount,
                    pos_receipt_number: Optional[str] = None, notes: Optional[str] = None,
                    adjusted_by: Optional[int] = None) -> SettlementResult:
    _validate_amounts(subtotal_amount, tax_amount, final_amount)
    folio = get_folio(db, booking_id)
    if not folio.orders:
        logger.info("Folio %s has no orders, nothing to mark paid", booking_id)
        return SettlementResult(orders_marked=0)

    paid_at = clock.utcnow()
    for order in folio.orders:
        order.payment_status = PAYMENT_PAID
        order.paid_at = paid_at
    db.commit()

    adjustment = None
    try:
        adjustment = FolioAdjustment(
            booking_id=booking_id,
            subtotal_amount=subtotal_amount,
            tax_amount=tax_amount,
            final_amount=final_amount,
            pos_receipt_number=pos_receipt_number or None,
            notes=notes or None,
            adjusted_by=adjusted_by,
        )
        db.add(adjustment)
        db.commit()
        db.refresh(adjustment)
    except SQLAlchemyError:
        # Orders are already paid; the missing audit row is only logged
        db.rollback()
        logger.exception("Failed to record folio adjustment for booking %s", booking_id)
        adjustment = None

    logger.info("Folio %s marked paid (%d orders)", booking_id, len(folio.orders))
    return SettlementResult(orders_marked=len(folio.orders), adjustment=adjustment)


def correct_adjustment(db: Session, booking_id: int, subtotal_amount, tax_amount, final_amount,
                       pos_receipt_number: Optional[str] = None, notes: Optional[str] = None,
                       adjusted_by: Optional[int] = None) -> FolioAdjustment:
    """Record corrected settlement figures; the superseded row stays as history"""
    _validate_amounts(subtotal_amount, tax_amount, final_amount)
    if not Booking.live(db).filter(Booking.id == booking_id).first():
        raise exceptions.FolioNotFound()
    previous = current_adjustment(db, booking_id)
    if not previous:
        raise exceptions.AdjustmentNotFound("No adjustment recorded for this folio")

    correction = FolioAdjustment(
        booking_id=booking_id,
        subtotal_amount=subtotal_amount,
        tax_amount=tax_amount,
        final_amount=final_amount,
        pos_receipt_number=pos_receipt_number if pos_receipt_number is not None else previous.pos_receipt_number,
        notes=notes if notes is not None else previous.notes,
        replaces_id=previous.id,
        adjusted_by=adjusted_by,
    )
    db.add(correction)
    db.commit()
    db.refresh(correction)
    logger.info("Adjustment %s for booking %s corrected by user %s", previous.id, booking_id, adjusted_by)
    return correction


def list_folios(db: Session, hotel_id: int, payment_status: Optional[str] = None,
                guest_name: Optional[str] = None, room_number: Optional[str] = None,
                limit: int = 100) -> List[Folio]:
    query = Booking.live(db).filter(
        Booking.hotel_id == hotel_id,
        Booking.status == BOOKING_CHECKED_OUT,
    )
    if guest_name:
        query = query.filter(Booking.guest_name.ilike(f"%{guest_name}%"))
    bookings = query.order_by(Booking.updated_at.desc(), Booking.id.desc()).limit(limit).all()
    if not bookings:
        return []

    booking_ids = [b.id for b in bookings]
    orders_by_booking: Dict[int, List[Order]] = {}
    orders = Order.live(db).filter(Order.booking_id.in_(booking_ids)).order_by(
        Order.created_at.asc(), Order.id.asc()
    ).all()
    for order in orders:
        orders_by_booking.setdefault(order.booking_id, []).append(order)

    room_ids = list({b.room_id for b in bookings})
    rooms = {r.id: r.room_number for r in db.query(Room).filter(Room.id.in_(room_ids)).all()}

    folios = []
    for booking in bookings:
        folio = Folio(
            booking=booking,
            room_number=rooms.get(booking.room_id),
            orders=orders_by_booking.get(booking.id, []),
        )
        if not folio.orders or folio.total_amount == 0:
            continue
        if payment_status and folio.payment_status != payment_status:
            continue
        if room_number and folio.room_number != room_number:
            continue
        folios.append(folio)

    paid_ids = [f.booking_id for f in folios if f.payment_status == PAYMENT_PAID]
    if paid_ids:
        latest: Dict[int, FolioAdjustment] = {}
        adjustments = FolioAdjustment.live(db).filter(
            FolioAdjustment.booking_id.in_(paid_ids),
        ).order_by(FolioAdjustment.adjusted_at.desc(), FolioAdjustment.id.desc()).all()
        for adjustment in adjustments:
            latest.setdefault(adjustment.booking_id, adjustment)
        for folio in folios:
            folio.adjustment = latest.get(folio.booking_id)
    return folios
