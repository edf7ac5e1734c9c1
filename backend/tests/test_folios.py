from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from hotelcore.core import exceptions
from hotelcore.models import FolioAdjustment, Order
from hotelcore.services import bookings as booking_service
from hotelcore.services import folios as folio_service


@pytest.fixture
def checked_out(db, hotel, make_room, make_booking, make_order):
    room = make_room("101")
    booking = make_booking(room)
    for total in ("10.00", "15.00", "5.50"):
        make_order(booking, total=total)
    booking_service.check_out(db, hotel.id, "101")
    return booking


def _pay(db, booking_id, **kwargs):
    params = dict(subtotal_amount=Decimal("30.50"), tax_amount=Decimal("2.75"),
                  final_amount=Decimal("33.25"), pos_receipt_number="R-1001")
    params.update(kwargs)
    return folio_service.mark_folio_paid(db, booking_id, **params)


def test_folio_is_pending_until_paid(db, checked_out):
    folio = folio_service.get_folio(db, checked_out.id)
    assert folio.total_amount == Decimal("30.50")
    assert folio.payment_status == "pending"
    assert folio.room_number == "101"
    assert folio.adjustment is None


def test_mark_paid(db, checked_out):
    result = _pay(db, checked_out.id, adjusted_by=None)

    assert result.orders_marked == 3
    assert result.adjustment.final_amount == Decimal("33.25")
    assert db.query(FolioAdjustment).count() == 1
    assert all(o.payment_status == "paid" and o.paid_at is not None for o in db.query(Order).all())

    folio = folio_service.get_folio(db, checked_out.id)
    assert folio.payment_status == "paid"
    assert folio.adjustment.id == result.adjustment.id


def test_folio_without_orders_is_noop(db, hotel, make_room, make_booking):
    booking = make_booking(make_room("102"))
    result = _pay(db, booking.id)
    assert result.orders_marked == 0
    assert result.adjustment is None
    assert folio_service.get_folio(db, booking.id).payment_status == "pending"


@pytest.mark.parametrize("kwargs", [
    {"tax_amount": Decimal("-1")},
    {"tax_amount": None},
    {"subtotal_amount": None},
    {"final_amount": None},
])
def test_mark_paid_validation(db, checked_out, kwargs):
    with pytest.raises(exceptions.ValidationFailed):
        _pay(db, checked_out.id, **kwargs)
    assert folio_service.get_folio(db, checked_out.id).payment_status == "pending"


def test_unknown_folio(db, hotel):
    with pytest.raises(exceptions.FolioNotFound):
        folio_service.get_folio(db, 999)


def test_adjustment_failure_does_not_undo_payment(db, checked_out, monkeypatch):
    calls = {"n": 0}
    real_commit = db.commit

    def flaky_commit():
        calls["n"] += 1
        if calls["n"] == 2:
            raise OperationalError("INSERT folio_adjustments", {}, Exception("disk I/O error"))
        real_commit()

    monkeypatch.setattr(db, "commit", flaky_commit)
    result = _pay(db, checked_out.id)

    assert result.orders_marked == 3
    assert result.adjustment is None
    assert folio_service.get_folio(db, checked_out.id).payment_status == "paid"


def test_correct_adjustment_keeps_history(db, checked_out):
    original = _pay(db, checked_out.id).adjustment
    correction = folio_service.correct_adjustment(
        db, checked_out.id, subtotal_amount=Decimal("30.50"), tax_amount=Decimal("3.00"),
        final_amount=Decimal("33.50"), notes="tax rate fix",
    )

    assert correction.replaces_id == original.id
    assert correction.pos_receipt_number == "R-1001"
    assert folio_service.current_adjustment(db, checked_out.id).id == correction.id
    assert db.query(FolioAdjustment).count() == 2


def test_correct_adjustment_requires_existing(db, checked_out):
    with pytest.raises(exceptions.AdjustmentNotFound):
        folio_service.correct_adjustment(db, checked_out.id, Decimal("1"), Decimal("0"), Decimal("1"))


def test_list_folios(db, hotel, make_room, make_booking, make_order, frozen_clock, checked_out):
    # Checked out with only a zero-total order: not listed
    empty = make_booking(make_room("102"), guest_name="Zero Total")
    make_order(empty, total="0.00")
    booking_service.check_out(db, hotel.id, "102")

    # Still checked in: not listed
    make_order(make_booking(make_room("103")), total="8.00")

    frozen_clock.advance(minutes=5)
    paid = make_booking(make_room("104"), guest_name="Bea Smith")
    make_order(paid, total="12.00")
    booking_service.check_out(db, hotel.id, "104")
    _pay(db, paid.id, subtotal_amount=Decimal("12"), final_amount=Decimal("13"))

    folios = folio_service.list_folios(db, hotel.id)
    assert [f.booking_id for f in folios] == [paid.id, checked_out.id]
    assert folios[0].adjustment is not None
    assert folios[1].adjustment is None
    assert folios[1].room_number == "101"

    assert [f.booking_id for f in folio_service.list_folios(db, hotel.id, payment_status="pending")] == [checked_out.id]
    assert [f.booking_id for f in folio_service.list_folios(db, hotel.id, guest_name="bea")] == [paid.id]
    assert [f.booking_id for f in folio_service.list_folios(db, hotel.id, room_number="101")] == [checked_out.id]
