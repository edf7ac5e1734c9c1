from datetime import timedelta
from decimal import Decimal

import pytest

from hotelcore.core import exceptions
from hotelcore.models import Order
from hotelcore.schemas.order import OrderItemIn
from hotelcore.services import orders as order_service

from conftest import TODAY


def _items(*lines):
    return [OrderItemIn(**line) for line in lines]


BURGER = {"id": "m-1", "name": "Classic Burger", "quantity": 1, "price": "12.00", "service_type": "restaurant"}
MOJITO = {"id": "m-2", "name": "Mojito", "quantity": 2, "price": "9.00", "service_type": "bar"}


def _submit(db, hotel, items=None, total="30.00", phone="555-123-4567", **kwargs):
    return order_service.submit_order(
        db, hotel.id, "101", phone, items or _items(BURGER, MOJITO), Decimal(total), **kwargs
    )


@pytest.fixture
def checked_in(make_room, make_booking):
    room = make_room("101")
    return make_booking(room)


def test_submit_order(db, hotel, checked_in, dispatcher):
    order, duplicate = _submit(db, hotel, dispatcher=dispatcher)

    assert not duplicate
    assert order.status == "pending"
    assert order.payment_status == "pending"
    assert order.tax_amount == Decimal("0.00")
    assert order.subtotal == Decimal("30.00")
    assert order.discount_amount == Decimal("0.00")
    assert order.booking_id == checked_in.id
    assert order.order_number.startswith("ORD-2026-")
    assert order.order_type == "restaurant_order"
    departments = {i.menu_item_id: i.department for i in order.items}
    assert departments == {"m-1": "kitchen", "m-2": "bar"}

    assert len(dispatcher.sent) == 1
    assert "2x Mojito" in dispatcher.sent[0].body


def test_duplicate_within_window_returns_existing(db, hotel, checked_in, frozen_clock):
    first, _ = _submit(db, hotel)
    frozen_clock.advance(seconds=3)
    # Same cart in a different line order
    second, duplicate = _submit(db, hotel, items=_items(MOJITO, BURGER))

    assert duplicate
    assert second.id == first.id
    assert db.query(Order).count() == 1


def test_same_cart_after_window_is_new_order(db, hotel, checked_in, frozen_clock):
    first, _ = _submit(db, hotel)
    frozen_clock.advance(seconds=6)
    second, duplicate = _submit(db, hotel)

    assert not duplicate
    assert second.id != first.id
    assert db.query(Order).count() == 2


def test_different_quantity_or_total_is_not_duplicate(db, hotel, checked_in):
    _submit(db, hotel)
    _, duplicate = _submit(db, hotel, items=_items(BURGER, dict(MOJITO, quantity=1)), total="21.00")
    assert not duplicate
    _, duplicate = _submit(db, hotel, total="29.99")
    assert not duplicate
    assert db.query(Order).count() == 3


def test_room_not_found(db, hotel):
    with pytest.raises(exceptions.RoomNotFound):
        _submit(db, hotel)


def test_room_in_maintenance(db, hotel, make_room):
    make_room("101", status="maintenance")
    with pytest.raises(exceptions.RoomInMaintenance):
        _submit(db, hotel)


def test_room_not_checked_in(db, hotel, make_room):
    make_room("101", status="available")
    with pytest.raises(exceptions.RoomNotCheckedIn) as exc_info:
        _submit(db, hotel)
    assert exc_info.value.details["status"] == "available"
    assert exc_info.value.details["room"]["room_number"] == "101"


def test_occupied_room_without_booking(db, hotel, make_room):
    make_room("101", status="occupied")
    with pytest.raises(exceptions.NoActiveBooking):
        _submit(db, hotel)


def test_booking_past_check_out_date(db, hotel, make_room, make_booking):
    room = make_room("101")
    make_booking(room, check_in=TODAY - timedelta(days=3), check_out=TODAY - timedelta(days=1))
    with pytest.raises(exceptions.BookingExpired):
        _submit(db, hotel)


def test_check_out_day_still_accepts_orders(db, hotel, make_room, make_booking):
    room = make_room("101")
    make_booking(room, check_in=TODAY - timedelta(days=2), check_out=TODAY)
    order, _ = _submit(db, hotel)
    assert order.id is not None


def test_phone_required(db, hotel, checked_in):
    with pytest.raises(exceptions.PhoneRequired):
        _submit(db, hotel, phone=None)


def test_phone_mismatch(db, hotel, checked_in):
    with pytest.raises(exceptions.PhoneMismatch) as exc_info:
        _submit(db, hotel, phone="555-000-0000")
    assert exc_info.value.details["booking"]["id"] == checked_in.id


def test_booking_without_phone_rejects(db, hotel, make_room, make_booking):
    room = make_room("101")
    make_booking(room, guest_phone=None)
    with pytest.raises(exceptions.PhoneMismatch) as exc_info:
        _submit(db, hotel)
    assert "No phone number on file" in exc_info.value.message


def test_explicit_subtotal_and_discount(db, hotel, checked_in):
    order, _ = _submit(db, hotel, total="27.00", subtotal=Decimal("30.00"), discount_amount=Decimal("3.00"))
    assert order.subtotal == Decimal("30.00")
    assert order.discount_amount == Decimal("3.00")
    assert order.total_amount == Decimal("27.00")


@pytest.mark.parametrize("lines, expected", [
    ([{"id": 1, "name": "Espresso", "price": "3"}], "bar_order"),
    ([{"id": 1, "name": "Grilled Cheese", "price": "8"}], "restaurant_order"),
    ([{"id": 1, "name": "Iced Tea Cake", "price": "5"}], "restaurant_order"),
    ([{"id": 1, "name": "Extra Towels", "price": "0"}], "room_service_order"),
    ([{"id": 1, "name": "Nachos", "price": "9", "category": "Appetizers"}], "restaurant_order"),
    ([{"id": 1, "name": "House Red", "price": "9", "category": "Wine List"}], "bar_order"),
    ([{"id": 1, "name": "Anything", "price": "9", "service_type": "room_service"}], "room_service_order"),
    ([{"id": 1, "name": "Towels", "price": "0"}, {"id": 2, "name": "Beer", "price": "6"}], "bar_order"),
])
def test_detect_order_type(lines, expected):
    assert order_service.detect_order_type(_items(*lines)) == expected


def test_list_guest_orders_only_current_stay(db, hotel, make_room, make_booking, make_order, frozen_clock):
    room = make_room("101")
    old = make_booking(room)
    make_order(old)
    old.status = "checked_out"
    db.commit()

    current = make_booking(room)
    first = make_order(current, total="5.00")
    frozen_clock.advance(minutes=1)
    second = make_order(current, total="6.00")

    orders = order_service.list_guest_orders(db, hotel.id, "101")
    assert [o.id for o in orders] == [second.id, first.id]


def test_status_transitions(db, hotel, checked_in, dispatcher, monkeypatch):
    from hotelcore.core.config import settings
    monkeypatch.setattr(settings, "ORDER_READY_TEMPLATE", "HXready")

    order, _ = _submit(db, hotel)
    order_service.update_order_status(db, order.id, "preparing", dispatcher)
    order_service.update_order_status(db, order.id, "ready", dispatcher)
    assert dispatcher.sent[-1].template_id == "HXready"

    delivered = order_service.update_order_status(db, order.id, "delivered", dispatcher)
    assert delivered.delivered_at is not None
    assert all(i.status == "delivered" for i in delivered.items)

    with pytest.raises(exceptions.InvalidStatusTransition):
        order_service.update_order_status(db, order.id, "cancelled")


def test_pending_is_not_a_target(db, hotel, checked_in):
    order, _ = _submit(db, hotel)
    with pytest.raises(exceptions.InvalidStatusTransition):
        order_service.update_order_status(db, order.id, "pending")
