from datetime import timedelta
from decimal import Decimal

import pytest

from hotelcore.core import exceptions
from hotelcore.models import Booking, Guest, Room
from hotelcore.services import bookings as booking_service
from hotelcore.services import rooms as room_service

from conftest import TODAY


def _check_in(db, hotel, room_number="101", **kwargs):
    params = dict(
        guest_name="Ana Lopez",
        check_in_date=TODAY,
        check_out_date=TODAY + timedelta(days=3),
        guest_phone="(555) 123-4567",
        guest_email="ana@example.com",
    )
    params.update(kwargs)
    return booking_service.check_in(db, hotel.id, room_number, **params)


def test_check_in_occupies_room(db, hotel, make_room, dispatcher):
    room = make_room("101")
    booking = _check_in(db, hotel, dispatcher=dispatcher)

    db.refresh(room)
    assert room.status == "occupied"
    assert booking.status == "checked_in"
    assert booking.total_amount == Decimal("0.00")
    assert booking.payment_status == "pending"
    assert room_service.get_active_booking(db, room.id).id == booking.id

    assert len(dispatcher.sent) == 1
    notification = dispatcher.sent[0]
    assert notification.recipient == "+15551234567"
    assert f"/guest/{hotel.id}?room=101" in notification.body


def test_check_in_creates_then_reuses_guest(db, hotel, make_room):
    make_room("101")
    make_room("102")
    _check_in(db, hotel, "101")
    booking_service.check_out(db, hotel.id, "101")
    _check_in(db, hotel, "102", guest_email="ANA@example.com")

    guests = db.query(Guest).all()
    assert len(guests) == 1
    assert guests[0].total_visits == 2
    assert guests[0].phone == "+15551234567"


def test_second_check_in_is_rejected_with_existing_booking(db, hotel, make_room):
    make_room("101")
    _check_in(db, hotel, guest_name="First Guest")

    with pytest.raises(exceptions.RoomOccupied) as exc_info:
        _check_in(db, hotel, guest_name="Second Guest")

    err = exc_info.value
    assert err.status_code == 409
    assert err.details["existing_booking"]["guest_name"] == "First Guest"
    assert db.query(Booking).count() == 1


def test_active_booking_index_rejects_race(db, hotel, make_room, make_booking):
    # Simulates a concurrent check-in that already committed its booking
    # but has not yet flipped the room status
    room = make_room("101")
    make_booking(room, guest_name="Winner")
    room.status = "available"
    db.commit()

    with pytest.raises(exceptions.RoomOccupied) as exc_info:
        _check_in(db, hotel, guest_name="Loser")

    assert exc_info.value.details["existing_booking"]["guest_name"] == "Winner"
    assert Booking.live(db).filter(Booking.status == "checked_in").count() == 1


def test_check_in_integrity_error_without_competing_booking_propagates(db, hotel, make_room, monkeypatch):
    from sqlalchemy.exc import IntegrityError

    make_room("101")

    def failing_commit():
        raise IntegrityError("INSERT INTO bookings", {}, Exception("FOREIGN KEY constraint failed"))

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(IntegrityError):
        _check_in(db, hotel)


def test_check_in_repairs_occupied_room_without_booking(db, hotel, make_room):
    room = make_room("101", status="occupied")
    booking = _check_in(db, hotel)

    db.refresh(room)
    assert room.status == "occupied"
    assert booking.room_id == room.id


def test_check_in_rejects_past_date(db, hotel, make_room):
    make_room("101")
    with pytest.raises(exceptions.CheckInDateInPast):
        _check_in(db, hotel, check_in_date=TODAY - timedelta(days=1))


def test_check_in_uses_hotel_local_date(db, hotel, make_room, frozen_clock):
    # 03:00 UTC on the 11th is still the 10th in Chicago
    from datetime import datetime, timezone
    frozen_clock.set(datetime(2026, 3, 11, 3, 0, tzinfo=timezone.utc))
    make_room("101")
    booking = _check_in(db, hotel)
    assert booking.check_in_date == TODAY


def test_check_in_rejects_bad_stay_dates(db, hotel, make_room):
    make_room("101")
    with pytest.raises(exceptions.InvalidStayDates):
        _check_in(db, hotel, check_out_date=TODAY)


@pytest.mark.parametrize("status", ["cleaning", "maintenance"])
def test_check_in_rejects_unavailable_room(db, hotel, make_room, status):
    make_room("101", status=status)
    with pytest.raises(exceptions.RoomUnavailable) as exc_info:
        _check_in(db, hotel)
    assert exc_info.value.details["status"] == status


def test_check_in_unknown_room(db, hotel):
    with pytest.raises(exceptions.RoomNotFound):
        _check_in(db, hotel, "999")


def test_check_in_without_phone_skips_notification(db, hotel, make_room, dispatcher):
    make_room("101")
    _check_in(db, hotel, guest_phone=None, dispatcher=dispatcher)
    assert dispatcher.sent == []


def test_check_in_survives_room_status_failure(db, hotel, make_room, monkeypatch):
    from sqlalchemy.exc import OperationalError

    make_room("101")
    calls = {"n": 0}
    real_commit = db.commit

    def flaky_commit():
        calls["n"] += 1
        if calls["n"] == 2:
            raise OperationalError("UPDATE rooms", {}, Exception("database is locked"))
        real_commit()

    monkeypatch.setattr(db, "commit", flaky_commit)
    booking = _check_in(db, hotel)

    assert booking.id is not None
    assert Booking.live(db).filter(Booking.id == booking.id).count() == 1


def test_check_out_returns_pending_orders(db, hotel, make_room, make_booking, make_order):
    room = make_room("101")
    booking = make_booking(room)
    make_order(booking, total="12.50")
    make_order(booking, total="7.50")
    make_order(booking, total="30.00", payment_status="paid")

    result = booking_service.check_out(db, hotel.id, "101")

    db.refresh(room)
    assert room.status == "available"
    assert result.booking.status == "checked_out"
    assert result.pending_orders_count == 2
    assert result.pending_orders_total == Decimal("20.00")
    assert room_service.get_active_booking(db, room.id) is None


def test_check_out_self_heals_drift(db, hotel, make_room):
    room = make_room("101", status="occupied")

    with pytest.raises(exceptions.InconsistentState):
        booking_service.check_out(db, hotel.id, "101")

    db.refresh(room)
    assert room.status == "available"


def test_check_out_nothing_to_do(db, hotel, make_room):
    make_room("101")
    with pytest.raises(exceptions.NothingToCheckOut):
        booking_service.check_out(db, hotel.id, "101")


def test_check_out_info_is_read_only(db, hotel, make_room, make_booking, make_order):
    room = make_room("101")
    booking = make_booking(room)
    make_order(booking, total="9.99")

    info = booking_service.check_out_info(db, hotel.id, "101")

    assert info.pending_orders_total == Decimal("9.99")
    db.refresh(room)
    assert room.status == "occupied"


def test_room_cannot_be_freed_manually_while_booked(db, hotel, make_room, make_booking):
    room = make_room("101")
    make_booking(room)
    with pytest.raises(exceptions.RoomOccupied):
        room_service.set_room_status(db, room.id, "available")
    with pytest.raises(exceptions.RoomOccupied):
        room_service.delete_room(db, room.id)


def test_room_admin(db, hotel, make_room):
    room = room_service.create_room(db, hotel.id, " 201 ")
    assert room.room_number == "201"
    with pytest.raises(exceptions.RoomAlreadyExists):
        room_service.create_room(db, hotel.id, "201")
    with pytest.raises(exceptions.ValidationFailed):
        room_service.set_room_status(db, room.id, "occupied")

    room_service.set_room_status(db, room.id, "cleaning")
    room_service.delete_room(db, room.id)
    assert room_service.list_rooms(db, hotel.id) == []
    assert db.query(Room).count() == 1
