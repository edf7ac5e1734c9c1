import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["NOTIFICATIONS_ENABLED"] = "false"
os.environ["DEFAULT_HOTEL_TIMEZONE"] = "America/Chicago"
os.environ["TWILIO_ACCOUNT_SID"] = ""
os.environ["ORDER_CONFIRMATION_TEMPLATE"] = ""
os.environ["CHECK_IN_TEMPLATE"] = ""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from hotelcore.core import clock as clock_module
from hotelcore.db.database import Base, SessionLocal, engine
from hotelcore.models import Booking, Hotel, Order, OrderItem, Room, User
from hotelcore.api.auth import get_password_hash, tokens
from hotelcore.notifications.dispatcher import get_dispatcher

# Tuesday 2026-03-10 12:00 in Chicago (CDT)
START = datetime(2026, 3, 10, 17, 0, tzinfo=timezone.utc)
TODAY = date(2026, 3, 10)


class FrozenClock:
    def __init__(self, current: datetime):
        self.current = current

    def advance(self, **kwargs):
        self.current = self.current + timedelta(**kwargs)

    def set(self, current: datetime):
        self.current = current


class FakeDispatcher:
    """Collects notifications instead of sending them"""

    def __init__(self):
        self.sent = []

    def enqueue(self, notification):
        if notification is not None:
            self.sent.append(notification)


@pytest.fixture(autouse=True)
def frozen_clock(monkeypatch):
    fc = FrozenClock(START)

    class _FrozenDatetime(datetime):
        @classmethod
        def now(cls, tz=None):
            return fc.current if tz is None else fc.current.astimezone(tz)

    monkeypatch.setattr(clock_module, "datetime", _FrozenDatetime)
    return fc


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        tokens.clear()


@pytest.fixture
def dispatcher():
    return FakeDispatcher()


@pytest.fixture
def hotel(db):
    h = Hotel(title="Lakeside Inn", timezone="America/Chicago")
    db.add(h)
    db.commit()
    db.refresh(h)
    return h


@pytest.fixture
def make_room(db, hotel):
    def _make(room_number="101", status="available"):
        room = Room(hotel_id=hotel.id, room_number=room_number, status=status)
        db.add(room)
        db.commit()
        db.refresh(room)
        return room
    return _make


@pytest.fixture
def make_booking(db, hotel):
    """Insert a checked-in booking directly and mark the room occupied"""
    def _make(room, guest_phone="+15551234567", check_in=TODAY, check_out=None, guest_name="Ana Lopez"):
        booking = Booking(
            hotel_id=hotel.id,
            room_id=room.id,
            guest_name=guest_name,
            guest_phone=guest_phone,
            check_in_date=check_in,
            check_out_date=check_out or check_in + timedelta(days=2),
            status="checked_in",
            total_amount=Decimal("0.00"),
            payment_status="pending",
        )
        db.add(booking)
        room.status = "occupied"
        db.commit()
        db.refresh(booking)
        return booking
    return _make


@pytest.fixture
def make_order(db, hotel):
    def _make(booking, total="20.00", payment_status="pending", items=(("burger", 1),)):
        order = Order(
            order_number=f"ORD-TEST-{len(db.query(Order).all()) + 1:04d}",
            hotel_id=hotel.id,
            room_id=booking.room_id,
            booking_id=booking.id,
            room_number=booking.room.room_number,
            guest_phone=booking.guest_phone or "+15551234567",
            guest_name=booking.guest_name,
            subtotal=Decimal(total),
            discount_amount=Decimal("0.00"),
            tax_amount=Decimal("0.00"),
            total_amount=Decimal(total),
            payment_status=payment_status,
        )
        for item_id, quantity in items:
            order.items.append(OrderItem(
                menu_item_id=item_id, name=item_id, quantity=quantity,
                unit_price=Decimal(total), total_price=Decimal(total),
            ))
        db.add(order)
        db.commit()
        db.refresh(order)
        return order
    return _make


@pytest.fixture
def make_user(db):
    def _make(username="frontdesk", role="staff", password="secret123"):
        user = User(
            username=username,
            email=f"{username}@example.com",
            name=username,
            password_hash=get_password_hash(password),
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def client(db, dispatcher):
    from hotelcore.main import app

    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client, make_user):
    def _login(username="frontdesk", role="staff"):
        make_user(username=username, role=role)
        resp = client.post("/login", json={"username": username, "password": "secret123"})
        assert resp.status_code == 200
        return {"Authorization": f"Bearer {resp.json()['accessToken']}"}
    return _login
