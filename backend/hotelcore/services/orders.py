"""
Guest order admission

An order is admitted only for an occupied room with an in-date booking whose
phone matches the caller's. Identical submissions arriving within the
duplicate window return the order already on file.
"""
import logging
import random
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hotelcore.core import clock, exceptions
from hotelcore.core.config import settings
from hotelcore.models.booking import Booking
from hotelcore.models.order import (
    Order, OrderItem, ORDER_PENDING, ORDER_PREPARING, ORDER_READY, ORDER_DELIVERED,
    ORDER_CANCELLED, PAYMENT_PENDING,
)
from hotelcore.models.room import Room, ROOM_MAINTENANCE, ROOM_OCCUPIED
from hotelcore.notifications import templates
from hotelcore.services.phone import phones_match
from hotelcore.services.rooms import (
    booking_snapshot, get_active_booking, get_room_by_number, hotel_timezone, room_snapshot,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

ORDER_TYPE_RESTAURANT = "restaurant_order"
ORDER_TYPE_BAR = "bar_order"
ORDER_TYPE_ROOM_SERVICE = "room_service_order"

DEPARTMENT_KITCHEN = "kitchen"
DEPARTMENT_BAR = "bar"

STATUS_TARGETS = (ORDER_PREPARING, ORDER_READY, ORDER_DELIVERED, ORDER_CANCELLED)
FINAL_STATUSES = (ORDER_DELIVERED, ORDER_CANCELLED)
NOTIFY_STATUSES = (ORDER_READY, ORDER_DELIVERED)

DRINK_KEYWORDS = (
    "drink", "cocktail", "beer", "wine", "mojito", "margarita",
    "martini", "whiskey", "vodka", "rum", "gin", "tequila",
    "lemonade", "juice", "soda", "coffee", "tea", "espresso",
    "cappuccino", "latte", "smoothie", "shake", "mocktail",
)
FOOD_KEYWORDS = (
    "steak", "chicken", "pasta", "pizza", "burger", "sandwich",
    "salad", "soup", "appetizer", "entree", "dessert", "cake",
    "potatoes", "rice", "bread", "breakfast", "lunch", "dinner",
    "grilled", "fried", "baked", "roasted",
)
BAR_CATEGORY_WORDS = ("drink", "beverage", "bar", "cocktail", "wine", "beer")
FOOD_CATEGORY_WORDS = ("food", "restaurant", "meal", "appetizer", "entree", "dessert", "main", "side")

SERVICE_TYPE_ORDER_TYPES = {
    "restaurant": ORDER_TYPE_RESTAURANT,
    ORDER_TYPE_RESTAURANT: ORDER_TYPE_RESTAURANT,
    "bar": ORDER_TYPE_BAR,
    ORDER_TYPE_BAR: ORDER_TYPE_BAR,
    "room_service": ORDER_TYPE_ROOM_SERVICE,
    ORDER_TYPE_ROOM_SERVICE: ORDER_TYPE_ROOM_SERVICE,
}


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _item_order_type(item) -> Optional[str]:
    service_type = (getattr(item, "service_type", None) or "").strip().lower()
    if service_type:
        return SERVICE_TYPE_ORDER_TYPES.get(service_type)

    category = (getattr(item, "category", None) or "").lower()
    if category:
        if any(word in category for word in BAR_CATEGORY_WORDS):
            return ORDER_TYPE_BAR
        if any(word in category for word in FOOD_CATEGORY_WORDS):
            return ORDER_TYPE_RESTAURANT
        return None

    name = (getattr(item, "name", None) or "").lower()
    is_drink = any(k in name for k in DRINK_KEYWORDS)
    is_food = any(k in name for k in FOOD_KEYWORDS)
    if is_drink and not is_food:
        return ORDER_TYPE_BAR
    if is_food:
        return ORDER_TYPE_RESTAURANT
    return None


def detect_order_type(items: Sequence) -> str:
    """First type found in the cart, room service when nothing is recognizable"""
    for item in items or []:
        order_type = _item_order_type(item)
        if order_type:
            return order_type
    return ORDER_TYPE_ROOM_SERVICE


def department_for(service_type: Optional[str]) -> str:
    if service_type and service_type.strip().lower() in ("bar", ORDER_TYPE_BAR):
        return DEPARTMENT_BAR
    return DEPARTMENT_KITCHEN


def item_fingerprint(pairs) -> List[Tuple[str, int]]:
    """Sorted (item id, quantity) pairs; quantity defaults to 1"""
    return sorted((str(item_id), int(quantity or 1)) for item_id, quantity in pairs)


def generate_order_number() -> str:
    now = clock.utcnow()
    millis = str(int(now.timestamp() * 1000))[-8:]
    return f"ORD-{now.year}-{millis}{random.randint(0, 999):03d}"


def validate_order_request(db: Session, hotel_id: int, room_number: str,
                           guest_phone: Optional[str]) -> Tuple[Room, Booking]:
    """Admission checks in order; each failure carries the room/booking snapshot"""
    room = get_room_by_number(db, hotel_id, room_number)
    if not room:
        raise exceptions.RoomNotFound(f"Room {room_number} not found")

    if room.status == ROOM_MAINTENANCE:
        raise exceptions.RoomInMaintenance(room=room_snapshot(room))
    if room.status != ROOM_OCCUPIED:
        raise exceptions.RoomNotCheckedIn(room.room_number, room.status, room=room_snapshot(room))

    booking = get_active_booking(db, room.id)
    if not booking:
        raise exceptions.NoActiveBooking(room=room_snapshot(room))

    today = clock.hotel_today(hotel_timezone(db, hotel_id))
    if booking.check_out_date < today:
        raise exceptions.BookingExpired(room=room_snapshot(room), booking=booking_snapshot(booking))

    if not guest_phone:
        raise exceptions.PhoneRequired(room=room_snapshot(room), booking=booking_snapshot(booking))
    if not booking.guest_phone:
        raise exceptions.PhoneMismatch(
            "No phone number on file for this booking",
            room=room_snapshot(room),
            booking=booking_snapshot(booking),
        )
    if not phones_match(guest_phone, booking.guest_phone):
        raise exceptions.PhoneMismatch(room=room_snapshot(room), booking=booking_snapshot(booking))

    return room, booking


def find_duplicate_order(db: Session, hotel_id: int, booking_id: int, room_number: str,
                         guest_phone: str, items: Sequence, total) -> Optional[Order]:
    since = clock.utcnow() - timedelta(seconds=settings.DUPLICATE_WINDOW_SECONDS)
    recent = Order.live(db).filter(
        Order.hotel_id == hotel_id,
        Order.booking_id == booking_id,
        Order.room_number == room_number,
        Order.guest_phone == guest_phone,
        Order.created_at >= since,
    ).order_by(Order.created_at.desc(), Order.id.desc()).all()
    if not recent:
        return None

    total = to_money(total)
    fingerprint = item_fingerprint((i.id, i.quantity) for i in items)
    for order in recent:
        if order.total_amount != total:
            continue
        if item_fingerprint((i.menu_item_id, i.quantity) for i in order.items) == fingerprint:
            return order
    return None


def submit_order(db: Session, hotel_id: int, room_number: str, guest_phone: Optional[str],
                 items: Sequence, total, subtotal=None, discount_amount=None,
                 guest_name: Optional[str] = None, order_type: Optional[str] = None,
                 special_instructions: Optional[str] = None,
                 dispatcher=None) -> Tuple[Order, bool]:
    """Returns (order, duplicate). A duplicate is the existing order, nothing is written."""
    if not room_number or not items or total is None:
        raise exceptions.ValidationFailed("Missing required fields: room_number, items, total")

    room, booking = validate_order_request(db, hotel_id, room_number, guest_phone)

    existing = find_duplicate_order(db, hotel_id, booking.id, room.room_number, guest_phone, items, total)
    if existing:
        logger.info("Duplicate order detected for room %s, returning %s", room_number, existing.order_number)
        return existing, True

    total = to_money(total)
    order_kwargs = dict(
        hotel_id=hotel_id,
        room_id=room.id,
        booking_id=booking.id,
        room_number=room.room_number,
        order_type=order_type or detect_order_type(items),
        guest_name=guest_name or booking.guest_name,
        guest_phone=guest_phone,
        subtotal=to_money(subtotal) if subtotal is not None else total,
        discount_amount=to_money(discount_amount) if discount_amount is not None else Decimal("0.00"),
        tax_amount=Decimal("0.00"),
        total_amount=total,
        payment_status=PAYMENT_PENDING,
        payment_method="room_charge",
        status=ORDER_PENDING,
        special_instructions=special_instructions,
    )

    order = None
    for attempt in range(3):
        order = Order(order_number=generate_order_number(), **order_kwargs)
        for item in items:
            unit_price = to_money(item.price)
            quantity = int(item.quantity or 1)
            order.items.append(OrderItem(
                menu_item_id=str(item.id),
                name=item.name,
                quantity=quantity,
                unit_price=unit_price,
                total_price=to_money(unit_price * quantity),
                service_type=item.service_type,
                service_id=str(item.service_id) if item.service_id is not None else None,
                department=department_for(item.service_type),
                status=ORDER_PENDING,
            ))
        db.add(order)
        try:
            db.commit()
            break
        except IntegrityError:
            # order_number collision
            db.rollback()
            logger.warning("Order number %s already taken, retrying", order.order_number)
            if attempt == 2:
                raise
    db.refresh(order)
    logger.info("Created order %s for room %s (total %s)", order.order_number, room.room_number, order.total_amount)

    if dispatcher is not None:
        dispatcher.enqueue(templates.order_confirmation(
            order,
            [{"name": i.name, "quantity": i.quantity, "price": i.price} for i in items],
        ))
    return order, False


def list_guest_orders(db: Session, hotel_id: int, room_number: str) -> List[Order]:
    """Orders of the room's current stay, newest first"""
    room = get_room_by_number(db, hotel_id, room_number)
    if not room:
        raise exceptions.RoomNotFound(f"Room {room_number} not found")
    booking = get_active_booking(db, room.id)
    if not booking:
        return []
    return Order.live(db).filter(
        Order.booking_id == booking.id,
        Order.room_id == room.id,
    ).order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_order(db: Session, order_id: int) -> Order:
    order = Order.live(db).filter(Order.id == order_id).first()
    if not order:
        raise exceptions.OrderNotFound()
    return order


def update_order_status(db: Session, order_id: int, status: str, dispatcher=None) -> Order:
    order = get_order(db, order_id)
    if status not in STATUS_TARGETS:
        raise exceptions.InvalidStatusTransition(
            f"Status must be one of: {', '.join(STATUS_TARGETS)}",
            current_status=order.status,
        )
    if order.status in FINAL_STATUSES:
        raise exceptions.InvalidStatusTransition(
            f"Order is already {order.status}",
            current_status=order.status,
        )

    order.status = status
    for item in order.items:
        item.status = status
    if status == ORDER_DELIVERED:
        order.delivered_at = clock.utcnow()
    db.commit()
    db.refresh(order)
    logger.info("Order %s status set to %s", order.order_number, status)

    if dispatcher is not None and status in NOTIFY_STATUSES:
        dispatcher.enqueue(templates.order_status_update(order, status))
    return order
