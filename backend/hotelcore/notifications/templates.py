"""
Guest message builders

Each builder returns a ``Notification`` or None when the guest has no usable
phone number. A configured content template is preferred; otherwise the
freeform body is sent.
"""
import logging
from decimal import Decimal
from typing import Iterable, Optional

from hotelcore.core.config import settings
from hotelcore.notifications.dispatcher import Notification
from hotelcore.services.phone import format_for_messaging

logger = logging.getLogger(__name__)


def _recipient(phone: Optional[str], context: str) -> Optional[str]:
    recipient = format_for_messaging(phone)
    if not recipient:
        logger.warning("No valid phone number for %s (raw: %r), notification skipped", context, phone)
    return recipient


def _money(amount) -> str:
    return f"${Decimal(str(amount or 0)):.2f}"


def order_confirmation_body(order_number: str, guest_name: str, room_number: str,
                            items: Iterable[dict], total_amount,
                            special_instructions: Optional[str] = None,
                            estimated_delivery_minutes: int = 25) -> str:
    lines = [
        "Order Confirmed!",
        "",
        f"Order #{order_number}",
        f"Room {room_number} - {guest_name}",
        "",
        "Items:",
    ]
    for item in items:
        quantity = item.get("quantity") or 1
        line_total = Decimal(str(item.get("price") or 0)) * quantity
        lines.append(f"- {quantity}x {item.get('name') or 'Item'} - {_money(line_total)}")
    lines.append("")
    lines.append(f"Total: {_money(total_amount)}")
    if special_instructions:
        lines.append(f"Special: {special_instructions}")
    lines.append("")
    lines.append(f"Estimated delivery: {estimated_delivery_minutes} minutes")
    lines.append("We'll notify you when your order is ready!")
    return "\n".join(lines)


def order_confirmation(order, items: Iterable[dict]) -> Optional[Notification]:
    recipient = _recipient(order.guest_phone, f"order {order.order_number}")
    if not recipient:
        return None

    items = list(items)
    guest_name = order.guest_name or "Guest"
    description = f"order confirmation #{order.order_number}"
    if settings.ORDER_CONFIRMATION_TEMPLATE:
        summary = ", ".join(f"{i.get('quantity') or 1}x {i.get('name') or 'Item'}" for i in items)
        return Notification(
            recipient=recipient,
            template_id=settings.ORDER_CONFIRMATION_TEMPLATE,
            variables=[
                order.order_number,
                guest_name,
                order.room_number,
                summary,
                _money(order.total_amount),
                str(settings.ESTIMATED_DELIVERY_MINUTES),
            ],
            description=description,
        )

    logger.warning("Order confirmation template not configured, using freeform message")
    return Notification(
        recipient=recipient,
        body=order_confirmation_body(
            order.order_number,
            guest_name,
            order.room_number,
            items,
            order.total_amount,
            order.special_instructions,
            settings.ESTIMATED_DELIVERY_MINUTES,
        ),
        description=description,
    )


def check_in_confirmation(hotel_name: str, booking, room_number: str) -> Optional[Notification]:
    recipient = _recipient(booking.guest_phone, f"check-in of {booking.guest_name}")
    if not recipient:
        return None

    guest_site_link = f"{settings.GUEST_SITE_BASE_URL.rstrip('/')}/guest/{booking.hotel_id}?room={room_number}"
    check_in = booking.check_in_date.strftime("%B %d, %Y")
    check_out = booking.check_out_date.strftime("%B %d, %Y")
    description = f"check-in {booking.guest_name}, room {room_number}"

    if settings.CHECK_IN_TEMPLATE:
        return Notification(
            recipient=recipient,
            template_id=settings.CHECK_IN_TEMPLATE,
            variables=[booking.guest_name, hotel_name, room_number, check_in, check_out, guest_site_link],
            description=description,
        )
    return Notification(
        recipient=recipient,
        body=(
            f"Welcome to {hotel_name}, {booking.guest_name}!\n"
            f"Room {room_number}, {check_in} to {check_out}.\n"
            f"Order room service here: {guest_site_link}"
        ),
        description=description,
    )


def order_status_update(order, status: str) -> Optional[Notification]:
    """Ready/delivered messages, sent only when a template is configured"""
    template_id = {
        "ready": settings.ORDER_READY_TEMPLATE,
        "delivered": settings.ORDER_DELIVERED_TEMPLATE,
    }.get(status)
    if not template_id:
        logger.debug("No template for order status %s, skipping notification", status)
        return None

    recipient = _recipient(order.guest_phone, f"order {order.order_number}")
    if not recipient:
        return None
    return Notification(
        recipient=recipient,
        template_id=template_id,
        variables=[order.order_number, order.room_number],
        description=f"order {status} #{order.order_number}",
    )
