"""
Phone number normalization and matching

The matching is a heuristic: numbers without a country code are assumed to be
US/Canada, and two numbers whose last ten digits agree are treated as the same
line even when their country codes differ.
"""
import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

_FORMATTING = re.compile(r"[\s\-().]")
_NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone: str) -> str:
    """Canonical ``+<country><digits>`` form used for comparison"""
    normalized = _FORMATTING.sub("", phone or "")
    if not normalized.startswith("+"):
        if normalized.startswith("1") and len(normalized) == 11:
            normalized = "+" + normalized
        elif len(normalized) == 10:
            normalized = "+1" + normalized
        else:
            normalized = "+" + normalized
    return normalized


def phones_match(order_phone: Optional[str], booking_phone: Optional[str]) -> bool:
    if not order_phone or not booking_phone:
        return False

    left = normalize_phone(order_phone)
    right = normalize_phone(booking_phone)
    if left == right:
        return True

    # Country code mismatch fallback
    left_tail = left[-10:]
    return len(left_tail) == 10 and left_tail == right[-10:]


def format_for_messaging(phone: Optional[str]) -> Optional[str]:
    """E.164 number for outbound messages, or None when unusable"""
    if not phone:
        return None

    if phone.startswith("+"):
        digits = _NON_DIGITS.sub("", phone)
        if 10 <= len(digits) <= 15:
            return "+" + digits
        logger.warning("Invalid E.164 phone format: %s (%d digits)", phone, len(digits))

    digits = _NON_DIGITS.sub("", phone)
    if not digits:
        logger.warning("No digits found in phone: %r", phone)
        return None

    if len(digits) == 10:
        cleaned = "+1" + digits
    elif len(digits) >= 11:
        cleaned = "+" + digits
    else:
        cleaned = "+1" + digits

    if not 10 <= len(cleaned) - 1 <= 15:
        logger.warning("Invalid phone number length: %s -> %s", phone, cleaned)
        return None
    return cleaned
