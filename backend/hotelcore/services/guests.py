"""
Guest profile resolution
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from hotelcore.models.guest import Guest
from hotelcore.services.phone import normalize_phone

logger = logging.getLogger(__name__)


def find_or_create_guest(db: Session, hotel_id: int, name: str, email: Optional[str] = None,
                         phone: Optional[str] = None, visit_date: Optional[date] = None) -> Guest:
    """
    Match an existing guest by email, then by phone; otherwise create one.
    The row is flushed, not committed, so it lands with the booking.
    """
    email = email.strip().lower() if email else None
    phone = normalize_phone(phone) if phone else None

    guest = None
    if email:
        guest = Guest.live(db).filter(
            Guest.hotel_id == hotel_id,
            func.lower(Guest.email) == email,
        ).first()
    if guest is None and phone:
        guest = Guest.live(db).filter(
            Guest.hotel_id == hotel_id,
            Guest.phone == phone,
        ).first()

    if guest is None:
        guest = Guest(hotel_id=hotel_id, name=name, email=email, phone=phone,
                      total_visits=0, first_visit_date=visit_date)
        db.add(guest)
        logger.info("Created guest profile for %s (hotel %s)", name, hotel_id)
    else:
        guest.name = name
        if email and not guest.email:
            guest.email = email
        if phone and not guest.phone:
            guest.phone = phone

    guest.total_visits = (guest.total_visits or 0) + 1
    guest.last_visit_date = visit_date
    db.flush()
    return guest
