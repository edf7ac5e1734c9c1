"""
Database initialization: create tables and seed a hotel with an admin account

    python -m hotelcore.db.init_db --hotel "Grand Hotel" --admin admin --password secret
"""
import argparse
import logging

from sqlalchemy.orm import Session

from hotelcore.core.logging import setup_logging
from hotelcore.db.database import engine, Base, SessionLocal
from hotelcore.models import Hotel, User
from hotelcore.models.user import ROLE_SUPER_ADMIN
from hotelcore.api.auth import get_password_hash

logger = logging.getLogger(__name__)


def init_db():
    """Create all tables"""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def seed(db: Session, hotel_title: str, username: str, password: str, email: str, timezone: str = None) -> Hotel:
    hotel = Hotel.live(db).filter(Hotel.title == hotel_title).first()
    if not hotel:
        hotel = Hotel(title=hotel_title, timezone=timezone)
        db.add(hotel)
        logger.info("Created hotel %s", hotel_title)

    user = User.live(db).filter(User.username == username).first()
    if not user:
        db.add(User(
            username=username,
            email=email,
            name=username,
            password_hash=get_password_hash(password),
            role=ROLE_SUPER_ADMIN,
        ))
        logger.info("Created super admin %s", username)
    db.commit()
    db.refresh(hotel)
    return hotel


def main():
    parser = argparse.ArgumentParser(description="Create tables and seed initial data")
    parser.add_argument("--hotel", default="Demo Hotel")
    parser.add_argument("--timezone", default=None)
    parser.add_argument("--admin", default="admin")
    parser.add_argument("--password", required=True)
    parser.add_argument("--email", default="admin@example.com")
    args = parser.parse_args()

    setup_logging()
    init_db()
    db = SessionLocal()
    try:
        hotel = seed(db, args.hotel, args.admin, args.password, args.email, args.timezone)
        logger.info("Hotel id: %s", hotel.id)
    finally:
        db.close()


if __name__ == "__main__":
    main()
