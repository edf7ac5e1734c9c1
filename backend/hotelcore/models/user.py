"""
Staff user model
"""
from sqlalchemy import Column, Integer, String, DateTime, Index

from hotelcore.core import clock
from hotelcore.db.database import Base
from hotelcore.db.soft_delete import SoftDeleteMixin

ROLE_STAFF = "staff"
ROLE_ADMIN = "admin"
ROLE_SUPER_ADMIN = "super_admin"


class User(SoftDeleteMixin, Base):
    """Staff accounts"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False, unique=True, comment="Login name")
    email = Column(String(255), nullable=False, unique=True, comment="Email")
    name = Column(String(200), nullable=True, comment="Display name")
    password_hash = Column(String(255), nullable=False, comment="bcrypt hash")
    role = Column(String(20), default=ROLE_STAFF, comment="staff, admin, super_admin")
    created_at = Column(DateTime(timezone=True), default=clock.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=clock.utcnow, onupdate=clock.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_users_username", "username"),
        Index("idx_users_email", "email"),
    )
