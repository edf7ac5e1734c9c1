"""
Operation log model
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Index

from hotelcore.core import clock
from hotelcore.db.database import Base


class OperationLog(Base):
    """Audit trail of staff and guest API calls"""
    __tablename__ = "operation_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=True, comment="Staff user ID")
    username = Column(String(100), nullable=False, comment="Staff username, or guest")
    action = Column(String(100), nullable=False, comment="e.g. check-in, submit order")
    module = Column(String(50), nullable=False, comment="e.g. bookings, folios")
    method = Column(String(10), nullable=False)
    path = Column(String(500), nullable=False)
    ip_address = Column(String(50))
    request_data = Column(Text, comment="Truncated request body")
    status_code = Column(Integer)
    error_message = Column(Text)
    execution_time = Column(Integer, comment="Milliseconds")
    created_at = Column(DateTime(timezone=True), default=clock.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_operation_logs_username", "username"),
        Index("idx_operation_logs_module", "module"),
        Index("idx_operation_logs_created_at", "created_at"),
    )
