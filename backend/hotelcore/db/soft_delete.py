"""
Soft delete support

Rows are never physically removed. Every read goes through ``Model.live(db)``
so the ``is_deleted`` predicate lives in one place.
"""
from sqlalchemy import Boolean, Column, DateTime
from sqlalchemy.orm import Query, Session

from hotelcore.core import clock


class SoftDeleteMixin:
    is_deleted = Column(Boolean, default=False, nullable=False, index=True, comment="Soft delete flag")
    deleted_at = Column(DateTime(timezone=True), nullable=True, comment="Deletion time")

    @classmethod
    def live(cls, db: Session) -> Query:
        """Query over rows that have not been soft deleted"""
        return db.query(cls).filter(cls.is_deleted.is_(False))

    def soft_delete(self):
        self.is_deleted = True
        self.deleted_at = clock.utcnow()
