"""
Operation log API
"""
from datetime import date, datetime, time, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, field_serializer
from sqlalchemy import desc
from sqlalchemy.orm import Session

from hotelcore.api.auth import require_admin
from hotelcore.db.database import get_db
from hotelcore.models.operation_log import OperationLog
from hotelcore.models.user import User
from hotelcore.schemas.common import format_datetime_local

router = APIRouter(prefix="/api/operation-logs", tags=["operation logs"])


class OperationLogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    username: str
    action: str
    module: str
    method: str
    path: str
    ip_address: Optional[str] = None
    request_data: Optional[str] = None
    status_code: Optional[int] = None
    error_message: Optional[str] = None
    execution_time: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('created_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)


@router.get("", response_model=List[OperationLogResponse])
def get_operation_logs(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=1000),
    username: Optional[str] = Query(None),
    module: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None, description="UTC date"),
    end_date: Optional[date] = Query(None, description="UTC date"),
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    query = db.query(OperationLog)
    if username:
        query = query.filter(OperationLog.username.like(f"%{username}%"))
    if module:
        query = query.filter(OperationLog.module == module)
    if start_date:
        query = query.filter(OperationLog.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc))
    if end_date:
        query = query.filter(OperationLog.created_at <= datetime.combine(end_date, time.max, tzinfo=timezone.utc))
    return query.order_by(desc(OperationLog.created_at), desc(OperationLog.id)).offset(skip).limit(limit).all()
