"""
Room schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from hotelcore.schemas.common import format_datetime_local


class RoomCreate(BaseModel):
    """Create a room"""
    hotel_id: int = Field(..., description="Hotel")
    room_number: str = Field(..., description="Room number", min_length=1, max_length=20)
    status: str = Field("available", description="available, cleaning, maintenance")


class RoomStatusUpdate(BaseModel):
    status: str = Field(..., description="available, cleaning, maintenance")


class RoomResponse(BaseModel):
    id: int
    hotel_id: int
    room_number: str
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return format_datetime_local(dt)
