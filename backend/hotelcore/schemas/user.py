"""
Staff user schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from hotelcore.schemas.common import format_datetime_local


class LoginRequest(BaseModel):
    username: str = Field(..., description="Username")
    password: str = Field(..., description="Password")


class LoginResponse(BaseModel):
    accessToken: str = Field(..., description="Bearer token")
    username: str
    role: str


class UserResponse(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str
    created_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('created_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)
