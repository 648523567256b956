"""
Pydantic schemas for user and auth request/response validation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from facility_booking.models.user import UserRole


class UserCreate(BaseModel):
    employee_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    image: Optional[str] = Field(None, max_length=1024)


class UserLogin(BaseModel):
    employee_id: int = Field(..., gt=0)
    password: str = Field(..., min_length=1)


class PasswordChange(BaseModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


class UserUpdate(BaseModel):
    role: Optional[UserRole] = None
    group_id: Optional[int] = None


class UserSummary(BaseModel):
    name: str
    employee_id: int

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    id: int
    employee_id: int
    name: str
    image: Optional[str]
    role: UserRole
    group_id: Optional[int]
    created_at: datetime

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    name: str
    employee_id: int
    image: Optional[str]
    role: UserRole

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    message: str
