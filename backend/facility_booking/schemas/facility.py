"""
Pydantic schemas for facilities and groups.
"""

from typing import Optional

from pydantic import BaseModel, Field

from facility_booking.schemas.user import LoginResponse, UserSummary

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class FacilityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN)
    icon: Optional[str] = Field(None, max_length=1024)
    is_active: bool = True
    manager_employee_id: Optional[int] = None


class FacilityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    icon: Optional[str] = Field(None, max_length=1024)
    is_active: Optional[bool] = None
    manager_employee_id: Optional[int] = None


class FacilityResponse(BaseModel):
    id: int
    name: str
    slug: str
    icon: Optional[str]
    is_active: bool
    manager: Optional[UserSummary] = None

    model_config = {"from_attributes": True}


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class GroupDirectorAssign(BaseModel):
    employee_id: int = Field(..., gt=0)


class GroupResponse(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class DashboardResponse(BaseModel):
    user: LoginResponse
    facilities: list[FacilityResponse]
