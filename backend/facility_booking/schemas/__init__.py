from facility_booking.schemas.user import (
    UserCreate, UserLogin, UserResponse, UserSummary, UserUpdate,
    LoginResponse, PasswordChange, MessageResponse,
)
from facility_booking.schemas.facility import (
    FacilityCreate, FacilityUpdate, FacilityResponse,
    GroupCreate, GroupDirectorAssign, GroupResponse, DashboardResponse,
)
from facility_booking.schemas.booking import BookingCreate, BookingResponse, DashboardCount

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "UserSummary", "UserUpdate",
    "LoginResponse", "PasswordChange", "MessageResponse",
    "FacilityCreate", "FacilityUpdate", "FacilityResponse",
    "GroupCreate", "GroupDirectorAssign", "GroupResponse", "DashboardResponse",
    "BookingCreate", "BookingResponse", "DashboardCount",
]
