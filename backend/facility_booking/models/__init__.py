from facility_booking.models.user import User, UserRole
from facility_booking.models.group import Group
from facility_booking.models.facility import Facility
from facility_booking.models.booking import Booking, BookingStatus, CancellationStatus

__all__ = [
    "User", "UserRole", "Group", "Facility",
    "Booking", "BookingStatus", "CancellationStatus",
]
