"""
Route access policy.

One table maps every guarded route to the capability set it requires;
routes declare `Depends(require("<route name>"))` and the check runs once
per request. Flags mirror the client route guards: a request passes only if
the role satisfies every `requires_*` flag and no `excludes_*` flag.
"""

from dataclasses import dataclass

from facility_booking.core.exceptions import Forbidden
from facility_booking.models.user import UserRole


@dataclass(frozen=True)
class Capability:
    requires_gd: bool = False
    requires_fm: bool = False
    requires_admin: bool = False
    excludes_admin: bool = False

    def allows(self, role: UserRole) -> bool:
        if self.requires_gd and role != UserRole.GROUP_DIRECTOR:
            return False
        if self.requires_fm and role != UserRole.FACILITY_MANAGER:
            return False
        if self.requires_admin and role != UserRole.ADMIN:
            return False
        if self.excludes_admin and role == UserRole.ADMIN:
            return False
        return True


AUTHENTICATED = Capability()
NON_ADMIN = Capability(excludes_admin=True)
GD_ONLY = Capability(requires_gd=True, excludes_admin=True)
FM_ONLY = Capability(requires_fm=True, excludes_admin=True)
ADMIN_ONLY = Capability(requires_admin=True)

ROUTE_POLICIES: dict[str, Capability] = {
    "auth.change_password": AUTHENTICATED,
    "dashboard.overview": NON_ADMIN,
    "dashboard.count": AUTHENTICATED,
    "facility.calendar": NON_ADMIN,
    "facility.request": NON_ADMIN,
    "bookings.mine": NON_ADMIN,
    "bookings.cancel": NON_ADMIN,
    "bookings.gd": GD_ONLY,
    "bookings.fm": FM_ONLY,
    "approvals.gd": GD_ONLY,
    "approvals.fm": FM_ONLY,
    "cancellations.gd": GD_ONLY,
    "cancellations.fm": FM_ONLY,
    "admin.bookings": ADMIN_ONLY,
    "admin.users": ADMIN_ONLY,
    "admin.groups": ADMIN_ONLY,
    "admin.facilities": ADMIN_ONLY,
}


def check_access(route: str, role: UserRole) -> None:
    """Raise Forbidden unless `role` may use `route`. Unknown routes are denied."""
    capability = ROUTE_POLICIES.get(route)
    if capability is None or not capability.allows(role):
        raise Forbidden()
