"""
Request-scoped dependencies: session lookup, identity resolution, route guards.
"""

from typing import Callable, Optional

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.core.config import get_settings
from facility_booking.core.policy import check_access
from facility_booking.db.session import get_db
from facility_booking.services.identity_service import Identity, resolve_identity
from facility_booking.services.interfaces.session_store import SessionStore
from facility_booking.services.session_service import get_session_store


async def get_session_employee_id(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> Optional[int]:
    session_id = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if not session_id:
        return None
    return await store.get(session_id)


async def get_current_identity(
    employee_id: Optional[int] = Depends(get_session_employee_id),
    db: AsyncSession = Depends(get_db),
) -> Identity:
    identity = await resolve_identity(db, employee_id)
    structlog.contextvars.bind_contextvars(
        employee_id=identity.employee_id,
        role=identity.role.value,
    )
    return identity


def require(route: str) -> Callable:
    """Dependency that resolves the caller and enforces the route's policy entry."""

    async def guard(identity: Identity = Depends(get_current_identity)) -> Identity:
        check_access(route, identity.role)
        return identity

    return guard
