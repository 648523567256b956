"""
In-process session store.
"""

import time
from typing import Optional

from facility_booking.core.security import new_session_id
from facility_booking.services.interfaces.session_store import SessionStore


class MemorySessionStore(SessionStore):
    """
    Sessions held in a dict owned by this instance.

    Use when:
    - Running a single worker (development, tests)
    - Redis is disabled
    Sessions do not survive a restart and are not shared between workers.
    Expired entries are swept on every create, so sessions abandoned without
    a logout do not accumulate.
    """

    def __init__(self, ttl_seconds: int):
        self._ttl = ttl_seconds
        self._sessions: dict[str, tuple[int, float]] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _sweep(self, now: float) -> None:
        expired = [sid for sid, (_, expires_at) in self._sessions.items() if now >= expires_at]
        for sid in expired:
            del self._sessions[sid]

    async def create(self, employee_id: int) -> str:
        now = time.monotonic()
        self._sweep(now)
        session_id = new_session_id()
        self._sessions[session_id] = (employee_id, now + self._ttl)
        return session_id

    async def get(self, session_id: str) -> Optional[int]:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        employee_id, expires_at = entry
        if time.monotonic() >= expires_at:
            self._sessions.pop(session_id, None)
            return None
        return employee_id

    async def destroy(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
