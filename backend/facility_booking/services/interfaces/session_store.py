"""
Server-held session store interface.
Allows swapping between Redis and in-process storage without changing the auth flow.
"""

from abc import ABC, abstractmethod
from typing import Optional


class SessionStore(ABC):
    """
    Maps an opaque session id (the `sid` cookie) to an employee id.

    The payload is deliberately only the employee id: role and scope are
    resolved from the User row on every request, so a demotion takes effect
    on the next request rather than at the next login.

    Implementations:
    - MemorySessionStore: process-local dict, for development and tests
    - RedisSessionStore: shared across workers, TTL enforced by Redis
    """

    @abstractmethod
    async def create(self, employee_id: int) -> str:
        """
        Start a session for an employee.

        Returns:
            The new session id to place in the session cookie
        """
        pass

    @abstractmethod
    async def get(self, session_id: str) -> Optional[int]:
        """
        Look up a session.

        Returns:
            The employee id, or None if the session is unknown or expired
        """
        pass

    @abstractmethod
    async def destroy(self, session_id: str) -> None:
        """End a session. Unknown ids are ignored."""
        pass
