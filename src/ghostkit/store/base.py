"""Abstract base class for registration and membership state."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ghostkit.models.enums import Membership


class StateStore(ABC):
    """Cached registration and membership facts for virtual users.

    Implement this ABC to plug in any storage backend. The library ships
    with ``InMemoryStateStore`` for development and testing and
    ``PostgresStateStore`` for durable deployments.

    The facts are a projection of homeserver state and may be stale.
    Callers treat a recorded registration or ``join`` as reason enough to
    skip provisioning, never as live truth. Implementations must be safe to
    share between many intents running on the same event loop.
    """

    # Registration

    @abstractmethod
    async def is_registered(self, user_id: str) -> bool:
        """Return ``True`` if *user_id* is known to be registered."""
        ...

    @abstractmethod
    async def mark_registered(self, user_id: str) -> None:
        """Record that *user_id* is registered. Registration never reverts."""
        ...

    # Membership

    @abstractmethod
    async def get_membership(self, room_id: str, user_id: str) -> str | None:
        """Return the recorded membership of *user_id* in *room_id*, if any."""
        ...

    @abstractmethod
    async def set_membership(self, room_id: str, user_id: str, membership: str) -> None:
        """Record *membership* for *user_id* in *room_id*.

        ``membership`` is usually a :class:`Membership` value; other strings
        are stored as-is.
        """
        ...

    @abstractmethod
    async def get_members(self, room_id: str, membership: str | None = None) -> list[str]:
        """List user IDs recorded in *room_id*, optionally filtered by membership."""
        ...

    async def is_joined(self, user_id: str, room_id: str) -> bool:
        """Return ``True`` if *user_id* is recorded as joined to *room_id*."""
        return await self.get_membership(room_id, user_id) == Membership.JOIN

    async def close(self) -> None:  # noqa: B027
        """Release resources. Override in subclasses that hold connections."""
