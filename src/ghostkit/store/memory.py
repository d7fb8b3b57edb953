"""In-memory implementation of StateStore."""

from __future__ import annotations

from ghostkit.store.base import StateStore


class InMemoryStateStore(StateStore):
    """Dict-based in-memory store for development and testing."""

    def __init__(self) -> None:
        self._registered: set[str] = set()
        self._memberships: dict[str, dict[str, str]] = {}

    async def is_registered(self, user_id: str) -> bool:
        return user_id in self._registered

    async def mark_registered(self, user_id: str) -> None:
        self._registered.add(user_id)

    async def get_membership(self, room_id: str, user_id: str) -> str | None:
        return self._memberships.get(room_id, {}).get(user_id)

    async def set_membership(self, room_id: str, user_id: str, membership: str) -> None:
        self._memberships.setdefault(room_id, {})[user_id] = str(membership)

    async def get_members(self, room_id: str, membership: str | None = None) -> list[str]:
        members = self._memberships.get(room_id, {})
        return [
            user_id
            for user_id, state in members.items()
            if membership is None or state == membership
        ]
