"""Per-key single-flight coordination for provisioning gates."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

Attempt = Callable[[], Awaitable[None]]


def registration_key(user_id: str) -> str:
    return f"register:{user_id}"


def membership_key(user_id: str, room_id: str) -> str:
    return f"join:{user_id}:{room_id}"


class ProvisioningLockManager(ABC):
    """Coalesces concurrent registration and join attempts per key.

    Without a lock manager, concurrent callers may both see a cache miss and
    both hit the homeserver; the duplicate is absorbed by ``M_USER_IN_USE``
    handling and idempotent joins.  With one, only a single attempt per key
    is in flight and every caller that arrives meanwhile gets that attempt's
    outcome, success or the very same exception.
    """

    @abstractmethod
    async def run(self, key: str, attempt: Attempt) -> None:
        """Run *attempt* for *key*, or wait for the attempt already in flight."""
        ...


class InMemoryProvisioningLocks(ProvisioningLockManager):
    """In-process single-flight map of asyncio tasks keyed by provisioning key.

    An entry lives only while its attempt runs, so the map stays bounded by
    the number of concurrent provisioning attempts.  Suitable for a single
    bridge process; a multi-process deployment needs a shared backend.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Task[None]] = {}

    async def run(self, key: str, attempt: Attempt) -> None:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._run(key, attempt))
            task.add_done_callback(_consume_exception)
            self._inflight[key] = task
        # Shielded so one cancelled caller does not cancel the shared attempt.
        await asyncio.shield(task)

    async def _run(self, key: str, attempt: Attempt) -> None:
        try:
            await attempt()
        finally:
            self._inflight.pop(key, None)

    @property
    def size(self) -> int:
        """Number of attempts currently in flight."""
        return len(self._inflight)


def _consume_exception(task: asyncio.Task[None]) -> None:
    # Callers re-raise it through the shield; this marks it retrieved when all
    # of them were cancelled.
    if not task.cancelled():
        task.exception()
