"""Mock homeserver client for testing."""

from __future__ import annotations

import asyncio
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from ghostkit.client.base import MatrixClient
from ghostkit.models.responses import ReqRedact, RespJoinRoom, RespRegister, RespSendEvent


@dataclass
class MockCall:
    """One recorded client operation."""

    operation: str
    args: dict[str, Any] = field(default_factory=dict)


class MockMatrixClient(MatrixClient):
    """Records every operation and replays scripted failures.

    Each operation succeeds unless an outcome was queued for it with
    :meth:`queue_error`. Outcomes are consumed in order; ``None`` means
    "succeed this time".

    Example::

        client = MockMatrixClient("@echo:example.org")
        client.queue_error("join_room", MatrixError(403, ErrorCode.FORBIDDEN, "not invited"))
        # ... first join raises, the next one succeeds ...
        assert len(client.calls_to("join_room")) == 2
    """

    def __init__(self, user_id: str, *, room_aliases: dict[str, str] | None = None) -> None:
        self._user_id = user_id
        self._room_aliases = room_aliases or {}
        self._outcomes: defaultdict[str, deque[Exception | None]] = defaultdict(deque)
        self.calls: list[MockCall] = []
        self.closed = False

    @property
    def user_id(self) -> str:
        return self._user_id

    def queue_error(self, operation: str, *errors: Exception | None) -> None:
        """Queue outcomes for the next calls to *operation*."""
        self._outcomes[operation].extend(errors)

    def calls_to(self, operation: str) -> list[MockCall]:
        """Recorded calls to a single operation."""
        return [c for c in self.calls if c.operation == operation]

    async def _record(self, operation: str, **args: Any) -> None:
        self.calls.append(MockCall(operation, args))
        # Yield so concurrent callers interleave like real network calls.
        await asyncio.sleep(0)
        outcomes = self._outcomes.get(operation)
        if outcomes:
            error = outcomes.popleft()
            if error is not None:
                raise error

    async def register(self, username: str) -> RespRegister:
        await self._record("register", username=username)
        return RespRegister(user_id=self._user_id)

    async def join_room(self, room_id_or_alias: str) -> RespJoinRoom:
        await self._record("join_room", room_id_or_alias=room_id_or_alias)
        return RespJoinRoom(room_id=self._room_aliases.get(room_id_or_alias, room_id_or_alias))

    async def invite_user(self, room_id: str, user_id: str) -> None:
        await self._record("invite_user", room_id=room_id, user_id=user_id)

    async def send_message_event(
        self, room_id: str, event_type: str, content: Any
    ) -> RespSendEvent:
        await self._record(
            "send_message_event", room_id=room_id, event_type=event_type, content=content
        )
        return RespSendEvent(event_id=f"${uuid4().hex}")

    async def send_massaged_message_event(
        self, room_id: str, event_type: str, content: Any, ts: int
    ) -> RespSendEvent:
        await self._record(
            "send_massaged_message_event",
            room_id=room_id,
            event_type=event_type,
            content=content,
            ts=ts,
        )
        return RespSendEvent(event_id=f"${uuid4().hex}")

    async def send_state_event(
        self, room_id: str, event_type: str, state_key: str, content: Any
    ) -> RespSendEvent:
        await self._record(
            "send_state_event",
            room_id=room_id,
            event_type=event_type,
            state_key=state_key,
            content=content,
        )
        return RespSendEvent(event_id=f"${uuid4().hex}")

    async def send_massaged_state_event(
        self, room_id: str, event_type: str, state_key: str, content: Any, ts: int
    ) -> RespSendEvent:
        await self._record(
            "send_massaged_state_event",
            room_id=room_id,
            event_type=event_type,
            state_key=state_key,
            content=content,
            ts=ts,
        )
        return RespSendEvent(event_id=f"${uuid4().hex}")

    async def redact_event(
        self, room_id: str, event_id: str, req: ReqRedact | None = None
    ) -> RespSendEvent:
        await self._record("redact_event", room_id=room_id, event_id=event_id, req=req)
        return RespSendEvent(event_id=f"${uuid4().hex}")

    async def set_display_name(self, display_name: str) -> None:
        await self._record("set_display_name", display_name=display_name)

    async def set_avatar_url(self, avatar_url: str) -> None:
        await self._record("set_avatar_url", avatar_url=avatar_url)

    async def close(self) -> None:
        self.closed = True
