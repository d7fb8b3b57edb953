"""Abstract base class for homeserver clients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ghostkit.models.enums import EventType, MessageType
from ghostkit.models.responses import ReqRedact, RespJoinRoom, RespRegister, RespSendEvent


class MatrixClient(ABC):
    """Performs network operations while acting as a single user.

    Every method raises :class:`~ghostkit.core.errors.MatrixError` when the
    homeserver rejects the request and
    :class:`~ghostkit.core.errors.TransportError` when no response arrives.
    """

    @property
    def name(self) -> str:
        """Client name."""
        return self.__class__.__name__

    @property
    @abstractmethod
    def user_id(self) -> str:
        """The user this client acts as."""
        ...

    # Provisioning

    @abstractmethod
    async def register(self, username: str) -> RespRegister:
        """Register *username* through the application service namespace."""
        ...

    @abstractmethod
    async def join_room(self, room_id_or_alias: str) -> RespJoinRoom:
        """Join a room by ID or alias and return the resolved room ID."""
        ...

    @abstractmethod
    async def invite_user(self, room_id: str, user_id: str) -> None:
        """Invite *user_id* into *room_id*."""
        ...

    # Events

    @abstractmethod
    async def send_message_event(
        self, room_id: str, event_type: str, content: Any
    ) -> RespSendEvent: ...

    @abstractmethod
    async def send_massaged_message_event(
        self, room_id: str, event_type: str, content: Any, ts: int
    ) -> RespSendEvent:
        """Send a message event with its origin timestamp overridden to *ts* (ms)."""
        ...

    @abstractmethod
    async def send_state_event(
        self, room_id: str, event_type: str, state_key: str, content: Any
    ) -> RespSendEvent: ...

    @abstractmethod
    async def send_massaged_state_event(
        self, room_id: str, event_type: str, state_key: str, content: Any, ts: int
    ) -> RespSendEvent:
        """Send a state event with its origin timestamp overridden to *ts* (ms)."""
        ...

    @abstractmethod
    async def redact_event(
        self, room_id: str, event_id: str, req: ReqRedact | None = None
    ) -> RespSendEvent: ...

    async def send_text(self, room_id: str, text: str) -> RespSendEvent:
        return await self.send_message_event(
            room_id, EventType.ROOM_MESSAGE, {"msgtype": MessageType.TEXT, "body": text}
        )

    async def send_notice(self, room_id: str, text: str) -> RespSendEvent:
        return await self.send_message_event(
            room_id, EventType.ROOM_MESSAGE, {"msgtype": MessageType.NOTICE, "body": text}
        )

    async def send_image(self, room_id: str, body: str, url: str) -> RespSendEvent:
        return await self.send_message_event(
            room_id,
            EventType.ROOM_MESSAGE,
            {"msgtype": MessageType.IMAGE, "body": body, "url": url},
        )

    async def send_video(self, room_id: str, body: str, url: str) -> RespSendEvent:
        return await self.send_message_event(
            room_id,
            EventType.ROOM_MESSAGE,
            {"msgtype": MessageType.VIDEO, "body": body, "url": url},
        )

    # Profile

    @abstractmethod
    async def set_display_name(self, display_name: str) -> None: ...

    @abstractmethod
    async def set_avatar_url(self, avatar_url: str) -> None: ...

    async def close(self) -> None:  # noqa: B027
        """Release resources. Override in subclasses that hold connections."""
