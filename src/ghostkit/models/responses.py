"""Request and response bodies exchanged with the homeserver."""

from __future__ import annotations

from pydantic import BaseModel


class RespSendEvent(BaseModel):
    event_id: str


class RespJoinRoom(BaseModel):
    """Result of a join; ``room_id`` is the resolved ID even when joining by alias."""

    room_id: str


class RespRegister(BaseModel):
    user_id: str
    access_token: str | None = None
    device_id: str | None = None
    home_server: str | None = None


class ReqRedact(BaseModel):
    reason: str | None = None
