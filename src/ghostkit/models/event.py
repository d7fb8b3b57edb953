"""Inbound protocol event models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Event(BaseModel):
    """Base fields shared by every event pushed to the bridge."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="event_id")
    type: str
    content: dict[str, Any] = Field(default_factory=dict)
    sender: str = Field(validation_alias=AliasChoices("sender", "user_id"))
    room_id: str
    state_key: str | None = None
    origin_server_ts: int = 0
    age: int = 0

    @property
    def is_state(self) -> bool:
        return self.state_key is not None


class EventList(BaseModel):
    """A batch of events, as delivered in one transaction."""

    events: list[Event] = Field(default_factory=list)
