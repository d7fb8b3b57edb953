"""All string enums for ghostkit."""

from __future__ import annotations

from enum import StrEnum, unique


@unique
class ErrorCode(StrEnum):
    """Machine-readable ``errcode`` values carried by protocol errors."""

    FORBIDDEN = "M_FORBIDDEN"
    UNKNOWN = "M_UNKNOWN"
    USER_IN_USE = "M_USER_IN_USE"
    LIMIT_EXCEEDED = "M_LIMIT_EXCEEDED"
    NOT_FOUND = "M_NOT_FOUND"
    UNKNOWN_TOKEN = "M_UNKNOWN_TOKEN"
    EXCLUSIVE = "M_EXCLUSIVE"
    INVALID_USERNAME = "M_INVALID_USERNAME"
    # Bridge-side codes
    NO_TRANSACTION_ID = "NET.MAUNIUM.NO_TRANSACTION_ID"
    NO_REQUEST_BODY = "NET.MAUNIUM.NO_REUQEST_BODY"
    INVALID_JSON = "NET.MAUNIUM.INVALID_JSON"


@unique
class Membership(StrEnum):
    JOIN = "join"
    INVITE = "invite"
    LEAVE = "leave"
    BAN = "ban"
    KNOCK = "knock"


@unique
class EventType(StrEnum):
    ROOM_MESSAGE = "m.room.message"
    ROOM_NAME = "m.room.name"
    ROOM_AVATAR = "m.room.avatar"
    ROOM_TOPIC = "m.room.topic"
    ROOM_REDACTION = "m.room.redaction"
    ROOM_MEMBER = "m.room.member"


@unique
class MessageType(StrEnum):
    TEXT = "m.text"
    NOTICE = "m.notice"
    IMAGE = "m.image"
    VIDEO = "m.video"
