"""Exceptions raised by ghostkit."""

from __future__ import annotations

from typing import Any

from ghostkit.models.enums import ErrorCode

__all__ = [
    "GhostKitError",
    "MatrixError",
    "TransportError",
    "coerce_errcode",
]


def coerce_errcode(value: str) -> ErrorCode | str:
    """Return the matching :class:`ErrorCode`, or *value* unchanged if unknown."""
    try:
        return ErrorCode(value)
    except ValueError:
        return value


class GhostKitError(Exception):
    """Base exception for all ghostkit errors."""


class MatrixError(GhostKitError):
    """An error response from the homeserver.

    Attributes:
        http_status: HTTP status code of the failed response.
        errcode: Machine-readable code. Known codes are :class:`ErrorCode`
            members; unknown codes are kept as the raw string.
        message: Human-readable description from the ``error`` field.
    """

    def __init__(self, http_status: int, errcode: ErrorCode | str, message: str = "") -> None:
        self.http_status = http_status
        self.errcode = coerce_errcode(errcode)
        self.message = message
        super().__init__(f"{self.errcode}: {message}" if message else str(self.errcode))

    def __repr__(self) -> str:
        return (
            f"MatrixError(http_status={self.http_status!r}, "
            f"errcode={str(self.errcode)!r}, message={self.message!r})"
        )

    def to_dict(self) -> dict[str, str]:
        """Render the wire body of this error.

        The message goes under ``"error"``, the Matrix client-server key that
        :meth:`from_response` reads back, rather than a ``"message"`` key.
        """
        return {"errcode": str(self.errcode), "error": self.message}

    @classmethod
    def from_response(cls, http_status: int, body: Any, reason: str = "") -> MatrixError:
        """Build an error from a decoded response body.

        Bodies without an ``errcode`` (proxies, HTML error pages) map to
        ``M_UNKNOWN`` with the HTTP reason phrase as the message.
        """
        if isinstance(body, dict) and isinstance(body.get("errcode"), str):
            return cls(http_status, body["errcode"], str(body.get("error", "")))
        return cls(http_status, ErrorCode.UNKNOWN, reason)


class TransportError(GhostKitError):
    """The request never produced a homeserver response (timeout, connection failure)."""
