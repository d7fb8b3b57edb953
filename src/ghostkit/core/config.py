"""Application service configuration."""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, SecretStr, field_validator


class AppServiceConfig(BaseModel):
    """Connection and identity settings for one bridge registration."""

    homeserver_url: str
    homeserver_domain: str
    as_token: SecretStr
    hs_token: SecretStr | None = None
    bot_localpart: str = "bridgebot"
    timeout: float = 30.0

    @field_validator("homeserver_url")
    @classmethod
    def validate_homeserver_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if not parsed.scheme or not parsed.hostname:
            raise ValueError("homeserver_url must be a valid URL with scheme and host")
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"homeserver_url scheme must be http or https, got {parsed.scheme!r}")
        return v.rstrip("/")

    @field_validator("homeserver_domain", "bot_localpart")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    def user_id(self, localpart: str) -> str:
        """Derive the full user ID for *localpart* on this homeserver."""
        return f"@{localpart}:{self.homeserver_domain}"

    @property
    def bot_user_id(self) -> str:
        return self.user_id(self.bot_localpart)
