"""Shared test fixtures and helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

import pytest

from ghostkit.client.mock import MockMatrixClient
from ghostkit.core.config import AppServiceConfig
from ghostkit.core.errors import MatrixError
from ghostkit.core.intent import IntentAPI
from ghostkit.core.locks import ProvisioningLockManager
from ghostkit.models.enums import ErrorCode
from ghostkit.store.memory import InMemoryStateStore

DOMAIN = "example.org"
ROOM_ID = "!abc:example.org"


@pytest.fixture
def advance() -> Callable[[int], Coroutine[Any, Any, None]]:
    """Yield control to let pending tasks run without real delay."""

    async def _advance(n: int = 5) -> None:
        for _ in range(n):
            await asyncio.sleep(0)

    return _advance


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def config() -> AppServiceConfig:
    return AppServiceConfig(
        homeserver_url="https://matrix.example.org",
        homeserver_domain=DOMAIN,
        as_token="as-secret",  # type: ignore[arg-type]
        bot_localpart="bridgebot",
    )


@pytest.fixture
def client() -> MockMatrixClient:
    return MockMatrixClient(f"@echo:{DOMAIN}")


@pytest.fixture
def bot() -> MockMatrixClient:
    return MockMatrixClient(f"@bridgebot:{DOMAIN}")


def make_intent(
    client: MockMatrixClient,
    store: InMemoryStateStore,
    *,
    bot: MockMatrixClient | None = None,
    locks: ProvisioningLockManager | None = None,
    localpart: str = "echo",
) -> IntentAPI:
    return IntentAPI(localpart, DOMAIN, client, store, bot=bot, locks=locks)


def forbidden(message: str = "You are not invited to this room.") -> MatrixError:
    return MatrixError(403, ErrorCode.FORBIDDEN, message)


def user_in_use() -> MatrixError:
    return MatrixError(400, ErrorCode.USER_IN_USE, "User ID already taken.")
