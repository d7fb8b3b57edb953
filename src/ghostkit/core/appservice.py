"""Application service: shared resources and the per-localpart intent registry."""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx

from ghostkit.client.base import MatrixClient
from ghostkit.client.http import HTTPMatrixClient
from ghostkit.core.config import AppServiceConfig
from ghostkit.core.intent import IntentAPI
from ghostkit.core.locks import ProvisioningLockManager
from ghostkit.store.base import StateStore
from ghostkit.store.memory import InMemoryStateStore

logger = logging.getLogger("ghostkit.appservice")

ClientFactory = Callable[[str], MatrixClient]


class AppService:
    """Owns everything intents share: config, state store, connection pool.

    Intents are created lazily, once per localpart, and cached for the
    lifetime of the service.  Every intent except the bot's own gets the bot
    client as its invite fallback.

    Args:
        config: Homeserver connection and identity settings.
        state_store: Registration and membership cache. Defaults to an
            in-memory store.
        locks: Optional provisioning lock manager shared by all intents.
        http_client: Connection pool shared by all HTTP clients. Created
            (and closed on :meth:`close`) when omitted.
        client_factory: Builds the client acting as a given user ID.
            Defaults to :class:`HTTPMatrixClient` on the shared pool.
    """

    def __init__(
        self,
        config: AppServiceConfig,
        state_store: StateStore | None = None,
        *,
        locks: ProvisioningLockManager | None = None,
        http_client: httpx.AsyncClient | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.config = config
        self.state_store: StateStore = state_store or InMemoryStateStore()
        self._locks = locks
        self._owns_http = http_client is None
        self._http: httpx.AsyncClient = http_client or httpx.AsyncClient(timeout=config.timeout)
        self._client_factory = client_factory
        self._intents: dict[str, IntentAPI] = {}
        self._bot_client: MatrixClient | None = None

    def client(self, user_id: str) -> MatrixClient:
        """Return a new client acting as *user_id*."""
        if self._client_factory is not None:
            return self._client_factory(user_id)
        return HTTPMatrixClient(self.config, user_id, client=self._http)

    def bot_client(self) -> MatrixClient:
        """Return the client acting as the bridge bot."""
        if self._bot_client is None:
            self._bot_client = self.client(self.config.bot_user_id)
        return self._bot_client

    def intent(self, localpart: str) -> IntentAPI:
        """Return the intent for *localpart*, creating it on first use."""
        intent = self._intents.get(localpart)
        if intent is not None:
            return intent

        user_id = self.config.user_id(localpart)
        is_bot = user_id == self.config.bot_user_id
        intent = IntentAPI(
            localpart,
            self.config.homeserver_domain,
            self.bot_client() if is_bot else self.client(user_id),
            self.state_store,
            bot=None if is_bot else self.bot_client(),
            locks=self._locks,
        )
        self._intents[localpart] = intent
        logger.debug("Created intent for %s", user_id)
        return intent

    def bot_intent(self) -> IntentAPI:
        return self.intent(self.config.bot_localpart)

    async def close(self) -> None:
        """Close clients and the shared connection pool if we own it."""
        for intent in self._intents.values():
            await intent.client.close()
        if self._bot_client is not None and self.config.bot_localpart not in self._intents:
            await self._bot_client.close()
        self._intents.clear()
        self._bot_client = None
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> AppService:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
