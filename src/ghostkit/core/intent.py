"""Per-user facade that provisions a virtual user before acting as it."""

from __future__ import annotations

import logging
from typing import Any

from ghostkit.client.base import MatrixClient
from ghostkit.core.errors import GhostKitError, MatrixError
from ghostkit.core.locks import ProvisioningLockManager, membership_key, registration_key
from ghostkit.models.enums import ErrorCode, EventType, Membership
from ghostkit.models.responses import ReqRedact, RespJoinRoom, RespSendEvent
from ghostkit.store.base import StateStore

logger = logging.getLogger("ghostkit.intent")


class IntentAPI:
    """Acts as one virtual user, registering and joining it on demand.

    Every room-scoped action runs :meth:`ensure_joined` first and every
    profile action runs :meth:`ensure_registered` first; the call through to
    the client only happens once the gate succeeds.  Results and errors of
    the client pass through unchanged.

    Provisioning is cached in the shared :class:`StateStore`.  Without a
    ``locks`` manager two concurrent callers may both provision the same
    user; the homeserver absorbs the duplicate (``M_USER_IN_USE`` on
    register, idempotent join).  Pass a :class:`ProvisioningLockManager` to
    allow only one attempt per user (and per user and room) at a time; callers
    arriving while it runs share its outcome, including its exception.

    Args:
        localpart: Local part of the user ID.
        domain: Homeserver domain the user lives on.
        client: Client acting as this user.
        state_store: Shared registration and membership cache.
        bot: Client acting as the bridge bot, used to invite this user when
            it cannot join a room by itself.  ``None`` for the bot's own
            intent.
        locks: Optional per-key mutual exclusion for provisioning.
    """

    def __init__(
        self,
        localpart: str,
        domain: str,
        client: MatrixClient,
        state_store: StateStore,
        *,
        bot: MatrixClient | None = None,
        locks: ProvisioningLockManager | None = None,
    ) -> None:
        self.localpart = localpart
        self.user_id = f"@{localpart}:{domain}"
        self.client = client
        self.bot = bot
        self.state_store = state_store
        self._locks = locks

    def __repr__(self) -> str:
        return f"IntentAPI(user_id={self.user_id!r}, bot={self.bot is not None})"

    # ── Registration gate ────────────────────────────────────────

    async def register(self) -> None:
        """Register this user unconditionally, bypassing the cache."""
        await self.client.register(self.localpart)

    async def ensure_registered(self) -> None:
        """Make sure this user exists on the homeserver.

        Raises:
            MatrixError: Registration failed with anything other than
                ``M_USER_IN_USE``.
            TransportError: The homeserver could not be reached.
        """
        if await self.state_store.is_registered(self.user_id):
            return
        if self._locks is None:
            await self._provision_registration()
            return
        await self._locks.run(registration_key(self.user_id), self._recheck_registration)

    async def _recheck_registration(self) -> None:
        if not await self.state_store.is_registered(self.user_id):
            await self._provision_registration()

    async def _provision_registration(self) -> None:
        logger.debug("Registering %s", self.user_id, extra={"user_id": self.user_id})
        try:
            await self.register()
        except MatrixError as exc:
            if exc.errcode != ErrorCode.USER_IN_USE:
                raise
            logger.debug("%s was already registered", self.user_id)
        await self.state_store.mark_registered(self.user_id)

    # ── Membership gate ──────────────────────────────────────────

    async def ensure_joined(self, room_id: str) -> None:
        """Make sure this user is joined to *room_id*, registering it first if needed.

        If the join is forbidden and a bot is available, the bot invites the
        user and the join is retried once.  If the invite fails, the error of
        the first join is raised; if the retried join fails, its error is
        raised.

        Raises:
            MatrixError: Registration or joining failed.
            TransportError: The homeserver could not be reached.
        """
        if await self.state_store.is_joined(self.user_id, room_id):
            return
        if self._locks is None:
            await self._provision_membership(room_id)
            return
        await self._locks.run(
            membership_key(self.user_id, room_id), lambda: self._recheck_membership(room_id)
        )

    async def _recheck_membership(self, room_id: str) -> None:
        if not await self.state_store.is_joined(self.user_id, room_id):
            await self._provision_membership(room_id)

    async def _provision_membership(self, room_id: str) -> None:
        await self.ensure_registered()

        logger.debug("Joining %s to %s", self.user_id, room_id, extra={"room_id": room_id})
        try:
            resp = await self.client.join_room(room_id)
        except MatrixError as exc:
            if exc.errcode != ErrorCode.FORBIDDEN or self.bot is None:
                raise
            resp = await self._join_via_invite(self.bot, room_id, exc)

        # resp.room_id is the resolved ID, even when joined by alias.
        await self.state_store.set_membership(resp.room_id, self.user_id, Membership.JOIN)

    async def _join_via_invite(
        self, bot: MatrixClient, room_id: str, join_error: MatrixError
    ) -> RespJoinRoom:
        logger.info(
            "Join of %s to %s forbidden, inviting via %s",
            self.user_id,
            room_id,
            bot.user_id,
            extra={"room_id": room_id},
        )
        try:
            await bot.invite_user(room_id, self.user_id)
        except GhostKitError as invite_error:
            logger.info("Bot invite of %s to %s failed: %s", self.user_id, room_id, invite_error)
            # Surface the join error; the invite failure is kept as __context__.
            raise join_error  # noqa: B904
        return await self.client.join_room(room_id)

    # ── Room-scoped actions ──────────────────────────────────────

    async def send_message_event(
        self, room_id: str, event_type: str, content: Any
    ) -> RespSendEvent:
        await self.ensure_joined(room_id)
        return await self.client.send_message_event(room_id, event_type, content)

    async def send_massaged_message_event(
        self, room_id: str, event_type: str, content: Any, ts: int
    ) -> RespSendEvent:
        await self.ensure_joined(room_id)
        return await self.client.send_massaged_message_event(room_id, event_type, content, ts)

    async def send_state_event(
        self, room_id: str, event_type: str, state_key: str, content: Any
    ) -> RespSendEvent:
        await self.ensure_joined(room_id)
        return await self.client.send_state_event(room_id, event_type, state_key, content)

    async def send_massaged_state_event(
        self, room_id: str, event_type: str, state_key: str, content: Any, ts: int
    ) -> RespSendEvent:
        await self.ensure_joined(room_id)
        return await self.client.send_massaged_state_event(
            room_id, event_type, state_key, content, ts
        )

    async def send_text(self, room_id: str, text: str) -> RespSendEvent:
        await self.ensure_joined(room_id)
        return await self.client.send_text(room_id, text)

    async def send_notice(self, room_id: str, text: str) -> RespSendEvent:
        await self.ensure_joined(room_id)
        return await self.client.send_notice(room_id, text)

    async def send_image(self, room_id: str, body: str, url: str) -> RespSendEvent:
        await self.ensure_joined(room_id)
        return await self.client.send_image(room_id, body, url)

    async def send_video(self, room_id: str, body: str, url: str) -> RespSendEvent:
        await self.ensure_joined(room_id)
        return await self.client.send_video(room_id, body, url)

    async def redact_event(
        self, room_id: str, event_id: str, req: ReqRedact | None = None
    ) -> RespSendEvent:
        await self.ensure_joined(room_id)
        return await self.client.redact_event(room_id, event_id, req)

    async def set_room_name(self, room_id: str, name: str) -> RespSendEvent:
        return await self.send_state_event(room_id, EventType.ROOM_NAME, "", {"name": name})

    async def set_room_avatar(self, room_id: str, avatar_url: str) -> RespSendEvent:
        return await self.send_state_event(room_id, EventType.ROOM_AVATAR, "", {"url": avatar_url})

    async def set_room_topic(self, room_id: str, topic: str) -> RespSendEvent:
        return await self.send_state_event(room_id, EventType.ROOM_TOPIC, "", {"topic": topic})

    # ── Profile actions ──────────────────────────────────────────

    async def set_display_name(self, display_name: str) -> None:
        await self.ensure_registered()
        await self.client.set_display_name(display_name)

    async def set_avatar_url(self, avatar_url: str) -> None:
        await self.ensure_registered()
        await self.client.set_avatar_url(avatar_url)
