"""Client-server API client that acts as a namespaced user via the appservice token."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any
from urllib.parse import quote

import httpx

from ghostkit.client.base import MatrixClient
from ghostkit.core.config import AppServiceConfig
from ghostkit.core.errors import MatrixError, TransportError
from ghostkit.models.responses import ReqRedact, RespJoinRoom, RespRegister, RespSendEvent

logger = logging.getLogger("ghostkit.client")

_API_PREFIX = "/_matrix/client/v3"


def _seg(value: str) -> str:
    return quote(value, safe="")


class HTTPMatrixClient(MatrixClient):
    """Talk to the homeserver over HTTP while acting as *user_id*.

    Requests authenticate with the application service token and assert the
    acting identity through the ``user_id`` query parameter. Several clients
    may share one ``httpx.AsyncClient``; a client only closes the connection
    pool it created itself.
    """

    def __init__(
        self,
        config: AppServiceConfig,
        user_id: str,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._user_id = user_id
        self._owns_client = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=config.timeout)

    @property
    def user_id(self) -> str:
        return self._user_id

    # ── Provisioning ─────────────────────────────────────────────

    async def register(self, username: str) -> RespRegister:
        data = await self._request(
            "POST",
            "/register",
            json={
                "type": "m.login.application_service",
                "username": username,
                "inhibit_login": True,
            },
            assert_user=False,
        )
        return RespRegister.model_validate(data)

    async def join_room(self, room_id_or_alias: str) -> RespJoinRoom:
        data = await self._request("POST", f"/join/{_seg(room_id_or_alias)}", json={})
        return RespJoinRoom.model_validate(data)

    async def invite_user(self, room_id: str, user_id: str) -> None:
        await self._request("POST", f"/rooms/{_seg(room_id)}/invite", json={"user_id": user_id})

    # ── Events ───────────────────────────────────────────────────

    async def send_message_event(
        self, room_id: str, event_type: str, content: Any
    ) -> RespSendEvent:
        return await self._send(room_id, event_type, content)

    async def send_massaged_message_event(
        self, room_id: str, event_type: str, content: Any, ts: int
    ) -> RespSendEvent:
        return await self._send(room_id, event_type, content, params={"ts": str(ts)})

    async def send_state_event(
        self, room_id: str, event_type: str, state_key: str, content: Any
    ) -> RespSendEvent:
        return await self._send_state(room_id, event_type, state_key, content)

    async def send_massaged_state_event(
        self, room_id: str, event_type: str, state_key: str, content: Any, ts: int
    ) -> RespSendEvent:
        return await self._send_state(
            room_id, event_type, state_key, content, params={"ts": str(ts)}
        )

    async def redact_event(
        self, room_id: str, event_id: str, req: ReqRedact | None = None
    ) -> RespSendEvent:
        body = req.model_dump(exclude_none=True) if req is not None else {}
        data = await self._request(
            "PUT",
            f"/rooms/{_seg(room_id)}/redact/{_seg(event_id)}/{self._txn_id()}",
            json=body,
        )
        return RespSendEvent.model_validate(data)

    async def _send(
        self,
        room_id: str,
        event_type: str,
        content: Any,
        params: dict[str, str] | None = None,
    ) -> RespSendEvent:
        data = await self._request(
            "PUT",
            f"/rooms/{_seg(room_id)}/send/{_seg(event_type)}/{self._txn_id()}",
            json=content,
            params=params,
        )
        return RespSendEvent.model_validate(data)

    async def _send_state(
        self,
        room_id: str,
        event_type: str,
        state_key: str,
        content: Any,
        params: dict[str, str] | None = None,
    ) -> RespSendEvent:
        data = await self._request(
            "PUT",
            f"/rooms/{_seg(room_id)}/state/{_seg(event_type)}/{_seg(state_key)}",
            json=content,
            params=params,
        )
        return RespSendEvent.model_validate(data)

    # ── Profile ──────────────────────────────────────────────────

    async def set_display_name(self, display_name: str) -> None:
        await self._request(
            "PUT",
            f"/profile/{_seg(self._user_id)}/displayname",
            json={"displayname": display_name},
        )

    async def set_avatar_url(self, avatar_url: str) -> None:
        await self._request(
            "PUT",
            f"/profile/{_seg(self._user_id)}/avatar_url",
            json={"avatar_url": avatar_url},
        )

    # ── Plumbing ─────────────────────────────────────────────────

    @staticmethod
    def _txn_id() -> str:
        return f"gk{time.time_ns()}{uuid.uuid4().hex[:8]}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        assert_user: bool = True,
    ) -> dict[str, Any]:
        query: dict[str, str] = dict(params or {})
        if assert_user:
            query["user_id"] = self._user_id
        url = f"{self._config.homeserver_url}{_API_PREFIX}{path}"
        headers = {"Authorization": f"Bearer {self._config.as_token.get_secret_value()}"}

        try:
            t0 = time.monotonic()
            resp = await self._client.request(
                method, url, json=json, params=query, headers=headers
            )
            elapsed_ms = (time.monotonic() - t0) * 1000
        except httpx.TimeoutException as exc:
            raise TransportError(f"{method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        logger.debug(
            "%s %s -> %d (%.0fms)",
            method,
            path,
            resp.status_code,
            elapsed_ms,
            extra={"user_id": self._user_id, "status": resp.status_code},
        )

        if resp.is_error:
            try:
                body: Any = resp.json()
            except ValueError:
                body = None
            raise MatrixError.from_response(resp.status_code, body, resp.reason_phrase)

        if not resp.content:
            return {}
        try:
            data: Any = resp.json()
        except ValueError as exc:
            raise TransportError(f"{method} {path} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise TransportError(f"{method} {path} returned a non-object body")
        return data

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
