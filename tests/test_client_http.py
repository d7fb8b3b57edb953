"""Tests for the HTTP homeserver client."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from ghostkit.client.http import HTTPMatrixClient
from ghostkit.core.config import AppServiceConfig
from ghostkit.core.errors import MatrixError, TransportError
from ghostkit.models.enums import ErrorCode
from ghostkit.models.responses import ReqRedact

USER_ID = "@echo:example.org"


class _MockTransport(httpx.AsyncBaseTransport):
    def __init__(
        self,
        response_data: dict[str, Any] | None = None,
        status: int = 200,
        content: bytes | None = None,
    ) -> None:
        self._data = response_data if response_data is not None else {}
        self._status = status
        self._content = content
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._content is not None:
            return httpx.Response(self._status, content=self._content, request=request)
        return httpx.Response(self._status, json=self._data, request=request)


class _TimeoutTransport(httpx.AsyncBaseTransport):
    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out")


class _ConnectErrorTransport(httpx.AsyncBaseTransport):
    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused")


def _client(
    config: AppServiceConfig, transport: httpx.AsyncBaseTransport, user_id: str = USER_ID
) -> HTTPMatrixClient:
    return HTTPMatrixClient(config, user_id, client=httpx.AsyncClient(transport=transport))


def _body(request: httpx.Request) -> Any:
    return json.loads(request.content)


class TestProvisioning:
    async def test_register(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({"user_id": USER_ID})
        resp = await _client(config, transport).register("echo")

        assert resp.user_id == USER_ID
        req = transport.requests[0]
        assert req.method == "POST"
        assert req.url.path == "/_matrix/client/v3/register"
        assert "user_id" not in req.url.params
        assert req.headers["Authorization"] == "Bearer as-secret"
        assert _body(req) == {
            "type": "m.login.application_service",
            "username": "echo",
            "inhibit_login": True,
        }

    async def test_register_user_in_use(self, config: AppServiceConfig) -> None:
        transport = _MockTransport(
            {"errcode": "M_USER_IN_USE", "error": "User ID already taken."}, status=400
        )
        with pytest.raises(MatrixError) as exc_info:
            await _client(config, transport).register("echo")

        assert exc_info.value.http_status == 400
        assert exc_info.value.errcode is ErrorCode.USER_IN_USE
        assert exc_info.value.message == "User ID already taken."

    async def test_join_room_by_alias(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({"room_id": "!abc:example.org"})
        resp = await _client(config, transport).join_room("#lobby:example.org")

        assert resp.room_id == "!abc:example.org"
        req = transport.requests[0]
        assert req.method == "POST"
        assert req.url.raw_path.startswith(b"/_matrix/client/v3/join/%23lobby%3Aexample.org")
        assert req.url.params["user_id"] == USER_ID

    async def test_join_forbidden(self, config: AppServiceConfig) -> None:
        transport = _MockTransport(
            {"errcode": "M_FORBIDDEN", "error": "You are not invited to this room."}, status=403
        )
        with pytest.raises(MatrixError) as exc_info:
            await _client(config, transport).join_room("!abc:example.org")
        assert exc_info.value.errcode == ErrorCode.FORBIDDEN

    async def test_invite_user(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({})
        bot = _client(config, transport, user_id="@bridgebot:example.org")
        await bot.invite_user("!abc:example.org", USER_ID)

        req = transport.requests[0]
        assert req.url.raw_path.startswith(b"/_matrix/client/v3/rooms/%21abc%3Aexample.org/invite")
        assert req.url.params["user_id"] == "@bridgebot:example.org"
        assert _body(req) == {"user_id": USER_ID}


class TestEvents:
    async def test_send_text(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({"event_id": "$evt"})
        resp = await _client(config, transport).send_text("!abc:example.org", "hello")

        assert resp.event_id == "$evt"
        req = transport.requests[0]
        assert req.method == "PUT"
        assert b"/send/m.room.message/" in req.url.raw_path
        assert "ts" not in req.url.params
        assert _body(req) == {"msgtype": "m.text", "body": "hello"}

    async def test_transaction_ids_are_unique(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({"event_id": "$evt"})
        client = _client(config, transport)
        await client.send_notice("!abc:example.org", "one")
        await client.send_notice("!abc:example.org", "two")

        paths = [r.url.raw_path for r in transport.requests]
        assert paths[0] != paths[1]

    async def test_massaged_message_sets_ts(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({"event_id": "$evt"})
        await _client(config, transport).send_massaged_message_event(
            "!abc:example.org", "m.room.message", {"body": "old"}, 1_600_000_000_000
        )

        assert transport.requests[0].url.params["ts"] == "1600000000000"

    async def test_state_event_path(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({"event_id": "$evt"})
        await _client(config, transport).send_state_event(
            "!abc:example.org", "m.room.topic", "", {"topic": "Chat"}
        )

        req = transport.requests[0]
        assert req.url.raw_path.startswith(
            b"/_matrix/client/v3/rooms/%21abc%3Aexample.org/state/m.room.topic/"
        )
        assert _body(req) == {"topic": "Chat"}

    async def test_massaged_state_event_sets_ts(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({"event_id": "$evt"})
        await _client(config, transport).send_massaged_state_event(
            "!abc:example.org", "m.room.name", "", {"name": "Lobby"}, 42
        )

        assert transport.requests[0].url.params["ts"] == "42"

    async def test_redact_event(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({"event_id": "$redaction"})
        resp = await _client(config, transport).redact_event(
            "!abc:example.org", "$target", ReqRedact(reason="spam")
        )

        assert resp.event_id == "$redaction"
        req = transport.requests[0]
        assert b"/redact/%24target/" in req.url.raw_path
        assert _body(req) == {"reason": "spam"}

    async def test_send_image_content(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({"event_id": "$evt"})
        await _client(config, transport).send_image(
            "!abc:example.org", "cat.png", "mxc://example.org/cat"
        )
        assert _body(transport.requests[0]) == {
            "msgtype": "m.image",
            "body": "cat.png",
            "url": "mxc://example.org/cat",
        }


class TestProfile:
    async def test_set_display_name(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({})
        await _client(config, transport).set_display_name("Echo")

        req = transport.requests[0]
        assert req.method == "PUT"
        assert req.url.raw_path.startswith(
            b"/_matrix/client/v3/profile/%40echo%3Aexample.org/displayname"
        )
        assert _body(req) == {"displayname": "Echo"}

    async def test_set_avatar_url(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({})
        await _client(config, transport).set_avatar_url("mxc://example.org/face")

        assert _body(transport.requests[0]) == {"avatar_url": "mxc://example.org/face"}


class TestErrors:
    async def test_unknown_errcode_kept_raw(self, config: AppServiceConfig) -> None:
        transport = _MockTransport({"errcode": "ORG.EXAMPLE.NOPE", "error": "nope"}, status=400)
        with pytest.raises(MatrixError) as exc_info:
            await _client(config, transport).join_room("!abc:example.org")
        assert exc_info.value.errcode == "ORG.EXAMPLE.NOPE"

    async def test_non_json_error_body(self, config: AppServiceConfig) -> None:
        transport = _MockTransport(status=502, content=b"<html>Bad Gateway</html>")
        with pytest.raises(MatrixError) as exc_info:
            await _client(config, transport).join_room("!abc:example.org")

        assert exc_info.value.http_status == 502
        assert exc_info.value.errcode is ErrorCode.UNKNOWN
        assert exc_info.value.message == "Bad Gateway"

    async def test_timeout(self, config: AppServiceConfig) -> None:
        with pytest.raises(TransportError) as exc_info:
            await _client(config, _TimeoutTransport()).join_room("!abc:example.org")
        assert isinstance(exc_info.value.__cause__, httpx.TimeoutException)

    async def test_connect_error(self, config: AppServiceConfig) -> None:
        with pytest.raises(TransportError) as exc_info:
            await _client(config, _ConnectErrorTransport()).register("echo")
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    async def test_invalid_json_success_body(self, config: AppServiceConfig) -> None:
        transport = _MockTransport(status=200, content=b"<html>ok</html>")
        with pytest.raises(TransportError) as exc_info:
            await _client(config, transport).join_room("!abc:example.org")
        assert isinstance(exc_info.value.__cause__, ValueError)

    async def test_non_object_success_body(self, config: AppServiceConfig) -> None:
        transport = _MockTransport(status=200, content=b"[\"!abc:example.org\"]")
        with pytest.raises(TransportError, match="non-object"):
            await _client(config, transport).join_room("!abc:example.org")


class TestLifecycle:
    async def test_user_id(self, config: AppServiceConfig) -> None:
        assert _client(config, _MockTransport()).user_id == USER_ID

    async def test_shared_client_not_closed(self, config: AppServiceConfig) -> None:
        shared = httpx.AsyncClient(transport=_MockTransport())
        client = HTTPMatrixClient(config, USER_ID, client=shared)
        await client.close()
        assert shared.is_closed is False
        await shared.aclose()

    async def test_owned_client_closed(self, config: AppServiceConfig) -> None:
        client = HTTPMatrixClient(config, USER_ID)
        await client.close()
        assert client._client.is_closed is True
