"""Echo ghost.

Demonstrates acting as a virtual user without provisioning it by hand.
Shows:
- Building an AppService from an AppServiceConfig
- Lazily registering and joining a ghost on its first message
- The bot invite fallback when the room is invite-only
- Coalescing concurrent provisioning with InMemoryProvisioningLocks

Run with:
    HOMESERVER_URL=http://localhost:8008 AS_TOKEN=... \
    uv run python examples/echo_ghost.py '!room:example.org'
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys

from ghostkit import (
    AppService,
    AppServiceConfig,
    InMemoryProvisioningLocks,
    MatrixError,
)


async def main(room_id: str) -> None:
    logging.basicConfig(level=logging.DEBUG)

    config = AppServiceConfig(
        homeserver_url=os.environ.get("HOMESERVER_URL", "http://localhost:8008"),
        homeserver_domain=os.environ.get("HOMESERVER_DOMAIN", "example.org"),
        as_token=os.environ["AS_TOKEN"],
    )

    async with AppService(config, locks=InMemoryProvisioningLocks()) as appservice:
        echo = appservice.intent("echo")
        await echo.set_display_name("Echo")

        try:
            # Both sends race to provision; the locks make it a single join.
            results = await asyncio.gather(
                echo.send_text(room_id, "hello"),
                echo.send_notice(room_id, "(echoed by the bridge)"),
            )
        except MatrixError as exc:
            print(f"Could not act as {echo.user_id}: {exc.errcode} ({exc.http_status})")
            return

        for resp in results:
            print(f"Sent {resp.event_id}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "!abc:example.org"))
