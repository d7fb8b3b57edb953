"""PostgreSQL implementation of StateStore using asyncpg."""

from __future__ import annotations

import logging
from typing import Any

from ghostkit.store.base import StateStore

logger = logging.getLogger("ghostkit.store.postgres")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS ghostkit_registrations (
    user_id TEXT PRIMARY KEY,
    registered_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS ghostkit_memberships (
    room_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    membership TEXT NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    PRIMARY KEY (room_id, user_id)
);
CREATE INDEX IF NOT EXISTS idx_ghostkit_memberships_user ON ghostkit_memberships(user_id);
"""


class PostgresStateStore(StateStore):
    """PostgreSQL-backed state store using asyncpg."""

    def __init__(
        self,
        dsn: str | None = None,
        pool: Any = None,
    ) -> None:
        try:
            import asyncpg as _asyncpg
        except ImportError as exc:
            raise ImportError(
                "asyncpg is required for PostgresStateStore. "
                "Install it with: pip install ghostkit[postgres]"
            ) from exc
        self._asyncpg = _asyncpg
        self._dsn = dsn
        self._pool = pool
        self._owns_pool = pool is None

    async def init(self, min_size: int = 2, max_size: int = 10) -> None:
        """Create the connection pool (if needed) and ensure schema exists."""
        if self._pool is None:
            self._pool = await self._asyncpg.create_pool(
                self._dsn,
                min_size=min_size,
                max_size=max_size,
            )
        async with self._pool.acquire() as conn:
            await conn.execute(_SCHEMA)
        logger.debug("State store schema ready")

    async def close(self) -> None:
        """Release the connection pool if we own it."""
        if self._pool is not None and self._owns_pool:
            await self._pool.close()
            self._pool = None

    async def __aenter__(self) -> PostgresStateStore:
        await self.init()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── Registration ─────────────────────────────────────────────

    async def is_registered(self, user_id: str) -> bool:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT 1 FROM ghostkit_registrations WHERE user_id = $1", user_id
            )
        return row is not None

    async def mark_registered(self, user_id: str) -> None:
        async with self._pool.acquire() as conn:
            await conn.execute(
                "INSERT INTO ghostkit_registrations (user_id) VALUES ($1) "
                "ON CONFLICT (user_id) DO NOTHING",
                user_id,
            )

    # ── Membership ───────────────────────────────────────────────

    async def get_membership(self, room_id: str, user_id: str) -> str | None:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT membership FROM ghostkit_memberships WHERE room_id = $1 AND user_id = $2",
                room_id,
                user_id,
            )
        if row is None:
            return None
        return str(row["membership"])

    async def set_membership(self, room_id: str, user_id: str, membership: str) -> None:
        async with self._pool.acquire() as conn:
            await conn.execute(
                "INSERT INTO ghostkit_memberships (room_id, user_id, membership) "
                "VALUES ($1, $2, $3) "
                "ON CONFLICT (room_id, user_id) "
                "DO UPDATE SET membership = EXCLUDED.membership, updated_at = now()",
                room_id,
                user_id,
                str(membership),
            )

    async def get_members(self, room_id: str, membership: str | None = None) -> list[str]:
        async with self._pool.acquire() as conn:
            if membership is None:
                rows = await conn.fetch(
                    "SELECT user_id FROM ghostkit_memberships WHERE room_id = $1 ORDER BY user_id",
                    room_id,
                )
            else:
                rows = await conn.fetch(
                    "SELECT user_id FROM ghostkit_memberships "
                    "WHERE room_id = $1 AND membership = $2 ORDER BY user_id",
                    room_id,
                    str(membership),
                )
        return [r["user_id"] for r in rows]
