"""
Telemetry store - async (asyncpg)
=================================
init_pool()     - called once at startup; retries until the DB is up.
get_pool()      - returns the live pool.
close_pool()    - called at shutdown.
TelemetryStore  - the simulator's view of the store: a sink for the latest
                  batch and history snapshots, and a source of two flags
                  (run flag, last UI activity).
"""

import asyncio
import json
import logging
from typing import List, Optional

import asyncpg

from simulator.config import StoreCredentials

logger = logging.getLogger("simulator.db")

_pool: asyncpg.Pool | None = None

RUN_FLAG    = "isRunning"
LAST_ACTIVE = "lastActive"

# ─── SQL ──────────────────────────────────────────────────
SCHEMA = """
    CREATE TABLE IF NOT EXISTS simulator_flags (
        name        TEXT PRIMARY KEY,
        value       JSONB NOT NULL,
        updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE TABLE IF NOT EXISTS compressors_latest (
        slot        SMALLINT PRIMARY KEY DEFAULT 1,
        batch       JSONB NOT NULL,
        updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE TABLE IF NOT EXISTS compressors_history (
        snapshot_ms BIGINT PRIMARY KEY,
        batch       JSONB NOT NULL
    );
"""

SELECT_FLAG = "SELECT value FROM simulator_flags WHERE name = $1;"

UPSERT_FLAG = """
    INSERT INTO simulator_flags (name, value)
    VALUES ($1, $2::jsonb)
    ON CONFLICT (name) DO UPDATE SET value = EXCLUDED.value, updated_at = NOW();
"""

UPSERT_LATEST = """
    INSERT INTO compressors_latest (slot, batch)
    VALUES (1, $1::jsonb)
    ON CONFLICT (slot) DO UPDATE SET batch = EXCLUDED.batch, updated_at = NOW();
"""

INSERT_HISTORY = """
    INSERT INTO compressors_history (snapshot_ms, batch)
    VALUES ($1, $2::jsonb)
    ON CONFLICT (snapshot_ms) DO NOTHING;
"""


async def init_pool(credentials: StoreCredentials, retries: int = 15, delay: float = 3.0):
    """
    Create the connection pool.  Retries so the simulator can start
    before the database is fully ready.
    """
    global _pool

    for attempt in range(1, retries + 1):
        try:
            _pool = await asyncpg.create_pool(
                host     = credentials.host,
                port     = credentials.port,
                user     = credentials.user,
                password = credentials.password,
                database = credentials.database,
                min_size = 1,
                max_size = 5,
            )
            logger.info("DB pool ready (attempt %d)", attempt)
            return _pool
        except (OSError, asyncpg.PostgresError) as exc:
            logger.warning("DB not ready - attempt %d/%d: %s", attempt, retries, exc)
            await asyncio.sleep(delay)

    raise RuntimeError("Could not connect to the database after retries.")


def get_pool() -> asyncpg.Pool:
    """Return the active pool. Raises if init_pool() was not called."""
    if _pool is None:
        raise RuntimeError("DB pool not initialised - call init_pool() first.")
    return _pool


async def close_pool():
    global _pool
    if _pool:
        await _pool.close()
        _pool = None


# ─── store ────────────────────────────────────────────────
class TelemetryStore:
    """Postgres-backed sink / flag source used by the tick orchestrator."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def ensure_schema(self):
        async with self.pool.acquire() as conn:
            await conn.execute(SCHEMA)

    async def _get_flag(self, name: str):
        raw = await self.pool.fetchval(SELECT_FLAG, name)
        return None if raw is None else json.loads(raw)

    async def _set_flag(self, name: str, value):
        await self.pool.execute(UPSERT_FLAG, name, json.dumps(value))

    async def get_running(self):
        """Raw run flag as stored (may be None or garbage; the caller heals it)."""
        return await self._get_flag(RUN_FLAG)

    async def set_running(self, running: bool):
        await self._set_flag(RUN_FLAG, bool(running))

    async def get_last_active(self) -> Optional[int]:
        value = await self._get_flag(LAST_ACTIVE)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return int(value)

    async def set_last_active(self, timestamp_ms: int):
        await self._set_flag(LAST_ACTIVE, int(timestamp_ms))

    async def write_latest(self, batch: List[dict]):
        await self.pool.execute(UPSERT_LATEST, json.dumps(batch))

    async def write_history(self, timestamp_ms: int, batch: List[dict]):
        await self.pool.execute(INSERT_HISTORY, timestamp_ms, json.dumps(batch))
